"""git collaborator: porcelain status for the content dir, stage + commit."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from typing import TYPE_CHECKING

from postkit.errors import EXTERNAL, PostkitError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

logger = logging.getLogger("postkit.git")

_STAGEABLE = frozenset("AM ")
_CHANGED = frozenset("AM")


@dataclass
class StatusEntry:
    """One `git status --porcelain` line: XY code and repo-relative path."""

    code: str
    path: str

    @property
    def added_or_modified(self) -> bool:
        letters = set(self.code)
        return letters <= _STAGEABLE and bool(letters & _CHANGED)


@dataclass
class CommitResult:
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def error_text(self) -> str:
        return (self.stderr or self.stdout).strip()


def _unquote(path: str) -> str:
    """Undo git's C-style quoting of paths with special characters."""
    if len(path) >= 2 and path[0] == path[-1] == '"':
        raw = path[1:-1].encode("ascii", errors="backslashreplace")
        return raw.decode("unicode_escape").encode("latin-1").decode("utf-8", errors="replace")
    return path


def parse_porcelain(output: str) -> list[StatusEntry]:
    entries: list[StatusEntry] = []
    for line in output.splitlines():
        if len(line) < 4 or line[2] != " ":
            continue
        entries.append(StatusEntry(code=line[:2], path=_unquote(line[3:])))
    return entries


def changed_articles(output: str, content_rel: str, root_prefix: str = "") -> list[str]:
    """Added/modified `.md` paths under content_rel; everything else is ignored.

    root_prefix is where the workspace sits inside the repository (see
    show_prefix); returned paths are relative to the workspace root.
    """
    prefix = root_prefix + content_rel.rstrip("/") + "/"
    return [
        e.path[len(root_prefix):]
        for e in parse_porcelain(output)
        if e.added_or_modified and e.path.startswith(prefix) and e.path.endswith(".md")
    ]


def _query(root: Path, *args: str) -> str:
    """stdout of a read-only git command run in root; failures become PostkitError."""
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=root,
            capture_output=True,
            text=True,
            check=True,
        )
    except FileNotFoundError as exc:
        raise PostkitError("git not found on PATH", EXTERNAL) from exc
    except subprocess.CalledProcessError as exc:
        msg = f"git {args[0]} failed: {(exc.stderr or '').strip()}"
        raise PostkitError(msg, EXTERNAL) from exc
    return result.stdout


def status(root: Path, subdir: str) -> str:
    """Raw `git status --porcelain` output restricted to subdir.

    Paths in the output are relative to the repository top-level, not to root.
    """
    return _query(root, "status", "--porcelain", "--", subdir)


def show_prefix(root: Path) -> str:
    """root relative to the repository top-level, '' or ending in '/'."""
    return _query(root, "rev-parse", "--show-prefix").strip()


def git_path(root: Path, name: str) -> Path:
    """Absolute location of $GIT_DIR/<name> (works for worktrees and subdirectories)."""
    out = _query(root, "rev-parse", "--path-format=absolute", "--git-path", name).strip()
    return root / out


def _run(cmd: list[str], root: Path) -> CommitResult:
    logger.debug("running: %s", " ".join(cmd))
    try:
        result = subprocess.run(cmd, cwd=root, capture_output=True, text=True, check=False)
    except FileNotFoundError:
        return CommitResult(returncode=127, stderr="git not found on PATH")
    return CommitResult(returncode=result.returncode, stdout=result.stdout, stderr=result.stderr)


def commit(root: Path, files: Sequence[str], message_path: Path) -> CommitResult:
    """Stage exactly `files`, then commit only those paths. Stops at the first failure.

    Other changes already in the index stay staged but are left out of the commit.
    """
    staged = _run(["git", "add", "--", *files], root)
    if not staged.ok:
        return staged
    return _run(["git", "commit", "-F", str(message_path), "--", *files], root)
