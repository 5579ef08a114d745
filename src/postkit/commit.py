"""Stamp date/lastmod on changed articles, then commit them with an edited message.

Flow:
    git status --porcelain -- <content_dir>
        -> added/modified *.md under content_dir
        -> stamp front-matter (date once, lastmod = today)
        -> nothing changed? stop
        -> write $GIT_DIR/COMMIT_EDITMSG, let the author edit + save it
        -> strip comments/blank lines; empty? stop
        -> git add <stamped files> && git commit -F $GIT_DIR/COMMIT_EDITMSG -- <stamped files>
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from postkit import git
from postkit.errors import ENVIRONMENT, EXTERNAL, VALIDATION, PostkitError
from postkit.frontmatter import split_front_matter, stamp_dates, today_iso

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from postkit.config import PostkitConfig

logger = logging.getLogger("postkit.commit")

MESSAGE_TEMPLATE = """\
# Write the commit message in this file.
# Lines starting with # are ignored.
#
# Saving this file runs the commit.
"""


@dataclass
class CommitOutcome:
    updated: list[str] = field(default_factory=list)   # root-relative, POSIX
    message: str = ""
    result: git.CommitResult | None = None

    @property
    def committed(self) -> bool:
        return self.result is not None and self.result.ok


def _check_workspace(cfg: PostkitConfig) -> None:
    if not cfg.root.is_dir():
        raise PostkitError(f"No workspace is open: {cfg.root}", ENVIRONMENT)
    if not cfg.content_dir.is_dir():
        raise PostkitError(f"Content directory does not exist: {cfg.content_dir}", ENVIRONMENT)


def find_candidates(cfg: PostkitConfig) -> list[Path]:
    """Added/modified articles under the content dir that still exist on disk."""
    _check_workspace(cfg)
    prefix = git.show_prefix(cfg.root)
    output = git.status(cfg.root, cfg.content_rel)
    paths = [cfg.root / rel for rel in git.changed_articles(output, cfg.content_rel, prefix)]
    return [p for p in paths if p.is_file()]


def stamp_article(path: Path, today: str, dry_run: bool = False) -> bool:
    """Rewrite date/lastmod in place. False when skipped or already current."""
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        logger.warning("not valid UTF-8, skipping: %s", path)
        return False
    fm = split_front_matter(text)
    if fm is None:
        logger.debug("no front-matter, skipping: %s", path)
        return False

    stamped = stamp_dates(fm.lines, today)
    if not stamped.updated:
        return False

    if not dry_run:
        fm.lines = stamped.lines
        path.write_text(fm.render(), encoding="utf-8")
    logger.info("stamped %s (lastmod=%s)", path, today)
    return True


def stamp_articles(cfg: PostkitConfig, today: str | None = None, dry_run: bool = False) -> list[str]:
    """Stamp every candidate; return the root-relative paths that changed."""
    today = today or today_iso()
    updated: list[str] = []
    for path in find_candidates(cfg):
        if stamp_article(path, today, dry_run=dry_run):
            updated.append(path.relative_to(cfg.root).as_posix())
    return updated


def prepare_message_file(cfg: PostkitConfig, message: str | None = None) -> Path:
    """(Over)write $GIT_DIR/COMMIT_EDITMSG with the template, or with a given message."""
    path = git.git_path(cfg.root, "COMMIT_EDITMSG")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(message + "\n" if message else MESSAGE_TEMPLATE, encoding="utf-8")
    return path


def compose_message(raw: str) -> str:
    """Drop comment and blank lines, then trim."""
    kept = [line for line in raw.split("\n") if line.strip() and not line.startswith("#")]
    return "\n".join(kept).strip()


def commit_with_stamp(
    cfg: PostkitConfig,
    edit_message: Callable[[Path], None] | None = None,
    message: str | None = None,
    today: str | None = None,
) -> CommitOutcome:
    """Run the whole flow. Returns an outcome with no result when nothing changed.

    edit_message is called with the message file path and must return only
    once the author has saved it. It is skipped when `message` is given.
    """
    updated = stamp_articles(cfg, today=today)
    if not updated:
        logger.info("no articles updated")
        return CommitOutcome()

    msg_path = prepare_message_file(cfg, message)
    if message is None:
        if edit_message is None:
            raise PostkitError("No commit message given.", VALIDATION)
        edit_message(msg_path)

    text = compose_message(msg_path.read_text(encoding="utf-8"))
    if not text:
        raise PostkitError("Commit message is empty.", VALIDATION)
    # git commit -F reads the file as-is; keep only what the author wrote.
    msg_path.write_text(text + "\n", encoding="utf-8")

    result = git.commit(cfg.root, updated, msg_path)
    if not result.ok:
        raise PostkitError(f"Commit failed: {result.error_text}", EXTERNAL)
    logger.info("committed %d article(s)", len(updated))
    return CommitOutcome(updated=updated, message=text, result=result)
