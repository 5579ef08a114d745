"""Open a document for the author and wait until it has been saved."""

from __future__ import annotations

import logging
import shlex
import subprocess
from typing import TYPE_CHECKING

import click

from postkit.errors import ENVIRONMENT, VALIDATION, PostkitError
from postkit.watcher import file_mtime, wait_for_save

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger("postkit.editor")


def launch(command: str, path: Path) -> subprocess.Popen:
    """Start `command path` without waiting for it to exit (GUI editors)."""
    cmd = [*shlex.split(command), str(path)]
    logger.debug("launching editor: %s", cmd)
    try:
        return subprocess.Popen(cmd, start_new_session=True)  # noqa: S603
    except FileNotFoundError as exc:
        raise PostkitError(f"Editor not found: {cmd[0]}", ENVIRONMENT) from exc


def open_and_wait(path: Path, command: str = "", timeout: float | None = None) -> None:
    """Open path in an editor and return once the author saved it.

    With a configured command the editor runs detached and the save event is
    awaited. Without one, $EDITOR runs in the foreground via click.edit and
    closing it without saving aborts.
    """
    since = file_mtime(path)
    if command:
        proc = launch(command, path)
        click.echo(f"Save {path.name} to commit (waiting…)")
        try:
            saved = wait_for_save(path, since=since, timeout=timeout)
        finally:
            # reap the launcher if it has exited
            proc.poll()
        if not saved:
            raise PostkitError("Timed out waiting for the commit message to be saved.", VALIDATION)
        return

    click.edit(filename=str(path))
    if file_mtime(path) <= since:
        raise PostkitError("Commit message was not saved; aborting.", VALIDATION)
