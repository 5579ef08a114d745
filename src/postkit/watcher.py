"""One-shot save watcher: block until a given file is written, then unsubscribe.

Watches the file's parent directory (editors that save via rename replace
the inode, so a watch on the file itself would go stale) and filters events
down to the one file name. The subscription is closed on every exit path,
including timeout.

Falls back to mtime polling if inotify is unavailable (macOS, Docker).
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger("postkit.watcher")

_INOTIFY_TIMEOUT_MS = 1000
_POLL_INTERVAL = 0.5


def file_mtime(path: Path) -> float:
    try:
        return path.stat().st_mtime_ns / 1e9
    except OSError:
        return 0.0


def _deadline(timeout: float | None) -> float | None:
    return time.monotonic() + timeout if timeout else None


def _expired(deadline: float | None) -> bool:
    return deadline is not None and time.monotonic() >= deadline


def wait_inotify(path: Path, since: float, timeout: float | None = None) -> bool:
    """Wait using inotify_simple (Linux). True once saved, False on timeout."""
    import inotify_simple  # type: ignore[import]

    inotify = inotify_simple.INotify()
    flags = inotify_simple.flags  # type: ignore[attr-defined]
    deadline = _deadline(timeout)
    try:
        inotify.add_watch(str(path.parent), flags.CLOSE_WRITE | flags.MOVED_TO)
        logger.info("inotify waiting for save: %s", path)
        while not _expired(deadline):
            for event in inotify.read(timeout=_INOTIFY_TIMEOUT_MS):
                if event.name == path.name:
                    logger.debug("save event for %s (mask=%#x)", path, event.mask)
                    return True
            # Safety net for events missed between add_watch and read.
            if file_mtime(path) > since:
                return True
        return False
    finally:
        inotify.close()


def wait_poll(path: Path, since: float, timeout: float | None = None, interval: float = _POLL_INTERVAL) -> bool:
    """Polling fallback. Checks mtime every interval seconds."""
    deadline = _deadline(timeout)
    logger.info("polling for save: %s interval=%.1fs", path, interval)
    while not _expired(deadline):
        if file_mtime(path) > since:
            return True
        time.sleep(interval)
    return False


def wait_for_save(path: Path, since: float | None = None, timeout: float | None = None) -> bool:
    """Block until path is saved after `since` (mtime, seconds). Timeout 0/None waits forever."""
    since = file_mtime(path) if since is None else since
    try:
        return wait_inotify(path, since, timeout)
    except ImportError:
        logger.warning("inotify_simple not available, falling back to polling")
        return wait_poll(path, since, timeout)
