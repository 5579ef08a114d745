"""The one error type handlers raise; the CLI turns it into a notification."""

from __future__ import annotations

ENVIRONMENT = "environment"   # no workspace, missing content dir, no article
VALIDATION = "validation"     # bad or missing user input
EXTERNAL = "external"         # git exited non-zero


class PostkitError(Exception):
    """Terminal failure of one command invocation."""

    def __init__(self, message: str, kind: str = VALIDATION) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
