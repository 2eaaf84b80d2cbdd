"""Process-wide error state that decides the exit code."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class ExceptionHandler:
    """Logs unexpected errors and remembers that the run must exit non-zero."""

    def __init__(self) -> None:
        self.exit_code = 0

    def handle_exception(self, exc: BaseException | None = None, message: str | None = None) -> None:
        """Record a failure.

        Without arguments only the exit code is set; the failure itself has
        already been reported elsewhere.
        """
        if exc is not None:
            logger.error("%s: %s", message or "Unhandled exception", exc, exc_info=exc)
        elif message:
            logger.error(message)
        self.exit_code = 1
