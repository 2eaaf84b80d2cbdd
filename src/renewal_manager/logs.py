"""In-memory capture of recent log output for notifications."""

from __future__ import annotations

import logging
from collections import deque

_DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
_DEFAULT_CAPACITY = 500


class RecentLogHandler(logging.Handler):
    """Keeps the last ``capacity`` formatted records."""

    def __init__(self, capacity: int = _DEFAULT_CAPACITY, level: int = logging.INFO) -> None:
        super().__init__(level)
        self._lines: deque[str] = deque(maxlen=capacity)
        self.setFormatter(logging.Formatter(_DEFAULT_FORMAT))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self._lines.append(self.format(record))
        except Exception:
            self.handleError(record)

    @property
    def lines(self) -> list[str]:
        return list(self._lines)

    def clear(self) -> None:
        self._lines.clear()

    @classmethod
    def install(cls, logger_name: str = "renewal_manager", **kwargs) -> RecentLogHandler:
        """Attach a new handler to ``logger_name`` and return it."""
        handler = cls(**kwargs)
        target = logging.getLogger(logger_name)
        if target.level == logging.NOTSET or target.level > handler.level:
            target.setLevel(handler.level)
        target.addHandler(handler)
        return handler
