"""Filter, sort, page and pick renewals from a working selection."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from renewal_manager.models import RenewalRecord
from renewal_manager.services import DueDateService

logger = logging.getLogger(__name__)

PATTERN_EXAMPLES = (
    "You may use * as a wildcard for any number of characters and ? for a single character, "
    "and separate multiple patterns with a comma."
)


def pattern_to_regex(pattern: str) -> str:
    """Translate a comma separated list of glob patterns into an anchored regex."""
    alternatives = []
    for part in pattern.split(","):
        part = part.strip()
        if not part:
            continue
        escaped = re.escape(part).replace(r"\*", ".*").replace(r"\?", ".")
        alternatives.append(escaped)
    if not alternatives:
        raise ValueError(f"Invalid pattern: {pattern!r}")
    return "^(?:" + "|".join(alternatives) + ")$"


def _name_key(renewal: RenewalRecord) -> str:
    return renewal.display_name.lower()


def _due_key(due_date: datetime | None) -> tuple[bool, datetime | None]:
    # "Due now" sorts before any concrete date
    return (due_date is not None, due_date)


@dataclass(frozen=True)
class Page:
    """What to render for one pass of the renewal list."""

    items: list[RenewalRecord]
    hidden: int = 0

    @property
    def limited(self) -> bool:
        return self.hidden > 0


@dataclass
class Selection:
    """The renewals a menu session is working on.

    ``original`` is the full store snapshot, ``current`` the subset actions
    apply to. Filters replace ``current`` with a narrower list, sorts only
    reorder it.
    """

    original: list[RenewalRecord]
    current: list[RenewalRecord] = field(default_factory=list)
    show_all: bool = False

    @classmethod
    def from_store(cls, renewals: Iterable[RenewalRecord]) -> Selection:
        ordered = sorted(renewals, key=_name_key)
        return cls(original=ordered, current=list(ordered))

    @property
    def is_all(self) -> bool:
        return len(self.current) == len(self.original)

    @property
    def is_empty(self) -> bool:
        return not self.current

    def reset(self) -> list[RenewalRecord]:
        self.current = list(self.original)
        return self.current

    def filter_by_name_pattern(self, pattern: str) -> list[RenewalRecord]:
        """Keep renewals whose display name matches a glob pattern, ignoring case."""
        try:
            regex = re.compile(pattern_to_regex(pattern), re.IGNORECASE)
        except ValueError as exc:
            logger.warning("%s", exc)
            return self.current
        self.current = [r for r in self.current if r.display_name and regex.match(r.display_name)]
        return self.current

    def filter_by_due(self, due_dates: DueDateService, keep: bool) -> list[RenewalRecord]:
        self.current = [r for r in self.current if due_dates.is_due(r) == keep]
        return self.current

    def filter_by_last_outcome(self, keep_errors: bool) -> list[RenewalRecord]:
        """Keep renewals whose last run failed (or never ran), or the opposite."""
        if keep_errors:
            self.current = [r for r in self.current if r.last_success is not True]
        else:
            self.current = [r for r in self.current if r.last_success is True]
        return self.current

    def sort_by_name(self, ascending: bool = True) -> list[RenewalRecord]:
        self.current = sorted(self.current, key=_name_key, reverse=not ascending)
        return self.current

    def sort_by_due_date(self, due_dates: DueDateService, ascending: bool = True) -> list[RenewalRecord]:
        self.current = sorted(
            self.current,
            key=lambda r: _due_key(due_dates.due_date(r)),
            reverse=not ascending,
        )
        return self.current

    def select_by_index(self, text: str) -> list[RenewalRecord]:
        """Pick renewals by their 1-based position in the current list.

        Invalid and out of range tokens are reported and skipped. Input
        without any tokens leaves the selection unchanged.
        """
        tokens = [token.strip() for token in text.split(",") if token.strip()]
        if not tokens:
            return self.current
        selected = []
        for token in tokens:
            try:
                index = int(token)
            except ValueError:
                logger.warning("Invalid input: %s", token)
                continue
            if 0 < index <= len(self.current):
                selected.append(self.current[index - 1])
            else:
                logger.warning("Input out of range: %s", token)
        self.current = selected
        return self.current

    def page(self, page_size: int) -> Page:
        """Items to display for this render pass.

        Lists of ``page_size`` or more show ``page_size - 1`` items and a
        count of the rest, unless ``show_all`` was requested. The request
        only lasts for one pass.
        """
        limited = not self.show_all and len(self.current) >= page_size
        self.show_all = False
        if not limited:
            return Page(items=list(self.current))
        items = self.current[: page_size - 1]
        return Page(items=items, hidden=len(self.current) - len(items))
