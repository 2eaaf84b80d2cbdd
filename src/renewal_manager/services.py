"""Contracts of the collaborators the renewal manager drives but does not implement."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Generic, TypeVar

from renewal_manager.models import RenewalRecord, RenewResult, RunLevel, Target
from renewal_manager.plugins import TargetOptions

T = TypeVar("T")


@dataclass(frozen=True)
class Choice(Generic[T]):
    """One entry of a menu or list.

    ``disabled`` holds the reason the entry cannot be picked, if any.
    """

    value: T
    description: str
    command: str | None = None
    color: str | None = None
    disabled: str | None = None
    default: bool = False


class RenewalStore(ABC):
    """Persistent collection of renewals."""

    @property
    @abstractmethod
    def renewals(self) -> list[RenewalRecord]:
        """All renewals in store order."""

    @abstractmethod
    def save(self, renewal: RenewalRecord) -> None:
        """Persist the renewal, including any history appended since it was loaded."""

    @abstractmethod
    def cancel(self, renewal: RenewalRecord) -> None:
        """Remove the renewal from the store."""

    @abstractmethod
    def find_by_filter(self, renewal_id: str | None, friendly_name: str | None) -> list[RenewalRecord]:
        """Renewals matching the id and/or the friendly name pattern."""


class DueDateService(ABC):
    @abstractmethod
    def is_due(self, renewal: RenewalRecord) -> bool: ...

    @abstractmethod
    def due_date(self, renewal: RenewalRecord) -> datetime | None:
        """Date after which the renewal should run again, ``None`` meaning now."""


class RenewalExecutor(ABC):
    @abstractmethod
    def handle_renewal(self, renewal: RenewalRecord, run_level: RunLevel) -> RenewResult:
        """Run the issuance pipeline for one renewal."""


class NotificationService(ABC):
    @abstractmethod
    def notify_success(self, renewal: RenewalRecord, log_lines: list[str]) -> None: ...

    @abstractmethod
    def notify_failure(
        self,
        run_level: RunLevel,
        renewal: RenewalRecord,
        result: RenewResult,
        log_lines: list[str],
    ) -> None: ...


class CacheService(ABC):
    @abstractmethod
    def delete(self, renewal: RenewalRecord) -> None:
        """Drop cached orders and certificates for the renewal."""

    @abstractmethod
    def cached_certificate(self, renewal: RenewalRecord) -> bytes | None:
        """PEM of the most recently issued certificate, if it is still cached."""


class TargetGenerator(ABC):
    @abstractmethod
    def generate(self, options: TargetOptions) -> Target: ...


class CertificateService(ABC):
    @abstractmethod
    def revoke_certificate(self, renewal: RenewalRecord) -> None: ...


class InputService(ABC):
    """Interactive console surface."""

    @abstractmethod
    def show(self, label: str | None, value: Any = None) -> None: ...

    @abstractmethod
    def create_space(self) -> None: ...

    @abstractmethod
    def write_paged_list(self, choices: Sequence[Choice[Any]]) -> None: ...

    @abstractmethod
    def choose_from_menu(
        self,
        prompt: str,
        choices: Sequence[Choice[T]],
        unexpected: Callable[[str], Choice[T]] | None = None,
    ) -> T:
        """Let the user pick a choice.

        Input that matches no choice is handed to ``unexpected`` when given.
        """

    @abstractmethod
    def request_string(self, prompt: str) -> str: ...

    @abstractmethod
    def confirm(self, prompt: str, default: bool = False) -> bool: ...

    @abstractmethod
    def wait(self, message: str | None = None) -> bool:
        """Pause until the user continues. Returns ``False`` when the user aborts."""

    @abstractmethod
    def format_date(self, value: datetime) -> str: ...
