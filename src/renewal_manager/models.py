"""Renewal records, their outcome history and the value types shared between stages."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from renewal_manager.plugins import (
        CsrOptions,
        InstallationOptions,
        OrderOptions,
        ProtectedString,
        StoreOptions,
        TargetOptions,
        ValidationOptions,
    )


class RunLevel(enum.Flag):
    """Flags controlling interactivity, forcing and cache bypass for one execution."""

    NONE = 0
    UNATTENDED = enum.auto()
    INTERACTIVE = enum.auto()
    ADVANCED = enum.auto()
    FORCE = enum.auto()
    NO_CACHE = enum.auto()


@dataclass(frozen=True, eq=False)
class Identifier:
    """A domain name. Equality and hashing ignore case, display keeps the original spelling."""

    value: str

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Identifier):
            return NotImplemented
        return self.value.lower() == other.value.lower()

    def __hash__(self) -> int:
        return hash(self.value.lower())

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class TargetPart:
    """One resolved unit of a target: an optional hosting site and the hosts it covers."""

    identifiers: tuple[Identifier, ...]
    site_id: int | None = None


@dataclass(frozen=True)
class Target:
    """Result of running a renewal's target plugin."""

    friendly_name: str
    common_name: Identifier
    parts: tuple[TargetPart, ...] = ()

    def identifiers(self) -> list[Identifier]:
        seen: dict[Identifier, None] = {}
        for part in self.parts:
            for identifier in part.identifiers:
                seen.setdefault(identifier, None)
        return list(seen)


@dataclass(frozen=True)
class DnsAuthority:
    """Where a DNS-01 proof has to be published."""

    domain: str


@dataclass(frozen=True)
class DnsValidationRecord:
    """TXT record content for a single DNS-01 challenge."""

    authority: DnsAuthority
    value: str


@dataclass(frozen=True)
class RenewResult:
    """Outcome of one execution attempt.

    ``success`` is ``None`` when the outcome is unknown. Aborted results are
    never written to a renewal's history.
    """

    success: bool | None = None
    expire_date: datetime | None = None
    error_message: str | None = None
    abort: bool = False
    date: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def succeeded(cls, expire_date: datetime | None) -> RenewResult:
        return cls(success=True, expire_date=expire_date)

    @classmethod
    def failed(cls, message: str) -> RenewResult:
        return cls(success=False, error_message=message)

    @classmethod
    def aborted(cls) -> RenewResult:
        return cls(abort=True)

    def __str__(self) -> str:
        stamp = self.date.strftime("%Y-%m-%d %H:%M")
        if self.success:
            return f"{stamp} - Success"
        return f"{stamp} - Error: {self.error_message or 'unknown'}"

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "expire_date": self.expire_date.isoformat() if self.expire_date else None,
            "error_message": self.error_message,
            "date": self.date.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> RenewResult:
        expire_date = data.get("expire_date")
        return cls(
            success=data.get("success"),
            expire_date=datetime.fromisoformat(expire_date) if expire_date else None,
            error_message=data.get("error_message"),
            date=datetime.fromisoformat(data["date"]),
        )


@dataclass(eq=False)
class RenewalRecord:
    """A configured unit of recurring certificate issuance.

    Records are owned by the renewal store. The orchestrator appends to
    ``history`` in place and hands the record back to the store to persist.
    """

    id: str
    target: TargetOptions
    validation: ValidationOptions
    order: OrderOptions | None = None
    csr: CsrOptions | None = None
    store: list[StoreOptions] = field(default_factory=list)
    installation: list[InstallationOptions] = field(default_factory=list)
    friendly_name: str | None = None
    last_friendly_name: str | None = None
    pfx_password: ProtectedString | None = None
    history: list[RenewResult] = field(default_factory=list)

    @property
    def display_name(self) -> str:
        return self.friendly_name or self.last_friendly_name or ""

    @property
    def last_result(self) -> RenewResult | None:
        return self.history[-1] if self.history else None

    @property
    def last_success(self) -> bool | None:
        last = self.last_result
        return last.success if last else None

    @property
    def success_count(self) -> int:
        return sum(1 for result in self.history if result.success is True)

    @property
    def expires(self) -> datetime | None:
        """Expiry of the most recently issued certificate, if any run succeeded."""
        for result in reversed(self.history):
            if result.success is True:
                return result.expire_date
        return None

    def __str__(self) -> str:
        return self.display_name or self.id
