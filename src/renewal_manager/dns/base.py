"""Abstract base class for DNS-01 validation providers."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from typing import ClassVar, Self

from renewal_manager.dns.zones import find_best_zone, relative_record_name
from renewal_manager.models import DnsValidationRecord

logger = logging.getLogger(__name__)

CHALLENGE_TTL = 300


@dataclass(frozen=True)
class DnsZone:
    """A zone as the provider knows it: its name and the provider's handle for it."""

    name: str
    id: str


@dataclass(frozen=True)
class ChallengeSession:
    """State of one create/delete cycle.

    Falsy when no record was created, in which case deleting it is a no-op.
    """

    record: DnsValidationRecord
    zone: DnsZone | None = None
    record_id: str | None = None

    @property
    def created(self) -> bool:
        return self.zone is not None and self.record_id is not None

    def __bool__(self) -> bool:
        return self.created


class DnsValidationProvider(ABC):
    """Publishes and removes DNS-01 TXT records.

    Subclasses only talk to their API; zone selection, record naming and
    error isolation live here. Neither ``create_record`` nor
    ``delete_record`` raises on provider errors.
    """

    provider_name: ClassVar[str] = "DNS"
    min_ttl: ClassVar[int] = 0

    def close(self) -> None:
        """Release resources. Override in subclasses that hold open connections."""

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    @property
    def ttl(self) -> int:
        return max(CHALLENGE_TTL, self.min_ttl)

    def create_record(self, record: DnsValidationRecord) -> ChallengeSession:
        """Publish the TXT record.

        Returns:
            A session to pass to ``delete_record``. It is falsy when the
            record could not be created, meaning validation of this
            identifier failed.
        """
        domain = record.authority.domain
        try:
            zones = self._list_zones()
            zone_name = find_best_zone(zones, domain)
            if zone_name is None:
                logger.error("Unable to find a zone on %s for '%s'", self.provider_name, domain)
                return ChallengeSession(record)
            zone = DnsZone(name=zone_name, id=zones[zone_name])
            record_id = self._create_txt_record(zone, relative_record_name(domain, zone_name), record.value)
        except Exception:
            logger.exception("Failed to create DNS record for '%s' on %s", domain, self.provider_name)
            return ChallengeSession(record)
        logger.info("Created TXT record for '%s' in %s zone %s", domain, self.provider_name, zone_name)
        return ChallengeSession(record, zone=zone, record_id=record_id)

    def delete_record(self, session: ChallengeSession) -> None:
        """Remove the record created in ``session``. Failures are logged only."""
        if not session.created:
            logger.warning(
                "Not deleting DNS record for '%s' on %s because of missing record id",
                session.record.authority.domain,
                self.provider_name,
            )
            return
        try:
            self._delete_txt_record(session.zone, session.record_id)
        except Exception:
            logger.exception(
                "Failed to delete DNS record for '%s' on %s",
                session.record.authority.domain,
                self.provider_name,
            )
            return
        logger.info("Deleted TXT record for '%s' from %s", session.record.authority.domain, self.provider_name)

    @contextmanager
    def challenge(self, record: DnsValidationRecord) -> Iterator[ChallengeSession]:
        """Create the record for the duration of the block, then always clean it up."""
        session = self.create_record(record)
        try:
            yield session
        finally:
            if session:
                self.delete_record(session)

    @abstractmethod
    def _list_zones(self) -> Mapping[str, str]:
        """Map every zone name the account manages to the provider's zone handle."""

    @abstractmethod
    def _create_txt_record(self, zone: DnsZone, record_name: str, value: str) -> str:
        """Create the TXT record and return the provider's id for it.

        Args:
            zone: The matched zone.
            record_name: Name relative to the zone, or ``@`` for the apex.
            value: The proof token.
        """

    @abstractmethod
    def _delete_txt_record(self, zone: DnsZone, record_id: str) -> None:
        """Delete a record previously returned by ``_create_txt_record``."""
