"""Revoke the most recently issued certificate of renewals."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from renewal_manager.errors import ExceptionHandler
from renewal_manager.models import RenewalRecord, RenewResult
from renewal_manager.services import CertificateService, RenewalStore

logger = logging.getLogger(__name__)

REVOKED_MESSAGE = "Certificate(s) revoked"


class RevocationFlow:
    """Revokes certificates renewal by renewal and records the revocation in history."""

    def __init__(
        self,
        certificates: CertificateService,
        store: RenewalStore,
        exception_handler: ExceptionHandler,
    ) -> None:
        self._certificates = certificates
        self._store = store
        self._exception_handler = exception_handler

    def revoke(self, renewals: Iterable[RenewalRecord]) -> None:
        """Revoke each renewal's certificate; a failure only affects that renewal.

        The revocation is recorded as an unsuccessful result so the renewal
        shows up as needing attention.
        """
        for renewal in renewals:
            try:
                self._certificates.revoke_certificate(renewal)
                renewal.history.append(RenewResult.failed(REVOKED_MESSAGE))
                try:
                    self._store.save(renewal)
                except Exception:
                    renewal.history.pop()
                    raise
                logger.info("Revoked certificate for renewal %s", renewal)
            except Exception as exc:
                self._exception_handler.handle_exception(exc, f"Unable to revoke certificate for renewal {renewal}")
