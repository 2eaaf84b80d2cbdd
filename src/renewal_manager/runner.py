"""Run the issuance pipeline for a batch of renewals, one at a time."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from renewal_manager.errors import ExceptionHandler
from renewal_manager.logs import RecentLogHandler
from renewal_manager.models import RenewalRecord, RenewResult, RunLevel
from renewal_manager.services import NotificationService, RenewalExecutor, RenewalStore

logger = logging.getLogger(__name__)


class BatchRunner:
    """Executes renewals sequentially; a failing renewal never stops the batch."""

    def __init__(
        self,
        executor: RenewalExecutor,
        store: RenewalStore,
        notifications: NotificationService,
        exception_handler: ExceptionHandler,
        log_handler: RecentLogHandler | None = None,
        plugin_arguments_active: bool = False,
    ) -> None:
        self._executor = executor
        self._store = store
        self._notifications = notifications
        self._exception_handler = exception_handler
        self._log_handler = log_handler
        self._plugin_arguments_active = plugin_arguments_active

    @property
    def _log_lines(self) -> list[str]:
        return self._log_handler.lines if self._log_handler else []

    def warn_about_renewal_arguments(self) -> None:
        """Plugin arguments are frozen into a renewal when it is created."""
        if self._plugin_arguments_active:
            logger.warning(
                "You have specified command line options for plugins. "
                "Note that these only affect new certificates, but NOT existing renewals. "
                "To change settings, re-create (overwrite) the renewal."
            )

    def run(self, renewals: Iterable[RenewalRecord], run_level: RunLevel) -> None:
        self.warn_about_renewal_arguments()
        for renewal in renewals:
            try:
                success = self.process_renewal(renewal, run_level)
            except Exception as exc:
                self._exception_handler.handle_exception(exc, f"Unhandled error processing renewal {renewal}")
                continue
            if success is False and RunLevel.UNATTENDED in run_level:
                # Make sure the exit code is set
                self._exception_handler.handle_exception()

    def process_renewal(self, renewal: RenewalRecord, run_level: RunLevel) -> bool | None:
        """Execute one renewal and record the outcome.

        Returns:
            ``True`` on success, ``False`` on failure and ``None`` when the
            run was aborted and nothing was recorded.
        """
        if self._log_handler:
            self._log_handler.clear()
        try:
            result = self._executor.handle_renewal(renewal, run_level)
        except Exception as exc:
            self._exception_handler.handle_exception(exc, f"Unhandled error processing renewal {renewal}")
            result = RenewResult.failed(str(exc))

        if result.abort:
            logger.info("Renewal %s aborted, nothing recorded", renewal)
            return None

        renewal.history.append(result)
        try:
            self._store.save(renewal)
        except Exception:
            # Keep memory in line with what the store holds
            renewal.history.pop()
            raise
        if result.success is True:
            self._notifications.notify_success(renewal, self._log_lines)
            return True
        self._notifications.notify_failure(run_level, renewal, result, self._log_lines)
        return False

    def check_renewals(
        self,
        run_level: RunLevel,
        renewal_id: str | None = None,
        friendly_name: str | None = None,
    ) -> None:
        """Scheduled entry point: run every renewal, or those matching the filter."""
        if renewal_id or friendly_name:
            renewals = self._store.find_by_filter(renewal_id, friendly_name)
            if not renewals:
                logger.error("No renewals found that match the filter parameters --id and/or --friendlyname.")
        else:
            logger.debug("Checking renewals")
            renewals = self._store.renewals
            if not renewals:
                logger.warning("No scheduled renewals found.")
        if renewals:
            self.run(renewals, run_level)
