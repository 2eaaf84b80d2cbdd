"""Interactive and unattended management of existing renewals."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from renewal_manager.cmdline import CommandLineSerializer
from renewal_manager.config import AppConfig
from renewal_manager.models import RenewalRecord, RunLevel
from renewal_manager.overlap import OverlapAnalyzer
from renewal_manager.revocation import RevocationFlow
from renewal_manager.runner import BatchRunner
from renewal_manager.selection import PATTERN_EXAMPLES, Selection
from renewal_manager.services import (
    CacheService,
    Choice,
    DueDateService,
    InputService,
    RenewalStore,
)

logger = logging.getLogger(__name__)

_HISTORY_LIMIT = 10

Action = Callable[[], None]


def _plural(count: int, noun: str = "renewal") -> str:
    return noun if count == 1 else f"{noun}s"


class RenewalManager:
    """Menu driven actions on a selection of renewals, plus their unattended counterparts."""

    def __init__(
        self,
        config: AppConfig,
        store: RenewalStore,
        due_dates: DueDateService,
        cache: CacheService,
        input_service: InputService,
        runner: BatchRunner,
        analyzer: OverlapAnalyzer,
        revocation: RevocationFlow,
        serializer: CommandLineSerializer | None = None,
    ) -> None:
        self._config = config
        self._store = store
        self._due_dates = due_dates
        self._cache = cache
        self._input = input_service
        self._runner = runner
        self._analyzer = analyzer
        self._revocation = revocation
        self._serializer = serializer or CommandLineSerializer(config)

    # Presentation

    def status_color(self, renewal: RenewalRecord) -> str:
        if renewal.last_success is True:
            return "yellow" if self._due_dates.is_due(renewal) else "green"
        return "red"

    def describe(self, renewal: RenewalRecord) -> str:
        due_date = self._due_dates.due_date(renewal)
        due = "now" if due_date is None else f"after {self._input.format_date(due_date)}"
        count = renewal.success_count
        text = f"{renewal.display_name} - renewed {count} {_plural(count, 'time')}, due {due}"
        last = renewal.last_result
        if last is not None and last.success is not True and last.error_message:
            text += f' - error "{last.error_message}"'
        return text

    def _renewal_choice(self, renewal: RenewalRecord) -> Choice[RenewalRecord | None]:
        return Choice(renewal, self.describe(renewal), color=self.status_color(renewal))

    def as_command_line(self, renewal: RenewalRecord) -> str:
        return self._serializer.serialize(renewal)

    def show_renewal(self, renewal: RenewalRecord) -> None:
        """Details, command line and recent history of one renewal."""
        try:
            self._input.create_space()
            self._input.show("Id", renewal.id)
            self._input.show("File", f"{renewal.id}.renewal.json")
            self._input.show(
                "FriendlyName",
                renewal.friendly_name or f"[Auto] {renewal.last_friendly_name or ''}",
            )
            self._input.show(".pfx password", "*******" if renewal.pfx_password else None)
            expires = renewal.expires
            self._input.show("Expires", "Unknown" if expires is None else self._input.format_date(expires))
            due_date = self._due_dates.due_date(renewal)
            self._input.show("Renewal due", "Now" if due_date is None else self._input.format_date(due_date))
            self._input.show("Renewed", f"{renewal.success_count} times")
            self._input.show("Command", self.as_command_line(renewal))
            self._input.create_space()
            for options in (renewal.target, renewal.validation, renewal.order, renewal.csr):
                if options is not None:
                    self._input.show(options.stage.capitalize(), options.name)
            for options in (*renewal.store, *renewal.installation):
                self._input.show(options.stage.capitalize(), options.name)
            self._input.create_space()
            history = list(reversed(renewal.history))[:_HISTORY_LIMIT]
            self._input.write_paged_list([Choice(result, str(result), command="") for result in history])
        except Exception:
            logger.exception("Unable to list details for renewal %s", renewal)

    # Interactive

    def _selection_label(self, selection: Selection) -> str:
        count = len(selection.current)
        if selection.is_all:
            return "the renewal" if count == 1 else "*all* renewals"
        if selection.is_empty:
            return "no renewals"
        return f"{count} of {len(selection.original)} {_plural(len(selection.original))}"

    def _show_details(self, selection: Selection) -> None:
        total = len(selection.current)
        for index, renewal in enumerate(selection.current, start=1):
            self._input.show(f"{index}/{total}")
            self.show_renewal(renewal)
            if index != total:
                if not self._input.wait("Press <Enter> to continue or <Esc> to abort"):
                    break
            else:
                self._input.wait()

    def _show_command_lines(self, selection: Selection) -> None:
        for renewal in selection.current:
            self._input.show(None, self.as_command_line(renewal))
            self._input.create_space()
        self._input.wait()

    def _filter_menu(self, selection: Selection) -> None:
        options: list[Choice[Action]] = [
            Choice(lambda: self._filter_by_name(selection), "Filter by friendly name"),
            Choice(lambda: selection.filter_by_due(self._due_dates, keep=True), "Filter by due status (keep due)"),
            Choice(lambda: selection.filter_by_due(self._due_dates, keep=False), "Filter by due status (remove due)"),
            Choice(lambda: selection.filter_by_last_outcome(keep_errors=True), "Filter by error status (keep errors)"),
            Choice(lambda: selection.filter_by_last_outcome(keep_errors=False), "Filter by error status (remove errors)"),
            Choice(lambda: None, "Cancel"),
        ]
        self._input.choose_from_menu("How would you like to filter?", options)()

    def _filter_by_name(self, selection: Selection) -> None:
        self._input.create_space()
        self._input.show(None, f"Please input friendly name to filter renewals by. {PATTERN_EXAMPLES}")
        selection.filter_by_name_pattern(self._input.request_string("Friendly name"))

    def _sort_menu(self, selection: Selection) -> None:
        options: list[Choice[Action]] = [
            Choice(lambda: selection.sort_by_name(ascending=True), "Sort by friendly name", default=True),
            Choice(lambda: selection.sort_by_name(ascending=False), "Sort by friendly name (descending)"),
            Choice(lambda: selection.sort_by_due_date(self._due_dates, ascending=True), "Sort by due date"),
            Choice(
                lambda: selection.sort_by_due_date(self._due_dates, ascending=False),
                "Sort by due date (descending)",
            ),
        ]
        self._input.choose_from_menu("How would you like to sort the renewals list?", options)()

    def _analyze(self, selection: Selection) -> None:
        selection.current = list(self._analyzer.analyze(selection.current))

    def _cancel(self, selection: Selection) -> Selection:
        count = len(selection.current)
        if not self._input.confirm(
            f"Are you sure you want to cancel {count} currently selected {_plural(count)}?", False
        ):
            return selection
        for renewal in selection.current:
            self._store.cancel(renewal)
            self._cache.delete(renewal)
        return Selection.from_store(self._store.renewals)

    def _revoke(self, selection: Selection) -> None:
        count = len(selection.current)
        label = _plural(count)
        if self._input.confirm(
            f"Are you sure you want to revoke the most recently issued certificate for {count} currently "
            f"selected {label}? This should only be done in case of a (suspected) security breach. "
            f"Cancel the {label} if you simply don't need the certificates anymore.",
            False,
        ):
            self._revocation.revoke(selection.current)

    def _render(self, selection: Selection) -> bool:
        """Write the renewal list; returns whether it was cut short."""
        self._input.create_space()
        self._input.show(
            None,
            "Welcome to the renewal manager. Actions selected in the menu below will "
            "be applied to the following list of renewals. You may filter the list to target "
            "your action at a more specific set of renewals, or sort it to make it easier to "
            "find what you're looking for.",
        )
        page = selection.page(self._config.page_size)
        choices = [self._renewal_choice(renewal) for renewal in page.items]
        if page.limited:
            choices.append(
                Choice(
                    None,
                    f"{page.hidden} additional {_plural(page.hidden)} selected but currently not displayed",
                    command="More",
                )
            )
        self._input.write_paged_list(choices)
        return page.limited

    def _menu(self, selection: Selection, limited: bool) -> Sequence[Choice[Callable[[], Selection | None]]]:
        label = self._selection_label(selection)
        none = "No renewals selected." if selection.is_empty else None
        sort_filter = "Not enough renewals to sort/filter." if len(selection.current) < 2 else None

        def run(run_level: RunLevel) -> Callable[[], None]:
            return lambda: self._runner.run(list(selection.current), run_level)

        def show_all() -> None:
            selection.show_all = True

        def reset() -> None:
            selection.reset()

        options: list[Choice[Callable[[], Selection | None]]] = []
        if limited:
            options.append(Choice(show_all, "List all selected renewals", command="A"))
        if len(selection.current) > 1:
            options.append(
                Choice(
                    lambda: self._filter_menu(selection),
                    "Apply filter" if selection.is_all else "Apply additional filter",
                    command="F",
                    disabled=sort_filter,
                )
            )
            options.append(Choice(lambda: self._sort_menu(selection), "Sort renewals", command="S", disabled=sort_filter))
        if not selection.is_all:
            options.append(Choice(reset, "Reset sorting and filtering", command="X"))
        options.extend(
            [
                Choice(lambda: self._show_details(selection), f"Show details for {label}", command="D", disabled=none),
                Choice(
                    lambda: self._show_command_lines(selection),
                    f"Show command line for {label}",
                    command="L",
                    disabled=none,
                ),
                Choice(run(RunLevel.INTERACTIVE), f"Run {label}", command="R", disabled=none),
                Choice(
                    run(RunLevel.INTERACTIVE | RunLevel.FORCE),
                    f"Run {label} (force)",
                    command="O",
                    disabled=none,
                ),
            ]
        )
        if self._config.cache_reuse_days > 0:
            options.append(
                Choice(
                    run(RunLevel.INTERACTIVE | RunLevel.FORCE | RunLevel.NO_CACHE),
                    f"Run {label} (force, no cache)",
                    command="T",
                    disabled=none,
                )
            )
        options.extend(
            [
                Choice(
                    lambda: self._analyze(selection),
                    f"Analyze duplicates for {label}",
                    command="U",
                    disabled=none,
                ),
                Choice(lambda: self._cancel(selection), f"Cancel {label}", command="C", disabled=none),
                Choice(
                    lambda: self._revoke(selection),
                    f"Revoke certificate(s) for {label}",
                    command="V",
                    disabled=none,
                ),
            ]
        )
        return options

    def manage_renewals(self) -> None:
        """Menu loop over the stored renewals until the user goes back."""
        selection = Selection.from_store(self._store.renewals)
        quit_requested = False

        def back() -> None:
            nonlocal quit_requested
            quit_requested = True

        while not quit_requested:
            limited = self._render(selection)
            options = list(self._menu(selection, limited))
            options.append(Choice(back, "Back", command="Q", default=not selection.original))
            if len(selection.current) > 1:
                self._input.create_space()
                self._input.show(
                    None,
                    f"Currently selected {len(selection.current)} of {len(selection.original)} "
                    f"{_plural(len(selection.original))}",
                )

            def select_by_index(text: str) -> Choice[Callable[[], None]]:
                return Choice(lambda: selection.select_by_index(text), text)

            chosen = self._input.choose_from_menu(
                "Choose an action or type numbers to select renewals",
                options,
                select_by_index,
            )
            replacement = chosen()
            if isinstance(replacement, Selection):
                selection = replacement

    # Unattended

    def list_renewals(self) -> None:
        self._input.write_paged_list([self._renewal_choice(renewal) for renewal in self._store.renewals])

    def _filter_by_command_line(
        self,
        command: str,
        renewal_id: str | None,
        friendly_name: str | None,
    ) -> list[RenewalRecord]:
        if not (renewal_id or friendly_name):
            logger.error("Specify which renewal to %s using the parameter --id or --friendlyname.", command)
            return []
        renewals = self._store.find_by_filter(renewal_id, friendly_name)
        if not renewals:
            logger.error("No renewals matched.")
        return renewals

    def check_renewals(
        self,
        run_level: RunLevel = RunLevel.UNATTENDED,
        renewal_id: str | None = None,
        friendly_name: str | None = None,
    ) -> None:
        self._runner.check_renewals(run_level, renewal_id, friendly_name)

    def cancel_renewals_unattended(self, renewal_id: str | None = None, friendly_name: str | None = None) -> None:
        for renewal in self._filter_by_command_line("cancel", renewal_id, friendly_name):
            self._store.cancel(renewal)
            self._cache.delete(renewal)

    def revoke_certificates_unattended(self, renewal_id: str | None = None, friendly_name: str | None = None) -> None:
        logger.warning(
            "Certificates should only be revoked in case of a (suspected) security breach. "
            "Cancel the renewal if you simply don't need the certificate anymore."
        )
        self._revocation.revoke(self._filter_by_command_line("revoke", renewal_id, friendly_name))
