"""Tests for the renewal manager menu and unattended commands."""

import logging
from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest

from renewal_manager.config import AppConfig
from renewal_manager.manager import RenewalManager
from renewal_manager.models import RenewResult, RunLevel
from renewal_manager.selection import Selection


def _scripted_input(script=()):
    """Input service that answers menus from a list of commands or choice descriptions.

    A script entry that matches no choice is treated as free-form input.
    """
    input_service = MagicMock()
    input_service.menus = []
    remaining = list(script)

    def choose(prompt, choices, unexpected=None):
        input_service.menus.append([c.description for c in choices])
        answer = remaining.pop(0)
        for choice in choices:
            if choice.command == answer:
                return choice.value
        for choice in choices:
            if choice.description.startswith(answer):
                return choice.value
        assert unexpected is not None, f"no choice for {answer!r} in {prompt!r}"
        return unexpected(answer).value

    input_service.choose_from_menu.side_effect = choose
    input_service.format_date.side_effect = lambda d: d.strftime("%Y-%m-%d")
    return input_service


@pytest.fixture
def parts(make_renewal):
    store = MagicMock()
    store.renewals = [
        make_renewal("b.example.com", history=[True]),
        make_renewal("a.example.com", history=[False]),
        make_renewal("c.example.com"),
    ]
    due_dates = MagicMock()
    due_dates.is_due.return_value = False
    due_dates.due_date.return_value = None
    return {
        "config": AppConfig(program_name="wacs"),
        "store": store,
        "due_dates": due_dates,
        "cache": MagicMock(),
        "runner": MagicMock(),
        "analyzer": MagicMock(),
        "revocation": MagicMock(),
    }


def _manager(parts, script=()):
    input_service = _scripted_input(script)
    return RenewalManager(input_service=input_service, **parts), input_service


class TestPresentation:
    def test_describe_includes_error(self, parts, make_renewal):
        manager, _ = _manager(parts)
        renewal = make_renewal("x.com", history=[True, RenewResult.failed("DNS timeout")])

        assert manager.describe(renewal) == 'x.com - renewed 1 time, due now - error "DNS timeout"'

    def test_describe_due_date(self, parts, make_renewal):
        parts["due_dates"].due_date.return_value = datetime(2026, 12, 1, tzinfo=UTC)
        manager, _ = _manager(parts)

        assert manager.describe(make_renewal("x.com", history=[True, True])) == (
            "x.com - renewed 2 times, due after 2026-12-01"
        )

    def test_status_colors(self, parts, make_renewal):
        manager, _ = _manager(parts)
        assert manager.status_color(make_renewal(history=[True])) == "green"
        assert manager.status_color(make_renewal(history=[False])) == "red"
        assert manager.status_color(make_renewal()) == "red"
        parts["due_dates"].is_due.return_value = True
        assert manager.status_color(make_renewal(history=[True])) == "yellow"

    def test_show_renewal_for_never_run_renewal(self, parts, make_renewal):
        manager, input_service = _manager(parts)

        manager.show_renewal(make_renewal("x.com"))

        shown = {c.args[0]: c.args[1] for c in input_service.show.call_args_list if len(c.args) > 1}
        assert shown["Expires"] == "Unknown"
        assert shown["Renewal due"] == "Now"
        assert shown["FriendlyName"] == "[Auto] x.com"
        assert shown["Command"] == "wacs --source manual --commonname x.com --host x.com"
        assert shown["Validation"] == "SelfHosting"

    def test_show_renewal_history_newest_first(self, parts, make_renewal):
        manager, input_service = _manager(parts)
        old = RenewResult(success=False, error_message="old", date=datetime(2026, 1, 1, tzinfo=UTC))
        new = RenewResult.succeeded(datetime(2027, 1, 1, tzinfo=UTC))

        manager.show_renewal(make_renewal(history=[old, new]))

        history = input_service.write_paged_list.call_args.args[0]
        assert [c.value for c in history] == [new, old]


class TestManageRenewals:
    def test_back_leaves_loop(self, parts):
        manager, input_service = _manager(parts, ["Back"])

        manager.manage_renewals()

        listed = input_service.write_paged_list.call_args_list[0].args[0]
        assert [c.value.display_name for c in listed] == ["a.example.com", "b.example.com", "c.example.com"]

    def test_select_by_index_then_run(self, parts):
        manager, _ = _manager(parts, ["1,3", "R", "Back"])

        manager.manage_renewals()

        renewals, run_level = parts["runner"].run.call_args.args
        assert [r.display_name for r in renewals] == ["a.example.com", "c.example.com"]
        assert run_level == RunLevel.INTERACTIVE

    def test_force_no_cache_only_offered_with_cache(self, parts):
        manager, input_service = _manager(parts, ["Back"])
        manager.manage_renewals()
        assert any("(force, no cache)" in d for d in input_service.menus[0])

        parts["config"] = AppConfig(cache_reuse_days=0)
        manager, input_service = _manager(parts, ["Back"])
        manager.manage_renewals()
        assert not any("(force, no cache)" in d for d in input_service.menus[0])

    def test_filter_then_reset(self, parts):
        manager, input_service = _manager(
            parts,
            ["Apply filter", "Filter by error status (keep errors)", "R", "X", "R", "Back"],
        )

        manager.manage_renewals()

        first, second = parts["runner"].run.call_args_list
        assert [r.display_name for r in first.args[0]] == ["a.example.com", "c.example.com"]
        assert len(second.args[0]) == 3

    def test_filter_by_name(self, parts):
        manager, input_service = _manager(parts, ["Apply filter", "Filter by friendly name", "R", "Back"])
        input_service.request_string.return_value = "b.*"

        manager.manage_renewals()

        assert [r.display_name for r in parts["runner"].run.call_args.args[0]] == ["b.example.com"]

    def test_sort_descending(self, parts):
        manager, _ = _manager(parts, ["Sort renewals", "Sort by friendly name (descending)", "1", "R", "Back"])

        manager.manage_renewals()

        assert [r.display_name for r in parts["runner"].run.call_args.args[0]] == ["c.example.com"]

    def test_cancel_reloads_store(self, parts, make_renewal):
        manager, input_service = _manager(parts, ["2", "Cancel", "Back"])
        input_service.confirm.return_value = True
        target = sorted(parts["store"].renewals, key=lambda r: r.display_name)[1]

        def cancel(renewal):
            parts["store"].renewals = [r for r in parts["store"].renewals if r is not renewal]

        parts["store"].cancel.side_effect = cancel

        manager.manage_renewals()

        parts["store"].cancel.assert_called_once_with(target)
        parts["cache"].delete.assert_called_once_with(target)
        last_listing = input_service.write_paged_list.call_args.args[0]
        assert [c.value.display_name for c in last_listing] == ["a.example.com", "c.example.com"]

    def test_revoke_requires_confirmation(self, parts):
        manager, input_service = _manager(parts, ["Revoke", "Back"])
        input_service.confirm.return_value = False

        manager.manage_renewals()

        parts["revocation"].revoke.assert_not_called()

    def test_analyze_replaces_selection(self, parts):
        manager, _ = _manager(parts, ["Analyze", "R", "Back"])
        parts["analyzer"].analyze.side_effect = lambda current: current[:1]

        manager.manage_renewals()

        assert [r.display_name for r in parts["runner"].run.call_args.args[0]] == ["a.example.com"]

    def test_long_list_is_paged_and_can_show_all(self, parts, make_renewal):
        parts["store"].renewals = [make_renewal(f"host{i:02}.example.com") for i in range(5)]
        parts["config"] = AppConfig(page_size=3)
        manager, input_service = _manager(parts, ["List all", "Back"])

        manager.manage_renewals()

        first, second = (c.args[0] for c in input_service.write_paged_list.call_args_list)
        assert len(first) == 3
        assert first[-1].command == "More"
        assert first[-1].description == "3 additional renewals selected but currently not displayed"
        assert len(second) == 5


class TestUnattended:
    def test_cancel_requires_filter(self, parts, caplog):
        manager, _ = _manager(parts)

        with caplog.at_level(logging.ERROR):
            manager.cancel_renewals_unattended()

        parts["store"].cancel.assert_not_called()
        assert "Specify which renewal to cancel" in caplog.text

    def test_cancel_by_id(self, parts, make_renewal):
        renewal = make_renewal()
        parts["store"].find_by_filter.return_value = [renewal]
        manager, _ = _manager(parts)

        manager.cancel_renewals_unattended(renewal_id="example-com")

        parts["store"].find_by_filter.assert_called_once_with("example-com", None)
        parts["store"].cancel.assert_called_once_with(renewal)
        parts["cache"].delete.assert_called_once_with(renewal)

    def test_revoke_without_match_logs_error(self, parts, caplog):
        parts["store"].find_by_filter.return_value = []
        manager, _ = _manager(parts)

        with caplog.at_level(logging.WARNING):
            manager.revoke_certificates_unattended(friendly_name="nothing*")

        parts["revocation"].revoke.assert_called_once_with([])
        assert "No renewals matched." in caplog.text
        assert "security breach" in caplog.text

    def test_check_renewals_delegates_to_runner(self, parts):
        manager, _ = _manager(parts)

        manager.check_renewals(RunLevel.UNATTENDED | RunLevel.FORCE, friendly_name="a*")

        parts["runner"].check_renewals.assert_called_once_with(RunLevel.UNATTENDED | RunLevel.FORCE, None, "a*")

    def test_list_renewals_in_store_order(self, parts):
        manager, input_service = _manager(parts)

        manager.list_renewals()

        listed = input_service.write_paged_list.call_args.args[0]
        assert [c.value.display_name for c in listed] == ["b.example.com", "a.example.com", "c.example.com"]
        assert [c.color for c in listed] == ["green", "red", "red"]


def test_selection_label_variants(parts, make_renewal):
    manager, _ = _manager(parts)
    selection = Selection.from_store(parts["store"].renewals)
    assert manager._selection_label(selection) == "*all* renewals"
    selection.select_by_index("1")
    assert manager._selection_label(selection) == "1 of 3 renewals"
    selection.current = []
    assert manager._selection_label(selection) == "no renewals"
    assert manager._selection_label(Selection.from_store([make_renewal()])) == "the renewal"
