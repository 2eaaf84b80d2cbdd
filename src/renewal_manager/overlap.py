"""Find renewals that cover the same site or host."""

from __future__ import annotations

import logging
from collections.abc import Hashable, Sequence

from renewal_manager.models import Identifier, RenewalRecord, Target
from renewal_manager.services import Choice, InputService, TargetGenerator

logger = logging.getLogger(__name__)


def _add_member(groups: dict[Hashable, list[RenewalRecord]], key: Hashable, renewal: RenewalRecord) -> None:
    members = groups.setdefault(key, [])
    if not any(member is renewal for member in members):
        members.append(renewal)


class OverlapAnalyzer:
    """Offers to narrow a selection down to renewals that overlap each other."""

    def __init__(self, targets: TargetGenerator, input_service: InputService) -> None:
        self._targets = targets
        self._input = input_service

    def _generate(self, renewal: RenewalRecord) -> Target | None:
        try:
            return self._targets.generate(renewal.target)
        except Exception as exc:
            logger.warning("Unable to generate source for renewal %s, analysis incomplete: %s", renewal, exc)
            return None

    def find_overlap(self, selection: Sequence[RenewalRecord]) -> list[Choice[list[RenewalRecord]]]:
        """One choice per site or host shared by more than one renewal.

        Sites come first, then hosts, each in order of first appearance.
        """
        sites: dict[int, list[RenewalRecord]] = {}
        hosts: dict[Identifier, list[RenewalRecord]] = {}
        for renewal in selection:
            target = self._generate(renewal)
            if target is None:
                continue
            for part in target.parts:
                if part.site_id is not None:
                    _add_member(sites, part.site_id, renewal)
                for host in part.identifiers:
                    _add_member(hosts, host, renewal)

        options = [
            Choice(members, f"Select {len(members)} renewals covering site {site_id}")
            for site_id, members in sites.items()
            if len(members) > 1
        ]
        options.extend(
            Choice(members, f"Select {len(members)} renewals covering host {host}")
            for host, members in hosts.items()
            if len(members) > 1
        )
        return options

    def analyze(self, selection: Sequence[RenewalRecord]) -> list[RenewalRecord]:
        """Let the user regroup the selection around an overlap.

        Returns the input unchanged when nothing overlaps or the user backs out.
        """
        options = self.find_overlap(selection)
        self._input.create_space()
        if not options:
            self._input.show(None, "Analysis didn't find any overlap between renewals.")
            return list(selection)
        options.append(Choice(list(selection), "Back"))
        self._input.show(
            None,
            "Analysis found some overlap between renewals. You can select the overlapping renewals from the menu.",
        )
        return self._input.choose_from_menu("Please choose from the menu", options)
