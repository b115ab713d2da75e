"""ParityVerifier - Checks that migrated tickets mirror their originals."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from rehome.comments.markers import marker_prefix
from rehome.mapping_store import now_iso
from rehome.verifier.models import Finding, VerificationReport

if TYPE_CHECKING:
    from rehome.gateway import Ticket, TicketGateway
    from rehome.mapping_store import MappingEntry

logger = logging.getLogger("rehome.verifier")


def normalize_body(body: str | None) -> str:
    """Line endings normalised to ``\\n`` and surrounding whitespace trimmed."""
    return str(body or "").replace("\r\n", "\n").strip()


def compare_tickets(old: Ticket, new: Ticket) -> list[Finding]:
    """Field-by-field comparison of two tickets. Every difference is reported."""
    findings = []

    def add(field: str, expected: object = None, got: object = None) -> None:
        findings.append(Finding(old.number, new.number, field, expected, got))

    if old.title != new.title:
        add("title", old.title, new.title)
    if normalize_body(old.body) != normalize_body(new.body):
        add("body")
    if str(old.state).upper() != str(new.state).upper():
        add("state", str(old.state), str(new.state))
    if old.milestone != new.milestone:
        add("milestone", old.milestone, new.milestone)
    if old.label_set != new.label_set:
        add("labels", sorted(old.label_set), sorted(new.label_set))
    return findings


class ParityVerifier:
    """Compares every mapped pair without modifying anything."""

    def __init__(self, gateway: TicketGateway, exclusions: Iterable[int] = ()) -> None:
        self.gateway = gateway
        self.exclusions = frozenset(exclusions)

    def verify_pair(self, entry: MappingEntry) -> list[Finding]:
        """Compare one old/new pair, including the replayed comment count."""
        old_num, new_num = entry.old.number, entry.new.number
        old_ticket = self.gateway.get_ticket(old_num)
        new_ticket = self.gateway.get_ticket(new_num)
        findings = compare_tickets(old_ticket, new_ticket)
        # Report against the mapped numbers even if the API disagrees.
        for finding in findings:
            finding.old, finding.new = old_num, new_num

        source_count = len(self.gateway.list_all_comments(old_num))
        prefix = marker_prefix(old_num)
        migrated_count = sum(
            1 for c in self.gateway.list_all_comments(new_num) if prefix in c.body
        )
        if migrated_count != source_count:
            findings.append(Finding(old_num, new_num, "comments", source_count, migrated_count))

        if findings:
            logger.warning(
                "#%d -> #%d: %s", old_num, new_num, ", ".join(f.field for f in findings)
            )
        else:
            logger.debug("#%d -> #%d verified", old_num, new_num)
        return findings

    def verify(self, entries: Iterable[MappingEntry], repo: str = "") -> VerificationReport:
        """Verify every mapped pair and collect all findings."""
        report = VerificationReport(repo=repo, verified_at=now_iso())
        for entry in entries:
            if entry.old.number in self.exclusions:
                continue
            report.findings.extend(self.verify_pair(entry))
            report.pairs_checked += 1
        logger.info(
            "Verified %d pair(s): %d finding(s)", report.pairs_checked, len(report.findings)
        )
        return report
