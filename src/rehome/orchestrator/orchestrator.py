"""MigrationOrchestrator - Ticket selection, creation and phase dispatch."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import TYPE_CHECKING

from rehome.comments import AttributionCleaner, CommentMigrator
from rehome.comments.markers import DEFAULT_WEB_URL
from rehome.gateway import GatewayError, TicketState
from rehome.mapping_store import MappingEntry, NewTicketRef, OldTicketRef, write_json_atomic
from rehome.orchestrator.exceptions import CreationError
from rehome.orchestrator.models import CreationPlan, Mode, RunResult
from rehome.verifier import ParityVerifier

if TYPE_CHECKING:
    from rehome.gateway import Ticket, TicketGateway
    from rehome.mapping_store import MappingStore

logger = logging.getLogger("rehome.orchestrator")


class MigrationOrchestrator:
    """Drives a migration run.

    The creation phase records each new ticket in the mapping store as soon
    as it exists, so an interrupted run can be resumed: tickets already in
    the mapping are never created again. The comment, verify and
    clean-attribution phases only read the mapping.
    """

    def __init__(
        self,
        gateway: TicketGateway,
        store: MappingStore,
        author: str,
        exclusions: Iterable[int] = (),
        web_url: str = DEFAULT_WEB_URL,
    ) -> None:
        """Initialize the Orchestrator.

        Args:
            gateway: TicketGateway for the repository.
            store: MappingStore holding the old→new mapping.
            author: Only tickets opened by this login are migrated.
            exclusions: Ticket numbers never selected by any phase.
            web_url: GitHub web URL used in replayed comment source links.
        """
        self.gateway = gateway
        self.store = store
        self.author = author
        self.exclusions = frozenset(exclusions)
        self.web_url = web_url
        self.progress: Callable[[str], None] | None = None

    def _report(self, message: str) -> None:
        if self.progress is not None:
            self.progress(message)

    # --- Creation phase ---

    def select_tickets(self, tickets: Iterable[Ticket]) -> list[Ticket]:
        """Tickets by the configured author that are not excluded, in source order."""
        return [
            t for t in tickets if t.author == self.author and t.number not in self.exclusions
        ]

    def plan(self) -> CreationPlan:
        """List every ticket and work out which still need migrating."""
        selected = self.select_tickets(self.gateway.list_tickets(state="all"))
        mapped = {e.old.number for e in self.store.read()} if self.store.exists() else set()

        plan = CreationPlan(selected=selected)
        for ticket in selected:
            if ticket.number in mapped:
                plan.already_mapped.append(ticket)
            else:
                plan.pending.append(ticket)

        logger.info(
            "Selected %d ticket(s) by %s: %d pending, %d already mapped",
            len(plan.selected),
            self.author,
            len(plan.pending),
            len(plan.already_mapped),
        )
        return plan

    def preview(self, plan: CreationPlan) -> list[str]:
        """One line per pending ticket, as the creation phase would create them."""
        lines = [f"#{t.number} [{t.state}] {t.title}" for t in plan.pending]
        for line in lines:
            logger.info("Would create: %s", line)
        return lines

    def create_one(self, ticket: Ticket) -> MappingEntry:
        """Create the destination ticket for one source ticket.

        The mapping entry is persisted before the ticket is closed, so a
        failed close never leads to a second copy on the next run.

        Raises:
            CreationError: If creating or closing the ticket fails
        """
        try:
            created = self.gateway.create_ticket(
                title=ticket.title,
                body=ticket.body,
                labels=list(ticket.labels),
                milestone=ticket.milestone,
            )
        except GatewayError as e:
            raise CreationError(
                f"Failed to create a copy of #{ticket.number}: {e}", old_number=ticket.number
            ) from e

        entry = MappingEntry(
            old=OldTicketRef(number=ticket.number, title=ticket.title, state=str(ticket.state)),
            new=NewTicketRef(number=created.number, url=created.url),
        )
        self.store.append(entry)
        self._report(f"Creating: #{ticket.number} -> #{created.number}")

        if ticket.is_closed:
            try:
                self.gateway.update_ticket_state(created.number, TicketState.CLOSED)
            except GatewayError as e:
                raise CreationError(
                    f"Created #{created.number} for #{ticket.number} but could not close it: {e}",
                    old_number=ticket.number,
                    new_number=created.number,
                ) from e

        return entry

    def create_all(self, plan: CreationPlan) -> list[MappingEntry]:
        """Create destination tickets for every pending ticket, in order.

        Stops at the first failure.
        """
        created = []
        for ticket in plan.pending:
            created.append(self.create_one(ticket))
        logger.info("Created %d ticket(s)", len(created))
        return created

    # --- Post-creation phases ---

    def migrate_comments(self, log_path: Path) -> RunResult:
        entries = self.store.read()
        migrator = CommentMigrator(self.gateway, self.exclusions)
        pairs = migrator.migrate(entries)
        log = migrator.write_log(log_path, self.store.repo, pairs)
        return RunResult(mode=Mode.COMMENTS, comment_log=log)

    def verify(self, report_path: Path | None = None) -> RunResult:
        entries = self.store.read()
        report = ParityVerifier(self.gateway, self.exclusions).verify(entries, self.store.repo)
        if report_path is not None:
            write_json_atomic(report_path, report.to_dict())
            logger.info("Wrote verification report: %s", report_path)
        return RunResult(mode=Mode.VERIFY, report=report)

    def clean_attribution(self) -> RunResult:
        entries = self.store.read()
        cleaner = AttributionCleaner(self.gateway, self.exclusions, self.web_url)
        return RunResult(mode=Mode.CLEAN_ATTRIBUTION, cleaned=cleaner.clean(entries))

    def run(
        self,
        mode: Mode,
        comment_log_path: Path | None = None,
        report_path: Path | None = None,
    ) -> RunResult:
        """Run one invocation mode.

        Args:
            mode: Which phase to run.
            comment_log_path: Where the comments phase writes its log.
            report_path: Where verify writes its report (None to skip).

        Returns:
            RunResult for the mode.
        """
        logger.info("Running %s for %s", mode, self.store.repo)
        match mode:
            case Mode.CREATE | Mode.DRY_RUN:
                plan = self.plan()
                if mode is Mode.DRY_RUN:
                    return RunResult(mode=mode, plan=plan, preview=self.preview(plan))
                if plan.nothing_to_migrate:
                    return RunResult(mode=mode, plan=plan)
                return RunResult(mode=mode, plan=plan, created=self.create_all(plan))
            case Mode.COMMENTS:
                if comment_log_path is None:
                    raise ValueError("comment_log_path is required for the comments phase")
                return self.migrate_comments(comment_log_path)
            case Mode.VERIFY:
                return self.verify(report_path)
            case Mode.CLEAN_ATTRIBUTION:
                return self.clean_attribution()
        raise ValueError(f"Unknown mode: {mode}")
