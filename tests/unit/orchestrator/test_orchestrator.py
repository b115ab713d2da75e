"""Unit tests for MigrationOrchestrator."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from rehome.gateway import Ticket, TicketState
from rehome.mapping_store import MappingStore, MissingMappingError
from rehome.orchestrator import CreationError, MigrationOrchestrator, Mode

if TYPE_CHECKING:
    from conftest import FakeGateway


@pytest.fixture
def store(tmp_path: Path) -> MappingStore:
    return MappingStore(tmp_path / "issue-migration-map.json", "owner/repo")


@pytest.fixture
def orchestrator(fake_gateway: FakeGateway, store: MappingStore) -> MigrationOrchestrator:
    return MigrationOrchestrator(fake_gateway, store, author="finalFlick", exclusions={19})


@pytest.fixture
def gateway(fake_gateway: FakeGateway) -> FakeGateway:
    """Repository with a mix of authors, states and the excluded #19."""
    fake_gateway.add_ticket(
        number=5,
        title="Bug",
        body="desc",
        state=TicketState.CLOSED,
        labels=["bug"],
        milestone=2,
        author="finalFlick",
    )
    fake_gateway.add_ticket(number=6, title="Feature", author="finalFlick", labels=[])
    fake_gateway.add_ticket(number=7, title="Not mine", author="someone-else")
    fake_gateway.add_ticket(number=19, title="Bot thread", author="finalFlick")
    return fake_gateway


@pytest.mark.unit
class TestSelectTickets:
    """Tests for select_tickets."""

    def test_filters_author_and_exclusions(self, orchestrator: MigrationOrchestrator) -> None:
        tickets = [
            Ticket(number=3, title="a", author="finalFlick"),
            Ticket(number=19, title="b", author="finalFlick"),
            Ticket(number=1, title="c", author="other"),
            Ticket(number=2, title="d", author="finalFlick"),
        ]

        selected = orchestrator.select_tickets(tickets)

        assert [t.number for t in selected] == [3, 2]

    def test_author_match_is_exact(self, orchestrator: MigrationOrchestrator) -> None:
        tickets = [Ticket(number=3, title="a", author="finalflick")]

        assert orchestrator.select_tickets(tickets) == []


@pytest.mark.unit
class TestCreation:
    """Tests for the creation phase."""

    def test_closed_ticket_created_open_then_closed(
        self, gateway: FakeGateway, orchestrator: MigrationOrchestrator
    ) -> None:
        source = gateway.tickets[5]

        entry = orchestrator.create_one(source)

        new = gateway.tickets[entry.new.number]
        assert (new.title, new.body, new.labels, new.milestone) == ("Bug", "desc", ["bug"], 2)
        assert new.state == TicketState.CLOSED
        # Close is a separate call after creation
        names = [name for name, _ in gateway.calls]
        assert names == ["create_ticket", "update_ticket_state"]
        assert gateway.calls_to("update_ticket_state") == [(entry.new.number, "closed")]

    def test_open_ticket_not_updated(
        self, gateway: FakeGateway, orchestrator: MigrationOrchestrator
    ) -> None:
        orchestrator.create_one(gateway.tickets[6])

        assert gateway.calls_to("update_ticket_state") == []

    def test_mapping_written_per_ticket(
        self, gateway: FakeGateway, orchestrator: MigrationOrchestrator, store: MappingStore
    ) -> None:
        entry = orchestrator.create_one(gateway.tickets[5])

        data = json.loads(store.path.read_text())
        assert data["mapping"] == [
            {
                "old": {"number": 5, "title": "Bug", "state": "closed"},
                "new": {"number": entry.new.number, "url": entry.new.url},
            }
        ]

    def test_run_create_migrates_selected_in_order(
        self, gateway: FakeGateway, orchestrator: MigrationOrchestrator, store: MappingStore
    ) -> None:
        result = orchestrator.run(Mode.CREATE)

        assert [e.old.number for e in result.created] == [5, 6]
        assert [e.old.number for e in store.read()] == [5, 6]
        assert gateway.calls_to("create_ticket") == ["Bug", "Feature"]

    def test_rerun_skips_already_mapped(
        self, gateway: FakeGateway, orchestrator: MigrationOrchestrator, store: MappingStore
    ) -> None:
        orchestrator.run(Mode.CREATE)

        result = orchestrator.run(Mode.CREATE)

        assert result.created == []
        assert result.plan is not None
        assert [t.number for t in result.plan.already_mapped] == [5, 6]
        assert len(gateway.calls_to("create_ticket")) == 2
        assert len(store.read()) == 2

    def test_failure_keeps_earlier_entries_and_resumes(
        self, gateway: FakeGateway, orchestrator: MigrationOrchestrator, store: MappingStore
    ) -> None:
        gateway.fail_create_for = {"Feature"}

        with pytest.raises(CreationError) as exc_info:
            orchestrator.run(Mode.CREATE)

        assert exc_info.value.old_number == 6
        assert [e.old.number for e in store.read()] == [5]

        gateway.fail_create_for = set()
        result = orchestrator.run(Mode.CREATE)

        assert [e.old.number for e in result.created] == [6]
        assert gateway.calls_to("create_ticket") == ["Bug", "Feature", "Feature"]
        assert [e.old.number for e in store.read()] == [5, 6]

    def test_close_failure_still_records_mapping(
        self, gateway: FakeGateway, orchestrator: MigrationOrchestrator, store: MappingStore
    ) -> None:
        gateway.fail_close = True

        with pytest.raises(CreationError) as exc_info:
            orchestrator.create_one(gateway.tickets[5])

        assert exc_info.value.new_number is not None
        assert [e.new.number for e in store.read()] == [exc_info.value.new_number]

    def test_nothing_to_migrate(self, fake_gateway: FakeGateway, store: MappingStore) -> None:
        fake_gateway.add_ticket(number=1, title="x", author="someone-else")
        orchestrator = MigrationOrchestrator(fake_gateway, store, author="finalFlick")

        result = orchestrator.run(Mode.CREATE)

        assert result.plan is not None
        assert result.plan.nothing_to_migrate
        assert result.created == []
        assert not store.exists()

    def test_progress_callback(
        self, gateway: FakeGateway, orchestrator: MigrationOrchestrator
    ) -> None:
        messages: list[str] = []
        orchestrator.progress = messages.append

        orchestrator.run(Mode.CREATE)

        assert messages == ["Creating: #5 -> #100", "Creating: #6 -> #101"]


@pytest.mark.unit
class TestDryRun:
    """Tests for dry-run mode."""

    def test_preview_has_no_side_effects(
        self, gateway: FakeGateway, orchestrator: MigrationOrchestrator, store: MappingStore
    ) -> None:
        result = orchestrator.run(Mode.DRY_RUN)

        assert result.plan is not None
        assert [t.number for t in result.plan.pending] == [5, 6]
        assert result.created == []
        assert {name for name, _ in gateway.calls} == {"list_tickets"}
        assert not store.exists()
        assert result.preview == ["#5 [closed] Bug", "#6 [open] Feature"]

    def test_preview_skips_already_mapped(
        self, gateway: FakeGateway, orchestrator: MigrationOrchestrator
    ) -> None:
        orchestrator.create_one(gateway.tickets[5])

        result = orchestrator.run(Mode.DRY_RUN)

        assert result.preview == ["#6 [open] Feature"]


@pytest.mark.unit
class TestPostCreationModes:
    """Tests for the modes that need an existing mapping."""

    @pytest.mark.parametrize("mode", [Mode.COMMENTS, Mode.VERIFY, Mode.CLEAN_ATTRIBUTION])
    def test_missing_mapping_raises_before_remote_calls(
        self,
        gateway: FakeGateway,
        orchestrator: MigrationOrchestrator,
        tmp_path: Path,
        mode: Mode,
    ) -> None:
        with pytest.raises(MissingMappingError):
            orchestrator.run(mode, comment_log_path=tmp_path / "log.json")

        assert gateway.calls == []

    def test_full_cycle(
        self, gateway: FakeGateway, orchestrator: MigrationOrchestrator, tmp_path: Path
    ) -> None:
        for text in ("one", "two", "three"):
            gateway.add_comment(5, text)
        gateway.add_comment(19, "never copied")
        orchestrator.run(Mode.CREATE)

        first = orchestrator.run(Mode.COMMENTS, comment_log_path=tmp_path / "log.json")
        second = orchestrator.run(Mode.COMMENTS, comment_log_path=tmp_path / "log.json")

        assert first.comment_log is not None and second.comment_log is not None
        assert (first.comment_log.migrated, first.comment_log.skipped) == (3, 0)
        assert (second.comment_log.migrated, second.comment_log.skipped) == (0, 3)

        report_path = tmp_path / "report.json"
        verified = orchestrator.run(Mode.VERIFY, report_path=report_path)
        assert verified.report is not None and verified.report.passed
        assert not verified.verification_failed
        assert json.loads(report_path.read_text())["passed"] is True

        cleaned = orchestrator.run(Mode.CLEAN_ATTRIBUTION)
        assert cleaned.cleaned == 3
        assert orchestrator.run(Mode.CLEAN_ATTRIBUTION).cleaned == 0
        # Markers survive cleaning, so parity still holds
        assert orchestrator.run(Mode.VERIFY).report.passed  # type: ignore[union-attr]

    def test_verify_failure_flag(
        self, gateway: FakeGateway, orchestrator: MigrationOrchestrator
    ) -> None:
        orchestrator.run(Mode.CREATE)
        gateway.tickets[100].labels = ["bug", "extra"]

        result = orchestrator.run(Mode.VERIFY)

        assert result.verification_failed
        assert [(f.old, f.field) for f in result.report.findings] == [(5, "labels")]  # type: ignore[union-attr]
