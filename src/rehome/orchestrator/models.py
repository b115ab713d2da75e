"""Data models for the Orchestrator module."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rehome.comments import CommentMigrationLog
    from rehome.gateway import Ticket
    from rehome.mapping_store import MappingEntry
    from rehome.verifier import VerificationReport


class Mode(StrEnum):
    """What an invocation does."""

    CREATE = "create"
    DRY_RUN = "dry_run"
    COMMENTS = "comments"
    VERIFY = "verify"
    CLEAN_ATTRIBUTION = "clean_attribution"

    @property
    def needs_mapping(self) -> bool:
        return self in (Mode.COMMENTS, Mode.VERIFY, Mode.CLEAN_ATTRIBUTION)


@dataclass
class CreationPlan:
    """Tickets selected for migration.

    Attributes:
        selected: Every ticket matching the author filter, minus exclusions.
        pending: Selected tickets that still need a destination ticket.
        already_mapped: Selected tickets that a previous run already created.
    """

    selected: list[Ticket] = field(default_factory=list)
    pending: list[Ticket] = field(default_factory=list)
    already_mapped: list[Ticket] = field(default_factory=list)

    @property
    def nothing_to_migrate(self) -> bool:
        return not self.selected


@dataclass
class RunResult:
    """Outcome of one invocation; only the fields of the chosen mode are set."""

    mode: Mode
    plan: CreationPlan | None = None
    created: list[MappingEntry] = field(default_factory=list)
    preview: list[str] = field(default_factory=list)
    comment_log: CommentMigrationLog | None = None
    cleaned: int = 0
    report: VerificationReport | None = None

    @property
    def verification_failed(self) -> bool:
        return self.report is not None and not self.report.passed
