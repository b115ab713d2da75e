"""Orchestrator package - Migration selection, creation and phase dispatch."""

from rehome.orchestrator.exceptions import CreationError, OrchestratorError
from rehome.orchestrator.models import CreationPlan, Mode, RunResult
from rehome.orchestrator.orchestrator import MigrationOrchestrator

__all__ = [
    "CreationError",
    "CreationPlan",
    "MigrationOrchestrator",
    "Mode",
    "OrchestratorError",
    "RunResult",
]
