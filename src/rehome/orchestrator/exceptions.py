"""Exceptions for the Orchestrator module."""


class OrchestratorError(Exception):
    """Base exception for orchestrator errors."""


class CreationError(OrchestratorError):
    """A destination ticket could not be created or closed.

    Tickets created earlier in the same run stay live and stay mapped.
    """

    def __init__(self, message: str, old_number: int, new_number: int | None = None) -> None:
        super().__init__(message)
        self.old_number = old_number
        self.new_number = new_number
