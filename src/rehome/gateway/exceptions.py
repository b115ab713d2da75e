"""Custom exceptions for the Ticket Gateway."""

from __future__ import annotations


class GatewayError(Exception):
    """Base exception for Ticket Gateway errors."""


class TicketNotFoundError(GatewayError):
    """Ticket with given number does not exist."""


class TransportError(GatewayError):
    """Request could not be completed or the response could not be parsed."""


class RateLimitError(GatewayError):
    """GitHub refused the request because a rate limit was exhausted."""

    def __init__(self, message: str, reset_at: int | None = None) -> None:
        super().__init__(message)
        self.reset_at = reset_at


class TokenError(GatewayError):
    """An installation or access token could not be obtained."""
