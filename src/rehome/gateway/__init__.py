"""Ticket Gateway - GitHub issues and issue comments over REST."""

from rehome.gateway.auth import resolve_token, run_token_command
from rehome.gateway.client import DEFAULT_PAGE_SIZE, TicketGateway
from rehome.gateway.exceptions import (
    GatewayError,
    RateLimitError,
    TicketNotFoundError,
    TokenError,
    TransportError,
)
from rehome.gateway.models import Comment, Ticket, TicketState, label_names

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "Comment",
    "GatewayError",
    "RateLimitError",
    "Ticket",
    "TicketGateway",
    "TicketNotFoundError",
    "TicketState",
    "TokenError",
    "TransportError",
    "label_names",
    "resolve_token",
    "run_token_command",
]
