"""Data models for the Ticket Gateway."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class TicketState(StrEnum):
    """Ticket state on the platform."""

    OPEN = "open"
    CLOSED = "closed"

    @classmethod
    def parse(cls, value: str | None) -> TicketState:
        """Parse a state case-insensitively ("CLOSED" from gh, "closed" from REST)."""
        return cls(str(value or "").lower())


def label_names(labels: list[Any] | None) -> list[str]:
    """Extract label names from an API payload.

    GitHub returns labels as plain strings or as objects with a ``name``
    key depending on the endpoint.
    """
    names = []
    for label in labels or []:
        name = label if isinstance(label, str) else (label or {}).get("name")
        if name:
            names.append(name)
    return names


@dataclass
class Ticket:
    """Represents a GitHub issue."""

    number: int
    title: str
    body: str = ""
    state: TicketState = TicketState.OPEN
    labels: list[str] = field(default_factory=list)
    milestone: int | None = None  # milestone number
    author: str = ""
    url: str = ""

    @property
    def label_set(self) -> set[str]:
        return set(self.labels)

    @property
    def is_closed(self) -> bool:
        return self.state == TicketState.CLOSED

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Ticket:
        """Build a Ticket from a REST issue payload."""
        milestone = data.get("milestone") or {}
        user = data.get("user") or data.get("author") or {}
        return cls(
            number=int(data["number"]),
            title=data.get("title") or "",
            body=data.get("body") or "",
            state=TicketState.parse(data.get("state")),
            labels=label_names(data.get("labels")),
            milestone=milestone.get("number"),
            author=user.get("login") or "",
            url=data.get("html_url") or "",
        )


@dataclass
class Comment:
    """A comment on a GitHub issue."""

    id: int
    body: str = ""
    author: str = ""
    created_at: str = ""
    url: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Comment:
        """Build a Comment from a REST issue comment payload."""
        user = data.get("user") or {}
        return cls(
            id=int(data["id"]),
            body=data.get("body") or "",
            author=user.get("login") or "",
            created_at=data.get("created_at") or "",
            url=data.get("html_url") or "",
        )
