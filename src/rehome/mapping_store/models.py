"""Data models for the Mapping Store."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class OldTicketRef:
    """The source side of a mapping entry."""

    number: int
    title: str = ""
    state: str = ""


@dataclass
class NewTicketRef:
    """The destination side of a mapping entry."""

    number: int
    url: str = ""


@dataclass
class MappingEntry:
    """Durable record that old ticket ``old.number`` became ``new.number``."""

    old: OldTicketRef
    new: NewTicketRef

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MappingEntry:
        """Create from dictionary.

        Raises:
            KeyError, TypeError, ValueError: If the numbers are missing or malformed.
        """
        old = data["old"]
        new = data["new"]
        for number in (old["number"], new["number"]):
            if not isinstance(number, int) or isinstance(number, bool):
                raise TypeError(f"ticket number {number!r} is not an integer")
            if number <= 0:
                raise ValueError("ticket numbers must be positive")
        return cls(
            old=OldTicketRef(
                number=old["number"],
                title=old.get("title") or "",
                state=old.get("state") or "",
            ),
            new=NewTicketRef(
                number=new["number"],
                url=new.get("url") or "",
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the on-disk shape."""
        return {
            "old": {"number": self.old.number, "title": self.old.title, "state": self.old.state},
            "new": {"number": self.new.number, "url": self.new.url},
        }


@dataclass
class MappingArtifact:
    """Contents of the mapping file."""

    repo: str
    migrated_at: str
    mapping: list[MappingEntry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "repo": self.repo,
            "migratedAt": self.migrated_at,
            "mapping": [entry.to_dict() for entry in self.mapping],
        }
