"""Data models for the Parity Verifier."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

FIELDS = ("title", "body", "state", "milestone", "labels", "comments")


@dataclass
class Finding:
    """One field that differs between an old ticket and its new ticket."""

    old: int
    new: int
    field: str
    expected: Any = None
    got: Any = None

    def describe(self) -> str:
        """Human-readable one-liner, e.g. ``old #3 -> new #41: comments (expected 2, got 1)``."""
        text = f"old #{self.old} -> new #{self.new}: {self.field}"
        if self.expected is not None or self.got is not None:
            text += f" (expected {self.expected}, got {self.got})"
        return text

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"old": self.old, "new": self.new, "field": self.field}
        if self.expected is not None or self.got is not None:
            data["expected"] = self.expected
            data["got"] = self.got
        return data


@dataclass
class VerificationReport:
    """All findings of a verification run."""

    repo: str
    verified_at: str
    pairs_checked: int = 0
    findings: list[Finding] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.findings

    def to_dict(self) -> dict[str, Any]:
        return {
            "repo": self.repo,
            "verifiedAt": self.verified_at,
            "pairsChecked": self.pairs_checked,
            "passed": self.passed,
            "findings": [f.to_dict() for f in self.findings],
        }
