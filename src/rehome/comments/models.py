"""Data models for comment migration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class PairResult:
    """Outcome of replaying one ticket's comments."""

    old: int
    new: int
    migrated: int = 0
    skipped: int = 0
    total: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "old": self.old,
            "new": self.new,
            "migrated": self.migrated,
            "skipped": self.skipped,
            "total": self.total,
        }


@dataclass
class CommentMigrationLog:
    """Report of a comment migration run. Overwritten on every run."""

    repo: str
    migrated_at: str
    pairs: list[PairResult] = field(default_factory=list)

    @property
    def migrated(self) -> int:
        return sum(p.migrated for p in self.pairs)

    @property
    def skipped(self) -> int:
        return sum(p.skipped for p in self.pairs)

    def to_dict(self) -> dict[str, Any]:
        return {
            "repo": self.repo,
            "migratedAt": self.migrated_at,
            "pairs": [p.to_dict() for p in self.pairs],
        }
