"""MappingStore - Durable old→new ticket correspondence on disk."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from rehome.mapping_store.exceptions import (
    CorruptMappingError,
    DuplicateMappingError,
    MissingMappingError,
)
from rehome.mapping_store.models import MappingArtifact, MappingEntry

logger = logging.getLogger("rehome.mapping_store")


def now_iso() -> str:
    """Current UTC time as an ISO-8601 string with a ``Z`` suffix."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def write_json_atomic(path: Path, data: Any) -> None:
    """Write JSON so that readers see either the old file or the complete new one.

    The document is written to a temporary file in the same directory,
    flushed to disk and then renamed over ``path``.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.write("\n")
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def _check_unique(entries: list[MappingEntry]) -> None:
    seen: set[int] = set()
    for entry in entries:
        if entry.old.number in seen:
            raise DuplicateMappingError(
                f"Ticket #{entry.old.number} already has a mapping entry"
            )
        seen.add(entry.old.number)


class MappingStore:
    """The single source of truth correlating old and new tickets.

    One instance is created per invocation and handed to every phase.
    """

    def __init__(self, path: str | Path, repo: str) -> None:
        """Initialize the store.

        Args:
            path: Location of the mapping JSON file
            repo: GitHub repo in "owner/repo" format, recorded in the file
        """
        self.path = Path(path)
        self.repo = repo

    def exists(self) -> bool:
        return self.path.exists()

    def write(self, entries: list[MappingEntry]) -> MappingArtifact:
        """Persist the full set of entries as one atomic artifact.

        Raises:
            DuplicateMappingError: If two entries share an old ticket number
        """
        _check_unique(entries)
        artifact = MappingArtifact(repo=self.repo, migrated_at=now_iso(), mapping=list(entries))
        write_json_atomic(self.path, artifact.to_dict())
        logger.info("Wrote %d mapping entr(ies) to %s", len(entries), self.path)
        return artifact

    def append(self, entry: MappingEntry) -> MappingArtifact:
        """Add one entry and rewrite the artifact.

        A missing file is treated as an empty mapping.

        Raises:
            DuplicateMappingError: If the old ticket is already mapped
            CorruptMappingError: If the existing file is invalid
        """
        entries = self.read() if self.exists() else []
        return self.write([*entries, entry])

    def read_artifact(self) -> MappingArtifact:
        """Load and validate the mapping file.

        Raises:
            MissingMappingError: If the file does not exist
            CorruptMappingError: If the file is not a valid mapping artifact
        """
        if not self.path.exists():
            raise MissingMappingError(
                f"Mapping file not found: {self.path}\n"
                "Run the issue migration first to generate it."
            )

        try:
            with open(self.path, encoding="utf-8-sig") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise CorruptMappingError(f"Invalid mapping file {self.path}: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("mapping"), list):
            raise CorruptMappingError(
                f'Invalid mapping file {self.path}: missing "mapping" array.'
            )

        entries = []
        for index, raw in enumerate(data["mapping"]):
            try:
                entries.append(MappingEntry.from_dict(raw))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                raise CorruptMappingError(
                    f"Invalid mapping file {self.path}: entry {index} is malformed ({e})"
                ) from e

        try:
            _check_unique(entries)
        except DuplicateMappingError as e:
            raise CorruptMappingError(f"Invalid mapping file {self.path}: {e}") from e

        return MappingArtifact(
            repo=str(data.get("repo") or self.repo),
            migrated_at=str(data.get("migratedAt") or ""),
            mapping=entries,
        )

    def read(self) -> list[MappingEntry]:
        """Load the mapping entries. See read_artifact for errors."""
        entries = self.read_artifact().mapping
        logger.debug("Loaded %d mapping entr(ies) from %s", len(entries), self.path)
        return entries
