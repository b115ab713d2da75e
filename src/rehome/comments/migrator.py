"""CommentMigrator - Replays source comments onto migrated tickets."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

from rehome.comments.markers import build_marker, build_migrated_body
from rehome.comments.models import CommentMigrationLog, PairResult
from rehome.mapping_store import now_iso, write_json_atomic

if TYPE_CHECKING:
    from rehome.gateway import TicketGateway
    from rehome.mapping_store import MappingEntry

logger = logging.getLogger("rehome.comments")


class CommentMigrator:
    """Copies comments from old tickets to their mapped new tickets.

    Re-running is safe: a source comment counts as migrated when any
    destination comment contains its marker, so only missing comments are
    created. A human edit that removes a marker makes the comment look
    missing and it will be replayed again.
    """

    def __init__(self, gateway: TicketGateway, exclusions: Iterable[int] = ()) -> None:
        """Initialize the migrator.

        Args:
            gateway: TicketGateway for the repository
            exclusions: Old ticket numbers that are never touched
        """
        self.gateway = gateway
        self.exclusions = frozenset(exclusions)

    def migrate_pair(self, entry: MappingEntry) -> PairResult | None:
        """Replay missing comments for one mapped pair.

        Returns:
            Counts for the pair, or None if the source ticket has no comments
        """
        old_num, new_num = entry.old.number, entry.new.number

        source = self.gateway.list_all_comments(old_num)
        if not source:
            logger.debug("Ticket #%d has no comments, skipping", old_num)
            return None

        existing = [c.body for c in self.gateway.list_all_comments(new_num)]
        result = PairResult(old=old_num, new=new_num, total=len(source))

        for comment in source:
            marker = build_marker(old_num, comment.id)
            if any(marker in body for body in existing):
                result.skipped += 1
                continue

            body = build_migrated_body(old_num, comment)
            self.gateway.create_comment(new_num, body)
            existing.append(body)
            result.migrated += 1

        logger.info(
            "Comments #%d -> #%d: %d migrated, %d skipped, %d total",
            old_num,
            new_num,
            result.migrated,
            result.skipped,
            result.total,
        )
        return result

    def migrate(self, entries: Iterable[MappingEntry]) -> list[PairResult]:
        """Replay comments for every mapped pair, one pair at a time."""
        results = []
        for entry in entries:
            if entry.old.number in self.exclusions:
                logger.debug("Ticket #%d is excluded, skipping", entry.old.number)
                continue
            result = self.migrate_pair(entry)
            if result is not None:
                results.append(result)
        return results

    def write_log(self, path: Path, repo: str, pairs: list[PairResult]) -> CommentMigrationLog:
        """Write the migration report, replacing any previous one."""
        log = CommentMigrationLog(repo=repo, migrated_at=now_iso(), pairs=pairs)
        write_json_atomic(path, log.to_dict())
        logger.info("Wrote comment migration log: %s", path)
        return log
