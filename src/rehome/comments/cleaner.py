"""AttributionCleaner - Strips attribution headers from replayed comments."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from rehome.comments.markers import DEFAULT_WEB_URL, has_marker, strip_attribution

if TYPE_CHECKING:
    from rehome.gateway import TicketGateway
    from rehome.mapping_store import MappingEntry

logger = logging.getLogger("rehome.comments.cleaner")


class AttributionCleaner:
    """Rewrites replayed comments to drop the "Originally posted by" block.

    Only destination tickets are read and written. The marker stays in
    place so the comment migrator and the verifier keep recognising the
    comment.
    """

    def __init__(
        self,
        gateway: TicketGateway,
        exclusions: Iterable[int] = (),
        web_url: str = DEFAULT_WEB_URL,
    ) -> None:
        self.gateway = gateway
        self.exclusions = frozenset(exclusions)
        self.web_url = web_url

    def clean_ticket(self, number: int) -> int:
        """Clean every replayed comment on one destination ticket.

        Returns:
            Number of comments updated
        """
        cleaned = 0
        for comment in self.gateway.list_all_comments(number):
            if not has_marker(comment.body):
                continue
            new_body = strip_attribution(comment.body, self.web_url)
            if new_body == comment.body:
                continue
            logger.info("Cleaning comment on issue #%d (comment ID: %d)", number, comment.id)
            self.gateway.update_comment(comment.id, new_body)
            cleaned += 1
        return cleaned

    def clean(self, entries: Iterable[MappingEntry]) -> int:
        """Clean all destination tickets in the mapping.

        Returns:
            Total number of comments updated
        """
        total = 0
        for entry in entries:
            if entry.old.number in self.exclusions:
                continue
            total += self.clean_ticket(entry.new.number)
        return total
