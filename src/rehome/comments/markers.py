"""Migration markers and replayed comment bodies.

A replayed comment starts with an HTML comment naming the source ticket
and source comment id. The marker is invisible when rendered and is the
only thing used to decide whether a source comment was already replayed.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rehome.gateway import Comment

MARKER_PREFIX = "<!-- migrated-from:issue#"
MARKER_PATTERN = r"<!-- migrated-from:issue#\d+ comment:\d+ -->"

DEFAULT_WEB_URL = "https://github.com"


def build_marker(old_number: int, comment_id: int) -> str:
    """Marker identifying source comment ``comment_id`` of ticket ``old_number``."""
    return f"{MARKER_PREFIX}{old_number} comment:{comment_id} -->"


def marker_prefix(old_number: int) -> str:
    """Common prefix of every marker that references ``old_number``."""
    return f"{MARKER_PREFIX}{old_number} comment:"


def has_marker(body: str) -> bool:
    return MARKER_PREFIX in body


def build_migrated_body(old_number: int, comment: Comment) -> str:
    """Body for the destination copy of a source comment.

    Marker line, attribution blockquote (author/date and source URL), a
    blank line, then the original body verbatim.
    """
    return "\n".join(
        [
            build_marker(old_number, comment.id),
            f"> *Originally posted by @{comment.author or 'unknown'} "
            f"on {comment.created_at or 'unknown-date'}*",
            f"> Source: {comment.url or 'unknown-url'}",
            "",
            comment.body,
        ]
    )


def attribution_pattern(web_url: str = DEFAULT_WEB_URL) -> re.Pattern[str]:
    """Anchored pattern matching a marker line followed by its attribution block."""
    return re.compile(
        rf"^({MARKER_PATTERN}\n)"
        r"> \*Originally posted by @.+ on .+\*\n"
        rf"> Source: {re.escape(web_url.rstrip('/'))}/.+\n\n"
    )


def strip_attribution(body: str, web_url: str = DEFAULT_WEB_URL) -> str:
    """Remove the attribution block, keeping the marker and the original content.

    Bodies that do not start with the marker-then-attribution shape are
    returned unchanged.
    """
    return attribution_pattern(web_url).sub(r"\1\n", body, count=1)
