"""Comment migration - replaying comments and cleaning attribution headers."""

from rehome.comments.cleaner import AttributionCleaner
from rehome.comments.markers import (
    MARKER_PREFIX,
    build_marker,
    build_migrated_body,
    has_marker,
    marker_prefix,
    strip_attribution,
)
from rehome.comments.migrator import CommentMigrator
from rehome.comments.models import CommentMigrationLog, PairResult

__all__ = [
    "MARKER_PREFIX",
    "AttributionCleaner",
    "CommentMigrationLog",
    "CommentMigrator",
    "PairResult",
    "build_marker",
    "build_migrated_body",
    "has_marker",
    "marker_prefix",
    "strip_attribution",
]
