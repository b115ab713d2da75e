"""Mapping Store - Durable old→new ticket correspondence."""

from rehome.mapping_store.exceptions import (
    CorruptMappingError,
    DuplicateMappingError,
    MappingStoreError,
    MissingMappingError,
)
from rehome.mapping_store.models import MappingArtifact, MappingEntry, NewTicketRef, OldTicketRef
from rehome.mapping_store.store import MappingStore, now_iso, write_json_atomic

__all__ = [
    "CorruptMappingError",
    "DuplicateMappingError",
    "MappingArtifact",
    "MappingEntry",
    "MappingStore",
    "MappingStoreError",
    "MissingMappingError",
    "NewTicketRef",
    "OldTicketRef",
    "now_iso",
    "write_json_atomic",
]
