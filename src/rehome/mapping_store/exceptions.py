"""Custom exceptions for the Mapping Store."""


class MappingStoreError(Exception):
    """Base exception for Mapping Store errors."""


class MissingMappingError(MappingStoreError):
    """Mapping file does not exist yet; the creation phase has not run."""


class CorruptMappingError(MappingStoreError):
    """Mapping file exists but does not hold an array of mapping entries."""


class DuplicateMappingError(MappingStoreError):
    """More than one entry for the same old ticket number."""
