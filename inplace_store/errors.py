"""Exception types raised by placement and fixity verification."""

from __future__ import annotations

from collections.abc import Iterable

from inplace_store._error_messages import (
    destination_conflict_error,
    fixity_failed_error,
    invalid_identifier_error,
    io_failure_error,
    not_a_symlink_error,
    range_out_of_bounds_error,
    unknown_plugin_error,
)


class InPlaceStoreError(Exception):
    """Base class for every error raised by inplace-store."""


class NotASymlinkError(InPlaceStoreError):
    """Raised when a path in the deposit link chain is not a symbolic link."""

    def __init__(self, path: str, entity_id: str | None = None):
        self.path = str(path)
        self.entity_id = entity_id
        super().__init__(not_a_symlink_error(self.path, entity_id))


class FixityMismatchError(InPlaceStoreError):
    """Raised when at least one declared fixity failed verification.

    The file has already been relocated to ``path`` when this is raised.
    """

    def __init__(self, entity_id: str, path: str, failed: Iterable[str] = ()):
        self.entity_id = entity_id
        self.path = str(path)
        self.failed = list(failed)
        super().__init__(fixity_failed_error(entity_id, self.path, self.failed))


class StorageIOError(InPlaceStoreError, OSError):
    """Raised when a filesystem operation (readlink, rename, open, read) fails."""

    def __init__(self, operation: str, path: str, cause: BaseException | None = None):
        self.operation = operation
        self.path = str(path)
        self.cause = cause
        errno = getattr(cause, "errno", None)
        super().__init__(errno, io_failure_error(operation, self.path, cause))

    def __str__(self) -> str:
        return io_failure_error(self.operation, self.path, self.cause)


class RangeOutOfBoundsError(InPlaceStoreError, ValueError):
    """Raised for invalid offsets passed to a byte-range read."""

    def __init__(self, path: str, start: int, end: int, size: int | None = None):
        self.path = str(path)
        self.start = start
        self.end = end
        self.size = size
        super().__init__(range_out_of_bounds_error(self.path, start, end, size))


class UnknownAlgorithmPluginError(InPlaceStoreError, KeyError):
    """Raised when a non built-in algorithm has no registered checksum plugin."""

    def __init__(self, name: str, available: Iterable[str] = ()):
        self.name = name
        self.available = sorted(available)
        super().__init__(unknown_plugin_error(name, self.available))

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]


class EntityNotFoundError(InPlaceStoreError, FileNotFoundError):
    """Raised when a stored entity cannot be found at its canonical path."""

    def __init__(self, path: str):
        self.path = str(path)
        super().__init__(f'Stored entity not found: "{self.path}"')

    def __str__(self) -> str:
        return self.args[0]


class DestinationConflictError(InPlaceStoreError):
    """Raised when a destination mapping would be overwritten with a different path."""

    def __init__(self, parent_id: str, entity_id: str, existing: str, new: str):
        self.parent_id = parent_id
        self.entity_id = entity_id
        self.existing = existing
        self.new = new
        super().__init__(destination_conflict_error(parent_id, entity_id, existing, new))


class InvalidIdentifierError(InPlaceStoreError, ValueError):
    """Raised when an entity or parent id cannot be turned into a file name."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(invalid_identifier_error(value))
