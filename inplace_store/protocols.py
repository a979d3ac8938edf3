from __future__ import annotations

from collections.abc import Sequence
from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from typing import BinaryIO, Protocol, runtime_checkable


@dataclass
class FixityClaim:
    """One integrity assertion on a stored file.

    Fields:
        - algorithm: Built-in algorithm name (MD5, SHA1, CRC32) or an opaque
          external plugin algorithm name
        - value: Declared value before verification, computed value afterwards.
          ``None`` means "no prior value to compare"
        - declared_value: Snapshot of ``value`` taken at construction; every
          verification compares against it
        - result: ``True``/``False`` once verified, ``None`` while unknown
        - plugin_name: Name the external plugin is registered under (defaults
          to ``algorithm``)
    """

    algorithm: str
    value: str | None = None
    result: bool | None = None
    plugin_name: str | None = None
    declared_value: str | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self.declared_value = self.value

    @property
    def resolved_plugin_name(self) -> str:
        return self.plugin_name or self.algorithm

    @property
    def computed_value(self) -> str | None:
        return self.value if self.result is not None else None

    @property
    def passed(self) -> bool | None:
        return self.result

    def reset(self) -> None:
        """Forget a previous verification outcome.

        ``declared_value`` is fixed at construction, so a repeated verification
        still compares against what the depositor declared.
        """
        self.result = None

    def record(self, computed: str, passed: bool) -> None:
        """Store a computed value and its outcome together."""
        self.value, self.result = computed, passed


@dataclass
class DepositRecord:
    """Metadata of one deposited file, supplied by the deposit workflow.

    Required fields:
        - entity_id: Unique per file within an intellectual entity
        - parent_id: Intellectual entity identifier
        - current_path: Path inside the repository tree (expected to be a symlink)

    Optional fields:
        - fixities: Declared fixity claims, verified and annotated in place
        - original_name: Deposit-time file name (used for the canonical suffix)
        - mime_type: Informational only
    """

    entity_id: str
    parent_id: str
    current_path: str
    fixities: list[FixityClaim] = field(default_factory=list)
    original_name: str | None = None
    mime_type: str | None = None


@runtime_checkable
class DestinationCache(Protocol):
    """Write-once store of ``(parent_id, entity_id) -> canonical path`` mappings."""

    def read(self, parent_id: str, entity_id: str) -> str | None:
        """Return the cached destination or None when the entity was never placed."""
        ...

    def write(self, parent_id: str, entity_id: str, path: str) -> None:
        """Persist a destination for an entity."""
        ...

    def lock(self, parent_id: str) -> AbstractContextManager:
        """Mutual exclusion for the read-then-write sequence of one parent entity."""
        ...


@runtime_checkable
class ChecksumPlugin(Protocol):
    """Externally supplied checksum algorithm, invoked by name."""

    name: str

    def compute(self, path: str, prior_value: str | None) -> str:
        """Compute the checksum of the file at ``path``."""
        ...


@runtime_checkable
class StorageHandler(Protocol):
    """Interface a repository host uses to place and read stored entities."""

    def store(self, stream: BinaryIO | None, record: DepositRecord) -> str: ...

    def retrieve(self, path: str) -> BinaryIO: ...

    def retrieve_range(self, path: str, start: int, end: int) -> bytes: ...

    def delete(self, path: str) -> bool: ...

    def check_fixity(self, claims: Sequence[FixityClaim] | None, path: str) -> bool: ...

    def get_full_file_path(self, identifier: str) -> str: ...

    def get_local_file_path(self, identifier: str) -> str: ...
