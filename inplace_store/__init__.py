"""In-place repository storage with fixity verification."""

from __future__ import annotations

from typing import Any

from inplace_store.cache import InMemoryDestinationCache, JsonDestinationCache
from inplace_store.checksum import ChecksumAlgorithm, Checksummer
from inplace_store.destination import DestinationResolver
from inplace_store.errors import (
    DestinationConflictError,
    EntityNotFoundError,
    FixityMismatchError,
    InPlaceStoreError,
    InvalidIdentifierError,
    NotASymlinkError,
    RangeOutOfBoundsError,
    StorageIOError,
    UnknownAlgorithmPluginError,
)
from inplace_store.fixity import FixityVerifier
from inplace_store.plugins import (
    ChecksumPluginRegistry,
    HashlibChecksumPlugin,
    checksum_plugin,
    register_plugin,
)
from inplace_store.protocols import DepositRecord, FixityClaim
from inplace_store.storage import InPlaceStorageHandler

__version__ = "0.1.0"


def claims_to_frame(*args: Any, **kwargs: Any) -> Any:
    # Polars is only imported when a report is requested
    from inplace_store.report import claims_to_frame as _claims_to_frame

    return _claims_to_frame(*args, **kwargs)


__all__ = [
    "ChecksumAlgorithm",
    "ChecksumPluginRegistry",
    "Checksummer",
    "DepositRecord",
    "DestinationConflictError",
    "DestinationResolver",
    "EntityNotFoundError",
    "FixityClaim",
    "FixityMismatchError",
    "FixityVerifier",
    "HashlibChecksumPlugin",
    "InMemoryDestinationCache",
    "InPlaceStorageHandler",
    "InPlaceStoreError",
    "InvalidIdentifierError",
    "JsonDestinationCache",
    "NotASymlinkError",
    "RangeOutOfBoundsError",
    "StorageIOError",
    "UnknownAlgorithmPluginError",
    "checksum_plugin",
    "claims_to_frame",
    "register_plugin",
]
