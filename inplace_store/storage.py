"""In-place storage handler: adopt deposited files where they lie, then verify them."""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from pathlib import Path
from typing import BinaryIO

from inplace_store.cache import JsonDestinationCache
from inplace_store.config import Settings, load_settings
from inplace_store.destination import DestinationResolver
from inplace_store.errors import (
    EntityNotFoundError,
    FixityMismatchError,
    InPlaceStoreError,
    RangeOutOfBoundsError,
    StorageIOError,
)
from inplace_store.fixity import FixityVerifier
from inplace_store.protocols import DepositRecord, DestinationCache, FixityClaim

logger = logging.getLogger(__name__)


class InPlaceStorageHandler:
    """
    Storage handler that never copies bytes.

    ``store`` relocates the deposited file behind the record's symlink chain
    to its canonical name and verifies its fixities there. Stored entity
    identifiers are plain filesystem paths.
    """

    def __init__(
        self,
        cache: DestinationCache,
        verifier: FixityVerifier | None = None,
        resolver: DestinationResolver | None = None,
    ):
        self.cache = cache
        self.verifier = verifier or FixityVerifier()
        self.resolver = resolver or DestinationResolver(cache)

    @classmethod
    def from_config(
        cls,
        settings: Settings | None = None,
        verifier: FixityVerifier | None = None,
    ) -> InPlaceStorageHandler:
        """Build a handler whose destination cache lives under the temp storage dir."""
        settings = settings or load_settings()
        cache = JsonDestinationCache(settings.dest_path_dir, lock_timeout=settings.lock_timeout)
        return cls(cache, verifier or FixityVerifier(chunk_size=settings.chunk_size))

    def store(self, stream: BinaryIO | None, record: DepositRecord) -> str:
        """Place the deposited file and verify its fixities.

        ``stream`` is accepted for host compatibility and not read: the
        content is already on disk behind ``record.current_path``.

        Raises:
            NotASymlinkError: If the deposit link chain is broken
            FixityMismatchError: If any declared fixity failed (the file stays relocated)
            StorageIOError: On rename/open/read failures
        """
        try:
            destination = self.resolver.resolve_record(record)
            if not self.check_fixity(record.fixities, destination):
                failed = [c.algorithm for c in record.fixities if c.result is False]
                raise FixityMismatchError(record.entity_id, destination, failed)
        except InPlaceStoreError as exc:
            logger.error(str(exc))
            raise
        return destination

    def retrieve(self, path: str) -> BinaryIO:
        try:
            return Path(path).open("rb")
        except FileNotFoundError:
            raise EntityNotFoundError(path) from None
        except OSError as exc:
            raise StorageIOError("open", path, exc) from exc

    def retrieve_range(self, path: str, start: int, end: int) -> bytes:
        """Read bytes ``start..end`` (both inclusive).

        Raises:
            RangeOutOfBoundsError: If start < 0, end < start, or the range passes EOF
            EntityNotFoundError: If the file does not exist
        """
        if start < 0 or end < start:
            raise RangeOutOfBoundsError(path, start, end)

        length = end - start + 1
        size = None
        handle = self.retrieve(path)
        try:
            try:
                handle.seek(start)
                data = handle.read(length)
                if len(data) != length:
                    size = os.fstat(handle.fileno()).st_size
            except OSError as exc:
                raise StorageIOError("read", path, exc) from exc
        finally:
            try:
                handle.close()
            except OSError:
                logger.warning("Failed closing file %s", path)

        if len(data) != length:
            # short read: the range runs past EOF
            raise RangeOutOfBoundsError(path, start, end, size)
        return data

    def delete(self, path: str) -> bool:
        """Best-effort unlink; returns False instead of raising."""
        try:
            Path(path).unlink()
        except OSError as exc:
            logger.warning("Failed to delete entity file : %s (%s)", path, exc)
            return False
        return True

    def check_fixity(self, claims: Sequence[FixityClaim] | None, path: str) -> bool:
        return self.verifier.verify(claims, path)

    def get_full_file_path(self, identifier: str) -> str:
        return identifier

    def get_local_file_path(self, identifier: str) -> str:
        return self.get_full_file_path(identifier)
