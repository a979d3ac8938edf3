"""Destination resolution for deposited files.

The deposit process leaves two symbolic links in front of every file::

    <repository tree path>  ->  <deposit area path>  ->  <real file>

Resolution follows both links, renames the real file (same directory,
canonical name) and records the new path in the destination cache. The cache
entry is what makes later calls idempotent: once it exists the link chain is
never inspected again.
"""

from __future__ import annotations

import hashlib
import logging
import os
from pathlib import Path, PurePath

from inplace_store.cache import safe_key
from inplace_store.errors import NotASymlinkError, StorageIOError
from inplace_store.protocols import DepositRecord, DestinationCache

logger = logging.getLogger(__name__)


def create_file_name(
    entity_id: str,
    source_name: str | None = None,
    *,
    current_name: str | None = None,
) -> str:
    """Canonical file name: sanitized entity id plus the original suffix.

    A short digest of the raw id is appended when sanitizing changed the id,
    or when the plain name is the one the file already carries
    (``current_name``). Distinct ids never share a canonical name.
    """
    suffix = PurePath(source_name).suffix if source_name else ""
    stem = safe_key(entity_id)
    name = f"{stem}{suffix}"
    if stem != entity_id or name == current_name:
        digest = hashlib.sha1(entity_id.encode("utf-8")).hexdigest()[:8]
        name = f"{stem}-{digest}{suffix}"
    return name


def _read_link(link: Path) -> Path:
    try:
        target = Path(os.readlink(link))
    except OSError as exc:
        raise StorageIOError("readlink", str(link), exc) from exc
    if not target.is_absolute():
        target = link.parent / target
    return target


class DestinationResolver:
    """Turns a deposit-time symlink chain into one canonical path, once per entity."""

    def __init__(self, cache: DestinationCache):
        self.cache = cache

    def resolve_record(self, record: DepositRecord) -> str:
        return self.resolve(
            record.parent_id,
            record.entity_id,
            record.current_path,
            original_name=record.original_name,
        )

    def resolve(
        self,
        parent_id: str,
        entity_id: str,
        current_path: str,
        *,
        original_name: str | None = None,
    ) -> str:
        """Return the canonical path of an entity, relocating the file on first call.

        Raises:
            NotASymlinkError: If either link in the chain is not a symlink
            StorageIOError: If reading a link or renaming the file fails
        """
        with self.cache.lock(parent_id):
            cached = self.cache.read(parent_id, entity_id)
            if cached is not None:
                logger.debug(
                    "Destination of %s/%s already resolved: %s", parent_id, entity_id, cached
                )
                return cached

            repository_link = Path(current_path)
            if not repository_link.is_symlink():
                raise NotASymlinkError(str(repository_link.absolute()), entity_id)

            deposit_link = _read_link(repository_link)
            if not deposit_link.is_symlink():
                raise NotASymlinkError(str(deposit_link.absolute()), entity_id)

            original_file = _read_link(deposit_link)
            new_name = create_file_name(
                entity_id,
                original_name or original_file.name,
                current_name=original_file.name,
            )
            destination = (original_file.parent / new_name).absolute()

            self._rename(original_file, destination)
            self.cache.write(parent_id, entity_id, str(destination))

        logger.info("Placed %s/%s at %s (was %s)", parent_id, entity_id, destination, original_file)
        return str(destination)

    @staticmethod
    def _rename(source: Path, destination: Path) -> None:
        if source == destination:
            return
        if destination.exists() or destination.is_symlink():
            raise StorageIOError(
                "rename",
                str(source),
                FileExistsError(f"destination already exists: {destination}"),
            )
        try:
            os.rename(source, destination)
        except OSError as exc:
            raise StorageIOError("rename", str(source), exc) from exc
