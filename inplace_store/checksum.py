"""Single-pass checksum computation for the built-in fixity algorithms."""

from __future__ import annotations

import hashlib
import zlib
from collections.abc import Iterable
from enum import Enum
from pathlib import Path
from typing import BinaryIO

from inplace_store.config import DEFAULT_CHUNK_SIZE


class ChecksumAlgorithm(Enum):
    """Closed set of algorithms computed in-process."""

    MD5 = "md5"
    SHA1 = "sha1"
    CRC32 = "crc32"

    @classmethod
    def lookup(cls, name: str | None) -> ChecksumAlgorithm | None:
        """Return the member named exactly ``name`` (case-sensitive), else None."""
        if name is None:
            return None
        return cls.__members__.get(name)


class _Crc32:
    """hashlib-style wrapper around zlib.crc32."""

    def __init__(self) -> None:
        self._value = 0

    def update(self, chunk: bytes) -> None:
        self._value = zlib.crc32(chunk, self._value)

    def hexdigest(self) -> str:
        return f"{self._value & 0xFFFFFFFF:08x}"


def _new_hasher(algorithm: ChecksumAlgorithm):
    if algorithm is ChecksumAlgorithm.CRC32:
        return _Crc32()
    return hashlib.new(algorithm.value)


class Checksummer:
    """Compute every requested digest from one pass over ``stream``.

    The stream is consumed on construction. Only the requested algorithms are
    computed; asking for any other one raises ``KeyError``.

    Example:
        >>> with open(path, "rb") as fh:
        ...     checksummer = Checksummer(fh, [ChecksumAlgorithm.MD5, ChecksumAlgorithm.CRC32])
        >>> checksummer.get_checksum("MD5")
        '5d41402abc4b2a76b9719d911017c592'
    """

    def __init__(
        self,
        stream: BinaryIO,
        algorithms: Iterable[ChecksumAlgorithm],
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        requested = list(dict.fromkeys(algorithms))
        hashers = {algorithm: _new_hasher(algorithm) for algorithm in requested}
        self.bytes_read = 0
        if hashers:
            for chunk in iter(lambda: stream.read(chunk_size), b""):
                self.bytes_read += len(chunk)
                for hasher in hashers.values():
                    hasher.update(chunk)
        self._digests = {algorithm: hasher.hexdigest() for algorithm, hasher in hashers.items()}

    @property
    def algorithms(self) -> list[ChecksumAlgorithm]:
        return list(self._digests)

    @property
    def checksums(self) -> dict[str, str]:
        return {algorithm.name: digest for algorithm, digest in self._digests.items()}

    def get_checksum(self, algorithm: ChecksumAlgorithm | str) -> str:
        if isinstance(algorithm, ChecksumAlgorithm):
            key = algorithm
        else:
            key = ChecksumAlgorithm.lookup(algorithm)
        if key is None or key not in self._digests:
            raise KeyError(
                f"Checksum '{algorithm}' was not computed. "
                f"Computed: {sorted(self.checksums)}"
            )
        return self._digests[key]


def compute_checksums(
    path: str | Path,
    algorithms: Iterable[ChecksumAlgorithm],
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> dict[str, str]:
    """Open ``path`` once and return ``{algorithm name: digest}``."""
    with Path(path).open("rb") as handle:
        return Checksummer(handle, algorithms, chunk_size=chunk_size).checksums
