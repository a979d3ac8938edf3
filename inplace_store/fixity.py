"""Fixity verification.

Claims naming a built-in algorithm (MD5, SHA1, CRC32) are computed together
in a single streaming pass over the file. Any other algorithm name is handed
to the checksum plugin registered under that name, and each plugin reads the
file on its own.

The two groups compare values differently: built-in digests are compared
case-insensitively, plugin values exactly.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from inplace_store.checksum import ChecksumAlgorithm, Checksummer
from inplace_store.config import DEFAULT_CHUNK_SIZE
from inplace_store.errors import EntityNotFoundError, StorageIOError
from inplace_store.plugins import ChecksumPluginRegistry, default_registry
from inplace_store.protocols import FixityClaim

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuiltinAlgorithm:
    algorithm: ChecksumAlgorithm
    kind: str = "builtin"


@dataclass(frozen=True)
class ExternalAlgorithm:
    plugin_name: str
    kind: str = "external"


ResolvedAlgorithm = BuiltinAlgorithm | ExternalAlgorithm


def resolve_algorithm(claim: FixityClaim) -> ResolvedAlgorithm:
    """Classify a claim as built-in or plugin-backed."""
    builtin = ChecksumAlgorithm.lookup(claim.algorithm)
    if builtin is not None:
        return BuiltinAlgorithm(builtin)
    return ExternalAlgorithm(claim.resolved_plugin_name)


def _open_file(path: str) -> BinaryIO:
    try:
        return Path(path).open("rb")
    except FileNotFoundError:
        raise EntityNotFoundError(path) from None
    except OSError as exc:
        raise StorageIOError("open", path, exc) from exc


class FixityVerifier:
    """Validates or establishes fixity values for the file at a path.

    Args:
        plugins: Registry used for non built-in algorithms (defaults to the
            global registry)
        opener: Callable returning a binary stream for a path; the stream is
            always closed by the verifier
        chunk_size: Read size for the streaming pass
    """

    def __init__(
        self,
        plugins: ChecksumPluginRegistry | None = None,
        opener: Callable[[str], BinaryIO] | None = None,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        self.plugins = plugins if plugins is not None else default_registry()
        self._open = opener or _open_file
        self.chunk_size = chunk_size

    def verify(self, claims: Sequence[FixityClaim] | None, path: str) -> bool:
        """Verify every claim against the file at ``path``, annotating claims in place.

        Returns:
            True when every claim passed (or there were none)

        Raises:
            UnknownAlgorithmPluginError: If a non built-in algorithm has no plugin
            EntityNotFoundError: If the file does not exist
            StorageIOError: If the file cannot be opened or read
        """
        if not claims:
            return True

        path = str(path)
        builtin: list[tuple[FixityClaim, ChecksumAlgorithm]] = []
        external: list[tuple[FixityClaim, str]] = []
        for claim in claims:
            claim.reset()
            resolved = resolve_algorithm(claim)
            if isinstance(resolved, BuiltinAlgorithm):
                builtin.append((claim, resolved.algorithm))
            else:
                external.append((claim, resolved.plugin_name))

        all_passed = True
        for claim, plugin_name in external:
            all_passed &= self._verify_external(claim, plugin_name, path)

        if builtin:
            all_passed &= self._verify_builtin(builtin, path)

        return all_passed

    def _verify_external(self, claim: FixityClaim, plugin_name: str, path: str) -> bool:
        declared = claim.declared_value
        computed = self.plugins.compute(plugin_name, path, declared)
        passed = declared is None or declared == computed
        claim.record(computed, passed)
        self._log_claim(claim, path)
        return passed

    def _verify_builtin(
        self, claims: list[tuple[FixityClaim, ChecksumAlgorithm]], path: str
    ) -> bool:
        requested = [algorithm for _, algorithm in claims]
        stream = self._open(path)
        try:
            checksummer = Checksummer(stream, requested, chunk_size=self.chunk_size)
        except OSError as exc:
            raise StorageIOError("read", path, exc) from exc
        finally:
            stream.close()

        all_passed = True
        for claim, algorithm in claims:
            declared = claim.declared_value
            computed = checksummer.get_checksum(algorithm)
            passed = declared is None or declared.lower() == computed.lower()
            claim.record(computed, passed)
            self._log_claim(claim, path)
            all_passed &= passed
        return all_passed

    @staticmethod
    def _log_claim(claim: FixityClaim, path: str) -> None:
        if claim.result:
            logger.debug("Fixity %s ok for %s: %s", claim.algorithm, path, claim.value)
        else:
            logger.warning(
                "Fixity %s failed for %s: declared %s, computed %s",
                claim.algorithm,
                path,
                claim.declared_value,
                claim.value,
            )


def check_fixity(
    claims: Sequence[FixityClaim] | None,
    path: str,
    *,
    plugins: ChecksumPluginRegistry | None = None,
) -> bool:
    """Shortcut for ``FixityVerifier(plugins).verify(claims, path)``."""
    return FixityVerifier(plugins).verify(claims, path)
