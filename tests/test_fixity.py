"""Tests for fixity verification."""

import io

import pytest

from inplace_store.checksum import ChecksumAlgorithm
from inplace_store.errors import EntityNotFoundError, StorageIOError, UnknownAlgorithmPluginError
from inplace_store.fixity import (
    BuiltinAlgorithm,
    ExternalAlgorithm,
    FixityVerifier,
    check_fixity,
    resolve_algorithm,
)
from inplace_store.plugins import ChecksumPluginRegistry, FunctionChecksumPlugin
from inplace_store.protocols import FixityClaim

HELLO_MD5 = "5d41402abc4b2a76b9719d911017c592"
HELLO_SHA1 = "aaf4c61ddcc5e8a2dabede0f3b482cd9aea9434d"
HELLO_CRC32 = "3610a686"


class CountingOpener:
    """Opener that records how many times the file was opened."""

    def __init__(self) -> None:
        self.opened: list[str] = []
        self.streams: list[io.BufferedReader] = []

    def __call__(self, path: str):
        self.opened.append(path)
        stream = open(path, "rb")  # noqa: SIM115
        self.streams.append(stream)
        return stream


class FailingStream(io.BytesIO):
    def read(self, size=-1):
        raise OSError("disk on fire")


def _plugins(**values: str) -> ChecksumPluginRegistry:
    registry = ChecksumPluginRegistry()
    for name, value in values.items():
        registry.register(FunctionChecksumPlugin(name, lambda path, prior, v=value: v))
    return registry


@pytest.fixture
def hello_file(tmp_path):
    path = tmp_path / "payload.bin"
    path.write_bytes(b"hello")
    return str(path)


def test_resolve_algorithm_is_tagged():
    assert resolve_algorithm(FixityClaim("MD5")) == BuiltinAlgorithm(ChecksumAlgorithm.MD5)
    assert resolve_algorithm(FixityClaim("SHA256")) == ExternalAlgorithm("SHA256")
    assert resolve_algorithm(FixityClaim("X", plugin_name="x-plugin")) == ExternalAlgorithm(
        "x-plugin"
    )


def test_no_claims_pass(hello_file):
    assert FixityVerifier(_plugins()).verify(None, hello_file) is True
    assert FixityVerifier(_plugins()).verify([], hello_file) is True


def test_builtin_claims_match(hello_file):
    claims = [
        FixityClaim("MD5", HELLO_MD5),
        FixityClaim("SHA1", HELLO_SHA1),
        FixityClaim("CRC32", HELLO_CRC32),
    ]

    assert FixityVerifier(_plugins()).verify(claims, hello_file) is True
    assert [c.result for c in claims] == [True, True, True]
    assert [c.computed_value for c in claims] == [HELLO_MD5, HELLO_SHA1, HELLO_CRC32]


def test_builtin_mismatch_fails(hello_file):
    claim = FixityClaim("MD5", "deadbeef")

    assert FixityVerifier(_plugins()).verify([claim], hello_file) is False
    assert claim.result is False
    assert claim.declared_value == "deadbeef"
    assert claim.value == HELLO_MD5


def test_builtin_comparison_ignores_case(hello_file):
    claim = FixityClaim("MD5", HELLO_MD5.upper())

    assert FixityVerifier(_plugins()).verify([claim], hello_file) is True
    assert claim.value == HELLO_MD5


def test_external_comparison_is_exact(hello_file):
    claim = FixityClaim("XSUM", "ABCD")

    assert FixityVerifier(_plugins(XSUM="abcd")).verify([claim], hello_file) is False
    assert claim.result is False
    assert claim.value == "abcd"


def test_external_exact_match_passes(hello_file):
    claim = FixityClaim("XSUM", "abcd")
    assert FixityVerifier(_plugins(XSUM="abcd")).verify([claim], hello_file) is True


def test_absent_declared_value_is_accepted(hello_file):
    builtin = FixityClaim("SHA1")
    external = FixityClaim("XSUM")

    assert FixityVerifier(_plugins(XSUM="abcd")).verify([builtin, external], hello_file) is True
    assert builtin.result is True
    assert builtin.value == HELLO_SHA1
    assert external.result is True
    assert external.value == "abcd"


def test_plugin_receives_path_and_declared_value(hello_file):
    calls = []
    registry = ChecksumPluginRegistry()

    def spy(path, prior_value):
        calls.append((path, prior_value))
        return "computed"

    registry.register(FunctionChecksumPlugin("SPY", spy))
    FixityVerifier(registry).verify([FixityClaim("SPY", "declared")], hello_file)

    assert calls == [(hello_file, "declared")]


def test_plugin_name_overrides_algorithm(hello_file):
    claim = FixityClaim("SHA-256", None, plugin_name="sha256-plugin")
    registry = _plugins(**{"sha256-plugin": "v"})

    assert FixityVerifier(registry).verify([claim], hello_file) is True
    assert claim.value == "v"


def test_file_is_opened_once_for_many_builtin_algorithms(hello_file):
    opener = CountingOpener()
    claims = [FixityClaim("MD5"), FixityClaim("SHA1"), FixityClaim("CRC32"), FixityClaim("MD5")]

    assert FixityVerifier(_plugins(), opener=opener).verify(claims, hello_file) is True
    assert opener.opened == [hello_file]
    assert all(stream.closed for stream in opener.streams)
    assert claims[0].value == claims[3].value == HELLO_MD5


def test_file_is_not_opened_without_builtin_claims(hello_file):
    opener = CountingOpener()

    FixityVerifier(_plugins(XSUM="x"), opener=opener).verify([FixityClaim("XSUM")], hello_file)
    assert opener.opened == []


def test_stream_closed_when_checksum_fails(hello_file):
    stream = FailingStream(b"hello")
    verifier = FixityVerifier(_plugins(), opener=lambda path: stream)

    with pytest.raises(StorageIOError) as exc_info:
        verifier.verify([FixityClaim("MD5")], hello_file)

    assert stream.closed
    assert exc_info.value.operation == "read"


def test_overall_result_is_conjunction(hello_file):
    claims = [
        FixityClaim("MD5", HELLO_MD5),
        FixityClaim("XSUM", "wrong"),
        FixityClaim("CRC32", HELLO_CRC32),
    ]

    assert FixityVerifier(_plugins(XSUM="right")).verify(claims, hello_file) is False
    # every claim is still annotated
    assert [c.result for c in claims] == [True, False, True]


def test_unknown_plugin_raises_and_leaves_claim_unknown(hello_file):
    claim = FixityClaim("NOPE", "x", result=True)

    with pytest.raises(UnknownAlgorithmPluginError):
        FixityVerifier(_plugins()).verify([claim], hello_file)

    # stale result was cleared and nothing was recorded
    assert claim.result is None
    assert claim.computed_value is None
    assert claim.value == "x"


def test_stale_result_is_reset_before_verification(hello_file):
    claim = FixityClaim("MD5", "deadbeef", result=True)

    assert FixityVerifier(_plugins()).verify([claim], hello_file) is False
    assert claim.result is False


def test_repeated_verification_compares_against_declared_value(hello_file):
    claims = [FixityClaim("MD5", "deadbeef"), FixityClaim("SHA256", "feedface")]
    verifier = FixityVerifier(_plugins(SHA256="cafebabe"))

    assert verifier.verify(claims, hello_file) is False
    assert verifier.verify(claims, hello_file) is False
    assert [c.result for c in claims] == [False, False]
    assert [c.declared_value for c in claims] == ["deadbeef", "feedface"]
    assert [c.computed_value for c in claims] == [HELLO_MD5, "cafebabe"]


def test_verification_without_declared_value_stays_open(hello_file, tmp_path):
    claim = FixityClaim("MD5")
    verifier = FixityVerifier(_plugins())
    assert verifier.verify([claim], hello_file) is True

    other = tmp_path / "other.bin"
    other.write_bytes(b"world")
    assert verifier.verify([claim], str(other)) is True
    assert claim.declared_value is None
    assert claim.computed_value != HELLO_MD5


def test_missing_file_raises_not_found(tmp_path):
    with pytest.raises(EntityNotFoundError):
        FixityVerifier(_plugins()).verify([FixityClaim("MD5")], str(tmp_path / "missing"))


def test_check_fixity_shortcut(hello_file):
    claims = [FixityClaim("MD5", HELLO_MD5)]
    assert check_fixity(claims, hello_file, plugins=_plugins()) is True
