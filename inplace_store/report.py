"""Tabular fixity reports."""

from __future__ import annotations

from collections.abc import Sequence

import polars as pl

from inplace_store.fixity import resolve_algorithm
from inplace_store.protocols import FixityClaim

REPORT_SCHEMA: dict[str, pl.DataType] = {
    "algorithm": pl.Utf8,
    "kind": pl.Utf8,
    "declared": pl.Utf8,
    "computed": pl.Utf8,
    "result": pl.Boolean,
}


def claims_to_frame(claims: Sequence[FixityClaim] | None) -> pl.DataFrame:
    """One row per claim, in claim order."""
    rows = [
        {
            "algorithm": claim.algorithm,
            "kind": resolve_algorithm(claim).kind,
            "declared": claim.declared_value,
            "computed": claim.computed_value,
            "result": claim.result,
        }
        for claim in claims or []
    ]
    return pl.DataFrame(rows, schema=REPORT_SCHEMA)


def summarize(frame: pl.DataFrame) -> dict[str, int]:
    """Count passed, failed and unverified claims."""
    return {
        "total": frame.height,
        "passed": frame.filter(pl.col("result").eq(True)).height,
        "failed": frame.filter(pl.col("result").eq(False)).height,
        "unknown": frame.filter(pl.col("result").is_null()).height,
    }
