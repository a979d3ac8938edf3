"""Parsing of ``--fixity`` and ``--plugin`` options shared by commands."""

from __future__ import annotations

import argparse

from inplace_store.protocols import FixityClaim


def add_fixity_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--fixity",
        action="append",
        default=[],
        metavar="ALGORITHM[=VALUE]",
        help="Declared fixity (repeatable), e.g. MD5=5d41402a... or CRC32 to compute only",
    )
    parser.add_argument(
        "--plugin",
        action="append",
        default=[],
        metavar="NAME=MODULE:ATTR",
        help="Register an external checksum plugin, e.g. SHA256=hashlib:sha256 (repeatable)",
    )


def parse_fixity(spec: str) -> FixityClaim:
    """Parse ``ALGORITHM[=VALUE]`` into a claim; an empty value means "compute only"."""
    algorithm, sep, value = spec.partition("=")
    algorithm = algorithm.strip()
    if not algorithm:
        raise SystemExit(f"error: invalid --fixity '{spec}'. Expected ALGORITHM[=VALUE]")
    value = value.strip()
    return FixityClaim(algorithm=algorithm, value=value if sep and value else None)


def parse_fixities(specs: list[str]) -> list[FixityClaim]:
    return [parse_fixity(s) for s in specs]


def register_plugins(specs: list[str]) -> list[str]:
    """Register ``NAME=MODULE:ATTR`` plugins in the default registry; return their names."""
    from inplace_store.plugins import load_plugin, register_plugin

    names = []
    for spec in specs:
        name, sep, target = spec.partition("=")
        if not sep or not name.strip() or not target.strip():
            raise SystemExit(f"error: invalid --plugin '{spec}'. Expected NAME=MODULE:ATTR")
        try:
            plugin = load_plugin(target.strip(), name=name.strip())
        except (ImportError, ValueError) as exc:
            raise SystemExit(f"error: cannot load plugin '{spec}': {exc}") from exc
        register_plugin(plugin, replace=True)
        names.append(plugin.name)
    return names


def claim_rows(claims: list[FixityClaim]) -> list[dict[str, object]]:
    return [
        {
            "algorithm": c.algorithm,
            "declared": c.declared_value,
            "computed": c.computed_value,
            "result": {True: "pass", False: "FAIL", None: ""}[c.result],
        }
        for c in claims
    ]
