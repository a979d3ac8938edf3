"""inplace-store CLI: operational interface for in-place placement and fixity checks.

Entry point: ``inplace-store`` console script via ``main()``.
"""

from __future__ import annotations

import argparse
import logging
import sys

from inplace_store.errors import InPlaceStoreError


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="inplace-store",
        description="Place deposited files in repository storage and verify their fixity",
    )
    parser.add_argument(
        "--temp-dir",
        default=None,
        help="Temp storage directory holding the destination cache. Env: INPLACE_STORE_TEMP_DIR",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    sub = parser.add_subparsers(dest="command")

    # Lazy-import each command module to avoid pulling in Polars for simple commands.
    from inplace_store.cli import cache, delete, fixity, retrieve, store

    store.register(sub)
    fixity.register(sub)
    retrieve.register(sub)
    delete.register(sub)
    cache.register(sub)

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point.  Returns exit code (0=ok, 1=user error, 2=storage/fixity error)."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        return handler(args) or 0
    except InPlaceStoreError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return 1
    except SystemExit as exc:
        if isinstance(exc.code, int):
            return exc.code
        if exc.code:
            print(exc.code, file=sys.stderr)
        return 1


def cli() -> None:  # pragma: no cover
    """Console-script wrapper that calls ``sys.exit``."""
    sys.exit(main())
