"""``inplace-store delete``: remove a stored file."""

from __future__ import annotations

import argparse


def register(subparsers: argparse._SubParsersAction) -> None:
    p = subparsers.add_parser("delete", help="Delete a stored file (best effort)")
    p.add_argument("path", help="Canonical path of the stored file")
    p.set_defaults(handler=_handle)


def _handle(args: argparse.Namespace) -> int:
    from inplace_store.cli._config import build_handler

    if build_handler(args).delete(args.path):
        print(f"deleted {args.path}")
        return 0
    print(f"could not delete {args.path}")
    return 2
