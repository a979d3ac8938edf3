"""``inplace-store range``: read a byte range of a stored file."""

from __future__ import annotations

import argparse
import sys


def register(subparsers: argparse._SubParsersAction) -> None:
    p = subparsers.add_parser("range", help="Read bytes START..END (inclusive) of a stored file")
    p.add_argument("path", help="Canonical path of the stored file")
    p.add_argument("start", type=int, help="First byte offset")
    p.add_argument("end", type=int, help="Last byte offset (inclusive)")
    p.add_argument("--hex", action="store_true", help="Print bytes as hex instead of raw")
    p.set_defaults(handler=_handle)


def _handle(args: argparse.Namespace) -> int:
    from inplace_store.cli._config import build_handler

    data = build_handler(args).retrieve_range(args.path, args.start, args.end)
    if args.hex:
        print(data.hex())
    else:
        sys.stdout.buffer.write(data)
        sys.stdout.flush()
    return 0
