"""``inplace-store fixity``: compute or validate checksums of a stored file."""

from __future__ import annotations

import argparse

from inplace_store.cli._claims import add_fixity_arguments


def register(subparsers: argparse._SubParsersAction) -> None:
    p = subparsers.add_parser("fixity", help="Check fixity values of a stored file")
    p.add_argument("path", help="Canonical path of the stored file")
    add_fixity_arguments(p)
    p.add_argument(
        "--format",
        dest="fmt",
        choices=["table", "csv", "json", "parquet"],
        default="table",
        help="Report format (default: table)",
    )
    p.add_argument("--output", default=None, help="Write the report to a file")
    p.set_defaults(handler=_handle)


def _handle(args: argparse.Namespace) -> int:
    from inplace_store.cli._claims import parse_fixities, register_plugins
    from inplace_store.cli._output import write_output
    from inplace_store.fixity import FixityVerifier
    from inplace_store.report import claims_to_frame, summarize

    register_plugins(args.plugin)
    claims = parse_fixities(args.fixity)
    if not claims:
        print("error: at least one --fixity is required")
        return 1

    passed = FixityVerifier().verify(claims, args.path)
    frame = claims_to_frame(claims)
    write_output(frame, fmt=args.fmt, output=args.output)

    if args.fmt == "table" and args.output is None:
        counts = summarize(frame)
        print(f"\n{counts['passed']} passed, {counts['failed']} failed of {counts['total']}")
    return 0 if passed else 2
