"""``inplace-store store``: relocate a deposited file and verify its fixities."""

from __future__ import annotations

import argparse

from inplace_store.cli._claims import add_fixity_arguments


def register(subparsers: argparse._SubParsersAction) -> None:
    p = subparsers.add_parser("store", help="Place a deposited file in repository storage")
    p.add_argument("path", help="Repository tree path of the file (symlink into the deposit area)")
    p.add_argument("--entity-id", required=True, help="File identifier")
    p.add_argument("--parent-id", required=True, help="Intellectual entity identifier")
    p.add_argument("--original-name", default=None, help="Deposit-time file name (for the suffix)")
    add_fixity_arguments(p)
    p.set_defaults(handler=_handle)


def _handle(args: argparse.Namespace) -> int:
    from inplace_store.cli._claims import claim_rows, parse_fixities, register_plugins
    from inplace_store.cli._config import build_handler
    from inplace_store.cli._output import print_table
    from inplace_store.errors import FixityMismatchError
    from inplace_store.protocols import DepositRecord

    register_plugins(args.plugin)
    record = DepositRecord(
        entity_id=args.entity_id,
        parent_id=args.parent_id,
        current_path=args.path,
        fixities=parse_fixities(args.fixity),
        original_name=args.original_name,
    )

    handler = build_handler(args)
    try:
        destination = handler.store(None, record)
    except FixityMismatchError:
        print_table(claim_rows(record.fixities))
        raise

    print(destination)
    if record.fixities:
        print()
        print_table(claim_rows(record.fixities))
    return 0
