"""``inplace-store cache``: inspect the destination-path cache."""

from __future__ import annotations

import argparse


def register(subparsers: argparse._SubParsersAction) -> None:
    p = subparsers.add_parser("cache", help="Inspect cached destinations")
    sub = p.add_subparsers(dest="cache_command")

    # cache list
    list_p = sub.add_parser("list", help="List parent entities with cached destinations")
    list_p.set_defaults(handler=_handle_list)

    # cache show <parent_id>
    show_p = sub.add_parser("show", help="Show cached destinations of one parent entity")
    show_p.add_argument("parent_id", help="Intellectual entity identifier")
    show_p.set_defaults(handler=_handle_show)


def _load_cache(args):
    from inplace_store.cache import JsonDestinationCache
    from inplace_store.cli._config import resolve_settings

    settings = resolve_settings(getattr(args, "temp_dir", None))
    return JsonDestinationCache(settings.dest_path_dir, lock_timeout=settings.lock_timeout)


def _handle_list(args: argparse.Namespace) -> int:
    from inplace_store.cli._output import print_table

    cache = _load_cache(args)
    parents = cache.parents()
    if not parents:
        print("Destination cache is empty.")
        return 0

    print_table([{"parent_id": p, "files": len(cache.entries(p))} for p in parents])
    return 0


def _handle_show(args: argparse.Namespace) -> int:
    from inplace_store.cli._output import print_table

    entries = _load_cache(args).entries(args.parent_id)
    if not entries:
        print(f"No cached destinations for {args.parent_id}")
        return 1

    print_table(
        [{"entity_id": k, "path": v} for k, v in sorted(entries.items())],
        columns=["entity_id", "path"],
    )
    return 0
