"""Error message templates for inplace-store.

Messages keep the wording operators already grep for in deposit logs and
add "Did you mean...?" suggestions where a name lookup failed.
"""

from __future__ import annotations

from difflib import get_close_matches


def not_a_symlink_error(path: str, entity_id: str | None = None) -> str:
    """Error message when a link expected at deposit time is missing."""
    if entity_id is None:
        return f'"{path}" is not a soft link.'
    return f'Failed to store file {entity_id} : "{path}" is not a soft link.'


def fixity_failed_error(entity_id: str, path: str, failed: list[str] | None = None) -> str:
    """Error message when at least one declared fixity did not verify."""
    msg = f'Failed to store file {entity_id} : Fixity check on "{path}" failed.'
    if failed:
        msg += f" Failed algorithms: {', '.join(failed)}"
    return msg


def io_failure_error(operation: str, path: str, cause: BaseException | None = None) -> str:
    msg = f'Failed to {operation} "{path}"'
    if cause is not None:
        msg += f": {cause}"
    return msg


def range_out_of_bounds_error(path: str, start: int, end: int, size: int | None = None) -> str:
    """Error message for an invalid byte range request."""
    msg = f'Invalid byte range [{start}, {end}] for "{path}"'
    if start < 0:
        msg += ": start must be >= 0"
    elif end < start:
        msg += ": end must be >= start"
    elif size is not None:
        msg += f": file is {size} bytes long"
    return msg


def unknown_plugin_error(name: str, available: list[str]) -> str:
    """Error message when no checksum plugin is registered under a name.

    Includes fuzzy matching suggestions for common typos.

    Args:
        name: The algorithm/plugin name that was not found
        available: Registered plugin names

    Returns:
        Formatted error message with suggestions
    """
    lowered = {a.lower(): a for a in available}
    suggestions = get_close_matches(name.lower(), list(lowered), n=3, cutoff=0.6)

    msg = f"No checksum plugin registered for algorithm '{name}'.\n"

    if suggestions:
        msg += "\nDid you mean one of these?\n"
        for suggestion in suggestions:
            msg += f"  - {lowered[suggestion]}\n"

    if available:
        msg += "\nRegistered plugins:\n"
        for plugin_name in sorted(available):
            msg += f"  - {plugin_name}\n"
    else:
        msg += "\nNo plugins are registered. Built-in algorithms are: MD5, SHA1, CRC32\n"

    return msg.rstrip("\n")


def destination_conflict_error(parent_id: str, entity_id: str, existing: str, new: str) -> str:
    return (
        f"Destination for {parent_id}/{entity_id} is already recorded as '{existing}'; "
        f"refusing to overwrite it with '{new}'."
    )


def invalid_identifier_error(value: str) -> str:
    return (
        f"Identifier {value!r} cannot be used as a file name: "
        "nothing is left after sanitizing it."
    )
