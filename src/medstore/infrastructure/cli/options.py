"""Options shared by every command that touches organization data."""

from __future__ import annotations

import click


def scoped(command):
    """Add ``--org`` and ``--actor``; every use case runs inside one organization."""
    command = click.option(
        "--actor",
        "actor_id",
        default=None,
        envvar="MEDSTORE_ACTOR",
        help="User performing the action (or set MEDSTORE_ACTOR).",
    )(command)
    command = click.option(
        "--org",
        "organization_id",
        required=True,
        envvar="MEDSTORE_ORG",
        help="Organization ID (or set MEDSTORE_ORG).",
    )(command)
    return command


def parse_pairs(raw: str, expected_parts: int, label: str) -> list[list[str]]:
    """Split '1:10,2:5' style values into parts, checking the arity."""
    result: list[list[str]] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if not pair:
            continue
        parts = [p.strip() for p in pair.split(":")]
        if len(parts) != expected_parts:
            raise click.BadParameter(f"Invalid item format '{pair}'. Expected '{label}'.")
        result.append(parts)
    if not result:
        raise click.BadParameter("At least one item is required.")
    return result


def parse_int(raw: str, what: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise click.BadParameter(f"Invalid {what} '{raw}'.")
