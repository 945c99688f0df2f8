"""Human-readable document numbers.

PO numbers look like ``PO-20240115-00042``; the trailing sequence keeps
growing across days within an organization.  Supplier codes look like
``SUP-AB12-00007``.  Both continue from the highest sequence still on
file, so a new number never collides with an existing one.
"""

from __future__ import annotations

from datetime import date


def _highest_sequence(existing: list[str], kind: str) -> int:
    highest = 0
    for number in existing:
        parts = (number or "").split("-")
        if len(parts) != 3 or parts[0] != kind:
            continue
        try:
            highest = max(highest, int(parts[2]))
        except ValueError:
            continue
    return highest


def next_po_number(existing: list[str], today: date | None = None) -> str:
    """Return the next PO number given every number issued so far."""
    stamp = (today or date.today()).strftime("%Y%m%d")
    return f"PO-{stamp}-{_highest_sequence(existing, 'PO') + 1:05d}"


def next_supplier_code(organization_id: str, existing: list[str]) -> str:
    """Return the next supplier code given every code still on file."""
    prefix = "".join(ch for ch in organization_id if ch.isalnum())[:4].upper() or "ORG"
    return f"SUP-{prefix}-{_highest_sequence(existing, 'SUP') + 1:05d}"
