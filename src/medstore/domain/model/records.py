"""Append-only audit records.

These are written once and never updated: the inventory transaction log,
goods-received lines and purchase-order status history.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TransactionType(Enum):
    INCREMENT = "increment"
    DECREMENT = "decrement"


@dataclass(frozen=True)
class InventoryTransaction:
    """One stock-ledger delta."""

    organization_id: str
    medicine_id: int
    transaction_type: TransactionType
    quantity: int  # always |delta|
    quantity_after: int
    reason: str
    reference_type: str | None = None
    reference_id: int | None = None
    actor_id: str | None = None
    created_at: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class PurchaseOrderReceipt:
    """A goods-received line: what actually arrived, when, and who took it."""

    organization_id: str
    purchase_order_id: int
    medicine_id: int
    received_quantity: int
    actor_id: str | None = None
    received_at: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class StatusChange:
    organization_id: str
    purchase_order_id: int
    old_status: str | None
    new_status: str
    actor_id: str | None = None
    notes: str | None = None
    changed_at: datetime = field(default_factory=_utcnow)
