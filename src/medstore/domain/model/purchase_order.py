"""PurchaseOrder aggregate — the core of the purchasing domain.

The PurchaseOrder is an aggregate root that owns its line items.
All business invariants and legal status transitions are enforced here;
stock mutation on receipt is coordinated by the receiving reconciler.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum

from medstore.domain.exceptions import BusinessRuleError, ValidationError
from medstore.domain.model.records import StatusChange
from medstore.domain.model.value_objects import Money, Quantity


class PurchaseOrderStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    ORDERED = "ordered"
    PARTIALLY_RECEIVED = "partially_received"
    RECEIVED = "received"
    CANCELLED = "cancelled"


ALLOWED_TRANSITIONS: dict[PurchaseOrderStatus, frozenset[PurchaseOrderStatus]] = {
    PurchaseOrderStatus.PENDING: frozenset({
        PurchaseOrderStatus.APPROVED,
        PurchaseOrderStatus.RECEIVED,
        PurchaseOrderStatus.PARTIALLY_RECEIVED,
        PurchaseOrderStatus.CANCELLED,
    }),
    PurchaseOrderStatus.APPROVED: frozenset({
        PurchaseOrderStatus.ORDERED,
        PurchaseOrderStatus.RECEIVED,
        PurchaseOrderStatus.PARTIALLY_RECEIVED,
        PurchaseOrderStatus.CANCELLED,
    }),
    PurchaseOrderStatus.ORDERED: frozenset({
        PurchaseOrderStatus.RECEIVED,
        PurchaseOrderStatus.PARTIALLY_RECEIVED,
        PurchaseOrderStatus.CANCELLED,
    }),
    PurchaseOrderStatus.PARTIALLY_RECEIVED: frozenset({
        PurchaseOrderStatus.RECEIVED,
        PurchaseOrderStatus.PARTIALLY_RECEIVED,
    }),
    PurchaseOrderStatus.RECEIVED: frozenset(),
    PurchaseOrderStatus.CANCELLED: frozenset(),
}

RECEIVABLE_STATUSES = frozenset(
    status
    for status, targets in ALLOWED_TRANSITIONS.items()
    if PurchaseOrderStatus.RECEIVED in targets
)


class ReceiptCompleteness(Enum):
    """How cumulative received quantities compare to what was ordered."""

    COMPLETE = "complete"
    SHORT = "short"
    EXCESS = "excess"


@dataclass
class PurchaseOrderItem:
    """A single ordered medicine with its cost locked at creation time.

    ``line_total`` is always derived from quantity and unit cost; the
    only mutable field is ``received_quantity``.
    """

    medicine_id: int
    medicine_name: str
    quantity: Quantity
    unit_cost: Money
    received_quantity: int = 0
    id: int | None = None

    @property
    def line_total(self) -> Money:
        return self.unit_cost * self.quantity

    @property
    def remaining_quantity(self) -> int:
        return max(self.quantity.value - self.received_quantity, 0)

    def record_received(self, qty: int) -> None:
        """Accumulate *qty* received units (over-receipt is allowed)."""
        if qty <= 0:
            raise ValidationError("Received quantity must be positive")
        self.received_quantity += qty


@dataclass
class PurchaseOrder:
    """Aggregate root for supplier purchase orders.

    Use ``PurchaseOrder.create()`` for new orders — it enforces all
    business rules.  The ``__init__`` stays simple so the repository can
    reconstitute persisted orders without re-validating.
    """

    id: int | None
    organization_id: str
    po_number: str
    supplier_id: int
    items: list[PurchaseOrderItem]
    created_by: str | None
    status: PurchaseOrderStatus = PurchaseOrderStatus.PENDING
    order_date: date = field(default_factory=date.today)
    expected_delivery_date: date | None = None
    actual_delivery_date: date | None = None
    tax_percent: Decimal = Decimal("0")
    discount_amount: Money = field(default_factory=Money.zero)
    notes: str | None = None
    approved_by: str | None = None
    approved_at: datetime | None = None
    approved_amount: Money | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    _status_changes: list[StatusChange] = field(default_factory=list, repr=False, compare=False)

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        organization_id: str,
        po_number: str,
        supplier_id: int,
        items: list[PurchaseOrderItem],
        created_by: str | None,
        order_date: date | None = None,
        expected_delivery_date: date | None = None,
        tax_percent: Decimal = Decimal("0"),
        discount_amount: Money | None = None,
        notes: str | None = None,
    ) -> PurchaseOrder:
        """Create a new pending order, enforcing all invariants."""
        if not organization_id:
            raise ValidationError("Organization ID is required")
        if not supplier_id:
            raise ValidationError("Supplier is required")
        if not items:
            raise ValidationError("Purchase order must have at least one item")

        seen: set[int] = set()
        for item in items:
            if item.medicine_id in seen:
                raise ValidationError(
                    f"Medicine '{item.medicine_name}' appears more than once"
                )
            seen.add(item.medicine_id)

        if tax_percent < 0 or tax_percent > 100:
            raise ValidationError("Tax percent must be between 0 and 100")

        order_date = order_date or date.today()
        if expected_delivery_date is not None and expected_delivery_date < order_date:
            raise ValidationError("Expected delivery date cannot precede the order date")

        order = PurchaseOrder(
            id=None,
            organization_id=organization_id,
            po_number=po_number,
            supplier_id=supplier_id,
            items=list(items),
            created_by=created_by,
            order_date=order_date,
            expected_delivery_date=expected_delivery_date,
            tax_percent=Decimal(tax_percent),
            discount_amount=discount_amount or Money.zero(items[0].unit_cost.currency),
            notes=notes.strip() if notes else None,
        )

        if order.discount_amount > order.subtotal + order.tax_amount:
            raise ValidationError(
                f"Discount {order.discount_amount} exceeds order value "
                f"{order.subtotal + order.tax_amount}"
            )
        return order

    # --- State transitions ----------------------------------------------------

    def approve(
        self,
        actor_id: str | None,
        approved_amount: Money | None = None,
        notes: str | None = None,
    ) -> None:
        """Transition pending -> approved, recording the approver."""
        self._transition(PurchaseOrderStatus.APPROVED, actor_id, notes)
        self.approved_by = actor_id
        self.approved_at = datetime.now(timezone.utc)
        self.approved_amount = approved_amount if approved_amount is not None else self.total
        if notes:
            self._append_note(notes)

    def mark_ordered(self, actor_id: str | None = None) -> None:
        """Transition approved -> ordered."""
        self._transition(PurchaseOrderStatus.ORDERED, actor_id)

    def mark_received(
        self,
        target: PurchaseOrderStatus,
        actor_id: str | None = None,
        received_on: date | None = None,
    ) -> None:
        """Move the order into a receipt status.

        Stock mutation is *not* done here; the receiving reconciler
        applies ledger deltas and line quantities after this call.
        """
        if target not in (PurchaseOrderStatus.RECEIVED, PurchaseOrderStatus.PARTIALLY_RECEIVED):
            raise ValidationError(f"{target.value} is not a receipt status")
        if self.status not in RECEIVABLE_STATUSES:
            raise BusinessRuleError(
                f"Purchase order cannot be received in {self.status.value} status"
            )
        self._transition(target, actor_id)
        if target == PurchaseOrderStatus.RECEIVED:
            self.actual_delivery_date = received_on or date.today()

    def cancel(self, actor_id: str | None = None, reason: str | None = None) -> None:
        """Transition pending|approved|ordered -> cancelled.

        Nothing has been received yet, so there is no stock to reverse.
        """
        self._transition(PurchaseOrderStatus.CANCELLED, actor_id, reason)
        if reason:
            self._append_note(f"Cancelled: {reason}")

    def ensure_deletable(self) -> None:
        if self.status != PurchaseOrderStatus.PENDING:
            raise BusinessRuleError("Cannot delete non-pending orders")

    # --- Receipt helpers ------------------------------------------------------

    def find_item(self, medicine_id: int) -> PurchaseOrderItem | None:
        for item in self.items:
            if item.medicine_id == medicine_id:
                return item
        return None

    def completeness_after(self, incoming: dict[int, int]) -> ReceiptCompleteness:
        """Compare cumulative received vs ordered if *incoming* were applied."""
        short = excess = False
        for item in self.items:
            received = item.received_quantity + incoming.get(item.medicine_id, 0)
            if received < item.quantity.value:
                short = True
            elif received > item.quantity.value:
                excess = True
        if short:
            return ReceiptCompleteness.SHORT
        if excess:
            return ReceiptCompleteness.EXCESS
        return ReceiptCompleteness.COMPLETE

    # --- Computed properties --------------------------------------------------

    @property
    def currency(self) -> str:
        return self.discount_amount.currency

    @property
    def subtotal(self) -> Money:
        return Money.total((item.line_total for item in self.items), self.currency)

    @property
    def tax_amount(self) -> Money:
        return self.subtotal.percent(self.tax_percent)

    @property
    def total(self) -> Money:
        return self.subtotal + self.tax_amount - self.discount_amount

    @property
    def is_terminal(self) -> bool:
        return not ALLOWED_TRANSITIONS[self.status]

    @property
    def progress_percentage(self) -> int:
        ordered = sum(item.quantity.value for item in self.items)
        if ordered == 0:
            return 0
        received = sum(item.received_quantity for item in self.items)
        return round(received / ordered * 100)

    def is_overdue(self, today: date | None = None) -> bool:
        if self.expected_delivery_date is None:
            return False
        if self.status in (PurchaseOrderStatus.RECEIVED, PurchaseOrderStatus.CANCELLED):
            return False
        return self.expected_delivery_date < (today or date.today())

    # --- Status history -------------------------------------------------------

    def pull_status_changes(self) -> list[StatusChange]:
        """Return and forget the transitions made since the last pull."""
        changes, self._status_changes = self._status_changes, []
        return changes

    # --- Internal helpers -----------------------------------------------------

    def _transition(
        self,
        target: PurchaseOrderStatus,
        actor_id: str | None,
        notes: str | None = None,
    ) -> None:
        if target not in ALLOWED_TRANSITIONS[self.status]:
            raise BusinessRuleError(
                f"Cannot transition from {self.status.value} to {target.value}"
            )
        old = self.status
        self.status = target
        self.updated_at = datetime.now(timezone.utc)
        if self.id is not None:
            self._status_changes.append(
                StatusChange(
                    organization_id=self.organization_id,
                    purchase_order_id=self.id,
                    old_status=old.value,
                    new_status=target.value,
                    actor_id=actor_id,
                    notes=notes,
                )
            )

    def _append_note(self, text: str) -> None:
        self.notes = f"{self.notes}\n{text}" if self.notes else text


def expected_delivery(order_date: date, payment_terms_days: int | None, default_days: int) -> date:
    """Order date plus the supplier's payment terms (or the default)."""
    days = payment_terms_days if payment_terms_days else default_days
    return order_date + timedelta(days=days)
