"""Domain service: Receiving Reconciler.

Turns a "goods received" event on a purchase order into stock-ledger
mutations.  Three shapes of input are accepted:

* full receipt — no quantities given, every line's outstanding quantity
  is received;
* partial receipt — some lines with explicit (possibly smaller) quantities;
* excess receipt — a quantity above what was ordered is applied as is.

Everything runs inside the caller's unit of work.  The order row is
locked first, then each line is applied in its own savepoint so a single
bad line is reported rather than undoing the whole receipt.  The status
moves last, from what actually reached stock.  Callers that prefer
all-or-nothing pass ``abort_on_line_failure=True``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from medstore.domain.exceptions import (
    BusinessRuleError,
    DatabaseError,
    EntityNotFoundError,
    ValidationError,
)
from medstore.domain.model.purchase_order import (
    RECEIVABLE_STATUSES,
    PurchaseOrder,
    PurchaseOrderStatus,
    ReceiptCompleteness,
)
from medstore.domain.model.records import PurchaseOrderReceipt
from medstore.domain.repository.unit_of_work import UnitOfWork
from medstore.domain.service.stock_ledger import StockLedger

_log = logging.getLogger(__name__)

RECEIPT_REFERENCE = "purchase_order"


class ReceiptOutcomeKind(Enum):
    SUCCESS = "success"
    PARTIAL_SUCCESS = "partial_success"


@dataclass(frozen=True)
class LineOutcome:
    medicine_id: int
    received_quantity: int
    new_stock: int | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class ReceiptOutcome:
    """Result of a receipt: which lines reached the ledger and which did not."""

    kind: ReceiptOutcomeKind
    status: PurchaseOrderStatus
    completeness: ReceiptCompleteness
    lines: tuple[LineOutcome, ...]

    @property
    def applied_lines(self) -> list[LineOutcome]:
        return [line for line in self.lines if line.ok]

    @property
    def failed_lines(self) -> list[LineOutcome]:
        return [line for line in self.lines if not line.ok]


class ReceivingReconciler:

    def __init__(
        self,
        uow: UnitOfWork,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
        strict_status: bool = False,
    ) -> None:
        self._uow = uow
        self._log = logger or _log
        self._strict_status = strict_status

    def receive(
        self,
        organization_id: str,
        order_id: int,
        requested: Iterable[tuple[int, int]] | None = None,
        actor_id: str | None = None,
        abort_on_line_failure: bool = False,
    ) -> tuple[PurchaseOrder, ReceiptOutcome]:
        """Receive goods against an order.

        Args:
            requested: ``(medicine_id, received_quantity)`` pairs.  Pairs
                with a zero quantity are ignored and a negative one raises
                ValidationError; when nothing remains, every line's
                outstanding quantity is received.
            abort_on_line_failure: raise BusinessRuleError (rolling back
                the status change too) if any line cannot be applied.
        """
        order = self._uow.purchase_orders.get_by_id(organization_id, order_id, for_update=True)
        if order is None:
            raise EntityNotFoundError("Purchase order not found")
        if order.status not in RECEIVABLE_STATUSES:
            raise BusinessRuleError(
                f"Purchase order {order.po_number} cannot be received "
                f"in {order.status.value} status"
            )

        quantities = self.build_receipt_map(order, requested)
        if not quantities:
            raise BusinessRuleError("No items to receive")

        ledger = StockLedger(self._uow, self._log)
        lines: list[LineOutcome] = []
        for medicine_id, qty in quantities.items():
            lines.append(self._apply_line(ledger, order, medicine_id, qty, actor_id))

        # Status reflects what actually reached stock, not what was requested.
        target = PurchaseOrderStatus.RECEIVED
        if self._strict_status and order.completeness_after({}) == ReceiptCompleteness.SHORT:
            target = PurchaseOrderStatus.PARTIALLY_RECEIVED
        order.mark_received(target, actor_id)

        failed = [line for line in lines if not line.ok]
        if failed:
            self._log.warning(
                "Receipt of %s: %d of %d line(s) failed",
                order.po_number, len(failed), len(lines),
            )
            if abort_on_line_failure:
                raise BusinessRuleError(
                    f"{len(failed)} line(s) could not be received: "
                    + "; ".join(f"medicine #{f.medicine_id}: {f.error}" for f in failed)
                )

        outcome = ReceiptOutcome(
            kind=ReceiptOutcomeKind.PARTIAL_SUCCESS if failed else ReceiptOutcomeKind.SUCCESS,
            status=order.status,
            completeness=order.completeness_after({}),
            lines=tuple(lines),
        )
        self._log.info(
            "Purchase order %s received (status=%s, completeness=%s, lines ok=%d failed=%d)",
            order.po_number, order.status.value, outcome.completeness.value,
            len(lines) - len(failed), len(failed),
        )
        return order, outcome

    @staticmethod
    def build_receipt_map(
        order: PurchaseOrder,
        requested: Iterable[tuple[int, int]] | None,
    ) -> dict[int, int]:
        """medicine_id -> quantity to receive.

        Caller quantities win verbatim, even above what was ordered.
        """
        quantities: dict[int, int] = {}
        for medicine_id, qty in requested or ():
            if qty is not None and qty < 0:
                raise ValidationError(
                    f"Received quantity for medicine #{medicine_id} cannot be negative"
                )
            if qty and qty > 0:
                quantities[medicine_id] = quantities.get(medicine_id, 0) + qty
        if quantities:
            return quantities

        return {
            item.medicine_id: item.remaining_quantity
            for item in order.items
            if item.remaining_quantity > 0
        }

    # --- Internal helpers -----------------------------------------------------

    def _apply_line(
        self,
        ledger: StockLedger,
        order: PurchaseOrder,
        medicine_id: int,
        qty: int,
        actor_id: str | None,
    ) -> LineOutcome:
        item = order.find_item(medicine_id)
        if item is None:
            self._log.warning(
                "Medicine %s is not on purchase order %s; skipped", medicine_id, order.po_number
            )
            return LineOutcome(medicine_id, qty, error="Medicine is not on this purchase order")

        try:
            with self._uow.savepoint():
                medicine = ledger.adjust(
                    order.organization_id,
                    medicine_id,
                    qty,
                    reason=f"Received against {order.po_number}",
                    reference_type=RECEIPT_REFERENCE,
                    reference_id=order.id,
                    actor_id=actor_id,
                )
                self._uow.receipts.add(
                    PurchaseOrderReceipt(
                        organization_id=order.organization_id,
                        purchase_order_id=order.id,  # type: ignore[arg-type]
                        medicine_id=medicine_id,
                        received_quantity=qty,
                        actor_id=actor_id,
                    )
                )
        except (EntityNotFoundError, ValidationError, DatabaseError) as exc:
            self._log.warning(
                "Could not receive %d of medicine %s on %s: %s",
                qty, medicine_id, order.po_number, exc,
            )
            return LineOutcome(medicine_id, qty, error=str(exc))

        item.record_received(qty)
        return LineOutcome(medicine_id, qty, new_stock=medicine.quantity)
