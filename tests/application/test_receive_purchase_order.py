"""Integration tests for the ReceivePurchaseOrder use case."""

import pytest

from medstore.application.approve_purchase_order import ApprovePurchaseOrderHandler
from medstore.application.create_purchase_order import CreatePurchaseOrderHandler
from medstore.application.dto import PurchaseOrderItemSpec, ReceiveItemSpec
from medstore.application.mark_ordered import MarkOrderedHandler
from medstore.application.receive_purchase_order import ReceivePurchaseOrderHandler
from medstore.application.show_purchase_order import PurchaseOrderHistoryHandler
from medstore.domain.exceptions import BusinessRuleError, EntityNotFoundError, ValidationError
from medstore.domain.model.purchase_order import PurchaseOrderStatus
from tests.fakes import seeded_uow


def _setup(ordered: int = 20, stock: int = 5, with_syrup: bool = False):
    """Paracetamol (#1) has ``stock`` on hand; the order asks for ``ordered`` more."""
    uow = seeded_uow(stock=stock)
    items = [PurchaseOrderItemSpec(1, ordered, "5")]
    if with_syrup:
        items.append(PurchaseOrderItemSpec(2, 10, "2.50"))
    dto = CreatePurchaseOrderHandler(uow).handle("org-1", "u-1", 1, items)
    ApprovePurchaseOrderHandler(uow).handle("org-1", dto.id, "boss")
    MarkOrderedHandler(uow).handle("org-1", dto.id, "buyer")
    return uow, dto.id


def _stock(uow, medicine_id: int = 1) -> int:
    return uow.medicines.get_by_id("org-1", medicine_id).quantity


class TestReceiveShapes:

    def test_full_receipt(self):
        uow, oid = _setup(ordered=20, stock=5)
        receipt = ReceivePurchaseOrderHandler(uow).handle("org-1", oid, actor_id="clerk")

        assert _stock(uow) == 25
        assert receipt.order.status == "received"
        assert receipt.outcome == "success"
        assert receipt.completeness == "complete"
        assert receipt.order.actual_delivery_date is not None
        assert receipt.order.progress_percentage == 100

    def test_partial_receipt(self):
        uow, oid = _setup(ordered=20, stock=5)
        receipt = ReceivePurchaseOrderHandler(uow).handle(
            "org-1", oid, items=[ReceiveItemSpec(1, 8)]
        )

        assert _stock(uow) == 13
        assert receipt.order.status == "received"
        assert receipt.completeness == "short"
        assert receipt.order.items[0].received_quantity == 8

    def test_excess_receipt(self):
        uow, oid = _setup(ordered=20, stock=5)
        receipt = ReceivePurchaseOrderHandler(uow).handle(
            "org-1", oid, items=[ReceiveItemSpec(1, 30)]
        )

        assert _stock(uow) == 35
        assert receipt.outcome == "success"
        assert receipt.completeness == "excess"

    def test_strict_mode_keeps_short_orders_open(self):
        uow, oid = _setup(ordered=20, stock=5)
        handler = ReceivePurchaseOrderHandler(uow, strict_status=True)

        first = handler.handle("org-1", oid, items=[ReceiveItemSpec(1, 8)])
        assert first.order.status == "partially_received"

        second = handler.handle("org-1", oid)
        assert second.order.status == "received"
        assert _stock(uow) == 25

    def test_status_history_and_receipt_log(self):
        uow, oid = _setup(ordered=20, stock=5)
        ReceivePurchaseOrderHandler(uow).handle("org-1", oid, actor_id="clerk")

        changes, receipts = PurchaseOrderHistoryHandler(uow).handle("org-1", oid)
        assert (changes[-1].old_status, changes[-1].new_status) == ("ordered", "received")
        assert [(r.medicine_id, r.received_quantity, r.actor_id) for r in receipts] == [(1, 20, "clerk")]

    def test_ledger_entries_reference_the_order(self):
        uow, oid = _setup(ordered=20, stock=5)
        ReceivePurchaseOrderHandler(uow).handle("org-1", oid)

        entry = uow.inventory_transactions.list_for_medicine("org-1", 1)[-1]
        assert entry.reference_type == "purchase_order"
        assert entry.reference_id == oid
        assert entry.quantity_after == 25


class TestReceiveFailures:

    def test_unknown_order(self):
        uow, _ = _setup()
        with pytest.raises(EntityNotFoundError, match="Purchase order not found"):
            ReceivePurchaseOrderHandler(uow).handle("org-1", 404)

    def test_double_receipt_does_not_double_stock(self):
        uow, oid = _setup(ordered=20, stock=5)
        ReceivePurchaseOrderHandler(uow).handle("org-1", oid)
        with pytest.raises(BusinessRuleError):
            ReceivePurchaseOrderHandler(uow).handle("org-1", oid)
        assert _stock(uow) == 25

    def test_non_integer_quantity(self):
        uow, oid = _setup()
        with pytest.raises(ValidationError, match="must be an integer"):
            ReceivePurchaseOrderHandler(uow).handle("org-1", oid, items=[ReceiveItemSpec(1, "8")])

    def test_negative_quantity_rejected_before_any_stock_moves(self):
        uow, oid = _setup(ordered=20, stock=5)
        with pytest.raises(ValidationError, match="cannot be negative"):
            ReceivePurchaseOrderHandler(uow).handle("org-1", oid, items=[ReceiveItemSpec(1, -5)])

        assert _stock(uow) == 5
        assert uow.purchase_orders.get_by_id("org-1", oid).status == PurchaseOrderStatus.ORDERED
        assert uow.receipts.entries == []
        assert uow.rollbacks == 0

    def test_failed_line_is_reported_and_status_still_advances(self):
        uow, oid = _setup(ordered=20, stock=5, with_syrup=True)
        uow.medicines.get_by_id("org-1", 2).deactivate()

        receipt = ReceivePurchaseOrderHandler(uow).handle("org-1", oid)

        assert receipt.outcome == "partial_success"
        assert receipt.failed_count == 1
        assert receipt.order.status == "received"
        assert _stock(uow, 1) == 25
        failed = next(line for line in receipt.lines if not line.ok)
        assert failed.medicine_id == 2
        assert failed.new_stock is None

    def test_all_or_nothing_rolls_everything_back(self):
        uow, oid = _setup(ordered=20, stock=5, with_syrup=True)
        uow.medicines.get_by_id("org-1", 2).deactivate()

        with pytest.raises(BusinessRuleError, match="could not be received"):
            ReceivePurchaseOrderHandler(uow).handle("org-1", oid, abort_on_line_failure=True)

        assert _stock(uow, 1) == 5
        assert uow.purchase_orders.get_by_id("org-1", oid).status == PurchaseOrderStatus.ORDERED
        assert uow.receipts.entries == []
        assert uow.rollbacks == 1

    def test_strict_mode_failed_line_leaves_order_receivable(self):
        uow, oid = _setup(ordered=20, stock=5, with_syrup=True)
        uow.medicines.get_by_id("org-1", 2).deactivate()
        handler = ReceivePurchaseOrderHandler(uow, strict_status=True)

        receipt = handler.handle("org-1", oid)

        assert receipt.outcome == "partial_success"
        assert receipt.completeness == "short"
        assert receipt.order.status == "partially_received"
        syrup = next(item for item in receipt.order.items if item.medicine_id == 2)
        assert syrup.remaining_quantity == 10

        uow.medicines.get_by_id("org-1", 2).is_active = True
        receipt = handler.handle("org-1", oid)

        assert receipt.order.status == "received"
        assert _stock(uow, 2) == 50
