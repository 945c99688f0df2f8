"""Integration tests against an in-memory SQLite database."""

from datetime import date

import pytest
from sqlalchemy import func, select, text

from medstore.application.add_medicine import AddMedicineHandler
from medstore.application.adjust_stock import AdjustStockHandler
from medstore.application.approve_purchase_order import ApprovePurchaseOrderHandler
from medstore.application.create_purchase_order import CreatePurchaseOrderHandler
from medstore.application.delete_purchase_order import DeletePurchaseOrderHandler
from medstore.application.dto import PurchaseOrderItemSpec, ReceiveItemSpec
from medstore.application.list_purchase_orders import ListPurchaseOrdersHandler
from medstore.application.manage_suppliers import (
    AddSupplierHandler,
    RemovalResult,
    RemoveSupplierHandler,
    SupplierDetails,
)
from medstore.application.receive_purchase_order import ReceivePurchaseOrderHandler
from medstore.application.show_purchase_order import (
    PurchaseOrderHistoryHandler,
    ShowPurchaseOrderHandler,
)
from medstore.domain.exceptions import BusinessRuleError, DatabaseError, ValidationError
from medstore.domain.model.purchase_order import PurchaseOrderStatus
from medstore.infrastructure.persistence.database import (
    create_schema,
    make_engine,
    make_session_factory,
)
from medstore.infrastructure.persistence.orm import PurchaseOrderItemRow
from medstore.infrastructure.persistence.unit_of_work import SqlAlchemyUnitOfWork


@pytest.fixture
def uow():
    engine = make_engine("sqlite://")
    create_schema(engine)
    yield SqlAlchemyUnitOfWork(make_session_factory(engine))
    engine.dispose()


def _seed(uow, stock: int = 5):
    """Supplier #1 with Paracetamol (#1, ``stock`` on hand) and Cough Syrup (#2, 40)."""
    AddSupplierHandler(uow).handle("org-1", SupplierDetails(name="Alpha Meds", payment_terms=30))
    AddMedicineHandler(uow).handle("org-1", "Paracetamol", stock, "5.00", "8.00", supplier_id=1)
    AddMedicineHandler(uow).handle("org-1", "Cough Syrup", 40, "2.50", "4.00", supplier_id=1)


def _create_order(uow, items=None, **kwargs):
    items = items or [PurchaseOrderItemSpec(1, 20, "5")]
    return CreatePurchaseOrderHandler(uow).handle("org-1", "u-1", 1, items, **kwargs)


def _stock(uow, medicine_id: int = 1) -> int:
    with uow:
        return uow.medicines.get_by_id("org-1", medicine_id).quantity


class TestPurchaseOrderRoundTrip:

    def test_create_and_reload(self, uow):
        _seed(uow)
        created = _create_order(
            uow,
            [PurchaseOrderItemSpec(1, 10, "5"), PurchaseOrderItemSpec(2, 4, "2.50")],
            order_date=date(2024, 1, 15),
            tax_percent="10",
        )

        loaded = ShowPurchaseOrderHandler(uow).handle("org-1", created.id)
        assert loaded.po_number == "PO-20240115-00001"
        assert loaded.total == "PKR 66.00"
        assert loaded.expected_delivery_date == date(2024, 2, 14)
        assert [(i.medicine_name, i.quantity) for i in loaded.items] == [
            ("Paracetamol", 10),
            ("Cough Syrup", 4),
        ]

    def test_full_receipt_updates_stock_and_logs(self, uow):
        _seed(uow, stock=5)
        oid = _create_order(uow).id
        ApprovePurchaseOrderHandler(uow).handle("org-1", oid, "boss")

        receipt = ReceivePurchaseOrderHandler(uow).handle("org-1", oid, actor_id="clerk")

        assert receipt.order.status == "received"
        assert _stock(uow) == 25
        changes, receipts = PurchaseOrderHistoryHandler(uow).handle("org-1", oid)
        assert [c.new_status for c in changes] == ["pending", "approved", "received"]
        assert [(r.medicine_id, r.received_quantity) for r in receipts] == [(1, 20)]

    def test_partial_then_rest_in_strict_mode(self, uow):
        _seed(uow, stock=5)
        oid = _create_order(uow).id
        handler = ReceivePurchaseOrderHandler(uow, strict_status=True)

        assert handler.handle("org-1", oid, items=[ReceiveItemSpec(1, 8)]).order.status == "partially_received"
        assert handler.handle("org-1", oid).order.status == "received"
        assert _stock(uow) == 25

    def test_failed_line_commits_the_rest(self, uow):
        _seed(uow, stock=5)
        oid = _create_order(uow, [PurchaseOrderItemSpec(1, 20, "5"), PurchaseOrderItemSpec(2, 10, "2.5")]).id
        with uow:
            syrup = uow.medicines.get_by_id("org-1", 2)
            syrup.deactivate()
            uow.medicines.save(syrup)
            uow.commit()

        receipt = ReceivePurchaseOrderHandler(uow).handle("org-1", oid)

        assert receipt.outcome == "partial_success"
        assert _stock(uow, 1) == 25
        assert _stock(uow, 2) == 40
        with uow:
            order = uow.purchase_orders.get_by_id("org-1", oid)
            assert order.status == PurchaseOrderStatus.RECEIVED
            assert order.find_item(2).received_quantity == 0
            assert [r.medicine_id for r in uow.receipts.list_for_order("org-1", oid)] == [1]

    def test_all_or_nothing_rolls_back(self, uow):
        _seed(uow, stock=5)
        oid = _create_order(uow, [PurchaseOrderItemSpec(1, 20, "5"), PurchaseOrderItemSpec(2, 10, "2.5")]).id
        with uow:
            syrup = uow.medicines.get_by_id("org-1", 2)
            syrup.deactivate()
            uow.medicines.save(syrup)
            uow.commit()

        with pytest.raises(BusinessRuleError):
            ReceivePurchaseOrderHandler(uow).handle("org-1", oid, abort_on_line_failure=True)

        assert _stock(uow, 1) == 5
        assert ShowPurchaseOrderHandler(uow).handle("org-1", oid).status == "pending"

    def test_delete_removes_line_items(self, uow):
        _seed(uow)
        oid = _create_order(uow).id
        DeletePurchaseOrderHandler(uow).handle("org-1", oid)

        with uow:
            assert uow.purchase_orders.get_by_id("org-1", oid) is None
            remaining = uow._session.execute(
                select(func.count(PurchaseOrderItemRow.id)).where(PurchaseOrderItemRow.purchase_order_id == oid)
            ).scalar_one()
        assert remaining == 0

    def test_listing_filters_by_status(self, uow):
        _seed(uow)
        first = _create_order(uow, order_date=date(2024, 1, 10)).id
        second = _create_order(uow, order_date=date(2024, 1, 11)).id
        ApprovePurchaseOrderHandler(uow).handle("org-1", second)

        page = ListPurchaseOrdersHandler(uow).handle("org-1", status="pending")
        assert [o.id for o in page.orders] == [first]
        assert ListPurchaseOrdersHandler(uow).handle("org-1").total == 2


class TestStockLedgerPersistence:

    def test_rejected_adjustment_leaves_stock(self, uow):
        _seed(uow, stock=5)
        with pytest.raises(ValidationError):
            AdjustStockHandler(uow).handle("org-1", 1, -100, "Expired")
        assert _stock(uow) == 5

    def test_ledger_is_persisted(self, uow):
        _seed(uow, stock=5)
        AdjustStockHandler(uow).handle("org-1", 1, -2, "Damaged")
        with uow:
            entries = uow.inventory_transactions.list_for_medicine("org-1", 1)
        assert [(e.transaction_type.value, e.quantity_after) for e in entries] == [
            ("increment", 5),
            ("decrement", 3),
        ]


class TestSuppliers:

    def test_remove_unreferenced_supplier_unlinks_medicines(self, uow):
        _seed(uow)
        assert RemoveSupplierHandler(uow).handle("org-1", 1) == RemovalResult.DELETED
        with uow:
            assert uow.suppliers.get_by_id("org-1", 1) is None
            assert uow.medicines.get_by_id("org-1", 1).supplier_id is None

    def test_remove_referenced_supplier_deactivates(self, uow):
        _seed(uow)
        _create_order(uow)
        assert RemoveSupplierHandler(uow).handle("org-1", 1) == RemovalResult.DEACTIVATED

    def test_code_not_reused_after_hard_delete(self, uow):
        first = AddSupplierHandler(uow).handle("org-1", SupplierDetails(name="A"))
        AddSupplierHandler(uow).handle("org-1", SupplierDetails(name="B"))
        assert RemoveSupplierHandler(uow).handle("org-1", first.id) == RemovalResult.DELETED

        third = AddSupplierHandler(uow).handle("org-1", SupplierDetails(name="C"))
        assert third.supplier_code == "SUP-ORG1-00003"

    def test_email_lookup_is_case_insensitive(self, uow):
        AddSupplierHandler(uow).handle("org-1", SupplierDetails(name="A", email="Orders@A.pk"))
        with pytest.raises(ValidationError, match="Email already exists"):
            AddSupplierHandler(uow).handle("org-1", SupplierDetails(name="B", email="orders@a.PK"))


class TestUnitOfWork:

    def test_uncommitted_changes_are_discarded(self, uow):
        _seed(uow, stock=5)
        with uow:
            medicine = uow.medicines.get_by_id("org-1", 1, for_update=True)
            medicine.adjust(10)
            uow.medicines.save(medicine)
        assert _stock(uow) == 5

    def test_driver_errors_become_database_error(self, uow):
        with pytest.raises(DatabaseError, match="^Database operation failed$"):
            with uow:
                uow._session.execute(text("SELECT * FROM no_such_table"))

    def test_savepoint_keeps_outer_work(self, uow):
        _seed(uow, stock=5)
        with uow:
            medicine = uow.medicines.get_by_id("org-1", 1)
            medicine.adjust(1)
            uow.medicines.save(medicine)
            with pytest.raises(ValidationError):
                with uow.savepoint():
                    other = uow.medicines.get_by_id("org-1", 2)
                    other.adjust(5)
                    uow.medicines.save(other)
                    raise ValidationError("boom")
            uow.commit()
        assert _stock(uow, 1) == 6
        assert _stock(uow, 2) == 40
