"""Integration tests for medicine intake, manual adjustment and ledger queries."""

import pytest

from medstore.application.add_medicine import AddMedicineHandler
from medstore.application.adjust_stock import AdjustStockHandler
from medstore.application.show_inventory import ShowInventoryHandler, ShowLedgerHandler
from medstore.domain.exceptions import EntityNotFoundError, ValidationError
from tests.fakes import FakeUnitOfWork, seeded_uow


class TestAdjustStock:

    def test_add_stock(self):
        uow = seeded_uow(stock=5)
        dto = AdjustStockHandler(uow).handle("org-1", 1, 10, "Stock count correction", actor_id="u-1")
        assert dto.quantity == 15
        entry = uow.inventory_transactions.entries[-1]
        assert entry.reference_type == "manual_adjustment"
        assert entry.actor_id == "u-1"
        assert uow.commits == 1

    def test_going_negative_is_rejected_and_stock_unchanged(self):
        uow = seeded_uow(stock=5)
        with pytest.raises(ValidationError, match="Insufficient stock"):
            AdjustStockHandler(uow).handle("org-1", 1, -100, "Expired batch")
        assert uow.medicines.get_by_id("org-1", 1).quantity == 5
        assert uow.commits == 0

    def test_reason_required(self):
        with pytest.raises(ValidationError, match="reason is required"):
            AdjustStockHandler(seeded_uow()).handle("org-1", 1, 1, "  ")

    def test_unknown_medicine(self):
        with pytest.raises(EntityNotFoundError):
            AdjustStockHandler(seeded_uow()).handle("org-1", 99, 1, "x")

    def test_low_stock_flag_follows_quantity(self):
        uow = seeded_uow(stock=50)
        assert AdjustStockHandler(uow).handle("org-1", 1, -45, "Sold").is_low_stock


class TestAddMedicine:

    def test_opening_stock_is_logged(self):
        uow = FakeUnitOfWork()
        dto = AddMedicineHandler(uow).handle(
            "org-1", name="Ibuprofen", quantity=30, cost_price="3.10", selling_price="4.50",
            batch_number="B-77",
        )
        assert dto.id == 1
        assert dto.cost_price == "PKR 3.10"
        [entry] = uow.inventory_transactions.list_for_medicine("org-1", dto.id)
        assert entry.quantity_after == 30
        assert entry.reason == "Opening stock"

    def test_zero_opening_stock_writes_no_ledger_entry(self):
        uow = FakeUnitOfWork()
        AddMedicineHandler(uow).handle("org-1", "Ibuprofen", 0, "3", "4")
        assert uow.inventory_transactions.entries == []

    def test_unknown_supplier(self):
        with pytest.raises(EntityNotFoundError, match="Supplier #5 not found"):
            AddMedicineHandler(FakeUnitOfWork()).handle("org-1", "Ibuprofen", 1, "3", "4", supplier_id=5)


class TestInventoryQueries:

    def test_low_stock_only(self):
        uow = seeded_uow(stock=3)
        names = [m.name for m in ShowInventoryHandler(uow).handle("org-1", low_stock_only=True)]
        assert names == ["Paracetamol"]

    def test_all_sorted_by_name(self):
        names = [m.name for m in ShowInventoryHandler(seeded_uow()).handle("org-1")]
        assert names == ["Cough Syrup", "Paracetamol"]

    def test_ledger(self):
        uow = seeded_uow(stock=5)
        AdjustStockHandler(uow).handle("org-1", 1, 10, "Found in back room")
        AdjustStockHandler(uow).handle("org-1", 1, -2, "Damaged")

        entries = ShowLedgerHandler(uow).handle("org-1", 1)
        assert [(e.transaction_type, e.quantity, e.quantity_after) for e in entries] == [
            ("increment", 10, 15),
            ("decrement", 2, 13),
        ]

    def test_ledger_of_unknown_medicine(self):
        with pytest.raises(EntityNotFoundError):
            ShowLedgerHandler(seeded_uow()).handle("org-1", 9)
