"""Unit tests for the StockLedger domain service."""

import pytest

from medstore.domain.exceptions import EntityNotFoundError, ValidationError
from medstore.domain.model.medicine import Medicine
from medstore.domain.model.records import TransactionType
from medstore.domain.model.value_objects import Money
from medstore.domain.service.stock_ledger import StockLedger
from tests.fakes import FakeUnitOfWork


def _setup(quantity: int = 5):
    medicine = Medicine.create(
        organization_id="org-1",
        name="Amoxicillin",
        quantity=quantity,
        cost_price=Money.of("12.00"),
        selling_price=Money.of("18.00"),
    )
    uow = FakeUnitOfWork(medicines=[medicine])
    return uow, StockLedger(uow)


class TestAdjust:

    def test_increment_writes_ledger_entry(self):
        uow, ledger = _setup(quantity=5)
        medicine = ledger.adjust("org-1", 1, 20, reason="Received", reference_type="purchase_order", reference_id=9)

        assert medicine.quantity == 25
        entry = uow.inventory_transactions.entries[-1]
        assert entry.transaction_type == TransactionType.INCREMENT
        assert entry.quantity == 20
        assert entry.quantity_after == 25
        assert entry.reference_id == 9

    def test_decrement_records_absolute_quantity(self):
        uow, ledger = _setup(quantity=5)
        ledger.adjust("org-1", 1, -3, reason="Damaged")
        entry = uow.inventory_transactions.entries[-1]
        assert entry.transaction_type == TransactionType.DECREMENT
        assert entry.quantity == 3
        assert entry.quantity_after == 2

    def test_takes_row_lock(self):
        uow, ledger = _setup()
        ledger.adjust("org-1", 1, 1, reason="Count correction")
        assert uow.medicines.locked == [1]

    def test_negative_result_rejected_without_writes(self):
        uow, ledger = _setup(quantity=5)
        with pytest.raises(ValidationError, match="Insufficient stock"):
            ledger.adjust("org-1", 1, -100, reason="Oops")
        assert uow.medicines.get_by_id("org-1", 1).quantity == 5
        assert uow.inventory_transactions.entries == []

    def test_unknown_medicine(self):
        _, ledger = _setup()
        with pytest.raises(EntityNotFoundError, match="Medicine #99 not found"):
            ledger.adjust("org-1", 99, 1, reason="x")

    def test_other_organization_is_not_found(self):
        _, ledger = _setup()
        with pytest.raises(EntityNotFoundError):
            ledger.adjust("org-2", 1, 1, reason="x")

    def test_inactive_medicine_is_not_found(self):
        uow, ledger = _setup()
        uow.medicines.get_by_id("org-1", 1).deactivate()
        with pytest.raises(EntityNotFoundError):
            ledger.adjust("org-1", 1, 1, reason="x")
