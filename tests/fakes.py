"""In-memory fake repositories for testing.

These implement the same abstract interfaces as the SQLAlchemy
repositories but keep everything in dicts.  No database, no side effects.
The fake unit of work records commits and rollbacks, and snapshots
state so a rollback really discards uncommitted changes.
"""

from __future__ import annotations

import copy
from contextlib import contextmanager

from medstore.domain.model.medicine import Medicine
from medstore.domain.model.purchase_order import PurchaseOrder
from medstore.domain.model.records import (
    InventoryTransaction,
    PurchaseOrderReceipt,
    StatusChange,
)
from medstore.domain.model.supplier import Supplier
from medstore.domain.model.value_objects import Money
from medstore.domain.repository.medicine_repository import MedicineRepository
from medstore.domain.repository.purchase_order_repository import (
    PurchaseOrderFilter,
    PurchaseOrderRepository,
)
from medstore.domain.repository.record_repositories import (
    InventoryTransactionRepository,
    ReceiptRepository,
    StatusHistoryRepository,
)
from medstore.domain.repository.supplier_repository import SupplierRepository
from medstore.domain.repository.unit_of_work import UnitOfWork


class FakeMedicineRepository(MedicineRepository):

    def __init__(self, medicines: list[Medicine] | None = None) -> None:
        self._store: dict[int, Medicine] = {}
        self._next_id = 1
        self.locked: list[int] = []
        for m in medicines or []:
            self.save(m)

    def get_by_id(self, organization_id, medicine_id, for_update=False):
        medicine = self._store.get(medicine_id)
        if medicine is None or medicine.organization_id != organization_id:
            return None
        if for_update:
            self.locked.append(medicine_id)
        return medicine

    def list_all(self, organization_id, active_only=True):
        return sorted(
            (
                m for m in self._store.values()
                if m.organization_id == organization_id and (m.is_active or not active_only)
            ),
            key=lambda m: m.name,
        )

    def list_low_stock(self, organization_id):
        return [m for m in self.list_all(organization_id) if m.is_low_stock]

    def save(self, medicine):
        if medicine.id is None:
            medicine.id = self._next_id
            self._next_id += 1
        else:
            self._next_id = max(self._next_id, medicine.id + 1)
        self._store[medicine.id] = medicine


class FakeSupplierRepository(SupplierRepository):

    def __init__(self, suppliers: list[Supplier] | None = None) -> None:
        self._store: dict[int, Supplier] = {}
        self._next_id = 1
        for s in suppliers or []:
            self.save(s)

    def get_by_id(self, organization_id, supplier_id):
        supplier = self._store.get(supplier_id)
        if supplier is None or supplier.organization_id != organization_id:
            return None
        return supplier

    def get_by_email(self, organization_id, email):
        for s in self._store.values():
            if s.organization_id == organization_id and s.email == email.lower():
                return s
        return None

    def list_all(self, organization_id, active_only=False):
        return sorted(
            (
                s for s in self._store.values()
                if s.organization_id == organization_id and (s.is_active or not active_only)
            ),
            key=lambda s: s.name,
        )

    def list_supplier_codes(self, organization_id):
        return [s.supplier_code for s in self._store.values() if s.organization_id == organization_id]

    def save(self, supplier):
        if supplier.id is None:
            supplier.id = self._next_id
            self._next_id += 1
        else:
            self._next_id = max(self._next_id, supplier.id + 1)
        self._store[supplier.id] = supplier

    def delete(self, organization_id, supplier_id):
        self._store.pop(supplier_id, None)


class FakePurchaseOrderRepository(PurchaseOrderRepository):

    def __init__(self) -> None:
        self._store: dict[int, PurchaseOrder] = {}
        self._next_id = 1
        self._next_item_id = 1
        self.locked: list[int] = []

    def get_by_id(self, organization_id, order_id, for_update=False):
        order = self._store.get(order_id)
        if order is None or order.organization_id != organization_id:
            return None
        if for_update:
            self.locked.append(order_id)
        return order

    def find(self, organization_id, criteria: PurchaseOrderFilter, offset=0, limit=None):
        matches = [o for o in self._store.values() if self._matches(o, organization_id, criteria)]
        matches.sort(key=lambda o: (o.order_date, o.id), reverse=True)
        end = offset + limit if limit is not None else None
        return matches[offset:end]

    def count(self, organization_id, criteria):
        return len(self.find(organization_id, criteria))

    def list_po_numbers(self, organization_id):
        return [o.po_number for o in self._store.values() if o.organization_id == organization_id]

    def exists_for_supplier(self, organization_id, supplier_id):
        return any(
            o.organization_id == organization_id and o.supplier_id == supplier_id
            for o in self._store.values()
        )

    def save(self, order):
        if order.id is None:
            order.id = self._next_id
            self._next_id += 1
        for item in order.items:
            if item.id is None:
                item.id = self._next_item_id
                self._next_item_id += 1
        self._store[order.id] = order

    def delete(self, order):
        self._store.pop(order.id, None)

    @staticmethod
    def _matches(order, organization_id, criteria):
        if order.organization_id != organization_id:
            return False
        if criteria.status is not None and order.status != criteria.status:
            return False
        if criteria.supplier_id is not None and order.supplier_id != criteria.supplier_id:
            return False
        if criteria.start_date is not None and order.order_date < criteria.start_date:
            return False
        if criteria.end_date is not None and order.order_date > criteria.end_date:
            return False
        return True


class FakeInventoryTransactionRepository(InventoryTransactionRepository):

    def __init__(self) -> None:
        self.entries: list[InventoryTransaction] = []

    def add(self, entry):
        self.entries.append(entry)

    def list_for_medicine(self, organization_id, medicine_id):
        return [
            e for e in self.entries
            if e.organization_id == organization_id and e.medicine_id == medicine_id
        ]


class FakeReceiptRepository(ReceiptRepository):

    def __init__(self) -> None:
        self.entries: list[PurchaseOrderReceipt] = []

    def add(self, receipt):
        self.entries.append(receipt)

    def list_for_order(self, organization_id, purchase_order_id):
        return [
            r for r in self.entries
            if r.organization_id == organization_id and r.purchase_order_id == purchase_order_id
        ]


class FakeStatusHistoryRepository(StatusHistoryRepository):

    def __init__(self) -> None:
        self.entries: list[StatusChange] = []

    def add(self, change):
        self.entries.append(change)

    def list_for_order(self, organization_id, purchase_order_id):
        return [
            c for c in self.entries
            if c.organization_id == organization_id and c.purchase_order_id == purchase_order_id
        ]


_REPOSITORIES = (
    "medicines",
    "suppliers",
    "purchase_orders",
    "inventory_transactions",
    "receipts",
    "status_history",
)


class FakeUnitOfWork(UnitOfWork):
    """Snapshots every repository on enter and restores it on rollback."""

    def __init__(
        self,
        medicines: list[Medicine] | None = None,
        suppliers: list[Supplier] | None = None,
    ) -> None:
        self.medicines = FakeMedicineRepository(medicines)
        self.suppliers = FakeSupplierRepository(suppliers)
        self.purchase_orders = FakePurchaseOrderRepository()
        self.inventory_transactions = FakeInventoryTransactionRepository()
        self.receipts = FakeReceiptRepository()
        self.status_history = FakeStatusHistoryRepository()
        self.commits = 0
        self.rollbacks = 0
        self._snapshot: dict | None = None

    def __enter__(self) -> FakeUnitOfWork:
        self._snapshot = self._take_snapshot()
        return self

    def commit(self) -> None:
        self.commits += 1
        self._snapshot = self._take_snapshot()

    def rollback(self) -> None:
        if self._snapshot is None:
            return
        if self._snapshot != self._take_snapshot():
            self._restore(self._snapshot)
            self.rollbacks += 1

    @contextmanager
    def savepoint(self):
        snapshot = self._take_snapshot()
        try:
            yield
        except Exception:
            self._restore(snapshot)
            raise

    @property
    def committed(self) -> bool:
        return self.commits > 0

    def _take_snapshot(self) -> dict:
        return {
            name: copy.deepcopy(
                {k: v for k, v in getattr(self, name).__dict__.items() if k != "locked"}
            )
            for name in _REPOSITORIES
        }

    def _restore(self, snapshot: dict) -> None:
        for name in _REPOSITORIES:
            getattr(self, name).__dict__.update(copy.deepcopy(snapshot[name]))


def seeded_uow(stock: int = 5, organization_id: str = "org-1") -> FakeUnitOfWork:
    """One active supplier (#1, 30-day terms) and two medicines it supplies.

    #1 Paracetamol: ``stock`` on hand, cost 5.00.  #2 Cough Syrup: 40 on
    hand, cost 2.50.  Both have a low-stock threshold of 10.
    """
    supplier = Supplier.create(organization_id, "SUP-ORG1-00001", "Alpha Meds", payment_terms=30)
    medicines = [
        Medicine.create(organization_id, "Paracetamol", stock, Money.of("5.00"), Money.of("8.00"), supplier_id=1),
        Medicine.create(organization_id, "Cough Syrup", 40, Money.of("2.50"), Money.of("4.00"), supplier_id=1),
    ]
    return FakeUnitOfWork(medicines=medicines, suppliers=[supplier])
