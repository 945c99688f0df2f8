"""Abstract unit of work — one database transaction per use case.

Handlers open a unit of work with ``with uow:``; leaving the block
without ``commit()`` (or via an exception) rolls everything back.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager

from medstore.domain.repository.medicine_repository import MedicineRepository
from medstore.domain.repository.purchase_order_repository import PurchaseOrderRepository
from medstore.domain.repository.record_repositories import (
    InventoryTransactionRepository,
    ReceiptRepository,
    StatusHistoryRepository,
)
from medstore.domain.repository.supplier_repository import SupplierRepository


class UnitOfWork(ABC):

    medicines: MedicineRepository
    suppliers: SupplierRepository
    purchase_orders: PurchaseOrderRepository
    inventory_transactions: InventoryTransactionRepository
    receipts: ReceiptRepository
    status_history: StatusHistoryRepository

    def __enter__(self) -> UnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.rollback()

    @abstractmethod
    def commit(self) -> None:
        """Make every change since ``__enter__`` durable."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard uncommitted changes (a no-op after ``commit``)."""

    @abstractmethod
    def savepoint(self) -> AbstractContextManager[None]:
        """Nested scope whose changes are undone alone if it raises."""
