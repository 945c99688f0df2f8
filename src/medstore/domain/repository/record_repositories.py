"""Abstract append-only stores for audit records."""

from __future__ import annotations

from abc import ABC, abstractmethod

from medstore.domain.model.records import (
    InventoryTransaction,
    PurchaseOrderReceipt,
    StatusChange,
)


class InventoryTransactionRepository(ABC):

    @abstractmethod
    def add(self, entry: InventoryTransaction) -> None:
        """Append one ledger entry."""

    @abstractmethod
    def list_for_medicine(
        self, organization_id: str, medicine_id: int
    ) -> list[InventoryTransaction]:
        """Entries for a medicine, oldest first."""


class ReceiptRepository(ABC):

    @abstractmethod
    def add(self, receipt: PurchaseOrderReceipt) -> None:
        """Append one goods-received line."""

    @abstractmethod
    def list_for_order(
        self, organization_id: str, purchase_order_id: int
    ) -> list[PurchaseOrderReceipt]:
        """Receipt lines for an order, oldest first."""


class StatusHistoryRepository(ABC):

    @abstractmethod
    def add(self, change: StatusChange) -> None:
        """Append one status transition."""

    @abstractmethod
    def list_for_order(
        self, organization_id: str, purchase_order_id: int
    ) -> list[StatusChange]:
        """Transitions for an order, oldest first."""
