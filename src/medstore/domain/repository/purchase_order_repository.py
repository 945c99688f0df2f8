"""Abstract repository for the PurchaseOrder aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date

from medstore.domain.model.purchase_order import PurchaseOrder, PurchaseOrderStatus


@dataclass(frozen=True)
class PurchaseOrderFilter:
    status: PurchaseOrderStatus | None = None
    supplier_id: int | None = None
    start_date: date | None = None
    end_date: date | None = None


class PurchaseOrderRepository(ABC):

    @abstractmethod
    def get_by_id(
        self, organization_id: str, order_id: int, for_update: bool = False
    ) -> PurchaseOrder | None:
        """Return an order with its line items, or None.

        ``for_update`` locks the order row for the rest of the transaction.
        """

    @abstractmethod
    def find(
        self,
        organization_id: str,
        criteria: PurchaseOrderFilter,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[PurchaseOrder]:
        """Return matching orders, newest order date first."""

    @abstractmethod
    def count(self, organization_id: str, criteria: PurchaseOrderFilter) -> int:
        """Number of orders matching *criteria*."""

    @abstractmethod
    def list_po_numbers(self, organization_id: str) -> list[str]:
        """Every PO number already issued by the organization."""

    @abstractmethod
    def exists_for_supplier(self, organization_id: str, supplier_id: int) -> bool:
        """True if any order references the supplier."""

    @abstractmethod
    def save(self, order: PurchaseOrder) -> None:
        """Persist a new or updated order and its line items."""

    @abstractmethod
    def delete(self, order: PurchaseOrder) -> None:
        """Remove the order's line items, then the order itself."""
