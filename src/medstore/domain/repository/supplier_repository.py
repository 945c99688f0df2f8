"""Abstract repository for the Supplier aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from medstore.domain.model.supplier import Supplier


class SupplierRepository(ABC):

    @abstractmethod
    def get_by_id(self, organization_id: str, supplier_id: int) -> Supplier | None:
        """Return a supplier, or None if not found in the organization."""

    @abstractmethod
    def get_by_email(self, organization_id: str, email: str) -> Supplier | None:
        """Return the supplier using *email*, or None."""

    @abstractmethod
    def list_all(self, organization_id: str, active_only: bool = False) -> list[Supplier]:
        """Return suppliers ordered by name."""

    @abstractmethod
    def list_supplier_codes(self, organization_id: str) -> list[str]:
        """Every supplier code currently on file for the organization."""

    @abstractmethod
    def save(self, supplier: Supplier) -> None:
        """Persist a new or updated supplier (assigns ``id`` when new)."""

    @abstractmethod
    def delete(self, organization_id: str, supplier_id: int) -> None:
        """Remove a supplier permanently."""
