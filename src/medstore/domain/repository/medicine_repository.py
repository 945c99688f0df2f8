"""Abstract repository for the Medicine aggregate (the stock ledger).

Defined in the domain layer so the domain never depends on
infrastructure.  Every call is scoped by organization id.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from medstore.domain.model.medicine import Medicine


class MedicineRepository(ABC):

    @abstractmethod
    def get_by_id(
        self, organization_id: str, medicine_id: int, for_update: bool = False
    ) -> Medicine | None:
        """Return a medicine, or None.  ``for_update`` takes a row lock."""

    @abstractmethod
    def list_all(self, organization_id: str, active_only: bool = True) -> list[Medicine]:
        """Return every medicine of the organization, ordered by name."""

    @abstractmethod
    def list_low_stock(self, organization_id: str) -> list[Medicine]:
        """Return active medicines whose quantity is at or below threshold."""

    @abstractmethod
    def save(self, medicine: Medicine) -> None:
        """Persist a new or updated medicine (assigns ``id`` when new)."""
