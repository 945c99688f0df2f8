"""Application service: Show Inventory use cases (queries)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from medstore.application.dto import MedicineDTO, medicine_dto
from medstore.domain.exceptions import EntityNotFoundError
from medstore.domain.repository.unit_of_work import UnitOfWork


@dataclass(frozen=True)
class LedgerEntryDTO:
    transaction_type: str
    quantity: int
    quantity_after: int
    reason: str
    reference: str | None
    actor_id: str | None
    created_at: datetime


class ShowInventoryHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, organization_id: str, low_stock_only: bool = False) -> list[MedicineDTO]:
        with self._uow as uow:
            if low_stock_only:
                medicines = uow.medicines.list_low_stock(organization_id)
            else:
                medicines = uow.medicines.list_all(organization_id)
        return [medicine_dto(m) for m in medicines]


class ShowLedgerHandler:
    """The inventory transaction trail of one medicine."""

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, organization_id: str, medicine_id: int) -> list[LedgerEntryDTO]:
        with self._uow as uow:
            if uow.medicines.get_by_id(organization_id, medicine_id) is None:
                raise EntityNotFoundError(f"Medicine #{medicine_id} not found")
            entries = uow.inventory_transactions.list_for_medicine(organization_id, medicine_id)
        return [
            LedgerEntryDTO(
                transaction_type=e.transaction_type.value,
                quantity=e.quantity,
                quantity_after=e.quantity_after,
                reason=e.reason,
                reference=f"{e.reference_type}#{e.reference_id}" if e.reference_id else e.reference_type,
                actor_id=e.actor_id,
                created_at=e.created_at,
            )
            for e in entries
        ]
