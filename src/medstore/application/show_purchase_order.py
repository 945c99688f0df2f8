"""Application service: Show Purchase Order use cases (queries)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from medstore.application.dto import PurchaseOrderDTO, purchase_order_dto
from medstore.application.support import load_order
from medstore.domain.repository.unit_of_work import UnitOfWork


@dataclass(frozen=True)
class StatusChangeDTO:
    old_status: str | None
    new_status: str
    actor_id: str | None
    notes: str | None
    changed_at: datetime


@dataclass(frozen=True)
class ReceiptRecordDTO:
    medicine_id: int
    received_quantity: int
    actor_id: str | None
    received_at: datetime


class ShowPurchaseOrderHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, organization_id: str, order_id: int) -> PurchaseOrderDTO:
        with self._uow as uow:
            order = load_order(uow, organization_id, order_id)
        return purchase_order_dto(order)


class PurchaseOrderHistoryHandler:
    """Status transitions and goods-received lines of one order."""

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self, organization_id: str, order_id: int
    ) -> tuple[list[StatusChangeDTO], list[ReceiptRecordDTO]]:
        with self._uow as uow:
            load_order(uow, organization_id, order_id)
            changes = uow.status_history.list_for_order(organization_id, order_id)
            receipts = uow.receipts.list_for_order(organization_id, order_id)
        return (
            [
                StatusChangeDTO(c.old_status, c.new_status, c.actor_id, c.notes, c.changed_at)
                for c in changes
            ],
            [
                ReceiptRecordDTO(r.medicine_id, r.received_quantity, r.actor_id, r.received_at)
                for r in receipts
            ],
        )
