"""SQLAlchemy-backed append-only stores: ledger, receipts, status history."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from medstore.domain.model.records import (
    InventoryTransaction,
    PurchaseOrderReceipt,
    StatusChange,
    TransactionType,
)
from medstore.domain.repository.record_repositories import (
    InventoryTransactionRepository,
    ReceiptRepository,
    StatusHistoryRepository,
)
from medstore.infrastructure.persistence.orm import (
    InventoryTransactionRow,
    PurchaseOrderReceiptRow,
    StatusHistoryRow,
)


class SqlInventoryTransactionRepository(InventoryTransactionRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def add(self, entry: InventoryTransaction) -> None:
        self._session.add(
            InventoryTransactionRow(
                organization_id=entry.organization_id,
                medicine_id=entry.medicine_id,
                transaction_type=entry.transaction_type.value,
                quantity=entry.quantity,
                quantity_after=entry.quantity_after,
                reason=entry.reason,
                reference_type=entry.reference_type,
                reference_id=entry.reference_id,
                actor_id=entry.actor_id,
                created_at=entry.created_at,
            )
        )
        self._session.flush()

    def list_for_medicine(self, organization_id: str, medicine_id: int) -> list[InventoryTransaction]:
        rows = self._session.execute(
            select(InventoryTransactionRow)
            .where(
                InventoryTransactionRow.organization_id == organization_id,
                InventoryTransactionRow.medicine_id == medicine_id,
            )
            .order_by(InventoryTransactionRow.id)
        ).scalars()
        return [
            InventoryTransaction(
                organization_id=row.organization_id,
                medicine_id=row.medicine_id,
                transaction_type=TransactionType(row.transaction_type),
                quantity=row.quantity,
                quantity_after=row.quantity_after,
                reason=row.reason,
                reference_type=row.reference_type,
                reference_id=row.reference_id,
                actor_id=row.actor_id,
                created_at=row.created_at,
            )
            for row in rows
        ]


class SqlReceiptRepository(ReceiptRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def add(self, receipt: PurchaseOrderReceipt) -> None:
        self._session.add(
            PurchaseOrderReceiptRow(
                organization_id=receipt.organization_id,
                purchase_order_id=receipt.purchase_order_id,
                medicine_id=receipt.medicine_id,
                received_quantity=receipt.received_quantity,
                actor_id=receipt.actor_id,
                received_at=receipt.received_at,
            )
        )
        self._session.flush()

    def list_for_order(self, organization_id: str, purchase_order_id: int) -> list[PurchaseOrderReceipt]:
        rows = self._session.execute(
            select(PurchaseOrderReceiptRow)
            .where(
                PurchaseOrderReceiptRow.organization_id == organization_id,
                PurchaseOrderReceiptRow.purchase_order_id == purchase_order_id,
            )
            .order_by(PurchaseOrderReceiptRow.id)
        ).scalars()
        return [
            PurchaseOrderReceipt(
                organization_id=row.organization_id,
                purchase_order_id=row.purchase_order_id,
                medicine_id=row.medicine_id,
                received_quantity=row.received_quantity,
                actor_id=row.actor_id,
                received_at=row.received_at,
            )
            for row in rows
        ]


class SqlStatusHistoryRepository(StatusHistoryRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def add(self, change: StatusChange) -> None:
        self._session.add(
            StatusHistoryRow(
                organization_id=change.organization_id,
                purchase_order_id=change.purchase_order_id,
                old_status=change.old_status,
                new_status=change.new_status,
                actor_id=change.actor_id,
                notes=change.notes,
                changed_at=change.changed_at,
            )
        )
        self._session.flush()

    def list_for_order(self, organization_id: str, purchase_order_id: int) -> list[StatusChange]:
        rows = self._session.execute(
            select(StatusHistoryRow)
            .where(
                StatusHistoryRow.organization_id == organization_id,
                StatusHistoryRow.purchase_order_id == purchase_order_id,
            )
            .order_by(StatusHistoryRow.id)
        ).scalars()
        return [
            StatusChange(
                organization_id=row.organization_id,
                purchase_order_id=row.purchase_order_id,
                old_status=row.old_status,
                new_status=row.new_status,
                actor_id=row.actor_id,
                notes=row.notes,
                changed_at=row.changed_at,
            )
            for row in rows
        ]
