"""SQLAlchemy-backed implementation of PurchaseOrderRepository.

Orders and their line items live in two tables; the aggregate is
always loaded and saved as a whole.  Monetary totals are denormalised
onto the order row for reporting.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import delete, exists, func, select
from sqlalchemy.orm import Session

from medstore.domain.model.purchase_order import (
    PurchaseOrder,
    PurchaseOrderItem,
    PurchaseOrderStatus,
)
from medstore.domain.model.value_objects import Money, Quantity
from medstore.domain.repository.purchase_order_repository import (
    PurchaseOrderFilter,
    PurchaseOrderRepository,
)
from medstore.infrastructure.persistence.orm import PurchaseOrderItemRow, PurchaseOrderRow


class SqlPurchaseOrderRepository(PurchaseOrderRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    # --- PurchaseOrderRepository interface ------------------------------------

    def get_by_id(
        self, organization_id: str, order_id: int, for_update: bool = False
    ) -> PurchaseOrder | None:
        stmt = select(PurchaseOrderRow).where(
            PurchaseOrderRow.organization_id == organization_id,
            PurchaseOrderRow.id == order_id,
        )
        if for_update:
            stmt = stmt.with_for_update()
        row = self._session.execute(stmt).scalar_one_or_none()
        return self._to_domain(row) if row else None

    def find(
        self,
        organization_id: str,
        criteria: PurchaseOrderFilter,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[PurchaseOrder]:
        stmt = self._filtered(select(PurchaseOrderRow), organization_id, criteria)
        stmt = stmt.order_by(PurchaseOrderRow.order_date.desc(), PurchaseOrderRow.id.desc())
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        return [self._to_domain(row) for row in self._session.execute(stmt).scalars()]

    def count(self, organization_id: str, criteria: PurchaseOrderFilter) -> int:
        stmt = self._filtered(select(func.count(PurchaseOrderRow.id)), organization_id, criteria)
        return self._session.execute(stmt).scalar_one()

    def list_po_numbers(self, organization_id: str) -> list[str]:
        return list(
            self._session.execute(
                select(PurchaseOrderRow.po_number).where(
                    PurchaseOrderRow.organization_id == organization_id
                )
            ).scalars()
        )

    def exists_for_supplier(self, organization_id: str, supplier_id: int) -> bool:
        return self._session.execute(
            select(
                exists().where(
                    PurchaseOrderRow.organization_id == organization_id,
                    PurchaseOrderRow.supplier_id == supplier_id,
                )
            )
        ).scalar_one()

    def save(self, order: PurchaseOrder) -> None:
        row = None
        if order.id is not None:
            row = self._session.get(PurchaseOrderRow, order.id)
        if row is None:
            row = PurchaseOrderRow(
                organization_id=order.organization_id,
                po_number=order.po_number,
                created_by=order.created_by,
                created_at=order.created_at,
            )
            self._session.add(row)
        self._to_row(order, row)
        self._session.flush()
        order.id = row.id

        existing = {
            item_row.id: item_row
            for item_row in self._session.execute(
                select(PurchaseOrderItemRow).where(PurchaseOrderItemRow.purchase_order_id == row.id)
            ).scalars()
        }
        pairs = []
        for item in order.items:
            item_row = existing.get(item.id) if item.id is not None else None
            if item_row is None:
                item_row = PurchaseOrderItemRow(
                    purchase_order_id=row.id,
                    medicine_id=item.medicine_id,
                    medicine_name=item.medicine_name,
                    quantity=item.quantity.value,
                    unit_cost=item.unit_cost.amount,
                    total_cost=item.line_total.amount,
                )
                self._session.add(item_row)
            item_row.received_quantity = item.received_quantity
            pairs.append((item, item_row))
        self._session.flush()

        for item, item_row in pairs:
            item.id = item_row.id

    def delete(self, order: PurchaseOrder) -> None:
        self._session.execute(
            delete(PurchaseOrderItemRow).where(PurchaseOrderItemRow.purchase_order_id == order.id)
        )
        self._session.execute(
            delete(PurchaseOrderRow).where(
                PurchaseOrderRow.organization_id == order.organization_id,
                PurchaseOrderRow.id == order.id,
            )
        )

    # --- Query helpers --------------------------------------------------------

    @staticmethod
    def _filtered(stmt, organization_id: str, criteria: PurchaseOrderFilter):
        stmt = stmt.where(PurchaseOrderRow.organization_id == organization_id)
        if criteria.status is not None:
            stmt = stmt.where(PurchaseOrderRow.status == criteria.status.value)
        if criteria.supplier_id is not None:
            stmt = stmt.where(PurchaseOrderRow.supplier_id == criteria.supplier_id)
        if criteria.start_date is not None:
            stmt = stmt.where(PurchaseOrderRow.order_date >= criteria.start_date)
        if criteria.end_date is not None:
            stmt = stmt.where(PurchaseOrderRow.order_date <= criteria.end_date)
        return stmt

    def _item_rows(self, order_id: int) -> list[PurchaseOrderItemRow]:
        return list(
            self._session.execute(
                select(PurchaseOrderItemRow)
                .where(PurchaseOrderItemRow.purchase_order_id == order_id)
                .order_by(PurchaseOrderItemRow.id)
            ).scalars()
        )

    # --- Mapping --------------------------------------------------------------

    @staticmethod
    def _to_row(order: PurchaseOrder, row: PurchaseOrderRow) -> None:
        row.supplier_id = order.supplier_id
        row.status = order.status.value
        row.order_date = order.order_date
        row.expected_delivery_date = order.expected_delivery_date
        row.actual_delivery_date = order.actual_delivery_date
        row.currency = order.currency
        row.subtotal = order.subtotal.amount
        row.tax_percent = order.tax_percent
        row.tax_amount = order.tax_amount.amount
        row.discount_amount = order.discount_amount.amount
        row.total_amount = order.total.amount
        row.notes = order.notes
        row.approved_by = order.approved_by
        row.approved_at = order.approved_at
        row.approved_amount = order.approved_amount.amount if order.approved_amount else None
        row.updated_at = order.updated_at

    def _to_domain(self, row: PurchaseOrderRow) -> PurchaseOrder:
        currency = row.currency
        items = [
            PurchaseOrderItem(
                medicine_id=item_row.medicine_id,
                medicine_name=item_row.medicine_name,
                quantity=Quantity(item_row.quantity),
                unit_cost=Money(item_row.unit_cost, currency),
                received_quantity=item_row.received_quantity,
                id=item_row.id,
            )
            for item_row in self._item_rows(row.id)
        ]
        return PurchaseOrder(
            id=row.id,
            organization_id=row.organization_id,
            po_number=row.po_number,
            supplier_id=row.supplier_id,
            items=items,
            created_by=row.created_by,
            status=PurchaseOrderStatus(row.status),
            order_date=row.order_date,
            expected_delivery_date=row.expected_delivery_date,
            actual_delivery_date=row.actual_delivery_date,
            tax_percent=Decimal(row.tax_percent),
            discount_amount=Money(row.discount_amount, currency),
            notes=row.notes,
            approved_by=row.approved_by,
            approved_at=row.approved_at,
            approved_amount=(
                Money(row.approved_amount, currency) if row.approved_amount is not None else None
            ),
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
