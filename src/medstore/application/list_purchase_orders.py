"""Application service: purchase order listings, statistics and overdue report."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date

from medstore.application.dto import PurchaseOrderDTO, purchase_order_dto
from medstore.domain.exceptions import ValidationError
from medstore.domain.model.purchase_order import PurchaseOrderStatus
from medstore.domain.model.value_objects import Money
from medstore.domain.repository.purchase_order_repository import PurchaseOrderFilter
from medstore.domain.repository.unit_of_work import UnitOfWork

MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class PurchaseOrderPage:
    orders: list[PurchaseOrderDTO]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


@dataclass(frozen=True)
class PurchaseOrderStats:
    total: int
    total_value: str
    status_breakdown: dict[str, int]


def parse_status(raw: str | None) -> PurchaseOrderStatus | None:
    if not raw:
        return None
    try:
        return PurchaseOrderStatus(raw.lower())
    except ValueError as exc:
        allowed = ", ".join(s.value for s in PurchaseOrderStatus)
        raise ValidationError(f"Status must be one of: {allowed}") from exc


class ListPurchaseOrdersHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        organization_id: str,
        status: str | None = None,
        supplier_id: int | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> PurchaseOrderPage:
        if page < 1:
            raise ValidationError("Page must be 1 or greater")
        limit = max(1, min(limit, MAX_PAGE_SIZE))
        criteria = PurchaseOrderFilter(
            status=parse_status(status),
            supplier_id=supplier_id,
            start_date=start_date,
            end_date=end_date,
        )
        with self._uow as uow:
            total = uow.purchase_orders.count(organization_id, criteria)
            orders = uow.purchase_orders.find(
                organization_id, criteria, offset=(page - 1) * limit, limit=limit
            )
        return PurchaseOrderPage(
            orders=[purchase_order_dto(o) for o in orders],
            page=page,
            limit=limit,
            total=total,
        )


class PurchaseOrderStatsHandler:
    """Order count and value per status."""

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, organization_id: str, supplier_id: int | None = None) -> PurchaseOrderStats:
        with self._uow as uow:
            orders = uow.purchase_orders.find(
                organization_id, PurchaseOrderFilter(supplier_id=supplier_id)
            )

        breakdown: dict[str, int] = {}
        value = Money.zero()
        for order in orders:
            breakdown[order.status.value] = breakdown.get(order.status.value, 0) + 1
            value = value + order.total
        return PurchaseOrderStats(total=len(orders), total_value=str(value), status_breakdown=breakdown)


class OverduePurchaseOrdersHandler:
    """Ordered purchase orders whose expected delivery date has passed."""

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, organization_id: str, today: date | None = None) -> list[PurchaseOrderDTO]:
        today = today or date.today()
        with self._uow as uow:
            orders = uow.purchase_orders.find(
                organization_id, PurchaseOrderFilter(status=PurchaseOrderStatus.ORDERED)
            )
        overdue = sorted(
            (o for o in orders if o.is_overdue(today)),
            key=lambda o: o.expected_delivery_date,  # type: ignore[arg-type, return-value]
        )
        return [purchase_order_dto(o) for o in overdue]
