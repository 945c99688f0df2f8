"""Application service: Approve Purchase Order use case."""

from __future__ import annotations

import logging
from decimal import Decimal

from medstore.application.dto import PurchaseOrderDTO, purchase_order_dto
from medstore.application.support import audit, load_order, save_order, scoped_logger
from medstore.domain.model.value_objects import Money
from medstore.domain.repository.unit_of_work import UnitOfWork


class ApprovePurchaseOrderHandler:

    def __init__(self, uow: UnitOfWork, logger: logging.Logger | None = None) -> None:
        self._uow = uow
        self._logger = logger

    def handle(
        self,
        organization_id: str,
        order_id: int,
        actor_id: str | None = None,
        approved_amount: str | Decimal | None = None,
        notes: str | None = None,
    ) -> PurchaseOrderDTO:
        """Approve a pending order.  No stock is touched."""
        amount = Money.of(approved_amount) if approved_amount not in (None, "") else None

        with self._uow as uow:
            order = load_order(uow, organization_id, order_id, for_update=True)
            order.approve(actor_id, approved_amount=amount, notes=notes)
            save_order(uow, order)
            uow.commit()

        scoped_logger(self._logger, __name__, organization_id=organization_id).info(
            "Approved purchase order %s", order.po_number
        )
        audit("purchase_order.approved", organization_id, actor_id,
              purchase_order_id=order_id, approved_amount=str(order.approved_amount))
        return purchase_order_dto(order)
