"""Application service: Mark Purchase Order as Ordered use case."""

from __future__ import annotations

import logging

from medstore.application.dto import PurchaseOrderDTO, purchase_order_dto
from medstore.application.support import audit, load_order, save_order, scoped_logger
from medstore.domain.repository.unit_of_work import UnitOfWork


class MarkOrderedHandler:

    def __init__(self, uow: UnitOfWork, logger: logging.Logger | None = None) -> None:
        self._uow = uow
        self._logger = logger

    def handle(
        self, organization_id: str, order_id: int, actor_id: str | None = None
    ) -> PurchaseOrderDTO:
        """Record that an approved order was sent to the supplier."""
        with self._uow as uow:
            order = load_order(uow, organization_id, order_id, for_update=True)
            order.mark_ordered(actor_id)
            save_order(uow, order)
            uow.commit()

        scoped_logger(self._logger, __name__, organization_id=organization_id).info(
            "Purchase order %s marked as ordered", order.po_number
        )
        audit("purchase_order.ordered", organization_id, actor_id, purchase_order_id=order_id)
        return purchase_order_dto(order)
