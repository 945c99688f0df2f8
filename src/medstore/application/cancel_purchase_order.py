"""Application service: Cancel Purchase Order use case.

Only orders that have not received anything can be cancelled, so there
is never stock to reverse.
"""

from __future__ import annotations

import logging

from medstore.application.dto import PurchaseOrderDTO, purchase_order_dto
from medstore.application.support import audit, load_order, save_order, scoped_logger
from medstore.domain.repository.unit_of_work import UnitOfWork


class CancelPurchaseOrderHandler:

    def __init__(self, uow: UnitOfWork, logger: logging.Logger | None = None) -> None:
        self._uow = uow
        self._logger = logger

    def handle(
        self,
        organization_id: str,
        order_id: int,
        actor_id: str | None = None,
        reason: str | None = None,
    ) -> PurchaseOrderDTO:
        with self._uow as uow:
            order = load_order(uow, organization_id, order_id, for_update=True)
            order.cancel(actor_id, reason)
            save_order(uow, order)
            uow.commit()

        scoped_logger(self._logger, __name__, organization_id=organization_id).info(
            "Cancelled purchase order %s", order.po_number
        )
        audit("purchase_order.cancelled", organization_id, actor_id,
              purchase_order_id=order_id, reason=reason)
        return purchase_order_dto(order)
