"""Application service: Delete Purchase Order use case."""

from __future__ import annotations

import logging

from medstore.application.support import audit, load_order, scoped_logger
from medstore.domain.repository.unit_of_work import UnitOfWork


class DeletePurchaseOrderHandler:

    def __init__(self, uow: UnitOfWork, logger: logging.Logger | None = None) -> None:
        self._uow = uow
        self._logger = logger

    def handle(self, organization_id: str, order_id: int, actor_id: str | None = None) -> None:
        """Delete a pending order together with its line items."""
        with self._uow as uow:
            order = load_order(uow, organization_id, order_id, for_update=True)
            order.ensure_deletable()
            uow.purchase_orders.delete(order)
            uow.commit()

        scoped_logger(self._logger, __name__, organization_id=organization_id).info(
            "Deleted purchase order %s", order.po_number
        )
        audit("purchase_order.deleted", organization_id, actor_id,
              purchase_order_id=order_id, po_number=order.po_number)
