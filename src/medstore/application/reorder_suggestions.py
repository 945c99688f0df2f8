"""Application service: reorder suggestions and one-click purchase orders.

Listing is a pure read of the stock ledger.  Auto-generation turns each
qualifying supplier batch into a pending (or approved) purchase order
inside one transaction, so either every order is raised or none is.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from medstore.application.create_purchase_order import open_purchase_order
from medstore.application.dto import (
    PurchaseOrderDTO,
    SupplierReorderDTO,
    purchase_order_dto,
    supplier_reorder_dto,
)
from medstore.application.support import audit, save_order, scoped_logger
from medstore.domain.model.purchase_order import PurchaseOrder
from medstore.domain.model.supplier import DEFAULT_PAYMENT_TERMS_DAYS
from medstore.domain.model.value_objects import Money, Quantity
from medstore.domain.repository.unit_of_work import UnitOfWork
from medstore.domain.service.reorder_advisor import ReorderAdvisor

AUTO_ORDER_NOTE = "Auto-generated from low-stock reorder suggestions"


class ListReorderSuggestionsHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, organization_id: str) -> list[SupplierReorderDTO]:
        with self._uow as uow:
            groups = ReorderAdvisor(uow).suggest(organization_id)
        return [supplier_reorder_dto(g) for g in groups]


class GenerateAutoPurchaseOrdersHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        default_payment_terms: int = DEFAULT_PAYMENT_TERMS_DAYS,
        logger: logging.Logger | None = None,
    ) -> None:
        self._uow = uow
        self._default_payment_terms = default_payment_terms
        self._logger = logger

    def handle(
        self,
        organization_id: str,
        actor_id: str | None,
        group_by_supplier: bool = True,
        min_order_value: str | Decimal = "0",
        auto_approve: bool = False,
    ) -> list[PurchaseOrderDTO]:
        """Raise purchase orders for every batch worth at least ``min_order_value``."""
        threshold = Money.of(min_order_value)
        log = scoped_logger(self._logger, __name__, organization_id=organization_id)

        created: list[PurchaseOrder] = []
        with self._uow as uow:
            groups = ReorderAdvisor(uow).suggest(organization_id)
            batches = ReorderAdvisor.plan_orders(groups, group_by_supplier, threshold)
            for batch in batches:
                lines = [
                    (s.medicine.id, Quantity(s.suggested_quantity), s.medicine.cost_price)
                    for s in batch.suggestions
                ]
                order = open_purchase_order(
                    uow,
                    organization_id,
                    actor_id,
                    batch.supplier,  # type: ignore[arg-type]
                    lines,  # type: ignore[arg-type]
                    notes=AUTO_ORDER_NOTE,
                    default_payment_terms=self._default_payment_terms,
                )
                if auto_approve:
                    order.approve(actor_id)
                    save_order(uow, order)
                created.append(order)
            uow.commit()

        skipped = sum(g.item_count for g in groups if g.supplier is not None) - sum(
            b.item_count for b in batches
        )
        log.info(
            "Auto-generated %d purchase order(s); %d suggestion(s) below minimum order value",
            len(created), skipped,
        )
        for order in created:
            audit("purchase_order.auto_generated", organization_id, actor_id,
                  purchase_order_id=order.id, po_number=order.po_number,
                  status=order.status.value, total=str(order.total))
        return [purchase_order_dto(o) for o in created]
