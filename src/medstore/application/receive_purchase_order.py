"""Application service: Receive Purchase Order use case.

Runs the receiving reconciler inside a single unit of work: order row
lock, status change, per-line stock increments, receipt records and
status history commit together or not at all.
"""

from __future__ import annotations

import logging

from medstore.application.dto import ReceiptDTO, ReceiveItemSpec, receipt_dto
from medstore.application.support import audit, save_order, scoped_logger
from medstore.domain.exceptions import ValidationError
from medstore.domain.repository.unit_of_work import UnitOfWork
from medstore.domain.service.receiving_reconciler import ReceivingReconciler


class ReceivePurchaseOrderHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        strict_status: bool = False,
        logger: logging.Logger | None = None,
    ) -> None:
        self._uow = uow
        self._strict_status = strict_status
        self._logger = logger

    def handle(
        self,
        organization_id: str,
        order_id: int,
        items: list[ReceiveItemSpec] | None = None,
        actor_id: str | None = None,
        abort_on_line_failure: bool = False,
    ) -> ReceiptDTO:
        """Receive an order fully (``items`` omitted) or line by line.

        The returned DTO reports every line; a ``partial_success``
        outcome means the status advanced but some stock did not move.
        """
        requested = None
        if items is not None:
            for spec in items:
                if isinstance(spec.received_quantity, bool) or not isinstance(spec.received_quantity, int):
                    raise ValidationError(
                        f"Received quantity for medicine #{spec.medicine_id} must be an integer"
                    )
                if spec.received_quantity < 0:
                    raise ValidationError(
                        f"Received quantity for medicine #{spec.medicine_id} cannot be negative"
                    )
            requested = [(spec.medicine_id, spec.received_quantity) for spec in items]

        log = scoped_logger(
            self._logger, __name__, organization_id=organization_id, purchase_order_id=order_id
        )
        reconciler = ReceivingReconciler(self._uow, logger=log, strict_status=self._strict_status)

        with self._uow as uow:
            order, outcome = reconciler.receive(
                organization_id,
                order_id,
                requested,
                actor_id=actor_id,
                abort_on_line_failure=abort_on_line_failure,
            )
            save_order(uow, order)
            uow.commit()

        audit("purchase_order.received", organization_id, actor_id,
              purchase_order_id=order_id, status=order.status.value,
              outcome=outcome.kind.value,
              lines={line.medicine_id: line.received_quantity for line in outcome.applied_lines})
        return receipt_dto(order, outcome)
