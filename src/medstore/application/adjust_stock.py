"""Application service: Adjust Stock use case (manual ledger correction)."""

from __future__ import annotations

import logging

from medstore.application.dto import MedicineDTO, medicine_dto
from medstore.application.support import audit, scoped_logger
from medstore.domain.exceptions import ValidationError
from medstore.domain.repository.unit_of_work import UnitOfWork
from medstore.domain.service.stock_ledger import StockLedger

MANUAL_REFERENCE = "manual_adjustment"


class AdjustStockHandler:

    def __init__(self, uow: UnitOfWork, logger: logging.Logger | None = None) -> None:
        self._uow = uow
        self._logger = logger

    def handle(
        self,
        organization_id: str,
        medicine_id: int,
        delta: int,
        reason: str,
        actor_id: str | None = None,
    ) -> MedicineDTO:
        """Add (positive delta) or remove (negative delta) stock.

        Fails with ValidationError, leaving stock unchanged, if the
        result would be negative.
        """
        if not reason or not reason.strip():
            raise ValidationError("A reason is required for stock adjustments")

        log = scoped_logger(self._logger, __name__, organization_id=organization_id)
        with self._uow as uow:
            medicine = StockLedger(uow, log).adjust(
                organization_id,
                medicine_id,
                delta,
                reason=reason.strip(),
                reference_type=MANUAL_REFERENCE,
                actor_id=actor_id,
            )
            uow.commit()

        log.info("Adjusted stock of %s by %+d to %d", medicine.name, delta, medicine.quantity)
        audit("stock.adjusted", organization_id, actor_id,
              medicine_id=medicine_id, delta=delta, quantity=medicine.quantity, reason=reason)
        return medicine_dto(medicine)
