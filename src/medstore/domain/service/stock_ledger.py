"""Domain service: Stock Ledger.

The single mutation primitive for medicine quantities.  Every change
goes through ``adjust()``, which locks the medicine row, refuses to go
below zero and appends an inventory transaction, all inside the
caller's unit of work.
"""

from __future__ import annotations

import logging

from medstore.domain.exceptions import EntityNotFoundError
from medstore.domain.model.medicine import Medicine
from medstore.domain.model.records import InventoryTransaction, TransactionType
from medstore.domain.repository.unit_of_work import UnitOfWork

_log = logging.getLogger(__name__)


class StockLedger:

    def __init__(self, uow: UnitOfWork, logger: logging.Logger | logging.LoggerAdapter | None = None) -> None:
        self._uow = uow
        self._log = logger or _log

    def adjust(
        self,
        organization_id: str,
        medicine_id: int,
        delta: int,
        reason: str,
        reference_type: str | None = None,
        reference_id: int | None = None,
        actor_id: str | None = None,
    ) -> Medicine:
        """Apply a signed delta to a medicine's stock.

        Raises EntityNotFoundError for unknown or inactive medicines and
        ValidationError when the result would be negative; in both cases
        nothing is written.
        """
        medicine = self._uow.medicines.get_by_id(organization_id, medicine_id, for_update=True)
        if medicine is None or not medicine.is_active:
            raise EntityNotFoundError(f"Medicine #{medicine_id} not found")

        before = medicine.quantity
        after = medicine.adjust(delta)
        self._uow.medicines.save(medicine)
        self._uow.inventory_transactions.add(
            InventoryTransaction(
                organization_id=organization_id,
                medicine_id=medicine_id,
                transaction_type=TransactionType.INCREMENT if delta > 0 else TransactionType.DECREMENT,
                quantity=abs(delta),
                quantity_after=after,
                reason=reason,
                reference_type=reference_type,
                reference_id=reference_id,
                actor_id=actor_id,
            )
        )
        self._log.debug(
            "Stock for medicine %s changed %d -> %d (%s)", medicine_id, before, after, reason
        )
        return medicine
