"""Application service: Add Medicine use case (inventory intake)."""

from __future__ import annotations

from datetime import date

from medstore.application.dto import MedicineDTO, medicine_dto
from medstore.application.support import audit
from medstore.domain.exceptions import EntityNotFoundError
from medstore.domain.model.medicine import DEFAULT_LOW_STOCK_THRESHOLD, Medicine
from medstore.domain.model.records import InventoryTransaction, TransactionType
from medstore.domain.model.value_objects import Money
from medstore.domain.repository.unit_of_work import UnitOfWork


class AddMedicineHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        organization_id: str,
        name: str,
        quantity: int,
        cost_price: str,
        selling_price: str,
        manufacturer: str = "",
        batch_number: str = "",
        low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
        expiry_date: date | None = None,
        supplier_id: int | None = None,
        actor_id: str | None = None,
    ) -> MedicineDTO:
        """Register a medicine batch with its opening stock."""
        medicine = Medicine.create(
            organization_id=organization_id,
            name=name,
            quantity=quantity,
            cost_price=Money.of(cost_price),
            selling_price=Money.of(selling_price),
            manufacturer=manufacturer,
            batch_number=batch_number,
            low_stock_threshold=low_stock_threshold,
            expiry_date=expiry_date,
            supplier_id=supplier_id,
        )

        with self._uow as uow:
            if supplier_id is not None and uow.suppliers.get_by_id(organization_id, supplier_id) is None:
                raise EntityNotFoundError(f"Supplier #{supplier_id} not found")
            uow.medicines.save(medicine)
            if medicine.quantity > 0:
                # Opening stock is the first ledger entry
                uow.inventory_transactions.add(
                    InventoryTransaction(
                        organization_id=organization_id,
                        medicine_id=medicine.id,  # type: ignore[arg-type]
                        transaction_type=TransactionType.INCREMENT,
                        quantity=medicine.quantity,
                        quantity_after=medicine.quantity,
                        reason="Opening stock",
                        reference_type="intake",
                        actor_id=actor_id,
                    )
                )
            uow.commit()

        audit("medicine.added", organization_id, actor_id,
              medicine_id=medicine.id, name=medicine.name, quantity=medicine.quantity)
        return medicine_dto(medicine)
