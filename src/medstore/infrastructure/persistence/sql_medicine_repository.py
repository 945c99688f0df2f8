"""SQLAlchemy-backed implementation of MedicineRepository."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from medstore.domain.model.medicine import Medicine
from medstore.domain.model.value_objects import Money
from medstore.domain.repository.medicine_repository import MedicineRepository
from medstore.infrastructure.persistence.orm import MedicineRow


class SqlMedicineRepository(MedicineRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    # --- MedicineRepository interface -----------------------------------------

    def get_by_id(
        self, organization_id: str, medicine_id: int, for_update: bool = False
    ) -> Medicine | None:
        stmt = select(MedicineRow).where(
            MedicineRow.organization_id == organization_id,
            MedicineRow.id == medicine_id,
        )
        if for_update:
            stmt = stmt.with_for_update()
        row = self._session.execute(stmt).scalar_one_or_none()
        return self._to_domain(row) if row else None

    def list_all(self, organization_id: str, active_only: bool = True) -> list[Medicine]:
        stmt = select(MedicineRow).where(MedicineRow.organization_id == organization_id)
        if active_only:
            stmt = stmt.where(MedicineRow.is_active.is_(True))
        stmt = stmt.order_by(MedicineRow.name, MedicineRow.id)
        return [self._to_domain(row) for row in self._session.execute(stmt).scalars()]

    def list_low_stock(self, organization_id: str) -> list[Medicine]:
        stmt = (
            select(MedicineRow)
            .where(
                MedicineRow.organization_id == organization_id,
                MedicineRow.is_active.is_(True),
                MedicineRow.quantity <= MedicineRow.low_stock_threshold,
            )
            .order_by(MedicineRow.quantity, MedicineRow.name)
        )
        return [self._to_domain(row) for row in self._session.execute(stmt).scalars()]

    def save(self, medicine: Medicine) -> None:
        row = None
        if medicine.id is not None:
            row = self._session.get(MedicineRow, medicine.id)
        if row is None:
            row = MedicineRow(organization_id=medicine.organization_id)
            self._session.add(row)
        self._to_row(medicine, row)
        self._session.flush()
        medicine.id = row.id

    # --- Mapping --------------------------------------------------------------

    @staticmethod
    def _to_row(medicine: Medicine, row: MedicineRow) -> None:
        row.name = medicine.name
        row.manufacturer = medicine.manufacturer
        row.batch_number = medicine.batch_number
        row.quantity = medicine.quantity
        row.low_stock_threshold = medicine.low_stock_threshold
        row.cost_price = medicine.cost_price.amount
        row.selling_price = medicine.selling_price.amount
        row.currency = medicine.cost_price.currency
        row.expiry_date = medicine.expiry_date
        row.supplier_id = medicine.supplier_id
        row.is_active = medicine.is_active
        row.updated_at = medicine.updated_at

    @staticmethod
    def _to_domain(row: MedicineRow) -> Medicine:
        return Medicine(
            id=row.id,
            organization_id=row.organization_id,
            name=row.name,
            quantity=row.quantity,
            cost_price=Money(row.cost_price, row.currency),
            selling_price=Money(row.selling_price, row.currency),
            manufacturer=row.manufacturer,
            batch_number=row.batch_number,
            low_stock_threshold=row.low_stock_threshold,
            expiry_date=row.expiry_date,
            supplier_id=row.supplier_id,
            is_active=row.is_active,
            updated_at=row.updated_at,
        )
