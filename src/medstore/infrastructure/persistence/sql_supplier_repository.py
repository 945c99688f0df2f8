"""SQLAlchemy-backed implementation of SupplierRepository."""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from medstore.domain.model.supplier import Supplier
from medstore.domain.model.value_objects import Money
from medstore.domain.repository.supplier_repository import SupplierRepository
from medstore.infrastructure.persistence.orm import SupplierRow


class SqlSupplierRepository(SupplierRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_by_id(self, organization_id: str, supplier_id: int) -> Supplier | None:
        row = self._session.execute(
            select(SupplierRow).where(
                SupplierRow.organization_id == organization_id,
                SupplierRow.id == supplier_id,
            )
        ).scalar_one_or_none()
        return self._to_domain(row) if row else None

    def get_by_email(self, organization_id: str, email: str) -> Supplier | None:
        row = self._session.execute(
            select(SupplierRow)
            .where(
                SupplierRow.organization_id == organization_id,
                SupplierRow.email == email.lower(),
            )
            .limit(1)
        ).scalar_one_or_none()
        return self._to_domain(row) if row else None

    def list_all(self, organization_id: str, active_only: bool = False) -> list[Supplier]:
        stmt = select(SupplierRow).where(SupplierRow.organization_id == organization_id)
        if active_only:
            stmt = stmt.where(SupplierRow.is_active.is_(True))
        stmt = stmt.order_by(SupplierRow.name, SupplierRow.id)
        return [self._to_domain(row) for row in self._session.execute(stmt).scalars()]

    def list_supplier_codes(self, organization_id: str) -> list[str]:
        return list(
            self._session.execute(
                select(SupplierRow.supplier_code).where(SupplierRow.organization_id == organization_id)
            ).scalars()
        )

    def save(self, supplier: Supplier) -> None:
        row = None
        if supplier.id is not None:
            row = self._session.get(SupplierRow, supplier.id)
        if row is None:
            row = SupplierRow(
                organization_id=supplier.organization_id,
                supplier_code=supplier.supplier_code,
                created_by=supplier.created_by,
            )
            self._session.add(row)
        row.name = supplier.name
        row.contact_person = supplier.contact_person
        row.email = supplier.email
        row.phone = supplier.phone
        row.address = supplier.address
        row.credit_limit = supplier.credit_limit.amount
        row.currency = supplier.credit_limit.currency
        row.payment_terms = supplier.payment_terms
        row.is_active = supplier.is_active
        row.notes = supplier.notes
        self._session.flush()
        supplier.id = row.id

    def delete(self, organization_id: str, supplier_id: int) -> None:
        self._session.execute(
            delete(SupplierRow).where(
                SupplierRow.organization_id == organization_id,
                SupplierRow.id == supplier_id,
            )
        )

    @staticmethod
    def _to_domain(row: SupplierRow) -> Supplier:
        return Supplier(
            id=row.id,
            organization_id=row.organization_id,
            supplier_code=row.supplier_code,
            name=row.name,
            contact_person=row.contact_person,
            email=row.email,
            phone=row.phone,
            address=row.address,
            credit_limit=Money(row.credit_limit, row.currency),
            payment_terms=row.payment_terms,
            is_active=row.is_active,
            notes=row.notes,
            created_by=row.created_by,
        )
