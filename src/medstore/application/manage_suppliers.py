"""Application service: supplier maintenance use cases."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from medstore.application.dto import SupplierDTO, supplier_dto
from medstore.application.list_purchase_orders import PurchaseOrderStats, PurchaseOrderStatsHandler
from medstore.application.support import audit, scoped_logger
from medstore.domain.exceptions import EntityNotFoundError, ValidationError
from medstore.domain.model.supplier import DEFAULT_PAYMENT_TERMS_DAYS, Supplier
from medstore.domain.model.value_objects import Money
from medstore.domain.repository.unit_of_work import UnitOfWork
from medstore.domain.service.numbering import next_supplier_code


@dataclass(frozen=True)
class SupplierDetails:
    """Input: the editable fields of a supplier."""

    name: str
    contact_person: str = ""
    email: str | None = None
    phone: str | None = None
    address: str = ""
    credit_limit: str | Decimal = "0"
    payment_terms: int = DEFAULT_PAYMENT_TERMS_DAYS
    notes: str | None = None


class RemovalResult(Enum):
    DELETED = "deleted"
    DEACTIVATED = "deactivated"


def _load_supplier(uow: UnitOfWork, organization_id: str, supplier_id: int) -> Supplier:
    supplier = uow.suppliers.get_by_id(organization_id, supplier_id)
    if supplier is None:
        raise EntityNotFoundError("Supplier not found")
    return supplier


def _ensure_email_free(
    uow: UnitOfWork, organization_id: str, email: str | None, supplier_id: int | None = None
) -> None:
    if not email:
        return
    other = uow.suppliers.get_by_email(organization_id, email.strip().lower())
    if other is not None and other.id != supplier_id:
        raise ValidationError("Email already exists for another supplier")


class AddSupplierHandler:

    def __init__(self, uow: UnitOfWork, logger: logging.Logger | None = None) -> None:
        self._uow = uow
        self._logger = logger

    def handle(
        self, organization_id: str, details: SupplierDetails, actor_id: str | None = None
    ) -> SupplierDTO:
        log = scoped_logger(self._logger, __name__, organization_id=organization_id)
        with self._uow as uow:
            _ensure_email_free(uow, organization_id, details.email)
            supplier = Supplier.create(
                organization_id=organization_id,
                supplier_code=next_supplier_code(
                    organization_id, uow.suppliers.list_supplier_codes(organization_id)
                ),
                name=details.name,
                contact_person=details.contact_person,
                email=details.email,
                phone=details.phone,
                address=details.address,
                credit_limit=Money.of(details.credit_limit),
                payment_terms=details.payment_terms,
                notes=details.notes,
                created_by=actor_id,
            )
            uow.suppliers.save(supplier)
            uow.commit()

        log.info("Added supplier %s (%s)", supplier.supplier_code, supplier.name)
        audit("supplier.created", organization_id, actor_id,
              supplier_id=supplier.id, supplier_code=supplier.supplier_code)
        return supplier_dto(supplier)


class UpdateSupplierHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        organization_id: str,
        supplier_id: int,
        details: SupplierDetails,
        actor_id: str | None = None,
    ) -> SupplierDTO:
        with self._uow as uow:
            supplier = _load_supplier(uow, organization_id, supplier_id)
            _ensure_email_free(uow, organization_id, details.email, supplier_id)
            supplier.update_details(
                name=details.name,
                contact_person=details.contact_person,
                email=details.email,
                phone=details.phone,
                address=details.address,
                credit_limit=Money.of(details.credit_limit),
                payment_terms=details.payment_terms,
                notes=details.notes,
            )
            uow.suppliers.save(supplier)
            uow.commit()

        audit("supplier.updated", organization_id, actor_id, supplier_id=supplier_id)
        return supplier_dto(supplier)


class ShowSupplierHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, organization_id: str, supplier_id: int) -> SupplierDTO:
        with self._uow as uow:
            supplier = _load_supplier(uow, organization_id, supplier_id)
        return supplier_dto(supplier)


class ListSuppliersHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self, organization_id: str, active_only: bool = False, search: str | None = None
    ) -> list[SupplierDTO]:
        with self._uow as uow:
            suppliers = uow.suppliers.list_all(organization_id, active_only=active_only)
        if search:
            needle = search.strip().lower()
            suppliers = [
                s for s in suppliers
                if needle in s.name.lower()
                or needle in s.supplier_code.lower()
                or needle in (s.email or "")
                or needle in s.contact_person.lower()
            ]
        return [supplier_dto(s) for s in suppliers]


class ToggleSupplierHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, organization_id: str, supplier_id: int, actor_id: str | None = None) -> SupplierDTO:
        with self._uow as uow:
            supplier = _load_supplier(uow, organization_id, supplier_id)
            supplier.toggle_active()
            uow.suppliers.save(supplier)
            uow.commit()

        audit("supplier.toggled", organization_id, actor_id,
              supplier_id=supplier_id, is_active=supplier.is_active)
        return supplier_dto(supplier)


class RemoveSupplierHandler:
    """Delete a supplier, or only deactivate it if orders reference it."""

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, organization_id: str, supplier_id: int, actor_id: str | None = None) -> RemovalResult:
        with self._uow as uow:
            supplier = _load_supplier(uow, organization_id, supplier_id)
            if uow.purchase_orders.exists_for_supplier(organization_id, supplier_id):
                supplier.is_active = False
                uow.suppliers.save(supplier)
                result = RemovalResult.DEACTIVATED
            else:
                uow.suppliers.delete(organization_id, supplier_id)
                result = RemovalResult.DELETED
            uow.commit()

        audit(f"supplier.{result.value}", organization_id, actor_id, supplier_id=supplier_id)
        return result


class SupplierPurchaseSummaryHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, organization_id: str, supplier_id: int) -> tuple[SupplierDTO, PurchaseOrderStats]:
        supplier = ShowSupplierHandler(self._uow).handle(organization_id, supplier_id)
        stats = PurchaseOrderStatsHandler(self._uow).handle(organization_id, supplier_id=supplier_id)
        return supplier, stats
