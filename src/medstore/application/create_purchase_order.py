"""Application service: Create Purchase Order use case.

Orchestrates the flow between repositories and the domain model.
Input shape is checked before the unit of work opens; supplier and
medicine lookups, numbering and persistence happen in one transaction.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal, InvalidOperation

from medstore.application.dto import PurchaseOrderDTO, PurchaseOrderItemSpec, purchase_order_dto
from medstore.application.support import audit, save_order, scoped_logger
from medstore.domain.exceptions import EntityNotFoundError, ValidationError
from medstore.domain.model.purchase_order import (
    PurchaseOrder,
    PurchaseOrderItem,
    expected_delivery,
)
from medstore.domain.model.records import StatusChange
from medstore.domain.model.supplier import DEFAULT_PAYMENT_TERMS_DAYS, Supplier
from medstore.domain.model.value_objects import Money, Quantity
from medstore.domain.repository.unit_of_work import UnitOfWork
from medstore.domain.service.numbering import next_po_number


def parse_percent(raw: str | int | float | Decimal | None) -> Decimal:
    try:
        value = Decimal(str(raw if raw not in (None, "") else "0"))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(f"Invalid tax percent: {raw!r}") from exc
    if value < 0 or value > 100:
        raise ValidationError("Tax percent must be between 0 and 100")
    return value


def open_purchase_order(
    uow: UnitOfWork,
    organization_id: str,
    actor_id: str | None,
    supplier: Supplier,
    lines: list[tuple[int, Quantity, Money]],
    order_date: date | None = None,
    expected_delivery_date: date | None = None,
    notes: str | None = None,
    tax_percent: Decimal = Decimal("0"),
    discount_amount: Money | None = None,
    default_payment_terms: int = DEFAULT_PAYMENT_TERMS_DAYS,
) -> PurchaseOrder:
    """Build, number and persist a pending order inside an open unit of work.

    ``lines`` are ``(medicine_id, quantity, unit_cost)`` triples; every
    medicine must exist in the organization.
    """
    items: list[PurchaseOrderItem] = []
    for medicine_id, quantity, unit_cost in lines:
        medicine = uow.medicines.get_by_id(organization_id, medicine_id)
        if medicine is None or not medicine.is_active:
            raise EntityNotFoundError(f"Medicine #{medicine_id} not found")
        items.append(
            PurchaseOrderItem(
                medicine_id=medicine_id,
                medicine_name=medicine.name,
                quantity=quantity,
                unit_cost=unit_cost,
            )
        )

    order_date = order_date or date.today()
    if expected_delivery_date is None:
        expected_delivery_date = expected_delivery(
            order_date, supplier.payment_terms, default_payment_terms
        )

    order = PurchaseOrder.create(
        organization_id=organization_id,
        po_number=next_po_number(uow.purchase_orders.list_po_numbers(organization_id), order_date),
        supplier_id=supplier.id,  # type: ignore[arg-type]
        items=items,
        created_by=actor_id,
        order_date=order_date,
        expected_delivery_date=expected_delivery_date,
        tax_percent=tax_percent,
        discount_amount=discount_amount,
        notes=notes,
    )
    save_order(uow, order)
    uow.status_history.add(
        StatusChange(
            organization_id=organization_id,
            purchase_order_id=order.id,  # type: ignore[arg-type]
            old_status=None,
            new_status=order.status.value,
            actor_id=actor_id,
        )
    )
    return order


class CreatePurchaseOrderHandler:

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
        supplier_id: int | None,
        items: list[PurchaseOrderItemSpec],
        order_date: date | None = None,
        expected_delivery_date: date | None = None,
        notes: str | None = None,
        tax_percent: str | Decimal | None = None,
        discount_amount: str | Decimal | None = None,
    ) -> PurchaseOrderDTO:
        """Create a new pending purchase order.

        Steps:
        1. Validate the request shape (no transaction yet).
        2. Resolve the supplier and every medicine in the organization.
        3. Let the PurchaseOrder aggregate compute totals and check rules.
        4. Persist with a fresh PO number and return a DTO.
        """
        if not supplier_id:
            raise ValidationError("Supplier is required")
        if not items:
            raise ValidationError("Purchase order must have at least one item")

        lines: list[tuple[int, Quantity, Money]] = []
        for index, spec in enumerate(items, start=1):
            if not spec.medicine_id:
                raise ValidationError(f"Item {index}: Medicine ID is required")
            try:
                lines.append((spec.medicine_id, Quantity(spec.quantity), Money.of(spec.unit_cost)))
            except ValidationError as exc:
                raise ValidationError(f"Item {index}: {exc}") from exc
        pct = parse_percent(tax_percent)
        discount = Money.of(discount_amount or "0")

        log = scoped_logger(self._logger, __name__, organization_id=organization_id)

        with self._uow as uow:
            supplier = uow.suppliers.get_by_id(organization_id, supplier_id)
            if supplier is None or not supplier.is_active:
                raise EntityNotFoundError(f"Supplier #{supplier_id} not found")

            order = open_purchase_order(
                uow,
                organization_id,
                actor_id,
                supplier,
                lines,
                order_date=order_date,
                expected_delivery_date=expected_delivery_date,
                notes=notes,
                tax_percent=pct,
                discount_amount=discount,
                default_payment_terms=self._default_payment_terms,
            )
            uow.commit()

        log.info("Created purchase order %s for supplier %s (total %s)",
                 order.po_number, supplier_id, order.total)
        audit("purchase_order.created", organization_id, actor_id,
              purchase_order_id=order.id, po_number=order.po_number, total=str(order.total))
        return purchase_order_dto(order)
