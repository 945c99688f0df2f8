"""Data Transfer Objects for the purchasing use cases.

Inputs are the shapes the CLI parses; outputs render money as display
strings so nothing outside the application layer touches Money or the
aggregates.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from medstore.domain.model.medicine import Medicine
from medstore.domain.model.purchase_order import PurchaseOrder
from medstore.domain.model.supplier import Supplier
from medstore.domain.service.receiving_reconciler import ReceiptOutcome
from medstore.domain.service.reorder_advisor import SupplierGroup


# --- Inputs -------------------------------------------------------------------


@dataclass(frozen=True)
class PurchaseOrderItemSpec:
    """Input: one line of a new purchase order."""

    medicine_id: int
    quantity: int
    unit_cost: str


@dataclass(frozen=True)
class ReceiveItemSpec:
    """Input: how much of a medicine actually arrived."""

    medicine_id: int
    received_quantity: int


# --- Outputs ------------------------------------------------------------------


@dataclass(frozen=True)
class PurchaseOrderLineDTO:
    medicine_id: int
    medicine_name: str
    quantity: int
    unit_cost: str
    line_total: str
    received_quantity: int
    remaining_quantity: int


@dataclass(frozen=True)
class PurchaseOrderDTO:
    id: int
    po_number: str
    supplier_id: int
    status: str
    order_date: date
    expected_delivery_date: date | None
    actual_delivery_date: date | None
    items: list[PurchaseOrderLineDTO]
    subtotal: str
    tax_amount: str
    discount_amount: str
    total: str
    notes: str | None
    approved_by: str | None
    approved_amount: str | None
    progress_percentage: int
    is_overdue: bool

    @property
    def has_receipts(self) -> bool:
        return any(item.received_quantity > 0 for item in self.items)


@dataclass(frozen=True)
class ReceiptLineDTO:
    medicine_id: int
    received_quantity: int
    ok: bool
    new_stock: int | None
    error: str | None


@dataclass(frozen=True)
class ReceiptDTO:
    order: PurchaseOrderDTO
    outcome: str  # "success" | "partial_success"
    completeness: str  # "complete" | "short" | "excess"
    lines: list[ReceiptLineDTO]

    @property
    def failed_count(self) -> int:
        return sum(1 for line in self.lines if not line.ok)


@dataclass(frozen=True)
class ReorderLineDTO:
    medicine_id: int
    medicine_name: str
    current_stock: int
    low_stock_threshold: int
    suggested_quantity: int
    unit_cost: str
    estimated_cost: str


@dataclass(frozen=True)
class SupplierReorderDTO:
    supplier_id: int | None
    supplier_name: str
    items: list[ReorderLineDTO]
    item_count: int
    total_cost: str


@dataclass(frozen=True)
class MedicineDTO:
    id: int
    name: str
    manufacturer: str
    batch_number: str
    quantity: int
    low_stock_threshold: int
    cost_price: str
    selling_price: str
    expiry_date: date | None
    supplier_id: int | None
    is_low_stock: bool


@dataclass(frozen=True)
class SupplierDTO:
    id: int
    supplier_code: str
    name: str
    contact_person: str
    email: str | None
    phone: str | None
    credit_limit: str
    payment_terms: int
    is_active: bool


# --- Mapping ------------------------------------------------------------------


def purchase_order_dto(order: PurchaseOrder) -> PurchaseOrderDTO:
    return PurchaseOrderDTO(
        id=order.id,  # type: ignore[arg-type]
        po_number=order.po_number,
        supplier_id=order.supplier_id,
        status=order.status.value,
        order_date=order.order_date,
        expected_delivery_date=order.expected_delivery_date,
        actual_delivery_date=order.actual_delivery_date,
        items=[
            PurchaseOrderLineDTO(
                medicine_id=item.medicine_id,
                medicine_name=item.medicine_name,
                quantity=item.quantity.value,
                unit_cost=str(item.unit_cost),
                line_total=str(item.line_total),
                received_quantity=item.received_quantity,
                remaining_quantity=item.remaining_quantity,
            )
            for item in order.items
        ],
        subtotal=str(order.subtotal),
        tax_amount=str(order.tax_amount),
        discount_amount=str(order.discount_amount),
        total=str(order.total),
        notes=order.notes,
        approved_by=order.approved_by,
        approved_amount=str(order.approved_amount) if order.approved_amount else None,
        progress_percentage=order.progress_percentage,
        is_overdue=order.is_overdue(),
    )


def receipt_dto(order: PurchaseOrder, outcome: ReceiptOutcome) -> ReceiptDTO:
    return ReceiptDTO(
        order=purchase_order_dto(order),
        outcome=outcome.kind.value,
        completeness=outcome.completeness.value,
        lines=[
            ReceiptLineDTO(
                medicine_id=line.medicine_id,
                received_quantity=line.received_quantity,
                ok=line.ok,
                new_stock=line.new_stock,
                error=line.error,
            )
            for line in outcome.lines
        ],
    )


def supplier_reorder_dto(group: SupplierGroup) -> SupplierReorderDTO:
    return SupplierReorderDTO(
        supplier_id=group.supplier.id if group.supplier else None,
        supplier_name=group.supplier.name if group.supplier else "Unassigned",
        items=[
            ReorderLineDTO(
                medicine_id=s.medicine.id,  # type: ignore[arg-type]
                medicine_name=s.medicine.name,
                current_stock=s.medicine.quantity,
                low_stock_threshold=s.medicine.low_stock_threshold,
                suggested_quantity=s.suggested_quantity,
                unit_cost=str(s.medicine.cost_price),
                estimated_cost=str(s.estimated_cost),
            )
            for s in group.suggestions
        ],
        item_count=group.item_count,
        total_cost=str(group.total_cost),
    )


def medicine_dto(medicine: Medicine) -> MedicineDTO:
    return MedicineDTO(
        id=medicine.id,  # type: ignore[arg-type]
        name=medicine.name,
        manufacturer=medicine.manufacturer,
        batch_number=medicine.batch_number,
        quantity=medicine.quantity,
        low_stock_threshold=medicine.low_stock_threshold,
        cost_price=str(medicine.cost_price),
        selling_price=str(medicine.selling_price),
        expiry_date=medicine.expiry_date,
        supplier_id=medicine.supplier_id,
        is_low_stock=medicine.is_low_stock,
    )


def supplier_dto(supplier: Supplier) -> SupplierDTO:
    return SupplierDTO(
        id=supplier.id,  # type: ignore[arg-type]
        supplier_code=supplier.supplier_code,
        name=supplier.name,
        contact_person=supplier.contact_person,
        email=supplier.email,
        phone=supplier.phone,
        credit_limit=str(supplier.credit_limit),
        payment_terms=supplier.payment_terms,
        is_active=supplier.is_active,
    )
