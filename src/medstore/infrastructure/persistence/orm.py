"""Table mappings.  Every table carries ``organization_id``; repositories
filter on it in every query."""

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class SupplierRow(Base):
    __tablename__ = "suppliers"

    id = Column(Integer, primary_key=True)
    organization_id = Column(String(64), nullable=False)
    supplier_code = Column(String(32), nullable=False)
    name = Column(String(255), nullable=False)
    contact_person = Column(String(255), nullable=False, default="")
    email = Column(String(255))
    phone = Column(String(32))
    address = Column(Text, nullable=False, default="")
    credit_limit = Column(Numeric(12, 2), nullable=False, default=0)
    currency = Column(String(3), nullable=False)
    payment_terms = Column(Integer, nullable=False, default=7)
    is_active = Column(Boolean, nullable=False, default=True)
    notes = Column(Text)
    created_by = Column(String(64))
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        UniqueConstraint("organization_id", "supplier_code", name="uq_supplier_code"),
        Index("idx_supplier_org_email", "organization_id", "email"),
    )


class MedicineRow(Base):
    __tablename__ = "medicines"

    id = Column(Integer, primary_key=True)
    organization_id = Column(String(64), nullable=False)
    name = Column(String(255), nullable=False)
    manufacturer = Column(String(255), nullable=False, default="")
    batch_number = Column(String(64), nullable=False, default="")
    quantity = Column(Integer, nullable=False, default=0)
    low_stock_threshold = Column(Integer, nullable=False, default=10)
    cost_price = Column(Numeric(12, 2), nullable=False)
    selling_price = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False)
    expiry_date = Column(Date)
    supplier_id = Column(Integer, ForeignKey("suppliers.id", ondelete="SET NULL"))
    is_active = Column(Boolean, nullable=False, default=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        Index("idx_medicine_org_name", "organization_id", "name"),
    )


class PurchaseOrderRow(Base):
    __tablename__ = "purchase_orders"

    id = Column(Integer, primary_key=True)
    organization_id = Column(String(64), nullable=False)
    po_number = Column(String(32), nullable=False)
    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=False)
    status = Column(String(32), nullable=False)
    order_date = Column(Date, nullable=False)
    expected_delivery_date = Column(Date)
    actual_delivery_date = Column(Date)
    currency = Column(String(3), nullable=False)
    subtotal = Column(Numeric(12, 2), nullable=False)
    tax_percent = Column(Numeric(5, 2), nullable=False, default=0)
    tax_amount = Column(Numeric(12, 2), nullable=False)
    discount_amount = Column(Numeric(12, 2), nullable=False, default=0)
    total_amount = Column(Numeric(12, 2), nullable=False)
    notes = Column(Text)
    created_by = Column(String(64))
    approved_by = Column(String(64))
    approved_at = Column(DateTime(timezone=True))
    approved_amount = Column(Numeric(12, 2))
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        UniqueConstraint("organization_id", "po_number", name="uq_po_number"),
        Index("idx_po_org_status", "organization_id", "status"),
        Index("idx_po_org_supplier", "organization_id", "supplier_id"),
    )


class PurchaseOrderItemRow(Base):
    __tablename__ = "purchase_order_items"

    id = Column(Integer, primary_key=True)
    purchase_order_id = Column(Integer, ForeignKey("purchase_orders.id", ondelete="CASCADE"), nullable=False)
    medicine_id = Column(Integer, ForeignKey("medicines.id"), nullable=False)
    medicine_name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_cost = Column(Numeric(12, 2), nullable=False)
    total_cost = Column(Numeric(12, 2), nullable=False)
    received_quantity = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("purchase_order_id", "medicine_id", name="uq_po_item_medicine"),
    )


class InventoryTransactionRow(Base):
    __tablename__ = "inventory_transactions"

    id = Column(Integer, primary_key=True)
    organization_id = Column(String(64), nullable=False)
    medicine_id = Column(Integer, ForeignKey("medicines.id"), nullable=False)
    transaction_type = Column(String(16), nullable=False)
    quantity = Column(Integer, nullable=False)
    quantity_after = Column(Integer, nullable=False)
    reason = Column(Text, nullable=False)
    reference_type = Column(String(32))
    reference_id = Column(Integer)
    actor_id = Column(String(64))
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        Index("idx_txn_org_medicine", "organization_id", "medicine_id"),
    )


class PurchaseOrderReceiptRow(Base):
    __tablename__ = "purchase_order_receipts"

    id = Column(Integer, primary_key=True)
    organization_id = Column(String(64), nullable=False)
    purchase_order_id = Column(Integer, ForeignKey("purchase_orders.id"), nullable=False)
    medicine_id = Column(Integer, ForeignKey("medicines.id"), nullable=False)
    received_quantity = Column(Integer, nullable=False)
    actor_id = Column(String(64))
    received_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


class StatusHistoryRow(Base):
    """Outlives the order it describes, so no foreign key."""

    __tablename__ = "purchase_order_status_history"

    id = Column(Integer, primary_key=True)
    organization_id = Column(String(64), nullable=False)
    purchase_order_id = Column(Integer, nullable=False)
    old_status = Column(String(32))
    new_status = Column(String(32), nullable=False)
    actor_id = Column(String(64))
    notes = Column(Text)
    changed_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        Index("idx_history_org_po", "organization_id", "purchase_order_id"),
    )
