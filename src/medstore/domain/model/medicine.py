"""Medicine aggregate — the stock-bearing entity of the ledger.

Each medicine batch carries its own on-hand quantity.  The quantity is
the authoritative stock counter and may only change through ``adjust()``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone

from medstore.domain.exceptions import ValidationError
from medstore.domain.model.value_objects import Money

DEFAULT_LOW_STOCK_THRESHOLD = 10


@dataclass
class Medicine:
    """Aggregate root for a medicine batch.

    Invariants:
    - ``quantity`` is never negative
    - a mutation that would go below zero fails instead of clamping
    """

    id: int | None
    organization_id: str
    name: str
    quantity: int
    cost_price: Money
    selling_price: Money
    manufacturer: str = ""
    batch_number: str = ""
    low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD
    expiry_date: date | None = None
    supplier_id: int | None = None
    is_active: bool = True
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @staticmethod
    def create(
        organization_id: str,
        name: str,
        quantity: int,
        cost_price: Money,
        selling_price: Money,
        manufacturer: str = "",
        batch_number: str = "",
        low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
        expiry_date: date | None = None,
        supplier_id: int | None = None,
    ) -> Medicine:
        """Create a new medicine record, enforcing all invariants."""
        if not name or not name.strip():
            raise ValidationError("Medicine name is required")
        if quantity < 0:
            raise ValidationError("Opening quantity cannot be negative")
        if low_stock_threshold < 0:
            raise ValidationError("Low-stock threshold cannot be negative")
        return Medicine(
            id=None,
            organization_id=organization_id,
            name=name.strip(),
            quantity=quantity,
            cost_price=cost_price,
            selling_price=selling_price,
            manufacturer=manufacturer.strip(),
            batch_number=batch_number.strip(),
            low_stock_threshold=low_stock_threshold,
            expiry_date=expiry_date,
            supplier_id=supplier_id,
        )

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.low_stock_threshold

    def adjust(self, delta: int) -> int:
        """Apply a signed quantity change and return the new quantity.

        Raises ValidationError (leaving the quantity untouched) when the
        result would be negative.
        """
        if isinstance(delta, bool) or not isinstance(delta, int):
            raise ValidationError(
                f"Stock adjustment must be an integer, got {type(delta).__name__}"
            )
        if delta == 0:
            raise ValidationError("Stock adjustment cannot be zero")
        new_quantity = self.quantity + delta
        if new_quantity < 0:
            raise ValidationError(
                f"Insufficient stock for {self.name} "
                f"(need {-delta}, have {self.quantity})"
            )
        self.quantity = new_quantity
        self.updated_at = datetime.now(timezone.utc)
        return new_quantity

    def deactivate(self) -> None:
        self.is_active = False
        self.updated_at = datetime.now(timezone.utc)
