"""Supplier aggregate.

Suppliers live independently of purchase orders.  A supplier that is
referenced by any purchase order is only ever deactivated, never removed.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from medstore.domain.exceptions import ValidationError
from medstore.domain.model.value_objects import Money

DEFAULT_PAYMENT_TERMS_DAYS = 7

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_PHONE_RE = re.compile(r"^\+?[0-9\s\-()]{7,20}$")


@dataclass
class Supplier:

    id: int | None
    organization_id: str
    supplier_code: str
    name: str
    contact_person: str = ""
    email: str | None = None
    phone: str | None = None
    address: str = ""
    credit_limit: Money = Money.zero()
    payment_terms: int = DEFAULT_PAYMENT_TERMS_DAYS
    is_active: bool = True
    notes: str | None = None
    created_by: str | None = None

    @staticmethod
    def create(
        organization_id: str,
        supplier_code: str,
        name: str,
        contact_person: str = "",
        email: str | None = None,
        phone: str | None = None,
        address: str = "",
        credit_limit: Money | None = None,
        payment_terms: int = DEFAULT_PAYMENT_TERMS_DAYS,
        notes: str | None = None,
        created_by: str | None = None,
    ) -> Supplier:
        supplier = Supplier(
            id=None,
            organization_id=organization_id,
            supplier_code=supplier_code,
            name=name,
            created_by=created_by,
        )
        supplier.update_details(
            name=name,
            contact_person=contact_person,
            email=email,
            phone=phone,
            address=address,
            credit_limit=credit_limit or Money.zero(),
            payment_terms=payment_terms,
            notes=notes,
        )
        return supplier

    def update_details(
        self,
        name: str,
        contact_person: str,
        email: str | None,
        phone: str | None,
        address: str,
        credit_limit: Money,
        payment_terms: int,
        notes: str | None,
    ) -> None:
        """Validate and apply editable fields in one step."""
        errors: list[str] = []
        if not name or not name.strip():
            errors.append("Supplier name is required")
        if email and not _EMAIL_RE.match(email.strip()):
            errors.append("Invalid email format")
        if phone and not _PHONE_RE.match(phone.strip()):
            errors.append("Invalid phone number format")
        if payment_terms < 0:
            errors.append("Payment terms cannot be negative")
        if errors:
            raise ValidationError("Validation failed: " + ", ".join(errors))

        self.name = name.strip()
        self.contact_person = (contact_person or "").strip()
        self.email = email.strip().lower() if email else None
        self.phone = phone.strip() if phone else None
        self.address = (address or "").strip()
        self.credit_limit = credit_limit
        self.payment_terms = payment_terms
        self.notes = notes.strip() if notes else None

    def toggle_active(self) -> bool:
        self.is_active = not self.is_active
        return self.is_active
