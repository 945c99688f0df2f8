"""Value Objects for prices, order amounts and unit counts.

Amounts are kept as Decimal in the store's currency (PKR unless a row
says otherwise).  Both objects validate on construction, so a negative
price or a zero-unit order line can never be built.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from functools import total_ordering

from medstore.domain.exceptions import ValidationError

DEFAULT_CURRENCY = "PKR"
_CENTS = Decimal("0.01")


@total_ordering
@dataclass(frozen=True)
class Money:
    """A non-negative amount in one currency.

    Costs, tax and discounts never go below zero in this domain, so
    subtraction that would do so is a validation error rather than a
    debit.
    """

    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if self.amount < 0:
            raise ValidationError(f"Money amount cannot be negative, got {self.amount}")

    # --- Arithmetic -----------------------------------------------------------

    def __add__(self, other: Money) -> Money:
        return Money(self.amount + self._checked(other).amount, self.currency)

    def __sub__(self, other: Money) -> Money:
        remaining = self.amount - self._checked(other).amount
        if remaining < 0:
            raise ValidationError(f"Cannot take {other} from {self}: result would be negative")
        return Money(remaining, self.currency)

    def __mul__(self, units: int | Quantity) -> Money:
        """Price of ``units`` items at this unit cost."""
        if isinstance(units, Quantity):
            units = units.value
        if isinstance(units, bool) or not isinstance(units, int):
            raise TypeError(f"Can only multiply Money by a unit count, got {type(units).__name__}")
        return Money(self.amount * units, self.currency)

    def percent(self, rate: Decimal) -> Money:
        """``rate`` percent of this amount, rounded half-up to paisa."""
        share = (self.amount * rate / 100).quantize(_CENTS, rounding=ROUND_HALF_UP)
        return Money(share, self.currency)

    def __lt__(self, other: Money) -> bool:
        return self.amount < self._checked(other).amount

    def __str__(self) -> str:
        return f"{self.currency} {self.amount:.2f}"

    def _checked(self, other: Money) -> Money:
        if self.currency != other.currency:
            raise ValidationError(f"Cannot combine {self.currency} with {other.currency}")
        return other

    # --- Factories ------------------------------------------------------------

    @staticmethod
    def of(amount: str | float | int | Decimal, currency: str = DEFAULT_CURRENCY) -> Money:
        """Build from user or database input, going through ``str`` so floats stay exact."""
        try:
            return Money(Decimal(str(amount)), currency)
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc

    @staticmethod
    def zero(currency: str = DEFAULT_CURRENCY) -> Money:
        return Money(Decimal("0.00"), currency)

    @staticmethod
    def total(amounts: Iterable[Money], currency: str = DEFAULT_CURRENCY) -> Money:
        result = Money.zero(currency)
        for amount in amounts:
            result = result + amount
        return result


@dataclass(frozen=True)
class Quantity:
    """Units on an order line; always a whole, positive number."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise ValidationError("Quantity must be positive")

    def __str__(self) -> str:
        return str(self.value)
