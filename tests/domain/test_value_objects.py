"""Unit tests for domain value objects."""

from decimal import Decimal

import pytest

from medstore.domain.exceptions import ValidationError
from medstore.domain.model.value_objects import Money, Quantity


# ── Money ────────────────────────────────────────────────────────────────────


class TestMoney:

    def test_creation_defaults_to_store_currency(self):
        m = Money(Decimal("10.50"))
        assert m.amount == Decimal("10.50")
        assert m.currency == "PKR"

    def test_of_factory_from_string(self):
        assert Money.of("25.99").amount == Decimal("25.99")

    def test_of_factory_rejects_garbage(self):
        with pytest.raises(ValidationError, match="Invalid money amount"):
            Money.of("twelve")

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            Money(Decimal("-1"))

    def test_float_amount_rejected(self):
        with pytest.raises(ValidationError, match="must be a Decimal"):
            Money(10.5)

    def test_addition_and_subtraction(self):
        assert Money.of("10") + Money.of("5.50") == Money.of("15.50")
        assert Money.of("10") - Money.of("3") == Money.of("7")

    def test_subtraction_below_zero_rejected(self):
        with pytest.raises(ValidationError, match="negative"):
            Money.of("3") - Money.of("10")

    def test_multiply_by_int(self):
        assert Money.of("2.50") * 4 == Money.of("10.00")

    def test_multiply_by_quantity(self):
        assert Money.of("5") * Quantity(20) == Money.of("100")

    def test_multiply_by_float_rejected(self):
        with pytest.raises(TypeError):
            Money.of("2.50") * 1.5

    def test_mixed_currencies_rejected(self):
        with pytest.raises(ValidationError, match="Cannot combine"):
            Money.of("1", "PKR") + Money.of("1", "USD")

    def test_percent_rounds_half_up(self):
        assert Money.of("60").percent(Decimal("10")) == Money.of("6.00")
        assert Money.of("0.05").percent(Decimal("50")).amount == Decimal("0.03")

    def test_str(self):
        assert str(Money.of("66")) == "PKR 66.00"

    def test_comparison(self):
        assert Money.of("5") < Money.of("6")
        assert Money.of("6") >= Money.of("6")
        assert Money.of("7") > Money.of("6.99")

    def test_total_of_amounts(self):
        assert Money.total([Money.of("1.25"), Money.of("2.75")]) == Money.of("4")
        assert Money.total([]) == Money.zero()


# ── Quantity ─────────────────────────────────────────────────────────────────


class TestQuantity:

    def test_positive(self):
        assert Quantity(3).value == 3

    @pytest.mark.parametrize("value", [0, -1])
    def test_non_positive_rejected(self, value):
        with pytest.raises(ValidationError, match="must be positive"):
            Quantity(value)

    def test_bool_rejected(self):
        with pytest.raises(ValidationError, match="must be an integer"):
            Quantity(True)

    def test_float_rejected(self):
        with pytest.raises(ValidationError, match="must be an integer"):
            Quantity(2.0)
