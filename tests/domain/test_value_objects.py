"""Unit tests for domain value objects."""

from decimal import Decimal

import pytest

from cafe.domain.exceptions import ValidationError
from cafe.domain.model.value_objects import Money, Quantity, normalize_amount, to_amount


# ── Money ────────────────────────────────────────────────────────────────────


class TestMoney:

    def test_creation(self):
        m = Money(Decimal("4.50"))
        assert m.amount == Decimal("4.50")
        assert m.currency == "USD"

    def test_of_factory_from_string(self):
        m = Money.of("3.75")
        assert m.amount == Decimal("3.75")

    def test_of_factory_from_int(self):
        m = Money.of(4)
        assert m.amount == Decimal("4")

    def test_of_rejects_garbage(self):
        with pytest.raises(ValidationError, match="Invalid money amount"):
            Money.of("four fifty")

    def test_float_amount_rejected(self):
        with pytest.raises(ValidationError, match="must be a Decimal"):
            Money(4.5)  # type: ignore[arg-type]

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            Money(Decimal("-1"))

    def test_addition(self):
        result = Money.of("4.50") + Money.of("3.75")
        assert result == Money.of("8.25")

    def test_multiplication_by_int(self):
        result = Money.of("4.50") * 2
        assert result == Money.of("9.00")

    def test_multiplication_by_float_rejected(self):
        with pytest.raises(TypeError):
            Money.of("4.50") * 1.5  # type: ignore[operator]

    def test_currency_mismatch_rejected(self):
        with pytest.raises(ValidationError, match="Cannot combine"):
            Money(Decimal("10"), "USD") + Money(Decimal("5"), "EUR")

    def test_str_formatting(self):
        assert str(Money.of("9")) == "$9.00"
        assert str(Money.of("4.5")) == "$4.50"

    def test_comparison_operators(self):
        assert Money.of("3.75") < Money.of("4.50")
        assert Money.of("4.50") > Money.of("3.75")

    def test_zero(self):
        assert Money.zero().amount == Decimal("0")


# ── Quantity ─────────────────────────────────────────────────────────────────


class TestQuantity:

    def test_valid_quantity(self):
        assert Quantity(2).value == 2

    def test_zero_rejected(self):
        with pytest.raises(ValidationError, match="must be positive"):
            Quantity(0)

    def test_negative_rejected(self):
        with pytest.raises(ValidationError, match="must be positive"):
            Quantity(-1)

    def test_bool_rejected(self):
        with pytest.raises(ValidationError, match="must be an integer"):
            Quantity(True)


# ── Stock amounts ────────────────────────────────────────────────────────────


class TestAmounts:

    def test_to_amount_from_string(self):
        assert to_amount("150") == Decimal("150")

    def test_to_amount_keeps_fractions(self):
        assert to_amount("0.5") == Decimal("0.5")

    def test_to_amount_rejects_negative(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            to_amount("-5")

    def test_to_amount_rejects_garbage(self):
        with pytest.raises(ValidationError, match="Invalid amount"):
            to_amount("lots")

    def test_to_amount_rejects_infinity(self):
        with pytest.raises(ValidationError, match="Invalid amount"):
            to_amount("Infinity")

    def test_to_amount_rejects_more_than_four_places(self):
        with pytest.raises(ValidationError, match="more than 4 decimal places"):
            to_amount("0.00001")

    def test_to_amount_accepts_four_places_and_padding(self):
        assert to_amount("0.0001") == Decimal("0.0001")
        assert to_amount("0.500000") == Decimal("0.5")

    def test_normalize_drops_column_scale(self):
        assert str(normalize_amount(Decimal("200.0000"))) == "200"
        assert str(normalize_amount(Decimal("12.5000"))) == "12.5"

    def test_normalize_keeps_large_integers_readable(self):
        assert str(normalize_amount(Decimal("1000"))) == "1000"
