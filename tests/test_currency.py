"""
Test suite for currency module

Tests Currency lookup, the Amount value object and Decimal handling.
All monetary values must use Decimal precision.
"""

import pytest
from decimal import Decimal

from transfer_ledger.currency import (
    Amount, Currency, to_decimal, quantize, format_value
)
from transfer_ledger.errors import ValidationError


class TestCurrency:
    """Test Currency enum and code lookup"""

    def test_currency_precision(self):
        """Test each currency carries its minor-unit precision"""
        assert Currency.USD.code == "USD"
        assert Currency.USD.precision == 2
        assert Currency.JPY.precision == 0

    def test_from_code_case_insensitive(self):
        """Test lookup by ISO code ignores case and whitespace"""
        assert Currency.from_code("usd") == Currency.USD
        assert Currency.from_code(" EUR ") == Currency.EUR
        assert Currency.from_code(Currency.GBP) == Currency.GBP

    def test_from_code_unknown(self):
        """Test unknown or non-string codes are rejected"""
        with pytest.raises(ValidationError, match="Unknown currency code"):
            Currency.from_code("XYZ")

        with pytest.raises(ValidationError, match="must be a string"):
            Currency.from_code(840)


class TestAmount:
    """Test Amount value object"""

    def test_amount_creation(self):
        """Test Amount creation and rounding to currency precision"""
        amount = Amount(Decimal('100.50'), Currency.USD)
        assert amount.value == Decimal('100.50')
        assert amount.currency == Currency.USD

        rounded = Amount(Decimal('100.555'), Currency.USD)
        assert rounded.value == Decimal('100.56')

        yen = Amount(Decimal('100.7'), Currency.JPY)
        assert yen.value == Decimal('101')

    def test_amount_converts_values(self):
        """Test non-Decimal values and currency codes are converted"""
        amount = Amount(300, "usd")
        assert amount.value == Decimal('300.00')
        assert amount.currency == Currency.USD

        from_float = Amount(0.1, Currency.EUR)
        assert from_float.value == Decimal('0.10')

    def test_zero_amount_allowed(self):
        """Test zero is a valid amount"""
        amount = Amount(Decimal('0'), Currency.USD)
        assert amount.is_zero()

    def test_negative_amount_rejected(self):
        """Test negative values are a validation error"""
        with pytest.raises(ValidationError, match="must be non-negative"):
            Amount(Decimal('-0.01'), Currency.USD)

    def test_non_numeric_amount_rejected(self):
        """Test garbage values are a validation error"""
        with pytest.raises(ValidationError, match="must be numeric"):
            Amount("ten dollars", Currency.USD)

        with pytest.raises(ValidationError, match="must be finite"):
            Amount(Decimal('NaN'), Currency.USD)

    def test_oversized_amount_rejected(self):
        """Test values too large for the decimal context are validation errors"""
        with pytest.raises(ValidationError, match="exceeds the supported precision"):
            Amount(Decimal('1e27'), Currency.USD)

        largest = Amount(Decimal("9" * 26), Currency.USD)
        assert largest.value == Decimal("9" * 26)

    def test_amount_is_immutable(self):
        """Test Amount fields cannot be reassigned"""
        amount = Amount(Decimal('10.00'), Currency.USD)
        with pytest.raises(AttributeError):
            amount.value = Decimal('20.00')

    def test_amount_equality(self):
        """Test value equality"""
        assert Amount(Decimal('10'), Currency.USD) == Amount(Decimal('10.00'), Currency.USD)
        assert Amount(Decimal('10'), Currency.USD) != Amount(Decimal('10'), Currency.EUR)

    def test_amount_formatting(self):
        """Test display formatting"""
        assert Amount(Decimal('1234.5'), Currency.USD).to_string() == "USD 1,234.50"
        assert Amount(Decimal('1234'), Currency.JPY).to_string() == "JPY 1,234"
        assert Amount(Decimal('5'), Currency.USD).to_dict() == {"value": "5.00", "currency": "USD"}


class TestDecimalHelpers:
    """Test Decimal conversion helpers"""

    def test_to_decimal(self):
        """Test conversion of ints, strings and floats"""
        assert to_decimal(5) == Decimal('5')
        assert to_decimal("12.34") == Decimal('12.34')
        assert to_decimal(0.1) == Decimal('0.1')

    def test_to_decimal_rejects_bool(self):
        """Test booleans are not treated as numbers"""
        with pytest.raises(ValidationError):
            to_decimal(True)

    def test_quantize_and_format(self):
        """Test rounding and formatting by currency"""
        assert quantize(Decimal('1.005'), Currency.USD) == Decimal('1.01')
        assert quantize(Decimal('1.5'), Currency.JPY) == Decimal('2')
        assert format_value(Decimal('-50'), Currency.EUR) == "EUR -50.00"
