"""
Currency and Amount Module

ISO 4217 currency codes with their minor-unit precision, and the immutable
Amount value object. NEVER uses float for monetary values.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, getcontext
from dataclasses import dataclass
from typing import Any, Dict
from enum import Enum

from .errors import ValidationError

# Set global decimal context for financial precision
getcontext().prec = 28


class Currency(Enum):
    """ISO 4217 Currency Codes with precision info"""
    USD = ("USD", 2)  # US Dollar, 2 decimal places
    EUR = ("EUR", 2)  # Euro, 2 decimal places
    GBP = ("GBP", 2)  # British Pound, 2 decimal places
    JPY = ("JPY", 0)  # Japanese Yen, 0 decimal places
    CAD = ("CAD", 2)  # Canadian Dollar, 2 decimal places
    CHF = ("CHF", 2)  # Swiss Franc, 2 decimal places

    def __init__(self, code: str, precision: int):
        self.code = code
        self.precision = precision

    @classmethod
    def from_code(cls, code: Any) -> 'Currency':
        """Look up a currency by its ISO code, case-insensitively"""
        if isinstance(code, Currency):
            return code
        if not isinstance(code, str):
            raise ValidationError(f"Currency code must be a string, got {code!r}")
        try:
            return cls[code.strip().upper()]
        except KeyError:
            raise ValidationError(f"Unknown currency code: {code!r}") from None


def to_decimal(value: Any, field_name: str = "value") -> Decimal:
    """
    Convert a numeric value to Decimal

    Floats go through str() so 0.1 becomes Decimal('0.1') rather than its
    binary expansion.

    Raises:
        ValidationError: If the value is not numeric or not finite
    """
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be numeric, got {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, ValueError):
            raise ValidationError(f"{field_name} must be numeric, got {value!r}") from None
    if not result.is_finite():
        raise ValidationError(f"{field_name} must be finite, got {value!r}")
    return result


def quantize(value: Decimal, currency: Currency) -> Decimal:
    """
    Round a Decimal to the precision of the given currency

    Raises:
        ValidationError: If the rounded value needs more digits than the
            decimal context allows
    """
    try:
        return value.quantize(
            Decimal('0.1') ** currency.precision,
            rounding=ROUND_HALF_UP
        )
    except InvalidOperation:
        raise ValidationError(
            f"{currency.code} value {value} exceeds the supported precision of "
            f"{getcontext().prec} digits"
        ) from None


def format_value(value: Decimal, currency: Currency) -> str:
    """Format a value for display, e.g. 'USD 1,000.00'"""
    if currency.precision == 0:
        return f"{currency.code} {value:,.0f}"
    return f"{currency.code} {value:,.{currency.precision}f}"


@dataclass(frozen=True)
class Amount:
    """
    Immutable, non-negative amount of money in a single currency.
    Values are rounded to the currency precision on construction.
    """
    value: Decimal
    currency: Currency

    def __post_init__(self):
        if not isinstance(self.currency, Currency):
            object.__setattr__(self, 'currency', Currency.from_code(self.currency))

        value = to_decimal(self.value, "Amount value")
        if value < 0:
            raise ValidationError(f"Amount value must be non-negative, got {value}")

        object.__setattr__(self, 'value', quantize(value, self.currency))

    def is_zero(self) -> bool:
        """Check if amount is exactly zero"""
        return self.value == Decimal('0')

    def to_string(self) -> str:
        """Format for display"""
        return format_value(self.value, self.currency)

    def to_dict(self) -> Dict[str, str]:
        return {"value": str(self.value), "currency": self.currency.code}
