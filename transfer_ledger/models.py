"""
Account and Transfer Model

Immutable data definitions for accounts, the debit/credit domain events
that describe a validated balance change, and the posted transfer that
groups them. Shape validation happens on construction; business rules live
in the domain module.
"""

from decimal import Decimal
from datetime import datetime
from dataclasses import dataclass
from typing import Any, Dict

from .currency import Amount, Currency, quantize, to_decimal, format_value
from .errors import ValidationError


def _require_account_number(value: Any, field_name: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} must be a non-empty string, got {value!r}")


def _coerce_currency(obj: Any) -> Currency:
    if isinstance(obj.currency, Currency):
        return obj.currency
    return Currency.from_code(obj.currency)


@dataclass(frozen=True)
class Account:
    """
    Bank account identified by its number, holding a signed balance in one
    currency. A changed account is a new Account value.
    """
    number: str
    balance: Decimal
    currency: Currency

    def __post_init__(self):
        _require_account_number(self.number, "Account number")
        currency = _coerce_currency(self)
        object.__setattr__(self, 'currency', currency)
        balance = to_decimal(self.balance, "Account balance")
        object.__setattr__(self, 'balance', quantize(balance, currency))

    def to_string(self) -> str:
        return f"{self.number} ({format_value(self.balance, self.currency)})"

    def to_dict(self) -> Dict[str, str]:
        return {
            "number": self.number,
            "balance": str(self.balance),
            "currency": self.currency.code,
        }


@dataclass(frozen=True)
class _BalanceChange:
    """Common shape of debit and credit events"""
    account_number: str
    value: Decimal
    currency: Currency

    def __post_init__(self):
        _require_account_number(self.account_number, "Event account number")
        currency = _coerce_currency(self)
        object.__setattr__(self, 'currency', currency)
        value = to_decimal(self.value, "Event value")
        if value < 0:
            raise ValidationError(f"Event value must be non-negative, got {value}")
        object.__setattr__(self, 'value', quantize(value, currency))

    def to_dict(self) -> Dict[str, str]:
        return {
            "account_number": self.account_number,
            "value": str(self.value),
            "currency": self.currency.code,
        }


@dataclass(frozen=True)
class DebitEvent(_BalanceChange):
    """A validated debit that has not yet been applied to stored state"""


@dataclass(frozen=True)
class CreditEvent(_BalanceChange):
    """A validated credit that has not yet been applied to stored state"""


@dataclass(frozen=True)
class Transfer:
    """
    Posted transfer: the debit and credit events of one money movement.
    Created once by the domain, committed once by the store, never changed.
    """
    id: str
    transfer_number: str
    debit: DebitEvent
    credit: CreditEvent
    created_at: datetime

    def __post_init__(self):
        if not isinstance(self.id, str) or not self.id:
            raise ValidationError(f"Transfer id must be a non-empty string, got {self.id!r}")
        if not isinstance(self.transfer_number, str):
            raise ValidationError(f"Transfer number must be a string, got {self.transfer_number!r}")
        if not isinstance(self.debit, DebitEvent):
            raise ValidationError("Transfer debit must be a DebitEvent")
        if not isinstance(self.credit, CreditEvent):
            raise ValidationError("Transfer credit must be a CreditEvent")
        if not isinstance(self.created_at, datetime):
            raise ValidationError("Transfer created_at must be a datetime")

        # Both legs move the same money
        if self.debit.value != self.credit.value or self.debit.currency != self.credit.currency:
            raise ValidationError(
                f"Transfer legs do not balance: debit "
                f"{format_value(self.debit.value, self.debit.currency)}, credit "
                f"{format_value(self.credit.value, self.credit.currency)}"
            )

    @property
    def from_account_number(self) -> str:
        return self.debit.account_number

    @property
    def to_account_number(self) -> str:
        return self.credit.account_number

    @property
    def value(self) -> Decimal:
        return self.debit.value

    @property
    def currency(self) -> Currency:
        return self.debit.currency

    def to_dict(self) -> Dict[str, Any]:
        """Flatten to a transfer-table row for logging or export"""
        return {
            "id": self.id,
            "transfer_number": self.transfer_number,
            "from_account": self.from_account_number,
            "to_account": self.to_account_number,
            "value": str(self.value),
            "currency": self.currency.code,
            "created_at": self.created_at.isoformat(),
        }


def is_valid_account(value: Any) -> bool:
    """Check whether a value satisfies the Account shape"""
    return isinstance(value, Account)


def is_valid_amount(value: Any) -> bool:
    """Check whether a value satisfies the Amount shape"""
    return isinstance(value, Amount)
