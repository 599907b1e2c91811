"""
Domain Operations

Pure functions that decide whether money can move and describe the result
as domain events. Nothing here touches stored state: the store applies the
returned events when it commits a transfer.
"""

from datetime import datetime, timezone
from typing import Callable, Optional
import uuid

from .currency import Amount
from .errors import IllegalOperation, IllegalOperationKind, ValidationError
from .models import (
    Account, CreditEvent, DebitEvent, Transfer,
    is_valid_account, is_valid_amount
)

IdGenerator = Callable[[], str]
Clock = Callable[[], datetime]


def default_id_generator() -> str:
    """Random 128-bit transfer identifier"""
    return str(uuid.uuid4())


def default_clock() -> datetime:
    """Current UTC time"""
    return datetime.now(timezone.utc)


def _check_account(account, name: str = "account") -> None:
    if not is_valid_account(account):
        raise ValidationError(f"{name} must be an Account, got {type(account).__name__}")


def _check_amount(amount) -> None:
    if not is_valid_amount(amount):
        raise ValidationError(f"amount must be an Amount, got {type(amount).__name__}")


def debit(account: Account, amount: Amount) -> DebitEvent:
    """
    Validate a debit of amount from account

    Args:
        account: Account to debit
        amount: Amount to take out

    Returns:
        DebitEvent describing the debit, not yet applied

    Raises:
        ValidationError: If account or amount is malformed
        IllegalOperation: If currencies differ or the account would go negative
    """
    _check_account(account)
    _check_amount(amount)

    if account.currency != amount.currency:
        reason = (f"currency mismatch, account is {account.currency.code} "
                  f"but amount is {amount.currency.code}")
    elif account.balance - amount.value < 0:
        reason = (f"insufficient funds, balance {account.to_string()} "
                  f"cannot cover {amount.to_string()}")
    else:
        return DebitEvent(
            account_number=account.number,
            value=amount.value,
            currency=amount.currency
        )

    raise IllegalOperation(
        f"Can't debit account {account.number}: {reason}",
        kind=IllegalOperationKind.INSUFFICIENT_FUNDS_OR_CURRENCY_MISMATCH,
        action="debit_account",
        account=account,
        amount=amount
    )


def credit(account: Account, amount: Amount) -> CreditEvent:
    """
    Validate a credit of amount to account. Crediting never fails on balance,
    only on currency mismatch.
    """
    _check_account(account)
    _check_amount(amount)

    if account.currency != amount.currency:
        raise IllegalOperation(
            f"Can't credit account {account.number}: currency mismatch, account is "
            f"{account.currency.code} but amount is {amount.currency.code}",
            kind=IllegalOperationKind.CURRENCY_MISMATCH,
            action="credit_account",
            account=account,
            amount=amount
        )

    return CreditEvent(
        account_number=account.number,
        value=amount.value,
        currency=amount.currency
    )


def transfer_money(
    transfer_number: str,
    from_account: Account,
    to_account: Account,
    amount: Amount,
    id_generator: Optional[IdGenerator] = None,
    clock: Optional[Clock] = None
) -> Transfer:
    """
    Decide whether amount can move from from_account to to_account

    Each account is checked against the amount's currency on its own, so a
    transfer between accounts of different currencies always fails on one
    side. Zero-value transfers are allowed.

    Args:
        transfer_number: Caller-supplied transfer reference
        from_account: Account to debit
        to_account: Account to credit
        amount: Amount to move
        id_generator: Produces the transfer id (random UUID by default)
        clock: Produces the creation timestamp (UTC now by default)

    Returns:
        Transfer holding both domain events

    Raises:
        ValidationError: If any input is malformed
        IllegalOperation: With kind TRANSFER_NOT_POSSIBLE, wrapping the debit
            or credit failure
    """
    if not isinstance(transfer_number, str):
        raise ValidationError(f"transfer_number must be a string, got {transfer_number!r}")
    _check_account(from_account, "from_account")
    _check_account(to_account, "to_account")
    _check_amount(amount)

    try:
        debit_event = debit(from_account, amount)
        credit_event = credit(to_account, amount)
    except IllegalOperation as e:
        raise IllegalOperation(
            f"Money cannot be transferred: {e}",
            kind=IllegalOperationKind.TRANSFER_NOT_POSSIBLE,
            action="transfer_money",
            from_account=from_account,
            to_account=to_account,
            amount=amount,
            cause=e
        ) from e

    id_generator = id_generator or default_id_generator
    clock = clock or default_clock

    return Transfer(
        id=id_generator(),
        transfer_number=transfer_number,
        debit=debit_event,
        credit=credit_event,
        created_at=clock()
    )


def apply_debit(account: Account, debit_event: DebitEvent) -> Account:
    """Return account with the debit applied. The caller guarantees the pairing."""
    return Account(
        number=account.number,
        balance=account.balance - debit_event.value,
        currency=account.currency
    )


def apply_credit(account: Account, credit_event: CreditEvent) -> Account:
    """Return account with the credit applied. The caller guarantees the pairing."""
    return Account(
        number=account.number,
        balance=account.balance + credit_event.value,
        currency=account.currency
    )
