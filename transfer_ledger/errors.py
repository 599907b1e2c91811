"""
Ledger Error Taxonomy

Every failure raised by the ledger derives from LedgerError. Business-rule
failures carry the offending accounts and amount as attributes so callers
can inspect them without parsing messages.
"""

from enum import Enum
from typing import Any, Dict, Optional


class LedgerError(ValueError):
    """Base class for all ledger errors"""


class ValidationError(LedgerError):
    """Malformed input shape, rejected before any domain logic runs"""


class IllegalOperationKind(Enum):
    """Why a domain operation was refused"""
    INSUFFICIENT_FUNDS_OR_CURRENCY_MISMATCH = "insufficient_funds_or_currency_mismatch"
    CURRENCY_MISMATCH = "currency_mismatch"
    TRANSFER_NOT_POSSIBLE = "transfer_not_possible"


class IllegalOperation(LedgerError):
    """
    Business-rule violation (insufficient funds, currency mismatch).

    Always recoverable by the caller: the operations that raise it are pure,
    so no state has been touched.
    """

    def __init__(
        self,
        message: str,
        kind: IllegalOperationKind,
        action: str,
        account: Any = None,
        amount: Any = None,
        from_account: Any = None,
        to_account: Any = None,
        cause: Optional[BaseException] = None
    ):
        super().__init__(message)
        self.kind = kind
        self.action = action
        self.account = account
        self.amount = amount
        self.from_account = from_account
        self.to_account = to_account
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        """Diagnostic payload suitable for structured logging"""
        result = {
            "kind": self.kind.value,
            "action": self.action,
            "message": str(self),
        }
        for name in ("account", "amount", "from_account", "to_account"):
            value = getattr(self, name)
            if value is not None:
                result[name] = value.to_dict() if hasattr(value, "to_dict") else str(value)
        if isinstance(self.cause, IllegalOperation):
            result["cause"] = self.cause.to_dict()
        elif self.cause is not None:
            result["cause"] = str(self.cause)
        return result


class NotFound(LedgerError):
    """A referenced account is absent from the ledger"""

    def __init__(self, account_number: str, message: Optional[str] = None):
        super().__init__(message or f"Account {account_number} not found")
        self.account_number = account_number


class StaleState(NotFound):
    """
    The accounts a transfer was validated against changed before it could be
    committed. Re-fetch the accounts and build the transfer again.
    """
