"""
Ledger Store Module

Owns the authoritative ledger: every account keyed by number plus the
append-only transfer log. State is held as one immutable LedgerState
snapshot which is swapped wholesale under a lock, so readers never see one
account of a transfer updated without the other.
"""

from decimal import Decimal
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple
import threading

from .config import LedgerConfig, get_config
from .currency import Amount, Currency
from .domain import Clock, IdGenerator, apply_credit, apply_debit
from .domain import transfer_money as validate_transfer
from .errors import IllegalOperation, NotFound, StaleState, ValidationError
from .logging_config import get_logger, log_action
from .models import Account, Transfer, is_valid_amount


@dataclass(frozen=True)
class LedgerState:
    """
    One immutable snapshot of the ledger. Transitions build a new snapshot;
    an existing one is never modified.

    The transfer log and its id index are shared between snapshots and only
    ever appended to. Each snapshot sees the first transfer_count entries.
    """
    accounts: Mapping[str, Account] = field(default_factory=lambda: MappingProxyType({}))
    transfer_count: int = 0
    version: int = 0
    _log: List[Transfer] = field(default_factory=list, repr=False, compare=False)
    _positions: Dict[str, int] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_accounts(cls, accounts: Iterable[Account]) -> 'LedgerState':
        """Build the initial snapshot from seed accounts"""
        table = {}
        for account in accounts:
            if not isinstance(account, Account):
                raise ValidationError(f"Seed entries must be Accounts, got {type(account).__name__}")
            if account.number in table:
                raise ValidationError(f"Duplicate account number: {account.number}")
            table[account.number] = account
        return cls(accounts=MappingProxyType(table))

    @property
    def transfers(self) -> Tuple[Transfer, ...]:
        """Transfers visible in this snapshot, in commit order"""
        return tuple(self._log[:self.transfer_count])

    def get_account(self, account_number: str) -> Optional[Account]:
        return self.accounts.get(account_number)

    def get_transfer(self, transfer_id: str) -> Optional[Transfer]:
        position = self._positions.get(transfer_id)
        if position is None or position >= self.transfer_count:
            return None
        return self._log[position]

    def with_account(self, account: Account) -> 'LedgerState':
        """Snapshot with a new account added"""
        if account.number in self.accounts:
            raise ValidationError(f"Account {account.number} already exists")
        table = dict(self.accounts)
        table[account.number] = account
        return LedgerState(
            accounts=MappingProxyType(table),
            transfer_count=self.transfer_count,
            version=self.version + 1,
            _log=self._log,
            _positions=self._positions
        )

    def with_transfer(self, transfer: Transfer, updated_accounts: Iterable[Account]) -> 'LedgerState':
        """Snapshot with accounts replaced and transfer appended"""
        table = dict(self.accounts)
        for account in updated_accounts:
            table[account.number] = account

        log, positions = self._log, self._positions
        if len(log) != self.transfer_count:
            # Branching from an older snapshot: copy its prefix so the
            # newer entries of the shared log stay untouched
            log = log[:self.transfer_count]
            positions = {t.id: i for i, t in enumerate(log)}

        positions[transfer.id] = len(log)
        log.append(transfer)

        return LedgerState(
            accounts=MappingProxyType(table),
            transfer_count=len(log),
            version=self.version + 1,
            _log=log,
            _positions=positions
        )

    def total_balance(self, currency: Currency) -> Decimal:
        """Sum of all balances in one currency. Transfers never change it."""
        return sum(
            (a.balance for a in self.accounts.values() if a.currency == currency),
            Decimal('0')
        )


class LedgerStore:
    """
    Atomic container for accounts and transfers.

    Reads go straight to the current snapshot without locking. Every state
    transition runs under an RLock and replaces the snapshot in a single
    assignment.
    """

    def __init__(self, accounts: Iterable[Account] = ()):
        self._state = LedgerState.from_accounts(accounts)
        self._lock = threading.RLock()
        self.logger = get_logger("ledger.store")

    @classmethod
    def from_config(cls, config: Optional[LedgerConfig] = None) -> 'LedgerStore':
        """Create a store seeded with the configured accounts"""
        config = config or get_config()
        accounts = [
            Account(number=number, balance=balance, currency=Currency.from_code(code))
            for number, balance, code in config.seed_accounts
        ]
        return cls(accounts)

    def snapshot(self) -> LedgerState:
        """Current immutable ledger snapshot"""
        return self._state

    def get_account(self, account_number: str) -> Optional[Account]:
        """Get account by number, None if there isn't one"""
        return self._state.get_account(account_number)

    def require_account(self, account_number: str) -> Account:
        """Get account by number, raising NotFound if there isn't one"""
        account = self._state.get_account(account_number)
        if account is None:
            raise NotFound(account_number)
        return account

    def get_transfers(self) -> List[Transfer]:
        """All committed transfers in commit order"""
        return list(self._state.transfers)

    def get_transfer(self, transfer_id: str) -> Optional[Transfer]:
        return self._state.get_transfer(transfer_id)

    def add_account(self, account: Account) -> Account:
        """
        Add an account created outside the ledger

        Raises:
            ValidationError: If it is not an Account or the number is taken
        """
        if not isinstance(account, Account):
            raise ValidationError(f"Expected an Account, got {type(account).__name__}")

        with self._lock:
            self._state = self._state.with_account(account)

        log_action(
            self.logger, "info", f"Account added: {account.number}",
            action="add_account", resource=f"account:{account.number}",
            extra=account.to_dict()
        )
        return account

    def commit_transfer(
        self,
        transfer: Transfer,
        expected: Optional[Tuple[Account, Account]] = None
    ) -> LedgerState:
        """
        Apply a validated transfer to the ledger

        Replaces the debited and credited accounts and appends the transfer in
        one state transition. No business rules are checked here: the transfer
        must come from a successful domain transfer_money call.

        Args:
            transfer: Transfer produced by the domain
            expected: The (from_account, to_account) values the transfer was
                validated against. When given, the commit only goes through if
                both accounts still hold exactly those values.

        Returns:
            The new LedgerState

        Raises:
            ValidationError: If transfer is malformed or already committed, or
                a resulting balance is out of range
            NotFound: If either account is missing
            StaleState: If expected is given and an account has changed since
        """
        if not isinstance(transfer, Transfer):
            raise ValidationError(f"Expected a Transfer, got {type(transfer).__name__}")

        debit_event = transfer.debit
        credit_event = transfer.credit

        with self._lock:
            current = self._state

            if current.get_transfer(transfer.id) is not None:
                raise ValidationError(f"Transfer {transfer.id} already committed")

            from_account = current.get_account(debit_event.account_number)
            if from_account is None:
                raise NotFound(debit_event.account_number)
            to_account = current.get_account(credit_event.account_number)
            if to_account is None:
                raise NotFound(credit_event.account_number)

            if expected is not None:
                expected_from, expected_to = expected
                if from_account != expected_from:
                    raise StaleState(
                        from_account.number,
                        f"Account {from_account.number} changed since the transfer was validated"
                    )
                if to_account != expected_to:
                    raise StaleState(
                        to_account.number,
                        f"Account {to_account.number} changed since the transfer was validated"
                    )

            if from_account.number == to_account.number:
                updated = [apply_credit(apply_debit(from_account, debit_event), credit_event)]
            else:
                updated = [
                    apply_debit(from_account, debit_event),
                    apply_credit(to_account, credit_event),
                ]

            new_state = current.with_transfer(transfer, updated)
            self._state = new_state

        log_action(
            self.logger, "info", f"Transfer committed: {transfer.transfer_number}",
            action="commit_transfer", resource=f"transfer:{transfer.id}",
            extra={**transfer.to_dict(), "version": new_state.version}
        )
        return new_state

    def transfer_money(
        self,
        transfer_number: str,
        from_account_number: str,
        to_account_number: str,
        amount: Amount,
        id_generator: Optional[IdGenerator] = None,
        clock: Optional[Clock] = None
    ) -> Transfer:
        """
        Read both accounts, validate the transfer and commit it as one unit

        The whole read-validate-commit sequence holds the store lock, so
        concurrent transfers against the same accounts are validated one
        after another against the balances their predecessors left.

        Returns:
            The committed Transfer

        Raises:
            ValidationError: If the amount or transfer number is malformed
            NotFound: If either account does not exist
            IllegalOperation: If the transfer breaks a business rule against
                the current balances
        """
        if not is_valid_amount(amount):
            raise ValidationError(f"amount must be an Amount, got {type(amount).__name__}")

        with self._lock:
            from_account = self.require_account(from_account_number)
            to_account = self.require_account(to_account_number)

            try:
                transfer = validate_transfer(
                    transfer_number, from_account, to_account, amount,
                    id_generator=id_generator, clock=clock
                )
            except IllegalOperation as e:
                log_action(
                    self.logger, "warning", f"Transfer rejected: {transfer_number}",
                    action="transfer_money", resource=f"account:{from_account_number}",
                    extra=e.to_dict()
                )
                raise

            self.commit_transfer(transfer, expected=(from_account, to_account))

        return transfer
