"""
Account Module

A bank account holding a Decimal balance and an append-only transaction log.
Every balance change goes through a single locked primitive that validates,
mutates and appends the log entry as one unit, so the balance always equals
the sum of the logged amounts and never goes negative.
"""

from decimal import Decimal
from datetime import datetime, timezone
from dataclasses import dataclass
from typing import List, Optional, Tuple
from enum import Enum
import threading

from .amounts import AmountLike, ZERO, to_amount, format_amount
from .errors import LedgerError, InvalidAccount, InvalidAmount, InsufficientFunds
from .logging_config import get_logger, log_action
from .statements import Statement


class TransactionKind(Enum):
    """Kinds of ledger entries with a stable code and a display label"""
    OPEN = ("open", "Account opened")
    DEPOSIT = ("deposit", "Deposit")
    WITHDRAWAL = ("withdrawal", "Withdrawal")
    TRANSFER_OUT = ("transfer_out", "Transfer out")
    TRANSFER_IN = ("transfer_in", "Transfer in")

    def __init__(self, code: str, label: str):
        self.code = code
        self.label = label

    @property
    def is_transfer(self) -> bool:
        return self in (TransactionKind.TRANSFER_OUT, TransactionKind.TRANSFER_IN)


CREDIT_KINDS = (TransactionKind.DEPOSIT, TransactionKind.TRANSFER_IN)
DEBIT_KINDS = (TransactionKind.WITHDRAWAL, TransactionKind.TRANSFER_OUT)


@dataclass(frozen=True)
class Transaction:
    """
    Immutable ledger entry

    ``amount`` is the applied balance delta: positive for credits,
    negative for debits.
    """
    kind: TransactionKind
    amount: Decimal
    timestamp: datetime
    reference: Optional[str] = None  # Transfer id for transfer legs
    description: str = ""

    @property
    def is_credit(self) -> bool:
        return self.amount > ZERO

    @property
    def is_debit(self) -> bool:
        return self.amount < ZERO


class Account:
    """
    Bank account with a validated balance and ordered transaction log

    All reads and writes of ``balance`` and the log happen under the
    account's own lock.
    """

    def __init__(
        self,
        account_id: str,
        owner: str,
        opening_balance: AmountLike = 0,
        deposit_limit: Optional[AmountLike] = None
    ):
        if not account_id:
            raise InvalidAccount("Account id is required")

        self.logger = get_logger("account_ledger.accounts")
        self._id = str(account_id)
        self._owner = owner
        self._lock = threading.RLock()
        self._transactions: List[Transaction] = []

        opening = self._validated_amount(opening_balance, "open")
        if opening < ZERO:
            raise self._rejected(
                InvalidAmount("Initial balance cannot be negative", self._id),
                "open", opening
            )

        self._deposit_limit = None
        if deposit_limit is not None:
            limit = self._validated_amount(deposit_limit, "open")
            if limit <= ZERO:
                raise self._rejected(
                    InvalidAmount("Deposit limit must be positive", self._id),
                    "open", limit
                )
            self._deposit_limit = limit

        self._balance = opening
        self._append(TransactionKind.OPEN, opening)

        log_action(
            self.logger, "info", f"Account opened: {self._id}",
            action="open_account", resource=f"account:{self._id}",
            extra={
                "owner": owner,
                "opening_balance": str(opening),
                "deposit_limit": str(self._deposit_limit) if self._deposit_limit else None
            }
        )

    @classmethod
    def create(
        cls,
        account_id: str,
        owner: str,
        opening_balance: AmountLike = 0,
        deposit_limit: Optional[AmountLike] = None
    ) -> 'Account':
        """
        Open a new account

        Args:
            account_id: Stable identifier, immutable after creation
            owner: Display name of the account holder
            opening_balance: Non-negative opening balance (recorded even if zero)
            deposit_limit: Optional ceiling on a single deposit

        Returns:
            Created Account with an Open entry in its log

        Raises:
            InvalidAccount: If the account id is empty
            InvalidAmount: If the opening balance is negative or not a number
        """
        return cls(account_id, owner, opening_balance, deposit_limit)

    @property
    def id(self) -> str:
        return self._id

    @property
    def owner(self) -> str:
        return self._owner

    @property
    def deposit_limit(self) -> Optional[Decimal]:
        return self._deposit_limit

    @property
    def balance(self) -> Decimal:
        with self._lock:
            return self._balance

    @property
    def transactions(self) -> Tuple[Transaction, ...]:
        """Snapshot of the log in chronological order"""
        with self._lock:
            return tuple(self._transactions)

    def deposit(
        self,
        amount: AmountLike,
        *,
        kind: TransactionKind = TransactionKind.DEPOSIT,
        reference: Optional[str] = None
    ) -> Decimal:
        """
        Credit the account

        Args:
            amount: Positive amount to credit
            kind: DEPOSIT, or TRANSFER_IN for the credit leg of a transfer
            reference: Transfer id linking the entry to its transfer

        Returns:
            Updated balance

        Raises:
            InvalidAmount: If amount is not positive or exceeds the deposit limit
        """
        if kind not in CREDIT_KINDS:
            raise ValueError(f"{kind.label} is not a credit")
        return self._credit(amount, kind, reference, "", enforce_limit=True)

    def withdraw(
        self,
        amount: AmountLike,
        *,
        kind: TransactionKind = TransactionKind.WITHDRAWAL,
        reference: Optional[str] = None
    ) -> Decimal:
        """
        Debit the account; never partially applied

        Args:
            amount: Positive amount to debit
            kind: WITHDRAWAL, or TRANSFER_OUT for the debit leg of a transfer
            reference: Transfer id linking the entry to its transfer

        Returns:
            Updated balance

        Raises:
            InvalidAmount: If amount is not positive
            InsufficientFunds: If amount exceeds the current balance
        """
        if kind not in DEBIT_KINDS:
            raise ValueError(f"{kind.label} is not a debit")

        action = kind.code
        with self._lock:
            value = self._validated_amount(amount, action)
            if value <= ZERO:
                raise self._rejected(
                    InvalidAmount(f"{self._noun(kind)} amount must be positive", self._id),
                    action, value, reference
                )
            if value > self._balance:
                raise self._rejected(
                    InsufficientFunds(
                        f"Insufficient funds for {self._noun(kind).lower()}", self._id
                    ),
                    action, value, reference
                )

            self._balance -= value
            self._append(kind, -value, reference)
            balance = self._balance

        self._applied(action, -value, balance, reference)
        return balance

    def restore(self, amount: AmountLike, reference: Optional[str] = None) -> Decimal:
        """
        Return funds debited by a transfer that could not be completed

        Recorded as a TRANSFER_IN entry marked as a rollback. The deposit
        limit does not apply: the funds were already held by this account.
        """
        return self._credit(
            amount, TransactionKind.TRANSFER_IN, reference,
            "Transfer rolled back", enforce_limit=False
        )

    def statement(self) -> Statement:
        """Point-in-time statement; reading it never touches the account"""
        with self._lock:
            entries = tuple(
                (txn.kind, abs(txn.amount), txn.timestamp) for txn in self._transactions
            )
            balance = self._balance
        return Statement(
            account_id=self._id,
            owner=self._owner,
            balance=balance,
            snapshot=entries
        )

    def is_consistent(self) -> bool:
        """Check that the balance matches the log and is not negative"""
        with self._lock:
            total = sum((txn.amount for txn in self._transactions), ZERO)
            return total == self._balance and self._balance >= ZERO

    def _credit(
        self,
        amount: AmountLike,
        kind: TransactionKind,
        reference: Optional[str],
        description: str,
        enforce_limit: bool
    ) -> Decimal:
        action = "restore" if description else kind.code
        with self._lock:
            value = self._validated_amount(amount, action)
            if value <= ZERO:
                raise self._rejected(
                    InvalidAmount(f"{self._noun(kind)} amount must be positive", self._id),
                    action, value, reference
                )
            if enforce_limit and self._deposit_limit is not None and value > self._deposit_limit:
                raise self._rejected(
                    InvalidAmount(
                        f"{self._noun(kind)} of {format_amount(value)} exceeds deposit limit "
                        f"of {format_amount(self._deposit_limit)}",
                        self._id
                    ),
                    action, value, reference
                )

            self._balance += value
            self._append(kind, value, reference, description)
            balance = self._balance

        self._applied(action, value, balance, reference)
        return balance

    def _append(
        self,
        kind: TransactionKind,
        amount: Decimal,
        reference: Optional[str] = None,
        description: str = ""
    ) -> None:
        """Append a log entry; caller holds the lock"""
        now = datetime.now(timezone.utc)
        # Wall clock may step backwards; keep this log non-decreasing
        if self._transactions and now < self._transactions[-1].timestamp:
            now = self._transactions[-1].timestamp
        self._transactions.append(Transaction(
            kind=kind,
            amount=amount,
            timestamp=now,
            reference=reference,
            description=description
        ))

    def _validated_amount(self, amount: AmountLike, action: str) -> Decimal:
        try:
            return to_amount(amount)
        except InvalidAmount as e:
            raise self._rejected(InvalidAmount(e.message, self._id), action, None) from e

    def _rejected(
        self,
        error: LedgerError,
        action: str,
        amount: Optional[Decimal],
        reference: Optional[str] = None
    ) -> LedgerError:
        """Log a rejected operation and return the error for the caller to raise"""
        log_action(
            self.logger, "warning", f"Rejected {action} on {self._id}: {error.message}",
            action=action, resource=f"account:{self._id}", correlation_id=reference,
            extra={
                "error": type(error).__name__,
                "amount": str(amount) if amount is not None else None
            }
        )
        return error

    def _applied(
        self,
        action: str,
        amount: Decimal,
        balance: Decimal,
        reference: Optional[str]
    ) -> None:
        log_action(
            self.logger, "info", f"{action} applied to {self._id}",
            action=action, resource=f"account:{self._id}", correlation_id=reference,
            extra={"amount": str(amount), "balance": str(balance)}
        )

    @staticmethod
    def _noun(kind: TransactionKind) -> str:
        return "Transfer" if kind.is_transfer else kind.label

    def __repr__(self) -> str:
        return f"Account(id={self._id!r}, owner={self._owner!r}, balance={self.balance})"
