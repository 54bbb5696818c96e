"""
Transfer Coordination Module

Moves funds between two accounts as a debit followed by a credit. The
two legs are applied under each account's own lock in turn, never both
at once, so opposite-direction transfers cannot deadlock. If the credit
leg fails, a compensating credit returns the funds to the source, keeping
the combined balance of both accounts unchanged.
"""

from decimal import Decimal
from dataclasses import dataclass
from typing import Optional
from enum import Enum
import uuid

from .accounts import Account, TransactionKind
from .amounts import AmountLike, ZERO, to_amount
from .errors import LedgerError, InvalidAmount, InsufficientFunds, InvalidTransfer
from .logging_config import get_logger, log_action
from .statements import render_transfer


class TransferState(Enum):
    """States of a transfer"""
    VALIDATED = "validated"      # Inputs checked, nothing applied yet
    DEBITED = "debited"          # Source debited, target not yet credited
    CREDITED = "credited"        # Both legs applied (terminal, success)
    ROLLED_BACK = "rolled_back"  # Credit failed, source re-credited (terminal)
    REJECTED = "rejected"        # Failed before any mutation (terminal)


TERMINAL_STATES = (TransferState.CREDITED, TransferState.ROLLED_BACK, TransferState.REJECTED)


@dataclass(frozen=True)
class TransferResult:
    """Outcome of a transfer attempt"""
    transfer_id: str
    source_id: Optional[str]
    target_id: Optional[str]
    amount: Optional[Decimal]
    state: TransferState
    error: Optional[LedgerError] = None

    def __post_init__(self):
        if self.state not in TERMINAL_STATES:
            raise ValueError(f"Transfer result cannot be in state {self.state.value}")

    @property
    def ok(self) -> bool:
        return self.state == TransferState.CREDITED

    @property
    def rolled_back(self) -> bool:
        return self.state == TransferState.ROLLED_BACK

    @property
    def message(self) -> str:
        return render_transfer(self)

    def raise_for_error(self) -> None:
        """Raise the failure that ended this transfer, if any"""
        if self.error is not None:
            raise self.error


class TransferCoordinator:
    """
    Applies two-account transfers with compensation on partial failure
    """

    def __init__(self):
        self.logger = get_logger("account_ledger.transfers")

    def transfer(
        self,
        source: Optional[Account],
        target: Optional[Account],
        amount: AmountLike
    ) -> TransferResult:
        """
        Transfer funds from source to target

        Args:
            source: Account to debit
            target: Account to credit
            amount: Positive amount to move

        Returns:
            TransferResult in a terminal state. Ledger failures are reported
            in the result, not raised.

        Raises:
            Exception: Any non-ledger error from the credit leg, re-raised
                after the source has been re-credited
        """
        transfer_id = str(uuid.uuid4())
        source_id = source.id if source is not None else None
        target_id = target.id if target is not None else None

        try:
            value = self._validate(source, target, amount)
        except LedgerError as e:
            return self._finish(
                transfer_id, source_id, target_id, None, TransferState.REJECTED, e
            )

        # Authoritative funds check happens inside the locked withdraw
        try:
            source.withdraw(value, kind=TransactionKind.TRANSFER_OUT, reference=transfer_id)
        except LedgerError as e:
            return self._finish(
                transfer_id, source_id, target_id, value, TransferState.REJECTED, e
            )

        log_action(
            self.logger, "debug", f"Transfer {transfer_id} {TransferState.DEBITED.value}",
            action="transfer", resource=f"account:{source_id}", correlation_id=transfer_id
        )

        try:
            target.deposit(value, kind=TransactionKind.TRANSFER_IN, reference=transfer_id)
        except LedgerError as e:
            self._roll_back(source, value, transfer_id, e)
            return self._finish(
                transfer_id, source_id, target_id, value, TransferState.ROLLED_BACK, e
            )
        except Exception as e:
            self._roll_back(source, value, transfer_id, e)
            raise

        return self._finish(
            transfer_id, source_id, target_id, value, TransferState.CREDITED
        )

    def _validate(
        self,
        source: Optional[Account],
        target: Optional[Account],
        amount: AmountLike
    ) -> Decimal:
        """Check inputs before anything is applied; returns the quantized amount"""
        if source is None:
            raise InvalidTransfer("Source account is required")
        if target is None:
            raise InvalidTransfer("Target account is required")

        value = to_amount(amount)
        if value <= ZERO:
            raise InvalidAmount("Transfer amount must be positive", source.id)

        if source is target or source.id == target.id:
            raise InvalidTransfer("Cannot transfer to the same account", source.id)

        # Advisory only: the balance can change before the withdraw takes the lock
        if source.balance < value:
            raise InsufficientFunds("Insufficient funds for transfer", source.id)

        return value

    def _roll_back(
        self,
        source: Account,
        value: Decimal,
        transfer_id: str,
        cause: Exception
    ) -> None:
        """Compensate a debited transfer by returning the funds to the source"""
        source.restore(value, reference=transfer_id)
        log_action(
            self.logger, "error", f"Transfer {transfer_id} rolled back: {cause}",
            action="transfer_rollback", resource=f"account:{source.id}",
            correlation_id=transfer_id,
            extra={"amount": str(value), "error": type(cause).__name__}
        )

    def _finish(
        self,
        transfer_id: str,
        source_id: Optional[str],
        target_id: Optional[str],
        value: Optional[Decimal],
        state: TransferState,
        error: Optional[LedgerError] = None
    ) -> TransferResult:
        result = TransferResult(
            transfer_id=transfer_id,
            source_id=source_id,
            target_id=target_id,
            amount=value,
            state=state,
            error=error
        )

        log_action(
            self.logger, "info" if result.ok else "warning", result.message,
            action="transfer", resource=f"transfer:{transfer_id}",
            correlation_id=transfer_id,
            extra={
                "source": source_id,
                "target": target_id,
                "amount": str(value) if value is not None else None,
                "state": state.value,
                "error": type(error).__name__ if error else None
            }
        )

        return result
