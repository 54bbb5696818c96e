"""
Account Book Module

In-memory registry of open accounts, keyed by account id, with transfers
requested by id.
"""

from decimal import Decimal
from typing import Dict, List, Optional
import threading
import uuid

from .accounts import Account
from .amounts import AmountLike, ZERO
from .errors import DuplicateAccount, InvalidTransfer
from .transfers import TransferCoordinator, TransferResult, TransferState
from .logging_config import get_logger


def _key(account_id) -> str:
    """Accounts store their id as a string; look them up the same way"""
    return "" if account_id is None else str(account_id)


class AccountBook:
    """
    Holds accounts by id and routes transfers through a coordinator
    """

    def __init__(self, coordinator: Optional[TransferCoordinator] = None):
        self.coordinator = coordinator or TransferCoordinator()
        self.logger = get_logger("account_ledger.book")
        self._accounts: Dict[str, Account] = {}
        self._lock = threading.Lock()

    def open_account(
        self,
        account_id: str,
        owner: str,
        opening_balance: AmountLike = 0,
        deposit_limit: Optional[AmountLike] = None
    ) -> Account:
        """
        Open and register a new account

        Raises:
            DuplicateAccount: If the id is already registered
            InvalidAmount: If the opening balance is negative
        """
        key = _key(account_id)
        with self._lock:
            if key in self._accounts:
                raise DuplicateAccount(f"Account {key} already exists", key)
            account = Account.create(account_id, owner, opening_balance, deposit_limit)
            self._accounts[account.id] = account
        return account

    def get_account(self, account_id: str) -> Optional[Account]:
        """Get account by id"""
        with self._lock:
            return self._accounts.get(_key(account_id))

    def accounts(self) -> List[Account]:
        """All accounts in opening order"""
        with self._lock:
            return list(self._accounts.values())

    def transfer(self, source_id: str, target_id: str, amount: AmountLike) -> TransferResult:
        """
        Transfer between two registered accounts

        Unknown ids produce a rejected result carrying InvalidTransfer.
        """
        source_id, target_id = _key(source_id), _key(target_id)
        source = self.get_account(source_id)
        target = self.get_account(target_id)

        missing = [account_id for account_id, account in
                   ((source_id, source), (target_id, target)) if account is None]
        if missing:
            self.logger.warning(f"Transfer rejected, unknown accounts: {', '.join(missing)}")
            return TransferResult(
                transfer_id=str(uuid.uuid4()),
                source_id=source_id,
                target_id=target_id,
                amount=None,
                state=TransferState.REJECTED,
                error=InvalidTransfer(f"Account {missing[0]} not found", missing[0])
            )

        return self.coordinator.transfer(source, target, amount)

    def total_balance(self) -> Decimal:
        """Sum of all account balances"""
        return sum((account.balance for account in self.accounts()), ZERO)
