"""Ledger exceptions"""

from typing import Optional


class LedgerError(ValueError):
    """
    Base exception for rejected ledger operations

    Subclasses ValueError so callers validating input with
    ``except ValueError`` also catch ledger rejections.
    """

    def __init__(self, message: str, account_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.account_id = account_id


class InvalidAmount(LedgerError):
    """Amount is not a positive number (or a negative opening balance)"""

    pass


class InsufficientFunds(LedgerError):
    """Withdrawal or transfer exceeds the available balance"""

    pass


class InvalidTransfer(LedgerError):
    """Source equals target, or an account reference is absent"""

    pass


class InvalidAccount(LedgerError):
    """Account cannot be opened with the given identity"""

    pass


class DuplicateAccount(LedgerError):
    """An account with the same id is already registered"""

    pass
