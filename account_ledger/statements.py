"""
Statement and Reporting Module

Read-only account statements and human-readable rendering of statements
and transfer results. Nothing here prints; callers decide where text goes.
"""

from decimal import Decimal
from datetime import datetime
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterator, NamedTuple, Tuple

from .amounts import format_amount
from .config import get_config

if TYPE_CHECKING:
    from .accounts import TransactionKind
    from .transfers import TransferResult


SEPARATOR = "---------------------"


class StatementLine(NamedTuple):
    """One statement row: kind, absolute amount, timestamp"""
    kind: 'TransactionKind'
    amount: Decimal
    timestamp: datetime


class StatementEntries:
    """
    Lazy view over a statement snapshot

    Each iteration starts again from the first entry.
    """

    def __init__(self, snapshot: Tuple[Tuple[Any, Decimal, datetime], ...]):
        self._snapshot = snapshot

    def __iter__(self) -> Iterator[StatementLine]:
        for kind, amount, timestamp in self._snapshot:
            yield StatementLine(kind, amount, timestamp)

    def __len__(self) -> int:
        return len(self._snapshot)


@dataclass(frozen=True)
class Statement:
    """Point-in-time statement of an account"""
    account_id: str
    owner: str
    balance: Decimal
    snapshot: Tuple[Tuple[Any, Decimal, datetime], ...]

    @property
    def entries(self) -> StatementEntries:
        return StatementEntries(self.snapshot)


def render_statement(statement: Statement) -> str:
    """
    Render a statement as display text

    Timestamps are stored in UTC and shown in local time.

    Example:
        Statement for account A1 (Alice)
        Current balance: $1,100.00
        Transaction history:
        ---------------------
        Account opened: $1,000.00 (2026-01-01 10:00:00)
        ---------------------
    """
    timestamp_format = get_config().timestamp_format
    lines = [
        f"Statement for account {statement.account_id} ({statement.owner})",
        f"Current balance: {format_amount(statement.balance)}",
        "Transaction history:",
        SEPARATOR,
    ]
    for entry in statement.entries:
        lines.append(
            f"{entry.kind.label}: {format_amount(entry.amount)} "
            f"({entry.timestamp.astimezone().strftime(timestamp_format)})"
        )
    lines.append(SEPARATOR)
    return "\n".join(lines)


def render_transfer(result: 'TransferResult') -> str:
    """Render a transfer outcome as a one-line message"""
    if result.ok:
        return (
            f"Transfer of {format_amount(result.amount)} from account "
            f"{result.source_id} to {result.target_id} completed successfully"
        )
    reason = result.error.message if result.error else result.state.value
    if result.rolled_back:
        return f"Transfer failed: {reason} (funds returned to account {result.source_id})"
    return f"Transfer failed: {reason}"
