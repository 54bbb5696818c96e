"""
Test suite for statements module

Tests statement snapshots, restartable iteration, and text rendering of
statements and transfer results.
"""

from decimal import Decimal
from datetime import datetime, timezone

from account_ledger.accounts import Account, TransactionKind
from account_ledger.errors import InvalidTransfer
from account_ledger.statements import (
    Statement, StatementLine, render_statement, render_transfer, SEPARATOR
)
from account_ledger.transfers import TransferCoordinator, TransferResult, TransferState


class TestStatement:
    """Test statement snapshots"""

    def setup_method(self):
        """Set up test fixtures"""
        self.account = Account.create("A1", "Alice", 1000)
        self.account.deposit(200)
        self.account.withdraw(100)

    def test_statement_fields(self):
        """Test statement carries identity, balance and absolute amounts"""
        statement = self.account.statement()

        assert statement.account_id == "A1"
        assert statement.owner == "Alice"
        assert statement.balance == Decimal('1100')

        entries = list(statement.entries)
        assert [e.kind for e in entries] == [
            TransactionKind.OPEN, TransactionKind.DEPOSIT, TransactionKind.WITHDRAWAL
        ]
        assert [e.amount for e in entries] == [Decimal('1000'), Decimal('200'), Decimal('100')]
        assert all(isinstance(e, StatementLine) for e in entries)

    def test_entries_are_restartable(self):
        """Test entries can be iterated more than once with the same result"""
        entries = self.account.statement().entries

        assert list(entries) == list(entries)
        assert len(entries) == 3

    def test_entries_are_tuples(self):
        """Test each entry unpacks as (kind, amount, timestamp)"""
        kind, amount, timestamp = next(iter(self.account.statement().entries))
        assert kind == TransactionKind.OPEN
        assert amount == Decimal('1000')
        assert timestamp.tzinfo is not None

    def test_statement_is_point_in_time(self):
        """Test later activity does not alter an earlier statement"""
        statement = self.account.statement()
        self.account.deposit(5)

        assert statement.balance == Decimal('1100')
        assert len(statement.entries) == 3

    def test_statement_has_no_side_effects(self):
        """Test producing statements leaves the account unchanged"""
        before = self.account.transactions
        for _ in range(3):
            self.account.statement()
        assert self.account.transactions == before
        assert self.account.balance == Decimal('1100')


class TestRenderStatement:
    """Test statement text"""

    def test_render_layout(self):
        """Test header, separators, and entry lines"""
        opened = datetime(2026, 1, 2, 9, 30, 0, tzinfo=timezone.utc)
        statement = Statement(
            account_id="A1",
            owner="Alice",
            balance=Decimal('1100.00'),
            snapshot=(
                (TransactionKind.OPEN, Decimal('1000.00'), opened),
                (TransactionKind.WITHDRAWAL, Decimal('100.00'), opened),
            )
        )

        lines = render_statement(statement).splitlines()

        assert lines[0] == "Statement for account A1 (Alice)"
        assert lines[1] == "Current balance: $1,100.00"
        assert lines[2] == "Transaction history:"
        assert lines[3] == SEPARATOR
        shown = opened.astimezone().strftime("%Y-%m-%d %H:%M:%S")
        assert lines[4] == f"Account opened: $1,000.00 ({shown})"
        assert lines[5] == f"Withdrawal: $100.00 ({shown})"
        assert lines[6] == SEPARATOR

    def test_render_live_account(self):
        """Test rendering a real account statement"""
        account = Account.create("789012", "Bob", 500)
        account.deposit(300, kind=TransactionKind.TRANSFER_IN, reference="T-1")

        text = render_statement(account.statement())

        assert "Statement for account 789012 (Bob)" in text
        assert "Current balance: $800.00" in text
        assert "Transfer in: $300.00" in text


class TestRenderTransfer:
    """Test transfer messages"""

    def test_success(self):
        """Test success wording"""
        source = Account.create("A1", "Alice", 100)
        target = Account.create("A2", "Bob", 0)
        result = TransferCoordinator().transfer(source, target, "12.5")

        assert render_transfer(result) == (
            "Transfer of $12.50 from account A1 to A2 completed successfully"
        )

    def test_rejected(self):
        """Test failure wording carries the reason"""
        result = TransferResult(
            transfer_id="T-1",
            source_id="A1",
            target_id="A9",
            amount=None,
            state=TransferState.REJECTED,
            error=InvalidTransfer("Account A9 not found", "A9")
        )

        assert render_transfer(result) == "Transfer failed: Account A9 not found"
