#!/usr/bin/env python3
"""
Account Ledger Demo

Opens two accounts, runs deposits, withdrawals and transfers (including
rejected ones), and prints both statements.
"""

import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from account_ledger.accounts import Account
from account_ledger.errors import LedgerError
from account_ledger.logging_config import setup_logging
from account_ledger.statements import render_statement
from account_ledger.transfers import TransferCoordinator


def attempt(operation, *args):
    """Run an account operation, printing the error instead of raising"""
    try:
        operation(*args)
    except LedgerError as e:
        print(f"Error: {e.message}")


def main() -> int:
    setup_logging(level="WARNING", log_format="text")

    alice = Account.create("123456", "Alice", 1000)
    bob = Account.create("789012", "Bob", 500)

    attempt(alice.deposit, 200)
    attempt(alice.withdraw, 100)
    attempt(alice.withdraw, 2000)
    attempt(alice.deposit, -50)

    coordinator = TransferCoordinator()
    print(coordinator.transfer(alice, bob, 300).message)
    print(coordinator.transfer(alice, bob, 2000).message)

    print()
    print(render_statement(alice.statement()))
    print()
    print(render_statement(bob.statement()))
    return 0


if __name__ == "__main__":
    sys.exit(main())
