"""
Account Ledger

In-memory bank accounts with an append-only transaction log, Decimal
amounts, and all-or-nothing transfers between accounts.
"""

__version__ = "1.0.0"
