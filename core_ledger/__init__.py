"""
Core Ledger

A small banking ledger: clients own savings, checking and investment accounts,
every balance change is an immutable transaction record, and the Bank
coordinates atomic transfers and the monthly commission/interest cycle.
All monetary values use Decimal.
"""

__version__ = "1.0.0"
