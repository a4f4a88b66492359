"""
Transaction Record Module

Immutable facts recorded in each account's ledger. One record per monetary
event, carrying the balance it produced. Sequence ids are strictly increasing
across every account that shares a SequenceGenerator.
"""

from datetime import datetime
from dataclasses import dataclass
from enum import Enum
import itertools
import threading

from .currency import Money


class TransactionKind(Enum):
    """Kinds of ledger records"""
    DEPOSIT = "deposit"          # Money paid in
    WITHDRAWAL = "withdrawal"    # Money paid out
    TRANSFER = "transfer"        # Memo naming the counterparty of a transfer leg
    INTEREST = "interest"        # Interest credited
    COMMISSION = "commission"    # Fee debited


_CREDIT_KINDS = frozenset({TransactionKind.DEPOSIT, TransactionKind.INTEREST})
_DEBIT_KINDS = frozenset({TransactionKind.WITHDRAWAL, TransactionKind.COMMISSION})


@dataclass(frozen=True)
class TransactionRecord:
    """
    One monetary event and the balance it produced.

    TRANSFER records accompany the WITHDRAWAL/DEPOSIT leg that already moved
    the money, so they do not post to the balance themselves. A DEPOSIT with
    reversal set credits back a withdrawal whose transfer failed.
    """
    sequence_id: int
    kind: TransactionKind
    amount: Money
    timestamp: datetime
    description: str
    resulting_balance: Money
    reversal: bool = False

    def __post_init__(self):
        if self.amount.is_negative():
            raise ValueError("Transaction amount cannot be negative")
        if self.amount.currency != self.resulting_balance.currency:
            raise ValueError("Transaction amount currency must match balance currency")

    @property
    def is_credit(self) -> bool:
        return self.kind in _CREDIT_KINDS

    @property
    def is_debit(self) -> bool:
        return self.kind in _DEBIT_KINDS

    @property
    def signed_amount(self) -> Money:
        """Effect of this record on the account's net position"""
        if self.is_credit:
            return self.amount
        if self.is_debit:
            return -self.amount
        return Money.zero(self.amount.currency)

    def to_dict(self) -> dict:
        return {
            "sequence_id": self.sequence_id,
            "kind": self.kind.value,
            "amount": str(self.amount.amount),
            "currency": self.amount.currency.code,
            "timestamp": self.timestamp.isoformat(),
            "description": self.description,
            "resulting_balance": str(self.resulting_balance.amount),
            "reversal": self.reversal,
        }


class SequenceGenerator:
    """Thread-safe strictly increasing id source"""

    def __init__(self, start: int = 1):
        self._counter = itertools.count(start)
        self._lock = threading.Lock()
        self._last = start - 1

    def next_id(self) -> int:
        with self._lock:
            self._last = next(self._counter)
            return self._last

    @property
    def last_issued(self) -> int:
        with self._lock:
            return self._last


# Shared by accounts constructed outside a Bank
default_sequence = SequenceGenerator()
