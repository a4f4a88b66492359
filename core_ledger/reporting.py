"""
Reporting Module

Read-only account reports: current state, the most recent ledger records and
aggregate statistics over the full history. Reports carry numbers only; laying
them out is the presentation layer's job.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .currency import Money
from .transactions import TransactionRecord, TransactionKind


@dataclass(frozen=True)
class AccountStatistics:
    """Aggregates computed by scanning the whole ledger"""
    total_deposited: Money
    total_withdrawn: Money
    deposit_count: int
    withdrawal_count: int
    counts_by_kind: Dict[TransactionKind, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "total_deposited": str(self.total_deposited.amount),
            "total_withdrawn": str(self.total_withdrawn.amount),
            "deposit_count": self.deposit_count,
            "withdrawal_count": self.withdrawal_count,
            "counts_by_kind": {kind.value: count for kind, count in self.counts_by_kind.items()},
        }


@dataclass(frozen=True)
class AccountReport:
    account_number: str
    client_id: str
    client_name: Optional[str]
    account_type: str
    state: str
    balance: Money
    overdraft: Money
    recent_transactions: List[TransactionRecord]
    statistics: AccountStatistics

    def to_dict(self) -> dict:
        return {
            "account_number": self.account_number,
            "client_id": self.client_id,
            "client_name": self.client_name,
            "account_type": self.account_type,
            "state": self.state,
            "currency": self.balance.currency.code,
            "balance": str(self.balance.amount),
            "overdraft": str(self.overdraft.amount),
            "recent_transactions": [record.to_dict() for record in self.recent_transactions],
            "statistics": self.statistics.to_dict(),
        }


def compute_statistics(history: List[TransactionRecord], currency) -> AccountStatistics:
    """
    Totals and per-kind counts for a ledger.

    A reversal deposit cancels the withdrawal of a failed transfer, so it is
    netted out of the withdrawal totals instead of counting as a deposit.
    counts_by_kind still counts every record by its raw kind.
    """
    total_deposited = Money.zero(currency)
    total_withdrawn = Money.zero(currency)
    counts = {kind: 0 for kind in TransactionKind}
    deposit_count = 0
    withdrawal_count = 0

    for record in history:
        counts[record.kind] += 1
        if record.reversal:
            total_withdrawn = total_withdrawn - record.amount
            withdrawal_count -= 1
        elif record.kind == TransactionKind.DEPOSIT:
            total_deposited = total_deposited + record.amount
            deposit_count += 1
        elif record.kind == TransactionKind.WITHDRAWAL:
            total_withdrawn = total_withdrawn + record.amount
            withdrawal_count += 1

    return AccountStatistics(
        total_deposited=total_deposited,
        total_withdrawn=total_withdrawn,
        deposit_count=deposit_count,
        withdrawal_count=withdrawal_count,
        counts_by_kind=counts,
    )


def build_account_report(account, recent: int = 10, client_name: Optional[str] = None) -> AccountReport:
    """
    Build a report for one account.

    Args:
        account: Account to report on
        recent: How many of the latest records to include, newest first
        client_name: Owner's display name, when the caller knows it

    Returns:
        AccountReport snapshot; later account activity does not change it
    """
    # One consistent snapshot of state and ledger
    with account.lock:
        history = account.history()
        balance = account.balance
        overdraft = account.overdraft
        state = account.state

    latest = list(reversed(history[-recent:])) if recent > 0 else []

    return AccountReport(
        account_number=account.account_number,
        client_id=account.client_id,
        client_name=client_name,
        account_type=account.account_type.value,
        state=state.value,
        balance=balance,
        overdraft=overdraft,
        recent_transactions=latest,
        statistics=compute_statistics(history, account.currency),
    )
