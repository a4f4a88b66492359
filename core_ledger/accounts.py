"""
Account Module

Accounts own their balance, lifecycle state, daily withdrawal counter and their
own append-only ledger of TransactionRecords. The account type is a tag: the
withdrawal, commission and interest rules for each type are plain functions of
the account's position and its ProductPolicy, looked up in dispatch tables.

Every public operation runs under the account's own re-entrant lock, so two
unrelated accounts never contend and a check-then-act sequence on one account
is never interleaved with another caller.
"""

from decimal import Decimal, InvalidOperation
from datetime import datetime, timezone, date
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple
from enum import Enum
import threading

from .currency import Money, Currency, MoneyLike, to_money
from .errors import (
    InvalidAmount, AccountNotActive, DailyLimitExceeded, InsufficientFunds,
    WithdrawalNotPermitted, InvalidStateTransition
)
from .products import AccountType, ProductPolicy
from .transactions import TransactionRecord, TransactionKind, SequenceGenerator, default_sequence
from .reporting import AccountReport, build_account_report
from .logging_config import get_logger, log_action


Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AccountState(Enum):
    """Account lifecycle states"""
    ACTIVE = "active"        # Normal operation
    BLOCKED = "blocked"      # Administratively blocked
    SUSPENDED = "suspended"  # Temporarily suspended
    CLOSED = "closed"        # Permanently closed

    @classmethod
    def parse(cls, value) -> 'AccountState':
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            for state in cls:
                if key in (state.value, state.name.lower()):
                    return state
        raise InvalidStateTransition(f"Unknown account state: {value!r}")


# CLOSED is terminal
_ALLOWED_TRANSITIONS = {
    AccountState.ACTIVE: {AccountState.BLOCKED, AccountState.SUSPENDED, AccountState.CLOSED},
    AccountState.BLOCKED: {AccountState.ACTIVE, AccountState.CLOSED},
    AccountState.SUSPENDED: {AccountState.ACTIVE, AccountState.CLOSED},
    AccountState.CLOSED: set(),
}


@dataclass(frozen=True)
class Position:
    """Balance plus borrowed overdraft; net position is balance - overdraft"""
    balance: Money
    overdraft: Money


# (description, amount charged, position after the charge)
Charge = Tuple[str, Money, Position]


# Withdrawal rules

def _check_daily_limit(policy: ProductPolicy, withdrawn_today: Money, amount: Money) -> None:
    if withdrawn_today + amount > policy.daily_withdrawal_limit:
        raise DailyLimitExceeded(
            f"Daily withdrawal limit of {policy.daily_withdrawal_limit.to_string()} exceeded "
            f"(already withdrawn today: {withdrawn_today.to_string()})"
        )


def _savings_withdrawal(position: Position, policy: ProductPolicy,
                        amount: Money, withdrawn_today: Money) -> Position:
    _check_daily_limit(policy, withdrawn_today, amount)
    if position.balance < amount:
        raise InsufficientFunds(f"Insufficient funds. Available: {position.balance.to_string()}")
    return Position(position.balance - amount, position.overdraft)


def _checking_withdrawal(position: Position, policy: ProductPolicy,
                         amount: Money, withdrawn_today: Money) -> Position:
    _check_daily_limit(policy, withdrawn_today, amount)
    available = position.balance + policy.overdraft_limit - position.overdraft
    if amount > available:
        raise InsufficientFunds(f"Insufficient funds. Available: {available.to_string()}")
    if amount <= position.balance:
        return Position(position.balance - amount, position.overdraft)
    shortfall = amount - position.balance
    return Position(Money.zero(amount.currency), position.overdraft + shortfall)


def _locked_withdrawal(position: Position, policy: ProductPolicy,
                       amount: Money, withdrawn_today: Money) -> Position:
    raise WithdrawalNotPermitted(
        f"Investment account is locked for {policy.lock_months} months"
    )


_WITHDRAWAL_RULES = {
    AccountType.SAVINGS: _savings_withdrawal,
    AccountType.CHECKING: _checking_withdrawal,
    AccountType.INVESTMENT: _locked_withdrawal,
}


# Commission rules
#
# Fees never fail, but they are capped at what the account can absorb: a
# savings balance never goes below zero and a checking account never borrows
# beyond its overdraft limit.

def _savings_commission(position: Position, policy: ProductPolicy) -> List[Charge]:
    if not position.balance < policy.low_balance_threshold:
        return []
    fee = min(policy.low_balance_fee, position.balance)
    if not fee.is_positive():
        return []
    after = Position(position.balance - fee, position.overdraft)
    return [("Low balance fee", fee, after)]


def _debit_balance_first(position: Position, policy: ProductPolicy, fee: Money) -> Tuple[Money, Position]:
    headroom = policy.overdraft_limit - position.overdraft
    charged = min(fee, position.balance + headroom)
    from_balance = min(charged, position.balance)
    return charged, Position(position.balance - from_balance,
                             position.overdraft + (charged - from_balance))


def _debit_overdraft_first(position: Position, policy: ProductPolicy, fee: Money) -> Tuple[Money, Position]:
    headroom = policy.overdraft_limit - position.overdraft
    charged = min(fee, position.balance + headroom)
    to_overdraft = min(charged, headroom)
    return charged, Position(position.balance - (charged - to_overdraft),
                             position.overdraft + to_overdraft)


def _checking_commission(position: Position, policy: ProductPolicy) -> List[Charge]:
    charges = []
    borrowed = position.overdraft

    fee, position = _debit_balance_first(position, policy, policy.maintenance_fee)
    if fee.is_positive():
        charges.append(("Monthly maintenance fee", fee, position))

    if borrowed.is_positive():
        # Overdraft interest is capitalized into the borrowed amount
        fee, position = _debit_overdraft_first(position, policy, borrowed * policy.overdraft_fee_rate)
        if fee.is_positive():
            charges.append(("Overdraft fee", fee, position))
    return charges


def _no_commission(position: Position, policy: ProductPolicy) -> List[Charge]:
    return []


_COMMISSION_RULES = {
    AccountType.SAVINGS: _savings_commission,
    AccountType.CHECKING: _checking_commission,
    AccountType.INVESTMENT: _no_commission,
}


# Interest rules

def _monthly_interest(position: Position, policy: ProductPolicy) -> Optional[Money]:
    return position.balance * policy.monthly_interest_rate


def _no_interest(position: Position, policy: ProductPolicy) -> Optional[Money]:
    return None


_INTEREST_RULES = {
    AccountType.SAVINGS: _monthly_interest,
    AccountType.CHECKING: _no_interest,
    AccountType.INVESTMENT: _monthly_interest,
}

_INTEREST_DESCRIPTIONS = {
    AccountType.SAVINGS: "Monthly interest",
    AccountType.INVESTMENT: "Investment interest",
}


@dataclass(eq=False)
class Account:
    """
    Bank account of one of the fixed product types.

    Balance less any outstanding overdraft always equals the opening balance
    plus the signed sum of the ledger.
    """
    account_number: str
    client_id: str
    policy: ProductPolicy
    opening_balance: Money
    clock: Clock = field(default=utc_now, repr=False)
    sequence: SequenceGenerator = field(default=default_sequence, repr=False)
    state: AccountState = AccountState.ACTIVE
    balance: Money = field(init=False)
    overdraft: Money = field(init=False)
    withdrawn_today: Money = field(init=False)
    last_withdrawal_date: Optional[date] = field(default=None, init=False)
    opened_at: datetime = field(init=False)
    _history: List[TransactionRecord] = field(default_factory=list, init=False, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, init=False, repr=False)

    def __post_init__(self):
        if self.opening_balance.currency != self.policy.currency:
            raise ValueError("Opening balance currency must match product currency")
        if self.opening_balance.is_negative():
            raise InvalidAmount("Opening balance cannot be negative")

        zero = Money.zero(self.currency)
        self.balance = self.opening_balance
        self.overdraft = zero
        self.withdrawn_today = zero
        self.opened_at = self.clock()
        self._logger = get_logger("core_ledger.accounts")

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    @property
    def account_type(self) -> AccountType:
        return self.policy.account_type

    @property
    def currency(self) -> Currency:
        return self.policy.currency

    @property
    def interest_rate(self) -> Decimal:
        """Annual interest rate"""
        return self.policy.annual_interest_rate

    @property
    def overdraft_limit(self) -> Money:
        return self.policy.overdraft_limit

    @property
    def daily_withdrawal_limit(self) -> Money:
        return self.policy.daily_withdrawal_limit

    @property
    def lock_months(self) -> int:
        return self.policy.lock_months

    @property
    def is_active(self) -> bool:
        return self.state == AccountState.ACTIVE

    @property
    def position(self) -> Position:
        return Position(self.balance, self.overdraft)

    @property
    def net_position(self) -> Money:
        with self._lock:
            return self.balance - self.overdraft

    @property
    def available_funds(self) -> Money:
        """What a withdrawal could take right now, ignoring the daily cap"""
        with self._lock:
            if not self.policy.allows_withdrawals:
                return Money.zero(self.currency)
            return self.balance + self.policy.overdraft_limit - self.overdraft

    # Money movements

    def deposit(self, amount: MoneyLike, description: str = "Deposit") -> TransactionRecord:
        """
        Credit the account.

        Raises:
            InvalidAmount: If amount is not positive
            AccountNotActive: If the account is not ACTIVE
        """
        amount = self._validate_amount(amount)
        with self._lock:
            self._require_active()
            self.balance = self._credited(amount)
            return self._record(TransactionKind.DEPOSIT, amount, description)

    def withdraw(self, amount: MoneyLike, description: str = "Cash withdrawal") -> TransactionRecord:
        """
        Debit the account under its type's withdrawal rule.

        Raises:
            InvalidAmount: If amount is not positive
            AccountNotActive: If the account is not ACTIVE
            WithdrawalNotPermitted: For withdrawal-locked account types
            DailyLimitExceeded: If today's withdrawals would exceed the cap
            InsufficientFunds: If the account cannot cover the amount
        """
        amount = self._validate_amount(amount)
        with self._lock:
            self._require_active()
            today = self.clock().date()
            self._reset_daily_counter(today)

            rule = _WITHDRAWAL_RULES[self.account_type]
            after = rule(self.position, self.policy, amount, self.withdrawn_today)

            self.balance = after.balance
            self.overdraft = after.overdraft
            self.withdrawn_today = self.withdrawn_today + amount
            self.last_withdrawal_date = today
            return self._record(TransactionKind.WITHDRAWAL, amount, description)

    def query_balance(self) -> Money:
        with self._lock:
            return self.balance

    def history(self) -> List[TransactionRecord]:
        """Ledger records, oldest first. Returns a copy."""
        with self._lock:
            return list(self._history)

    def replay_balance(self) -> Money:
        """Net position reconstructed from the opening balance and the ledger"""
        with self._lock:
            total = self.opening_balance
            for record in self._history:
                total = total + record.signed_amount
            return total

    # Periodic processing

    def apply_commission(self) -> List[TransactionRecord]:
        """Charge this month's fees. Returns the COMMISSION records appended."""
        with self._lock:
            self._require_active()
            rule = _COMMISSION_RULES[self.account_type]
            records = []
            for description, fee, after in rule(self.position, self.policy):
                self.balance = after.balance
                self.overdraft = after.overdraft
                records.append(self._record(TransactionKind.COMMISSION, fee, description))
            return records

    def apply_interest(self) -> Optional[TransactionRecord]:
        """Credit this month's interest. Returns the INTEREST record, if any."""
        with self._lock:
            self._require_active()
            interest = _INTEREST_RULES[self.account_type](self.position, self.policy)
            if interest is None:
                return None
            self.balance = self._credited(interest)
            return self._record(
                TransactionKind.INTEREST, interest,
                _INTEREST_DESCRIPTIONS.get(self.account_type, "Interest")
            )

    def generate_report(self, recent: int = 10, client_name: Optional[str] = None) -> AccountReport:
        """Read-only summary of state, recent records and statistics"""
        return build_account_report(self, recent=recent, client_name=client_name)

    # Lifecycle

    def change_state(self, new_state: AccountState, reason: str = "") -> AccountState:
        """
        Move to a new lifecycle state. Returns the previous state.

        Raises:
            InvalidStateTransition: If the move is not allowed from the current state
        """
        new_state = AccountState.parse(new_state)
        with self._lock:
            old_state = self.state
            if new_state == old_state:
                return old_state
            if new_state not in _ALLOWED_TRANSITIONS[old_state]:
                raise InvalidStateTransition(
                    f"Cannot move account {self.account_number} from {old_state.value} to {new_state.value}"
                )
            self.state = new_state

        log_action(
            self._logger, "info", f"Account state changed: {old_state.value} -> {new_state.value}",
            action="change_account_state", resource=f"account:{self.account_number}",
            extra={"old_state": old_state.value, "new_state": new_state.value, "reason": reason}
        )
        return old_state

    def block(self, reason: str = "") -> AccountState:
        return self.change_state(AccountState.BLOCKED, reason)

    def suspend(self, reason: str = "") -> AccountState:
        return self.change_state(AccountState.SUSPENDED, reason)

    def activate(self, reason: str = "") -> AccountState:
        return self.change_state(AccountState.ACTIVE, reason)

    def close(self, reason: str = "") -> AccountState:
        return self.change_state(AccountState.CLOSED, reason)

    # Transfer support, used by Bank while it holds this account's lock

    def _record(self, kind: TransactionKind, amount: Money, description: str,
                reversal: bool = False) -> TransactionRecord:
        record = TransactionRecord(
            sequence_id=self.sequence.next_id(),
            kind=kind,
            amount=amount,
            timestamp=self.clock(),
            description=description,
            resulting_balance=self.balance,
            reversal=reversal,
        )
        self._history.append(record)
        return record

    def _record_transfer(self, amount: Money, description: str) -> TransactionRecord:
        with self._lock:
            return self._record(TransactionKind.TRANSFER, amount, description)

    def _checkpoint(self) -> Tuple[Position, Money, Optional[date]]:
        with self._lock:
            return self.position, self.withdrawn_today, self.last_withdrawal_date

    def _reverse_withdrawal(self, amount: Money, checkpoint, description: str) -> TransactionRecord:
        """Credit back a withdrawal whose transfer failed, restoring the prior position"""
        position, withdrawn_today, last_withdrawal_date = checkpoint
        with self._lock:
            self.balance = position.balance
            self.overdraft = position.overdraft
            self.withdrawn_today = withdrawn_today
            self.last_withdrawal_date = last_withdrawal_date
            return self._record(TransactionKind.DEPOSIT, amount, description, reversal=True)

    def _credited(self, amount: Money) -> Money:
        try:
            return self.balance + amount
        except InvalidOperation:
            raise InvalidAmount(f"Crediting {amount.to_string()} would overflow account {self.account_number}")

    def _reset_daily_counter(self, today: date) -> None:
        if self.last_withdrawal_date is not None and self.last_withdrawal_date < today:
            self.withdrawn_today = Money.zero(self.currency)

    def _require_active(self) -> None:
        if self.state != AccountState.ACTIVE:
            raise AccountNotActive(f"Account {self.account_number} is {self.state.value}")

    def _validate_amount(self, amount: MoneyLike) -> Money:
        try:
            money = to_money(amount, self.currency)
        except ValueError as e:
            raise InvalidAmount(str(e)) from e
        if not money.is_positive():
            raise InvalidAmount("Amount must be positive")
        return money
