"""
Product Policy Module

Each account type is a fixed behavioral profile: interest rate, daily
withdrawal cap, overdraft headroom and fee schedule. The rules in the accounts
module read their parameters from these policies instead of hard-coding them.
"""

from decimal import Decimal
from dataclasses import dataclass
from typing import Dict, Optional
from enum import Enum

from .currency import Money, Currency
from .errors import InvalidVariant


class AccountType(Enum):
    """Banking product types"""
    SAVINGS = "savings"        # Interest bearing, capped withdrawals
    CHECKING = "checking"      # Overdraft capable, monthly maintenance fee
    INVESTMENT = "investment"  # Interest bearing, withdrawals locked

    @classmethod
    def parse(cls, value) -> 'AccountType':
        """
        Resolve a variant selector to an AccountType.

        Accepts an AccountType, or its value/name in any case.

        Raises:
            InvalidVariant: If the selector names no known account type
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            for account_type in cls:
                if key in (account_type.value, account_type.name.lower()):
                    return account_type
        raise InvalidVariant(f"Unknown account type: {value!r}")


@dataclass(frozen=True)
class ProductPolicy:
    """Parameters driving the withdrawal, commission and interest rules"""
    account_type: AccountType
    annual_interest_rate: Decimal
    daily_withdrawal_limit: Money
    overdraft_limit: Money
    maintenance_fee: Money
    low_balance_fee: Money
    low_balance_threshold: Money
    overdraft_fee_rate: Decimal
    lock_months: int = 0
    allows_withdrawals: bool = True

    def __post_init__(self):
        if not (Decimal('0') <= self.annual_interest_rate <= Decimal('1')):
            raise ValueError("Annual interest rate must be between 0 and 1")
        if not (Decimal('0') <= self.overdraft_fee_rate <= Decimal('1')):
            raise ValueError("Overdraft fee rate must be between 0 and 1")

        currencies = {
            self.daily_withdrawal_limit.currency,
            self.overdraft_limit.currency,
            self.maintenance_fee.currency,
            self.low_balance_fee.currency,
            self.low_balance_threshold.currency,
        }
        if len(currencies) > 1:
            raise ValueError("All policy amounts must use the same currency")

        for name in ("daily_withdrawal_limit", "overdraft_limit", "maintenance_fee", "low_balance_fee"):
            if getattr(self, name).is_negative():
                raise ValueError(f"{name} cannot be negative")

    @property
    def currency(self) -> Currency:
        return self.daily_withdrawal_limit.currency

    @property
    def monthly_interest_rate(self) -> Decimal:
        return self.annual_interest_rate / Decimal('12')


def _money(value, currency: Currency) -> Money:
    return Money(Decimal(str(value)), currency)


def default_policies(currency: Currency = Currency.EUR) -> Dict[AccountType, ProductPolicy]:
    """Standard product table"""
    zero = Money.zero(currency)
    return {
        AccountType.SAVINGS: ProductPolicy(
            account_type=AccountType.SAVINGS,
            annual_interest_rate=Decimal('0.03'),
            daily_withdrawal_limit=_money('500', currency),
            overdraft_limit=zero,
            maintenance_fee=zero,
            low_balance_fee=_money('5', currency),
            low_balance_threshold=_money('100', currency),
            overdraft_fee_rate=Decimal('0'),
        ),
        AccountType.CHECKING: ProductPolicy(
            account_type=AccountType.CHECKING,
            annual_interest_rate=Decimal('0'),
            daily_withdrawal_limit=_money('2000', currency),
            overdraft_limit=_money('500', currency),
            maintenance_fee=_money('10', currency),
            low_balance_fee=zero,
            low_balance_threshold=zero,
            overdraft_fee_rate=Decimal('0.05'),
        ),
        AccountType.INVESTMENT: ProductPolicy(
            account_type=AccountType.INVESTMENT,
            annual_interest_rate=Decimal('0.06'),
            daily_withdrawal_limit=zero,
            overdraft_limit=zero,
            maintenance_fee=zero,
            low_balance_fee=zero,
            low_balance_threshold=zero,
            overdraft_fee_rate=Decimal('0'),
            lock_months=12,
            allows_withdrawals=False,
        ),
    }


def policies_from_config(config, currency: Optional[Currency] = None) -> Dict[AccountType, ProductPolicy]:
    """Build the product table from a LedgerConfig"""
    currency = currency or Currency[config.currency]
    zero = Money.zero(currency)
    return {
        AccountType.SAVINGS: ProductPolicy(
            account_type=AccountType.SAVINGS,
            annual_interest_rate=Decimal(config.savings_annual_rate),
            daily_withdrawal_limit=_money(config.savings_daily_limit, currency),
            overdraft_limit=zero,
            maintenance_fee=zero,
            low_balance_fee=_money(config.savings_low_balance_fee, currency),
            low_balance_threshold=_money(config.savings_low_balance_threshold, currency),
            overdraft_fee_rate=Decimal('0'),
        ),
        AccountType.CHECKING: ProductPolicy(
            account_type=AccountType.CHECKING,
            annual_interest_rate=Decimal('0'),
            daily_withdrawal_limit=_money(config.checking_daily_limit, currency),
            overdraft_limit=_money(config.checking_overdraft_limit, currency),
            maintenance_fee=_money(config.checking_maintenance_fee, currency),
            low_balance_fee=zero,
            low_balance_threshold=zero,
            overdraft_fee_rate=Decimal(config.checking_overdraft_fee_rate),
        ),
        AccountType.INVESTMENT: ProductPolicy(
            account_type=AccountType.INVESTMENT,
            annual_interest_rate=Decimal(config.investment_annual_rate),
            daily_withdrawal_limit=zero,
            overdraft_limit=zero,
            maintenance_fee=zero,
            low_balance_fee=zero,
            low_balance_threshold=zero,
            overdraft_fee_rate=Decimal('0'),
            lock_months=config.investment_lock_months,
            allows_withdrawals=False,
        ),
    }
