"""
Banking Errors

Every rejected ledger operation raises one of these. They subclass ValueError
so callers that only know about ValueError keep working.
"""


class BankingError(ValueError):
    """Base class for all rejected ledger operations"""


class InvalidAmount(BankingError):
    """Non-positive (or otherwise unusable) monetary amount"""


class AccountNotActive(BankingError):
    """Operation attempted on a blocked, suspended or closed account"""


class DailyLimitExceeded(BankingError):
    """Withdrawal would exceed the per-day cap"""


class InsufficientFunds(BankingError):
    """Withdrawal exceeds the available funds"""


class WithdrawalNotPermitted(BankingError):
    """Account type does not allow withdrawals at all"""


class AccountNotFound(BankingError):
    """Unknown account number"""


class ClientNotFound(BankingError):
    """Unknown client id"""


class DuplicateClientId(BankingError):
    """Client id already registered"""


class InvalidClientData(BankingError):
    """Missing or malformed client registration fields, or unknown tier"""


class InvalidVariant(BankingError):
    """Unrecognized account type selector"""


class SameAccountTransfer(BankingError):
    """Transfer source and destination are the same account"""


class InvalidStateTransition(BankingError):
    """Account state change not allowed from the current state"""
