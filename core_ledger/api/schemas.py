"""
Pydantic schemas for API requests and response helpers
"""

from typing import Optional
from pydantic import BaseModel, Field

from ..accounts import Account


class RegisterClientRequest(BaseModel):
    client_id: str
    name: str
    email: str
    tier: str = Field("regular", description="Client tier (regular, premium, vip)")


class CreateAccountRequest(BaseModel):
    client_id: str
    account_type: str = Field(..., description="Account type (savings, checking, investment)")
    initial_balance: str = Field("0", description="Decimal amount as string")


class AmountRequest(BaseModel):
    amount: str = Field(..., description="Decimal amount as string")


class TransferRequest(BaseModel):
    from_account: str
    to_account: str
    amount: str = Field(..., description="Decimal amount as string")
    description: Optional[str] = None


class ChangeStateRequest(BaseModel):
    state: str = Field(..., description="Account state (active, blocked, suspended, closed)")
    reason: str = ""


def account_to_dict(account: Account) -> dict:
    with account.lock:
        return {
            "account_number": account.account_number,
            "client_id": account.client_id,
            "account_type": account.account_type.value,
            "state": account.state.value,
            "currency": account.currency.code,
            "balance": str(account.balance.amount),
            "overdraft": str(account.overdraft.amount),
            "overdraft_limit": str(account.overdraft_limit.amount),
            "daily_withdrawal_limit": str(account.daily_withdrawal_limit.amount),
            "withdrawn_today": str(account.withdrawn_today.amount),
            "interest_rate": str(account.interest_rate),
            "opened_at": account.opened_at.isoformat(),
        }
