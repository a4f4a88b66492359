"""
Account management endpoints
"""

from typing import Optional
from fastapi import APIRouter, Depends, status

from .dependencies import get_bank, to_http_exception
from .schemas import CreateAccountRequest, ChangeStateRequest, account_to_dict
from ..bank import Bank
from ..errors import BankingError


router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_account(request: CreateAccountRequest, bank: Bank = Depends(get_bank)):
    """Open a new account"""
    try:
        account_number = bank.create_account(
            client=request.client_id,
            account_type=request.account_type,
            initial_balance=request.initial_balance
        )
    except BankingError as e:
        raise to_http_exception(e)

    return {
        "account_number": account_number,
        "message": "Account created successfully"
    }


@router.get("")
async def list_accounts(bank: Bank = Depends(get_bank)):
    return {"accounts": [account_to_dict(account) for account in bank.list_accounts()]}


@router.get("/{account_number}")
async def get_account(account_number: str, bank: Bank = Depends(get_bank)):
    try:
        account = bank.get_account(account_number)
    except BankingError as e:
        raise to_http_exception(e)
    return account_to_dict(account)


@router.get("/{account_number}/transactions")
async def get_account_transactions(account_number: str, bank: Bank = Depends(get_bank)):
    """Transaction history, oldest first"""
    try:
        account = bank.get_account(account_number)
    except BankingError as e:
        raise to_http_exception(e)
    return {"transactions": [record.to_dict() for record in account.history()]}


@router.get("/{account_number}/report")
async def get_account_report(
    account_number: str,
    recent: Optional[int] = None,
    bank: Bank = Depends(get_bank)
):
    try:
        report = bank.account_report(account_number, recent=recent)
    except BankingError as e:
        raise to_http_exception(e)
    return report.to_dict()


@router.put("/{account_number}/state")
async def change_account_state(
    account_number: str,
    request: ChangeStateRequest,
    bank: Bank = Depends(get_bank)
):
    """Block, suspend, reactivate or close an account"""
    try:
        account = bank.change_account_state(account_number, request.state, request.reason)
    except BankingError as e:
        raise to_http_exception(e)
    return {
        "account_number": account.account_number,
        "state": account.state.value,
        "message": "Account state updated"
    }
