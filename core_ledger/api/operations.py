"""
Deposit, withdrawal and transfer endpoints
"""

from fastapi import APIRouter, Depends

from .dependencies import get_bank, to_http_exception
from .schemas import AmountRequest, TransferRequest
from ..bank import Bank
from ..errors import BankingError


router = APIRouter()


@router.post("/{account_number}/deposit")
async def deposit(account_number: str, request: AmountRequest, bank: Bank = Depends(get_bank)):
    """Make a deposit"""
    try:
        record = bank.deposit(account_number, request.amount)
    except BankingError as e:
        raise to_http_exception(e)
    return {
        "transaction": record.to_dict(),
        "balance": str(record.resulting_balance.amount),
        "message": "Deposit processed successfully"
    }


@router.post("/{account_number}/withdraw")
async def withdraw(account_number: str, request: AmountRequest, bank: Bank = Depends(get_bank)):
    """Make a withdrawal"""
    try:
        record = bank.withdraw(account_number, request.amount)
    except BankingError as e:
        raise to_http_exception(e)
    return {
        "transaction": record.to_dict(),
        "balance": str(record.resulting_balance.amount),
        "message": "Withdrawal processed successfully"
    }


@router.post("/transfer")
async def transfer(request: TransferRequest, bank: Bank = Depends(get_bank)):
    """Make a transfer between accounts"""
    try:
        result = bank.transfer(
            request.from_account,
            request.to_account,
            request.amount,
            description=request.description
        )
    except BankingError as e:
        raise to_http_exception(e)
    return {
        "from_account": result.from_account,
        "to_account": result.to_account,
        "amount": str(result.amount.amount),
        "records": [
            result.withdrawal.to_dict(),
            result.deposit.to_dict(),
            result.source_memo.to_dict(),
            result.destination_memo.to_dict(),
        ],
        "message": "Transfer processed successfully"
    }
