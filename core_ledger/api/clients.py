"""
Client management endpoints
"""

from fastapi import APIRouter, Depends, status

from .dependencies import get_bank, to_http_exception
from .schemas import RegisterClientRequest, account_to_dict
from ..bank import Bank
from ..errors import BankingError


router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
async def register_client(request: RegisterClientRequest, bank: Bank = Depends(get_bank)):
    """Register a new client"""
    try:
        client = bank.register_client(
            client_id=request.client_id,
            name=request.name,
            email=request.email,
            tier=request.tier
        )
    except BankingError as e:
        raise to_http_exception(e)

    return {
        "client_id": client.client_id,
        "message": "Client registered successfully"
    }


@router.get("")
async def list_clients(bank: Bank = Depends(get_bank)):
    return {"clients": [client.to_dict() for client in bank.list_clients()]}


@router.get("/{client_id}")
async def get_client(client_id: str, bank: Bank = Depends(get_bank)):
    """Get client details with their accounts"""
    try:
        client = bank.get_client(client_id)
        accounts = bank.client_accounts(client_id)
    except BankingError as e:
        raise to_http_exception(e)

    result = client.to_dict()
    result["accounts"] = [account_to_dict(account) for account in accounts]
    return result
