"""
Admin endpoints (monthly commission and interest cycle)
"""

from fastapi import APIRouter, Depends

from .dependencies import get_bank
from ..bank import Bank


router = APIRouter()


@router.post("/monthly-cycle")
async def run_monthly_cycle(bank: Bank = Depends(get_bank)):
    """Apply commissions then interest to every active account"""
    result = bank.process_monthly_cycle()
    return result.to_dict()
