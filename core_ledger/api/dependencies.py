"""
Bank dependency and error mapping shared by the routers
"""

from fastapi import HTTPException, Request, status

from ..bank import Bank
from ..errors import (
    BankingError, AccountNotFound, ClientNotFound, DuplicateClientId
)


def get_bank(request: Request) -> Bank:
    return request.app.state.bank


_STATUS_BY_ERROR = {
    AccountNotFound: status.HTTP_404_NOT_FOUND,
    ClientNotFound: status.HTTP_404_NOT_FOUND,
    DuplicateClientId: status.HTTP_409_CONFLICT,
}


def to_http_exception(error: BankingError) -> HTTPException:
    """Rejected ledger operations become 4xx responses naming the error kind"""
    status_code = _STATUS_BY_ERROR.get(type(error), status.HTTP_400_BAD_REQUEST)
    return HTTPException(
        status_code=status_code,
        detail={"error": type(error).__name__, "message": str(error)}
    )
