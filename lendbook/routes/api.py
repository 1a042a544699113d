#!/usr/bin/env python

"""
    API routes for Lendbook,
    borrowing, returning and listing loans.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

from typing import Optional, List
from fastapi import (
    APIRouter,
    Depends,
    Request,
    Cookie,
    status,
)
from fastapi.responses import JSONResponse
from lendbook.core.authz import Identity
from lendbook.core.exceptions import (
    LendbookError,
    NotFoundError,
    ConflictError,
    ForbiddenError,
    UnauthenticatedError,
    StorageUnavailableError,
)
from lendbook.routes.schemas import BorrowRequest
from lendbook.schemas.loan import LoanView
from lendbook.schemas.user import Me


ERROR_STATUS = (
    (UnauthenticatedError, status.HTTP_401_UNAUTHORIZED),
    (ForbiddenError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (StorageUnavailableError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)

router = APIRouter()


async def lendbook_error_handler(request: Request, exc: LendbookError):
    code = next(
        (code for cls, code in ERROR_STATUS if isinstance(exc, cls)),
        status.HTTP_500_INTERNAL_SERVER_ERROR
    )
    if code == status.HTTP_500_INTERNAL_SERVER_ERROR:
        # Cause chain was already logged where the failure happened
        return JSONResponse(status_code=code, content={"detail": "Internal server error"})
    headers = {"WWW-Authenticate": "Bearer"} if code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(status_code=code, content={"detail": str(exc)}, headers=headers)


def get_identity(request: Request, session: Optional[str] = Cookie(None)) -> Identity:
    """Resolves the caller from a Bearer token, falling back to the session cookie."""
    token = session
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        token = auth_header.split(" ")[1]
    return request.app.state.identities.resolve(token)


@router.get('/health', status_code=status.HTTP_200_OK)
def health():
    return {"status": "ok"}

@router.get('/health/db')
def health_db(request: Request):
    if request.app.state.store.check_db():
        return {"status": "ok"}
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"status": "unavailable"}
    )

@router.get('/users/me', response_model=Me)
def get_me(identity: Identity = Depends(get_identity)):
    return Me(id=identity.id, name=identity.name, role=identity.role)

@router.post('/loans', response_model=LoanView, status_code=status.HTTP_201_CREATED)
def borrow(request: Request, body: BorrowRequest, identity: Identity = Depends(get_identity)):
    return request.app.state.lending.borrow(
        identity, body.item_id, holder_id=body.holder_id)

@router.put('/loans/{loan_id}/returned', response_model=LoanView)
def return_loan(request: Request, loan_id: str, identity: Identity = Depends(get_identity)):
    return request.app.state.lending.return_loan(identity, loan_id)

@router.get('/loans', response_model=List[LoanView])
def active_loans(request: Request, identity: Identity = Depends(get_identity)):
    return request.app.state.loans.all_active_loans()

@router.get('/users/me/loans', response_model=List[LoanView])
def my_loans(request: Request, identity: Identity = Depends(get_identity)):
    return request.app.state.loans.active_loans_for(identity.id)

@router.get('/items/{item_id}/loans', response_model=List[LoanView])
def item_history(request: Request, item_id: str, identity: Identity = Depends(get_identity)):
    return request.app.state.loans.history_for(item_id)
