"""Session cookie endpoints."""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from tutorstream.api.deps import get_token_issuer
from tutorstream.auth import TokenIssuer

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/token")
async def get_session_token(
    request: Request,
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    """Return the session token held in the ``auth_token`` cookie."""
    token = issuer.read_token(request.cookies)
    return {"status": "success", "data": {"token": token}}


@router.get("/logout")
async def logout(issuer: TokenIssuer = Depends(get_token_issuer)):
    """Log out by clearing the session cookie."""
    response = JSONResponse(
        status_code=200,
        content={"status": "success", "message": "Logged out successfully..."},
    )
    issuer.clear(response)
    return response
