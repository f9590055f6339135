"""User login and profile endpoints."""

import logging

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel
from slowapi import Limiter

from tutorstream.api.deps import get_identity_provider, get_token_issuer, require_identity
from tutorstream.api.ratelimit import RATE_LIMIT_LOGIN
from tutorstream.auth import TokenIssuer
from tutorstream.errors import NotAuthenticated
from tutorstream.identity import Identity, IdentityProvider

logger = logging.getLogger(__name__)


class LoginRequest(BaseModel):
    """Login credentials."""
    email: str
    password: str


def create_router(limiter: Limiter) -> APIRouter:
    """Build the user router with limits enforced by ``limiter``."""
    router = APIRouter()

    @router.post("/login")
    @limiter.limit(RATE_LIMIT_LOGIN)
    async def login(
        request: Request,
        body: LoginRequest,
        issuer: TokenIssuer = Depends(get_token_issuer),
        provider: IdentityProvider = Depends(get_identity_provider),
    ):
        """
        Log in with email and password.

        On success the session cookie is set and the public part of the
        identity is returned.
        """
        identity = provider.authenticate(body.email, body.password)
        if identity is None or not identity.active:
            logger.warning("Failed login attempt")
            raise NotAuthenticated("Incorrect email or password")

        return issuer.issue(identity, 200)

    @router.get("/me")
    async def get_me(identity: Identity = Depends(require_identity)):
        """Return the current session's identity without sensitive fields."""
        return {"status": "success", "data": {"user": identity.public_view()}}

    return router
