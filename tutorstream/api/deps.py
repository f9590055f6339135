"""Request dependencies exposing the application's components."""

import logging
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tutorstream.auth import SignedURLAuthorizer, TokenIssuer
from tutorstream.auth.tokens import COOKIE_NAME
from tutorstream.errors import InvalidCredential, NotAuthenticated
from tutorstream.identity import Identity, IdentityProvider
from tutorstream.storage import StorageBackend

logger = logging.getLogger(__name__)

# Security scheme for OpenAPI docs
security = HTTPBearer(auto_error=False)


def get_token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.token_issuer


def get_url_authorizer(request: Request) -> SignedURLAuthorizer:
    return request.app.state.url_authorizer


def get_identity_provider(request: Request) -> IdentityProvider:
    return request.app.state.identity_provider


def get_storage(request: Request) -> StorageBackend:
    return request.app.state.storage


async def require_identity(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
    provider: Annotated[IdentityProvider, Depends(get_identity_provider)],
) -> Identity:
    """
    Dependency that requires a valid session credential.

    Accepts the credential via:
    - Cookie: auth_token=<token>
    - Authorization: Bearer <token>

    Raises:
        NotAuthenticated: No credential provided
        InvalidCredential: Credential invalid, or its identity is gone, inactive
            or has changed password since issuance
        SessionExpired: Credential expired
    """
    token = request.cookies.get(COOKIE_NAME)
    if not token and credentials and credentials.credentials:
        token = credentials.credentials

    if not token:
        raise NotAuthenticated()

    credential = issuer.verify(token)

    identity = provider.get(credential.identity_id)
    if identity is None or not identity.active:
        raise InvalidCredential("The user belonging to this token no longer exists")

    if identity.changed_password_after(credential.issued_at):
        raise InvalidCredential("Password was changed recently, please login again")

    logger.debug(f"Authenticated identity {identity.id}")
    return identity
