"""Authentication and authorization utilities."""

from tutorstream.auth.duration import parse_duration
from tutorstream.auth.signing import (
    ResourceHandle,
    SignedURL,
    SignedURLAuthorizer,
)
from tutorstream.auth.tokens import (
    COOKIE_NAME,
    SessionCredential,
    TokenIssuer,
)

__all__ = [
    "parse_duration",
    "ResourceHandle",
    "SignedURL",
    "SignedURLAuthorizer",
    "COOKIE_NAME",
    "SessionCredential",
    "TokenIssuer",
]
