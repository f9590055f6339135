"""Session credential issuance and verification."""

import logging
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING, Any, Callable, Mapping

import jwt
from fastapi.responses import JSONResponse

from tutorstream.errors import (
    InvalidCredential,
    MissingCredential,
    SessionExpired,
    SigningFailure,
)
from tutorstream.identity import Identity

if TYPE_CHECKING:
    from tutorstream.config import Settings

logger = logging.getLogger(__name__)

COOKIE_NAME = "auth_token"


@dataclass(frozen=True)
class SessionCredential:
    """A signed session token and the claims it carries."""
    identity_id: str
    issued_at: int
    expires_at: int
    token: str


class TokenIssuer:
    """
    Mints and verifies session credentials carried in the ``auth_token`` cookie.

    The credential payload is ``{id, iat, exp}`` and nothing else from the
    identity record.
    """

    def __init__(
        self,
        secret: str,
        lifetime: timedelta,
        secure: bool = False,
        algorithm: str = "HS256",
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the issuer.

        Args:
            secret: HMAC secret for signing credentials
            lifetime: How long an issued credential stays valid
            secure: Mark the cookie Secure (production)
            algorithm: JWT signing algorithm
            clock: Source of the current epoch time
        """
        self._secret = secret
        if lifetime < timedelta(seconds=1):
            raise ValueError("Session lifetime must be at least one second")
        self.lifetime = lifetime
        self.secure = secure
        self.algorithm = algorithm
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: "Settings", **kwargs) -> "TokenIssuer":
        return cls(
            secret=settings.jwt_secret,
            lifetime=settings.token_lifetime,
            secure=settings.is_production,
            **kwargs,
        )

    @property
    def max_age(self) -> int:
        """Cookie Max-Age in seconds."""
        return int(self.lifetime.total_seconds())

    def sign(self, identity_id: str) -> SessionCredential:
        """
        Sign a credential for an identity id.

        Raises:
            SigningFailure: If no secret is configured or encoding fails
        """
        if not self._secret:
            raise SigningFailure()

        issued_at = int(self._clock())
        expires_at = issued_at + self.max_age
        payload = {"id": identity_id, "iat": issued_at, "exp": expires_at}

        try:
            token = jwt.encode(payload, self._secret, algorithm=self.algorithm)
        except (jwt.PyJWTError, NotImplementedError, TypeError, ValueError) as e:
            logger.error(f"Session token signing failed: {e}")
            raise SigningFailure() from e

        if not token:
            raise SigningFailure()

        return SessionCredential(
            identity_id=identity_id,
            issued_at=issued_at,
            expires_at=expires_at,
            token=token,
        )

    def issue(
        self,
        identity: Identity | Mapping[str, Any],
        status_code: int = 200,
    ) -> JSONResponse:
        """
        Issue a session for an identity.

        Signing happens before a response exists, so a failure leaves no
        cookie behind and propagates to the error responder.

        Args:
            identity: The authenticated identity record
            status_code: HTTP status of the success response

        Returns:
            JSON response with the public identity and the session cookie set
        """
        if not isinstance(identity, Identity):
            identity = Identity.model_validate(identity)

        credential = self.sign(identity.id)

        response = JSONResponse(
            status_code=status_code,
            content={"status": "success", "data": {"user": identity.public_view()}},
        )
        response.set_cookie(
            COOKIE_NAME,
            credential.token,
            max_age=self.max_age,
            httponly=True,
            secure=self.secure,
            samesite="lax",
        )

        logger.info(f"Issued session for identity {identity.id} (expires {credential.expires_at})")
        return response

    def verify(self, token: str) -> SessionCredential:
        """
        Verify a session token.

        Expiry is checked against the issuer's clock and is exclusive.

        Raises:
            InvalidCredential: Token is malformed, tampered with or incomplete
            SessionExpired: Token expiry has passed
        """
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"verify_exp": False, "verify_iat": False, "require": ["id", "iat", "exp"]},
            )
            identity_id = str(claims["id"])
            issued_at = int(claims["iat"])
            expires_at = int(claims["exp"])
        except (jwt.PyJWTError, KeyError, TypeError, ValueError) as e:
            raise InvalidCredential() from e

        if self._clock() >= expires_at:
            raise SessionExpired()

        return SessionCredential(
            identity_id=identity_id,
            issued_at=issued_at,
            expires_at=expires_at,
            token=token,
        )

    def read_token(self, cookies: Mapping[str, str]) -> str:
        """
        Read the session token from request cookies.

        Raises:
            MissingCredential: If the cookie is absent or empty
        """
        token = cookies.get(COOKIE_NAME)
        if not token:
            raise MissingCredential()
        return token

    def clear(self, response) -> None:
        """Delete the session cookie on ``response``."""
        response.delete_cookie(
            COOKIE_NAME,
            httponly=True,
            secure=self.secure,
            samesite="lax",
        )
