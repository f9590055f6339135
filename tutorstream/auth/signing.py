"""URL signing utilities for short-lived resource access."""

import hashlib
import hmac
import logging
import re
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable
from urllib.parse import parse_qsl, urlencode, urlparse

from tutorstream.errors import Expired, InvalidResource, InvalidSignature
from tutorstream.identity import Identity

if TYPE_CHECKING:
    from tutorstream.config import Settings

logger = logging.getLogger(__name__)

SIGNED_URL_PATH = "/authenticated/videoUrl"

_RESOURCE_RE = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9._\-/]*$")


@dataclass(frozen=True)
class SignedURL:
    """A capability URL for one resource, one requester and a bounded window."""
    url: str
    resource: str
    identity_id: str
    expires_at: int


@dataclass(frozen=True)
class ResourceHandle:
    """A verified capability, ready to be streamed."""
    resource: str
    identity_id: str
    expires_at: int


def validate_resource(resource: str) -> str:
    """
    Check that a resource reference is a plain relative storage path.

    Raises:
        InvalidResource: On empty, absolute or parent-escaping references
    """
    if not resource or not _RESOURCE_RE.match(resource):
        raise InvalidResource()
    if any(part in ("", ".", "..") for part in resource.split("/")):
        raise InvalidResource()
    return resource


class SignedURLAuthorizer:
    """Mints and verifies HMAC-signed, expiring resource URLs."""

    def __init__(
        self,
        secret: str,
        expires_in: int = 600,
        path: str = SIGNED_URL_PATH,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the authorizer.

        Args:
            secret: Server secret for HMAC signatures
            expires_in: Default seconds until a minted URL expires
            path: Path of the redeeming endpoint
            clock: Source of the current epoch time
        """
        self._secret = secret.encode("utf-8")
        if expires_in <= 0:
            raise ValueError("expires_in must be positive")
        self.expires_in = expires_in
        self.path = path
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: "Settings", **kwargs) -> "SignedURLAuthorizer":
        return cls(
            secret=settings.secret_key,
            expires_in=settings.signed_url_expires_in,
            **kwargs,
        )

    def _signature(self, path: str, params: dict[str, str]) -> str:
        # path + sorted params without sig
        sign_string = f"{path}?{urlencode(sorted(params.items()))}"
        return hmac.new(
            self._secret,
            sign_string.encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()[:32]  # Use first 32 chars for shorter URLs

    def mint(
        self,
        resource: str,
        requester: Identity | str,
        base_url: str = "",
        expires_in: int | None = None,
    ) -> SignedURL:
        """
        Mint a signed URL granting ``requester`` access to ``resource``.

        The caller is responsible for having authorized the requester.

        Args:
            resource: Storage-relative resource reference, e.g. ``video/123.mp4``
            requester: Identity (or identity id) the URL is issued to
            base_url: Scheme and host to prefix, empty for a relative URL
            expires_in: Override for the default lifetime in seconds

        Returns:
            The signed URL and its embedded fields
        """
        validate_resource(resource)
        identity_id = requester.id if isinstance(requester, Identity) else str(requester)
        if expires_in is None:
            expires_in = self.expires_in
        elif expires_in <= 0:
            raise ValueError("expires_in must be positive")
        expires_at = int(self._clock()) + expires_in

        params = {"res": resource, "uid": identity_id, "exp": str(expires_at)}
        params["sig"] = self._signature(self.path, params)

        url = f"{base_url.rstrip('/')}{self.path}?{urlencode(params)}"
        logger.info(f"Minted signed URL for {resource} (identity {identity_id}, expires {expires_at})")

        return SignedURL(
            url=url,
            resource=resource,
            identity_id=identity_id,
            expires_at=expires_at,
        )

    def verify(self, url: str) -> ResourceHandle:
        """
        Verify a signed URL.

        The signature is checked before the expiry so that an altered
        expiry is reported as tampering.

        Args:
            url: The signed URL as received (absolute or path + query)

        Returns:
            Handle for the authorized resource

        Raises:
            InvalidSignature: Missing fields, repeated fields or bad signature
            Expired: The URL's expiry is at or before the current time
        """
        parsed = urlparse(url)
        if parsed.path != self.path:
            raise InvalidSignature("Signed URL path mismatch")

        pairs = parse_qsl(parsed.query, keep_blank_values=True)
        params = dict(pairs)
        if len(params) != len(pairs):
            raise InvalidSignature("Repeated signed URL parameter")

        sig = params.pop("sig", None)
        if not sig:
            raise InvalidSignature("Missing signature")

        for field in ("res", "uid", "exp"):
            if not params.get(field):
                raise InvalidSignature(f"Missing {field} parameter")

        try:
            expires_at = int(params["exp"])
        except ValueError:
            raise InvalidSignature("Invalid expiration")

        expected_sig = self._signature(parsed.path, params)
        if not hmac.compare_digest(sig.encode("utf-8"), expected_sig.encode("utf-8")):
            raise InvalidSignature()

        if self._clock() >= expires_at:
            raise Expired()

        return ResourceHandle(
            resource=params["res"],
            identity_id=params["uid"],
            expires_at=expires_at,
        )
