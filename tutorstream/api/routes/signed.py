"""Signed URL minting and redemption endpoints."""

import logging
import mimetypes

from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse, StreamingResponse
from pydantic import BaseModel
from slowapi import Limiter

from tutorstream.api.deps import get_storage, get_url_authorizer, require_identity
from tutorstream.api.ratelimit import RATE_LIMIT_SIGNED_URL, RATE_LIMIT_STREAM
from tutorstream.auth import SignedURLAuthorizer
from tutorstream.auth.signing import validate_resource
from tutorstream.errors import ResourceNotFound
from tutorstream.identity import Identity
from tutorstream.storage import StorageBackend

logger = logging.getLogger(__name__)


class SignedURLRequest(BaseModel):
    """Request for a signed resource URL."""
    resource: str


def create_router(limiter: Limiter) -> APIRouter:
    """Build the signed URL router with limits enforced by ``limiter``."""
    router = APIRouter()

    @router.post("/url/signed")
    @limiter.limit(RATE_LIMIT_SIGNED_URL)
    async def create_signed_url(
        request: Request,
        body: SignedURLRequest,
        identity: Identity = Depends(require_identity),
        authorizer: SignedURLAuthorizer = Depends(get_url_authorizer),
        storage: StorageBackend = Depends(get_storage),
    ):
        """
        Mint a short-lived signed URL for a protected resource.

        Requires a valid session. The URL is bound to the requesting identity
        and stops working once its expiry passes.
        """
        resource = validate_resource(body.resource)
        if not await storage.exists(resource):
            raise ResourceNotFound()

        signed = authorizer.mint(resource, identity, base_url=str(request.base_url))

        return {
            "status": "success",
            "data": {
                "url": signed.url,
                "resource": signed.resource,
                "expires_at": signed.expires_at,
            },
        }

    @router.get("/authenticated/videoUrl")
    @limiter.limit(RATE_LIMIT_STREAM)
    async def stream_signed_resource(
        request: Request,
        authorizer: SignedURLAuthorizer = Depends(get_url_authorizer),
        storage: StorageBackend = Depends(get_storage),
    ):
        """
        Stream the resource named by a signed URL.

        The signature and expiry are verified before anything is read from
        storage. No session is needed; the URL itself is the capability.
        """
        handle = authorizer.verify(str(request.url))

        if not await storage.exists(handle.resource):
            raise ResourceNotFound()

        media_type = mimetypes.guess_type(handle.resource)[0] or "application/octet-stream"
        headers = {"Cache-Control": "private, no-store"}

        logger.info(f"Streaming {handle.resource} for identity {handle.identity_id}")

        local_path = storage.get_local_path(handle.resource)
        if local_path is not None:
            return FileResponse(local_path, media_type=media_type, headers=headers)

        return StreamingResponse(
            storage.get_stream(handle.resource),
            media_type=media_type,
            headers=headers,
        )

    return router
