"""TutorStream FastAPI Application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tutorstream import __version__
from tutorstream.config import Settings, get_settings
from tutorstream.auth import SignedURLAuthorizer, TokenIssuer
from tutorstream.errors import register_error_handlers
from tutorstream.identity import IdentityProvider, InMemoryIdentityProvider
from tutorstream.storage import StorageBackend, create_storage
from tutorstream.api.routes import session, signed, users
from tutorstream.api.ratelimit import create_limiter

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings: Settings = app.state.settings

    # Ensure storage directory exists
    settings.storage_path.mkdir(parents=True, exist_ok=True)

    logger.info(f"TutorStream starting on port {settings.port} ({settings.environment})")
    logger.info(f"Storage path: {settings.storage_path}")
    logger.info(f"Session lifetime: {settings.jwt_expires_in}")

    yield

    logger.info("TutorStream shutting down")


def create_app(
    settings: Settings | None = None,
    identity_provider: IdentityProvider | None = None,
    storage: StorageBackend | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration, defaults to the environment-loaded settings
        identity_provider: Directory of user records, defaults to an empty
            in-memory directory
        storage: Backend holding protected resources, defaults to the
            configured backend
    """
    settings = settings or get_settings()

    # Configure logging
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app = FastAPI(
        title="TutorStream",
        description="Session cookies and signed resource URLs for the tutorial client",
        version=__version__,
        lifespan=lifespan,
    )

    # Components built once; only immutable configuration is shared between requests
    app.state.settings = settings
    app.state.token_issuer = TokenIssuer.from_settings(settings)
    app.state.url_authorizer = SignedURLAuthorizer.from_settings(settings)
    app.state.identity_provider = identity_provider or InMemoryIdentityProvider()
    app.state.storage = storage or create_storage(settings)

    # Restrict origins while developing, open in production
    if settings.is_production:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=False,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    else:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.allowed_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PATCH", "DELETE", "PUT"],
            allow_headers=["Content-Type", "Authorization"],
        )

    # Set up rate limiting
    limiter = create_limiter(settings)
    app.state.limiter = limiter

    register_error_handlers(app)

    # Include routers
    app.include_router(session.router, tags=["session"])
    app.include_router(users.create_router(limiter), prefix="/api/user", tags=["users"])
    app.include_router(signed.create_router(limiter), tags=["signed-urls"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    return app


def main():
    """Run the application with uvicorn."""
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "tutorstream.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
