from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from motor.motor_asyncio import AsyncIOMotorClient
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings
from .container import ApplicationContainer
from .logging import configure_logging
from ..application.services.profile_service import ProfileService
from ..application.services.session_service import SessionService
from ..domain.errors import ApiError
from ..infrastructure.persistence.mongo import MongoUserRepository
from ..infrastructure.security.passwords import BcryptPasswordHasher
from ..presentation.api.responses import error_response
from ..presentation.api.routers import user_router
from ..services.media_storage import CloudinaryMediaStorage
from ..services.token_service import TokenIssuer

logger = logging.getLogger(__name__)


def create_application(
    settings: Optional[Settings] = None,
    container: Optional[ApplicationContainer] = None,
) -> FastAPI:
    if container is not None:
        settings = container.settings
    settings = settings or Settings()

    app = FastAPI(title="Accounts Service", lifespan=_create_lifespan(settings))
    if container is not None:
        app.state.container = container  # type: ignore[attr-defined]

    # Credentialed CORS only for an explicit origin list; a wildcard would echo any origin.
    allow_credentials = "*" not in settings.cors_allow_origins
    if not allow_credentials:
        logger.warning(
            "CORS_ALLOW_ORIGINS is \"*\"; cross-origin requests will not carry session cookies. "
            "List the frontend origins explicitly to enable them."
        )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app)
    app.include_router(user_router.router)

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        return {"ok": True}

    return app


def build_container(settings: Settings, users: MongoUserRepository) -> ApplicationContainer:
    hasher = BcryptPasswordHasher(rounds=settings.bcrypt_rounds)
    token_issuer = TokenIssuer(
        access_secret=settings.access_token_secret,
        refresh_secret=settings.refresh_token_secret,
        access_ttl=timedelta(minutes=settings.access_token_expiry_minutes),
        refresh_ttl=timedelta(days=settings.refresh_token_expiry_days),
    )
    media_storage = CloudinaryMediaStorage(
        cloud_name=settings.cloudinary_cloud_name,
        api_key=settings.cloudinary_api_key,
        api_secret=settings.cloudinary_api_secret,
        folder=settings.cloudinary_folder,
    )
    return ApplicationContainer(
        settings=settings,
        users=users,
        media_storage=media_storage,
        token_issuer=token_issuer,
        session_service=SessionService(users, hasher, token_issuer),
        profile_service=ProfileService(users, hasher, media_storage),
    )


def _create_lifespan(settings: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(settings.log_level)
        if getattr(app.state, "container", None) is not None:
            yield
            return

        client: AsyncIOMotorClient = AsyncIOMotorClient(settings.mongodb_uri, tz_aware=True)
        users = MongoUserRepository(client[settings.mongodb_database])
        await users.ensure_indexes()
        logger.info("Connected to MongoDB database %s", settings.mongodb_database)
        app.state.container = build_container(settings, users)  # type: ignore[attr-defined]

        try:
            yield
        finally:
            client.close()
            app.state.container = None  # type: ignore[attr-defined]

    return lifespan


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def handle_api_error(request: Request, exc: ApiError) -> JSONResponse:
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        return error_response(400, "Invalid request payload")

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return error_response(500, str(exc) or "Internal server error")
