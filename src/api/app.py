import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlmodel import SQLModel

from src.adapter.services.cache import RedisCache, build_cache
from src.adapter.services.email_notifier import build_email_notifier
from src.api.utils.jwt import JwtService, KeyMaterial
from src.api.utils.session import SessionCodec
from src.app.services.cache import ICache
from src.app.services.email_notifier import IEmailNotifier

from .error import ClientError, OAuthError, ServerError

logger = logging.getLogger(__name__)

OAUTH_PATH_PREFIX = "/oauth"


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {"code": exc.base_error.code, "message": exc.base_error.message}
    logger.warning(f"Client error: {error_dict}")
    return JSONResponse(status_code=exc.status_code, content={"error": error_dict})


async def handle_server_error(request: Request, exc: ServerError):
    error_dict = {"code": exc.base_error.code, "message": "Internal server error"}
    logger.error(f"Server error: {exc.base_error.code}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": error_dict}
    )


async def handle_oauth_error(request: Request, exc: OAuthError):
    if exc.status_code >= 500:
        logger.error(f"OAuth server error on {request.url.path}: {exc.description}")
        description = "Internal server error"
    else:
        logger.warning(f"OAuth error on {request.url.path}: {exc.error} ({exc.description})")
        description = exc.description
    headers = {"Cache-Control": "no-store", "Pragma": "no-cache", **(exc.headers or {})}
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.error, "error_description": description},
        headers=headers,
    )


async def handle_validation_error(request: Request, exc: RequestValidationError):
    # Protocol endpoints answer malformed requests with an RFC 6749 error object
    if request.url.path.startswith(OAUTH_PATH_PREFIX):
        errors = exc.errors()
        description = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        return await handle_oauth_error(request, OAuthError("invalid_request", description))
    return await request_validation_exception_handler(request, exc)


async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.url.path}")
    if request.url.path.startswith(OAUTH_PATH_PREFIX):
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "server_error", "error_description": "Internal server error"},
        )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": {"code": "INTERNAL_ERROR", "message": "Internal server error"}},
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    from src.depends import engine

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield
    if isinstance(app.state.cache, RedisCache):
        await app.state.cache.close()
    await engine.dispose()


def create_app(
    ApplicationConfig,
    key_material: Optional[KeyMaterial] = None,
    cache: Optional[ICache] = None,
    email_notifier: Optional[IEmailNotifier] = None,
) -> FastAPI:
    """
    Build the application.

    The signing keypair is loaded once here and shared read-only by every
    request. Tests inject their own key material, cache and notifier.
    """
    app = FastAPI(title="PrismAuth", version="0.1.0", lifespan=lifespan)

    if key_material is None:
        key_material = KeyMaterial.from_pem(
            ApplicationConfig.JWT_PRIVATE_KEY,
            ApplicationConfig.JWT_PUBLIC_KEY,
            kid=ApplicationConfig.JWT_KEY_ID,
        )

    app.state.config = ApplicationConfig
    app.state.jwt_service = JwtService(
        key_material,
        issuer=ApplicationConfig.OAUTH2_ISSUER,
        id_token_expiry=ApplicationConfig.ID_TOKEN_EXPIRY,
    )
    app.state.session_codec = SessionCodec(
        ApplicationConfig.SESSION_SECRET, ApplicationConfig.SESSION_MAX_AGE
    )
    app.state.cache = cache or build_cache(
        ApplicationConfig.CACHE_BACKEND, ApplicationConfig.REDIS_URL
    )
    app.state.email_notifier = email_notifier or build_email_notifier(
        ApplicationConfig.EMAIL_PROVIDER,
        ApplicationConfig.EMAIL_FROM,
        ApplicationConfig.RESEND_API_KEY,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from src.api.routes import admin, applications, auth, health_check, oauth, well_known

    app.include_router(health_check.router, tags=["Health"])
    app.include_router(well_known.router, tags=["Discovery"])
    app.include_router(auth.router, tags=["Authentication"])
    app.include_router(oauth.router, tags=["OAuth"])
    app.include_router(applications.router, tags=["Applications"])
    app.include_router(admin.router, tags=["Admin"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)
    app.add_exception_handler(OAuthError, handle_oauth_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    return app
