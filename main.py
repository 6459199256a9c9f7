"""
main.py
-------
FastAPI application factory and entry point.

Application lifecycle:
  1. App is created by create_application(), which builds the DB engine,
     session factory, password hasher, token key material and public key
     source and keeps them on app.state (injected into requests via
     dependencies).
  2. lifespan context manager runs on startup / shutdown.
  3. Routers are registered with their URL prefixes.
  4. Exception handlers map service errors to status codes and a uniform
     JSON error body; unexpected errors never leak details.

Run with:
    uvicorn main:app --reload              # development
    uvicorn main:app --workers 4           # production (no --reload)
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncEngine

from auth_service.api.routes import auth, tenants, users, wellknown
from auth_service.core.config import Settings, get_settings
from auth_service.core.errors import ConfigurationError, ServiceError
from auth_service.core.keys import TokenConfig, build_public_key_source
from auth_service.core.logging import configure_logging, get_logger
from auth_service.core.security import PasswordHasher
from auth_service.db.session import build_engine, build_session_factory

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Startup / shutdown lifecycle hook.

    Startup:
      - Configure structured logging
      - Report unusable signing material (issuance fails on first use)

    Shutdown:
      - Dispose the async engine (graceful connection pool drain)
    """
    settings: Settings = app.state.settings
    configure_logging(settings.DEBUG)
    logger.info(
        "Starting up",
        app=settings.APP_NAME,
        env=settings.APP_ENV,
        debug=settings.DEBUG,
        jwks_uri=settings.JWKS_URI,
    )
    try:
        app.state.token_config.check()
    except ConfigurationError as exc:
        logger.error("Token signing is not configured", error=exc.message)
    yield
    logger.info("Shutting down, disposing DB engine")
    await app.state.engine.dispose()


def _validation_errors(exc: RequestValidationError) -> list:
    errors = []
    for error in exc.errors():
        location, *path = error.get("loc", ()) or ("body",)
        errors.append(
            {
                "type": error.get("type", "value_error"),
                "msg": error.get("msg", "Invalid value"),
                "path": ".".join(str(part) for part in path),
                "location": str(location),
            }
        )
    return errors


def create_application(
    settings: Optional[Settings] = None,
    engine: Optional[AsyncEngine] = None,
) -> FastAPI:
    settings = settings or get_settings()
    engine = engine or build_engine(settings.DATABASE_URL, echo=settings.DEBUG)

    app = FastAPI(
        title=settings.APP_NAME,
        description=(
            "Multi-tenant authentication service: user registration, "
            "RS256 access / HS256 refresh tokens, RBAC and tenant management."
        ),
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Shared resources ──────────────────────────────────────────────────────
    token_config = TokenConfig.from_settings(settings)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.token_config = token_config
    app.state.public_keys = build_public_key_source(settings, token_config)
    app.state.password_hasher = PasswordHasher(settings.BCRYPT_ROUNDS)

    # ── CORS ─────────────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Routers ───────────────────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(tenants.router)
    app.include_router(wellknown.router)

    # ── Exception Handlers ────────────────────────────────────────────────────

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
        if exc.is_internal:
            logger.error(
                "Service error",
                path=request.url.path,
                method=request.method,
                error_type=type(exc).__name__,
                error=exc.message,
                exc_info=exc.__cause__ is not None,
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"errors": exc.to_errors()},
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"errors": _validation_errors(exc)},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.error(
            "Unhandled exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "errors": [
                    {
                        "type": "InternalError",
                        "msg": "Internal server error",
                        "path": "",
                        "location": "",
                    }
                ]
            },
        )

    # ── Health Check ──────────────────────────────────────────────────────────

    @app.get("/health", tags=["Health"], summary="Service health check")
    async def health() -> dict:
        return {"status": "ok", "app": settings.APP_NAME, "env": settings.APP_ENV}

    return app


app = create_application()
