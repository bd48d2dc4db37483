"""FastAPI application factory and setup."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from minimal_api.api.http.app_data import ApplicationDependencies
from minimal_api.api.http.middleware import AuthenticationMiddleware
from minimal_api.api.http.problems import validation_problem_handler
from minimal_api.api.http.routers.auth import router as auth_router
from minimal_api.api.http.routers.health import router as health_router
from minimal_api.api.http.routers.service import product_router
from minimal_api.api.utils.app_startup import configure_logging
from minimal_api.core.services import (
    DbManageService,
    DbSessionService,
    JwtGeneratorService,
    JwtVerificationService,
)
from minimal_api.runtime.config.config_data import DEV_JWT_SECRET
from minimal_api.runtime.context import get_config

configure_logging()


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault(
            "Referrer-Policy", "strict-origin-when-cross-origin"
        )
        # HSTS only in prod
        if get_config().app.environment == "production":
            response.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains; preload",
            )
        return response


async def log_requests(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

    xff = request.headers.get("x-forwarded-for")
    client_ip = (
        xff.split(",")[0].strip()
        if xff
        else request.client.host
        if request.client
        else "unknown"
    )
    # Query strings are left out, they may carry secrets
    base_ctx = {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "client_ip": client_ip,
        "user_agent": request.headers.get("user-agent", "unknown"),
    }

    start = time.perf_counter()
    with logger.contextualize(**base_ctx):
        try:
            logger.info("request.start")
            response = await call_next(request)
        except Exception as exc:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=500,
                duration_ms=round(duration_ms, 1),
                error_type=type(exc).__name__,
            ).exception("request.error")
            return JSONResponse(
                status_code=500,
                content={"detail": "Internal Server Error", "request_id": request_id},
                headers={"X-Request-ID": request_id},
            )

        duration_ms = (time.perf_counter() - start) * 1000
        logger.bind(
            status_code=response.status_code,
            duration_ms=round(duration_ms, 1),
        ).info("request.end")
        response.headers.setdefault("X-Request-ID", request_id)
        return response


def build_dependencies() -> ApplicationDependencies:
    """Create the long-lived services shared by every request."""
    config = get_config()
    database_service = DbSessionService()
    if config.database.create_tables:
        DbManageService(database_service.engine).create_all()

    return ApplicationDependencies(
        database_service=database_service,
        jwt_generation_service=JwtGeneratorService(),
        jwt_verify_service=JwtVerificationService(),
    )


def check_configuration() -> None:
    """Refuse to start on settings that are only acceptable during development."""
    config = get_config()
    if config.app.environment != "production":
        return
    if config.jwt.secret == DEV_JWT_SECRET:
        raise RuntimeError(
            "JWT secret misconfigured: set JWT_SECRET before running in production"
        )
    if "*" in config.app.cors.origins and config.app.cors.allow_credentials:
        raise RuntimeError(
            "CORS misconfigured: cannot use '*' with allow_credentials=True in production"
        )


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = get_config()
    logger.info("Starting up application in {} environment", config.app.environment)
    check_configuration()
    # Tests install their own dependencies before the app starts
    if getattr(app.state, "app_dependencies", None) is None:
        app.state.app_dependencies = build_dependencies()
    try:
        yield
    finally:
        logger.info("Shutting down application")


def create_app() -> FastAPI:
    config = get_config()
    is_production = config.app.environment == "production"

    app = FastAPI(
        title="Minimal API",
        lifespan=lifespan,
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
    )
    app.state.app_dependencies = None

    app.add_exception_handler(RequestValidationError, validation_problem_handler)

    # Last added runs first: logging wraps everything, authentication sits innermost
    app.add_middleware(AuthenticationMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.app.cors.origins,
        allow_credentials=config.app.cors.allow_credentials,
        allow_methods=config.app.cors.allow_methods,
        allow_headers=config.app.cors.allow_headers,
    )
    app.middleware("http")(log_requests)

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(product_router)
    return app


app = create_app()

__all__ = ["app", "create_app", "lifespan"]


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=get_config().app.host,
        port=get_config().app.port,
        access_log=False,  # We handle access logging in middleware
    )
