"""FastAPI dependency implementations."""

from __future__ import annotations

from collections.abc import Iterator

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from minimal_api.api.http.app_data import ApplicationDependencies
from minimal_api.core.models.claims import TokenClaims
from minimal_api.core.services import (
    JwtGeneratorService,
    JwtVerificationService,
    UserManagementService,
)
from minimal_api.entities.service.product import ProductRepository

# Only documents the scheme in OpenAPI; AuthenticationMiddleware does the verifying
bearer_scheme = HTTPBearer(auto_error=False)


def get_db_session(request: Request) -> Iterator[Session]:
    """Open a database session for the duration of the request."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    session = app_deps.database_service.get_session()
    try:
        yield session
    finally:
        session.close()


def get_jwt_verify_service(request: Request) -> JwtVerificationService:
    """Get the JWT verification service instance."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps.jwt_verify_service


def get_jwt_generator_service(request: Request) -> JwtGeneratorService:
    """Get the JWT generation service instance."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps.jwt_generation_service


def get_user_management_service(
    db_session: Session = Depends(get_db_session),
) -> UserManagementService:
    return UserManagementService(db_session)


def get_product_repository(db_session: Session = Depends(get_db_session)) -> ProductRepository:
    return ProductRepository(db_session)


def get_current_user(
    request: Request,
    _credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> TokenClaims:
    """Require the bearer token verified by AuthenticationMiddleware.

    Raises:
        HTTPException: 401 when the request carries no valid token.
    """
    user: TokenClaims | None = getattr(request.state, "user", None)
    if user is None:
        detail = getattr(request.state, "auth_error", None) or "Missing Bearer token"
        raise HTTPException(
            status_code=401,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user
