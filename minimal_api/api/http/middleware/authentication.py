"""Bearer token authentication middleware."""

from fastapi import HTTPException, Request
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from minimal_api.api.http.deps import get_jwt_verify_service
from minimal_api.core.services.jwt.jwt_utils import extract_bearer_token


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """Attach the verified token claims of the caller to ``request.state``.

    ``request.state.user`` holds the ``TokenClaims`` of a valid bearer token and
    ``request.state.auth_error`` the reason a presented token was rejected.
    Requests are never refused here; protected routes depend on
    ``get_current_user`` for that.
    """

    async def dispatch(self, request: Request, call_next):
        request.state.user = None
        request.state.auth_error = None

        token = extract_bearer_token(request.headers.get("Authorization"))
        if token is not None:
            jwt_verify = get_jwt_verify_service(request)
            try:
                request.state.user = jwt_verify.verify_jwt(token)
            except HTTPException as exc:
                logger.info("Bearer token rejected: {}", exc.detail)
                request.state.auth_error = exc.detail

        return await call_next(request)
