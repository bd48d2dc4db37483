"""RFC 7807 style responses for request validation failures."""

from fastapi import HTTPException, Request
from fastapi.dependencies.models import Dependant
from fastapi.exception_handlers import http_exception_handler
from fastapi.exceptions import RequestValidationError
from loguru import logger
from starlette.responses import JSONResponse, Response

from minimal_api.api.http.deps import get_current_user

VALIDATION_PROBLEM_TYPE = "https://tools.ietf.org/html/rfc9110#section-15.5.1"
VALIDATION_PROBLEM_TITLE = "One or more validation errors occurred."


def _field_name(loc: tuple) -> str:
    # Drop the "body"/"path"/"query" prefix pydantic puts in front of the field
    parts = loc[1:] if len(loc) > 1 else loc
    # JSON decode errors point at a character offset, not a field
    if not parts or not isinstance(parts[0], str):
        return "$"
    return ".".join(str(p) for p in parts)


def validation_errors(exc: RequestValidationError) -> dict[str, list[str]]:
    """Group validation messages by the field they apply to."""
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        errors.setdefault(_field_name(tuple(error.get("loc", ()))), []).append(error["msg"])
    return errors


def _requires_authentication(dependant: Dependant) -> bool:
    return any(
        sub.call is get_current_user or _requires_authentication(sub)
        for sub in dependant.dependencies
    )


async def validation_problem_handler(request: Request, exc: RequestValidationError) -> Response:
    """Turn a validation failure into a 400 problem response.

    The request body is parsed before route dependencies run, so an
    unauthenticated call to a protected route is answered with the 401 of
    ``get_current_user`` instead of the validation problem.
    """
    dependant = getattr(request.scope.get("route"), "dependant", None)
    if dependant is not None and _requires_authentication(dependant):
        try:
            get_current_user(request)
        except HTTPException as auth_exc:
            return await http_exception_handler(request, auth_exc)

    errors = validation_errors(exc)
    logger.info("Request validation failed for fields {}", sorted(errors))
    return JSONResponse(
        status_code=400,
        media_type="application/problem+json",
        content={
            "type": VALIDATION_PROBLEM_TYPE,
            "title": VALIDATION_PROBLEM_TITLE,
            "status": 400,
            "errors": errors,
        },
    )
