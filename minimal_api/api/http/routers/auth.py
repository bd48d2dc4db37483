"""Account registration and password login endpoints issuing bearer tokens."""

from fastapi import APIRouter, Body, Depends, status
from pydantic import BaseModel, Field
from starlette.responses import JSONResponse

from minimal_api.api.http.deps import get_jwt_generator_service, get_user_management_service
from minimal_api.core.services import JwtGeneratorService, UserManagementService

USER_NOT_INFORMED = "User not informed"
CREDENTIALS_NOT_INFORMED = "Username or Password not informed"
BLOCKED_USER = "Blocked user"
INVALID_CREDENTIALS = "Invalid Username or Password"

router = APIRouter(tags=["auth"])


class RegisterUser(BaseModel):
    username: str = Field(min_length=1)
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class LoginUser(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


def _bad_request(content) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=content)


@router.post("/register", response_model=str)
def register(
    register_user: RegisterUser | None = Body(default=None),
    users: UserManagementService = Depends(get_user_management_service),
    jwt_gen: JwtGeneratorService = Depends(get_jwt_generator_service),
):
    """Create an account and return a bearer token for it.

    Returns 400 with the list of ``{code, description}`` errors when the
    username or password is rejected.
    """
    if register_user is None:
        return _bad_request(USER_NOT_INFORMED)

    result = users.create_user(
        register_user.username, register_user.email, register_user.password
    )
    if not result.succeeded:
        return _bad_request([error.model_dump() for error in result.errors])

    user = users.find_by_username(register_user.username)
    return jwt_gen.generate_token(user)


@router.post("/login", response_model=str)
def login(
    login_user: LoginUser | None = Body(default=None),
    users: UserManagementService = Depends(get_user_management_service),
    jwt_gen: JwtGeneratorService = Depends(get_jwt_generator_service),
):
    """Exchange a username and password for a bearer token."""
    if login_user is None:
        return _bad_request(CREDENTIALS_NOT_INFORMED)

    result = users.password_sign_in(
        login_user.username, login_user.password, lockout_on_failure=True
    )
    if result.is_locked_out:
        return _bad_request(BLOCKED_USER)
    if not result.succeeded:
        return _bad_request(INVALID_CREDENTIALS)

    return jwt_gen.generate_token(users.find_by_id(result.user_id))
