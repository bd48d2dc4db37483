"""Outcome models of the credential store operations."""

from pydantic import BaseModel, Field


class IdentityError(BaseModel):
    """One reason a user could not be created, returned to clients as-is."""

    code: str
    description: str


class IdentityResult(BaseModel):
    succeeded: bool
    errors: list[IdentityError] = Field(default_factory=list)

    @classmethod
    def success(cls) -> "IdentityResult":
        return cls(succeeded=True)

    @classmethod
    def failed(cls, *errors: IdentityError) -> "IdentityResult":
        return cls(succeeded=False, errors=list(errors))


class SignInResult(BaseModel):
    succeeded: bool = False
    is_locked_out: bool = False
    user_id: str | None = None

    @classmethod
    def success(cls, user_id: str) -> "SignInResult":
        return cls(succeeded=True, user_id=user_id)

    @classmethod
    def failed(cls) -> "SignInResult":
        return cls()

    @classmethod
    def locked_out(cls) -> "SignInResult":
        return cls(is_locked_out=True)
