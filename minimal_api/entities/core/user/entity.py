"""User domain entity."""

from datetime import UTC, datetime

from pydantic import Field

from minimal_api.entities.core._base import Entity


class User(Entity):
    """User entity representing an account of the credential store.

    Only the password hash is ever held; the plaintext never reaches this model.
    """

    username: str = Field(description="Login name, unique ignoring case")
    email: str = Field(description="User's email address")
    password_hash: str = Field(description="passlib hash of the password", repr=False)
    lockout_enabled: bool = Field(default=True, description="Whether failed logins lock the account")
    lockout_end: datetime | None = Field(default=None, description="UTC instant the lockout ends")
    access_failed_count: int = Field(default=0, description="Consecutive failed logins")

    @staticmethod
    def normalize(username: str) -> str:
        return username.strip().upper()

    def is_locked_out(self, now: datetime | None = None) -> bool:
        if not self.lockout_enabled or self.lockout_end is None:
            return False
        end = self.lockout_end
        # SQLite hands timestamps back without tzinfo
        if end.tzinfo is None:
            end = end.replace(tzinfo=UTC)
        return end > (now or datetime.now(UTC))
