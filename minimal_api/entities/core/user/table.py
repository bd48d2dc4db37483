"""User database table model."""

from datetime import datetime

from sqlalchemy import DateTime
from sqlmodel import Field

from minimal_api.entities.core._base import EntityTable


class UserTable(EntityTable, table=True):
    """Database persistence model for users."""

    __tablename__ = "users"

    username: str = Field(max_length=256, nullable=False)
    normalized_username: str = Field(
        max_length=256, nullable=False, unique=True, index=True
    )
    email: str = Field(max_length=256, nullable=False)
    password_hash: str = Field(nullable=False)
    lockout_enabled: bool = Field(default=True, nullable=False)
    lockout_end: datetime | None = Field(
        default=None, nullable=True, sa_type=DateTime(timezone=True)
    )
    access_failed_count: int = Field(default=0, nullable=False)
