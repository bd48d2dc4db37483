from datetime import UTC, datetime

from sqlalchemy import insert, update
from sqlmodel import Session, select

from minimal_api.entities.core.user.entity import User
from minimal_api.entities.core.user.table import UserTable


class UserRepository:
    """Data-access layer for users."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, user_id: str) -> User | None:
        row = self._session.get(UserTable, user_id)
        if row is None:
            return None
        return User.model_validate(row, from_attributes=True)

    def get_by_username(self, username: str) -> User | None:
        statement = select(UserTable).where(
            UserTable.normalized_username == User.normalize(username)
        )
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return User.model_validate(row, from_attributes=True)

    def list_all(self) -> list[User]:
        rows = self._session.exec(select(UserTable).order_by(UserTable.username)).all()
        return [User.model_validate(row, from_attributes=True) for row in rows]

    def create(self, user: User) -> int:
        row = UserTable(
            normalized_username=User.normalize(user.username),
            **user.model_dump(),
        )
        return self._session.exec(insert(UserTable).values(**row.model_dump())).rowcount

    def update_access_state(
        self,
        user_id: str,
        *,
        access_failed_count: int,
        lockout_end: datetime | None,
    ) -> int:
        """Persist the failed-login counter and lockout end of a user."""
        statement = (
            update(UserTable)
            .where(UserTable.id == user_id)
            .values(
                access_failed_count=access_failed_count,
                lockout_end=lockout_end,
                updated_at=datetime.now(UTC),
            )
        )
        return self._session.exec(statement).rowcount

    def refresh(self, user_id: str) -> User | None:
        """Reload a user from the database, bypassing the session's identity map."""
        row = self._session.get(UserTable, user_id, populate_existing=True)
        if row is None:
            return None
        return User.model_validate(row, from_attributes=True)

    def increment_access_failed_count(self, user_id: str) -> int:
        """Add one failed login in the database itself so concurrent failures all count."""
        statement = (
            update(UserTable)
            .where(UserTable.id == user_id)
            .values(access_failed_count=UserTable.access_failed_count + 1)
            .execution_options(synchronize_session=False)
        )
        return self._session.exec(statement).rowcount

    def start_lockout(self, user_id: str, *, lockout_end: datetime, threshold: int) -> int:
        """Lock the user and reset the counter if it has reached the threshold."""
        statement = (
            update(UserTable)
            .where(UserTable.id == user_id, UserTable.access_failed_count >= threshold)
            .values(
                access_failed_count=0,
                lockout_end=lockout_end,
                updated_at=datetime.now(UTC),
            )
            .execution_options(synchronize_session=False)
        )
        return self._session.exec(statement).rowcount

    def update_password_hash(self, user_id: str, password_hash: str) -> int:
        statement = (
            update(UserTable)
            .where(UserTable.id == user_id)
            .values(password_hash=password_hash, updated_at=datetime.now(UTC))
        )
        return self._session.exec(statement).rowcount
