from datetime import UTC, datetime, timedelta

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from minimal_api.core.models.identity import IdentityError, IdentityResult, SignInResult
from minimal_api.core.security import get_password_hash, verify_and_update
from minimal_api.entities.core.user import User, UserRepository
from minimal_api.runtime.context import get_config


def _is_digit(c: str) -> bool:
    return "0" <= c <= "9"


def _is_lower(c: str) -> bool:
    return "a" <= c <= "z"


def _is_upper(c: str) -> bool:
    return "A" <= c <= "Z"


def _duplicate_username(username: str) -> IdentityError:
    return IdentityError(
        code="DuplicateUserName",
        description=f"Username '{username}' is already taken.",
    )


class UserManagementService:
    """Credential store: account creation, password sign-in and lockout."""

    def __init__(self, db_session: Session):
        self._db_session = db_session
        self._user_repo = UserRepository(db_session)

    def validate_password(self, password: str) -> list[IdentityError]:
        """Return every password policy rule the password breaks."""
        policy = get_config().identity.password
        errors: list[IdentityError] = []

        if not password or not password.strip() or len(password) < policy.required_length:
            errors.append(
                IdentityError(
                    code="PasswordTooShort",
                    description=f"Passwords must be at least {policy.required_length} characters.",
                )
            )
        password = password or ""
        if policy.require_non_alphanumeric and all(
            _is_digit(c) or _is_lower(c) or _is_upper(c) for c in password
        ):
            errors.append(
                IdentityError(
                    code="PasswordRequiresNonAlphanumeric",
                    description="Passwords must have at least one non alphanumeric character.",
                )
            )
        if policy.require_digit and not any(_is_digit(c) for c in password):
            errors.append(
                IdentityError(
                    code="PasswordRequiresDigit",
                    description="Passwords must have at least one digit ('0'-'9').",
                )
            )
        if policy.require_lowercase and not any(_is_lower(c) for c in password):
            errors.append(
                IdentityError(
                    code="PasswordRequiresLower",
                    description="Passwords must have at least one lowercase ('a'-'z').",
                )
            )
        if policy.require_uppercase and not any(_is_upper(c) for c in password):
            errors.append(
                IdentityError(
                    code="PasswordRequiresUpper",
                    description="Passwords must have at least one uppercase ('A'-'Z').",
                )
            )
        if len(set(password)) < policy.required_unique_chars:
            errors.append(
                IdentityError(
                    code="PasswordRequiresUniqueChars",
                    description=f"Passwords must use at least {policy.required_unique_chars} different characters.",
                )
            )
        return errors

    def validate_username(self, username: str) -> list[IdentityError]:
        allowed = get_config().identity.user.allowed_username_characters
        if not username or not username.strip() or (
            allowed and any(c not in allowed for c in username)
        ):
            return [
                IdentityError(
                    code="InvalidUserName",
                    description=f"Username '{username}' is invalid, can only contain letters or digits.",
                )
            ]
        if self._user_repo.get_by_username(username) is not None:
            return [_duplicate_username(username)]
        return []

    def create_user(self, username: str, email: str, password: str) -> IdentityResult:
        """Validate and persist a new account.

        The password policy is checked first and reported on its own; the
        username rules only run for an acceptable password.
        """
        errors = self.validate_password(password)
        if errors:
            return IdentityResult.failed(*errors)
        errors = self.validate_username(username)
        if errors:
            return IdentityResult.failed(*errors)

        user = User(
            username=username,
            email=email,
            password_hash=get_password_hash(password),
            lockout_enabled=get_config().identity.lockout.enabled,
        )
        try:
            self._user_repo.create(user)
            self._db_session.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration of the same name
            self._db_session.rollback()
            logger.info("Registration rejected, username already taken")
            return IdentityResult.failed(_duplicate_username(username))

        logger.info("Registered user {}", user.id)
        return IdentityResult.success()

    def find_by_username(self, username: str) -> User | None:
        return self._user_repo.get_by_username(username)

    def find_by_id(self, user_id: str) -> User | None:
        return self._user_repo.get(user_id)

    def password_sign_in(
        self, username: str, password: str, lockout_on_failure: bool = True
    ) -> SignInResult:
        """Check a username/password pair without creating any session."""
        user = self._user_repo.get_by_username(username)
        if user is None:
            logger.info("Sign-in failed for unknown user")
            return SignInResult.failed()

        if user.is_locked_out():
            logger.warning("Sign-in refused, user {} is locked out", user.id)
            return SignInResult.locked_out()

        valid, new_hash = verify_and_update(password, user.password_hash)
        if valid:
            if new_hash:
                self._user_repo.update_password_hash(user.id, new_hash)
            if user.access_failed_count:
                self._user_repo.update_access_state(
                    user.id, access_failed_count=0, lockout_end=user.lockout_end
                )
            self._db_session.commit()
            logger.info("User {} signed in", user.id)
            return SignInResult.success(user.id)

        if lockout_on_failure and user.lockout_enabled:
            current = self._access_failed(user.id)
            if current is not None and current.is_locked_out():
                logger.warning("User {} locked out after repeated failures", user.id)
                return SignInResult.locked_out()

        logger.info("Sign-in failed for user {}", user.id)
        return SignInResult.failed()

    def _access_failed(self, user_id: str) -> User | None:
        """Count a failed attempt and start a lockout when the limit is reached.

        The counter is incremented in the database and the lockout decision is
        taken on the value read back, so concurrent failures are never lost.
        """
        lockout = get_config().identity.lockout
        self._user_repo.increment_access_failed_count(user_id)
        current = self._user_repo.refresh(user_id)
        threshold = lockout.max_failed_access_attempts
        if current is not None and current.access_failed_count >= threshold:
            self._user_repo.start_lockout(
                user_id,
                lockout_end=datetime.now(UTC) + timedelta(seconds=lockout.lockout_seconds),
                threshold=threshold,
            )
            current = self._user_repo.refresh(user_id)
        self._db_session.commit()
        return current

    def list_users(self) -> list[User]:
        return self._user_repo.list_all()

    def unlock_user(self, username: str) -> bool:
        """Clear the lockout and failed-attempt counter of a user."""
        user = self._user_repo.get_by_username(username)
        if user is None:
            return False
        self._user_repo.update_access_state(user.id, access_failed_count=0, lockout_end=None)
        self._db_session.commit()
        logger.info("Unlocked user {}", user.id)
        return True
