"""Password hashing utilities."""

from functools import lru_cache

from passlib.context import CryptContext

from minimal_api.runtime.context import get_config


@lru_cache(maxsize=8)
def _crypt_context(schemes: tuple[str, ...]) -> CryptContext:
    return CryptContext(schemes=list(schemes), deprecated="auto")


def get_password_context() -> CryptContext:
    """Return the CryptContext for the configured hash schemes.

    The first scheme hashes new passwords; the others are only accepted for
    verification and are flagged for rehashing.
    """
    return _crypt_context(tuple(get_config().identity.hash_schemes))


def get_password_hash(password: str) -> str:
    return get_password_context().hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return get_password_context().verify(plain_password, hashed_password)


def verify_and_update(plain_password: str, hashed_password: str) -> tuple[bool, str | None]:
    """Verify a password and return a replacement hash when the stored one is outdated.

    Returns:
        (valid, new_hash) where new_hash is None unless a rehash is needed.
    """
    return get_password_context().verify_and_update(plain_password, hashed_password)
