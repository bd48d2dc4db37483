import time
from typing import Any

from authlib.common.security import generate_token
from authlib.jose import JoseError, jwt
from fastapi import HTTPException
from loguru import logger

from minimal_api.entities.core.user import User
from minimal_api.runtime.config.config_data import ConfigData
from minimal_api.runtime.context import get_config


class JwtGeneratorService:
    """Service for issuing the bearer tokens handed out by /register and /login."""

    def generate_jwt(
        self,
        subject: str,
        claims: dict[str, Any] | None = None,
        expires_in_seconds: int | None = None,
        secret: str | None = None,
        include_jti: bool = True,
    ) -> str:
        """Generate a signed compact JWT using authlib.

        No ``iss`` or ``aud`` claim is written. An ``exp`` claim is only added
        when a lifetime is given here or configured under ``jwt.expires_in_seconds``.

        Args:
            subject: Subject (sub) claim - the user ID
            claims: Additional claims to include in the token
            expires_in_seconds: Token lifetime; None falls back to the configuration
            secret: Signing secret; None uses the configured secret
            include_jti: Whether to include a unique JWT ID claim

        Returns:
            Signed JWT token string

        Raises:
            HTTPException: If the token cannot be encoded
        """
        config: ConfigData = get_config()
        secret = secret or config.jwt.secret
        lifetime = (
            expires_in_seconds
            if expires_in_seconds is not None
            else config.jwt.expires_in_seconds
        )

        payload: dict[str, Any] = {"sub": subject, "iat": int(time.time())}
        if lifetime is not None:
            payload["exp"] = payload["iat"] + lifetime
        if include_jti:
            payload["jti"] = generate_token(16)

        if claims:
            payload.update(
                {k: v for k, v in claims.items() if k not in {"sub", "iat", "exp", "jti"}}
            )

        header = {"alg": config.jwt.algorithm, "typ": "JWT"}
        try:
            token = jwt.encode(header, payload, secret)
        except JoseError as e:
            logger.error("JWT encoding failed: {}", e)
            raise HTTPException(
                status_code=500, detail=f"JWT encoding failed: {str(e)}"
            ) from e

        # authlib returns bytes, decode to string
        return token.decode() if isinstance(token, bytes) else token

    def generate_token(self, user: User) -> str:
        """Issue the bearer token for an authenticated user."""
        return self.generate_jwt(
            subject=user.id,
            claims={"preferred_username": user.username, "email": user.email},
        )
