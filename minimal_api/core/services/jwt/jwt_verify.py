"""JWT verification service."""

from authlib.jose import JoseError, jwt
from fastapi import HTTPException
from loguru import logger

from minimal_api.core.models.claims import TokenClaims
from minimal_api.core.services.jwt.jwt_utils import preview_jwt
from minimal_api.runtime.context import get_config


class JwtVerificationService:
    """Verify bearer tokens signed with the configured symmetric secret."""

    def verify_jwt(self, token: str, *, key: str | None = None) -> TokenClaims:
        """Check the signature of a token and return its claims.

        Issuer and audience are never checked. Expiry is only enforced when
        ``jwt.validate_lifetime`` is enabled.

        Raises:
            HTTPException: 401 when the token is malformed, uses another
                algorithm, has a bad signature or (optionally) has expired.
        """
        cfg = get_config()
        preview = preview_jwt(token)

        # Pin the algorithm so a token cannot choose how it is verified
        if preview.alg != cfg.jwt.algorithm:
            raise HTTPException(status_code=401, detail="Disallowed JWT algorithm")

        try:
            claims = jwt.decode(token, key or cfg.jwt.secret)
            if cfg.jwt.validate_lifetime:
                claims.validate(leeway=cfg.jwt.clock_skew)
        except (JoseError, ValueError) as exc:
            logger.debug("Rejected bearer token: {}", exc)
            raise HTTPException(status_code=401, detail=f"JWT error: {exc}") from exc

        return TokenClaims.from_jwt_payload(dict(claims), raw_token=token)
