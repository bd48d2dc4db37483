"""Bearer token claim models."""

import time
from typing import Any

from pydantic import BaseModel, Field


class TokenClaims(BaseModel):
    """Structured representation of the claims of a verified bearer token."""

    raw_token: str = Field(default="", description="Original JWT token", repr=False)

    subject: str | None = Field(default=None, description="Subject (user ID)")
    preferred_username: str | None = Field(default=None, description="Username")
    email: str | None = Field(default=None, description="Email address")
    issued_at: int | None = Field(default=None, description="Issued at")
    expires_at: int | None = Field(default=None, description="Expiration time")
    jti: str | None = Field(default=None, description="JWT ID (unique token identifier)")

    custom_claims: dict[str, Any] = Field(
        default_factory=dict, description="Claims without a dedicated field"
    )
    all_claims: dict[str, Any] = Field(
        default_factory=dict, description="All claims (including custom claims)"
    )

    @classmethod
    def from_jwt_payload(cls, payload: dict[str, Any], raw_token: str = "") -> "TokenClaims":
        """Create TokenClaims from JWT payload dictionary."""
        claim_mapping = {
            "sub": "subject",
            "iat": "issued_at",
            "exp": "expires_at",
            "preferred_username": "preferred_username",
            "email": "email",
            "jti": "jti",
        }

        extracted: dict[str, Any] = {"all_claims": dict(payload), "raw_token": raw_token}
        extra: dict[str, Any] = {}
        for key, value in payload.items():
            if key in claim_mapping:
                extracted[claim_mapping[key]] = value
            else:
                extra[key] = value
        extracted["custom_claims"] = extra

        return cls(**extracted)

    def is_expired(self, clock_skew: int = 0) -> bool:
        """Tokens without an exp claim never expire."""
        return self.expires_at is not None and time.time() > self.expires_at + clock_skew
