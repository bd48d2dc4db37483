"""Token issuance and verification."""

import base64
import json
import time

import pytest
from authlib.jose import jwt
from fastapi import HTTPException

from minimal_api.core.services import JwtGeneratorService, JwtVerificationService
from minimal_api.core.services.jwt.jwt_utils import extract_bearer_token, preview_jwt
from minimal_api.entities import User
from minimal_api.runtime.config.config_data import ConfigData, JWTConfig
from minimal_api.runtime.context import get_config, with_context


@pytest.fixture
def user() -> User:
    return User(username="alice", email="alice@example.com", password_hash="x")


def _b64(obj: dict) -> str:
    return base64.urlsafe_b64encode(json.dumps(obj).encode()).rstrip(b"=").decode()


class TestJwtGeneration:
    def test_token_carries_user_claims(self, jwt_generator: JwtGeneratorService, user: User):
        token = jwt_generator.generate_token(user)
        payload = jwt.decode(token, get_config().jwt.secret)

        assert payload["sub"] == user.id
        assert payload["preferred_username"] == "alice"
        assert payload["email"] == "alice@example.com"
        assert payload["jti"]
        assert abs(payload["iat"] - time.time()) < 5

    def test_no_expiry_issuer_or_audience_by_default(
        self, jwt_generator: JwtGeneratorService, user: User
    ):
        payload = jwt.decode(jwt_generator.generate_token(user), get_config().jwt.secret)
        assert "exp" not in payload
        assert "iss" not in payload
        assert "aud" not in payload

    def test_header_uses_configured_algorithm(
        self, jwt_generator: JwtGeneratorService, user: User
    ):
        preview = preview_jwt(jwt_generator.generate_token(user))
        assert preview.alg == "HS256"
        assert preview.header["typ"] == "JWT"

    def test_configured_lifetime_adds_exp(
        self, jwt_generator: JwtGeneratorService, user: User
    ):
        with with_context(ConfigData(jwt=JWTConfig(expires_in_seconds=60))):
            token = jwt_generator.generate_token(user)
        claims = preview_jwt(token).claims
        assert claims["exp"] == claims["iat"] + 60

    def test_tokens_are_unique(self, jwt_generator: JwtGeneratorService, user: User):
        assert jwt_generator.generate_token(user) != jwt_generator.generate_token(user)

    def test_reserved_claims_cannot_be_overridden(
        self, jwt_generator: JwtGeneratorService, jwt_verifier: JwtVerificationService
    ):
        token = jwt_generator.generate_jwt("user-1", claims={"sub": "someone-else", "role": "x"})

        claims = jwt_verifier.verify_jwt(token)
        assert claims.subject == "user-1"
        assert claims.custom_claims == {"role": "x"}
        assert claims.all_claims["role"] == "x"


class TestJwtVerification:
    def test_valid_token(
        self,
        jwt_generator: JwtGeneratorService,
        jwt_verifier: JwtVerificationService,
        user: User,
    ):
        token = jwt_generator.generate_token(user)
        claims = jwt_verifier.verify_jwt(token)

        assert claims.subject == user.id
        assert claims.preferred_username == "alice"
        assert claims.email == "alice@example.com"
        assert claims.expires_at is None
        assert not claims.is_expired()
        assert claims.raw_token == token

    def test_wrong_secret_is_rejected(
        self, jwt_generator: JwtGeneratorService, jwt_verifier: JwtVerificationService
    ):
        token = jwt_generator.generate_jwt("user-1", secret="another-secret-of-at-least-32-chars!!")
        with pytest.raises(HTTPException) as exc_info:
            jwt_verifier.verify_jwt(token)
        assert exc_info.value.status_code == 401

    def test_tampered_payload_is_rejected(
        self, jwt_generator: JwtGeneratorService, jwt_verifier: JwtVerificationService
    ):
        header, _, signature = jwt_generator.generate_jwt("user-1").split(".")
        forged = ".".join([header, _b64({"sub": "admin"}), signature])
        with pytest.raises(HTTPException) as exc_info:
            jwt_verifier.verify_jwt(forged)
        assert exc_info.value.status_code == 401

    def test_unsigned_token_is_rejected(self, jwt_verifier: JwtVerificationService):
        token = ".".join([_b64({"alg": "none", "typ": "JWT"}), _b64({"sub": "x"}), "sig"])
        with pytest.raises(HTTPException) as exc_info:
            jwt_verifier.verify_jwt(token)
        assert exc_info.value.detail == "Disallowed JWT algorithm"

    @pytest.mark.parametrize(
        "token, detail",
        [
            ("", "Invalid JWT size"),
            ("a" * 5000, "Invalid JWT size"),
            ("abc def.ghi.jkl", "Invalid JWT characters"),
            ("only.two", "Invalid JWT format"),
            ("a..b", "Invalid JWT format"),
        ],
    )
    def test_malformed_tokens(self, jwt_verifier: JwtVerificationService, token: str, detail: str):
        with pytest.raises(HTTPException) as exc_info:
            jwt_verifier.verify_jwt(token)
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == detail

    def test_expired_token_accepted_unless_lifetime_is_validated(
        self, jwt_generator: JwtGeneratorService, jwt_verifier: JwtVerificationService
    ):
        token = jwt_generator.generate_jwt("user-1", expires_in_seconds=-10)

        claims = jwt_verifier.verify_jwt(token)
        assert claims.is_expired()

        with with_context(ConfigData(jwt=JWTConfig(validate_lifetime=True))):
            with pytest.raises(HTTPException) as exc_info:
                jwt_verifier.verify_jwt(token)
        assert exc_info.value.status_code == 401

    def test_clock_skew_tolerates_recent_expiry(
        self, jwt_generator: JwtGeneratorService, jwt_verifier: JwtVerificationService
    ):
        token = jwt_generator.generate_jwt("user-1", expires_in_seconds=-10)
        override = ConfigData(jwt=JWTConfig(validate_lifetime=True, clock_skew=60))
        with with_context(override):
            assert jwt_verifier.verify_jwt(token).subject == "user-1"


class TestBearerExtraction:
    @pytest.mark.parametrize(
        "header, expected",
        [
            ("Bearer abc.def.ghi", "abc.def.ghi"),
            ("bearer abc", "abc"),
            ("Basic dXNlcjpwYXNz", None),
            ("Bearer ", None),
            ("", None),
            (None, None),
        ],
    )
    def test_extract(self, header, expected):
        assert extract_bearer_token(header) == expected
