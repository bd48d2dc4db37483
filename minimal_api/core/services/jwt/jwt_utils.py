import base64
import json
from dataclasses import dataclass
from typing import Any, Final

from fastapi import HTTPException

MAX_JWT_CHARS: Final = 4096
MAX_HEADER_BYTES: Final = 8 * 1024
MAX_PAYLOAD_BYTES: Final = 64 * 1024
_ALLOWED: Final = frozenset(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_."
)  # no '='


def _split_compact_jwt(token: str) -> tuple[str, str, str]:
    """Reject oversized or malformed tokens before any cryptography runs."""
    if not token or len(token) > MAX_JWT_CHARS:
        raise HTTPException(status_code=401, detail="Invalid JWT size")
    if not set(token) <= _ALLOWED:
        raise HTTPException(status_code=401, detail="Invalid JWT characters")
    parts = token.split(".")
    if len(parts) != 3 or not all(parts):
        raise HTTPException(status_code=401, detail="Invalid JWT format")
    return parts[0], parts[1], parts[2]


def _decode_segment(seg: str, what: str, max_bytes: int) -> dict[str, Any]:
    pad = (-len(seg)) % 4
    try:
        raw = base64.urlsafe_b64decode((seg + "=" * pad).encode("ascii"))
    except ValueError as e:
        raise HTTPException(status_code=401, detail=f"Invalid base64url in {what}") from e
    if len(raw) > max_bytes:
        raise HTTPException(status_code=401, detail=f"{what} too large")
    try:
        obj = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise HTTPException(status_code=401, detail=f"Invalid JSON in {what}") from e
    if not isinstance(obj, dict):
        raise HTTPException(status_code=401, detail=f"{what} must be a JSON object")
    return obj


@dataclass(frozen=True)
class JwtPreview:
    header: dict[str, Any]
    claims: dict[str, Any]
    alg: str | None


def preview_jwt(token: str) -> JwtPreview:
    """Split and decode header+payload without checking the signature."""
    h_seg, p_seg, _ = _split_compact_jwt(token)
    header = _decode_segment(h_seg, "JWT header", MAX_HEADER_BYTES)
    claims = _decode_segment(p_seg, "JWT payload", MAX_PAYLOAD_BYTES)
    return JwtPreview(header=header, claims=claims, alg=header.get("alg"))


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token of an ``Authorization: Bearer <token>`` header value."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
