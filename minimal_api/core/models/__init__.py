"""Token claim and credential store result models."""

from .claims import TokenClaims
from .identity import IdentityError, IdentityResult, SignInResult

__all__ = ["TokenClaims", "IdentityError", "IdentityResult", "SignInResult"]
