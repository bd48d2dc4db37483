"""JWT services."""

from .jwt_gen import JwtGeneratorService
from .jwt_verify import JwtVerificationService

__all__ = ["JwtGeneratorService", "JwtVerificationService"]
