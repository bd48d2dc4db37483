from .database import DbManageService, DbSessionService
from .jwt import JwtGeneratorService, JwtVerificationService
from .user import UserManagementService

__all__ = [
    "DbManageService",
    "DbSessionService",
    "JwtGeneratorService",
    "JwtVerificationService",
    "UserManagementService",
]
