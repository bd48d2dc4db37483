from .authentication import AuthenticationMiddleware

__all__ = ["AuthenticationMiddleware"]
