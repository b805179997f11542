"""FastAPI dependencies."""

from .auth import AuthenticatedUser, get_optional_user, require_user, verify_api_key

__all__ = ["AuthenticatedUser", "get_optional_user", "require_user", "verify_api_key"]
