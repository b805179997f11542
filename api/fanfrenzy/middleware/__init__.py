"""ASGI middleware installed by ``api.main``."""

from .logging import StructuredLoggingMiddleware
from .rate_limit import RateLimitMiddleware

__all__ = ["StructuredLoggingMiddleware", "RateLimitMiddleware"]
