"""Domain errors and their HTTP mapping.

Network and storage failures are converted into one of these kinds at the
boundary nearest their origin; nothing else is allowed to reach a response.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class FanFrenzyError(Exception):
    """Base class for errors that carry an HTTP status."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict[str, str]:
        return {"detail": self.message}


class ValidationError(FanFrenzyError):
    """Malformed or out-of-range request payload."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field

    def to_payload(self) -> dict[str, str]:
        return {"detail": self.message, "field": self.field}


class AuthRequired(FanFrenzyError):
    """The action needs an authenticated identity."""

    status_code = status.HTTP_401_UNAUTHORIZED


class ContentNotFound(FanFrenzyError):
    """No pre-authored content exists for the requested key."""

    status_code = status.HTTP_404_NOT_FOUND


class ContentUnavailable(FanFrenzyError):
    """Content could not be loaded or generated."""


class InvalidGeneratedContent(ContentUnavailable):
    """Generated content does not satisfy the quiz contract."""


class PersistenceError(FanFrenzyError):
    """The store rejected a read or write."""


class MatchEvaluationError(Exception):
    """The answer matcher was called with inputs it is not defined for.

    Never a user-facing condition; seeing one means a caller bug.
    """


async def _handle_domain_error(request: Request, exc: FanFrenzyError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "request_failed",
            extra={"path": request.url.path, "error_type": type(exc).__name__, "error": exc.message},
        )
    return JSONResponse(exc.to_payload(), status_code=exc.status_code)


async def _handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    location = [str(part) for part in first.get("loc", ()) if part not in ("body", "query")]
    field = ".".join(location) or "body"
    message = first.get("msg", "invalid request")
    return JSONResponse(
        {"detail": f"{field}: {message}", "field": field},
        status_code=status.HTTP_400_BAD_REQUEST,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(FanFrenzyError, _handle_domain_error)
    app.add_exception_handler(RequestValidationError, _handle_request_validation)
