from typing import Iterable, List

from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette import status
import logging

logger = logging.getLogger("currencyify.errors")


class CurrencyifyError(Exception):
    """Base for errors surfaced to API clients with a status code."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error: str = "internal_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InputValidationError(CurrencyifyError):
    """One or more request fields are invalid.

    Carries every violation found so a single response can list them all.
    """

    status_code = status.HTTP_400_BAD_REQUEST
    error = "validation_error"

    def __init__(self, violations: Iterable[str]):
        self.violations: List[str] = list(violations)
        super().__init__("\n".join(self.violations))


class MissingFieldError(InputValidationError):
    def __init__(self, field: str):
        self.field = field
        super().__init__([f"`{field}` parameter is required"])


class UnknownCurrencyCodeError(InputValidationError):
    def __init__(self, field: str, code: str, message: str):
        self.field = field
        self.code = code
        super().__init__([message])


class ProviderError(CurrencyifyError):
    """Remote rate provider failed or returned an unusable payload."""

    status_code = status.HTTP_502_BAD_GATEWAY
    error = "provider_error"


class RateParseError(CurrencyifyError, ArithmeticError):
    """A rate could not be used for arithmetic (zero, negative, unparseable)."""

    error = "rate_parse_error"


class CacheError(Exception):
    """Cache backend failure. Never surfaced; callers degrade to a miss."""


def not_found_handler(request: Request, exc):  # type: ignore
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": "not_found" if exc.status_code == 404 else "http_error",
            "detail": exc.detail
            if exc.status_code != 404
            else f"No route for {request.method} {request.url.path}",
        },
    )


def validation_error_handler(request: Request, exc: RequestValidationError):  # type: ignore
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "detail": exc.errors(),
        },
    )


def currencyify_error_handler(request: Request, exc: CurrencyifyError):  # type: ignore
    if exc.status_code >= 500:
        logger.error("request failed: %s", exc.message)
    content = {"error": exc.error, "detail": exc.message}
    if isinstance(exc, InputValidationError):
        content["violations"] = exc.violations
    return JSONResponse(status_code=exc.status_code, content=content)


def server_error_handler(request: Request, exc: Exception):  # type: ignore
    logger.exception("unhandled exception")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "detail": "An unexpected error occurred.",
        },
    )
