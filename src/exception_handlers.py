from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from src.logger import logger


def _normalize_pydantic_errors(errors: list[dict[str, Any]] | tuple[dict[str, Any], ...]) -> list[dict[str, Any]]:
    """Make sure Pydantic error dicts are JSON-serializable."""
    normalized: list[dict[str, Any]] = []
    for error in errors:
        e = dict(error)
        ctx = e.get("ctx")
        if isinstance(ctx, dict):
            # Convert any non-serializable ctx values (e.g. exceptions) to strings.
            e["ctx"] = {k: str(v) for k, v in ctx.items()}
        normalized.append(e)
    return normalized


def _build_validation_error_payload(exc: ValidationError | RequestValidationError) -> dict[str, Any]:
    """Normalize validation errors into a consistent error payload.

    Only a short machine-readable `code` and a stable `message` are returned;
    internal validation details stay in the logs.
    """
    code = "invalid_request"
    message = "Invalid request parameters"

    for error in _normalize_pydantic_errors(exc.errors()):
        loc = error.get("loc", ())
        if "fix" in loc:
            code = "invalid_fix"
            message = "The supplied location fix is malformed or violates its invariants."
            break

    return {
        "code": code,
        "message": message,
    }


async def validation_exception_handler(request: Request, exc: ValidationError | RequestValidationError) -> JSONResponse:
    """Handle request-body and Pydantic validation errors with a 400."""
    logger.info(
        "Validation error during request handling "
        f"path={request.url.path} method={request.method} errors={_normalize_pydantic_errors(exc.errors())}"
    )
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=_build_validation_error_payload(exc))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected errors to return a structured 500 response."""
    logger.exception(
        f"Unhandled exception while processing request: {repr(exc)} path={request.url.path} method={request.method}"
    )
    content: dict[str, Any] = {
        "code": "internal_error",
        "message": "An unexpected error occurred while processing the request.",
    }
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=content,
    )
