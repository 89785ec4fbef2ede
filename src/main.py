from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from src.exception_handlers import unhandled_exception_handler, validation_exception_handler
from src.factory import build_network_resolver
from src.location.formatter import describe
from src.location.network import NetworkLocationResolver
from src.location.validator import FixValidator
from src.logger import logger
from src.models.location import ValidationResult
from src.models.request_models import FixEnvelope, NetworkLocationRequest
from src.models.response_models import DescriptionResponse, HealthResponse, NetworkLocationResponse
from src.settings import LocationSettings, load_settings

app = FastAPI(
    title="Attendance Location Service",
    version="0.1.0",
    description="Location helpers for attendance marking: network fallback lookup, fix validation and labels.",
)
# Read once so a bad LOCATION_* variable fails at startup, not as a client error.
app_settings = load_settings()
logger.info("Started Attendance Location Service")


def get_settings() -> LocationSettings:
    """Dependency to provide the environment-driven settings."""
    return app_settings


def get_network_resolver_factory(
    settings: Annotated[LocationSettings, Depends(get_settings)],
) -> Callable[[NetworkLocationRequest], NetworkLocationResolver]:
    """Dependency returning a callable that builds a resolver for a provider."""

    def _factory(request: NetworkLocationRequest) -> NetworkLocationResolver:
        return build_network_resolver(settings, provider=request.provider)

    return _factory


def get_fix_validator(settings: Annotated[LocationSettings, Depends(get_settings)]) -> FixValidator:
    return FixValidator(max_age_ms=settings.recent_max_age_ms)


app.add_exception_handler(ValidationError, validation_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)


@app.get(
    "/health",
    tags=["health"],
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
)
async def health() -> HealthResponse:
    """Basic health check endpoint."""
    return HealthResponse(status="ok")


@app.get(
    "/v1/location/network",
    response_model=NetworkLocationResponse,
    status_code=status.HTTP_200_OK,
    tags=["location"],
    summary="Approximate the caller's location from its public IP address.",
)
async def network_location(
    request: Request,
    query: Annotated[NetworkLocationRequest, Depends()],
    resolver_factory: Annotated[
        Callable[[NetworkLocationRequest], NetworkLocationResolver], Depends(get_network_resolver_factory)
    ],
) -> NetworkLocationResponse:
    """Run the network fallback tier on its own.

    The tier never raises, so an unavailable lookup is reported as 503.
    """
    logger.info(f"Performing network location lookup path={request.url.path} provider={query.provider}")
    fix = await resolver_factory(query).resolve()
    if fix is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "code": "network_location_unavailable",
                "message": "Could not determine an approximate location from the network.",
                "provider": query.provider,
            },
        )
    return NetworkLocationResponse(provider=query.provider, description=describe(fix), fix=fix)


@app.post(
    "/v1/location/describe",
    response_model=DescriptionResponse,
    status_code=status.HTTP_200_OK,
    tags=["location"],
    summary="Human-readable label for a fix.",
)
async def describe_location(body: FixEnvelope) -> DescriptionResponse:
    return DescriptionResponse(description=describe(body.fix))


@app.post(
    "/v1/location/validate",
    response_model=ValidationResult,
    status_code=status.HTTP_200_OK,
    tags=["location"],
    summary="Plausibility and freshness report for a fix.",
)
async def validate_location(
    body: FixEnvelope,
    validator: Annotated[FixValidator, Depends(get_fix_validator)],
) -> ValidationResult:
    result = validator.validate(body.fix)
    if result.warnings:
        logger.info(f"Fix validation warnings={result.warnings}")
    return result
