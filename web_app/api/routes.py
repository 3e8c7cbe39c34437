"""API routes implementation."""

from datetime import datetime, timezone

from fastapi import APIRouter, Request, Response, status

from shortlink.common.headers import build_base_url
from shortlink.common.url_builder import build_short_url
from shortlink.common.validators import is_valid_url, normalize_url
from shortlink.errors import ValidationError

from .schemas import (
    ErrorResponse,
    HealthResponse,
    ShortenRequest,
    ShortenResponse,
    StatisticsResponse,
    URLInfoResponse,
    URLStatsResponse,
)

router = APIRouter()


def _public_short_url(request: Request, short_code: str) -> str:
    config = request.app.state.config
    base_url = build_base_url(request, config.base_url)
    return build_short_url(short_code, base_url, config.path_prefix)


@router.post(
    "/shorten",
    response_model=ShortenResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        200: {"model": ShortenResponse, "description": "Existing short URL returned"},
        400: {"model": ErrorResponse, "description": "Invalid request"},
        409: {"model": ErrorResponse, "description": "Short code already exists"},
        503: {"model": ErrorResponse, "description": "Store unavailable"},
    },
    summary="Create short URL",
    description="Create a shortened URL. Optionally provide a custom short code and expiry.",
)
async def shorten_url(request: Request, response: Response, body: ShortenRequest):
    """Create a shortened URL."""
    service = request.app.state.service

    valid, error = is_valid_url(body.url)
    if not valid:
        raise ValidationError(f"Invalid URL: {error}")

    result = await service.shorten(
        normalize_url(body.url),
        custom_code=body.custom_code,
        expiry_days=body.expiry_days,
    )
    if not result.created:
        response.status_code = status.HTTP_200_OK

    return ShortenResponse(
        short_code=result.link.code,
        short_url=_public_short_url(request, result.link.code),
        original_url=result.link.target,
        created_at=result.link.created_at,
        expires_at=result.link.expires_at,
    )


@router.get(
    "/urls/{short_code}",
    response_model=URLInfoResponse,
    responses={404: {"model": ErrorResponse, "description": "Short code not found"}},
    summary="Get URL information",
)
async def get_url_info(request: Request, short_code: str):
    """Get information about an active short URL."""
    link = await request.app.state.service.get_url_info(short_code)

    return URLInfoResponse(
        short_code=link.code,
        original_url=link.target,
        created_at=link.created_at,
        expires_at=link.expires_at,
        click_count=link.click_count,
        last_access_at=link.last_access_at,
        is_custom=link.is_custom,
    )


@router.get(
    "/urls/{short_code}/stats",
    response_model=URLStatsResponse,
    responses={404: {"model": ErrorResponse, "description": "Short code not found"}},
    summary="Get URL statistics",
)
async def get_url_stats(request: Request, short_code: str):
    """Get access statistics for a short URL, including deactivated ones."""
    stats = await request.app.state.service.get_url_stats(short_code)

    return URLStatsResponse(
        short_code=stats.code,
        original_url=stats.target,
        total_clicks=stats.total_clicks,
        created_at=stats.created_at,
        last_access_at=stats.last_access_at,
        expires_at=stats.expires_at,
        is_active=stats.active,
        days_remaining=stats.days_remaining,
    )


@router.delete(
    "/urls/{short_code}",
    responses={404: {"model": ErrorResponse, "description": "Short code not found"}},
    summary="Delete short URL",
)
async def delete_url(request: Request, short_code: str):
    """Deactivate a short URL."""
    await request.app.state.service.delete_short_url(short_code)
    return {"message": "URL deleted successfully", "short_code": short_code}


@router.get("/stats", response_model=StatisticsResponse, summary="Get statistics")
async def get_statistics(request: Request):
    """Get service statistics."""
    stats = await request.app.state.service.get_statistics()
    return StatisticsResponse(**stats)


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health_check(request: Request):
    """Health check endpoint for load balancers and monitoring."""
    health = await request.app.state.service.health_check()

    return HealthResponse(
        status="healthy" if health["overall"] else "unhealthy",
        database="healthy" if health["database"] else "unhealthy",
        cache="healthy" if health["cache"] else "unhealthy",
        timestamp=datetime.now(timezone.utc),
    )
