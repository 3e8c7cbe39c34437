"""Pydantic schemas for API requests and responses."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ShortenRequest(BaseModel):
    """Request to shorten a URL."""

    url: str = Field(..., description="The URL to shorten", min_length=1, max_length=2048)
    custom_code: Optional[str] = Field(None, description="Optional custom short code", min_length=4, max_length=12)
    expiry_days: Optional[int] = Field(None, description="Optional lifetime in days", ge=0)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "url": "https://example.com/very/long/path/to/resource",
                },
                {
                    "url": "https://github.com/user/repo",
                    "custom_code": "myrepo",
                    "expiry_days": 30,
                }
            ]
        }
    }


class ShortenResponse(BaseModel):
    """Response after shortening a URL."""

    short_code: str = Field(..., description="The short code")
    short_url: str = Field(..., description="The complete short URL")
    original_url: str = Field(..., description="The normalized target URL")
    created_at: datetime = Field(..., description="Creation timestamp")
    expires_at: Optional[datetime] = Field(None, description="Expiry timestamp, if any")


class URLInfoResponse(BaseModel):
    """Response with URL information."""

    short_code: str
    original_url: str
    created_at: datetime
    expires_at: Optional[datetime] = None
    click_count: int
    last_access_at: Optional[datetime] = None
    is_custom: bool


class URLStatsResponse(BaseModel):
    """Access statistics for one short link."""

    short_code: str
    original_url: str
    total_clicks: int
    created_at: datetime
    last_access_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    is_active: bool
    days_remaining: Optional[int] = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Overall status")
    database: str = Field(..., description="Database status")
    cache: str = Field(..., description="Cache status")
    timestamp: datetime = Field(..., description="Check timestamp")


class ErrorResponse(BaseModel):
    """Error response."""

    error: str = Field(..., description="Error kind")
    detail: Optional[str] = Field(None, description="Detailed error information")


class StatisticsResponse(BaseModel):
    """Statistics response."""

    total_urls: int
    active_urls: int
    total_accesses: int
    database: str
    cache_enabled: bool
    pending_clicks: int
    dropped_clicks: int
