"""Data models for the short-link store."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from ..expiration import as_utc, days_remaining, is_expired


class LinkStatus(str, Enum):
    """Lifecycle status of a short link. Inactive links are never reactivated."""

    ACTIVE = "active"
    INACTIVE = "inactive"


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return as_utc(value)
    return as_utc(datetime.fromisoformat(value))


@dataclass
class ShortLink:
    """Represents a short link in the store."""

    code: str
    target: str
    created_at: datetime
    expires_at: Optional[datetime] = None
    last_access_at: Optional[datetime] = None
    click_count: int = 0
    status: LinkStatus = LinkStatus.ACTIVE
    is_custom: bool = False
    id: Optional[int] = field(default=None, compare=False)

    @property
    def active(self) -> bool:
        return self.status is LinkStatus.ACTIVE

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return is_expired(self.expires_at, now)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "code": self.code,
            "target": self.target,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "last_access_at": self.last_access_at.isoformat() if self.last_access_at else None,
            "click_count": self.click_count,
            "active": self.active,
            "is_custom": self.is_custom,
        }

    @classmethod
    def from_record(cls, data: Dict[str, Any]) -> "ShortLink":
        """Create from a database row or dictionary."""
        return cls(
            id=data.get("id"),
            code=data["code"],
            target=data["target"],
            created_at=_parse_datetime(data["created_at"]),
            expires_at=_parse_datetime(data.get("expires_at")),
            last_access_at=_parse_datetime(data.get("last_access_at")),
            click_count=data.get("click_count") or 0,
            status=LinkStatus(data.get("status", LinkStatus.ACTIVE)),
            is_custom=bool(data.get("is_custom", False)),
        )


@dataclass
class LinkStats:
    """Access statistics for one short link."""

    code: str
    target: str
    total_clicks: int
    created_at: datetime
    active: bool
    last_access_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    days_remaining: Optional[int] = None

    @classmethod
    def from_link(cls, link: ShortLink, now: Optional[datetime] = None) -> "LinkStats":
        return cls(
            code=link.code,
            target=link.target,
            total_clicks=link.click_count,
            created_at=link.created_at,
            active=link.active,
            last_access_at=link.last_access_at,
            expires_at=link.expires_at,
            days_remaining=days_remaining(link.expires_at, now),
        )
