"""News item model shared by every source adapter."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from .base import PublicModel


class SourceType(str, Enum):
    """Source type as shown to readers."""

    RSS = "RSS"
    TELEGRAM = "Telegram"


class Platform(str, Enum):
    """Platform an item was acquired from."""

    RSS = "rss"
    TELEGRAM = "telegram"


class SourceRef(PublicModel):
    """Reference to the configured source an item came from."""

    id: str = Field(..., description="Source id")
    name: str = Field(..., description="Source display name")
    type: SourceType = Field(..., description="RSS or Telegram")


class NewsItem(PublicModel):
    """Normalized news item."""

    id: str = Field(..., description="Deterministic id derived from the source URL")
    title: str = Field(..., description="Headline, at most 100 characters")
    description: str = Field("", description="Cleaned body text")
    image_url: Optional[str] = Field(None, description="Absolute image URL")
    source_url: str = Field(..., description="Link to the original post or article")
    published_at: str = Field(..., description="Relative time computed at generation")
    raw_date: Optional[datetime] = Field(None, description="Publication timestamp (UTC)")
    source: SourceRef
    category: str = Field("", description="Category from source configuration")
    view_count: int = Field(0, description="View counter", ge=0)
    view_count_estimated: bool = Field(
        True,
        description="True when view_count is a random placeholder, not a measured value",
    )
    is_liked: bool = Field(False, description="Always false at creation")
    platform: Platform
