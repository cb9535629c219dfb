"""Cache snapshot and read-model payloads."""

from datetime import datetime
from typing import Dict, List, Optional, Tuple

from pydantic import Field

from .base import PublicModel
from .news import NewsItem


class CacheSnapshot(PublicModel):
    """Fully-formed cache state produced by one aggregation cycle."""

    family: str = Field(..., description="Cache slot name")
    items: Tuple[NewsItem, ...] = Field(default_factory=tuple)
    generated_at: Optional[datetime] = Field(None, description="When the snapshot was built")
    mode: Optional[str] = Field(None, description="Acquisition mode active when built")

    @classmethod
    def empty(cls, family: str) -> "CacheSnapshot":
        """Snapshot served before the first refresh completes."""
        return cls(family=family)


class CachedNews(PublicModel):
    """Payload returned to the serving layer for one family."""

    data: List[NewsItem] = Field(default_factory=list)
    total: int = 0
    last_updated: Optional[datetime] = None
    source: str
    mode: Optional[str] = None


class FamilyStats(PublicModel):
    """Per-family cache statistics."""

    total: int = 0
    per_source_counts: Dict[str, int] = Field(default_factory=dict)
    per_category_counts: Dict[str, int] = Field(default_factory=dict)
    last_updated: Optional[datetime] = None
    with_images_count: int = 0
    mode: Optional[str] = None
