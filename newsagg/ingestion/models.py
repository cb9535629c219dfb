"""Data models for ingestion."""

from typing import List, Optional

from pydantic import BaseModel, Field

from ..models import NewsItem


class SourceResult(BaseModel):
    """Result of acquiring one source with one strategy."""

    source_id: str = Field(..., description="Source id")
    strategy: str = Field(..., description="Adapter strategy name")
    url: Optional[str] = Field(None, description="URL that produced the items (or was last attempted)")
    success: bool = Field(..., description="Whether acquisition succeeded")
    items: List[NewsItem] = Field(default_factory=list, description="Normalized items")
    error: Optional[str] = Field(None, description="Error message if failed")
    scanned: int = Field(0, description="Raw entries examined")
    rejected: int = Field(0, description="Entries dropped by filters")

    @property
    def item_count(self) -> int:
        """Number of items produced."""
        return len(self.items)
