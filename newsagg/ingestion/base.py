"""Source adapter interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from rich.console import Console
from rich.markup import escape

from ..config import SourceConfig
from ..models import NewsItem, Platform, SourceRef, SourceType
from .errors import IngestionError, ValidationFailure
from .models import SourceResult
from .page_fetcher import PageFetcher
from .text_filter import format_relative_date, make_item_id

console = Console()


def make_news_item(
    source: SourceConfig,
    *,
    platform: Platform,
    title: str,
    source_url: str,
    description: str = "",
    raw_date: Optional[datetime] = None,
    image_url: Optional[str] = None,
    view_count: int = 0,
    view_count_estimated: bool = True,
) -> NewsItem:
    """
    Build a NewsItem for `source`.

    Raises:
        ValidationFailure: title or source URL is empty
    """
    title = (title or "").strip()
    source_url = (source_url or "").strip()
    if not title:
        raise ValidationFailure("Entry has no title", source_id=source.id, url=source_url or None)
    if not source_url:
        raise ValidationFailure("Entry has no link", source_id=source.id)

    source_type = SourceType.TELEGRAM if platform == Platform.TELEGRAM else SourceType.RSS
    return NewsItem(
        id=make_item_id(source_url),
        title=title,
        description=description,
        image_url=image_url or None,
        source_url=source_url,
        published_at=format_relative_date(raw_date),
        raw_date=raw_date,
        source=SourceRef(id=source.id, name=source.name, type=source_type),
        category=source.category,
        view_count=view_count,
        view_count_estimated=view_count_estimated,
        platform=platform,
    )


class SourceAdapter(ABC):
    """Acquisition strategy turning one source into normalized items."""

    strategy = "base"
    label = "Base"

    def __init__(self, fetcher: Optional[PageFetcher] = None) -> None:
        """Initialize adapter with a shared page fetcher."""
        self.fetcher = fetcher or PageFetcher()

    async def check(self) -> bool:
        """Verify the strategy is usable; adapters without credentials always are."""
        return True

    async def fetch(self, source: SourceConfig) -> SourceResult:
        """
        Acquire `source`. Never raises.

        Failures are logged and reported as an unsuccessful result with no items.
        """
        try:
            return await self._fetch(source)
        except IngestionError as e:
            return self._failed(source, str(e), e.url)
        except Exception as e:
            return self._failed(source, f"Unexpected error: {e}")

    @abstractmethod
    async def _fetch(self, source: SourceConfig) -> SourceResult:
        """Acquire `source`; may raise IngestionError."""
        pass

    def _failed(self, source: SourceConfig, error: str, url: Optional[str] = None) -> SourceResult:
        where = f" ({url})" if url else ""
        message = f"{source.name} via {self.strategy}: {error}{where}"
        console.print(f"[yellow]Warning: {escape(message)}[/yellow]")
        return SourceResult(
            source_id=source.id,
            strategy=self.strategy,
            url=url,
            success=False,
            error=error,
        )
