"""RSS feed adapter."""

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

import feedparser
from rich.console import Console
from rich.markup import escape

from ..config import SourceConfig
from ..models import NewsItem, Platform
from .base import SourceAdapter, make_news_item
from .dates import parse_timestamp
from .errors import IngestionError, ParseFailure, ValidationFailure
from .images import ImageResolver
from .models import SourceResult
from .page_fetcher import PageFetcher
from .region import RegionChecker
from .text_filter import (
    DESCRIPTION_LIMIT,
    TITLE_LIMIT,
    clean_text,
    estimate_views,
    is_target_language,
)

console = Console()

FALLBACK_PATHS = ("/rss.xml", "/feed/", "/rss/", "/news.rss")


def parse_feed(content: bytes, url: str) -> List[Dict[str, Any]]:
    """
    Parse raw feed bytes into feedparser entries.

    Raises ParseFailure when the payload is malformed and yields no entries.
    """
    feed = feedparser.parse(content)
    entries = list(getattr(feed, "entries", None) or [])
    if getattr(feed, "bozo", 0) and not entries:
        exc = getattr(feed, "bozo_exception", None)
        message = "Invalid RSS/Atom feed"
        if exc:
            message += f" ({exc})"
        raise ParseFailure(message, url=url)
    return entries


def entry_date(entry: Dict[str, Any]) -> Optional[datetime]:
    """Publication date of a feed entry."""
    for key in ("published_parsed", "updated_parsed", "created_parsed"):
        parsed = parse_timestamp(entry.get(key))
        if parsed:
            return parsed
    for key in ("published", "updated", "created"):
        parsed = parse_timestamp(entry.get(key))
        if parsed:
            return parsed
    return None


def entry_link(entry: Dict[str, Any]) -> str:
    """Article link, falling back to a URL-shaped guid."""
    link = (entry.get("link") or "").strip()
    if link:
        return link
    guid = (entry.get("id") or entry.get("guid") or "").strip()
    if guid.startswith(("http://", "https://")):
        return guid
    return ""


def entry_summary(entry: Dict[str, Any]) -> str:
    """Summary text, falling back to the full content."""
    summary = entry.get("summary") or entry.get("description")
    if summary:
        return summary
    for content in entry.get("content") or []:
        if content.get("value"):
            return content["value"]
    return ""


class RSSAdapter(SourceAdapter):
    """Fetch and normalize a source's RSS feed."""

    strategy = "rss"
    label = "RSS"

    def __init__(
        self,
        fetcher: Optional[PageFetcher] = None,
        images: Optional[ImageResolver] = None,
        region: Optional[RegionChecker] = None,
        *,
        description_limit: int = DESCRIPTION_LIMIT,
        entries_scanned: int = 20,
        items_per_source: int = 15,
        fallback_paths: Sequence[str] = FALLBACK_PATHS,
        language_filter: bool = True,
    ) -> None:
        """
        Initialize RSS adapter.

        Args:
            fetcher: Page fetcher for feed requests
            images: Image resolver (shares `fetcher` by default)
            region: Region checker (shares `fetcher` by default)
            description_limit: Max description length
            entries_scanned: Raw entries examined per feed
            items_per_source: Items kept per source
            fallback_paths: Conventional feed paths tried under base_url
            language_filter: Drop entries whose title is not in the target language
        """
        super().__init__(fetcher)
        self.images = images or ImageResolver(self.fetcher)
        self.region = region or RegionChecker(self.fetcher)
        self.description_limit = description_limit
        self.entries_scanned = entries_scanned
        self.items_per_source = items_per_source
        self.fallback_paths = tuple(fallback_paths)
        self.language_filter = language_filter

    def candidate_urls(self, source: SourceConfig) -> List[str]:
        """Primary feed URL followed by conventional paths under the site root."""
        urls = [source.url] if source.url else []
        if source.base_url:
            urls.extend(f"{source.base_url}{path}" for path in self.fallback_paths)
        return list(dict.fromkeys(urls))

    async def _fetch(self, source: SourceConfig) -> SourceResult:
        last_error: Optional[IngestionError] = None

        for url in self.candidate_urls(source):
            try:
                response = await self.fetcher.get(url)
                entries = parse_feed(response.content, url)
            except IngestionError as e:
                console.print(f"[dim]  {escape(source.name)}: {escape(url)} failed ({escape(str(e))})[/dim]")
                last_error = e
                continue
            return await self._build(source, url, entries)

        if last_error is not None:
            raise last_error
        raise ParseFailure("No feed URL configured", source_id=source.id)

    async def _build(self, source: SourceConfig, url: str, entries: List[Dict[str, Any]]) -> SourceResult:
        items: List[NewsItem] = []
        rejected = 0
        scanned = entries[: self.entries_scanned]

        for entry in scanned:
            title = clean_text(entry.get("title"), TITLE_LIMIT)
            if self.language_filter and not is_target_language(title):
                rejected += 1
                continue

            link = entry_link(entry)
            if link and source.region_check is not None:
                if not await self.region.check(link, source):
                    rejected += 1
                    continue

            try:
                item = await self._to_item(entry, source, title, link)
            except ValidationFailure:
                rejected += 1
                continue

            items.append(item)
            if len(items) >= self.items_per_source:
                break

        console.print(
            f"  [green]✓[/green] {escape(source.name)}: {len(items)} items "
            f"({rejected} filtered) from {escape(url)}"
        )
        return SourceResult(
            source_id=source.id,
            strategy=self.strategy,
            url=url,
            success=True,
            items=items,
            scanned=len(scanned),
            rejected=rejected,
        )

    async def _to_item(self, entry: Dict[str, Any], source: SourceConfig, title: str, link: str) -> NewsItem:
        if not link:
            raise ValidationFailure("Entry has no link", source_id=source.id)
        image_url = await self.images.resolve_entry(entry, source)
        return make_news_item(
            source,
            platform=Platform.RSS,
            title=title,
            source_url=link,
            description=clean_text(entry_summary(entry), self.description_limit),
            raw_date=entry_date(entry),
            image_url=image_url,
            view_count=estimate_views(100, 899),
            view_count_estimated=True,
        )
