"""Telegram channel via a third-party RSS proxy."""

from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.markup import escape

from ..config import SourceConfig
from ..models import NewsItem
from .errors import ValidationFailure
from .images import absolutize, first_img_src
from .models import SourceResult
from .page_fetcher import PageFetcher
from .rss_adapter import entry_date, entry_link, entry_summary, parse_feed
from .telegram_base import TelegramAdapter
from .text_filter import clean_text, extract_title, is_target_language

console = Console()

RSS_PROXY_TEMPLATE = "https://rsshub.app/telegram/channel/{username}"
RSS_PROXY_USER_AGENT = "NewsApp/1.0 (RSS Reader)"


class TelegramRSSProxyAdapter(TelegramAdapter):
    """Read a channel through an RSS rendering such as RSSHub."""

    strategy = "telegram_rss"
    label = "RSS Proxy"

    def __init__(
        self,
        fetcher: Optional[PageFetcher] = None,
        *,
        url_template: str = RSS_PROXY_TEMPLATE,
        **kwargs: Any,
    ) -> None:
        """Initialize proxy adapter with the feed URL template."""
        super().__init__(fetcher, **kwargs)
        self.url_template = url_template

    async def _fetch(self, source: SourceConfig) -> SourceResult:
        url = self.url_template.format(username=source.username)
        response = await self.fetcher.get(url, headers={"User-Agent": RSS_PROXY_USER_AGENT}, timeout=10.0)
        entries = parse_feed(response.content, url)[: self.posts_limit]

        items: List[NewsItem] = []
        rejected = 0
        for entry in entries:
            try:
                items.append(self._to_item(entry, source))
            except ValidationFailure:
                rejected += 1

        console.print(f"  [green]✓[/green] {escape(source.name)}: {len(items)} posts via RSS proxy")
        return SourceResult(
            source_id=source.id,
            strategy=self.strategy,
            url=url,
            success=True,
            items=items,
            scanned=len(entries),
            rejected=rejected,
        )

    def _to_item(self, entry: Dict[str, Any], source: SourceConfig) -> NewsItem:
        title = clean_text(entry.get("title"), None)
        if len(title) < self.min_text_length:
            raise ValidationFailure("Post title too short", source_id=source.id)

        content = entry_summary(entry)
        snippet = clean_text(content, self.description_limit)
        if not is_target_language(f"{title} {snippet}"):
            raise ValidationFailure("Post not in target language", source_id=source.id)

        link = entry_link(entry)
        return self.build_post(
            source,
            text=snippet or title,
            title=extract_title(title),
            source_url=link,
            raw_date=entry_date(entry),
            image_url=absolutize(first_img_src(content), link),
        )
