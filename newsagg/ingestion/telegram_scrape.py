"""Telegram public channel preview scraper."""

import re
from typing import Any, List, Optional

from bs4 import BeautifulSoup
from rich.console import Console
from rich.markup import escape

from ..config import SourceConfig
from ..models import NewsItem
from .dates import parse_timestamp
from .errors import ValidationFailure
from .models import SourceResult
from .page_fetcher import PageFetcher
from .telegram_base import TelegramAdapter, post_url
from .text_filter import parse_views

console = Console()

SCRAPE_URL_TEMPLATE = "https://t.me/s/{username}"

_BACKGROUND_IMAGE = re.compile(r"background-image:\s*url\(\s*['\"]?([^'\")]+)")


def background_image(style: Optional[str]) -> Optional[str]:
    """URL from an inline ``background-image:url('...')`` style."""
    if not style:
        return None
    match = _BACKGROUND_IMAGE.search(style)
    return match.group(1).strip() if match else None


def message_text(block: Any) -> str:
    """Text of a message block with line breaks kept."""
    text_node = block.select_one(".tgme_widget_message_text")
    if text_node is None:
        return ""
    for br in text_node.find_all("br"):
        br.replace_with("\n")
    return text_node.get_text().strip()


class TelegramScrapeAdapter(TelegramAdapter):
    """Parse the t.me/s/<channel> HTML preview."""

    strategy = "telegram_scrape"
    label = "Web Scraping"

    def __init__(
        self,
        fetcher: Optional[PageFetcher] = None,
        *,
        url_template: str = SCRAPE_URL_TEMPLATE,
        **kwargs: Any,
    ) -> None:
        """Initialize scraper with the channel page URL template."""
        super().__init__(fetcher, **kwargs)
        self.url_template = url_template

    async def _fetch(self, source: SourceConfig) -> SourceResult:
        url = self.url_template.format(username=source.username)
        html = await self.fetcher.get_text(url)

        soup = BeautifulSoup(html, "html.parser")
        blocks = soup.select(".tgme_widget_message")[: self.posts_limit]

        items: List[NewsItem] = []
        rejected = 0
        for block in blocks:
            try:
                items.append(self._to_item(block, source))
            except ValidationFailure:
                rejected += 1

        console.print(f"  [green]✓[/green] {escape(source.name)}: {len(items)} posts scraped")
        return SourceResult(
            source_id=source.id,
            strategy=self.strategy,
            url=url,
            success=True,
            items=items,
            scanned=len(blocks),
            rejected=rejected,
        )

    def _to_item(self, block: Any, source: SourceConfig) -> NewsItem:
        text = self.validate_text(message_text(block), source)

        data_post = block.get("data-post") or ""
        post_id = data_post.split("/")[-1] if "/" in data_post else ""
        if not post_id:
            raise ValidationFailure("Post has no id", source_id=source.id)

        time_node = block.select_one(".tgme_widget_message_date time")
        raw_date = parse_timestamp(time_node.get("datetime")) if time_node is not None else None

        views_node = block.select_one(".tgme_widget_message_views")
        views = parse_views(views_node.get_text(strip=True) if views_node is not None else None)

        photo = block.select_one(".tgme_widget_message_photo_wrap")
        image_url = background_image(photo.get("style")) if photo is not None else None

        return self.build_post(
            source,
            text=text,
            source_url=post_url(source.username, post_id),
            raw_date=raw_date,
            image_url=image_url,
            views=views,
        )
