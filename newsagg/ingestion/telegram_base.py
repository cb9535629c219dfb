"""Shared behaviour of the Telegram channel adapters."""

from datetime import datetime
from typing import Optional, Tuple

from ..config import SourceConfig
from ..models import NewsItem, Platform
from .base import SourceAdapter, make_news_item
from .errors import ValidationFailure
from .page_fetcher import PageFetcher
from .text_filter import (
    DESCRIPTION_LIMIT,
    estimate_views,
    extract_title,
    is_target_language,
    plain_text,
)

TELEGRAM_URL = "https://t.me"


def post_url(username: str, post_id: object) -> str:
    """Public link to a channel post."""
    return f"{TELEGRAM_URL}/{username}/{post_id}"


class TelegramAdapter(SourceAdapter):
    """Base class for strategies reading a public Telegram channel."""

    def __init__(
        self,
        fetcher: Optional[PageFetcher] = None,
        *,
        posts_limit: int = 15,
        min_text_length: int = 10,
        description_limit: int = DESCRIPTION_LIMIT,
    ) -> None:
        """
        Initialize Telegram adapter.

        Args:
            fetcher: Page fetcher
            posts_limit: Max posts read per channel
            min_text_length: Posts with shorter text are dropped
            description_limit: Max description length
        """
        super().__init__(fetcher)
        self.posts_limit = posts_limit
        self.min_text_length = min_text_length
        self.description_limit = description_limit

    def validate_text(self, text: Optional[str], source: SourceConfig) -> str:
        """Return the stripped text or raise ValidationFailure."""
        text = (text or "").strip()
        if len(text) < self.min_text_length:
            raise ValidationFailure("Post text too short", source_id=source.id)
        if not is_target_language(text):
            raise ValidationFailure("Post not in target language", source_id=source.id)
        return text

    def build_post(
        self,
        source: SourceConfig,
        *,
        text: str,
        source_url: str,
        raw_date: Optional[datetime],
        image_url: Optional[str] = None,
        views: Optional[Tuple[int, bool]] = None,
        title: Optional[str] = None,
    ) -> NewsItem:
        """Normalize one channel post; `text` must already be free of markup."""
        view_count, estimated = views if views is not None else (estimate_views(), True)
        return make_news_item(
            source,
            platform=Platform.TELEGRAM,
            title=title or extract_title(" ".join(text.split())),
            source_url=source_url,
            description=plain_text(text, self.description_limit),
            raw_date=raw_date,
            image_url=image_url,
            view_count=view_count,
            view_count_estimated=estimated,
        )
