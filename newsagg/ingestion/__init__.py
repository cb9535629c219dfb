"""Source adapters, text filtering and image resolution."""

from .base import SourceAdapter
from .errors import IngestionError, NetworkFailure, ParseFailure, ValidationFailure
from .images import ImageResolver
from .models import SourceResult
from .page_fetcher import PageFetcher
from .region import RegionChecker
from .rss_adapter import RSSAdapter
from .telegram_bot import TelegramBotAdapter
from .telegram_rss import TelegramRSSProxyAdapter
from .telegram_scrape import TelegramScrapeAdapter

__all__ = [
    "ImageResolver",
    "IngestionError",
    "NetworkFailure",
    "PageFetcher",
    "ParseFailure",
    "RSSAdapter",
    "RegionChecker",
    "SourceAdapter",
    "SourceResult",
    "TelegramBotAdapter",
    "TelegramRSSProxyAdapter",
    "TelegramScrapeAdapter",
    "ValidationFailure",
]
