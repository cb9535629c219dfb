"""Region verification for feeds that mix several regions."""

import re
from typing import Optional

from bs4 import BeautifulSoup
from rich.console import Console
from rich.markup import escape

from ..config import RegionCheckConfig, SourceConfig
from .errors import IngestionError
from .page_fetcher import PageFetcher

console = Console()


def page_matches_region(html: str, config: RegionCheckConfig) -> bool:
    """
    Decide from an article page whether it concerns the target region.

    A region label element wins when present; otherwise any mention of the
    region in the page counts.
    """
    soup = BeautifulSoup(html, "html.parser")
    label = soup.select_one(config.selector)
    if label is not None:
        text = label.get_text(" ", strip=True).lower()
        return any(keyword.lower() in text for keyword in config.keywords)
    return re.search(config.mention_pattern, html, re.IGNORECASE) is not None


class RegionChecker:
    """Fetch article pages and apply a source's region check."""

    def __init__(self, fetcher: Optional[PageFetcher] = None, timeout: float = 8.0) -> None:
        """Initialize region checker."""
        self.fetcher = fetcher or PageFetcher()
        self.timeout = timeout

    async def check(self, url: str, source: SourceConfig) -> bool:
        """Return whether the item at `url` belongs to the region; honours fail_open on errors."""
        config = source.region_check
        if config is None:
            return True
        try:
            html = await self.fetcher.get_text(url, timeout=self.timeout)
        except IngestionError as e:
            policy = "keeping" if config.fail_open else "dropping"
            console.print(
                f"[dim]    Region check failed for {escape(url)} ({escape(str(e))}), {policy} item[/dim]"
            )
            return config.fail_open
        return page_matches_region(html, config)
