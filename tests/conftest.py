"""Shared fixtures and builders."""

from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Union

import httpx
import pytest

from newsagg.config import SourceConfig, SourceKind
from newsagg.ingestion import PageFetcher, SourceAdapter, SourceResult
from newsagg.models import NewsItem, Platform, SourceRef, SourceType

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

Route = Union[str, bytes, int, Callable[[httpx.Request], httpx.Response]]


def make_item(
    n: int = 1,
    *,
    url: Optional[str] = None,
    title: Optional[str] = None,
    description: Optional[str] = None,
    hours_ago: Optional[float] = None,
    source_id: str = "src",
    category: str = "Новости",
    image_url: Optional[str] = None,
) -> NewsItem:
    """Build a NewsItem directly, bypassing adapters."""
    raw_date = NOW - timedelta(hours=hours_ago) if hours_ago is not None else None
    source_url = url or f"https://example.ru/news/{n}"
    return NewsItem(
        id=f"id{n}",
        title=title or f"Новость номер {n}",
        description=description if description is not None else f"Описание {n}",
        image_url=image_url,
        source_url=source_url,
        published_at="только что",
        raw_date=raw_date,
        source=SourceRef(id=source_id, name=source_id.upper(), type=SourceType.RSS),
        category=category,
        view_count=100,
        platform=Platform.RSS,
    )


def rss_source(**kwargs) -> SourceConfig:
    data = dict(id="site", name="Site", url="https://site.ru/rss.xml", fetch_page_images=False)
    data.update(kwargs)
    return SourceConfig(**data)


def telegram_source(**kwargs) -> SourceConfig:
    data = dict(id="chan", name="Channel", kind=SourceKind.TELEGRAM, family="telegram", username="chan")
    data.update(kwargs)
    return SourceConfig(**data)


def mock_fetcher(routes: Dict[str, Route], calls: Optional[List[str]] = None) -> PageFetcher:
    """
    PageFetcher answering from a URL map.

    Keys match the request URL without its query string. Values are a body
    (str or bytes), a status code, or a handler. Unknown URLs get a 404.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        key = str(request.url).split("?")[0]
        if calls is not None:
            calls.append(key)
        route = routes.get(key)
        if route is None:
            return httpx.Response(404, text="missing")
        if callable(route):
            return route(request)
        if isinstance(route, int):
            return httpx.Response(route, text="")
        if isinstance(route, bytes):
            return httpx.Response(200, content=route)
        return httpx.Response(200, text=route)

    return PageFetcher(timeout=5.0, transport=httpx.MockTransport(handler))


class FakeAdapter(SourceAdapter):
    """Adapter returning canned items and counting calls."""

    def __init__(self, items: Optional[List[NewsItem]] = None, *, ok: bool = True, label: str = "Fake") -> None:
        super().__init__(PageFetcher())
        self.items = items or []
        self.ok = ok
        self.label = label
        self.strategy = label.lower()
        self.calls = 0
        self.checks = 0

    async def check(self) -> bool:
        self.checks += 1
        return self.ok

    async def _fetch(self, source: SourceConfig) -> SourceResult:
        self.calls += 1
        return SourceResult(
            source_id=source.id,
            strategy=self.strategy,
            success=True,
            items=list(self.items),
        )


class FailingAdapter(SourceAdapter):
    """Adapter whose fetch always blows up."""

    strategy = "broken"
    label = "Broken"

    async def _fetch(self, source: SourceConfig) -> SourceResult:
        raise RuntimeError("boom")


@pytest.fixture
def now() -> datetime:
    return NOW
