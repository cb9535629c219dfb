"""Tests for the RSS adapter."""

from typing import List

import pytest

from newsagg.config import ConfigModel, RegionCheckConfig
from newsagg.ingestion import ImageResolver, ParseFailure, RegionChecker, RSSAdapter
from newsagg.ingestion.rss_adapter import parse_feed
from newsagg.models import Platform
from newsagg.pipeline import NewsService

from conftest import mock_fetcher, rss_source


def entry(title: str, link: str, date: str = "Wed, 01 May 2024 10:00:00 +0000", extra: str = "") -> str:
    return (
        f"<item><title>{title}</title><link>{link}</link>"
        f"<description>Подробности события</description>"
        f"<pubDate>{date}</pubDate>{extra}</item>"
    )


def feed(*entries: str) -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<rss version="2.0"><channel><title>Лента</title><link>https://site.ru</link>'
        + "".join(entries)
        + "</channel></rss>"
    )


THREE_ENTRIES = feed(
    entry("В Нижнем Новгороде открыли мост", "https://site.ru/news/1", "Wed, 01 May 2024 09:00:00 +0000"),
    entry("Breaking news from abroad", "https://site.ru/news/2"),
    entry("Мэр провёл совещание", "https://site.ru/news/3", "Wed, 01 May 2024 11:00:00 +0000"),
)


def make_adapter(fetcher, **kwargs) -> RSSAdapter:
    return RSSAdapter(fetcher, ImageResolver(fetcher), RegionChecker(fetcher), **kwargs)


async def test_language_filter_and_normalization():
    fetcher = mock_fetcher({"https://site.ru/rss.xml": THREE_ENTRIES})

    result = await make_adapter(fetcher).fetch(rss_source())

    assert result.success
    assert [item.title for item in result.items] == [
        "В Нижнем Новгороде открыли мост",
        "Мэр провёл совещание",
    ]
    assert result.rejected == 1
    item = result.items[0]
    assert item.platform == Platform.RSS
    assert item.source.id == "site"
    assert item.description == "Подробности события"
    assert item.view_count_estimated
    assert 100 <= item.view_count <= 899
    assert not item.is_liked
    assert item.raw_date.hour == 9


async def test_end_to_end_refresh_builds_sorted_cache():
    fetcher = mock_fetcher({"https://site.ru/rss.xml": THREE_ENTRIES})
    service = NewsService(ConfigModel(), [rss_source()], fetcher=fetcher)

    snapshot = await service.refresh("rss")

    assert [item.title for item in snapshot.items] == [
        "Мэр провёл совещание",
        "В Нижнем Новгороде открыли мост",
    ]
    assert service.view.get_cached_news("rss").total == 2


async def test_tries_fallback_paths_in_order():
    calls: List[str] = []
    fetcher = mock_fetcher({"https://site.ru/feed/": THREE_ENTRIES}, calls)
    source = rss_source(url="https://site.ru/broken.xml", base_url="https://site.ru/")

    result = await make_adapter(fetcher).fetch(source)

    assert result.url == "https://site.ru/feed/"
    assert calls == [
        "https://site.ru/broken.xml",
        "https://site.ru/rss.xml",
        "https://site.ru/feed/",
    ]
    assert result.item_count == 2


async def test_unreachable_feed_yields_failed_result():
    fetcher = mock_fetcher({"https://site.ru/rss.xml": 500})

    result = await make_adapter(fetcher).fetch(rss_source())

    assert not result.success
    assert result.items == []
    assert "Server error (500)" in result.error


def test_parse_feed_rejects_garbage():
    with pytest.raises(ParseFailure):
        parse_feed(b"<html><body>not a feed", "https://site.ru/rss.xml")


async def test_items_per_source_cap():
    entries = [entry(f"Новость дня номер {n}", f"https://site.ru/news/{n}") for n in range(30)]
    fetcher = mock_fetcher({"https://site.ru/rss.xml": feed(*entries)})

    result = await make_adapter(fetcher, items_per_source=15, entries_scanned=20).fetch(rss_source())

    assert result.item_count == 15


class TestRegionCheck:
    FEED = feed(entry("Новость о регионе", "https://site.ru/news/1"))

    async def test_label_match_keeps_item(self):
        fetcher = mock_fetcher({
            "https://site.ru/rss.xml": self.FEED,
            "https://site.ru/news/1": '<span class="region">Нижний Новгород</span>',
        })
        source = rss_source(region_check=RegionCheckConfig())

        result = await make_adapter(fetcher).fetch(source)

        assert result.item_count == 1

    async def test_other_region_is_dropped(self):
        fetcher = mock_fetcher({
            "https://site.ru/rss.xml": self.FEED,
            "https://site.ru/news/1": '<span class="region">Казань</span>',
        })
        source = rss_source(region_check=RegionCheckConfig())

        result = await make_adapter(fetcher).fetch(source)

        assert result.item_count == 0
        assert result.rejected == 1

    async def test_mention_without_label(self):
        fetcher = mock_fetcher({
            "https://site.ru/rss.xml": self.FEED,
            "https://site.ru/news/1": "<p>Событие произошло в Нижнем Новгороде вчера</p>",
        })
        source = rss_source(region_check=RegionCheckConfig())

        result = await make_adapter(fetcher).fetch(source)

        assert result.item_count == 1

    @pytest.mark.parametrize("fail_open,expected", [(True, 1), (False, 0)])
    async def test_network_failure_follows_policy(self, fail_open, expected):
        fetcher = mock_fetcher({
            "https://site.ru/rss.xml": self.FEED,
            "https://site.ru/news/1": 503,
        })
        source = rss_source(region_check=RegionCheckConfig(fail_open=fail_open))

        result = await make_adapter(fetcher).fetch(source)

        assert result.item_count == expected


class TestImages:
    async def test_enclosure_wins(self):
        extra = '<enclosure url="https://cdn.site.ru/photo.jpg" type="image/jpeg" length="1"/>'
        fetcher = mock_fetcher({"https://site.ru/rss.xml": feed(entry("Фото дня", "https://site.ru/news/1", extra=extra))})

        result = await make_adapter(fetcher).fetch(rss_source(fetch_page_images=True))

        assert result.items[0].image_url == "https://cdn.site.ru/photo.jpg"

    async def test_page_og_image(self):
        page = '<html><head><meta property="og:image" content="/images/big.jpg"></head><body></body></html>'
        fetcher = mock_fetcher({
            "https://site.ru/rss.xml": feed(entry("Фото дня", "https://site.ru/news/1")),
            "https://site.ru/news/1": page,
        })
        source = rss_source(base_url="https://site.ru", fetch_page_images=True)

        result = await make_adapter(fetcher).fetch(source)

        assert result.items[0].image_url == "https://site.ru/images/big.jpg"

    async def test_page_failure_yields_no_image(self):
        fetcher = mock_fetcher({
            "https://site.ru/rss.xml": feed(entry("Фото дня", "https://site.ru/news/1")),
            "https://site.ru/news/1": 404,
        })

        result = await make_adapter(fetcher).fetch(rss_source(fetch_page_images=True))

        assert result.item_count == 1
        assert result.items[0].image_url is None


async def test_federal_family_keeps_english_headlines():
    english = feed(
        entry("Russia and China sign trade agreement", "https://tass.com/economy/1"),
        entry("Central bank keeps key rate unchanged", "https://tass.com/economy/2"),
    )
    fetcher = mock_fetcher({"https://tass.com/rss/v2.xml": english})
    source = rss_source(id="tass", family="federal", url="https://tass.com/rss/v2.xml")
    service = NewsService(ConfigModel(), [source], fetcher=fetcher)

    snapshot = await service.refresh("federal")

    assert len(snapshot.items) == 2
    assert service.family("federal").last_results[0].rejected == 0
