"""Tests for the cache store and view."""

from datetime import datetime, timezone

from newsagg.models import CacheSnapshot
from newsagg.pipeline import CacheStore, CacheView

from conftest import make_item


def snapshot(family, items, mode="RSS"):
    return CacheSnapshot(
        family=family,
        items=tuple(items),
        generated_at=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
        mode=mode,
    )


def test_empty_before_first_refresh():
    view = CacheView(CacheStore(["rss"]))

    cached = view.get_cached_news("rss")

    assert cached.data == []
    assert cached.total == 0
    assert cached.last_updated is None


def test_replace_swaps_whole_snapshot():
    store = CacheStore(["rss"])
    old = snapshot("rss", [make_item(1)])
    store.replace(old)
    held = store.get("rss")

    previous = store.replace(snapshot("rss", [make_item(2), make_item(3)]))

    assert previous is old
    assert [item.id for item in held.items] == ["id1"]
    assert [item.id for item in store.get("rss").items] == ["id2", "id3"]


def test_get_cached_news_payload_uses_camel_case():
    store = CacheStore(["telegram"])
    store.replace(snapshot("telegram", [make_item(1)], mode="Web Scraping"))

    payload = CacheView(store).get_cached_news("telegram").model_dump(by_alias=True, mode="json")

    assert payload["total"] == 1
    assert payload["source"] == "telegram"
    assert payload["lastUpdated"].startswith("2024-05-01T12:00:00")
    assert payload["mode"] == "Web Scraping"
    assert "sourceUrl" in payload["data"][0]
    assert "viewCountEstimated" in payload["data"][0]


def test_get_stats():
    store = CacheStore(["rss"])
    store.replace(
        snapshot(
            "rss",
            [
                make_item(1, source_id="a", image_url="https://x.ru/1.jpg"),
                make_item(2, source_id="a", category="Спорт"),
                make_item(3, source_id="b"),
            ],
        )
    )

    stats = CacheView(store).get_stats("rss")

    assert stats.total == 3
    assert stats.per_source_counts == {"A": 2, "B": 1}
    assert stats.per_category_counts == {"Новости": 2, "Спорт": 1}
    assert stats.with_images_count == 1


def test_get_news_filters_and_pages():
    store = CacheStore(["rss"])
    items = [make_item(n, category="Спорт" if n % 2 else "Новости") for n in range(10)]
    store.replace(snapshot("rss", items))
    view = CacheView(store)

    assert len(view.get_news("rss", limit=20)) == 10
    assert [i.id for i in view.get_news("rss", category="Спорт", limit=2, offset=1)] == ["id3", "id5"]
    assert len(view.get_news("rss", category="all", limit=3)) == 3


def test_get_combined_merges_families_by_date():
    store = CacheStore(["rss", "telegram"])
    store.replace(snapshot("rss", [make_item(1, hours_ago=1), make_item(3, hours_ago=3)]))
    store.replace(snapshot("telegram", [make_item(2, hours_ago=2)]))

    combined = CacheView(store).get_combined(max_items=2)

    assert [item.id for item in combined] == ["id1", "id2"]


def test_health_reports_every_family():
    store = CacheStore(["rss", "telegram"])
    store.replace(snapshot("rss", [make_item(1)]))

    health = CacheView(store).health()

    assert health["status"] == "OK"
    assert health["families"]["rss"]["cachedNews"] == 1
    assert health["families"]["telegram"]["cachedNews"] == 0
    assert health["families"]["telegram"]["lastUpdated"] is None
