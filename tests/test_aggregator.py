"""Tests for the aggregation engine."""

from newsagg.config import DedupPolicy
from newsagg.pipeline import AggregationEngine, deduplicate, sort_by_recency

from conftest import make_item


def test_dedup_keeps_first_occurrence():
    first = make_item(1, url="https://x.ru/a", title="Первая версия новости")
    second = make_item(2, url="https://x.ru/a", title="Вторая версия новости")

    result = deduplicate([first, second], DedupPolicy.URL)

    assert result == [first]


def test_sorted_newest_first():
    items = [make_item(1, hours_ago=3), make_item(2, hours_ago=1), make_item(3, hours_ago=2)]

    result = sort_by_recency(items)

    assert [item.id for item in result] == ["id2", "id3", "id1"]


def test_undated_items_sort_last():
    items = [make_item(1), make_item(2, hours_ago=100)]

    assert [item.id for item in sort_by_recency(items)] == ["id2", "id1"]


def test_url_or_description_policy():
    a = make_item(1, url="https://t.me/c/1", description="Одинаковый текст")
    b = make_item(2, url="https://t.me/c/2", description="Одинаковый текст")
    c = make_item(3, url="https://t.me/c/1", description="Другой текст")

    assert deduplicate([a, b, c], DedupPolicy.URL_OR_DESCRIPTION) == [a]
    assert deduplicate([a, b, c], DedupPolicy.URL) == [a, b]


def test_title_policy_normalizes_and_drops_short_titles():
    a = make_item(1, title="Мэр посетил новый завод")
    b = make_item(2, title="МЭР посетил, новый завод!")
    short = make_item(3, title="Коротко")

    assert deduplicate([a, b, short], DedupPolicy.TITLE) == [a]


def test_aggregate_truncates_to_cache_size():
    items = [make_item(n, hours_ago=n) for n in range(120)]
    engine = AggregationEngine(max_items=100)

    snapshot = engine.aggregate([items[:60], items[60:]], "rss")

    assert len(snapshot.items) == 100
    assert snapshot.items[0].id == "id0"
    assert snapshot.items[-1].id == "id99"
    assert snapshot.generated_at is not None


def test_aggregate_merges_sources_and_dedups():
    shared = make_item(1, url="https://x.ru/same", hours_ago=1)
    copy = make_item(2, url="https://x.ru/same", hours_ago=0.5)
    other = make_item(3, hours_ago=2)
    engine = AggregationEngine(max_items=10)

    snapshot = engine.aggregate([[shared, other], [copy]], "rss", mode="RSS")

    assert [item.id for item in snapshot.items] == ["id1", "id3"]
    assert snapshot.family == "rss"
    assert snapshot.mode == "RSS"


def test_aggregate_of_nothing_is_empty():
    snapshot = AggregationEngine().aggregate([], "telegram")

    assert snapshot.items == ()


def test_title_policy_also_drops_repeated_urls():
    first = make_item(1, url="https://ria.ru/a", title="Правительство утвердило бюджет")
    second = make_item(2, url="https://ria.ru/a", title="Госдума приняла закон о налогах")

    snapshot = AggregationEngine(dedup=DedupPolicy.TITLE).aggregate([[first, second]], "federal")

    assert [item.id for item in snapshot.items] == ["id1"]
