"""Merge, deduplicate, sort and truncate per-source results into a snapshot."""

from datetime import datetime, timezone
from typing import Iterable, List, Optional, Set

import pendulum

from ..config import DedupPolicy
from ..ingestion.dates import EPOCH
from ..ingestion.text_filter import normalize_title_key
from ..models import CacheSnapshot, NewsItem

MIN_TITLE_KEY_LENGTH = 10


def recency_key(item: NewsItem) -> datetime:
    """Sort key; items without a date sort as the oldest."""
    if item.raw_date is None:
        return EPOCH
    if item.raw_date.tzinfo is None:
        return item.raw_date.replace(tzinfo=timezone.utc)
    return item.raw_date


def is_valid(item: NewsItem) -> bool:
    """Items need a title and a source URL to enter a cache."""
    return bool(item.title.strip()) and bool(item.source_url.strip())


def deduplicate(items: Iterable[NewsItem], policy: DedupPolicy = DedupPolicy.URL) -> List[NewsItem]:
    """
    Remove duplicates, keeping the first occurrence and the original order.

    - ``url``: same source URL
    - ``url_or_description``: same source URL or same description
    - ``title``: same source URL or same normalized title; titles whose key
      is shorter than 10 characters are dropped
    """
    seen_urls: Set[str] = set()
    seen_descriptions: Set[str] = set()
    seen_titles: Set[str] = set()
    out: List[NewsItem] = []

    for item in items:
        if policy == DedupPolicy.TITLE:
            key = normalize_title_key(item.title)
            if len(key) < MIN_TITLE_KEY_LENGTH or key in seen_titles or item.source_url in seen_urls:
                continue
            seen_titles.add(key)
            seen_urls.add(item.source_url)
            out.append(item)
            continue

        if item.source_url in seen_urls:
            continue
        if policy == DedupPolicy.URL_OR_DESCRIPTION and item.description in seen_descriptions:
            continue
        seen_urls.add(item.source_url)
        if policy == DedupPolicy.URL_OR_DESCRIPTION:
            seen_descriptions.add(item.description)
        out.append(item)

    return out


def sort_by_recency(items: Iterable[NewsItem]) -> List[NewsItem]:
    """Newest first; ties keep their input order."""
    return sorted(items, key=recency_key, reverse=True)


class AggregationEngine:
    """Build a family's cache snapshot from one refresh cycle's results."""

    def __init__(self, max_items: int = 100, dedup: DedupPolicy = DedupPolicy.URL) -> None:
        """
        Initialize aggregation engine.

        Args:
            max_items: Cache size
            dedup: Deduplication policy
        """
        self.max_items = max_items
        self.dedup = dedup

    def aggregate(
        self,
        per_source_results: Iterable[Iterable[NewsItem]],
        family: str,
        mode: Optional[str] = None,
    ) -> CacheSnapshot:
        """Concatenate, validate, deduplicate, sort and truncate."""
        candidates = [item for items in per_source_results for item in items if is_valid(item)]
        unique = deduplicate(candidates, self.dedup)
        ordered = sort_by_recency(unique)[: self.max_items]
        return CacheSnapshot(
            family=family,
            items=tuple(ordered),
            generated_at=pendulum.now("UTC"),
            mode=mode,
        )
