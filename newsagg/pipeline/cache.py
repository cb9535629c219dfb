"""In-memory snapshot store and its read-only view."""

import threading
from collections import Counter
from typing import Any, Dict, Iterable, List, Optional

import pendulum

from ..models import CachedNews, CacheSnapshot, FamilyStats, NewsItem
from .aggregator import sort_by_recency


class CacheStore:
    """One snapshot reference per family, swapped whole on refresh."""

    def __init__(self, families: Iterable[str] = ()) -> None:
        """Initialize store with empty snapshots for `families`."""
        self._lock = threading.Lock()
        self._snapshots: Dict[str, CacheSnapshot] = {f: CacheSnapshot.empty(f) for f in families}

    @property
    def families(self) -> List[str]:
        """Known family names."""
        with self._lock:
            return list(self._snapshots)

    def get(self, family: str) -> CacheSnapshot:
        """Current snapshot (an empty one for unknown families)."""
        with self._lock:
            snapshot = self._snapshots.get(family)
        return snapshot if snapshot is not None else CacheSnapshot.empty(family)

    def replace(self, snapshot: CacheSnapshot) -> CacheSnapshot:
        """Install `snapshot` for its family and return the previous one."""
        with self._lock:
            previous = self._snapshots.get(snapshot.family)
            self._snapshots[snapshot.family] = snapshot
        return previous if previous is not None else CacheSnapshot.empty(snapshot.family)


class CacheView:
    """Read-only accessors for the serving layer. No I/O."""

    def __init__(self, store: CacheStore) -> None:
        """Initialize view over `store`."""
        self.store = store

    def get_cached_news(self, family: str) -> CachedNews:
        """All items of a family."""
        snapshot = self.store.get(family)
        return CachedNews(
            data=list(snapshot.items),
            total=len(snapshot.items),
            last_updated=snapshot.generated_at,
            source=family,
            mode=snapshot.mode,
        )

    def get_news(
        self,
        family: str,
        category: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[NewsItem]:
        """Items of a family filtered by category (``all`` or None for every category) and paged."""
        items = list(self.store.get(family).items)
        if category and category != "all":
            items = [item for item in items if item.category == category]
        offset = max(offset, 0)
        return items[offset : offset + max(limit, 0)]

    def get_stats(self, family: str) -> FamilyStats:
        """Counts per source and category."""
        snapshot = self.store.get(family)
        return FamilyStats(
            total=len(snapshot.items),
            per_source_counts=dict(Counter(item.source.name for item in snapshot.items)),
            per_category_counts=dict(Counter(item.category for item in snapshot.items)),
            last_updated=snapshot.generated_at,
            with_images_count=sum(1 for item in snapshot.items if item.image_url),
            mode=snapshot.mode,
        )

    def get_combined(self, max_items: int = 100) -> List[NewsItem]:
        """Every family's items merged newest first."""
        merged: List[NewsItem] = []
        for family in self.store.families:
            merged.extend(self.store.get(family).items)
        return sort_by_recency(merged)[:max_items]

    def health(self) -> Dict[str, Any]:
        """Per-family summary for health endpoints."""
        families = {}
        for family in self.store.families:
            stats = self.get_stats(family)
            families[family] = {
                "cachedNews": stats.total,
                "lastUpdated": stats.last_updated.isoformat() if stats.last_updated else None,
                "workingSources": len(stats.per_source_counts),
                "mode": stats.mode,
            }
        return {
            "status": "OK",
            "timestamp": pendulum.now("UTC").to_iso8601_string(),
            "families": families,
        }
