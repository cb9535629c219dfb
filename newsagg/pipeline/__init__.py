"""Aggregation, fallback chaining, caching and refresh scheduling."""

from .aggregator import AggregationEngine, deduplicate, sort_by_recency
from .cache import CacheStore, CacheView
from .fallback import ChainState, FallbackChain
from .scheduler import RefreshJob, RefreshScheduler
from .service import FamilyPipeline, NewsService

__all__ = [
    "AggregationEngine",
    "CacheStore",
    "CacheView",
    "ChainState",
    "FallbackChain",
    "FamilyPipeline",
    "NewsService",
    "RefreshJob",
    "RefreshScheduler",
    "deduplicate",
    "sort_by_recency",
]
