"""Data models for the news aggregator."""

from .news import NewsItem, Platform, SourceRef, SourceType
from .snapshot import CachedNews, CacheSnapshot, FamilyStats

__all__ = [
    "CachedNews",
    "CacheSnapshot",
    "FamilyStats",
    "NewsItem",
    "Platform",
    "SourceRef",
    "SourceType",
]
