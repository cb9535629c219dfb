"""Configuration management for the news aggregator."""

from .loader import Config, load_config, load_sources, save_config, save_sources
from .models import (
    ConfigModel,
    DedupPolicy,
    ExtractionRule,
    FamilyConfig,
    HttpConfig,
    RegionCheckConfig,
    SelectorPattern,
    SourceConfig,
    SourceKind,
    TelegramConfig,
)

__all__ = [
    "Config",
    "ConfigModel",
    "DedupPolicy",
    "ExtractionRule",
    "FamilyConfig",
    "HttpConfig",
    "RegionCheckConfig",
    "SelectorPattern",
    "SourceConfig",
    "SourceKind",
    "TelegramConfig",
    "load_config",
    "load_sources",
    "save_config",
    "save_sources",
]
