"""Configuration models."""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class SourceKind(str, Enum):
    """Acquisition family a source belongs to."""

    RSS = "rss"
    TELEGRAM = "telegram"


class DedupPolicy(str, Enum):
    """Which fields identify two items as the same post."""

    URL = "url"
    URL_OR_DESCRIPTION = "url_or_description"
    TITLE = "title"


class HttpConfig(BaseModel):
    """Outbound HTTP settings."""

    timeout: float = Field(15.0, description="Request timeout in seconds", gt=0)
    page_timeout: float = Field(8.0, description="Timeout for article page fetches", gt=0)
    user_agent: str = Field(
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36",
        description="User-Agent header for page and feed requests",
    )


class TelegramConfig(BaseModel):
    """Telegram acquisition settings."""

    bot_token_env: str = Field("TELEGRAM_BOT_TOKEN", description="Environment variable for the bot token")
    bot_token: Optional[str] = Field(None, description="Bot token (prefer bot_token_env)")
    api_base: str = Field("https://api.telegram.org", description="Bot API base URL")
    scrape_url_template: str = Field("https://t.me/s/{username}", description="Public channel preview page")
    rss_proxy_template: str = Field(
        "https://rsshub.app/telegram/channel/{username}",
        description="RSS proxy rendering of a channel",
    )
    posts_limit: int = Field(15, description="Max posts read per channel", ge=1, le=100)
    min_text_length: int = Field(10, description="Minimum post text length", ge=0)


class FamilyConfig(BaseModel):
    """Settings for one cache slot (a family of sources refreshed together)."""

    kind: SourceKind = Field(SourceKind.RSS, description="Source kind handled by this family")
    enabled: bool = Field(True, description="Whether the family is refreshed")
    max_items: int = Field(100, description="Cache size", ge=1, le=1000)
    dedup: DedupPolicy = Field(DedupPolicy.URL, description="Deduplication policy")
    description_limit: int = Field(500, description="Max description length", ge=20)
    items_per_source: int = Field(15, description="Max items kept per source", ge=1)
    entries_scanned: int = Field(20, description="Max raw feed entries scanned per source", ge=1)
    refresh_minutes: float = Field(20.0, description="Refresh interval in minutes", gt=0)
    initial_delay_seconds: float = Field(0.0, description="Delay before the first refresh", ge=0)
    request_delay_seconds: float = Field(1.0, description="Pause between sources", ge=0)
    language_filter: bool = Field(True, description="Drop entries whose title is not in the target language")


def default_families() -> Dict[str, FamilyConfig]:
    """Regional RSS, Telegram channels and federal RSS digests."""
    return {
        "rss": FamilyConfig(kind=SourceKind.RSS, max_items=100, dedup=DedupPolicy.URL),
        "telegram": FamilyConfig(
            kind=SourceKind.TELEGRAM,
            max_items=50,
            dedup=DedupPolicy.URL_OR_DESCRIPTION,
            refresh_minutes=30.0,
            initial_delay_seconds=5.0,
            request_delay_seconds=2.0,
        ),
        "federal": FamilyConfig(
            kind=SourceKind.RSS,
            max_items=100,
            dedup=DedupPolicy.TITLE,
            description_limit=200,
            items_per_source=50,
            entries_scanned=50,
            language_filter=False,
        ),
    }


class ConfigModel(BaseModel):
    """Main configuration model."""

    http: HttpConfig = Field(default_factory=HttpConfig)
    telegram: TelegramConfig = Field(default_factory=TelegramConfig)
    families: Dict[str, FamilyConfig] = Field(default_factory=default_families)
    combined_max_items: int = Field(100, description="Size of the merged feed", ge=1)
    cycle_timeout_seconds: float = Field(600.0, description="Budget for one refresh cycle", gt=0)


class SelectorPattern(BaseModel):
    """One CSS selector and the attribute holding the value."""

    css: str = Field(..., description="CSS selector")
    attr: str = Field("src", description="Attribute to read from the matched element")


class ExtractionRule(BaseModel):
    """Ordered selector patterns tried against a fetched page."""

    selectors: List[SelectorPattern] = Field(default_factory=list)


class RegionCheckConfig(BaseModel):
    """Secondary article-page check that an item concerns the target region."""

    selector: str = Field("span.region", description="Element holding the region label")
    keywords: List[str] = Field(
        default_factory=lambda: ["нижний новгород", "нижегородская"],
        description="Accepted region label fragments (lowercase)",
    )
    mention_pattern: str = Field(
        r"нижегородск|нижн\w*\s+новгород",
        description="Regex used when the page carries no region label",
    )
    fail_open: bool = Field(False, description="Keep the item when the check fetch fails")


class SourceConfig(BaseModel):
    """Source configuration from sources.yaml."""

    id: str = Field(..., description="Stable source identifier")
    name: str = Field(..., description="Display name")
    kind: SourceKind = Field(SourceKind.RSS, description="rss or telegram")
    family: str = Field("rss", description="Cache slot the source feeds")
    url: Optional[str] = Field(None, description="RSS feed URL")
    base_url: Optional[str] = Field(None, description="Site root for fallback feed paths and relative links")
    username: Optional[str] = Field(None, description="Telegram channel username")
    category: str = Field("Новости", description="Category carried onto items")
    priority: int = Field(100, description="Lower values are fetched first")
    enabled: bool = Field(True, description="Whether the source is enabled")
    region_check: Optional[RegionCheckConfig] = Field(None, description="Region verification for mixed-region feeds")
    image_rule: Optional[ExtractionRule] = Field(None, description="Page selectors for the item image")
    fetch_page_images: bool = Field(True, description="Fetch the article page when the feed has no image")

    @field_validator("username")
    @classmethod
    def strip_at(cls, v: Optional[str]) -> Optional[str]:
        """Store usernames without the leading @."""
        if v is None:
            return v
        return v.strip().lstrip("@") or None

    @field_validator("base_url")
    @classmethod
    def strip_slash(cls, v: Optional[str]) -> Optional[str]:
        """Store base URLs without a trailing slash."""
        if v is None:
            return v
        return v.rstrip("/")

    @model_validator(mode="after")
    def check_endpoint(self) -> "SourceConfig":
        """RSS sources need a feed URL, Telegram sources a username."""
        if self.kind == SourceKind.RSS and not self.url:
            raise ValueError(f"RSS source '{self.id}' requires url")
        if self.kind == SourceKind.TELEGRAM and not self.username:
            raise ValueError(f"Telegram source '{self.id}' requires username")
        return self
