"""Best-effort image URL resolution for feed entries."""

from typing import Any, Dict, Iterable, Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup
from rich.console import Console
from rich.markup import escape
from trafilatura.metadata import extract_metadata

from ..config import ExtractionRule, SourceConfig
from .errors import IngestionError
from .page_fetcher import PageFetcher
from .rules import image_rule_for

console = Console()

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp", ".gif")


def absolutize(url: Optional[str], base: Optional[str]) -> Optional[str]:
    """Resolve `url` against `base`; None unless the result is an http(s) URL."""
    if not url:
        return None
    url = url.strip()
    if base and not urlparse(url).scheme:
        url = urljoin(base, url)
    if urlparse(url).scheme not in ("http", "https"):
        return None
    return url


def _looks_like_image(media: Dict[str, Any]) -> bool:
    mime = (media.get("type") or "").lower()
    if mime:
        return mime.startswith("image/")
    if media.get("medium"):
        return media["medium"] == "image"
    url = (media.get("url") or media.get("href") or "").lower().split("?")[0]
    return url.endswith(IMAGE_EXTENSIONS)


def first_img_src(html: Optional[str]) -> Optional[str]:
    """Return the src of the first <img> in an HTML fragment."""
    if not html or "<img" not in html.lower():
        return None
    soup = BeautifulSoup(html, "html.parser")
    img = soup.find("img", src=True)
    if img is None:
        return None
    return img["src"].strip() or None


def image_from_metadata(entry: Dict[str, Any]) -> Optional[str]:
    """Image from media:content, enclosures or media:thumbnail."""
    for media in entry.get("media_content") or []:
        if media.get("url") and _looks_like_image(media):
            return media["url"]

    for enclosure in entry.get("enclosures") or []:
        href = enclosure.get("href") or enclosure.get("url")
        if href and _looks_like_image(enclosure):
            return href

    for thumb in entry.get("media_thumbnail") or []:
        if thumb.get("url"):
            return thumb["url"]

    return None


def _entry_html(entry: Dict[str, Any]) -> Iterable[str]:
    for content in entry.get("content") or []:
        value = content.get("value")
        if value:
            yield value
    for key in ("summary", "description"):
        value = entry.get(key)
        if value:
            yield value


def image_from_page(html: str, rule: ExtractionRule, page_url: Optional[str] = None) -> Optional[str]:
    """Apply `rule` selectors to a page, then fall back to Open Graph metadata."""
    soup = BeautifulSoup(html, "html.parser")
    for pattern in rule.selectors:
        element = soup.select_one(pattern.css)
        if element is None:
            continue
        value = element.get(pattern.attr)
        if isinstance(value, list):
            value = " ".join(value)
        if value and value.strip():
            return value.strip()

    try:
        metadata = extract_metadata(html, default_url=page_url)
    except Exception:
        return None
    image = getattr(metadata, "image", None) if metadata else None
    return image or None


class ImageResolver:
    """Resolve a representative image for an item."""

    def __init__(
        self,
        fetcher: Optional[PageFetcher] = None,
        page_timeout: float = 10.0,
        rules: Optional[Dict[str, ExtractionRule]] = None,
    ) -> None:
        """
        Initialize image resolver.

        Args:
            fetcher: Page fetcher used for article pages
            page_timeout: Timeout for article page fetches
            rules: Source id to ExtractionRule registry (defaults to the built-in one)
        """
        self.fetcher = fetcher or PageFetcher()
        self.page_timeout = page_timeout
        self.rules = rules

    async def from_page(self, url: str, source: SourceConfig) -> Optional[str]:
        """Fetch the article page and extract its image. Never raises."""
        try:
            html = await self.fetcher.get_text(url, timeout=self.page_timeout)
        except IngestionError as e:
            console.print(f"[dim]    No page image for {escape(url)}: {escape(str(e))}[/dim]")
            return None
        image = image_from_page(html, image_rule_for(source, self.rules), url)
        return absolutize(image, source.base_url or url)

    async def resolve_entry(self, entry: Dict[str, Any], source: SourceConfig) -> Optional[str]:
        """Metadata first, embedded <img> second, article page third."""
        base = source.base_url or entry.get("link")

        image = absolutize(image_from_metadata(entry), base)
        if image:
            return image

        for html in _entry_html(entry):
            image = absolutize(first_img_src(html), base)
            if image:
                return image

        link = entry.get("link")
        if link and source.fetch_page_images:
            return await self.from_page(link, source)
        return None
