"""Language detection and text cleaning shared by every adapter."""

import hashlib
import random
import re
from datetime import datetime
from typing import Any, Optional, Tuple

import pendulum

from .dates import parse_timestamp

NO_TITLE = "Без заголовка"
UNKNOWN_DATE = "Неизвестно"
ELLIPSIS = "..."

TITLE_LIMIT = 100
DESCRIPTION_LIMIT = 500

_CYRILLIC = re.compile(r"[а-яё]", re.IGNORECASE)
_LETTERS = re.compile(r"[а-яёa-z]", re.IGNORECASE)
_SENTENCE_END = re.compile(r"[.!?]\s+")
_TAG = re.compile(r"<[^>]*>")
_ENTITY = re.compile(r"&#?\w+;")
_WHITESPACE = re.compile(r"\s+")
_PUNCTUATION = re.compile(r"[^\w\s]")
_VIEWS = re.compile(r"(\d+(?:[.,]\d+)?)\s*([KMКМ]?)", re.IGNORECASE)

_VIEW_MULTIPLIERS = {"k": 1_000, "к": 1_000, "m": 1_000_000, "м": 1_000_000}


def is_target_language(text: Optional[str], threshold: float = 0.3) -> bool:
    """Return True when Cyrillic makes up more than `threshold` of the letters."""
    if not text:
        return False
    cyrillic = len(_CYRILLIC.findall(text))
    letters = len(_LETTERS.findall(text))
    return cyrillic > 0 and letters > 0 and cyrillic / letters > threshold


def clip(text: str, limit: int) -> str:
    """Bound `text` to `limit` characters, ellipsis included."""
    if len(text) <= limit:
        return text
    return text[: max(limit - len(ELLIPSIS), 0)].rstrip() + ELLIPSIS


def extract_title(text: Optional[str]) -> str:
    """Use the first sentence of a post as its headline."""
    if not text or not text.strip():
        return NO_TITLE
    text = text.strip()
    title = _SENTENCE_END.split(text, maxsplit=1)[0] or text
    return clip(title, TITLE_LIMIT).strip()


def clean_text(text: Optional[str], limit: Optional[int] = DESCRIPTION_LIMIT) -> str:
    """Strip markup, collapse whitespace and bound the length (no bound when `limit` is None)."""
    if not text:
        return ""
    previous = None
    while text != previous:
        previous = text
        text = _ENTITY.sub(" ", _TAG.sub(" ", text))
    text = _WHITESPACE.sub(" ", text).strip()
    if limit is None:
        return text
    return clip(text, limit)


def plain_text(text: Optional[str], limit: Optional[int] = DESCRIPTION_LIMIT) -> str:
    """Collapse whitespace and bound the length of text that carries no markup."""
    if not text:
        return ""
    text = _WHITESPACE.sub(" ", text).strip()
    if limit is None:
        return text
    return clip(text, limit)


def normalize_title_key(title: str) -> str:
    """Lowercase, punctuation-free form of a title used as a dedup key."""
    key = _PUNCTUATION.sub("", title.lower())
    return _WHITESPACE.sub(" ", key).strip()


def format_relative_date(value: Any, now: Optional[datetime] = None) -> str:
    """Human-readable age of a timestamp."""
    published = parse_timestamp(value)
    if published is None:
        return UNKNOWN_DATE

    now = parse_timestamp(now) if now is not None else pendulum.now("UTC")
    minutes = int((now - published).total_seconds() // 60)

    if minutes < 1:
        return "только что"
    if minutes < 60:
        return f"{minutes} мин назад"
    if minutes < 1440:
        return f"{minutes // 60} ч назад"

    days = minutes // 1440
    if days == 1:
        return "вчера"
    if days < 7:
        return f"{days} дн назад"

    return pendulum.instance(published).format("DD.MM.YYYY")


def estimate_views(low: int = 100, high: int = 599) -> int:
    """Placeholder view count for sources that expose none."""
    return random.randint(low, high)


def parse_views(text: Optional[str], low: int = 100, high: int = 599) -> Tuple[int, bool]:
    """
    Parse a view counter such as ``"1.2K"`` or ``"3,4М"``.

    Returns ``(count, estimated)``; ``estimated`` is True when nothing could be
    read and the count is a random placeholder.
    """
    if text:
        match = _VIEWS.search(text)
        if match:
            number = float(match.group(1).replace(",", "."))
            multiplier = _VIEW_MULTIPLIERS.get(match.group(2).lower(), 1)
            return int(number * multiplier), False
    return estimate_views(low, high), True


def make_item_id(source_url: Optional[str], fingerprint: str = "") -> str:
    """Stable id: hash of the source URL, or of a content fingerprint."""
    key = source_url or f"fp::{fingerprint}"
    return hashlib.sha256(key.encode("utf-8")).hexdigest()[:16]
