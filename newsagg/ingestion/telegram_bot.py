"""Telegram Bot API adapter."""

import json
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.markup import escape

from ..config import SourceConfig
from ..models import NewsItem
from .dates import parse_timestamp
from .errors import IngestionError, ParseFailure, ValidationFailure
from .models import SourceResult
from .page_fetcher import PageFetcher
from .telegram_base import TelegramAdapter, post_url

console = Console()

API_BASE = "https://api.telegram.org"


class TelegramBotAdapter(TelegramAdapter):
    """Read channel posts through the Bot API (the bot must be a channel admin)."""

    strategy = "telegram_bot"
    label = "Bot API"

    def __init__(
        self,
        token: Optional[str],
        fetcher: Optional[PageFetcher] = None,
        *,
        api_base: str = API_BASE,
        updates_limit: int = 100,
        **kwargs: Any,
    ) -> None:
        """
        Initialize Bot API adapter.

        Args:
            token: Bot token; without one the adapter never activates
            fetcher: Page fetcher
            api_base: Bot API base URL
            updates_limit: Updates requested per getUpdates call
        """
        super().__init__(fetcher, **kwargs)
        self.token = token
        self.api_base = api_base.rstrip("/")
        self.updates_limit = updates_limit

    def _method_url(self, method: str) -> str:
        return f"{self.api_base}/bot{self.token}/{method}"

    def _masked_url(self, method: str) -> str:
        return f"{self.api_base}/bot***/{method}"

    async def _call(self, method: str, params: Optional[Dict[str, Any]] = None, timeout: Optional[float] = None) -> Any:
        """Invoke a Bot API method and return its `result`."""
        if not self.token:
            raise ValidationFailure("Bot token not set", url=self._masked_url(method))
        try:
            data = await self.fetcher.get_json(self._method_url(method), params=params, timeout=timeout)
        except IngestionError as e:
            e.url = self._masked_url(method)
            raise
        if not isinstance(data, dict) or not data.get("ok"):
            description = data.get("description") if isinstance(data, dict) else "malformed response"
            raise ParseFailure(f"{method} failed: {description}", url=self._masked_url(method))
        return data.get("result")

    async def check(self) -> bool:
        """Verify the token with getMe."""
        if not self.token:
            console.print("[yellow]Warning: Telegram bot token not set[/yellow]")
            return False
        try:
            bot = await self._call("getMe", timeout=5.0)
        except IngestionError as e:
            console.print(f"[red]Telegram Bot API unavailable: {escape(str(e))}[/red]")
            return False
        bot = bot or {}
        console.print(
            f"[green]Telegram Bot API ready: {escape(str(bot.get('first_name', '')))} "
            f"(@{escape(str(bot.get('username', '')))})[/green]"
        )
        return True

    async def file_url(self, file_id: str) -> Optional[str]:
        """Resolve a file id to a download URL. Never raises."""
        try:
            result = await self._call("getFile", {"file_id": file_id}, timeout=5.0)
        except IngestionError as e:
            console.print(f"[dim]    getFile failed: {escape(str(e))}[/dim]")
            return None
        file_path = (result or {}).get("file_path")
        if not file_path:
            return None
        return f"{self.api_base}/file/bot{self.token}/{file_path}"

    async def _fetch(self, source: SourceConfig) -> SourceResult:
        updates = await self._call(
            "getUpdates",
            {
                "offset": -self.updates_limit,
                "limit": self.updates_limit,
                "allowed_updates": json.dumps(["channel_post"]),
            },
            timeout=15.0,
        )

        posts = [
            update["channel_post"]
            for update in updates or []
            if isinstance(update, dict) and update.get("channel_post")
        ]
        username = (source.username or "").lower()
        posts = [p for p in posts if ((p.get("chat") or {}).get("username") or "").lower() == username]

        items: List[NewsItem] = []
        rejected = 0
        for post in posts[: self.posts_limit]:
            try:
                items.append(await self._to_item(post, source))
            except ValidationFailure:
                rejected += 1

        console.print(f"  [green]✓[/green] {escape(source.name)}: {len(items)} posts via Bot API")
        return SourceResult(
            source_id=source.id,
            strategy=self.strategy,
            url=self._masked_url("getUpdates"),
            success=True,
            items=items,
            scanned=len(posts),
            rejected=rejected,
        )

    async def _to_item(self, post: Dict[str, Any], source: SourceConfig) -> NewsItem:
        text = self.validate_text(post.get("text") or post.get("caption"), source)

        image_url = None
        photos = post.get("photo") or []
        if photos:
            image_url = await self.file_url(photos[-1].get("file_id", ""))

        views = post.get("views")
        return self.build_post(
            source,
            text=text,
            source_url=post_url(source.username, post.get("message_id", "")),
            raw_date=parse_timestamp(post.get("date")),
            image_url=image_url,
            views=(views, False) if isinstance(views, int) else None,
        )
