"""Per-family refresh pipeline wiring adapters, fallback chains and the cache."""

import asyncio
import time
from typing import Dict, List, Optional, Sequence, Union

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..config import Config, ConfigModel, FamilyConfig, SourceConfig, SourceKind
from ..ingestion import (
    ImageResolver,
    PageFetcher,
    RegionChecker,
    RSSAdapter,
    SourceAdapter,
    SourceResult,
    TelegramBotAdapter,
    TelegramRSSProxyAdapter,
    TelegramScrapeAdapter,
)
from ..models import CacheSnapshot
from .aggregator import AggregationEngine
from .cache import CacheStore, CacheView
from .fallback import FallbackChain

console = Console()

Strategy = Union[SourceAdapter, FallbackChain]


class FamilyPipeline:
    """Runtime state of one family: its sources, strategy, engine and refresh guard."""

    def __init__(
        self,
        name: str,
        config: FamilyConfig,
        sources: Sequence[SourceConfig],
        strategy: Strategy,
    ) -> None:
        self.name = name
        self.config = config
        self.sources = list(sources)
        self.strategy = strategy
        self.engine = AggregationEngine(max_items=config.max_items, dedup=config.dedup)
        self.lock = asyncio.Lock()
        self.last_results: List[SourceResult] = []
        self.last_duration: float = 0.0

    @property
    def chain(self) -> Optional[FallbackChain]:
        """Fallback chain, when the family uses one."""
        return self.strategy if isinstance(self.strategy, FallbackChain) else None

    @property
    def mode(self) -> str:
        """Label of the strategy currently in use."""
        if isinstance(self.strategy, FallbackChain):
            return self.strategy.mode
        return self.strategy.label


class NewsService:
    """Refresh source families and keep their snapshots in a CacheStore."""

    def __init__(
        self,
        config: ConfigModel,
        sources: Sequence[SourceConfig],
        *,
        bot_token: Optional[str] = None,
        fetcher: Optional[PageFetcher] = None,
        store: Optional[CacheStore] = None,
        strategies: Optional[Dict[str, Strategy]] = None,
    ) -> None:
        """
        Initialize news service.

        Args:
            config: Loaded configuration
            sources: All configured sources
            bot_token: Telegram bot token (None forces the fallback strategy)
            fetcher: Page fetcher shared by every adapter
            store: Cache store (a new one by default)
            strategies: Per-family strategy overrides
        """
        self.config = config
        self.bot_token = bot_token
        self.fetcher = fetcher or PageFetcher(
            timeout=config.http.timeout,
            user_agent=config.http.user_agent,
        )
        strategies = strategies or {}

        self.families: Dict[str, FamilyPipeline] = {}
        for name, family_config in config.families.items():
            if not family_config.enabled:
                continue
            family_sources = [
                s for s in sources
                if s.enabled and s.family == name and s.kind == family_config.kind
            ]
            family_sources.sort(key=lambda s: s.priority)
            strategy = strategies.get(name) or self._build_strategy(family_config)
            self.families[name] = FamilyPipeline(name, family_config, family_sources, strategy)

        self.store = store or CacheStore(self.families)
        self.view = CacheView(self.store)

    @classmethod
    def from_config(cls, config: Config, **kwargs) -> "NewsService":
        """Build a service from a Config manager (config.yaml + sources.yaml)."""
        return cls(config.config, config.get_sources(), bot_token=config.get_bot_token(), **kwargs)

    def _build_strategy(self, family: FamilyConfig) -> Strategy:
        """Create the adapter (or chain) for a family."""
        if family.kind == SourceKind.RSS:
            return RSSAdapter(
                self.fetcher,
                ImageResolver(self.fetcher, page_timeout=self.config.http.page_timeout),
                RegionChecker(self.fetcher, timeout=self.config.http.page_timeout),
                description_limit=family.description_limit,
                entries_scanned=family.entries_scanned,
                items_per_source=family.items_per_source,
                language_filter=family.language_filter,
            )

        telegram = self.config.telegram
        options = dict(
            posts_limit=telegram.posts_limit,
            min_text_length=telegram.min_text_length,
            description_limit=family.description_limit,
        )
        return FallbackChain(
            primary=TelegramBotAdapter(self.bot_token, self.fetcher, api_base=telegram.api_base, **options),
            secondary=TelegramRSSProxyAdapter(self.fetcher, url_template=telegram.rss_proxy_template, **options),
            fallback=TelegramScrapeAdapter(self.fetcher, url_template=telegram.scrape_url_template, **options),
        )

    def family(self, name: str) -> FamilyPipeline:
        """Look up an enabled family."""
        try:
            return self.families[name]
        except KeyError:
            raise KeyError(f"Unknown or disabled family: {name}") from None

    async def initialize(self, name: Optional[str] = None) -> None:
        """Run fallback-chain initialization for one family, or for every family that has a chain."""
        pipelines = [self.family(name)] if name else list(self.families.values())
        for pipeline in pipelines:
            if pipeline.chain is not None:
                console.print(f"[bold]Initializing {escape(pipeline.name)} strategies...[/bold]")
                await pipeline.chain.initialize()

    async def switch_mode(self, name: str) -> str:
        """Re-evaluate the primary strategy of a family; returns the new mode."""
        pipeline = self.family(name)
        if pipeline.chain is not None:
            await pipeline.chain.switch_mode()
        return pipeline.mode

    async def trigger_refresh(self, name: str) -> CacheSnapshot:
        """Re-run strategy initialization, then refresh immediately."""
        await self.switch_mode(name)
        return await self.refresh(name)

    async def refresh(self, name: str) -> CacheSnapshot:
        """
        Run one refresh cycle for a family and install the new snapshot.

        A cycle already running for the family makes this call a no-op that
        returns the current snapshot. Errors (including the cycle time budget
        running out) propagate and leave the current snapshot in place.
        """
        pipeline = self.family(name)
        if pipeline.lock.locked():
            console.print(f"[yellow]Refresh of {escape(name)} already in progress, skipping[/yellow]")
            return self.store.get(name)

        async with pipeline.lock:
            console.print(f"\n[bold blue]Refreshing {escape(name)} ({escape(pipeline.mode)})[/bold blue]")
            start = time.time()
            results = await asyncio.wait_for(
                self._collect(pipeline),
                timeout=self.config.cycle_timeout_seconds,
            )
            snapshot = pipeline.engine.aggregate((r.items for r in results), name, mode=pipeline.mode)
            self.store.replace(snapshot)

            pipeline.last_results = results
            pipeline.last_duration = time.time() - start
            print_refresh_summary(pipeline, snapshot)
            return snapshot

    async def refresh_all(self) -> Dict[str, CacheSnapshot]:
        """Refresh every enabled family in turn."""
        return {name: await self.refresh(name) for name in self.families}

    async def _collect(self, pipeline: FamilyPipeline) -> List[SourceResult]:
        """Fetch the family's sources one at a time with a pause in between."""
        results: List[SourceResult] = []
        delay = pipeline.config.request_delay_seconds
        for index, source in enumerate(pipeline.sources):
            if index and delay:
                await asyncio.sleep(delay)
            results.append(await pipeline.strategy.fetch(source))
        return results


def print_refresh_summary(pipeline: FamilyPipeline, snapshot: CacheSnapshot) -> None:
    """Print per-source results of the last refresh."""
    table = Table(title=f"{pipeline.name} refresh")
    table.add_column("Source", style="cyan")
    table.add_column("Strategy", style="magenta")
    table.add_column("Status", style="bold")
    table.add_column("Items", style="green")
    table.add_column("Filtered", style="yellow")
    table.add_column("Details", style="dim")

    names = {s.id: s.name for s in pipeline.sources}
    for result in pipeline.last_results:
        status = "[green]✓[/green]" if result.success else "[red]✗[/red]"
        details = escape(result.error or result.url or "")
        table.add_row(
            escape(names.get(result.source_id, result.source_id)),
            result.strategy,
            status,
            str(result.item_count),
            str(result.rejected),
            details,
        )

    console.print(table)
    with_images = sum(1 for item in snapshot.items if item.image_url)
    console.print(
        f"[green]Cached {len(snapshot.items)} items for {escape(pipeline.name)} "
        f"(with images: {with_images}) in {pipeline.last_duration:.1f}s[/green]"
    )
