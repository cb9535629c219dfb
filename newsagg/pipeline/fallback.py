"""Sticky primary/fallback strategy selection for a source family."""

from enum import Enum
from typing import Optional

from rich.console import Console
from rich.markup import escape

from ..config import SourceConfig
from ..ingestion import SourceAdapter, SourceResult

console = Console()


class ChainState(str, Enum):
    """Which strategy the chain is using."""

    PRIMARY_ACTIVE = "primary_active"
    DEGRADED = "degraded"


class FallbackChain:
    """
    Try a primary strategy, retry a secondary per source, degrade for good.

    While PRIMARY_ACTIVE each source goes to the primary; an empty result is
    retried with the secondary for that source only. When the secondary is
    empty as well the chain becomes DEGRADED, the fallback is asked for that
    source, and every later call goes straight to the fallback. Only
    `initialize()` (or `switch_mode()`) can bring the primary back.

    One chain is shared by all sources of a family.
    """

    def __init__(
        self,
        primary: SourceAdapter,
        fallback: SourceAdapter,
        secondary: Optional[SourceAdapter] = None,
    ) -> None:
        """
        Initialize fallback chain.

        Args:
            primary: Preferred strategy (its `check()` gates activation)
            fallback: Strategy used once degraded
            secondary: Per-source retry while the primary is active
                (defaults to `fallback`)
        """
        self.primary = primary
        self.fallback = fallback
        self.secondary = secondary or fallback
        self.state = ChainState.DEGRADED
        self.initialized = False

    @property
    def active(self) -> SourceAdapter:
        """Strategy currently serving requests."""
        return self.primary if self.state == ChainState.PRIMARY_ACTIVE else self.fallback

    @property
    def mode(self) -> str:
        """Human-readable label of the active strategy."""
        return self.active.label

    async def initialize(self) -> ChainState:
        """Activate the primary if its check passes, otherwise degrade."""
        if await self.primary.check():
            self.state = ChainState.PRIMARY_ACTIVE
            console.print(f"[green]Using {escape(self.primary.label)}[/green]")
        else:
            self.state = ChainState.DEGRADED
            console.print(f"[yellow]Switching to {escape(self.fallback.label)} (fallback)[/yellow]")
        self.initialized = True
        return self.state

    async def switch_mode(self) -> ChainState:
        """Re-evaluate the primary strategy."""
        return await self.initialize()

    async def fetch(self, source: SourceConfig) -> SourceResult:
        """Acquire `source` with the strategy the current state allows."""
        if not self.initialized:
            await self.initialize()

        if self.state == ChainState.DEGRADED:
            return await self.fallback.fetch(source)

        result = await self.primary.fetch(source)
        if result.items:
            return result

        console.print(
            f"[yellow]{escape(self.primary.label)} returned nothing for {escape(source.name)}, "
            f"trying {escape(self.secondary.label)}[/yellow]"
        )
        retry = await self.secondary.fetch(source)
        if retry.items:
            return retry

        self.state = ChainState.DEGRADED
        console.print(
            f"[red]{escape(self.primary.label)} presumed broken, "
            f"switching to {escape(self.fallback.label)}[/red]"
        )
        if self.fallback is self.secondary:
            return retry
        return await self.fallback.fetch(source)
