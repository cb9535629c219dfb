"""Watch command implementation."""

import asyncio

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from ..config import Config
from ..pipeline import NewsService, RefreshScheduler

console = Console()


def watch_command() -> None:
    """Refresh every enabled family on its schedule until interrupted."""
    try:
        config = Config()
        service = NewsService.from_config(config)
    except FileNotFoundError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        console.print("Run 'newsagg init' first.")
        raise typer.Exit(1)

    scheduler = RefreshScheduler(service)
    lines = [
        f"{escape(job.family)}: every {job.interval / 60:g} min, first run after {job.initial_delay:g}s"
        for job in scheduler.jobs
    ]
    console.print(Panel("\n".join(lines) or "No enabled families", title="📰 Refresh schedule", style="blue"))

    if not service.bot_token:
        console.print("[yellow]No Telegram bot token set; Telegram channels use the fallback strategies[/yellow]")

    try:
        asyncio.run(scheduler.run_forever())
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopped by user[/yellow]")
