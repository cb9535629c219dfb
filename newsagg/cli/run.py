"""Refresh command implementation."""

import asyncio
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..config import Config
from ..models import NewsItem
from ..pipeline import NewsService

console = Console()


async def _refresh(service: NewsService, family: Optional[str]) -> None:
    await service.initialize()
    if family:
        await service.refresh(family)
    else:
        await service.refresh_all()


def print_items(title: str, items: List[NewsItem]) -> None:
    """Print cached items as a table."""
    table = Table(title=title)
    table.add_column("Published", style="dim")
    table.add_column("Source", style="cyan")
    table.add_column("Title")
    table.add_column("Views", style="green", justify="right")
    table.add_column("Image", style="yellow")

    for item in items:
        views = f"~{item.view_count}" if item.view_count_estimated else str(item.view_count)
        table.add_row(
            item.published_at,
            escape(item.source.name),
            escape(item.title),
            views,
            "✓" if item.image_url else "",
        )

    console.print(table)


def refresh_command(
    family: Optional[str] = typer.Option(
        None,
        "--family",
        "-f",
        help="Family to refresh (rss, telegram, federal). Default: all enabled families",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the cache payload as JSON"),
    limit: int = typer.Option(10, "--limit", "-l", help="Items shown per family", min=0),
) -> None:
    """Run one refresh cycle and show the resulting cache."""
    try:
        config = Config()
        service = NewsService.from_config(config)

        if family:
            service.family(family)

        asyncio.run(_refresh(service, family))

        families = [family] if family else list(service.families)
        view = service.view
        if as_json:
            payload = {
                name: view.get_cached_news(name).model_dump(by_alias=True, mode="json")
                for name in families
            }
            payload["combined"] = [
                item.model_dump(by_alias=True, mode="json")
                for item in view.get_combined(config.config.combined_max_items)
            ]
            console.print_json(data=payload)
            return

        for name in families:
            stats = view.get_stats(name)
            print_items(
                f"{name}: {stats.total} items ({stats.mode or 'n/a'})",
                view.get_news(name, limit=limit),
            )

    except FileNotFoundError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        console.print("Run 'newsagg init' first.")
        raise typer.Exit(1)
    except KeyError as e:
        console.print(f"[red]{escape(str(e.args[0]) if e.args else str(e))}[/red]")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Refresh interrupted by user[/yellow]")
        raise typer.Exit(1)
