"""Sources management commands."""

from typing import List, Optional

import httpx
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..config import Config, SourceConfig, SourceKind, load_sources, save_sources

console = Console()
sources_app = typer.Typer(help="Manage RSS feeds and Telegram channels")


def _load(config: Config) -> List[SourceConfig]:
    try:
        return load_sources(config.sources_path)
    except FileNotFoundError:
        console.print("[red]Sources file not found. Run 'newsagg init' first.[/red]")
        raise typer.Exit(1)


def probe_url(source: SourceConfig, config: Config) -> str:
    """URL fetched when testing a source."""
    if source.kind == SourceKind.TELEGRAM:
        return config.config.telegram.scrape_url_template.format(username=source.username)
    return source.url


@sources_app.command("list")
def sources_list(
    family: Optional[str] = typer.Option(None, "--family", "-f", help="Only show this family"),
) -> None:
    """List all configured sources."""
    config = Config()
    sources = _load(config)
    if family:
        sources = [s for s in sources if s.family == family]

    if not sources:
        console.print("[yellow]No sources configured.[/yellow]")
        return

    table = Table(title="Configured Sources")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Family", style="magenta")
    table.add_column("Category", style="magenta")
    table.add_column("Priority", style="green")
    table.add_column("Enabled", style="yellow")
    table.add_column("Endpoint", style="blue")

    for source in sorted(sources, key=lambda s: (s.family, s.priority)):
        endpoint = f"@{source.username}" if source.kind == SourceKind.TELEGRAM else source.url
        table.add_row(
            source.id,
            escape(source.name),
            source.family,
            escape(source.category),
            str(source.priority),
            "✓" if source.enabled else "✗",
            escape(endpoint or ""),
        )

    console.print(table)


@sources_app.command("add")
def sources_add(
    source_id: str = typer.Option(..., "--id", help="Source id"),
    name: str = typer.Option(..., "--name", "-n", help="Source name"),
    kind: SourceKind = typer.Option(SourceKind.RSS, "--kind", "-k", help="rss or telegram"),
    family: Optional[str] = typer.Option(None, "--family", "-f", help="Cache family (defaults to the kind)"),
    url: Optional[str] = typer.Option(None, "--url", "-u", help="RSS feed URL"),
    username: Optional[str] = typer.Option(None, "--username", help="Telegram channel username"),
    category: str = typer.Option("Новости", "--category", "-c", help="Source category"),
    priority: int = typer.Option(100, "--priority", "-p", help="Lower values are fetched first"),
) -> None:
    """Add a new source."""
    config = Config()
    try:
        sources = load_sources(config.sources_path)
    except FileNotFoundError:
        sources = []

    if any(s.id == source_id for s in sources):
        console.print(f"[red]Source '{escape(source_id)}' already exists.[/red]")
        raise typer.Exit(1)

    try:
        new_source = SourceConfig(
            id=source_id,
            name=name,
            kind=kind,
            family=family or kind.value,
            url=url,
            username=username,
            category=category,
            priority=priority,
        )
    except ValidationError as e:
        console.print(f"[red]Invalid source: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    sources.append(new_source)
    save_sources(sources, config.sources_path)

    console.print(f"[green]✅ Added source: {escape(name)}[/green]")


@sources_app.command("remove")
def sources_remove(
    source_id: str = typer.Argument(..., help="Source id to remove"),
) -> None:
    """Remove a source."""
    config = Config()
    sources = _load(config)

    original_count = len(sources)
    sources = [s for s in sources if s.id != source_id]

    if len(sources) == original_count:
        console.print(f"[red]Source '{escape(source_id)}' not found.[/red]")
        raise typer.Exit(1)

    save_sources(sources, config.sources_path)
    console.print(f"[green]✅ Removed source: {escape(source_id)}[/green]")


@sources_app.command("test")
def sources_test(
    source_id: Optional[str] = typer.Argument(None, help="Source id to test (or test all)"),
) -> None:
    """Test feed and channel connectivity."""
    config = Config()
    sources = _load(config)

    if source_id:
        sources = [s for s in sources if s.id == source_id]
        if not sources:
            console.print(f"[red]Source '{escape(source_id)}' not found.[/red]")
            raise typer.Exit(1)

    headers = {"User-Agent": config.config.http.user_agent}
    with httpx.Client(timeout=10.0, headers=headers, follow_redirects=True) as client:
        for source in sources:
            label = escape(source.name)
            if not source.enabled:
                console.print(f"[yellow]⚠️  {label}: Disabled[/yellow]")
                continue

            try:
                response = client.get(probe_url(source, config))
                response.raise_for_status()
                console.print(f"[green]✅ {label}: OK ({response.status_code})[/green]")
            except httpx.HTTPError as e:
                console.print(f"[red]❌ {label}: Failed - {escape(str(e))}[/red]")
