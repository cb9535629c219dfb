"""Init command implementation."""

from pathlib import Path
from typing import List

import typer
from rich.console import Console
from rich.panel import Panel

from ..config import ConfigModel, RegionCheckConfig, SourceConfig, SourceKind, save_config, save_sources

console = Console()

REGION = "Нижний Новгород"


def create_default_sources() -> List[SourceConfig]:
    """Create default Nizhny Novgorod sources."""
    regional = [
        SourceConfig(
            id="vremyan",
            name="Время Н",
            url="https://www.vremyan.ru/rss/news.rss",
            base_url="https://www.vremyan.ru",
            category=REGION,
            priority=1,
        ),
        SourceConfig(
            id="niann",
            name='НИА "Нижний Новгород"',
            url="https://www.niann.ru/rss.xml",
            base_url="https://www.niann.ru",
            category=REGION,
            priority=2,
        ),
        SourceConfig(
            id="nta_pfo",
            name="НТА Приволжье",
            url="https://nta-pfo.ru/rss/",
            base_url="https://nta-pfo.ru",
            category=REGION,
            priority=3,
            region_check=RegionCheckConfig(fail_open=False),
        ),
        SourceConfig(
            id="vgoroden",
            name="В городе N",
            url="https://www.vgoroden.ru/rss/",
            base_url="https://www.vgoroden.ru",
            category=REGION,
            priority=4,
        ),
    ]

    channels = [
        ("nn_ru", "Новости Нижнего Новгорода | NN.RU", "Новости"),
        ("moynnov", "Мой Нижний Новгород", "Новости"),
        ("nn_obl", "ЧП Нижний Новгород", "ЧП и происшествия"),
        ("mynnovgorod", "Мой Нижний Новгород", "Городские новости"),
        ("bez_cenz_nn", "Нижний Новгород БЕЗ ЦЕНЗУРЫ", "Новости"),
    ]
    telegram = [
        SourceConfig(
            id=username,
            name=name,
            kind=SourceKind.TELEGRAM,
            family="telegram",
            username=username,
            category=category,
            priority=index,
        )
        for index, (username, name, category) in enumerate(channels, start=1)
    ]

    feeds = [
        ("tass", "ТАСС", "https://tass.com/rss/v2.xml", "general"),
        ("rt_russia", "RT Россия", "https://rt.com/rss/russia/", "general"),
        ("ria", "РИА Новости", "https://ria.ru/export/rss2/index.xml", "general"),
        ("mk_russia", "Московский Комсомолец", "https://www.mk.ru/rss/index.xml", "general"),
        ("rg", "Российская газета", "https://rg.ru/xml/index.xml", "politics"),
    ]
    federal = [
        SourceConfig(
            id=source_id,
            name=name,
            family="federal",
            url=url,
            category=category,
            priority=index,
            fetch_page_images=False,
        )
        for index, (source_id, name, url, category) in enumerate(feeds, start=1)
    ]

    return regional + telegram + federal


def init_command(
    config_dir: Path = typer.Option(
        Path.home() / ".config" / "newsagg",
        "--config-dir",
        "-c",
        help="Configuration directory",
    ),
    seed_sources: bool = typer.Option(
        True,
        "--seed-sources/--no-seed-sources",
        help="Seed default Nizhny Novgorod sources",
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing files"),
) -> None:
    """Initialize aggregator configuration."""
    console.print(Panel.fit("📰 News Aggregator - Initialization", style="bold blue"))

    config_dir.mkdir(parents=True, exist_ok=True)
    config_path = config_dir / "config.yaml"
    sources_path = config_dir / "sources.yaml"

    if not force and (config_path.exists() or sources_path.exists()):
        console.print(f"[red]Configuration already exists in {config_dir}. Use --force to overwrite.[/red]")
        raise typer.Exit(1)

    save_config(ConfigModel(), config_path)
    console.print(f"✅ Created config: {config_path}")

    if seed_sources:
        sources = create_default_sources()
        save_sources(sources, sources_path)
        console.print(f"✅ Created sources: {sources_path} (seeded with {len(sources)} sources)")
    else:
        save_sources([], sources_path)
        console.print(f"✅ Created sources: {sources_path} (empty)")

    console.print(
        Panel(
            f"[green]✅ Aggregator initialized successfully![/green]\n\n"
            f"Configuration: {config_path}\n"
            f"Sources: {sources_path}\n\n"
            f"Next steps:\n"
            f"1. Optionally set a bot token: [bold]export TELEGRAM_BOT_TOKEN=your_token[/bold]\n"
            f"2. Run one refresh: [bold]newsagg refresh[/bold]\n"
            f"3. Keep refreshing: [bold]newsagg watch[/bold]",
            style="green",
        )
    )
