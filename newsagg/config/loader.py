"""Configuration loader."""

import os
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from .models import ConfigModel, SourceConfig

console = Console()


class Config:
    """Configuration manager."""

    def __init__(self, config_path: Optional[Path] = None) -> None:
        """Initialize config manager."""
        if config_path is None:
            config_path = Path.home() / ".config" / "newsagg" / "config.yaml"
        self.config_path = config_path
        self._config: Optional[ConfigModel] = None

    @property
    def config(self) -> ConfigModel:
        """Get loaded config."""
        if self._config is None:
            self._config = load_config(self.config_path)
        return self._config

    @property
    def sources_path(self) -> Path:
        """Get the sources file next to the config file."""
        return self.config_path.parent / "sources.yaml"

    def get_sources(self) -> List[SourceConfig]:
        """Load configured sources."""
        return load_sources(self.sources_path)

    def get_bot_token(self) -> Optional[str]:
        """Get the Telegram bot token, preferring the environment."""
        telegram = self.config.telegram
        if telegram.bot_token_env:
            token = os.environ.get(telegram.bot_token_env)
            if token:
                return token
        return telegram.bot_token


def load_config(config_path: Path) -> ConfigModel:
    """Load configuration from YAML file."""
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            config_data = yaml.safe_load(f)

        if config_data is None:
            config_data = {}

        return ConfigModel(**config_data)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in config file: {e}")
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}")


def load_sources(sources_path: Path) -> List[SourceConfig]:
    """Load sources from YAML file."""
    if not sources_path.exists():
        raise FileNotFoundError(f"Sources file not found: {sources_path}")

    try:
        with open(sources_path, encoding="utf-8") as f:
            sources_data = yaml.safe_load(f)

        if sources_data is None or "sources" not in sources_data:
            return []

        sources = []
        for source_data in sources_data["sources"] or []:
            try:
                sources.append(SourceConfig(**source_data))
            except ValidationError as e:
                console.print(
                    f"[yellow]Skipping invalid source {escape(str(source_data.get('id', 'unknown')))}: "
                    f"{escape(str(e))}[/yellow]"
                )

        return sources
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in sources file: {e}")


def save_config(config: ConfigModel, config_path: Path) -> None:
    """Save configuration to YAML file."""
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w", encoding="utf-8") as f:
        yaml.safe_dump(
            config.model_dump(mode="json"),
            f,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )


def save_sources(sources: List[SourceConfig], sources_path: Path) -> None:
    """Save sources to YAML file."""
    sources_path.parent.mkdir(parents=True, exist_ok=True)

    sources_data = {"sources": [s.model_dump(mode="json", exclude_none=True) for s in sources]}

    with open(sources_path, "w", encoding="utf-8") as f:
        yaml.safe_dump(sources_data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
