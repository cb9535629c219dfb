"""Tests for configuration models and the YAML loader."""

import pytest
import yaml
from pydantic import ValidationError

from newsagg.cli.init import create_default_sources
from newsagg.config import (
    Config,
    ConfigModel,
    DedupPolicy,
    SourceConfig,
    SourceKind,
    load_config,
    load_sources,
    save_config,
    save_sources,
)


def test_default_families():
    config = ConfigModel()

    assert set(config.families) == {"rss", "telegram", "federal"}
    assert config.families["rss"].dedup == DedupPolicy.URL
    assert config.families["telegram"].kind == SourceKind.TELEGRAM
    assert config.families["telegram"].dedup == DedupPolicy.URL_OR_DESCRIPTION
    assert config.families["federal"].dedup == DedupPolicy.TITLE


def test_username_and_base_url_are_normalized():
    source = SourceConfig(id="c", name="C", kind="telegram", username="@chan")
    assert source.username == "chan"

    site = SourceConfig(id="s", name="S", url="https://s.ru/rss", base_url="https://s.ru/")
    assert site.base_url == "https://s.ru"


def test_rss_source_requires_url():
    with pytest.raises(ValidationError):
        SourceConfig(id="s", name="S")


def test_telegram_source_requires_username():
    with pytest.raises(ValidationError):
        SourceConfig(id="c", name="C", kind="telegram")


def test_round_trip(tmp_path):
    config_path = tmp_path / "config.yaml"
    sources_path = tmp_path / "sources.yaml"
    sources = create_default_sources()

    save_config(ConfigModel(cycle_timeout_seconds=120), config_path)
    save_sources(sources, sources_path)

    assert load_config(config_path).cycle_timeout_seconds == 120
    loaded = load_sources(sources_path)
    assert [s.id for s in loaded] == [s.id for s in sources]
    assert "Нижний Новгород" in sources_path.read_text(encoding="utf-8")


def test_invalid_sources_are_skipped(tmp_path):
    sources_path = tmp_path / "sources.yaml"
    sources_path.write_text(
        yaml.safe_dump({"sources": [{"id": "bad", "name": "Bad"}, {"id": "ok", "name": "Ok", "url": "https://ok.ru/rss"}]}),
        encoding="utf-8",
    )

    assert [s.id for s in load_sources(sources_path)] == ["ok"]


def test_missing_files(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "config.yaml")
    with pytest.raises(FileNotFoundError):
        load_sources(tmp_path / "sources.yaml")


def test_invalid_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("families: [unclosed", encoding="utf-8")

    with pytest.raises(ValueError):
        load_config(path)


def test_bot_token_prefers_environment(tmp_path, monkeypatch):
    path = tmp_path / "config.yaml"
    save_config(ConfigModel(telegram={"bot_token": "from-file"}), path)
    config = Config(path)

    monkeypatch.delenv("TELEGRAM_BOT_TOKEN", raising=False)
    assert config.get_bot_token() == "from-file"

    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "from-env")
    assert config.get_bot_token() == "from-env"


def test_default_sources_cover_every_family():
    families = {s.family for s in create_default_sources()}

    assert families == {"rss", "telegram", "federal"}
