"""Tests for app configuration.

Tests the configuration loading and fallbacks.
"""

from pathlib import Path

from staarkids.config.app_config import (
    CONFIG_FILE,
    AppConfig,
    clear_config_cache,
    load_app_config,
)


def write_config(root: Path, text: str) -> None:
    path = root / CONFIG_FILE
    path.parent.mkdir(parents=True)
    path.write_text(text)


class TestLoadAppConfig:
    """Tests for load_app_config function."""

    def test_load_config_from_yaml(self):
        """Loads the project's app_config_v1.yaml."""
        config = load_app_config()
        assert isinstance(config, AppConfig)
        assert config.generation.max_count == 20
        assert config.llm.enabled is False

    def test_defaults_without_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = load_app_config()

        assert config.generation.world_class_max == 5
        assert config.generation.authentic_max == 5
        assert config.generation.default_confidence == 0.85
        assert config.quality.pass_threshold == 0.8
        assert config.models.optimize_interval_seconds == 300
        assert config.db_path == Path("db/staarkids.db")

    def test_partial_file_merges_defaults(self, tmp_path, monkeypatch):
        write_config(
            tmp_path,
            "generation:\n  max_count: 7\nquality:\n  pass_threshold: 0.9\n"
            "paths:\n  db_path: other/test.db\n",
        )
        monkeypatch.chdir(tmp_path)

        config = load_app_config()

        assert config.generation.max_count == 7
        assert config.generation.world_class_max == 5
        assert config.quality.pass_threshold == 0.9
        assert config.llm.model == "gpt-4o-mini"
        assert config.db_path == Path("other/test.db")

    def test_empty_file(self, tmp_path, monkeypatch):
        write_config(tmp_path, "")
        monkeypatch.chdir(tmp_path)
        assert load_app_config().generation.max_count == 20


class TestCache:
    """Tests for config caching."""

    def test_cached(self):
        assert load_app_config() is load_app_config()

    def test_clear_cache(self):
        first = load_app_config()
        clear_config_cache()
        assert load_app_config() is not first

    def test_force_reload(self):
        first = load_app_config()
        assert load_app_config(force_reload=True) is not first
