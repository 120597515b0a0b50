"""Application configuration loader.

Loads centralized configuration from data/config/app_config_v1.yaml
with fallback to built-in defaults.

Usage:
    from staarkids.config.app_config import load_app_config

    config = load_app_config()
    limit = config.generation.max_count
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
CONFIG_FILE = Path("data/config/app_config_v1.yaml")


@dataclass
class LLMSettings:
    """Settings for the optional LLM-backed question path."""

    enabled: bool = False
    provider: str = "openai"
    base_url: str | None = None
    model: str = "gpt-4o-mini"
    api_key_env: str | None = "OPENAI_API_KEY"
    temperature: float = 0.6
    max_tokens: int = 1000

    def get_api_key(self) -> str | None:
        """Get API key from environment variable."""
        if self.api_key_env:
            return os.environ.get(self.api_key_env)
        return None


@dataclass
class GenerationSettings:
    """Limits for the question generation service."""

    max_count: int = 20
    world_class_max: int = 5
    authentic_max: int = 5
    default_confidence: float = 0.85


@dataclass
class QualitySettings:
    """Thresholds for quality control."""

    pass_threshold: float = 0.8


@dataclass
class ModelSettings:
    """Simulated model manager settings."""

    optimize_interval_seconds: int = 300
    history_limit: int = 1000


@dataclass
class AppConfig:
    """Application-wide configuration."""

    llm: LLMSettings = field(default_factory=LLMSettings)
    generation: GenerationSettings = field(default_factory=GenerationSettings)
    quality: QualitySettings = field(default_factory=QualitySettings)
    models: ModelSettings = field(default_factory=ModelSettings)
    paths: dict[str, str] = field(default_factory=dict)

    @property
    def db_path(self) -> Path:
        """Path to the SQLite database file."""
        return Path(self.paths.get("db_path", "db/staarkids.db"))


# Module-level cache
_cached_config: AppConfig | None = None


def _get_defaults() -> dict[str, Any]:
    """Get default configuration values."""
    return {
        "llm": {
            "enabled": False,
            "provider": "openai",
            "base_url": None,
            "model": "gpt-4o-mini",
            "api_key_env": "OPENAI_API_KEY",
            "temperature": 0.6,
            "max_tokens": 1000,
        },
        "generation": {
            "max_count": 20,
            "world_class_max": 5,
            "authentic_max": 5,
            "default_confidence": 0.85,
        },
        "quality": {
            "pass_threshold": 0.8,
        },
        "models": {
            "optimize_interval_seconds": 300,
            "history_limit": 1000,
        },
        "paths": {
            "db_path": "db/staarkids.db",
        },
    }


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object."""
    defaults = _get_defaults()

    llm_data = {**defaults["llm"], **(data.get("llm") or {})}
    llm = LLMSettings(
        enabled=bool(llm_data["enabled"]),
        provider=llm_data["provider"],
        base_url=llm_data.get("base_url"),
        model=llm_data["model"],
        api_key_env=llm_data.get("api_key_env"),
        temperature=float(llm_data["temperature"]),
        max_tokens=int(llm_data["max_tokens"]),
    )

    gen_data = {**defaults["generation"], **(data.get("generation") or {})}
    generation = GenerationSettings(
        max_count=int(gen_data["max_count"]),
        world_class_max=int(gen_data["world_class_max"]),
        authentic_max=int(gen_data["authentic_max"]),
        default_confidence=float(gen_data["default_confidence"]),
    )

    quality_data = {**defaults["quality"], **(data.get("quality") or {})}
    quality = QualitySettings(pass_threshold=float(quality_data["pass_threshold"]))

    models_data = {**defaults["models"], **(data.get("models") or {})}
    models = ModelSettings(
        optimize_interval_seconds=int(models_data["optimize_interval_seconds"]),
        history_limit=int(models_data["history_limit"]),
    )

    paths = {**defaults["paths"], **(data.get("paths") or {})}

    return AppConfig(
        llm=llm,
        generation=generation,
        quality=quality,
        models=models,
        paths=paths,
    )


def load_app_config(force_reload: bool = False) -> AppConfig:
    """Load application config with fallback to defaults.

    Args:
        force_reload: If True, ignore cached config and reload from file.

    Returns:
        AppConfig object with all settings.
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    data: dict[str, Any]

    if CONFIG_FILE.exists():
        logger.debug("loading_app_config", source=str(CONFIG_FILE))
        data = yaml.safe_load(CONFIG_FILE.read_text(encoding="utf-8")) or {}
    else:
        logger.info("using_default_config")
        data = _get_defaults()

    _cached_config = _parse_config(data)
    return _cached_config


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None
