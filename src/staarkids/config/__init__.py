"""Configuration package for the StaarKids generation service."""

from staarkids.config.app_config import (
    AppConfig,
    GenerationSettings,
    LLMSettings,
    ModelSettings,
    QualitySettings,
    clear_config_cache,
    load_app_config,
)

__all__ = [
    "AppConfig",
    "GenerationSettings",
    "LLMSettings",
    "ModelSettings",
    "QualitySettings",
    "clear_config_cache",
    "load_app_config",
]
