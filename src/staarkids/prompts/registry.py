"""Prompt Registry - Markdown prompt templates for the LLM path.

Prompts live under the project-level ``prompts/`` directory, keyed by
their path without the ``.md`` suffix. Placeholders are lowercase
``{name}`` tokens; JSON braces in a prompt are left alone.

Usage:
    from staarkids.prompts.registry import get_prompt

    prompt = get_prompt(
        "generation/authentic_question",
        strict=True,
        grade="4",
        subject="math",
        teks_standard="4.5D",
        category="Geometry and Measurement",
        examples=examples_text,
    )
"""

from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)

# Default prompts directory (relative to project root)
PROMPTS_DIR = Path(__file__).parent.parent.parent.parent / "prompts"

PLACEHOLDER = re.compile(r"\{([a-z_][a-z0-9_]*)\}")


class PromptVariableError(KeyError):
    """Raised in strict mode when a placeholder has no value."""

    pass


def _read_prompt(key: str) -> str:
    """Raises FileNotFoundError for an unknown key."""
    file_path = PROMPTS_DIR / f"{key}.md"
    if not file_path.exists():
        raise FileNotFoundError(f"Prompt not found: {key} (looked at {file_path})")

    return file_path.read_text(encoding="utf-8")


@lru_cache(maxsize=32)
def _read_prompt_cached(key: str) -> str:
    return _read_prompt(key)


def prompt_variables(key: str) -> list[str]:
    """Placeholder names used by a prompt, sorted."""
    return sorted(set(PLACEHOLDER.findall(_read_prompt_cached(key))))


def get_prompt(key: str, use_cache: bool = True, strict: bool = False, **variables: object) -> str:
    """Load a prompt and fill its placeholders in a single pass.

    Values are inserted verbatim, so a value containing ``{grade}`` is not
    substituted again. Placeholders without a value stay as they are
    unless ``strict`` is set.

    Raises:
        FileNotFoundError: If the prompt file doesn't exist
        PromptVariableError: In strict mode, if a placeholder has no value
    """
    content = _read_prompt_cached(key) if use_cache else _read_prompt(key)

    if strict:
        missing = sorted(set(PLACEHOLDER.findall(content)) - set(variables))
        if missing:
            raise PromptVariableError(f"Prompt {key} is missing values for: {', '.join(missing)}")

    def fill(match: re.Match[str]) -> str:
        name = match.group(1)
        return str(variables[name]) if name in variables else match.group(0)

    return PLACEHOLDER.sub(fill, content)


def list_prompts() -> list[str]:
    """All prompt keys, sorted."""
    if not PROMPTS_DIR.exists():
        logger.warning("prompts_dir_not_found", path=str(PROMPTS_DIR))
        return []

    return sorted(
        path.relative_to(PROMPTS_DIR).with_suffix("").as_posix()
        for path in PROMPTS_DIR.rglob("*.md")
    )


def clear_cache() -> None:
    """Clear the prompt cache."""
    _read_prompt_cached.cache_clear()
