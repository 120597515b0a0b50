"""Authentic-pattern STAAR question generator.

Resolution order:
1. A matching item from the bundled bank
2. An LLM-written item prompted with two bank examples
3. A random bank item of the grade, labelled with the requested TEKS/category
"""

from __future__ import annotations

import random
from typing import Any

import structlog

from staarkids.core.authentic_bank import BankItem, find_items
from staarkids.core.question import CHOICE_LETTERS, AnswerChoice, Question, strip_letter_prefix
from staarkids.core.teks import UnknownTeksError, get_random_teks_standard
from staarkids.core.visual_generator import attach_visual
from staarkids.llm.client import LLMClient, LLMError, LLMResponseError, get_configured_client
from staarkids.prompts.registry import get_prompt

logger = structlog.get_logger(__name__)

USE_CONFIGURED = object()


class AuthenticGenerationError(Exception):
    """Raised when no authentic item exists for a grade and subject."""

    pass


def _from_bank_item(item: BankItem, method: str = "authentic") -> Question:
    question = Question(
        grade=item.grade,
        subject=item.subject,  # type: ignore[arg-type]
        teks_standard=item.teks_standard,
        question_text=item.question_text,
        answer_choices=item.lettered_choices(),
        correct_answer=item.correct_answer,
        explanation=item.explanation
        or f"Authentic STAAR question testing {item.teks_standard}: {item.category}",
        difficulty=item.difficulty,  # type: ignore[arg-type]
        category=item.category,
        year=item.year,
        method=method,
    )
    return attach_visual(question)


def _parse_llm_question(
    data: dict[str, Any],
    grade: int,
    subject: str,
    teks_standard: str,
    category: str | None,
) -> Question:
    """Turn the model's JSON reply into a Question.

    Raises:
        LLMResponseError: If the reply is missing fields or malformed
    """
    text = data.get("question")
    raw_choices = data.get("choices") or []
    correct = str(data.get("correct", "")).strip().upper()[:1]

    if not text or len(raw_choices) != len(CHOICE_LETTERS):
        raise LLMResponseError("LLM question needs text and exactly 4 choices")
    if correct not in CHOICE_LETTERS:
        raise LLMResponseError(f"LLM returned invalid correct answer: {data.get('correct')!r}")

    choices = [
        AnswerChoice(id=letter, text=strip_letter_prefix(str(choice)))
        for letter, choice in zip(CHOICE_LETTERS, raw_choices)
    ]
    if len({c.text for c in choices}) != len(choices):
        raise LLMResponseError("LLM returned duplicate answer choices")

    difficulty = data.get("difficulty")
    question = Question(
        grade=grade,
        subject=subject,  # type: ignore[arg-type]
        teks_standard=data.get("teksStandard") or teks_standard,
        question_text=text,
        answer_choices=choices,
        correct_answer=correct,
        explanation=data.get("explanation") or "",
        difficulty=difficulty if difficulty in ("easy", "medium", "hard") else "medium",
        category=data.get("category") or category,
        method="authentic-llm",
    )
    return attach_visual(question)


def _generate_with_llm(
    client: LLMClient,
    grade: int,
    subject: str,
    teks_standard: str,
    category: str | None,
) -> Question:
    examples = find_items(grade, subject)[:2]
    user_prompt = get_prompt(
        "generation/authentic_question",
        strict=True,
        subject=subject,
        grade=str(grade),
        teks_standard=teks_standard,
        category=category or "General",
        examples="\n\n".join(e.example_text() for e in examples),
    )
    system_prompt = get_prompt("generation/authentic_system")

    data = client.simple_json(system_prompt, user_prompt)
    return _parse_llm_question(data, grade, subject, teks_standard, category)


def generate_authentic_question(
    grade: int,
    subject: str,
    teks_standard: str | None = None,
    category: str | None = None,
    client: Any = USE_CONFIGURED,
    rng: random.Random | None = None,
) -> Question:
    """Generate one authentic-pattern question.

    Args:
        grade: Grade level (3-5)
        subject: "math" or "reading"
        teks_standard: Restrict to this TEKS code
        category: Restrict to this reporting category
        client: LLM client; defaults to the configured one, None disables
        rng: Random source

    Raises:
        AuthenticGenerationError: If the bank has nothing for the grade/subject
    """
    rng = rng or random.Random()

    matches = find_items(grade, subject, category, teks_standard)
    if matches:
        item = rng.choice(matches)
        logger.debug("authentic_bank_hit", grade=grade, teks=item.teks_standard)
        return _from_bank_item(item)

    if client is USE_CONFIGURED:
        client = get_configured_client()

    if teks_standard is None:
        try:
            teks_standard = get_random_teks_standard(grade, subject, category, rng)
        except UnknownTeksError:
            teks_standard = get_random_teks_standard(grade, subject, None, rng)

    if client is not None:
        try:
            question = _generate_with_llm(client, grade, subject, teks_standard, category)
            logger.info("authentic_llm_question", grade=grade, subject=subject, teks=teks_standard)
            return question
        except LLMError as e:
            logger.warning("authentic_llm_failed", error=str(e))

    pool = find_items(grade, subject)
    if not pool:
        raise AuthenticGenerationError(f"No authentic items for grade {grade} {subject}")

    question = _from_bank_item(rng.choice(pool), method="authentic-fallback")
    question.teks_standard = teks_standard
    if category:
        question.category = category
    return question
