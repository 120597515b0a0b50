"""Question generation service.

Single entry point that picks a generation path by priority:
1. World-class ensemble (simulated models), when requested
2. Authentic-pattern items, when requested
3. Standard generation (efficient templates mixed with diverse items)

A path that raises is logged and the next one is tried.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any

import structlog

from staarkids.config.app_config import load_app_config
from staarkids.core.authentic_generator import (
    USE_CONFIGURED,
    AuthenticGenerationError,
    generate_authentic_question,
)
from staarkids.core.diverse_generator import (
    QUESTION_TYPE_CATEGORIES,
    generate_question_by_type,
    question_types_for,
)
from staarkids.core.model_manager import (
    ModelManager,
    UnknownModelError,
    WorldClassRequest,
    get_model_manager,
)
from staarkids.core.question import VALID_GRADES, VALID_SUBJECTS, Question
from staarkids.core.teks import category_for_teks
from staarkids.core.template_generator import (
    EFFICIENT_QUESTION_TEMPLATES,
    TemplateError,
    generate_efficient_question,
)
from staarkids.db.questions_repository import insert_questions

logger = structlog.get_logger(__name__)

METHOD_WORLD_CLASS = "world-class-ensemble"
METHOD_AUTHENTIC = "authentic-staar"
METHOD_STANDARD = "standard"


class InvalidGenerationRequest(Exception):
    """Raised when a request has an unsupported grade, subject or count."""

    pass


@dataclass
class GenerationRequest:
    """What to generate."""

    grade: int
    subject: str
    count: int = 1
    category: str | None = None
    teks_standard: str | None = None
    include_visual: bool = True
    use_world_class: bool = False
    use_authentic: bool = False


@dataclass
class GenerationResult:
    """Generated questions with the path that produced them."""

    questions: list[Question] = field(default_factory=list)
    method: str = METHOD_STANDARD
    average_confidence: int = 0

    @property
    def with_images(self) -> bool:
        return any(q.has_image for q in self.questions)

    def to_dict(self) -> dict[str, Any]:
        return {
            "questions": [q.to_dict() for q in self.questions],
            "generated": len(self.questions),
            "method": self.method,
            "world_class": self.method == METHOD_WORLD_CLASS,
            "with_images": self.with_images,
            "average_confidence": self.average_confidence,
        }


def average_confidence_percent(questions: list[Question], default: float | None = None) -> int:
    """Mean confidence as a rounded percent; 0 for an empty batch."""
    if not questions:
        return 0
    if default is None:
        default = load_app_config().generation.default_confidence
    total = sum(q.confidence if q.confidence is not None else default for q in questions)
    return round(total / len(questions) * 100)


def validate_request(request: GenerationRequest) -> None:
    """Check grade, subject and count.

    Raises:
        InvalidGenerationRequest: If any value is out of range
    """
    if request.grade not in VALID_GRADES or request.subject not in VALID_SUBJECTS:
        raise InvalidGenerationRequest("Invalid grade or subject")
    if request.count < 1:
        raise InvalidGenerationRequest("count must be at least 1")


# =============================================================================
# GENERATION PATHS
# =============================================================================


def _world_class_questions(
    request: GenerationRequest, count: int, manager: ModelManager, category: str | None
) -> list[Question]:
    wc_request = WorldClassRequest(
        grade=request.grade,
        subject=request.subject,
        category=category,
        teks_standard=request.teks_standard,
        require_visual=request.include_visual,
    )
    return [manager.generate_world_class_question(wc_request) for _ in range(count)]


def _authentic_questions(
    request: GenerationRequest,
    count: int,
    client: Any,
    rng: random.Random,
    category: str | None,
) -> list[Question]:
    return [
        generate_authentic_question(
            request.grade,
            request.subject,
            teks_standard=request.teks_standard,
            category=category,
            client=client,
            rng=rng,
        )
        for _ in range(count)
    ]


def standard_questions(
    grade: int,
    subject: str,
    count: int,
    category: str | None = None,
    rng: random.Random | None = None,
    include_visual: bool = True,
) -> list[Question]:
    """Alternate efficient-template and diverse items.

    Diverse types are limited to the requested category when any match.
    Failing items are logged and replaced by an efficient-template item.
    """
    rng = rng or random.Random()
    has_templates = bool(EFFICIENT_QUESTION_TEMPLATES.get(subject, {}).get(grade))
    types = question_types_for(subject)
    if category:
        types = [t for t in types if QUESTION_TYPE_CATEGORIES[t] == category] or types

    questions: list[Question] = []
    for index in range(count):
        if has_templates and index % 2 == 0:
            question = generate_efficient_question(grade, subject, category, rng, include_visual)
        else:
            question_type = rng.choice(types)
            try:
                question = generate_question_by_type(grade, subject, question_type, rng)
            except TemplateError as e:
                logger.warning("standard_item_failed", question_type=question_type, error=str(e))
                question = generate_efficient_question(grade, subject, category, rng, include_visual)
        questions.append(question)
    return questions


def generate_questions(
    request: GenerationRequest,
    rng: random.Random | None = None,
    model_manager: ModelManager | None = None,
    llm_client: Any = USE_CONFIGURED,
    persist: bool = False,
) -> GenerationResult:
    """Generate questions for a request.

    Args:
        request: Grade, subject, count and path flags
        rng: Random source for the authentic and standard paths
        model_manager: Manager for the world-class path (default: singleton)
        llm_client: LLM client for the authentic path (default: configured)
        persist: Store the questions and fill their question_id

    Raises:
        InvalidGenerationRequest: If the request is out of range
    """
    validate_request(request)
    rng = rng or random.Random()
    settings = load_app_config().generation

    category = request.category
    if category is None and request.teks_standard:
        category = category_for_teks(request.grade, request.subject, request.teks_standard)

    questions: list[Question] = []
    method = METHOD_STANDARD

    if request.use_world_class:
        try:
            questions = _world_class_questions(
                request,
                min(request.count, settings.world_class_max),
                model_manager or get_model_manager(),
                category,
            )
            method = METHOD_WORLD_CLASS
        except (UnknownModelError, TemplateError, ValueError) as e:
            logger.warning("world_class_generation_failed", error=str(e))
            questions = []

    if not questions and request.use_authentic:
        try:
            questions = _authentic_questions(
                request, min(request.count, settings.authentic_max), llm_client, rng, category
            )
            method = METHOD_AUTHENTIC
        except (AuthenticGenerationError, ValueError) as e:
            logger.warning("authentic_generation_failed", error=str(e))
            questions = []

    if not questions:
        questions = standard_questions(
            request.grade,
            request.subject,
            min(request.count, settings.max_count),
            category=category,
            rng=rng,
            include_visual=request.include_visual,
        )
        method = METHOD_STANDARD

    if not request.include_visual:
        for question in questions:
            question.clear_visual()

    if persist:
        insert_questions(questions)

    result = GenerationResult(
        questions=questions,
        method=method,
        average_confidence=average_confidence_percent(questions, settings.default_confidence),
    )
    logger.info(
        "questions_generated",
        grade=request.grade,
        subject=request.subject,
        method=method,
        count=len(questions),
    )
    return result
