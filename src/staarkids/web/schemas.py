"""Pydantic schemas for the Web API.

Serialization models for questions, visuals, quality review, simulated
models, mock exams and practice progress.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field


# =============================================================================
# QUESTION SCHEMAS
# =============================================================================


class AnswerChoiceSchema(BaseModel):
    """One lettered answer choice."""

    id: str = Field(..., pattern=r"^[A-D]$")
    text: str


class QuestionPayload(BaseModel):
    """A question as submitted by a client."""

    question_id: int | None = None
    grade: int
    subject: str
    teks_standard: str = ""
    question_text: str = Field(..., min_length=1)
    answer_choices: list[AnswerChoiceSchema] = Field(default_factory=list)
    correct_answer: str = ""
    explanation: str = ""
    difficulty: str = "medium"
    category: str | None = None
    has_image: bool = False
    image_description: str | None = None
    svg_content: str | None = None
    passage: str | None = None


class QuestionResponse(BaseModel):
    """A generated or stored question."""

    question_id: int | None = None
    grade: int
    subject: str
    teks_standard: str
    question_text: str
    answer_choices: list[AnswerChoiceSchema]
    correct_answer: str
    explanation: str
    difficulty: str
    category: str | None = None
    year: int | None = None
    is_from_real_staar: bool = False
    has_image: bool = False
    image_description: str | None = None
    svg_content: str | None = None
    passage: str | None = None
    method: str = "standard"
    confidence: float | None = None
    model_used: str | None = None
    ab_test_group: str | None = None
    ensemble_vote: dict[str, Any] | None = None


class GenerateRequest(BaseModel):
    """Request body for question generation."""

    grade: int
    subject: str
    count: int = Field(default=1, ge=1, le=50)
    category: str | None = None
    teks_standard: str | None = None
    include_visual: bool = True
    use_world_class: bool = False
    use_authentic: bool = False
    persist: bool = False


class GenerateResponse(BaseModel):
    """Generated questions and the path that produced them."""

    questions: list[QuestionResponse]
    generated: int
    method: str
    world_class: bool
    with_images: bool
    average_confidence: int


class FastGenerateRequest(BaseModel):
    """Request for instant template questions."""

    grade: int
    subject: str
    count: int = Field(default=5, ge=1, le=20)
    category: str | None = None


class QuestionListResponse(BaseModel):
    questions: list[QuestionResponse]
    count: int


# =============================================================================
# VISUAL SCHEMAS
# =============================================================================


class DetectRequest(BaseModel):
    """Question text to classify."""

    question_text: str = Field(..., min_length=1)
    subject: str = "math"
    grade: int = Field(default=3, ge=3, le=5)


class VisualAnalysisResponse(BaseModel):
    needs_visual: bool
    visual_type: str | None = None
    description: str | None = None


class AnalyzeRequest(BaseModel):
    """Batch of questions (dictionary form) to check for missing visuals."""

    questions: list[dict[str, Any]]


class MissingVisual(BaseModel):
    id: Any = None
    question_text: str
    visual_type: str | None = None
    description: str | None = None


class CoverageReportResponse(BaseModel):
    total_questions: int
    questions_needing_visuals: int
    questions_with_visuals: int
    missing_visuals: list[MissingVisual]


class SvgRequest(BaseModel):
    """Diagram to render from the catalog."""

    diagram_type: str = Field(..., min_length=1)
    data: dict[str, Any] = Field(default_factory=dict)
    width: int | None = Field(default=None, ge=50, le=800)
    height: int | None = Field(default=None, ge=50, le=600)


# =============================================================================
# QUALITY SCHEMAS
# =============================================================================


class QualityMetricsResponse(BaseModel):
    accuracy: float
    readability: float
    grade_appropriate: bool
    teks_alignment: bool
    image_quality: float


class ValidationResponse(BaseModel):
    """Validation outcome for one question."""

    is_valid: bool
    score: float
    issues: list[str]
    suggestions: list[str]
    metrics: QualityMetricsResponse
    queued: bool = False
    priority: str | None = None


class ReviewItemResponse(BaseModel):
    question_id: str
    question: QuestionResponse
    validation_result: ValidationResponse
    priority: str
    timestamp: str


class ReviewQueueResponse(BaseModel):
    items: list[ReviewItemResponse]
    count: int


class RejectRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=500)


class ReviewActionResponse(BaseModel):
    question_id: str
    status: str  # approved | rejected


# =============================================================================
# MODEL SCHEMAS
# =============================================================================


class ModelStatsResponse(BaseModel):
    """Summary of the simulated model fleet."""

    total_models: int
    average_accuracy: int
    ensemble_configs: int
    active_ab_tests: int
    model_performance: dict[str, dict[str, Any]]
    system_health: str


class WorldClassGenerateRequest(BaseModel):
    grade: int
    subject: str
    category: str | None = None
    teks_standard: str | None = None
    difficulty: str | None = None
    require_visual: bool = True


class OptimizeResponse(BaseModel):
    optimized: list[str]
    count: int


# =============================================================================
# EXAM SCHEMAS
# =============================================================================


class ExamSummaryResponse(BaseModel):
    exam_id: int | None
    name: str
    grade: int
    subject: str
    total_questions: int
    time_limit: int


class ExamListResponse(BaseModel):
    exams: list[ExamSummaryResponse]
    count: int


class ExamDetailResponse(ExamSummaryResponse):
    questions: list[QuestionResponse]


class ExamSubmitRequest(BaseModel):
    """Selected letters keyed by question_id."""

    answers: dict[int, str] = Field(default_factory=dict)
    time_spent: int | None = Field(default=None, ge=0)


class QuestionScoreResponse(BaseModel):
    question_id: int | None
    selected_answer: str | None
    correct_answer: str
    is_correct: bool


class ExamScoreResponse(BaseModel):
    exam_id: int | None
    total_questions: int
    correct_answers: int
    score: int
    results: list[QuestionScoreResponse]
    time_spent: int | None = None


# =============================================================================
# PROGRESS SCHEMAS
# =============================================================================


class PracticeAttemptRequest(BaseModel):
    """A practice answer.

    grade, subject and is_correct may be omitted when question_id refers
    to a stored question.
    """

    user_id: str = Field(..., min_length=1, max_length=200)
    question_id: int | None = None
    grade: int | None = None
    subject: str | None = None
    teks_standard: str | None = None
    selected_answer: str | None = Field(default=None, max_length=1)
    is_correct: bool | None = None
    hints_used: int = Field(default=0, ge=0)
    skipped: bool = False
    time_spent: int | None = Field(default=None, ge=0)


class PracticeAttemptResponse(BaseModel):
    attempt_id: int
    user_id: str
    question_id: int | None
    is_correct: bool
    star_power_earned: int
    created_at: str


class GradeAccuracyResponse(BaseModel):
    grade: int
    attempts: int
    correct: int
    accuracy: int


class OverallAccuracyResponse(BaseModel):
    total_attempts: int
    correct_attempts: int
    overall_accuracy: int
    math_accuracy: int
    reading_accuracy: int
    grade_breakdown: list[GradeAccuracyResponse]


class TeksAccuracyResponse(BaseModel):
    teks_standard: str
    total_questions: int
    correct_answers: int
    accuracy: int
    last_attempted: str | None = None


class ModuleAccuracyResponse(BaseModel):
    grade: int
    subject: str
    overall_accuracy: int
    teks_standard_stats: list[TeksAccuracyResponse]


class StarPowerResponse(BaseModel):
    daily_star_power: int
    weekly_star_power: int
    all_time_star_power: int


# =============================================================================
# HEALTH SCHEMAS
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = "0.1.0"
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    llm_enabled: bool = False
    diagram_types: int = 0
