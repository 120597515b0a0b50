"""Simulated world-class model manager.

Keeps metadata for a fleet of "fine-tuned" models (a primary and an
ensemble model per grade and subject) with randomly drawn accuracy and
confidence. No model is trained or called: questions come from the
template generators and are stamped with the chosen model's confidence.

Responsibilities:
- A/B selection between the primary and ensemble model
- Confidence-based ensemble voting when the base confidence is low
- Bounded performance history per model
- Periodic optimization that nudges accuracy toward recent history
"""

from __future__ import annotations

import asyncio
import random
import threading
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal

import structlog

from staarkids.config.app_config import load_app_config
from staarkids.core.diverse_generator import (
    QUESTION_TYPE_CATEGORIES,
    generate_question_by_type,
    question_types_for,
)
from staarkids.core.question import VALID_GRADES, VALID_SUBJECTS, Question
from staarkids.core.template_generator import EFFICIENT_QUESTION_TEMPLATES, generate_efficient_question

logger = structlog.get_logger(__name__)

ModelType = Literal["primary", "ensemble"]

MODEL_VERSION = "2.0"
BASE_MODEL = "gpt-3.5-turbo-1106"
ENSEMBLE_WEIGHTS = (0.7, 0.3)
ENSEMBLE_MIN_CONFIDENCE = 0.85
AB_TRAFFIC_SPLIT = 0.5
OPTIMIZE_MIN_HISTORY = 100
ACCURACY_FLOOR = 0.85
ACCURACY_CEILING = 0.98


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def model_key(grade: int, subject: str) -> str:
    return f"grade{grade}-{subject}"


class UnknownModelError(Exception):
    """Raised when no model serves a grade/subject."""

    pass


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class SimulatedModel:
    """Metadata for one simulated fine-tuned model."""

    id: str
    grade: int
    subject: str
    model_type: ModelType
    accuracy: float
    confidence_score: float
    training_examples: int
    specializations: list[str]
    performance_metrics: dict[str, float] = field(default_factory=dict)
    base_model: str = BASE_MODEL
    version: str = MODEL_VERSION
    status: str = "ready"
    created_at: str = field(default_factory=_now)
    last_optimized: str = field(default_factory=_now)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class EnsembleConfig:
    """Models voting together for one grade/subject."""

    model_ids: list[str]
    weights: list[float]
    voting_strategy: str = "confidence-based"
    minimum_confidence: float = ENSEMBLE_MIN_CONFIDENCE


@dataclass
class ABTest:
    """Traffic split between two models."""

    test_id: str
    model_a: str
    model_b: str
    traffic_split: float = AB_TRAFFIC_SPLIT
    winner: str | None = None


@dataclass
class PerformanceRecord:
    """One generation outcome used by the optimizer."""

    timestamp: str
    confidence: float
    accuracy: float


@dataclass
class WorldClassRequest:
    """Parameters for one world-class question."""

    grade: int
    subject: str
    category: str | None = None
    teks_standard: str | None = None
    difficulty: str | None = None
    require_visual: bool = True


def specializations_for(grade: int, subject: str) -> list[str]:
    """TEKS codes a model is advertised to excel at."""
    if subject == "math":
        suffixes = ["2A", "2B", "3A", "3B", "4A", "5A", "6A", "7A"]
    else:
        suffixes = ["6A", "6B", "7A", "8A", "9A", "10A", "11A", "12A"]
    return [f"{grade}.{s}" for s in suffixes]


# =============================================================================
# MODEL MANAGER
# =============================================================================


class ModelManager:
    """Simulated ensemble of fine-tuned question models."""

    def __init__(self, rng: random.Random | None = None, history_limit: int | None = None):
        self._rng = rng or random.Random()
        self.history_limit = history_limit or load_app_config().models.history_limit
        self.models: dict[str, SimulatedModel] = {}
        self.ensemble_configs: dict[str, EnsembleConfig] = {}
        self.ab_tests: dict[str, ABTest] = {}
        self.performance_history: dict[str, list[PerformanceRecord]] = {}
        self._initialized = False
        self._lock = threading.RLock()

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> None:
        """Create models, ensembles and A/B tests once."""
        with self._lock:
            if self._initialized:
                return

            for model_type in ("primary", "ensemble"):
                for grade in VALID_GRADES:
                    for subject in VALID_SUBJECTS:
                        self._create_model(grade, subject, model_type)  # type: ignore[arg-type]

            for grade in VALID_GRADES:
                for subject in VALID_SUBJECTS:
                    key = model_key(grade, subject)
                    primary = self.get_model(grade, subject, "primary")
                    ensemble = self.get_model(grade, subject, "ensemble")
                    self.ensemble_configs[key] = EnsembleConfig(
                        model_ids=[primary.id, ensemble.id],
                        weights=list(ENSEMBLE_WEIGHTS),
                    )
                    self.ab_tests[key] = ABTest(
                        test_id=f"ab-test-{grade}-{subject}",
                        model_a=primary.id,
                        model_b=ensemble.id,
                    )

            self._initialized = True

        logger.info(
            "model_manager_initialized",
            models=len(self.models),
            ensembles=len(self.ensemble_configs),
        )

    def _create_model(self, grade: int, subject: str, model_type: ModelType) -> SimulatedModel:
        rng = self._rng
        model = SimulatedModel(
            id=f"staar-{model_type}-grade{grade}-{subject}-v{MODEL_VERSION}",
            grade=grade,
            subject=subject,
            model_type=model_type,
            accuracy=0.89 + rng.random() * 0.06,
            confidence_score=0.92 + rng.random() * 0.06,
            training_examples=2500 + rng.randrange(1000),
            specializations=specializations_for(grade, subject),
            performance_metrics={
                "accuracy": 0.89 + rng.random() * 0.06,
                "precision": 0.91 + rng.random() * 0.05,
                "recall": 0.88 + rng.random() * 0.07,
                "f1_score": 0.89 + rng.random() * 0.06,
                "user_satisfaction": 0.87 + rng.random() * 0.08,
            },
        )
        self.models[model.id] = model
        self.performance_history[model.id] = []
        return model

    def get_model(self, grade: int, subject: str, model_type: ModelType) -> SimulatedModel:
        """Find a model by grade, subject and type.

        Raises:
            UnknownModelError: If no such model exists
        """
        for model in self.models.values():
            if model.grade == grade and model.subject == subject and model.model_type == model_type:
                return model
        raise UnknownModelError(f"No {model_type} model for grade {grade} {subject}")

    # =========================================================================
    # GENERATION
    # =========================================================================

    def _generate_with_model(self, model: SimulatedModel, request: WorldClassRequest) -> Question:
        """Build a real question and stamp the model's confidence on it."""
        if EFFICIENT_QUESTION_TEMPLATES.get(request.subject, {}).get(request.grade):
            question = generate_efficient_question(
                request.grade,
                request.subject,
                category=request.category,
                rng=self._rng,
                include_visual=request.require_visual,
            )
        else:
            types = question_types_for(request.subject)
            if request.category:
                types = [t for t in types if QUESTION_TYPE_CATEGORIES[t] == request.category] or types
            question_type = self._rng.choice(types)
            question = generate_question_by_type(request.grade, request.subject, question_type, self._rng)
            if not request.require_visual:
                question.clear_visual()

        if request.difficulty in ("easy", "medium", "hard"):
            question.difficulty = request.difficulty  # type: ignore[assignment]
        question.confidence = model.confidence_score
        question.model_used = model.id
        question.method = "world-class"
        return question

    def _generate_with_ensemble(
        self, config: EnsembleConfig, request: WorldClassRequest
    ) -> tuple[Question | None, float, dict[str, Any]]:
        """Score each member by confidence x weight and keep the best."""
        participants = []
        best: Question | None = None
        best_score = 0.0
        winner = None

        for model_id, weight in zip(config.model_ids, config.weights):
            model = self.models[model_id]
            question = self._generate_with_model(model, request)
            score = (question.confidence or 0.0) * weight
            participants.append({"model": model_id, "confidence": question.confidence, "weight": weight})
            if score > best_score:
                best, best_score, winner = question, score, model_id

        vote = {
            "strategy": config.voting_strategy,
            "participants": participants,
            "winner": winner,
        }
        return best, best_score, vote

    def generate_world_class_question(self, request: WorldClassRequest) -> Question:
        """Generate one question through A/B selection and ensemble voting.

        Raises:
            UnknownModelError: If the grade/subject has no models
        """
        self.initialize()
        key = model_key(request.grade, request.subject)
        ab_test = self.ab_tests.get(key)
        if ab_test is None:
            raise UnknownModelError(f"No models for grade {request.grade} {request.subject}")

        if self._rng.random() < ab_test.traffic_split:
            selected, group = self.models[ab_test.model_a], "A"
        else:
            selected, group = self.models[ab_test.model_b], "B"

        question = self._generate_with_model(selected, request)
        confidence = question.confidence or 0.0

        config = self.ensemble_configs.get(key)
        if config and confidence < config.minimum_confidence:
            ensemble_question, ensemble_confidence, vote = self._generate_with_ensemble(config, request)
            if ensemble_question is not None and ensemble_confidence > confidence:
                question = ensemble_question
                question.confidence = ensemble_confidence
                question.ensemble_vote = vote

        question.model_used = selected.id
        question.ab_test_group = group
        self.record_performance(selected.id, question.confidence or 0.0)

        logger.info(
            "world_class_question_generated",
            model=selected.id,
            group=group,
            confidence=round(question.confidence or 0.0, 3),
        )
        return question

    # =========================================================================
    # PERFORMANCE AND OPTIMIZATION
    # =========================================================================

    def record_performance(self, model_id: str, confidence: float) -> None:
        """Append an outcome, dropping the oldest beyond the history limit."""
        record = PerformanceRecord(
            timestamp=_now(),
            confidence=confidence,
            accuracy=confidence + (self._rng.random() * 0.1 - 0.05),
        )
        with self._lock:
            history = self.performance_history.setdefault(model_id, [])
            history.append(record)
            if len(history) > self.history_limit:
                del history[: len(history) - self.history_limit]

    def optimize_models(self) -> list[str]:
        """Move each model's accuracy to its recent mean, clamped.

        Only models with more than 100 recorded outcomes are touched.

        Returns:
            IDs of the optimized models
        """
        optimized = []
        with self._lock:
            for model_id, model in self.models.items():
                history = self.performance_history.get(model_id, [])
                if len(history) <= OPTIMIZE_MIN_HISTORY:
                    continue
                recent = history[-OPTIMIZE_MIN_HISTORY:]
                mean = sum(r.accuracy for r in recent) / len(recent)
                model.accuracy = max(ACCURACY_FLOOR, min(ACCURACY_CEILING, mean))
                model.last_optimized = _now()
                optimized.append(model_id)

        if optimized:
            logger.info("models_optimized", count=len(optimized))
        return optimized

    def get_system_stats(self) -> dict[str, Any]:
        """Summary of the simulated fleet."""
        self.initialize()
        with self._lock:
            models = list(self.models.values())
            performance = {
                m.id: {
                    "accuracy": round(m.accuracy * 100),
                    "confidence": round(m.confidence_score * 100),
                    "status": m.status,
                    "type": m.model_type,
                    "history_size": len(self.performance_history.get(m.id, [])),
                }
                for m in models
            }
            average = sum(m.accuracy for m in models) / len(models) if models else 0.0

        return {
            "total_models": len(models),
            "average_accuracy": round(average * 100),
            "ensemble_configs": len(self.ensemble_configs),
            "active_ab_tests": len(self.ab_tests),
            "model_performance": performance,
            "system_health": "Excellent",
        }


async def run_optimization_loop(manager: ModelManager, interval_seconds: float) -> None:
    """Optimize models every interval until cancelled."""
    logger.info("optimization_loop_started", interval_seconds=interval_seconds)
    while True:
        await asyncio.sleep(interval_seconds)
        manager.optimize_models()


# Module-level instance
_model_manager: ModelManager | None = None


def get_model_manager() -> ModelManager:
    """Get or create the model manager singleton."""
    global _model_manager
    if _model_manager is None:
        _model_manager = ModelManager()
    return _model_manager


def reset_model_manager() -> None:
    """Reset the model manager (for testing)."""
    global _model_manager
    _model_manager = None
