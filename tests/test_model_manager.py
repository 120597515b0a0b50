"""Tests for the simulated model manager."""

import asyncio
import random

import pytest

from staarkids.core.model_manager import (
    ACCURACY_CEILING,
    ACCURACY_FLOOR,
    ModelManager,
    UnknownModelError,
    WorldClassRequest,
    get_model_manager,
    model_key,
    reset_model_manager,
    run_optimization_loop,
)


@pytest.fixture
def manager():
    manager = ModelManager(rng=random.Random(42), history_limit=1000)
    manager.initialize()
    return manager


class TestInitialize:
    """Tests for model creation."""

    def test_creates_twelve_models(self, manager):
        """A primary and an ensemble model per grade and subject."""
        assert len(manager.models) == 12
        assert len(manager.ensemble_configs) == 6
        assert len(manager.ab_tests) == 6

    def test_model_ids(self, manager):
        assert "staar-primary-grade3-math-v2.0" in manager.models
        assert "staar-ensemble-grade5-reading-v2.0" in manager.models

    def test_model_ranges(self, manager):
        for model in manager.models.values():
            assert 0.89 <= model.accuracy <= 0.95
            assert 0.92 <= model.confidence_score <= 0.98
            assert 2500 <= model.training_examples < 3500
            assert model.status == "ready"
            assert all(code.startswith(f"{model.grade}.") for code in model.specializations)

    def test_initialize_is_idempotent(self, manager):
        ids = set(manager.models)
        manager.initialize()
        assert set(manager.models) == ids

    def test_ensemble_and_ab_config(self, manager):
        key = model_key(4, "math")
        assert key == "grade4-math"
        config = manager.ensemble_configs[key]
        assert config.weights == [0.7, 0.3]
        assert config.voting_strategy == "confidence-based"
        ab_test = manager.ab_tests[key]
        assert ab_test.test_id == "ab-test-4-math"
        assert ab_test.traffic_split == 0.5

    def test_get_model_unknown(self, manager):
        with pytest.raises(UnknownModelError):
            manager.get_model(6, "math", "primary")


class TestGenerateWorldClassQuestion:
    """Tests for world-class generation."""

    def test_question_is_stamped(self, manager):
        question = manager.generate_world_class_question(WorldClassRequest(grade=4, subject="math"))

        assert question.method == "world-class"
        assert question.model_used in manager.models
        assert question.ab_test_group in ("A", "B")
        assert 0.92 <= question.confidence <= 0.98
        assert len({c.text for c in question.answer_choices}) == 4

    def test_records_performance(self, manager):
        question = manager.generate_world_class_question(WorldClassRequest(grade=3, subject="reading"))
        assert len(manager.performance_history[question.model_used]) == 1

    def test_grade_without_templates_uses_diverse_types(self, manager):
        question = manager.generate_world_class_question(WorldClassRequest(grade=5, subject="reading"))
        assert question.subject == "reading"
        assert question.grade == 5

    def test_diverse_types_follow_category(self, manager):
        """Without templates the drawn question type matches the requested category."""
        for _ in range(6):
            question = manager.generate_world_class_question(
                WorldClassRequest(grade=5, subject="reading", category="Author's Purpose")
            )
            assert question.category == "Author's Purpose"

    def test_difficulty_override(self, manager):
        question = manager.generate_world_class_question(
            WorldClassRequest(grade=3, subject="math", difficulty="hard")
        )
        assert question.difficulty == "hard"

    def test_no_visual(self, manager):
        question = manager.generate_world_class_question(
            WorldClassRequest(grade=4, subject="math", require_visual=False)
        )
        assert not question.has_image

    def test_unknown_grade(self, manager):
        with pytest.raises(UnknownModelError):
            manager.generate_world_class_question(WorldClassRequest(grade=8, subject="math"))

    def test_low_confidence_triggers_ensemble(self, manager):
        """Below the ensemble threshold the weighted vote is recorded."""
        for model in manager.models.values():
            model.confidence_score = 0.5

        question = manager.generate_world_class_question(WorldClassRequest(grade=3, subject="math"))

        # 0.5 x 0.7 never beats the selected model's own 0.5
        assert question.ensemble_vote is None
        assert question.confidence == 0.5


class TestOptimize:
    """Tests for performance tracking and optimization."""

    def test_history_is_capped(self):
        manager = ModelManager(rng=random.Random(1), history_limit=5)
        manager.initialize()
        model_id = next(iter(manager.models))
        for _ in range(12):
            manager.record_performance(model_id, 0.9)
        assert len(manager.performance_history[model_id]) == 5

    def test_needs_more_than_100_records(self, manager):
        model_id = next(iter(manager.models))
        for _ in range(100):
            manager.record_performance(model_id, 0.9)
        assert manager.optimize_models() == []

    def test_accuracy_moves_to_recent_mean(self, manager):
        model_id = next(iter(manager.models))
        for _ in range(101):
            manager.record_performance(model_id, 0.9)

        assert manager.optimize_models() == [model_id]
        assert manager.models[model_id].accuracy == pytest.approx(0.9, abs=0.05)

    def test_accuracy_is_clamped(self, manager):
        high, low = list(manager.models)[:2]
        for _ in range(101):
            manager.record_performance(high, 1.5)
            manager.record_performance(low, 0.1)

        manager.optimize_models()
        assert manager.models[high].accuracy == ACCURACY_CEILING
        assert manager.models[low].accuracy == ACCURACY_FLOOR


class TestSystemStats:
    def test_stats(self, manager):
        stats = manager.get_system_stats()
        assert stats["total_models"] == 12
        assert stats["ensemble_configs"] == 6
        assert stats["active_ab_tests"] == 6
        assert stats["system_health"] == "Excellent"
        assert 89 <= stats["average_accuracy"] <= 95
        perf = stats["model_performance"]["staar-primary-grade3-math-v2.0"]
        assert perf["type"] == "primary"
        assert perf["history_size"] == 0

    def test_stats_initialize_lazily(self):
        stats = ModelManager(rng=random.Random(0)).get_system_stats()
        assert stats["total_models"] == 12


class TestSingleton:
    def test_get_and_reset(self):
        first = get_model_manager()
        assert get_model_manager() is first
        reset_model_manager()
        assert get_model_manager() is not first


class TestOptimizationLoop:
    @pytest.mark.asyncio
    async def test_loop_optimizes_until_cancelled(self, manager):
        model_id = next(iter(manager.models))
        for _ in range(101):
            manager.record_performance(model_id, 0.9)
        before = manager.models[model_id].last_optimized

        task = asyncio.create_task(run_optimization_loop(manager, 0.01))
        await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert manager.models[model_id].accuracy == pytest.approx(0.9, abs=0.05)
        assert manager.models[model_id].last_optimized >= before
