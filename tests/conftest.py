"""Shared fixtures for StaarKids tests."""

import random
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from staarkids.config.app_config import clear_config_cache
from staarkids.core.authentic_bank import clear_bank_cache
from staarkids.core.model_manager import reset_model_manager
from staarkids.core.quality_control import reset_review_system
from staarkids.db.database import init_db, reset_db_path
from staarkids.prompts.registry import clear_cache
from staarkids.web.api import create_app


@pytest.fixture(autouse=True)
def reset_singletons():
    """Every test starts with fresh caches and singletons."""
    clear_config_cache()
    clear_bank_cache()
    clear_cache()
    reset_review_system()
    reset_model_manager()
    reset_db_path()
    yield
    reset_db_path()
    reset_model_manager()
    reset_review_system()
    clear_config_cache()


@pytest.fixture
def rng():
    """Seeded random source."""
    return random.Random(42)


@pytest.fixture
def db(tmp_path):
    """Temporary database."""
    db_path = tmp_path / "test.db"
    init_db(db_path)
    return db_path


@pytest.fixture
def client(tmp_path, monkeypatch):
    """Web test client with its database under tmp_path."""
    monkeypatch.chdir(tmp_path)
    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture
def llm_question_data():
    """A well-formed LLM question reply."""
    return {
        "question": "Which word in the sentence tells how the fox moved?",
        "choices": ["A. quietly", "B. fox", "C. forest", "D. night"],
        "correct": "A",
        "explanation": "Quietly describes how the fox moved.",
        "teksStandard": "3.8A",
        "category": "Genre Features",
        "difficulty": "easy",
    }


@pytest.fixture
def mock_llm_client(llm_question_data):
    """Mock LLM client returning a valid question."""
    client = MagicMock()
    client.simple_json.return_value = llm_question_data
    return client
