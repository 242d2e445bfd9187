"""Pytest configuration and shared fixtures."""
import pytest

from assessment import (
    ProfileRegistry,
    Question,
    QuestionCatalog,
    QuestionType,
    RecommendationEngine,
    ScoringEngine,
    StudentProfile,
    Topic,
)


NOW = 1_700_000_000.0


def make_question(topic=Topic.C_BASICS, difficulty=1, prompt="What does this print?", **kwargs):
    """Build a valid question with sensible defaults."""
    fields = {
        "prompt": prompt,
        "options": ["A", "B", "C", "D"],
        "correct_answer": 0,
        "topic": topic,
        "difficulty": difficulty,
        "question_type": QuestionType.MULTIPLE_CHOICE,
    }
    fields.update(kwargs)
    return Question(**fields)


@pytest.fixture
def question_factory():
    return make_question


@pytest.fixture
def empty_catalog():
    return QuestionCatalog(capacity=50)


@pytest.fixture
def pointer_catalog():
    """One POINTERS question per difficulty 1-5 (ids 0-4)."""
    catalog = QuestionCatalog(capacity=50)
    for difficulty in range(1, 6):
        catalog.insert(make_question(Topic.POINTERS, difficulty, prompt=f"Pointer question {difficulty}"))
    return catalog


@pytest.fixture
def mixed_catalog():
    """Two topics with a spread of difficulties."""
    catalog = QuestionCatalog(capacity=50)
    specs = [
        (Topic.C_BASICS, 1), (Topic.C_BASICS, 2), (Topic.C_BASICS, 4),
        (Topic.MEMORY_MANAGEMENT, 1), (Topic.MEMORY_MANAGEMENT, 3), (Topic.MEMORY_MANAGEMENT, 5),
    ]
    for topic, difficulty in specs:
        catalog.insert(make_question(topic, difficulty, prompt=f"{topic.name} {difficulty}"))
    return catalog


@pytest.fixture
def profile():
    return StudentProfile(student_id=1, name="Ada", registration_date=NOW, last_practice=NOW)


@pytest.fixture
def scoring():
    return ScoringEngine()


@pytest.fixture
def recommender(scoring):
    return RecommendationEngine(scoring)


@pytest.fixture
def registry():
    return ProfileRegistry(capacity=3)
