"""Tests for assessment/profile_registry.py"""

import pytest

from assessment import ProfileRegistry, SkillLevel, StudentProfile
from assessment.errors import CapacityExceeded, InvalidArgument, NotFound

from conftest import NOW


def test_register_assigns_sequential_ids_with_neutral_defaults(registry):
    ada = registry.register("Ada", now=NOW)
    bob = registry.register("  Bob ", now=NOW)

    assert (ada.student_id, bob.student_id) == (1, 2)
    assert bob.name == "Bob"
    assert ada.topic_scores == [0.5] * 12
    assert ada.current_level == SkillLevel.BEGINNER
    assert ada.predicted_exam_score == 50.0
    assert ada.registration_date == ada.last_practice == NOW


def test_register_rejects_empty_name(registry):
    with pytest.raises(InvalidArgument):
        registry.register("   ")
    assert len(registry) == 0


def test_register_rejects_when_full(registry):
    for name in ("a", "b", "c"):
        registry.register(name)
    with pytest.raises(CapacityExceeded):
        registry.register("d")
    assert len(registry) == 3


def test_get_and_find_by_name(registry):
    ada = registry.register("Ada")
    assert registry.get(ada.student_id) is ada
    assert registry.find_by_name("ADA") == [ada]
    assert registry.find_by_name("nobody") == []
    with pytest.raises(NotFound):
        registry.get(42)


def test_load_keeps_ids_and_continues_numbering():
    registry = ProfileRegistry(capacity=5)
    registry.load([StudentProfile(student_id=4, name="Old")])

    assert registry.get(4).name == "Old"
    assert registry.register("New").student_id == 5


def test_load_rejects_duplicates_without_partial_load(registry):
    batch = [StudentProfile(student_id=1, name="a"), StudentProfile(student_id=1, name="b")]
    with pytest.raises(InvalidArgument):
        registry.load(batch)
    assert len(registry) == 0


def test_leaderboard_orders_by_accuracy_then_attempts(registry):
    low, high, busy = (registry.register(n) for n in ("low", "high", "busy"))
    low.total_attempted, low.total_correct = 10, 3
    high.total_attempted, high.total_correct = 4, 4
    busy.total_attempted, busy.total_correct = 8, 8

    assert [p.name for p in registry.leaderboard()] == ["busy", "high", "low"]
    assert [p.name for p in registry.leaderboard(1)] == ["busy"]
