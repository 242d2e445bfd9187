"""Tests for assessment/quiz_session.py"""

import random

import pytest

from assessment import QuizSession, SkillLevel, Topic
from assessment.errors import InvalidArgument


def _play(session, answer=0, time_taken=5.0):
    results = []
    while True:
        question = session.next_question()
        if question is None:
            return results
        results.append(session.submit_answer(answer, time_taken))


def test_adaptive_session_runs_to_limit(profile, recommender, pointer_catalog):
    session = QuizSession(profile, pointer_catalog, recommender, question_limit=3)
    results = _play(session)

    assert len(results) == 3
    assert len({r["question_id"] for r in results}) == 3  # recency window prevents repeats
    assert all(r["is_correct"] for r in results)
    assert profile.total_attempted == 3
    assert session.should_stop() == (True, "max_reached")


def test_topic_practice_goes_easy_to_hard(profile, mixed_catalog):
    session = QuizSession(profile, mixed_catalog, mode="topic",
                          topic=Topic.MEMORY_MANAGEMENT, question_limit=3)
    results = _play(session)
    assert [r["question_id"] for r in results] == [3, 4, 5]


def test_random_mode_prefers_unseen(profile, pointer_catalog):
    session = QuizSession(profile, pointer_catalog, mode="random",
                          question_limit=5, rng=random.Random(3))
    results = _play(session)
    assert sorted(r["question_id"] for r in results) == [0, 1, 2, 3, 4]


def test_mock_exam_stays_in_band_first(profile, mixed_catalog):
    session = QuizSession(profile, mixed_catalog, mode="mock_exam", level=SkillLevel.EXPERT,
                          question_limit=3, rng=random.Random(1))
    ids = [r["question_id"] for r in _play(session)]

    assert set(ids[:2]) == {2, 5}  # difficulties 4 and 5
    assert ids[2] == 4  # widened band picks difficulty 3
    assert session.summary().session_level == SkillLevel.EXPERT


@pytest.mark.parametrize("kwargs", [
    {"mode": "speedrun"},
    {"mode": "topic"},
    {"mode": "mock_exam"},
    {"question_limit": 0},
])
def test_invalid_session_options(profile, mixed_catalog, kwargs):
    with pytest.raises(InvalidArgument):
        QuizSession(profile, mixed_catalog, **kwargs)


def test_submit_without_question_is_rejected(profile, mixed_catalog):
    session = QuizSession(profile, mixed_catalog)
    with pytest.raises(InvalidArgument):
        session.submit_answer(0, 1.0)


def test_invalid_answer_index_does_not_record(profile, mixed_catalog):
    session = QuizSession(profile, mixed_catalog)
    session.next_question()
    with pytest.raises(InvalidArgument):
        session.submit_answer(7, 1.0)
    assert profile.total_attempted == 0
    assert session.current is not None


def test_hints_are_progressive(profile, empty_catalog, question_factory):
    empty_catalog.insert(question_factory(hints=["look at the type", "sizeof(int*)"]))
    session = QuizSession(profile, empty_catalog, mode="random")
    session.next_question()

    assert session.hint() == "look at the type"
    assert session.hint() == "sizeof(int*)"
    assert session.hint() == "sizeof(int*)"
    assert session.hints_used == 2

    result = session.submit_answer(1, 4.0)
    assert result["is_correct"] is False
    assert result["correct_answer"] == 0
    assert session.responses[-1]["hints_used"] == 2


def test_question_without_hints(profile, pointer_catalog):
    session = QuizSession(profile, pointer_catalog)
    session.next_question()
    assert session.hint() is None


def test_summary_and_finish(profile, mixed_catalog):
    session = QuizSession(profile, mixed_catalog, mode="topic", topic=Topic.C_BASICS, question_limit=4)
    session.next_question()
    session.submit_answer(0, 4.0)
    session.next_question()
    session.submit_answer(1, 8.0)

    summary = session.finish()
    assert summary.questions_attempted == 2
    assert summary.questions_correct == 1
    assert summary.session_accuracy == 0.5
    assert summary.primary_topic == Topic.C_BASICS
    assert summary.avg_response_time == pytest.approx(6.0)
    assert summary.end_time is not None

    assert session.should_stop() == (True, "finished")
    assert session.next_question() is None
