"""Tests for assessment/scoring_engine.py"""

import random

import pytest

from assessment import ScoringEngine, ScoringPolicy, SkillLevel, StudentProfile, Topic
from assessment.errors import InvalidArgument

from conftest import NOW


def test_wrong_answer_smooths_topic_score(profile, scoring, question_factory):
    q = question_factory(Topic.MEMORY_MANAGEMENT, 3)
    assert profile.topic_scores[Topic.MEMORY_MANAGEMENT] == 0.5

    scoring.record_outcome(profile, q, correct=False, time_taken=5.0, now=NOW)

    assert profile.topic_scores[Topic.MEMORY_MANAGEMENT] == pytest.approx(0.4)
    assert profile.topic_attempted[Topic.MEMORY_MANAGEMENT] == 1
    assert profile.topic_correct[Topic.MEMORY_MANAGEMENT] == 0


def test_consecutive_correct_answers(profile, scoring, question_factory):
    q = question_factory(Topic.POINTERS, 2)
    for _ in range(7):
        scoring.record_outcome(profile, q, True, 3.0, now=NOW)

    assert profile.overall_accuracy == 1.0
    assert profile.learning_streak == 7
    assert profile.max_streak == 7


def test_wrong_answer_resets_streak_but_keeps_max(profile, scoring, question_factory):
    q = question_factory()
    for _ in range(4):
        scoring.record_outcome(profile, q, True, 3.0, now=NOW)
    scoring.record_outcome(profile, q, False, 3.0, now=NOW)

    assert profile.learning_streak == 0
    assert profile.max_streak == 4
    assert profile.overall_accuracy == pytest.approx(0.8)


def test_question_average_time_is_running_mean(profile, scoring, question_factory):
    q = question_factory()
    scoring.record_outcome(profile, q, True, 12.0, now=NOW)
    assert q.avg_time_taken == pytest.approx(12.0)

    scoring.record_outcome(profile, q, False, 8.0, now=NOW)
    assert q.avg_time_taken == pytest.approx(10.0)
    assert q.times_asked == 2
    assert q.times_correct == 1


def test_scores_stay_in_unit_interval(profile, scoring, question_factory):
    rng = random.Random(42)
    questions = [question_factory(topic, rng.randint(1, 5)) for topic in Topic]
    for _ in range(500):
        scoring.record_outcome(profile, rng.choice(questions), rng.random() < 0.5,
                               rng.uniform(0, 60), now=NOW)
        assert all(0.0 <= s <= 1.0 for s in profile.topic_scores)
        assert 0.0 <= profile.overall_accuracy <= 1.0
        assert profile.overall_accuracy == profile.total_correct / profile.total_attempted


def test_activity_fields_updated(profile, scoring, question_factory):
    q = question_factory(Topic.FILE_IO, 2)
    scoring.record_outcome(profile, q, True, 30.0, now=NOW + 100)

    assert profile.last_practice == NOW + 100
    assert profile.topic_last_practiced[Topic.FILE_IO] == NOW + 100
    assert profile.total_study_time == 30.0
    assert profile.learning_velocity == pytest.approx(120.0)  # 1 question per 30s
    assert profile.recent_results[Topic.FILE_IO] == [1]


def test_recent_results_are_bounded(profile, question_factory):
    scoring = ScoringEngine(ScoringPolicy(recent_results_limit=5))
    q = question_factory()
    for i in range(8):
        scoring.record_outcome(profile, q, i % 2 == 0, 1.0, now=NOW)
    assert profile.recent_results[Topic.C_BASICS] == [0, 1, 0, 1, 0]


def test_out_of_range_topic_is_rejected_without_mutation(profile, scoring, question_factory):
    q = question_factory()
    q.topic = 12

    with pytest.raises(InvalidArgument):
        scoring.record_outcome(profile, q, True, 5.0)
    assert profile.total_attempted == 0
    assert q.times_asked == 0


@pytest.mark.parametrize("bad_time", [-1.0, float("nan"), float("inf")])
def test_invalid_time_is_rejected_without_mutation(profile, scoring, question_factory, bad_time):
    q = question_factory()
    with pytest.raises(InvalidArgument):
        scoring.record_outcome(profile, q, True, bad_time)
    assert profile.total_attempted == 0
    assert q.avg_time_taken == 0.0


def test_fresh_profile_is_beginner(profile, scoring):
    assert scoring.skill_level(profile) == SkillLevel.BEGINNER
    assert profile.current_level == SkillLevel.BEGINNER


def test_level_rises_with_sustained_accuracy(profile, scoring, question_factory):
    for topic in Topic:
        q = question_factory(topic, 3)
        for _ in range(5):
            result = scoring.record_outcome(profile, q, True, 2.0, now=NOW)
    assert profile.current_level == SkillLevel.EXPERT
    assert result["level"] == SkillLevel.EXPERT


def test_few_correct_answers_do_not_jump_tiers(profile, scoring, recommender, question_factory):
    q = question_factory(Topic.POINTERS, 2)

    scoring.record_outcome(profile, q, True, 2.0, now=NOW)
    assert profile.current_level == SkillLevel.INTERMEDIATE
    assert recommender.target_band(profile.current_level) == (2, 3)

    scoring.record_outcome(profile, q, True, 2.0, now=NOW)
    assert profile.current_level < SkillLevel.ADVANCED


def test_shrunk_accuracy(profile, scoring):
    profile.total_attempted, profile.total_correct = 1, 1
    # (1 + 0.5 * 3) / (1 + 3)
    assert scoring.shrunk_accuracy(profile) == pytest.approx(0.625)

    profile.total_attempted = profile.total_correct = 1000
    assert scoring.shrunk_accuracy(profile) == pytest.approx(1.0, abs=0.01)


def _profile_with(correct, attempted):
    p = StudentProfile(student_id=9, name="x", registration_date=NOW, last_practice=NOW)
    p.total_attempted = attempted
    p.total_correct = correct
    p.topic_scores = [0.3, 0.7, 0.5, 0.5, 0.2, 0.9, 0.5, 0.5, 0.5, 0.4, 0.6, 0.5]
    return p


def test_skill_level_is_monotonic_in_accuracy(scoring):
    levels = [scoring.skill_level(_profile_with(c, 20)) for c in range(21)]
    assert levels == sorted(levels)
    assert levels[0] == SkillLevel.BEGINNER
    assert levels[-1] in (SkillLevel.ADVANCED, SkillLevel.EXPERT)


def test_policy_rejects_overlapping_cutoffs():
    with pytest.raises(InvalidArgument):
        ScoringPolicy(level_cutoffs=(0.5, 0.4, 0.9))


def test_topic_mastery_shrinks_toward_neutral(profile, scoring, question_factory):
    assert scoring.topic_mastery(profile, Topic.MEMORY_MANAGEMENT) == 0.5

    scoring.record_outcome(profile, question_factory(Topic.MEMORY_MANAGEMENT), False, 1.0, now=NOW)
    # (0.4 * 1 + 0.5 * 3) / 4
    assert scoring.topic_mastery(profile, Topic.MEMORY_MANAGEMENT) == pytest.approx(0.475)

    with pytest.raises(InvalidArgument):
        scoring.topic_mastery(profile, 15)


def test_topic_trend(profile, scoring, question_factory):
    q = question_factory(Topic.FUNCTIONS)
    scoring.record_outcome(profile, q, False, 1.0, now=NOW)
    scoring.record_outcome(profile, q, False, 1.0, now=NOW)
    assert scoring.topic_trend(profile, Topic.FUNCTIONS) == 0.0  # too few points

    for _ in range(3):
        scoring.record_outcome(profile, q, True, 1.0, now=NOW)
    assert scoring.topic_trend(profile, Topic.FUNCTIONS) > 0


def test_derived_scores(profile, scoring, question_factory):
    assert scoring.predicted_exam_score(profile) == 50.0
    assert scoring.interview_ready_score(profile) == 0

    for topic in (Topic.POINTERS, Topic.MEMORY_MANAGEMENT, Topic.ARRAYS_STRINGS, Topic.FUNCTIONS):
        for _ in range(5):
            scoring.record_outcome(profile, question_factory(topic), True, 1.0, now=NOW)

    assert 0 < profile.interview_ready_score <= 100
    assert profile.interview_ready_score == scoring.interview_ready_score(profile)
    assert profile.predicted_exam_score > 50.0


def test_weak_and_strong_topics(profile, scoring, question_factory):
    for _ in range(5):
        scoring.record_outcome(profile, question_factory(Topic.POINTERS), False, 1.0, now=NOW)
        scoring.record_outcome(profile, question_factory(Topic.C_BASICS), True, 1.0, now=NOW)

    assert scoring.weak_topics(profile) == [Topic.POINTERS]
    assert scoring.strong_topics(profile) == [Topic.C_BASICS]


def test_award_achievements_returns_only_new(profile, scoring):
    assert scoring.award_achievements(profile, ["first_quiz", "streak_5"]) == ["first_quiz", "streak_5"]
    assert scoring.award_achievements(profile, ["streak_5"]) == []
    assert profile.achievements == {"first_quiz", "streak_5"}
