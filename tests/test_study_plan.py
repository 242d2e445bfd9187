"""Tests for learning/study_plan.py"""

import pytest

from assessment import Topic
from assessment.errors import InvalidArgument
from learning import StudyPlanner
from learning.study_plan import SECONDS_PER_DAY

from conftest import NOW


@pytest.fixture
def planner(scoring):
    return StudyPlanner(scoring)


def _miss(scoring, profile, question_factory, topic, times=5):
    for _ in range(times):
        scoring.record_outcome(profile, question_factory(topic), False, 1.0, now=NOW)


def _strong_profile(profile):
    profile.topic_scores = [0.9] * 12
    profile.topic_attempted = [10] * 12
    profile.topic_last_practiced = [NOW] * 12
    return profile


def test_fresh_profile_path_covers_every_topic(planner, profile):
    path = planner.learning_path(profile)
    assert [s.topic for s in path] == planner.graph.topological_order()
    assert all(not s.practiced and s.root_cause == s.topic for s in path)
    assert path[0].to_dict()["topic"] == Topic.C_BASICS.display_name


def test_path_traces_weak_prerequisite(planner, scoring, profile, question_factory):
    _miss(scoring, profile, question_factory, Topic.VARIABLES_DATATYPES)
    _miss(scoring, profile, question_factory, Topic.POINTERS)

    steps = {s.topic: s for s in planner.learning_path(profile)}
    assert steps[Topic.POINTERS].practiced
    assert steps[Topic.POINTERS].root_cause == Topic.VARIABLES_DATATYPES


def test_study_plan_starts_with_practiced_weak_topics(planner, scoring, profile, question_factory):
    _miss(scoring, profile, question_factory, Topic.VARIABLES_DATATYPES)
    _miss(scoring, profile, question_factory, Topic.POINTERS)

    plan = planner.study_plan(profile, days=2, questions_per_day=10, topics_per_day=2, now=NOW)
    day_one = [item for item in plan if item.day == 1]

    assert [item.topic for item in day_one] == [Topic.VARIABLES_DATATYPES, Topic.POINTERS]
    assert [item.question_count for item in day_one] == [5, 5]
    assert day_one[0].difficulty_band == (1, 2)
    assert Topic.VARIABLES_DATATYPES.display_name in day_one[1].reason


def test_study_plan_rotates_and_splits_questions(planner, profile):
    plan = planner.study_plan(profile, days=2, questions_per_day=7, topics_per_day=2, now=NOW)

    assert [(i.day, i.topic) for i in plan] == [
        (1, Topic.C_BASICS), (1, Topic.VARIABLES_DATATYPES),
        (2, Topic.OPERATORS_EXPRESSIONS), (2, Topic.CONTROL_STRUCTURES),
    ]
    assert [i.question_count for i in plan] == [4, 3, 4, 3]
    assert all(i.reason == "Not practised yet" for i in plan)
    assert all(i.difficulty_band == (2, 3) for i in plan)


def test_due_for_review_is_stalest_first(planner, profile):
    profile.topic_last_practiced[Topic.FILE_IO] = NOW - 8 * SECONDS_PER_DAY
    profile.topic_last_practiced[Topic.POINTERS] = NOW - 10 * SECONDS_PER_DAY
    profile.topic_last_practiced[Topic.C_BASICS] = NOW - 1 * SECONDS_PER_DAY

    assert planner.due_for_review(profile, now=NOW) == [Topic.POINTERS, Topic.FILE_IO]


def test_strong_profile_only_gets_reviews(planner, profile):
    _strong_profile(profile)
    assert planner.study_plan(profile, now=NOW) == []

    profile.topic_last_practiced[Topic.FILE_IO] = NOW - 8 * SECONDS_PER_DAY
    plan = planner.study_plan(profile, days=3, now=NOW)
    assert [(i.topic, i.question_count, i.reason) for i in plan] == [
        (Topic.FILE_IO, 10, "Due for review"),
    ] * 3
    assert plan[0].difficulty_band == (4, 5)


@pytest.mark.parametrize("mastery, band", [(0.1, (1, 2)), (0.5, (2, 3)), (0.7, (3, 4)), (0.95, (4, 5))])
def test_difficulty_band(mastery, band):
    assert StudyPlanner.difficulty_band(mastery) == band


def test_study_plan_rejects_bad_arguments(planner, profile):
    with pytest.raises(InvalidArgument):
        planner.study_plan(profile, days=0)
