"""
Study Planner - Turns a profile's weak spots into an ordered plan.

Features:
    - Learning path through weak topics in prerequisite order
    - Root cause per weak topic
    - Day-by-day plan with a difficulty band per topic
"""

import time
from dataclasses import dataclass, asdict
from typing import Dict, List, Optional, Tuple

from assessment.errors import InvalidArgument
from assessment.models import StudentProfile, Topic
from assessment.scoring_engine import ScoringEngine
from logging_config import get_logger

from .topic_graph import TopicGraph


logger = get_logger(__name__)

SECONDS_PER_DAY = 86400


@dataclass
class PathStep:
    """One topic on a learning path."""
    topic: Topic
    mastery: float
    root_cause: Topic
    practiced: bool

    def to_dict(self) -> Dict:
        data = asdict(self)
        data["topic"] = self.topic.display_name
        data["root_cause"] = self.root_cause.display_name
        return data


@dataclass
class StudyItem:
    """Practice assignment for a single day."""
    day: int
    topic: Topic
    difficulty_band: Tuple[int, int]
    question_count: int
    reason: str


class StudyPlanner:
    """Builds learning paths and study plans from mastery and the topic graph."""

    MASTERY_TARGET = 0.6  # Below this a topic belongs on the path
    WEAK_THRESHOLD = 0.4  # Below this a prerequisite counts as a root cause
    REVIEW_AFTER_DAYS = 7

    def __init__(self, scoring: Optional[ScoringEngine] = None,
                 graph: Optional[TopicGraph] = None):
        self.scoring = scoring or ScoringEngine()
        self.graph = graph or TopicGraph()

    def learning_path(self, profile: StudentProfile) -> List[PathStep]:
        """All topics below the mastery target, prerequisites first."""
        mastery = self.scoring.all_mastery(profile)
        steps = []
        for topic in self.graph.topological_order():
            if mastery[topic] >= self.MASTERY_TARGET:
                continue
            steps.append(PathStep(
                topic=topic,
                mastery=mastery[topic],
                root_cause=self.graph.trace_root_cause(topic, mastery, self.WEAK_THRESHOLD),
                practiced=profile.topic_attempted[topic] > 0,
            ))
        return steps

    def due_for_review(self, profile: StudentProfile, now: Optional[float] = None) -> List[Topic]:
        """Practiced topics untouched for REVIEW_AFTER_DAYS or more, stalest first."""
        now = time.time() if now is None else now
        cutoff = now - self.REVIEW_AFTER_DAYS * SECONDS_PER_DAY
        due = [t for t in Topic
               if 0 < profile.topic_last_practiced[t] <= cutoff]
        return sorted(due, key=lambda t: (profile.topic_last_practiced[t], t))

    @staticmethod
    def difficulty_band(mastery: float) -> Tuple[int, int]:
        if mastery < 0.4:
            return (1, 2)
        elif mastery < 0.6:
            return (2, 3)
        elif mastery < 0.8:
            return (3, 4)
        return (4, 5)

    def study_plan(self, profile: StudentProfile, days: int = 7,
                   questions_per_day: int = 10, topics_per_day: int = 2,
                   now: Optional[float] = None) -> List[StudyItem]:
        """
        Spread focus topics over the given number of days.

        Focus topics are the learning path (practiced topics first, since
        they have evidence behind them), then topics due for review. Each
        day works on up to topics_per_day of them, rotating through the list.
        """
        if days <= 0 or questions_per_day <= 0 or topics_per_day <= 0:
            raise InvalidArgument("days, questions_per_day and topics_per_day must be positive")

        path = self.learning_path(profile)
        ordered = [s for s in path if s.practiced] + [s for s in path if not s.practiced]
        focus: List[Tuple[Topic, str]] = []
        for step in ordered:
            if step.root_cause != step.topic:
                reason = f"Weak topic; shore up {step.root_cause.display_name} first"
            elif step.practiced:
                reason = f"Mastery {step.mastery:.0%} is below target"
            else:
                reason = "Not practised yet"
            focus.append((step.topic, reason))

        on_path = {t for t, _ in focus}
        for topic in self.due_for_review(profile, now):
            if topic not in on_path:
                focus.append((topic, "Due for review"))

        if not focus:
            return []

        mastery = self.scoring.all_mastery(profile)
        per_day = min(topics_per_day, len(focus))
        plan = []
        for day in range(1, days + 1):
            start = ((day - 1) * per_day) % len(focus)
            chosen = [focus[(start + i) % len(focus)] for i in range(per_day)]
            base, extra = divmod(questions_per_day, per_day)
            for i, (topic, reason) in enumerate(chosen):
                plan.append(StudyItem(
                    day=day,
                    topic=topic,
                    difficulty_band=self.difficulty_band(mastery[topic]),
                    question_count=base + (1 if i < extra else 0),
                    reason=reason,
                ))

        logger.debug("Built %d-day plan over %d focus topics for student %s",
                     days, len(focus), profile.student_id)
        return plan
