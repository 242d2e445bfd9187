"""
Quiz Session - Drives the ask / answer loop for one student.

Features:
    - Adaptive, topic practice, random and mock exam modes
    - Recency window of recently shown question ids
    - Progressive hints
    - Stopping rule and session summary
"""

import random
import time
from collections import Counter, deque
from dataclasses import dataclass
from typing import Deque, Iterable, List, Optional, Tuple

from logging_config import get_logger

from . import statistics
from .errors import InvalidArgument, NoCandidates
from .models import Question, Recommendation, SkillLevel, StudentProfile, Topic, coerce_topic
from .question_catalog import QuestionCatalog
from .recommendation_engine import RecommendationEngine
from .scoring_engine import ScoringEngine


logger = get_logger(__name__)


@dataclass
class SessionSummary:
    """Aggregate figures for a finished (or running) session."""
    mode: str
    questions_attempted: int
    questions_correct: int
    session_accuracy: float
    primary_topic: Optional[Topic]
    session_level: SkillLevel
    hints_used: int
    avg_response_time: float
    start_time: float
    end_time: Optional[float]


class QuizSession:
    """
    One quiz run for a student.

    Strategies:
        - adaptive: RecommendationEngine picks every question
        - topic: one topic, easy to hard
        - random: uniform over the catalog
        - mock_exam: questions in a fixed level's difficulty band across topics
    """

    MODES = ("adaptive", "topic", "random", "mock_exam")

    def __init__(self, profile: StudentProfile, catalog: QuestionCatalog,
                 recommender: Optional[RecommendationEngine] = None,
                 mode: str = "adaptive", topic: Optional[Topic] = None,
                 level: Optional[SkillLevel] = None, question_limit: int = 10,
                 recency_window: int = 10, recent_ids: Iterable[int] = (),
                 rng: Optional[random.Random] = None):
        if mode not in self.MODES:
            raise InvalidArgument(f"unknown quiz mode {mode!r}; expected one of {self.MODES}")
        if mode == "topic" and topic is None:
            raise InvalidArgument("topic practice needs a topic")
        if mode == "mock_exam" and level is None:
            raise InvalidArgument("a mock exam needs a skill level")
        if question_limit <= 0:
            raise InvalidArgument(f"question limit must be positive, got {question_limit}")

        self.profile = profile
        self.catalog = catalog
        self.recommender = recommender or RecommendationEngine()
        self.scoring: ScoringEngine = self.recommender.scoring
        self.mode = mode
        self.topic = coerce_topic(topic) if topic is not None else None
        self.level = SkillLevel(level) if level is not None else None
        self.question_limit = question_limit
        self.rng = rng or random.Random()

        self.recent_ids: Deque[int] = deque(recent_ids, maxlen=recency_window)
        self.responses: List[dict] = []
        self.current: Optional[Question] = None
        self.last_recommendation: Optional[Recommendation] = None
        self.hint_level = 0
        self.hints_used = 0
        self.start_time = time.time()
        self.end_time: Optional[float] = None

    # ==================== Question Selection ====================

    def next_question(self) -> Optional[Question]:
        """Pick and hold the next question; None once the session should stop."""
        stop, reason = self.should_stop()
        if stop:
            logger.debug("Session for student %s stopping: %s", self.profile.student_id, reason)
            return None

        if self.mode == "adaptive":
            self.last_recommendation = self.recommender.recommend(
                self.profile, self.catalog, self.recent_ids
            )
            question = self.last_recommendation.question
        elif self.mode == "topic":
            question = self._select_topic_practice()
        elif self.mode == "mock_exam":
            question = self._select_mock_exam()
        else:
            question = self._select_random()

        self.current = question
        self.hint_level = 0
        return question

    def _prefer_unseen(self, pool: List[Question]) -> List[Question]:
        fresh = [q for q in pool if q.id not in self.recent_ids]
        return fresh or pool

    def _select_topic_practice(self) -> Question:
        """Easiest not-recently-shown question of the topic."""
        pool = list(self.catalog.by_topic(self.topic))
        if not pool:
            raise NoCandidates(f"no questions for topic {self.topic.display_name}")
        return QuestionCatalog.sort_by_difficulty(self._prefer_unseen(pool))[0]

    def _select_random(self) -> Question:
        fresh = self._prefer_unseen(list(self.catalog))
        if not fresh:
            return self.catalog.random()
        return self.rng.choice(fresh)

    def _select_mock_exam(self) -> Question:
        """Random question inside the exam level's band, widening when the band is empty."""
        questions = list(self.catalog)
        if not questions:
            raise NoCandidates("question catalog is empty")
        band = self.recommender.target_band(self.level)
        asked = {r["question_id"] for r in self.responses}
        for pool in self.recommender.candidate_stages(questions, band):
            unasked = [q for q in pool if q.id not in asked]
            if unasked:
                return self.rng.choice(unasked)
        return self.rng.choice(questions)

    # ==================== Hints ====================

    def hint(self) -> Optional[str]:
        """Next progressive hint for the current question (None if it has none)."""
        if self.current is None:
            raise InvalidArgument("no question is being asked")
        if not self.current.hints:
            return None
        if self.hint_level < len(self.current.hints):
            self.hint_level += 1
            self.hints_used += 1
        return self.current.hint(self.hint_level)

    # ==================== Response Processing ====================

    def submit_answer(self, option_index: int, time_taken: float) -> dict:
        """Check the answer to the current question and record it."""
        question = self.current
        if question is None:
            raise InvalidArgument("no question is being asked")

        is_correct = question.is_correct(option_index)
        result = self.scoring.record_outcome(self.profile, question, is_correct, time_taken)

        self.recent_ids.append(question.id)
        self.responses.append({
            "question_id": question.id,
            "topic": question.topic,
            "difficulty": question.difficulty,
            "chosen": option_index,
            "is_correct": is_correct,
            "time_taken": time_taken,
            "hints_used": self.hint_level,
        })
        self.current = None

        result.update({
            "question_id": question.id,
            "correct_answer": question.correct_answer,
            "explanation": question.explanation,
        })
        return result

    # ==================== Stopping Rules ====================

    def should_stop(self) -> Tuple[bool, str]:
        """Returns (should_stop, reason)."""
        if self.end_time is not None:
            return True, "finished"
        if len(self.responses) >= self.question_limit:
            return True, "max_reached"
        return False, "continue"

    # ==================== Summary ====================

    def summary(self) -> SessionSummary:
        total = len(self.responses)
        correct = sum(1 for r in self.responses if r["is_correct"])
        topics = Counter(r["topic"] for r in self.responses)
        primary = min(topics, key=lambda t: (-topics[t], t)) if topics else self.topic

        return SessionSummary(
            mode=self.mode,
            questions_attempted=total,
            questions_correct=correct,
            session_accuracy=statistics.accuracy(correct, total),
            primary_topic=primary,
            session_level=self.level or self.profile.current_level,
            hints_used=self.hints_used,
            avg_response_time=statistics.mean([r["time_taken"] for r in self.responses]),
            start_time=self.start_time,
            end_time=self.end_time,
        )

    def finish(self) -> SessionSummary:
        """Close the session and return its summary."""
        if self.end_time is None:
            self.end_time = time.time()
            logger.info(
                "Session (%s) for student %s finished: %d/%d correct",
                self.mode, self.profile.student_id,
                sum(1 for r in self.responses if r["is_correct"]), len(self.responses),
                extra={"student_id": self.profile.student_id, "session_mode": self.mode},
            )
        return self.summary()
