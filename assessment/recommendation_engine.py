"""
Recommendation Engine - Picks the next best question for a student.

Features:
    - Topic priority from weakness and time since last practice
    - Difficulty band derived from the classified skill level
    - Recency window to avoid immediate repeats
    - Deterministic weighted scoring with explanations
    - Per-topic performance forecast
"""

import time
from dataclasses import dataclass
from typing import Collection, Dict, List, Optional, Tuple

from logging_config import get_logger

from .errors import NoCandidates
from .models import (
    MAX_DIFFICULTY,
    MIN_DIFFICULTY,
    NEUTRAL_SCORE,
    Question,
    Recommendation,
    SkillLevel,
    StudentProfile,
    Topic,
    coerce_topic,
)
from .question_catalog import QuestionCatalog
from .scoring_engine import ScoringEngine


logger = get_logger(__name__)

SECONDS_PER_DAY = 86400

WEAK_TOPIC = "weak_topic"
DIFFICULTY_PROGRESSION = "difficulty_progression"


@dataclass
class RecommendationWeights:
    """Weights for topic priority and candidate scoring."""
    topic_priority: float = 0.5  # w1
    difficulty_match: float = 0.35  # w2
    consistency: float = 0.15  # w3, rewards small squared distance from band center
    # Topic priority = mastery_gap * (1 - mastery) + recency * recency_factor
    mastery_gap: float = 0.7
    recency: float = 0.3
    recency_saturation_days: float = 7.0
    # Forecast
    trend_horizon: int = 5  # Attempts to project the trend forward
    confidence_attempts: int = 10  # Attempts needed for full trust in the trend


class RecommendationEngine:
    """
    Deterministic question recommender.

    Candidate score:
        score = w1 * topic_priority + w2 * difficulty_match + w3 * (1 - variance)

    difficulty_match = 1 - |difficulty - band_center| / 4
    variance = (|difficulty - band_center| / 4) ** 2
    """

    LEVEL_BANDS: Dict[SkillLevel, Tuple[int, int]] = {
        SkillLevel.BEGINNER: (1, 2),
        SkillLevel.INTERMEDIATE: (2, 3),
        SkillLevel.ADVANCED: (3, 4),
        SkillLevel.EXPERT: (4, 5),
    }

    DIFFICULTY_SPAN = MAX_DIFFICULTY - MIN_DIFFICULTY

    def __init__(self, scoring: Optional[ScoringEngine] = None,
                 weights: Optional[RecommendationWeights] = None):
        self.scoring = scoring or ScoringEngine()
        self.weights = weights or RecommendationWeights()

    # ==================== Topic Priority ====================

    def recency_factor(self, profile: StudentProfile, topic: Topic, now: float) -> float:
        """0 right after practice, rising to 1 after the saturation period (1 if never practiced)."""
        last = profile.topic_last_practiced[topic]
        if last <= 0:
            return 1.0
        days = max(0.0, now - last) / SECONDS_PER_DAY
        return min(1.0, days / self.weights.recency_saturation_days)

    def topic_priority(self, profile: StudentProfile, topic: Topic,
                       now: Optional[float] = None) -> float:
        """Higher for weaker and longer-unpracticed topics, in [0, 1]."""
        topic = coerce_topic(topic)
        now = time.time() if now is None else now
        w = self.weights
        mastery = self.scoring.topic_mastery(profile, topic)
        priority = w.mastery_gap * (1.0 - mastery) + w.recency * self.recency_factor(profile, topic, now)
        return max(0.0, min(1.0, priority))

    # ==================== Difficulty ====================

    def target_band(self, level: SkillLevel) -> Tuple[int, int]:
        return self.LEVEL_BANDS[SkillLevel(level)]

    def _distance(self, question: Question, band: Tuple[int, int]) -> float:
        center = (band[0] + band[1]) / 2
        return abs(question.difficulty - center) / self.DIFFICULTY_SPAN

    def difficulty_match(self, question: Question, band: Tuple[int, int]) -> float:
        return max(0.0, 1.0 - self._distance(question, band))

    def candidate_stages(self, questions: List[Question], band: Tuple[int, int]):
        """Yield candidate pools: the band, the band widened one step, then the whole topic."""
        lo, hi = band
        yield [q for q in questions if lo <= q.difficulty <= hi]
        wide_lo, wide_hi = max(MIN_DIFFICULTY, lo - 1), min(MAX_DIFFICULTY, hi + 1)
        yield [q for q in questions if wide_lo <= q.difficulty <= wide_hi]
        yield questions

    # ==================== Recommendation ====================

    def recommend(self, profile: StudentProfile, catalog: QuestionCatalog,
                  recently_asked: Collection[int] = (),
                  now: Optional[float] = None) -> Recommendation:
        """
        Select the next question.

        Topics are tried from highest to lowest priority; within a topic the
        level band is tried first, then widened by one step, then the whole
        topic. Questions in recently_asked are skipped unless every question
        in the catalog is in it.

        Raises NoCandidates only when the catalog is empty.
        """
        if len(catalog) == 0:
            raise NoCandidates("cannot recommend from an empty catalog")

        now = time.time() if now is None else now
        recent = set(recently_asked)
        level = self.scoring.skill_level(profile)
        band = self.target_band(level)

        by_topic: Dict[Topic, List[Question]] = {}
        for q in catalog:
            by_topic.setdefault(q.topic, []).append(q)

        priorities = {t: self.topic_priority(profile, t, now) for t in by_topic}
        ranked_topics = sorted(by_topic, key=lambda t: (-priorities[t], t))

        topic, candidates = None, []
        for t in ranked_topics:
            for pool in self.candidate_stages(by_topic[t], band):
                fresh = [q for q in pool if q.id not in recent]
                if fresh:
                    topic, candidates = t, fresh
                    break
            if candidates:
                break

        if not candidates:
            # Every question was asked recently: repeat rather than fail
            topic = ranked_topics[0]
            candidates = next(pool for pool in self.candidate_stages(by_topic[topic], band) if pool)
            logger.debug("Recency window covers the catalog; allowing repeats")

        w = self.weights
        priority = priorities[topic]
        scored = []
        for q in candidates:
            match = self.difficulty_match(q, band)
            variance = self._distance(q, band) ** 2
            score = w.topic_priority * priority + w.difficulty_match * match + w.consistency * (1.0 - variance)
            scored.append((score, match, q))

        scored.sort(key=lambda item: (-item[0], item[2].id))
        score, match, best = scored[0]

        mastery = self.scoring.topic_mastery(profile, topic)
        factor = WEAK_TOPIC if mastery < NEUTRAL_SCORE else DIFFICULTY_PROGRESSION

        logger.debug(
            "Recommending question %s (%s, difficulty %d) to student %s: score %.3f",
            best.id, topic.name, best.difficulty, profile.student_id, score,
            extra={"student_id": profile.student_id, "question_id": best.id},
        )

        return Recommendation(
            question=best,
            confidence=max(0.0, min(1.0, score)),
            difficulty_match=match,
            topic_priority=priority,
            target_band=band,
            dominant_factor=factor,
            reasoning=self._reasoning(profile, best, level, band, factor, mastery, now),
            learning_objective=self._learning_objective(best),
        )

    def _reasoning(self, profile: StudentProfile, question: Question, level: SkillLevel,
                   band: Tuple[int, int], factor: str, mastery: float, now: float) -> str:
        topic = question.topic
        if factor == WEAK_TOPIC:
            return (
                f"{topic.display_name} is one of your weaker areas (mastery {mastery:.0%}); "
                f"this {question.difficulty_name.lower()} question targets it directly."
            )

        last = profile.topic_last_practiced[topic]
        if last <= 0:
            practice_note = f"you have not practised {topic.display_name} yet"
        else:
            days = (now - last) / SECONDS_PER_DAY
            practice_note = f"{topic.display_name} was last practised {days:.1f} days ago"
        return (
            f"Difficulty {question.difficulty} fits your {level.display_name} level "
            f"(target {band[0]}-{band[1]}) and {practice_note}."
        )

    @staticmethod
    def _learning_objective(question: Question) -> str:
        kind = question.question_type.value.replace("_", " ")
        return (
            f"Build {question.difficulty_name.lower()} {question.topic.display_name} "
            f"skills through a {kind} question."
        )

    # ==================== Forecast ====================

    def predict_performance(self, profile: StudentProfile, topic: Topic) -> float:
        """
        Expected score (0-100) on the topic.

        Mastery plus the recent trend projected a few attempts ahead,
        weighted by how many attempts back the trend.
        """
        topic = coerce_topic(topic)
        w = self.weights
        mastery = self.scoring.topic_mastery(profile, topic)
        confidence = min(1.0, profile.topic_attempted[topic] / w.confidence_attempts)
        trend = self.scoring.topic_trend(profile, topic)

        expected = mastery + confidence * trend * w.trend_horizon
        return round(100.0 * max(0.0, min(1.0, expected)), 2)
