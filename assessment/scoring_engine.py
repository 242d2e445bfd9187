"""
Scoring Engine - Updates student profiles and classifies skill level.

Features:
    - Single mutation entry point for every score and counter
    - Exponential smoothing of per-topic scores
    - Incremental running mean of question answer times
    - Skill-tier classification and confidence-adjusted topic mastery
"""

import math
import time
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from logging_config import get_logger

from . import statistics
from .errors import InvalidArgument
from .models import (
    NUM_TOPICS,
    NEUTRAL_SCORE,
    RECENT_RESULTS_LIMIT,
    Question,
    SkillLevel,
    StudentProfile,
    Topic,
    coerce_topic,
)


logger = get_logger(__name__)


@dataclass
class ScoringPolicy:
    """Tunable constants for scoring and classification."""
    smoothing_weight: float = 0.8  # Weight kept by the previous topic score
    # Upper bounds of Beginner, Intermediate, Advanced; anything above is Expert
    level_cutoffs: Tuple[float, float, float] = (0.40, 0.65, 0.85)
    accuracy_weight: float = 0.7  # Rest goes to the mean topic score
    mastery_prior: float = 3.0  # Pseudo-attempts pulling mastery toward 0.5
    recent_results_limit: int = RECENT_RESULTS_LIMIT
    interview_topics: Tuple[Topic, ...] = field(default_factory=lambda: (
        Topic.POINTERS,
        Topic.MEMORY_MANAGEMENT,
        Topic.ARRAYS_STRINGS,
        Topic.FUNCTIONS,
    ))

    def __post_init__(self):
        low, mid, high = self.level_cutoffs
        if not 0.0 < low < mid < high <= 1.0:
            raise InvalidArgument(f"level cutoffs must be increasing in (0, 1]: {self.level_cutoffs}")
        if not 0.0 < self.smoothing_weight < 1.0:
            raise InvalidArgument(f"smoothing weight must be in (0, 1): {self.smoothing_weight}")
        if not 0.0 <= self.accuracy_weight <= 1.0:
            raise InvalidArgument(f"accuracy weight must be in [0, 1]: {self.accuracy_weight}")


class ScoringEngine:
    """
    Owns every write to a StudentProfile.

    Topic score update (exponential smoothing):
        new = old * 0.8 + outcome * 0.2

    Skill level uses a blend of overall accuracy and mean topic score:
        blended = 0.7 * shrunk_accuracy + 0.3 * mean(topic_scores)
    """

    def __init__(self, policy: Optional[ScoringPolicy] = None):
        self.policy = policy or ScoringPolicy()

    # ==================== Outcome Recording ====================

    def record_outcome(self, profile: StudentProfile, question: Question, correct: bool,
                       time_taken: float, now: Optional[float] = None) -> Dict:
        """
        Apply one answered question to the profile and the question.

        All inputs are checked before anything changes, so a rejected call
        leaves both objects untouched.

        Returns dict with the updated topic and profile figures.
        """
        topic = coerce_topic(question.topic)
        if not isinstance(time_taken, (int, float)) or isinstance(time_taken, bool) \
                or not math.isfinite(time_taken) or time_taken < 0:
            raise InvalidArgument(f"time taken must be a finite non-negative number, got {time_taken!r}")
        now = time.time() if now is None else now
        correct = bool(correct)
        previous_level = profile.current_level

        # 1. Aggregate counters and streaks
        profile.total_attempted += 1
        if correct:
            profile.total_correct += 1
            profile.learning_streak += 1
            profile.max_streak = max(profile.max_streak, profile.learning_streak)
        else:
            profile.learning_streak = 0

        # 2. Topic counters
        profile.topic_attempted[topic] += 1
        if correct:
            profile.topic_correct[topic] += 1

        # 3. Smoothed topic score
        w = self.policy.smoothing_weight
        outcome = 1.0 if correct else 0.0
        profile.topic_scores[topic] = profile.topic_scores[topic] * w + outcome * (1.0 - w)

        history = profile.recent_results[topic]
        history.append(int(correct))
        del history[:-self.policy.recent_results_limit]
        profile.topic_last_practiced[topic] = now

        # 4. overall_accuracy is derived from the counters on read

        # 5. Skill level
        profile.current_level = self.skill_level(profile)

        # 6. Question statistics (incremental mean)
        asked_before = question.times_asked
        question.times_asked = asked_before + 1
        if correct:
            question.times_correct += 1
        question.avg_time_taken = (
            question.avg_time_taken * asked_before + time_taken
        ) / question.times_asked

        # 7. Activity timestamps and derived figures
        profile.last_practice = now
        profile.total_study_time += time_taken
        if profile.total_study_time > 0:
            profile.learning_velocity = profile.total_attempted / (profile.total_study_time / 3600)
        profile.predicted_exam_score = self.predicted_exam_score(profile)
        profile.interview_ready_score = self.interview_ready_score(profile)

        if profile.current_level != previous_level:
            logger.info(
                "Student %s moved from %s to %s",
                profile.student_id, previous_level.display_name, profile.current_level.display_name,
                extra={"student_id": profile.student_id},
            )
        logger.debug(
            "Recorded %s answer for student %s on question %s (%s): score %.3f",
            "correct" if correct else "wrong", profile.student_id, question.id,
            topic.name, profile.topic_scores[topic],
        )

        return {
            "topic": topic,
            "is_correct": correct,
            "topic_score": profile.topic_scores[topic],
            "mastery": self.topic_mastery(profile, topic),
            "streak": profile.learning_streak,
            "accuracy": profile.overall_accuracy,
            "level": profile.current_level,
            "level_changed": profile.current_level != previous_level,
        }

    def award_achievements(self, profile: StudentProfile, names: Iterable[str]) -> List[str]:
        """Add achievement flags to the profile. Returns those that were new."""
        new = sorted(set(names) - profile.achievements)
        profile.achievements.update(new)
        return new

    # ==================== Classification ====================

    def skill_level(self, profile: StudentProfile) -> SkillLevel:
        """
        Classify the profile into one of four contiguous bands.

        A profile that has not answered anything is a Beginner. Accuracy is
        shrunk toward 0.5 with the mastery prior, so a handful of lucky
        answers cannot jump a learner several tiers.
        """
        if profile.total_attempted == 0:
            return SkillLevel.BEGINNER

        a = self.policy.accuracy_weight
        blended = a * self.shrunk_accuracy(profile) + (1.0 - a) * profile.mean_topic_score()

        low, mid, high = self.policy.level_cutoffs
        if blended < low:
            return SkillLevel.BEGINNER
        elif blended < mid:
            return SkillLevel.INTERMEDIATE
        elif blended < high:
            return SkillLevel.ADVANCED
        return SkillLevel.EXPERT

    def shrunk_accuracy(self, profile: StudentProfile) -> float:
        """Overall accuracy pulled toward 0.5: (correct + 0.5*k) / (attempted + k)."""
        k = self.policy.mastery_prior
        if profile.total_attempted + k == 0:
            return 0.0
        return (profile.total_correct + NEUTRAL_SCORE * k) / (profile.total_attempted + k)

    # ==================== Derived Metrics ====================

    def topic_mastery(self, profile: StudentProfile, topic: Topic) -> float:
        """
        Smoothed topic score shrunk toward 0.5 by sample size.

        mastery = (score * n + 0.5 * k) / (n + k), k = mastery_prior
        """
        topic = coerce_topic(topic)
        n = profile.topic_attempted[topic]
        k = self.policy.mastery_prior
        if n + k == 0:
            return profile.topic_scores[topic]
        mastery = (profile.topic_scores[topic] * n + NEUTRAL_SCORE * k) / (n + k)
        return max(0.0, min(1.0, mastery))

    def all_mastery(self, profile: StudentProfile) -> Dict[Topic, float]:
        return {topic: self.topic_mastery(profile, topic) for topic in Topic}

    def topic_trend(self, profile: StudentProfile, topic: Topic, min_points: int = 3) -> float:
        """
        Slope of the topic's recent outcomes (per attempt).

        Positive means improving. 0 when fewer than min_points outcomes exist.
        """
        topic = coerce_topic(topic)
        history = profile.recent_results[topic]
        if len(history) < min_points:
            return 0.0

        # Regress on the running accuracy so single slips don't swing the slope
        running, correct = [], 0
        for i, outcome in enumerate(history, start=1):
            correct += outcome
            running.append(correct / i)
        slope, _ = statistics.linear_regression(list(range(len(running))), running)
        return slope

    def predicted_exam_score(self, profile: StudentProfile) -> float:
        """0-100 forecast from mean mastery and overall accuracy (50 before any answer)."""
        if profile.total_attempted == 0:
            return 50.0
        mean_mastery = statistics.mean([self.topic_mastery(profile, t) for t in Topic])
        return round(100.0 * (0.6 * mean_mastery + 0.4 * profile.overall_accuracy), 2)

    def interview_ready_score(self, profile: StudentProfile) -> int:
        """
        0-100 readiness for a C technical interview.

        40% accuracy, 40% mastery of core interview topics, 20% topic coverage.
        """
        if profile.total_attempted == 0:
            return 0
        core = statistics.mean([self.topic_mastery(profile, t) for t in self.policy.interview_topics])
        coverage = sum(1 for n in profile.topic_attempted if n > 0) / NUM_TOPICS
        score = 100.0 * (0.4 * profile.overall_accuracy + 0.4 * core + 0.2 * coverage)
        return int(round(max(0.0, min(100.0, score))))

    def weak_topics(self, profile: StudentProfile, threshold: float = 0.4) -> List[Topic]:
        """Practiced topics with mastery below threshold, weakest first."""
        weak = [t for t in Topic
                if profile.topic_attempted[t] > 0 and self.topic_mastery(profile, t) < threshold]
        return sorted(weak, key=lambda t: (self.topic_mastery(profile, t), t))

    def strong_topics(self, profile: StudentProfile, threshold: float = 0.6) -> List[Topic]:
        """Practiced topics with mastery at or above threshold, strongest first."""
        strong = [t for t in Topic
                  if profile.topic_attempted[t] > 0 and self.topic_mastery(profile, t) >= threshold]
        return sorted(strong, key=lambda t: (-self.topic_mastery(profile, t), t))
