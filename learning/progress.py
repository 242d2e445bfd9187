"""
Progress - Reports, achievements and certification checks.

Features:
    - Progress report with strongest/weakest topics and next steps
    - Achievement rules evaluated after each session
    - Experience points
    - Certification eligibility
"""

import time
from datetime import datetime
from enum import Enum
from dataclasses import dataclass, asdict, field
from typing import Dict, List, Optional

from assessment.models import NUM_TOPICS, SkillLevel, StudentProfile, Topic
from assessment.quiz_session import SessionSummary
from assessment.scoring_engine import ScoringEngine
from logging_config import get_logger


logger = get_logger(__name__)


class Achievement(str, Enum):
    FIRST_QUIZ = "first_quiz"
    PERFECT_SCORE = "perfect_score"
    STREAK_5 = "streak_5"
    STREAK_10 = "streak_10"
    TOPIC_MASTER = "topic_master"
    SPEED_DEMON = "speed_demon"
    PERSISTENT_LEARNER = "persistent_learner"
    INTERVIEW_READY = "interview_ready"
    C_EXPERT = "c_expert"


@dataclass
class ProgressReport:
    """Snapshot of a student's progress."""
    report_date: str
    student_name: str
    total_questions_attempted: int
    overall_accuracy: float
    strongest_topic: Optional[str]
    weakest_topic: Optional[str]
    study_time_minutes: int
    current_level: str
    predicted_exam_score: float
    interview_ready_score: int
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return asdict(self)


class ProgressTracker:
    """Reads profiles to build reports and grants achievements through ScoringEngine."""

    MAX_RECOMMENDATIONS = 5

    # Achievement thresholds
    SESSION_MIN_QUESTIONS = 5
    SPEED_DEMON_SECONDS = 15.0
    TOPIC_MASTER_SCORE = 0.8
    TOPIC_MASTER_ATTEMPTS = 5
    PERSISTENT_ATTEMPTS = 100
    INTERVIEW_READY_SCORE = 80
    EXPERT_ATTEMPTS = 50

    # Certification
    CERT_MIN_ATTEMPTS = 50
    CERT_MIN_ACCURACY = 0.75
    CERT_MIN_TOPIC_ATTEMPTS = 3
    CERT_MIN_TOPIC_MASTERY = 0.5

    def __init__(self, scoring: Optional[ScoringEngine] = None):
        self.scoring = scoring or ScoringEngine()

    # ==================== Report ====================

    def build_report(self, profile: StudentProfile, now: Optional[float] = None) -> ProgressReport:
        now = time.time() if now is None else now
        practiced = [t for t in Topic if profile.topic_attempted[t] > 0]
        mastery = self.scoring.all_mastery(profile)

        strongest = weakest = None
        if practiced:
            strongest = min(practiced, key=lambda t: (-mastery[t], t)).display_name
            weakest = min(practiced, key=lambda t: (mastery[t], t)).display_name

        return ProgressReport(
            report_date=datetime.fromtimestamp(now).strftime("%Y-%m-%d"),
            student_name=profile.name,
            total_questions_attempted=profile.total_attempted,
            overall_accuracy=round(profile.overall_accuracy, 4),
            strongest_topic=strongest,
            weakest_topic=weakest,
            study_time_minutes=int(profile.total_study_time // 60),
            current_level=profile.current_level.display_name,
            predicted_exam_score=profile.predicted_exam_score,
            interview_ready_score=profile.interview_ready_score,
            recommendations=self.recommendations(profile),
        )

    def recommendations(self, profile: StudentProfile) -> List[str]:
        """Short next-step suggestions, most important first."""
        if profile.total_attempted == 0:
            return ["Take a first adaptive quiz so we can find your level."]

        tips = []
        for topic in self.scoring.weak_topics(profile):
            tips.append(f"Review {topic.display_name} starting with easier questions.")

        untouched = [t for t in Topic if profile.topic_attempted[t] == 0]
        if untouched:
            tips.append(f"Try {untouched[0].display_name}; you have not practised it yet.")

        if profile.learning_streak == 0 and profile.total_attempted >= 5:
            tips.append("Slow down and read each explanation after a miss.")

        if profile.current_level < SkillLevel.EXPERT and not self.scoring.weak_topics(profile):
            tips.append("Move up to harder questions in your strongest topics.")

        if profile.interview_ready_score < self.INTERVIEW_READY_SCORE:
            tips.append("Practise pointers and memory management for interview readiness.")

        return tips[:self.MAX_RECOMMENDATIONS]

    # ==================== Achievements ====================

    def earned_achievements(self, profile: StudentProfile,
                            summary: Optional[SessionSummary] = None) -> List[Achievement]:
        """Every achievement whose condition currently holds."""
        earned = []
        if profile.total_attempted >= 1:
            earned.append(Achievement.FIRST_QUIZ)
        if profile.max_streak >= 5:
            earned.append(Achievement.STREAK_5)
        if profile.max_streak >= 10:
            earned.append(Achievement.STREAK_10)
        if any(profile.topic_scores[t] >= self.TOPIC_MASTER_SCORE
               and profile.topic_attempted[t] >= self.TOPIC_MASTER_ATTEMPTS for t in Topic):
            earned.append(Achievement.TOPIC_MASTER)
        if profile.total_attempted >= self.PERSISTENT_ATTEMPTS:
            earned.append(Achievement.PERSISTENT_LEARNER)
        if profile.interview_ready_score >= self.INTERVIEW_READY_SCORE:
            earned.append(Achievement.INTERVIEW_READY)
        if profile.current_level == SkillLevel.EXPERT and profile.total_attempted >= self.EXPERT_ATTEMPTS:
            earned.append(Achievement.C_EXPERT)

        if summary is not None and summary.questions_attempted >= self.SESSION_MIN_QUESTIONS:
            if summary.questions_correct == summary.questions_attempted:
                earned.append(Achievement.PERFECT_SCORE)
            if summary.avg_response_time <= self.SPEED_DEMON_SECONDS and summary.session_accuracy >= 0.8:
                earned.append(Achievement.SPEED_DEMON)
        return earned

    def check_achievements(self, profile: StudentProfile,
                           summary: Optional[SessionSummary] = None) -> List[Achievement]:
        """Award newly earned achievements. Returns only the new ones."""
        earned = self.earned_achievements(profile, summary)
        new = self.scoring.award_achievements(profile, (a.value for a in earned))
        for name in new:
            logger.info("Student %s earned %s", profile.student_id, name,
                        extra={"student_id": profile.student_id})
        return [Achievement(name) for name in new]

    # ==================== XP & Certification ====================

    def experience_points(self, profile: StudentProfile) -> int:
        return (
            10 * profile.total_correct
            + 2 * profile.total_attempted
            + 5 * profile.max_streak
            + 50 * len(profile.achievements)
        )

    def certification_eligibility(self, profile: StudentProfile) -> Dict:
        """
        Check the certification requirements.

        Returns dict with "eligible" and the list of unmet requirements.
        """
        missing = []
        if profile.total_attempted < self.CERT_MIN_ATTEMPTS:
            missing.append(f"Answer at least {self.CERT_MIN_ATTEMPTS} questions "
                           f"({profile.total_attempted} so far)")
        if profile.overall_accuracy < self.CERT_MIN_ACCURACY:
            missing.append(f"Reach {self.CERT_MIN_ACCURACY:.0%} overall accuracy "
                           f"(currently {profile.overall_accuracy:.0%})")

        thin = [t for t in Topic if profile.topic_attempted[t] < self.CERT_MIN_TOPIC_ATTEMPTS]
        if thin:
            missing.append(f"Practise every topic at least {self.CERT_MIN_TOPIC_ATTEMPTS} times "
                           f"({NUM_TOPICS - len(thin)}/{NUM_TOPICS} done)")

        weak = [t for t in Topic
                if self.scoring.topic_mastery(profile, t) < self.CERT_MIN_TOPIC_MASTERY]
        if weak:
            missing.append("Raise mastery in: " + ", ".join(t.display_name for t in weak))

        return {
            "eligible": not missing,
            "level": profile.current_level.display_name,
            "missing": missing,
        }
