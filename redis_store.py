"""
Redis Store - Student profile and question statistics persistence.

Backend for `main.py --store redis`; question text still comes from the
JSON-lines bank, only the running counters live in Redis.

Key Structure:
    students                  -> Set (registered student ids)
    student:{id}:profile      -> String (ProfileRecord JSON)
    student:{id}:recent       -> List (recently shown question ids, newest last)
    question:{id}:stats       -> Hash (times_asked, times_correct, avg_time_taken)
"""

import redis
from typing import Iterable, List, Optional

from assessment.models import Question, StudentProfile
from assessment.question_catalog import QuestionCatalog
from config import Settings, get_settings
from logging_config import get_logger
from record_store import ProfileRecord


logger = get_logger(__name__)


class RedisStore:
    def __init__(self, settings: Optional[Settings] = None, client: Optional[redis.Redis] = None):
        """Connect to Redis using the tutor settings (or an existing client)."""
        self.settings = settings or get_settings()
        self.client = client or redis.Redis(
            host=self.settings.redis_host,
            port=self.settings.redis_port,
            password=self.settings.redis_password,
            db=self.settings.redis_db,
            decode_responses=True  # Return strings instead of bytes
        )
        self.recency_window = self.settings.recency_window

    # ==================== Key Builders ====================

    STUDENTS_KEY = "students"

    def _profile_key(self, student_id: int) -> str:
        return f"student:{student_id}:profile"

    def _recent_key(self, student_id: int) -> str:
        return f"student:{student_id}:recent"

    def _stats_key(self, question_id: int) -> str:
        return f"question:{question_id}:stats"

    # ==================== Profiles ====================

    def save_profile(self, profile: StudentProfile):
        """Write the whole profile record."""
        record = ProfileRecord.from_profile(profile)
        pipe = self.client.pipeline()
        pipe.set(self._profile_key(profile.student_id), record.model_dump_json())
        pipe.sadd(self.STUDENTS_KEY, profile.student_id)
        pipe.execute()

    def get_profile(self, student_id: int) -> Optional[StudentProfile]:
        """
        Retrieve a profile.

        Returns:
            StudentProfile, or None if the student is unknown
        """
        raw = self.client.get(self._profile_key(student_id))
        if raw is None:
            return None
        return ProfileRecord.model_validate_json(raw).to_profile()

    def list_student_ids(self) -> List[int]:
        return sorted(int(sid) for sid in self.client.smembers(self.STUDENTS_KEY))

    def load_profiles(self) -> List[StudentProfile]:
        """All stored profiles ordered by id."""
        profiles = []
        for sid in self.list_student_ids():
            profile = self.get_profile(sid)
            if profile is None:
                logger.warning("Student %s is registered but has no profile", sid)
                continue
            profiles.append(profile)
        return profiles

    def delete_student(self, student_id: int):
        """Delete all data for a student (for testing/cleanup)."""
        self.client.delete(self._profile_key(student_id), self._recent_key(student_id))
        self.client.srem(self.STUDENTS_KEY, student_id)

    # ==================== Recency Window ====================

    def push_recent(self, student_id: int, question_id: int):
        """Append a shown question id, keeping only the last `recency_window` ids."""
        if self.recency_window <= 0:
            return
        key = self._recent_key(student_id)
        pipe = self.client.pipeline()
        pipe.rpush(key, question_id)
        pipe.ltrim(key, -self.recency_window, -1)
        pipe.execute()

    def get_recent(self, student_id: int) -> List[int]:
        return [int(qid) for qid in self.client.lrange(self._recent_key(student_id), 0, -1)]

    # ==================== Question Statistics ====================

    def save_question_stats(self, questions: Iterable[Question]):
        """Store the running counters of each question."""
        pipe = self.client.pipeline()
        for q in questions:
            pipe.hset(self._stats_key(q.id), mapping={
                "times_asked": q.times_asked,
                "times_correct": q.times_correct,
                "avg_time_taken": q.avg_time_taken,
            })
        pipe.execute()

    def apply_question_stats(self, catalog: QuestionCatalog) -> int:
        """
        Copy stored counters onto the catalog's questions.

        Counters never move backwards: a stored entry with either counter
        below the in-memory one is ignored. Returns the number of questions
        updated.
        """
        updated = 0
        for q in catalog:
            stats = self.client.hgetall(self._stats_key(q.id))
            if not stats:
                continue
            times_asked = int(stats.get("times_asked", 0))
            times_correct = int(stats.get("times_correct", 0))
            if (times_asked < q.times_asked or times_correct < q.times_correct
                    or times_correct > times_asked):
                continue
            q.times_asked = times_asked
            q.times_correct = times_correct
            q.avg_time_taken = float(stats.get("avg_time_taken", 0.0))
            updated += 1
        return updated
