"""
Profile Registry - Bounded store of registered students.
"""

import time
from typing import Dict, Iterable, Iterator, List, Optional

from logging_config import get_logger

from .errors import CapacityExceeded, InvalidArgument, NotFound
from .models import StudentProfile


logger = get_logger(__name__)


class ProfileRegistry:
    """Registered student profiles keyed by sequential id."""

    DEFAULT_CAPACITY = 100

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity <= 0:
            raise InvalidArgument(f"profile capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._profiles: Dict[int, StudentProfile] = {}
        self._next_id = 1

    def __len__(self) -> int:
        return len(self._profiles)

    def __iter__(self) -> Iterator[StudentProfile]:
        return iter(self._profiles.values())

    def register(self, name: str, now: Optional[float] = None) -> StudentProfile:
        """Create a profile with neutral defaults."""
        name = name.strip()
        if not name:
            raise InvalidArgument("student name must not be empty")
        if len(self._profiles) >= self.capacity:
            logger.warning("Rejected registration of %r: registry full (%d)", name, self.capacity)
            raise CapacityExceeded("profile registry", self.capacity)

        now = time.time() if now is None else now
        profile = StudentProfile(
            student_id=self._next_id,
            name=name,
            registration_date=now,
            last_practice=now,
        )
        self._profiles[profile.student_id] = profile
        self._next_id += 1

        logger.info("Registered student %s (%s)", profile.student_id, name,
                    extra={"student_id": profile.student_id})
        return profile

    def load(self, profiles: Iterable[StudentProfile]) -> int:
        """Add persisted profiles keeping their ids. Checks the whole batch first."""
        batch = list(profiles)
        if len(self._profiles) + len(batch) > self.capacity:
            raise CapacityExceeded("profile registry", self.capacity)

        seen = set(self._profiles)
        for p in batch:
            if p.student_id in seen:
                raise InvalidArgument(f"duplicate student id {p.student_id}")
            seen.add(p.student_id)

        for p in batch:
            self._profiles[p.student_id] = p
            self._next_id = max(self._next_id, p.student_id + 1)
        return len(batch)

    def get(self, student_id: int) -> StudentProfile:
        try:
            return self._profiles[student_id]
        except KeyError:
            raise NotFound("student", student_id) from None

    def find_by_name(self, name: str) -> List[StudentProfile]:
        """Case-insensitive exact name match."""
        key = name.strip().casefold()
        return [p for p in self._profiles.values() if p.name.casefold() == key]

    def leaderboard(self, limit: Optional[int] = None) -> List[StudentProfile]:
        """Best accuracy first; ties go to more attempts, then lower id."""
        ranked = sorted(
            self._profiles.values(),
            key=lambda p: (-p.overall_accuracy, -p.total_attempted, p.student_id),
        )
        return ranked[:limit] if limit is not None else ranked
