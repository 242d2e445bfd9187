"""
Question Catalog - Owns the question bank.

Features:
    - Sequential, never-reused ids assigned at insertion
    - O(log n) lookup by id (binary search over the id index)
    - Topic, keyword and difficulty queries in insertion order
    - Deterministic difficulty sort
"""

import bisect
import random
from typing import Iterable, Iterator, List, Optional

from logging_config import get_logger

from .errors import CapacityExceeded, InvalidArgument, NoCandidates, NotFound
from .models import Question, Topic, check_difficulty, coerce_topic


logger = get_logger(__name__)


class QuestionCatalog:
    """
    Bounded, append-only collection of questions.

    Ids grow monotonically, so appending keeps `_ids` sorted and
    `by_id` can binary search it without re-sorting.
    """

    DEFAULT_CAPACITY = 1000

    def __init__(self, capacity: int = DEFAULT_CAPACITY, rng: Optional[random.Random] = None):
        if capacity <= 0:
            raise InvalidArgument(f"catalog capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._questions: List[Question] = []
        self._ids: List[int] = []
        self._next_id = 0
        self._rng = rng or random.Random()

    def __len__(self) -> int:
        return len(self._questions)

    def __iter__(self) -> Iterator[Question]:
        return iter(self._questions)

    # ==================== Population ====================

    def insert(self, question: Question) -> int:
        """Validate, assign the next id and append. Returns the new id."""
        if question.id is not None:
            raise InvalidArgument(f"question already has id {question.id}; use load() for persisted questions")
        if len(self._questions) >= self.capacity:
            logger.warning("Rejected insert: catalog full (%d)", self.capacity)
            raise CapacityExceeded("question catalog", self.capacity)

        question.validate()
        question.id = self._next_id
        self._next_id += 1

        self._questions.append(question)
        self._ids.append(question.id)
        return question.id

    def load(self, questions: Iterable[Question]) -> int:
        """
        Bulk load persisted questions keeping their ids.

        Ids must be strictly increasing and above any id already present.
        The whole batch is checked before anything is added. Returns the
        number of questions loaded.
        """
        batch = list(questions)
        if len(self._questions) + len(batch) > self.capacity:
            raise CapacityExceeded("question catalog", self.capacity)

        last_id = self._ids[-1] if self._ids else -1
        for q in batch:
            q.validate()
            if q.id is None or q.id <= last_id:
                raise InvalidArgument(
                    f"persisted question ids must be strictly increasing (got {q.id} after {last_id})"
                )
            last_id = q.id

        for q in batch:
            self._questions.append(q)
            self._ids.append(q.id)
        if batch:
            self._next_id = max(self._next_id, last_id + 1)

        logger.info("Loaded %d questions into catalog", len(batch))
        return len(batch)

    # ==================== Lookup ====================

    def by_id(self, question_id: int) -> Question:
        """Binary search for a question by id."""
        pos = bisect.bisect_left(self._ids, question_id)
        if pos < len(self._ids) and self._ids[pos] == question_id:
            return self._questions[pos]
        raise NotFound("question", question_id)

    def random(self) -> Question:
        """Uniform random pick over the whole catalog."""
        if not self._questions:
            raise NoCandidates("question catalog is empty")
        return self._rng.choice(self._questions)

    def by_topic(self, topic: Topic) -> Iterator[Question]:
        """Questions tagged with topic, in insertion order (lazy)."""
        topic = coerce_topic(topic)
        return (q for q in self._questions if q.topic == topic)

    def search_by_keyword(self, text: str) -> List[Question]:
        """
        Case-insensitive substring match against prompt, keywords and explanation.

        Returns matches in catalog order; an empty list when nothing matches
        or the search text is blank.
        """
        needle = text.strip().casefold()
        if not needle:
            return []
        matches = []
        for q in self._questions:
            haystacks = [q.prompt, q.explanation, *q.keywords]
            if any(needle in h.casefold() for h in haystacks):
                matches.append(q)
        return matches

    def filter_by_criteria(self, topic: Optional[Topic] = None,
                           difficulty: Optional[int] = None) -> List[Question]:
        """Filter by topic and/or difficulty; None means "any"."""
        if topic is not None:
            topic = coerce_topic(topic)
        if difficulty is not None:
            check_difficulty(difficulty)

        return [
            q for q in self._questions
            if (topic is None or q.topic == topic)
            and (difficulty is None or q.difficulty == difficulty)
        ]

    # ==================== Ordering ====================

    @staticmethod
    def sort_by_difficulty(questions: Iterable[Question]) -> List[Question]:
        """Ascending difficulty, ties broken by ascending id."""
        return sorted(questions, key=lambda q: (q.difficulty, q.id if q.id is not None else -1))

    # ==================== Analytics ====================

    def hardest_questions(self, n: int = 10) -> List[Question]:
        """Asked questions with the lowest success rate."""
        asked = [q for q in self._questions if q.times_asked > 0]
        return sorted(asked, key=lambda q: (q.success_rate, q.id))[:n]

    def easiest_questions(self, n: int = 10) -> List[Question]:
        """Asked questions with the highest success rate."""
        asked = [q for q in self._questions if q.times_asked > 0]
        return sorted(asked, key=lambda q: (-q.success_rate, q.id))[:n]
