"""
Domain models - Questions, student profiles and recommendations.

Features:
    - The 12 C-language topics, question types and skill tiers
    - Question records with running usage counters
    - Student profiles with per-topic smoothed scores
    - Recommendation value objects (never persisted)
"""

import time
from enum import Enum, IntEnum
from typing import List, Optional, Set, Tuple
from dataclasses import dataclass, field

from .errors import InvalidArgument


NUM_TOPICS = 12
MAX_OPTIONS = 4
MAX_HINTS = 3
MAX_KEYWORDS = 10
MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 5
RECENT_RESULTS_LIMIT = 20  # Outcomes kept per topic for trend estimation
NEUTRAL_SCORE = 0.5


class Topic(IntEnum):
    C_BASICS = 0
    VARIABLES_DATATYPES = 1
    OPERATORS_EXPRESSIONS = 2
    CONTROL_STRUCTURES = 3
    FUNCTIONS = 4
    ARRAYS_STRINGS = 5
    POINTERS = 6
    STRUCTURES_UNIONS = 7
    FILE_IO = 8
    MEMORY_MANAGEMENT = 9
    PREPROCESSOR = 10
    ADVANCED_C = 11

    @property
    def display_name(self) -> str:
        return TOPIC_NAMES[self]


TOPIC_NAMES = {
    Topic.C_BASICS: "C Basics & Syntax",
    Topic.VARIABLES_DATATYPES: "Variables & Data Types",
    Topic.OPERATORS_EXPRESSIONS: "Operators & Expressions",
    Topic.CONTROL_STRUCTURES: "Control Structures",
    Topic.FUNCTIONS: "Functions & Recursion",
    Topic.ARRAYS_STRINGS: "Arrays & Strings",
    Topic.POINTERS: "Pointers & Memory",
    Topic.STRUCTURES_UNIONS: "Structures & Unions",
    Topic.FILE_IO: "File Input/Output",
    Topic.MEMORY_MANAGEMENT: "Dynamic Memory Management",
    Topic.PREPROCESSOR: "Preprocessor Directives",
    Topic.ADVANCED_C: "Advanced C Concepts",
}

DIFFICULTY_NAMES = ["Very Easy", "Easy", "Medium", "Hard", "Very Hard"]


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "multiple_choice"
    CODE_OUTPUT = "code_output"
    FILL_BLANK = "fill_blank"
    DEBUG_CODE = "debug_code"
    TRUE_FALSE = "true_false"
    CODE_COMPLETION = "code_completion"
    ALGORITHM_TRACE = "algorithm_trace"


class SkillLevel(IntEnum):
    BEGINNER = 1
    INTERMEDIATE = 2
    ADVANCED = 3
    EXPERT = 4

    @property
    def display_name(self) -> str:
        return self.name.capitalize()


# ==================== Range Checks ====================

def coerce_topic(value) -> Topic:
    """Convert an int-like topic index to Topic, rejecting out-of-range values."""
    if isinstance(value, Topic):
        return value
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgument(f"topic must be an int in 0..{NUM_TOPICS - 1}, got {value!r}")
    if not 0 <= value < NUM_TOPICS:
        raise InvalidArgument(f"topic index {value} outside 0..{NUM_TOPICS - 1}")
    return Topic(value)


def check_difficulty(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgument(f"difficulty must be an int, got {value!r}")
    if not MIN_DIFFICULTY <= value <= MAX_DIFFICULTY:
        raise InvalidArgument(
            f"difficulty {value} outside {MIN_DIFFICULTY}..{MAX_DIFFICULTY}"
        )
    return value


# ==================== Question ====================

@dataclass
class Question:
    """A single quiz question plus its running usage statistics."""
    prompt: str
    options: List[str]
    correct_answer: int  # Index into options
    topic: Topic
    difficulty: int  # 1-5
    question_type: QuestionType = QuestionType.MULTIPLE_CHOICE
    explanation: str = ""
    code_snippet: str = ""
    hints: List[str] = field(default_factory=list)  # Progressive, most vague first
    keywords: List[str] = field(default_factory=list)
    author: str = ""
    date_created: float = 0.0  # Unix timestamp
    id: Optional[int] = None  # Assigned by the catalog
    times_asked: int = 0
    times_correct: int = 0
    avg_time_taken: float = 0.0  # Seconds

    def validate(self) -> "Question":
        """
        Check every declared range.

        Raises InvalidArgument on the first violation. Returns self so it
        can be chained at insertion.
        """
        self.topic = coerce_topic(self.topic)
        check_difficulty(self.difficulty)

        if not self.options or len(self.options) > MAX_OPTIONS:
            raise InvalidArgument(
                f"a question needs 1..{MAX_OPTIONS} options, got {len(self.options)}"
            )
        if isinstance(self.correct_answer, bool) or not isinstance(self.correct_answer, int):
            raise InvalidArgument(f"correct_answer must be an int, got {self.correct_answer!r}")
        if not 0 <= self.correct_answer < len(self.options):
            raise InvalidArgument(
                f"correct_answer {self.correct_answer} outside 0..{len(self.options) - 1}"
            )
        if len(self.hints) > MAX_HINTS:
            raise InvalidArgument(f"at most {MAX_HINTS} hints allowed, got {len(self.hints)}")
        if len(self.keywords) > MAX_KEYWORDS:
            raise InvalidArgument(
                f"at most {MAX_KEYWORDS} keywords allowed, got {len(self.keywords)}"
            )

        try:
            self.question_type = QuestionType(self.question_type)
        except ValueError:
            raise InvalidArgument(f"unknown question type {self.question_type!r}") from None

        if self.times_asked < 0 or self.times_correct < 0 or self.times_correct > self.times_asked:
            raise InvalidArgument("question counters are inconsistent")
        return self

    @property
    def success_rate(self) -> float:
        """Share of answers that were correct (0 when never asked)."""
        if self.times_asked == 0:
            return 0.0
        return self.times_correct / self.times_asked

    @property
    def difficulty_name(self) -> str:
        return DIFFICULTY_NAMES[self.difficulty - 1]

    def is_correct(self, option_index: int) -> bool:
        if not 0 <= option_index < len(self.options):
            raise InvalidArgument(
                f"answer index {option_index} outside 0..{len(self.options) - 1}"
            )
        return option_index == self.correct_answer

    def hint(self, level: int) -> Optional[str]:
        """
        Progressive hint for the given level (1 = vaguest).

        Levels past the last available hint return the most specific one.
        """
        if not self.hints:
            return None
        if level < 1:
            raise InvalidArgument(f"hint level starts at 1, got {level}")
        return self.hints[min(level, len(self.hints)) - 1]


# ==================== Student Profile ====================

def _neutral_scores() -> List[float]:
    return [NEUTRAL_SCORE] * NUM_TOPICS


def _zeros() -> List[int]:
    return [0] * NUM_TOPICS


@dataclass
class StudentProfile:
    """
    Performance state for one learner.

    Only ScoringEngine writes the score and counter fields; everything else
    reads them.
    """
    student_id: int
    name: str
    topic_scores: List[float] = field(default_factory=_neutral_scores)
    topic_attempted: List[int] = field(default_factory=_zeros)
    topic_correct: List[int] = field(default_factory=_zeros)
    topic_last_practiced: List[float] = field(default_factory=lambda: [0.0] * NUM_TOPICS)
    recent_results: List[List[int]] = field(
        default_factory=lambda: [[] for _ in range(NUM_TOPICS)]
    )
    total_attempted: int = 0
    total_correct: int = 0
    learning_streak: int = 0
    max_streak: int = 0
    registration_date: float = field(default_factory=time.time)
    last_practice: float = field(default_factory=time.time)
    total_study_time: float = 0.0  # Seconds spent answering
    learning_velocity: float = 0.0  # Questions per hour of study time
    current_level: SkillLevel = SkillLevel.BEGINNER
    predicted_exam_score: float = 50.0
    interview_ready_score: int = 0  # 0-100
    achievements: Set[str] = field(default_factory=set)

    @property
    def overall_accuracy(self) -> float:
        if self.total_attempted == 0:
            return 0.0
        return self.total_correct / self.total_attempted

    def topic_accuracy(self, topic: Topic) -> float:
        topic = coerce_topic(topic)
        attempted = self.topic_attempted[topic]
        return self.topic_correct[topic] / attempted if attempted else 0.0

    def mean_topic_score(self) -> float:
        return sum(self.topic_scores) / len(self.topic_scores)


# ==================== Recommendation ====================

@dataclass
class Recommendation:
    """The next question to ask, with the scores that selected it."""
    question: Question
    confidence: float  # [0, 1]
    difficulty_match: float  # [0, 1]
    topic_priority: float  # [0, 1]
    target_band: Tuple[int, int]
    dominant_factor: str  # "weak_topic" or "difficulty_progression"
    reasoning: str
    learning_objective: str
