"""
Record Store - JSON-lines persistence for questions and student profiles.

File layout (one JSON object per line):
    data/questions.jsonl -> QuestionRecord
    data/students.jsonl  -> ProfileRecord

Both streams are loaded wholesale at startup and written wholesale at
shutdown.
"""

import os
from pathlib import Path
from typing import Annotated, Iterable, Iterator, List, Optional, Type, TypeVar

from pydantic import BaseModel, Field, ValidationError, model_validator

from assessment.errors import InvalidArgument
from assessment.models import (
    MAX_DIFFICULTY,
    MAX_HINTS,
    MAX_KEYWORDS,
    MAX_OPTIONS,
    MIN_DIFFICULTY,
    NUM_TOPICS,
    Question,
    QuestionType,
    SkillLevel,
    StudentProfile,
    Topic,
)
from assessment.question_catalog import QuestionCatalog
from logging_config import get_logger


logger = get_logger(__name__)

UnitFloat = Annotated[float, Field(ge=0.0, le=1.0)]
Count = Annotated[int, Field(ge=0)]
Outcome = Annotated[int, Field(ge=0, le=1)]


# ==================== Record Layouts ====================

class QuestionRecord(BaseModel):
    """Persisted layout of a Question."""
    id: Count
    prompt: str
    options: List[str] = Field(min_length=1, max_length=MAX_OPTIONS)
    correct_answer: Count
    explanation: str = ""
    code_snippet: str = ""
    difficulty: int = Field(ge=MIN_DIFFICULTY, le=MAX_DIFFICULTY)
    topic: int = Field(ge=0, lt=NUM_TOPICS)
    question_type: QuestionType = QuestionType.MULTIPLE_CHOICE
    hints: List[str] = Field(default_factory=list, max_length=MAX_HINTS)
    keywords: List[str] = Field(default_factory=list, max_length=MAX_KEYWORDS)
    author: str = ""
    date_created: float = 0.0
    times_asked: Count = 0
    times_correct: Count = 0
    avg_time_taken: float = Field(default=0.0, ge=0.0)

    @model_validator(mode="after")
    def _check_consistency(self):
        if self.correct_answer >= len(self.options):
            raise ValueError("correct_answer must index into options")
        if self.times_correct > self.times_asked:
            raise ValueError("times_correct cannot exceed times_asked")
        return self

    @classmethod
    def from_question(cls, question: Question) -> "QuestionRecord":
        return cls(
            id=question.id,
            prompt=question.prompt,
            options=list(question.options),
            correct_answer=question.correct_answer,
            explanation=question.explanation,
            code_snippet=question.code_snippet,
            difficulty=question.difficulty,
            topic=int(question.topic),
            question_type=question.question_type,
            hints=list(question.hints),
            keywords=list(question.keywords),
            author=question.author,
            date_created=question.date_created,
            times_asked=question.times_asked,
            times_correct=question.times_correct,
            avg_time_taken=question.avg_time_taken,
        )

    def to_question(self) -> Question:
        return Question(
            id=self.id,
            prompt=self.prompt,
            options=list(self.options),
            correct_answer=self.correct_answer,
            explanation=self.explanation,
            code_snippet=self.code_snippet,
            difficulty=self.difficulty,
            topic=Topic(self.topic),
            question_type=self.question_type,
            hints=list(self.hints),
            keywords=list(self.keywords),
            author=self.author,
            date_created=self.date_created,
            times_asked=self.times_asked,
            times_correct=self.times_correct,
            avg_time_taken=self.avg_time_taken,
        )


class ProfileRecord(BaseModel):
    """Persisted layout of a StudentProfile (overall accuracy is derived on load)."""
    student_id: int
    name: str
    topic_scores: List[UnitFloat] = Field(min_length=NUM_TOPICS, max_length=NUM_TOPICS)
    topic_attempted: List[Count] = Field(min_length=NUM_TOPICS, max_length=NUM_TOPICS)
    topic_correct: List[Count] = Field(min_length=NUM_TOPICS, max_length=NUM_TOPICS)
    topic_last_practiced: List[float] = Field(min_length=NUM_TOPICS, max_length=NUM_TOPICS)
    recent_results: List[List[Outcome]] = Field(min_length=NUM_TOPICS, max_length=NUM_TOPICS)
    total_attempted: Count = 0
    total_correct: Count = 0
    learning_streak: Count = 0
    max_streak: Count = 0
    registration_date: float
    last_practice: float
    total_study_time: float = Field(default=0.0, ge=0.0)
    learning_velocity: float = Field(default=0.0, ge=0.0)
    current_level: int = Field(default=int(SkillLevel.BEGINNER), ge=1, le=4)
    predicted_exam_score: float = Field(default=50.0, ge=0.0, le=100.0)
    interview_ready_score: int = Field(default=0, ge=0, le=100)
    achievements: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_consistency(self):
        if self.total_correct > self.total_attempted:
            raise ValueError("total_correct cannot exceed total_attempted")
        if any(c > a for c, a in zip(self.topic_correct, self.topic_attempted)):
            raise ValueError("topic_correct cannot exceed topic_attempted")
        if self.learning_streak > self.max_streak:
            raise ValueError("learning_streak cannot exceed max_streak")
        return self

    @classmethod
    def from_profile(cls, profile: StudentProfile) -> "ProfileRecord":
        return cls(
            student_id=profile.student_id,
            name=profile.name,
            topic_scores=list(profile.topic_scores),
            topic_attempted=list(profile.topic_attempted),
            topic_correct=list(profile.topic_correct),
            topic_last_practiced=list(profile.topic_last_practiced),
            recent_results=[list(h) for h in profile.recent_results],
            total_attempted=profile.total_attempted,
            total_correct=profile.total_correct,
            learning_streak=profile.learning_streak,
            max_streak=profile.max_streak,
            registration_date=profile.registration_date,
            last_practice=profile.last_practice,
            total_study_time=profile.total_study_time,
            learning_velocity=profile.learning_velocity,
            current_level=int(profile.current_level),
            predicted_exam_score=profile.predicted_exam_score,
            interview_ready_score=profile.interview_ready_score,
            achievements=sorted(profile.achievements),
        )

    def to_profile(self) -> StudentProfile:
        return StudentProfile(
            student_id=self.student_id,
            name=self.name,
            topic_scores=list(self.topic_scores),
            topic_attempted=list(self.topic_attempted),
            topic_correct=list(self.topic_correct),
            topic_last_practiced=list(self.topic_last_practiced),
            recent_results=[list(h) for h in self.recent_results],
            total_attempted=self.total_attempted,
            total_correct=self.total_correct,
            learning_streak=self.learning_streak,
            max_streak=self.max_streak,
            registration_date=self.registration_date,
            last_practice=self.last_practice,
            total_study_time=self.total_study_time,
            learning_velocity=self.learning_velocity,
            current_level=SkillLevel(self.current_level),
            predicted_exam_score=self.predicted_exam_score,
            interview_ready_score=self.interview_ready_score,
            achievements=set(self.achievements),
        )


# ==================== Streams ====================

R = TypeVar("R", bound=BaseModel)


def read_records(path: Path, record_type: Type[R]) -> Iterator[R]:
    """Yield validated records from a JSON-lines file, skipping blank lines."""
    with open(path, "r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            if not line.strip():
                continue
            try:
                yield record_type.model_validate_json(line)
            except ValidationError as e:
                raise InvalidArgument(
                    f"{path.name}:{lineno}: invalid {record_type.__name__}: {e}"
                ) from e


def write_records(path: Path, records: Iterable[BaseModel]) -> int:
    """Write records to a temp file then swap it in. Returns the record count."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    count = 0
    with open(tmp_path, "w", encoding="utf-8") as f:
        for record in records:
            f.write(record.model_dump_json())
            f.write("\n")
            count += 1
    os.replace(tmp_path, path)
    return count


class RecordStore:
    """Load and save the question and profile streams under a data directory."""

    def __init__(self, data_dir, questions_file: str = "questions.jsonl",
                 profiles_file: str = "students.jsonl"):
        self.data_dir = Path(data_dir)
        self.questions_path = self.data_dir / questions_file
        self.profiles_path = self.data_dir / profiles_file

    # ==================== Questions ====================

    def load_questions(self, catalog: QuestionCatalog, path: Optional[Path] = None) -> int:
        """Load the question stream into catalog. Returns 0 if the file is missing."""
        path = Path(path) if path else self.questions_path
        if not path.exists():
            logger.info("No question file at %s", path)
            return 0
        questions = [r.to_question() for r in read_records(path, QuestionRecord)]
        return catalog.load(questions)

    def save_questions(self, questions: Iterable[Question], path: Optional[Path] = None) -> int:
        path = Path(path) if path else self.questions_path
        count = write_records(path, (QuestionRecord.from_question(q) for q in questions))
        logger.info("Saved %d questions to %s", count, path)
        return count

    # ==================== Profiles ====================

    def load_profiles(self, path: Optional[Path] = None) -> List[StudentProfile]:
        path = Path(path) if path else self.profiles_path
        if not path.exists():
            logger.info("No profile file at %s", path)
            return []
        return [r.to_profile() for r in read_records(path, ProfileRecord)]

    def save_profiles(self, profiles: Iterable[StudentProfile], path: Optional[Path] = None) -> int:
        path = Path(path) if path else self.profiles_path
        count = write_records(path, (ProfileRecord.from_profile(p) for p in profiles))
        logger.info("Saved %d profiles to %s", count, path)
        return count
