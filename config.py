"""Application settings.

Values come from environment variables prefixed with QUIZ_ (a local .env is
loaded first), e.g. QUIZ_CATALOG_CAPACITY=500 or QUIZ_REDIS_HOST=cache.
"""
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


ROOT = Path(__file__).resolve().parent
load_dotenv(dotenv_path=ROOT / ".env")


class Settings(BaseSettings):
    """Tutor settings loaded from the environment."""

    model_config = SettingsConfigDict(env_prefix="QUIZ_", case_sensitive=False)

    # Storage limits
    catalog_capacity: int = Field(default=1000, gt=0)  # MAX_QUESTIONS
    profile_capacity: int = Field(default=100, gt=0)  # MAX_STUDENTS

    # Recommendation
    recency_window: int = Field(default=10, ge=0)  # Question ids excluded from repeats
    session_question_limit: int = Field(default=10, gt=0)

    # Persistence
    data_dir: Path = ROOT / "data"
    questions_file: str = "questions.jsonl"
    profiles_file: str = "students.jsonl"

    # Redis
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: Optional[str] = None
    redis_db: int = 0

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    @property
    def questions_path(self) -> Path:
        return Path(self.data_dir) / self.questions_file

    @property
    def profiles_path(self) -> Path:
        return Path(self.data_dir) / self.profiles_file


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings instance."""
    return Settings()
