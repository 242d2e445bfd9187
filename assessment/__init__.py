"""
Assessment module - Student performance model and adaptive question selection.

Components:
    - models: Topics, questions, student profiles, recommendations
    - statistics: Mean, standard deviation, correlation, regression
    - question_catalog: Bounded question bank with search and sorting
    - scoring_engine: Profile updates, skill level, topic mastery
    - recommendation_engine: Next-question selection and forecasts
    - profile_registry: Registered student profiles
    - quiz_session: Ask / answer loop for one session
"""

from .errors import AssessmentError, CapacityExceeded, InvalidArgument, NoCandidates, NotFound
from .models import Question, QuestionType, Recommendation, SkillLevel, StudentProfile, Topic
from .question_catalog import QuestionCatalog
from .scoring_engine import ScoringEngine, ScoringPolicy
from .recommendation_engine import RecommendationEngine, RecommendationWeights
from .profile_registry import ProfileRegistry
from .quiz_session import QuizSession, SessionSummary

__all__ = [
    "AssessmentError",
    "CapacityExceeded",
    "InvalidArgument",
    "NoCandidates",
    "NotFound",
    "Question",
    "QuestionType",
    "Recommendation",
    "SkillLevel",
    "StudentProfile",
    "Topic",
    "QuestionCatalog",
    "ScoringEngine",
    "ScoringPolicy",
    "RecommendationEngine",
    "RecommendationWeights",
    "ProfileRegistry",
    "QuizSession",
    "SessionSummary",
]
