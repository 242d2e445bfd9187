"""
Learning module - Study planning and progress tracking.

Components:
    - topic_graph: Prerequisite DAG over the C topics
    - study_plan: Learning paths and day-by-day study plans
    - progress: Reports, achievements, certification
"""

from .topic_graph import TopicGraph
from .study_plan import StudyPlanner, PathStep, StudyItem
from .progress import ProgressTracker, ProgressReport, Achievement

__all__ = [
    "TopicGraph",
    "StudyPlanner",
    "PathStep",
    "StudyItem",
    "ProgressTracker",
    "ProgressReport",
    "Achievement",
]
