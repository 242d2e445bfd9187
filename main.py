"""
Console driver for the C programming tutor.

Runs one quiz session per invocation:
    python main.py --name Ada                 # adaptive quiz
    python main.py --name Ada --mode topic --topic POINTERS
    python main.py --name Ada --mode mock_exam --level ADVANCED
    python main.py --name Ada --report        # progress report only
    python main.py --name Ada --store redis   # profiles and recency window in Redis

Answers are A-D; type "h" for a hint or "q" to stop early.
"""

import argparse
import time
from typing import Optional

import redis

from assessment import (
    AssessmentError,
    ProfileRegistry,
    QuestionCatalog,
    QuizSession,
    RecommendationEngine,
    ScoringEngine,
    SkillLevel,
    StudentProfile,
    Topic,
)
from config import Settings, get_settings
from learning import ProgressTracker, StudyPlanner
from logging_config import get_logger, setup_logging
from record_store import RecordStore
from redis_store import RedisStore


logger = get_logger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Adaptive C programming quiz")
    parser.add_argument("--name", required=True, help="Student name (registered on first use)")
    parser.add_argument("--mode", choices=QuizSession.MODES, default="adaptive")
    parser.add_argument("--topic", choices=[t.name for t in Topic])
    parser.add_argument("--level", choices=[lvl.name for lvl in SkillLevel])
    parser.add_argument("--questions", type=int, help="Questions in this session")
    parser.add_argument("--report", action="store_true", help="Show the progress report and exit")
    parser.add_argument("--store", choices=("files", "redis"), default="files",
                        help="Where profiles and question counters are kept")
    return parser.parse_args(argv)


def print_question(number: int, question, reasoning: Optional[str] = None):
    print(f"\n**Question {number}** [{question.topic.display_name} · {question.difficulty_name}]")
    if reasoning:
        print(f"   💡 {reasoning}")
    print(f"\n{question.prompt}")
    if question.code_snippet:
        print("\n" + "\n".join(f"    {line}" for line in question.code_snippet.splitlines()))
    print()
    for i, option in enumerate(question.options):
        print(f"  {chr(65 + i)}. {option}")


def ask_answer(session: QuizSession) -> Optional[int]:
    """Read an option index; None means quit."""
    question = session.current
    while True:
        raw = input("\n👤 Answer: ").strip().upper()
        if raw == "Q":
            return None
        if raw == "H":
            hint = session.hint()
            print(f"   🔎 {hint}" if hint else "   No hints for this one.")
            continue
        if len(raw) == 1 and 0 <= ord(raw) - 65 < len(question.options):
            return ord(raw) - 65
        print(f"   Please answer A-{chr(64 + len(question.options))}, h or q.")


def print_report(profile: StudentProfile, tracker: ProgressTracker, planner: StudyPlanner):
    report = tracker.build_report(profile)
    print("\n📊 Progress Report")
    print("-" * 40)
    print(f"Student: {report.student_name}   Level: {report.current_level}")
    print(f"Answered: {report.total_questions_attempted}   Accuracy: {report.overall_accuracy:.0%}")
    print(f"Strongest: {report.strongest_topic or '-'}   Weakest: {report.weakest_topic or '-'}")
    print(f"Predicted exam score: {report.predicted_exam_score:.0f}   "
          f"Interview readiness: {report.interview_ready_score}/100")
    print(f"XP: {tracker.experience_points(profile)}")
    for tip in report.recommendations:
        print(f"  • {tip}")

    path = planner.learning_path(profile)
    if path:
        print("\nLearning path: " + " → ".join(step.topic.display_name for step in path[:5]))


def run_session(session: QuizSession) -> bool:
    """Ask questions until the session stops. Returns False if the student quit."""
    number = 0
    while True:
        question = session.next_question()
        if question is None:
            return True
        number += 1
        reasoning = session.last_recommendation.reasoning if session.mode == "adaptive" else None
        print_question(number, question, reasoning)

        started = time.monotonic()
        choice = ask_answer(session)
        if choice is None:
            return False

        result = session.submit_answer(choice, time.monotonic() - started)
        if result["is_correct"]:
            print(f"   ✅ Correct! Streak: {result['streak']}")
        else:
            print(f"   ❌ The answer was {chr(65 + result['correct_answer'])}.")
        if result["explanation"]:
            print(f"   {result['explanation']}")
        if result["level_changed"]:
            print(f"   🎓 Your level is now {result['level'].display_name}")


def save_state(session: QuizSession, store: RecordStore, redis_store: Optional[RedisStore],
               catalog: QuestionCatalog, registry: ProfileRegistry):
    """Persist counters and profiles to the selected backend."""
    if redis_store is None:
        store.save_questions(catalog)
        store.save_profiles(registry)
        return

    redis_store.save_profile(session.profile)
    redis_store.save_question_stats(catalog)
    for response in session.responses:
        redis_store.push_recent(session.profile.student_id, response["question_id"])


def run_tutor(args, settings: Settings):
    store = RecordStore(settings.data_dir, settings.questions_file, settings.profiles_file)
    catalog = QuestionCatalog(capacity=settings.catalog_capacity)
    store.load_questions(catalog)

    registry = ProfileRegistry(capacity=settings.profile_capacity)
    redis_store = RedisStore(settings) if args.store == "redis" else None
    if redis_store is not None:
        registry.load(redis_store.load_profiles())
        redis_store.apply_question_stats(catalog)
    else:
        registry.load(store.load_profiles())

    matches = registry.find_by_name(args.name)
    profile = matches[0] if matches else registry.register(args.name)

    scoring = ScoringEngine()
    recommender = RecommendationEngine(scoring)
    tracker = ProgressTracker(scoring)
    planner = StudyPlanner(scoring)

    if args.report:
        print_report(profile, tracker, planner)
        return

    session = QuizSession(
        profile,
        catalog,
        recommender,
        mode=args.mode,
        topic=Topic[args.topic] if args.topic else None,
        level=SkillLevel[args.level] if args.level else None,
        question_limit=args.questions or settings.session_question_limit,
        recency_window=settings.recency_window,
        recent_ids=redis_store.get_recent(profile.student_id) if redis_store else (),
    )

    print(f"\n🎓 Welcome, {profile.name}! ({profile.current_level.display_name})")
    try:
        run_session(session)
    except KeyboardInterrupt:
        print()
    finally:
        summary = session.finish()
        print(f"\nSession: {summary.questions_correct}/{summary.questions_attempted} correct "
              f"({summary.session_accuracy:.0%}), avg {summary.avg_response_time:.1f}s")
        for achievement in tracker.check_achievements(profile, summary):
            print(f"🏆 Achievement unlocked: {achievement.value.replace('_', ' ').title()}")

        save_state(session, store, redis_store, catalog, registry)


def main(argv=None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    setup_logging(level=settings.log_level, json_format=settings.log_json)

    try:
        run_tutor(args, settings)
    except AssessmentError as e:
        logger.warning("Tutor stopped: %s", e)
        print(f"❌ {e}")
        return 1
    except redis.ConnectionError as e:
        logger.error("Redis unavailable: %s", e)
        print(f"❌ Could not reach Redis at {settings.redis_host}:{settings.redis_port}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
