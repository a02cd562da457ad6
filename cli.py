import argparse
import json
import random

from config import configure_logging, load_settings
from db import (
    ExerciseCatalogRepository,
    ProgramRepository,
    WorkoutRepository,
    SetRepository,
    GenerationLogRepository,
)
from program_service import ProgramGenerator
from progression_service import ProgressionService
from algorithms.progression_finder import get_progression_recommendation


def build_generator(db_path: str, settings: dict) -> ProgramGenerator:
    seed = settings["selection_seed"]
    return ProgramGenerator(
        ExerciseCatalogRepository(db_path),
        ProgramRepository(db_path, False),
        WorkoutRepository(db_path, False),
        SetRepository(db_path, False),
        GenerationLogRepository(db_path, False),
        regeneration_policy=settings["regeneration_policy"],
        rng=random.Random(seed) if seed is not None else None,
    )


def load_intake(path: str) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def generate(db_path: str, settings: dict, user_id: str, intake_path: str) -> None:
    generator = build_generator(db_path, settings)
    program_id = generator.generate_program(user_id, load_intake(intake_path))
    summary = generator.program_summary(program_id)
    print(f"Created program {program_id}: {summary['program']['name']}")
    for week, info in sorted(summary["weeks"].items()):
        label = " (deload)" if info["is_deload"] else ""
        print(f"  week {week}{label}: {info['workouts']} workouts, {info['sets']} sets")


def preview(db_path: str, settings: dict, intake_path: str) -> None:
    generator = build_generator(db_path, settings)
    print(json.dumps(generator.preview(load_intake(intake_path)), indent=2))


def progressions(db_path: str, exercise_id: int) -> None:
    catalog = ExerciseCatalogRepository(db_path)
    exercise = catalog.fetch_by_id(exercise_id)
    path = ProgressionService(catalog).find_exercise_progressions(exercise)
    for key in ("prerequisites", "next_steps", "advanced", "alternatives"):
        names = ", ".join(
            f"{ex['name']} ({ex['difficulty_level']})" for ex in path[key]
        )
        print(f"{key}: {names or '-'}")
    rec = get_progression_recommendation(path)
    print(f"{rec['title']}: {rec['description']}")


def show_logs(db_path: str, limit: int) -> None:
    for entry in GenerationLogRepository(db_path, False).fetch_recent(limit):
        print(
            f"{entry['timestamp']} {entry['status']} user={entry['user_id']} "
            f"program={entry['program_id']} {entry['message'] or ''}"
        )


def main() -> None:
    parser = argparse.ArgumentParser(description="Training program utilities")
    parser.add_argument("--settings", default="settings.yaml")
    parser.add_argument("--db", default=None)
    sub = parser.add_subparsers(dest="cmd", required=True)

    gen = sub.add_parser("generate")
    gen.add_argument("--user", required=True)
    gen.add_argument("--intake", required=True, help="JSON file with intake answers")

    prev = sub.add_parser("preview")
    prev.add_argument("--intake", required=True)

    prog = sub.add_parser("progressions")
    prog.add_argument("--exercise", type=int, required=True)

    logs = sub.add_parser("logs")
    logs.add_argument("--limit", type=int, default=20)

    args = parser.parse_args()
    settings = load_settings(args.settings)
    configure_logging(settings["log_level"])
    db_path = args.db or settings["db_path"]

    if args.cmd == "generate":
        generate(db_path, settings, args.user, args.intake)
    elif args.cmd == "preview":
        preview(db_path, settings, args.intake)
    elif args.cmd == "progressions":
        progressions(db_path, args.exercise)
    elif args.cmd == "logs":
        show_logs(db_path, args.limit)


if __name__ == "__main__":
    main()
