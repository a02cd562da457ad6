from __future__ import annotations
import logging
import math
import random
import sqlite3

from db import (
    ExerciseCatalogRepository,
    ProgramRepository,
    WorkoutRepository,
    SetRepository,
    GenerationLogRepository,
)
from algorithms.phase_manager import PhaseManager
from algorithms.exercise_selector import ExerciseSelector
from algorithms.training_tables import (
    PROGRAM_NAME_PREFIX,
    TEMPO_DELOAD,
    TEMPO_STANDARD,
    goal_modifier,
    level_parameters,
    round_half_up,
)
from intake_schema import validate_intake

logger = logging.getLogger(__name__)


def session_template(frequency: int) -> list[str]:
    """Return the session types trained each week for ``frequency``."""
    if frequency <= 3:
        sessions = ["push_1", "pull_1"]
        if frequency == 3:
            sessions.append("push_2")
        return sessions
    return ["push_1", "pull_1", "push_2", "pull_2"]


class CycleBuilder:
    """Expands one intake into a 5-week cycle of exercise prescriptions.

    Exercises are chosen once per session type so every week trains the same
    movements; only the set/rep prescription changes from week to week.
    """

    PROGRESSIVE_WEEKS = 4
    DELOAD_WEEK = 5
    PRIMARY_PROGRESSION_RATE = 1.0
    SECONDARY_PROGRESSION_RATE = 0.5
    DELOAD_REP_FACTOR = 0.6
    DELOAD_SET_FACTOR = 0.5
    DELOAD_REST_FACTOR = 0.8

    def __init__(
        self,
        intake: dict,
        catalog: list[dict],
        rng: random.Random | None = None,
    ) -> None:
        self.intake = intake
        self.phase = PhaseManager.select_phase(intake)
        self.phase_config = PhaseManager.phase_config(self.phase)
        self.goal = goal_modifier(intake["primary_goal"])
        self.params = PhaseManager.scale_parameters(
            level_parameters(intake["experience_level"]), self.phase, self.goal
        )
        self.selector = ExerciseSelector(
            catalog,
            intake["experience_level"],
            intake["can_do_pushups"],
            intake["can_do_pullups"],
            rng,
        )
        self.selected: dict[str, list[dict]] = {}
        self._select_exercises_for_all_sessions()

    @property
    def program_name(self) -> str:
        return f"{PROGRAM_NAME_PREFIX} - {self.phase_config['name']}"

    def _select_exercises_for_all_sessions(self) -> None:
        self.selector.reset()
        for session_type in session_template(self.intake["training_frequency"]):
            kind, number = session_type.split("_")
            self.selected[session_type] = self._select_exercises_for_session(
                kind, int(number)
            )

    def _slot(self, category: str, role: str, is_primary: bool) -> dict:
        return {
            "exercise": self.selector.select_exercise(category, role),
            "role": role,
            "is_primary": is_primary,
        }

    def _select_exercises_for_session(self, kind: str, session_number: int) -> list[dict]:
        """Primary, secondaries, a core (push) or legs (pull) slot, optional skill."""
        accessory = "core" if kind == "push" else "legs"
        slots = [self._slot(kind, "primary", True)]
        for _ in range(2 if session_number == 1 else 1):
            slots.append(self._slot(kind, "secondary", False))
        slots.append(self._slot(accessory, "primary", False))
        if self.intake["primary_goal"] == "skill_development":
            slots.append(self._slot(kind, "skill", False))
        return slots

    def generate_full_cycle(self) -> list[dict]:
        weeks = [
            {
                "week_number": week,
                "is_deload": False,
                "sessions": self.generate_weekly_sessions(week),
            }
            for week in range(1, self.PROGRESSIVE_WEEKS + 1)
        ]
        weeks.append(
            {
                "week_number": self.DELOAD_WEEK,
                "is_deload": True,
                "sessions": self.generate_deload_sessions(),
            }
        )
        return weeks

    def generate_weekly_sessions(self, week_number: int = 1) -> list[dict]:
        sessions = []
        for session_type in session_template(self.intake["training_frequency"]):
            kind, number = session_type.split("_")
            if kind == "push":
                exercises = self.generate_push_session(int(number), week_number)
            else:
                exercises = self.generate_pull_session(int(number), week_number)
            sessions.append({"session_type": session_type, "exercises": exercises})
        return sessions

    def generate_deload_sessions(self) -> list[dict]:
        sessions = []
        for session_type in session_template(self.intake["training_frequency"]):
            kind, number = session_type.split("_")
            if kind == "push":
                exercises = self.generate_deload_push_session(int(number))
            else:
                exercises = self.generate_deload_pull_session(int(number))
            sessions.append({"session_type": session_type, "exercises": exercises})
        return sessions

    def generate_push_session(self, session_number: int, week_number: int = 1) -> list[dict]:
        return [
            self.create_exercise_set(slot, week_number)
            for slot in self.selected[f"push_{session_number}"]
        ]

    def generate_pull_session(self, session_number: int, week_number: int = 1) -> list[dict]:
        return [
            self.create_exercise_set(slot, week_number)
            for slot in self.selected[f"pull_{session_number}"]
        ]

    def generate_deload_push_session(self, session_number: int) -> list[dict]:
        return [
            self.create_deload_exercise_set(slot)
            for slot in self.selected[f"push_{session_number}"]
            if slot["role"] != "skill"
        ]

    def generate_deload_pull_session(self, session_number: int) -> list[dict]:
        return [
            self.create_deload_exercise_set(slot)
            for slot in self.selected[f"pull_{session_number}"]
            if slot["role"] != "skill"
        ]

    def _role_sets(self, is_primary: bool) -> int:
        sets = self.params["sets_per_exercise"]
        return sets["max"] if is_primary else sets["min"]

    def _adjusted_reps(self) -> tuple[int, int]:
        reps = self.params["reps_range"]
        adjustment = self.goal["rep_adjustment"]
        return reps["min"] + adjustment, reps["max"] + adjustment

    def create_exercise_set(self, slot: dict, week_number: int = 1) -> dict:
        reps_min, reps_max = self._adjusted_reps()
        reps_min, reps_max = max(1, reps_min), max(2, reps_max)
        rate = (
            self.PRIMARY_PROGRESSION_RATE
            if slot["is_primary"]
            else self.SECONDARY_PROGRESSION_RATE
        )
        increase = math.floor((week_number - 1) * rate)
        exercise = slot["exercise"]
        return {
            "exercise_id": exercise.get("id"),
            "exercise_name": exercise["name"],
            "role": slot["role"],
            "is_primary": slot["is_primary"],
            "sets": self._role_sets(slot["is_primary"]),
            "reps_min": reps_min + increase,
            "reps_max": reps_max + increase,
            "tempo": TEMPO_STANDARD,
            "rest_seconds": round_half_up(
                self.params["rest_seconds"]["strength"] * self.goal["rest_multiplier"]
            ),
            "week_number": week_number,
            "is_deload": False,
        }

    def create_deload_exercise_set(self, slot: dict) -> dict:
        reps_min, reps_max = self._adjusted_reps()
        reps_min = max(1, math.floor(reps_min * self.DELOAD_REP_FACTOR))
        reps_max = max(2, math.floor(reps_max * self.DELOAD_REP_FACTOR))
        exercise = slot["exercise"]
        return {
            "exercise_id": exercise.get("id"),
            "exercise_name": exercise["name"],
            "role": slot["role"],
            "is_primary": slot["is_primary"],
            "sets": max(
                1, math.floor(self._role_sets(slot["is_primary"]) * self.DELOAD_SET_FACTOR)
            ),
            "reps_min": reps_min,
            "reps_max": reps_max,
            "tempo": TEMPO_DELOAD,
            "rest_seconds": round_half_up(
                self.params["rest_seconds"]["strength"]
                * self.goal["rest_multiplier"]
                * self.DELOAD_REST_FACTOR
            ),
            "week_number": self.DELOAD_WEEK,
            "is_deload": True,
        }


class ProgramGenerator:
    """Generates and stores complete training cycles."""

    POLICIES = ("allow", "supersede", "reject")

    def __init__(
        self,
        catalog_repo: ExerciseCatalogRepository,
        program_repo: ProgramRepository,
        workout_repo: WorkoutRepository,
        set_repo: SetRepository,
        log_repo: GenerationLogRepository | None = None,
        regeneration_policy: str = "allow",
        rng: random.Random | None = None,
    ) -> None:
        if regeneration_policy not in self.POLICIES:
            raise ValueError(f"unknown regeneration policy: {regeneration_policy}")
        self.catalog = catalog_repo
        self.programs = program_repo
        self.workouts = workout_repo
        self.sets = set_repo
        self.log_repo = log_repo
        self.regeneration_policy = regeneration_policy
        self.rng = rng or random.Random()

    def _load_catalog(self) -> list[dict]:
        try:
            exercises = self.catalog.list_exercises(order_by="difficulty_level")
        except sqlite3.Error as e:
            logger.warning("exercise catalog unavailable, using static library: %s", e)
            return []
        if not exercises:
            logger.warning("exercise catalog is empty, using static library")
        return exercises

    def build_cycle(self, intake: dict) -> CycleBuilder:
        """Return a builder for ``intake`` without writing anything."""
        return CycleBuilder(validate_intake(intake), self._load_catalog(), self.rng)

    def preview(self, intake: dict) -> dict:
        builder = self.build_cycle(intake)
        return {
            "name": builder.program_name,
            "phase": builder.phase,
            "parameters": builder.params,
            "weeks": builder.generate_full_cycle(),
        }

    def _apply_regeneration_policy(self, user_id: str, conn: sqlite3.Connection) -> None:
        if self.regeneration_policy == "allow":
            return
        active = self.programs.active_ids(user_id, conn)
        if not active:
            return
        if self.regeneration_policy == "reject":
            raise ValueError("active program already exists")
        for program_id in active:
            self.programs.set_status(program_id, "paused", conn)
            logger.info("paused program %s for user %s", program_id, user_id)

    def _create_workout_session(
        self,
        conn: sqlite3.Connection,
        program_id: int,
        week: dict,
        session: dict,
        session_order: int,
    ) -> int:
        workout_id = self.workouts.create(
            program_id,
            week["week_number"],
            session["session_type"],
            week["is_deload"],
            session_order,
            conn=conn,
        )
        for exercise in session["exercises"]:
            for set_number in range(1, exercise["sets"] + 1):
                self.sets.create(
                    workout_id,
                    exercise["exercise_id"],
                    exercise["exercise_name"],
                    set_number,
                    exercise["reps_min"],
                    exercise["reps_max"],
                    exercise["tempo"],
                    exercise["rest_seconds"],
                    conn=conn,
                )
        return workout_id

    def generate_program(self, user_id: str, intake: dict) -> int:
        """Create a program with all workouts and sets for one 5-week cycle.

        All rows are written in a single transaction; on failure nothing is
        kept and the error is re-raised.
        """
        try:
            builder = self.build_cycle(intake)
            weeks = builder.generate_full_cycle()
            with self.programs.transaction() as conn:
                self._apply_regeneration_policy(user_id, conn)
                program_id = self.programs.create(
                    user_id, builder.program_name, builder.phase, 1, "active", conn=conn
                )
                for week in weeks:
                    for order, session in enumerate(week["sessions"], start=1):
                        self._create_workout_session(
                            conn, program_id, week, session, order
                        )
        except Exception as e:
            logger.error("program generation failed for user %s: %s", user_id, e)
            if self.log_repo is not None:
                self.log_repo.log_error(user_id, str(e))
            raise
        if self.log_repo is not None:
            self.log_repo.log_success(user_id, program_id)
        logger.info(
            "generated program %s (phase %s) for user %s",
            program_id,
            builder.phase,
            user_id,
        )
        return program_id

    def program_summary(self, program_id: int) -> dict:
        """Return per-week workout and set counts for a stored program."""
        program = self.programs.fetch_detail(program_id)
        set_counts = self.sets.count_for_program(program_id)
        weeks: dict[int, dict] = {}
        for workout in self.workouts.fetch_for_program(program_id):
            week = weeks.setdefault(
                workout["week_number"],
                {"workouts": 0, "sets": 0, "is_deload": workout["is_deload"]},
            )
            week["workouts"] += 1
        for week_number, count in set_counts.items():
            weeks.setdefault(
                week_number, {"workouts": 0, "sets": 0, "is_deload": False}
            )["sets"] = count
        return {"program": program, "weeks": weeks}
