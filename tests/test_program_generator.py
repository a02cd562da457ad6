import math
import os
import random
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from db import (
    ExerciseCatalogRepository,
    ProgramRepository,
    WorkoutRepository,
    SetRepository,
    GenerationLogRepository,
)
from intake_schema import validate_intake
from program_service import CycleBuilder, ProgramGenerator, session_template


BEGINNER = {
    "experience_level": "beginner",
    "primary_goal": "general_fitness",
    "training_frequency": 3,
    "available_equipment": [],
    "can_do_pushups": 0,
    "can_do_pullups": 0,
    "can_hold_plank": 20,
}


class FailingSetRepository(SetRepository):
    def create(self, *args, **kwargs):
        raise RuntimeError("disk full")


class ProgramGeneratorTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db_path = "test_program.db"
        if os.path.exists(self.db_path):
            os.remove(self.db_path)
        self.catalog = ExerciseCatalogRepository(self.db_path)
        self.programs = ProgramRepository(self.db_path, False)
        self.workouts = WorkoutRepository(self.db_path, False)
        self.sets = SetRepository(self.db_path, False)
        self.logs = GenerationLogRepository(self.db_path, False)

    def tearDown(self) -> None:
        if os.path.exists(self.db_path):
            os.remove(self.db_path)

    def generator(self, policy: str = "allow", sets=None) -> ProgramGenerator:
        return ProgramGenerator(
            self.catalog,
            self.programs,
            self.workouts,
            sets or self.sets,
            self.logs,
            regeneration_policy=policy,
            rng=random.Random(7),
        )


class CycleStructureTest(ProgramGeneratorTestCase):
    def test_session_templates(self) -> None:
        self.assertEqual(session_template(1), ["push_1", "pull_1"])
        self.assertEqual(session_template(2), ["push_1", "pull_1"])
        self.assertEqual(session_template(3), ["push_1", "pull_1", "push_2"])
        for frequency in range(4, 8):
            self.assertEqual(
                session_template(frequency), ["push_1", "pull_1", "push_2", "pull_2"]
            )

    def test_five_weeks_with_final_deload(self) -> None:
        weeks = self.generator().preview(BEGINNER)["weeks"]
        self.assertEqual([w["week_number"] for w in weeks], [1, 2, 3, 4, 5])
        self.assertEqual([w["is_deload"] for w in weeks], [False] * 4 + [True])
        for week in weeks:
            self.assertEqual(
                [s["session_type"] for s in week["sessions"]],
                ["push_1", "pull_1", "push_2"],
            )

    def test_preview_writes_nothing(self) -> None:
        preview = self.generator().preview(BEGINNER)
        self.assertEqual(preview["name"], "Body by Rings - Foundation Phase")
        self.assertEqual(preview["phase"], 1)
        self.assertEqual(self.programs.fetch_for_user("u1"), [])

    def test_session_slots(self) -> None:
        builder = self.generator().build_cycle(BEGINNER)
        push_1 = builder.generate_push_session(1, 1)
        pull_1 = builder.generate_pull_session(1, 1)
        push_2 = builder.generate_push_session(2, 1)
        self.assertEqual(
            [e["role"] for e in push_1], ["primary", "secondary", "secondary", "primary"]
        )
        self.assertEqual([e["role"] for e in push_2], ["primary", "secondary", "primary"])
        self.assertTrue(push_1[0]["is_primary"])
        self.assertFalse(push_1[-1]["is_primary"])
        core = {e["name"] for e in self.catalog.list_by_category("core")}
        legs = {e["name"] for e in self.catalog.list_by_category("legs")}
        self.assertIn(push_1[-1]["exercise_name"], core)
        self.assertIn(pull_1[-1]["exercise_name"], legs)

    def test_skill_goal_adds_skill_slot(self) -> None:
        builder = self.generator().build_cycle(
            {**BEGINNER, "primary_goal": "skill_development"}
        )
        self.assertEqual(builder.generate_push_session(1, 1)[-1]["role"], "skill")
        self.assertNotIn(
            "skill", [e["role"] for e in builder.generate_deload_push_session(1)]
        )

    def test_same_exercises_every_week(self) -> None:
        builder = self.generator().build_cycle(BEGINNER)
        week_one = [e["exercise_name"] for e in builder.generate_pull_session(1, 1)]
        for week in (2, 3, 4):
            self.assertEqual(
                [e["exercise_name"] for e in builder.generate_pull_session(1, week)],
                week_one,
            )


class PrescriptionTest(ProgramGeneratorTestCase):
    def test_primary_reps_increase_weekly(self) -> None:
        builder = self.generator().build_cycle(BEGINNER)
        primary = [builder.generate_push_session(1, w)[0] for w in range(1, 5)]
        self.assertEqual([e["reps_min"] for e in primary], [4, 5, 6, 7])
        self.assertEqual([e["reps_max"] for e in primary], [8, 9, 10, 11])
        self.assertTrue(all(e["sets"] == 3 for e in primary))
        self.assertTrue(all(e["tempo"] == "3-0-X-1" for e in primary))
        self.assertTrue(all(e["rest_seconds"] == 132 for e in primary))

    def test_secondary_reps_increase_at_half_rate(self) -> None:
        builder = self.generator().build_cycle(BEGINNER)
        secondary = [builder.generate_push_session(1, w)[1] for w in range(1, 5)]
        self.assertEqual([e["reps_min"] for e in secondary], [4, 4, 5, 5])
        self.assertTrue(all(e["sets"] == 2 for e in secondary))

    def test_goal_adjusts_reps_and_rest(self) -> None:
        builder = self.generator().build_cycle({**BEGINNER, "primary_goal": "strength"})
        primary = builder.generate_push_session(1, 1)[0]
        self.assertEqual((primary["reps_min"], primary["reps_max"]), (2, 6))
        self.assertEqual(primary["rest_seconds"], 158)

    def test_deload_prescription(self) -> None:
        builder = self.generator().build_cycle(BEGINNER)
        week_one = builder.generate_push_session(1, 1)[0]
        deload = builder.generate_deload_push_session(1)
        primary = deload[0]
        self.assertEqual(primary["sets"], 1)
        self.assertEqual((primary["reps_min"], primary["reps_max"]), (2, 4))
        self.assertEqual(primary["rest_seconds"], 106)
        self.assertEqual(primary["tempo"], "2-0-X-1")
        self.assertTrue(primary["is_deload"])
        self.assertLessEqual(primary["reps_max"], 0.6 * week_one["reps_max"])
        self.assertTrue(all(e["sets"] >= 1 for e in deload))

    def test_beginner_primaries_match_ability(self) -> None:
        weeks = self.generator().preview(BEGINNER)["weeks"]
        for week in weeks:
            for session in week["sessions"]:
                primary = session["exercises"][0]["exercise_name"]
                if session["session_type"].startswith("push"):
                    self.assertIn(primary, ("Wall Push-ups", "Incline Push-ups"))
                else:
                    self.assertEqual(primary, "Negative Pull-ups")

    def test_invalid_intake(self) -> None:
        with self.assertRaises(ValueError):
            self.generator().build_cycle({**BEGINNER, "training_frequency": 0})


class PersistenceTest(ProgramGeneratorTestCase):
    def test_generate_program_writes_full_cycle(self) -> None:
        pid = self.generator().generate_program("u1", BEGINNER)
        summary = self.generator().program_summary(pid)
        self.assertEqual(summary["program"]["status"], "active")
        self.assertEqual(summary["program"]["phase"], 1)
        self.assertEqual(sorted(summary["weeks"]), [1, 2, 3, 4, 5])
        for week in (1, 2, 3, 4):
            self.assertEqual(summary["weeks"][week]["workouts"], 3)
            self.assertEqual(summary["weeks"][week]["sets"], 25)
            self.assertFalse(summary["weeks"][week]["is_deload"])
        self.assertTrue(summary["weeks"][5]["is_deload"])
        self.assertEqual(summary["weeks"][5]["sets"], 11)

    def test_one_row_per_set(self) -> None:
        pid = self.generator().generate_program("u1", BEGINNER)
        workout = self.workouts.fetch_for_program(pid)[0]
        self.assertEqual(workout["session_type"], "push_1")
        rows = self.sets.fetch_for_workout(workout["id"])
        self.assertEqual([r["set_number"] for r in rows], [1, 2, 3, 1, 2, 1, 2, 1, 2])
        self.assertTrue(all(r["tempo"] == "3-0-X-1" for r in rows))
        self.assertTrue(all(r["exercise_id"] is not None for r in rows))
        self.assertEqual(rows[0]["exercise_name"], "Wall Push-ups")

    def test_success_logged(self) -> None:
        pid = self.generator().generate_program("u1", BEGINNER)
        entry = self.logs.fetch_recent(1)[0]
        self.assertEqual(entry["status"], "success")
        self.assertEqual(entry["program_id"], pid)
        self.assertIsNotNone(self.logs.last_success())

    def test_development_phase_name(self) -> None:
        strong = {
            **BEGINNER,
            "experience_level": "advanced",
            "can_do_pushups": 20,
            "can_do_pullups": 10,
            "can_hold_plank": 90,
        }
        pid = self.generator().generate_program("u1", strong)
        program = self.programs.fetch_detail(pid)
        self.assertEqual(program["phase"], 2)
        self.assertEqual(program["name"], "Body by Rings - Development Phase")

    def test_empty_catalog_uses_static_library(self) -> None:
        self.catalog.clear()
        pid = self.generator().generate_program("u1", BEGINNER)
        workout = self.workouts.fetch_for_program(pid)[0]
        rows = self.sets.fetch_for_workout(workout["id"])
        self.assertTrue(rows)
        self.assertTrue(all(r["exercise_id"] is None for r in rows))
        self.assertEqual(rows[0]["exercise_name"], "Push-ups")

    def test_failure_rolls_back(self) -> None:
        failing = FailingSetRepository(self.db_path, False)
        with self.assertRaises(RuntimeError):
            self.generator(sets=failing).generate_program("u1", BEGINNER)
        self.assertEqual(self.programs.fetch_for_user("u1"), [])
        self.assertEqual(self.workouts.fetch_all("SELECT COUNT(*) FROM workouts;"), [(0,)])
        self.assertEqual(self.logs.last_errors()[0][1], "disk full")

    def test_invalid_intake_logged(self) -> None:
        with self.assertRaises(ValueError):
            self.generator().generate_program("u1", {**BEGINNER, "can_do_pushups": -1})
        self.assertEqual(self.logs.fetch_recent(1)[0]["status"], "error")


class RegenerationPolicyTest(ProgramGeneratorTestCase):
    def test_allow_keeps_both_active(self) -> None:
        self.generator("allow").generate_program("u1", BEGINNER)
        self.generator("allow").generate_program("u1", BEGINNER)
        self.assertEqual(len(self.programs.fetch_for_user("u1", "active")), 2)

    def test_supersede_pauses_previous(self) -> None:
        first = self.generator("supersede").generate_program("u1", BEGINNER)
        second = self.generator("supersede").generate_program("u1", BEGINNER)
        self.assertEqual(self.programs.fetch_detail(first)["status"], "paused")
        self.assertEqual(self.programs.fetch_detail(second)["status"], "active")

    def test_supersede_only_touches_same_user(self) -> None:
        other = self.generator("supersede").generate_program("u2", BEGINNER)
        self.generator("supersede").generate_program("u1", BEGINNER)
        self.assertEqual(self.programs.fetch_detail(other)["status"], "active")

    def test_reject_refuses_second_program(self) -> None:
        self.generator("reject").generate_program("u1", BEGINNER)
        with self.assertRaises(ValueError):
            self.generator("reject").generate_program("u1", BEGINNER)
        self.assertEqual(len(self.programs.fetch_for_user("u1")), 1)

    def test_unknown_policy(self) -> None:
        with self.assertRaises(ValueError):
            self.generator("replace")


class ProgramStatusTest(ProgramGeneratorTestCase):
    def test_complete_program(self) -> None:
        pid = self.generator().generate_program("u1", BEGINNER)
        self.programs.set_status(pid, "completed")
        program = self.programs.fetch_detail(pid)
        self.assertEqual(program["status"], "completed")
        self.assertIsNotNone(program["completed_at"])

    def test_invalid_status(self) -> None:
        pid = self.generator().generate_program("u1", BEGINNER)
        with self.assertRaises(ValueError):
            self.programs.set_status(pid, "archived")
        with self.assertRaises(ValueError):
            self.programs.set_status(999, "paused")

    def test_set_rejects_inverted_range(self) -> None:
        with self.assertRaises(ValueError):
            self.sets.create(1, None, "Push-ups", 1, 10, 5, "3-0-X-1")


LEVELS = ("beginner", "intermediate", "advanced")
GOALS = (
    "strength",
    "muscle_building",
    "endurance",
    "skill_development",
    "weight_loss",
    "general_fitness",
)
ABILITIES = ((0, 0, 0), (20, 10, 90))


class CycleInvariantTest(ProgramGeneratorTestCase):
    def intakes(self):
        for level in LEVELS:
            for goal in GOALS:
                for frequency in range(1, 8):
                    for pushups, pullups, plank in ABILITIES:
                        yield validate_intake(
                            {
                                "experience_level": level,
                                "primary_goal": goal,
                                "training_frequency": frequency,
                                "available_equipment": [],
                                "can_do_pushups": pushups,
                                "can_do_pullups": pullups,
                                "can_hold_plank": plank,
                            }
                        )

    def check_cycle(self, intake: dict, builder: CycleBuilder, with_catalog: bool) -> None:
        weeks = builder.generate_full_cycle()
        template = session_template(intake["training_frequency"])
        self.assertEqual([w["week_number"] for w in weeks], [1, 2, 3, 4, 5])
        self.assertEqual([w["is_deload"] for w in weeks], [False] * 4 + [True])
        for week in weeks:
            self.assertEqual([s["session_type"] for s in week["sessions"]], template)
            for session in week["sessions"]:
                for ex in session["exercises"]:
                    self.assertTrue(ex["exercise_name"])
                    self.assertGreaterEqual(ex["sets"], 1)
                    self.assertGreaterEqual(ex["reps_min"], 1)
                    self.assertLessEqual(ex["reps_min"], ex["reps_max"])
                    self.assertEqual(ex["is_deload"], week["is_deload"])
                    if not with_catalog:
                        self.assertIsNone(ex["exercise_id"])

        first = weeks[0]["sessions"]
        deload = weeks[4]["sessions"]
        for normal, light in zip(first, deload):
            kept = [e for e in normal["exercises"] if e["role"] != "skill"]
            self.assertEqual(
                [e["exercise_name"] for e in light["exercises"]],
                [e["exercise_name"] for e in kept],
            )
            for base, ex in zip(kept, light["exercises"]):
                self.assertEqual(ex["sets"], max(1, math.floor(base["sets"] * 0.5)))
                self.assertLessEqual(ex["reps_max"], max(2, 0.6 * base["reps_max"]))
                self.assertEqual(ex["tempo"], "2-0-X-1")

        for index in range(len(template)):
            primaries = [w["sessions"][index]["exercises"][0] for w in weeks[:4]]
            reps = [p["reps_min"] for p in primaries]
            self.assertEqual(reps, sorted(reps))
            self.assertLess(reps[0], reps[-1])

    def test_all_levels_goals_and_frequencies(self) -> None:
        catalog = self.catalog.list_exercises()
        for intake in self.intakes():
            for with_catalog in (True, False):
                with self.subTest(
                    level=intake["experience_level"],
                    goal=intake["primary_goal"],
                    frequency=intake["training_frequency"],
                    pushups=intake["can_do_pushups"],
                    catalog=with_catalog,
                ):
                    builder = CycleBuilder(
                        intake, catalog if with_catalog else [], random.Random(0)
                    )
                    self.check_cycle(intake, builder, with_catalog)

    def test_intermediate_foundation_reps(self) -> None:
        builder = self.generator().build_cycle(
            {**BEGINNER, "experience_level": "intermediate"}
        )
        primary = builder.generate_push_session(1, 1)[0]
        self.assertEqual((primary["reps_min"], primary["reps_max"]), (4, 11))
        self.assertEqual(primary["sets"], 4)
        self.assertEqual(primary["rest_seconds"], 165)

    def test_persisted_workouts_per_frequency(self) -> None:
        for frequency in range(1, 8):
            with self.subTest(frequency=frequency):
                pid = self.generator().generate_program(
                    f"user{frequency}", {**BEGINNER, "training_frequency": frequency}
                )
                summary = self.generator().program_summary(pid)
                expected = len(session_template(frequency))
                for week in range(1, 6):
                    self.assertEqual(summary["weeks"][week]["workouts"], expected)


if __name__ == "__main__":
    unittest.main()
