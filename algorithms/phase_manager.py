from .training_tables import level_parameters, round_half_up


class PhaseManager:
    """Select, scale and advance the three training phases."""

    PHASE_CONFIGURATIONS: dict[int, dict] = {
        1: {
            "phase": 1,
            "name": "Foundation Phase",
            "description": "Build base strength and movement quality",
            "duration_cycles": 2,
            "focus": "Movement patterns, basic strength, tendon conditioning",
            "intensity_percentage": 70,
            "volume_multiplier": 1.0,
            "complexity_level": 1,
        },
        2: {
            "phase": 2,
            "name": "Development Phase",
            "description": "Increase strength and introduce skill elements",
            "duration_cycles": 3,
            "focus": "Progressive overload, skill introduction, power development",
            "intensity_percentage": 85,
            "volume_multiplier": 1.2,
            "complexity_level": 3,
        },
        3: {
            "phase": 3,
            "name": "Mastery Phase",
            "description": "Advanced skills and maximum strength",
            "duration_cycles": 2,
            "focus": "Advanced skills, peak strength, movement mastery",
            "intensity_percentage": 95,
            "volume_multiplier": 1.1,
            "complexity_level": 5,
        },
    }

    STARTING_PHASE_BY_LEVEL = {"beginner": 1, "intermediate": 1, "advanced": 1}

    # Advanced users meeting all three are admitted to phase 2.
    ADMISSION_PULLUPS = 8
    ADMISSION_PUSHUPS = 15
    ADMISSION_PLANK_SECONDS = 60

    MIN_STRENGTH_INCREASE = {1: 25.0, 2: 15.0, 3: 10.0}
    MIN_CONSISTENCY = 0.8

    PHASE_EXERCISES: dict[int, dict] = {
        1: {
            "push_primary": ["Push-ups", "Incline Push-ups", "Pike Push-ups"],
            "pull_primary": ["Ring Rows", "Negative Pull-ups", "Assisted Pull-ups"],
            "skill_focus": ["Support Hold", "Dead Hang", "Wall Handstand"],
            "complexity": "basic",
        },
        2: {
            "push_primary": ["Push-ups", "Pike Push-ups", "Ring Dips", "Archer Push-ups"],
            "pull_primary": ["Pull-ups", "Chin-ups", "Ring Rows", "Commando Pull-ups"],
            "skill_focus": [
                "L-sit Progression",
                "Handstand Push-up Progression",
                "Front Lever Negatives",
            ],
            "complexity": "intermediate",
        },
        3: {
            "push_primary": [
                "Handstand Push-ups",
                "Ring Dips",
                "Planche Push-ups",
                "One-Arm Push-up Progression",
            ],
            "pull_primary": [
                "Muscle-ups",
                "One-Arm Pull-up Progression",
                "Front Lever",
                "Weighted Pull-ups",
            ],
            "skill_focus": ["Planche Progression", "Front Lever", "Back Lever", "Human Flag"],
            "complexity": "advanced",
        },
    }

    @classmethod
    def phase_config(cls, phase: int) -> dict:
        if phase not in cls.PHASE_CONFIGURATIONS:
            raise ValueError(f"unknown phase: {phase}")
        return cls.PHASE_CONFIGURATIONS[phase]

    @classmethod
    def select_phase(cls, intake: dict) -> int:
        """Return the starting phase for an intake."""
        level = intake["experience_level"]
        if level not in cls.STARTING_PHASE_BY_LEVEL:
            raise ValueError(f"unknown experience level: {level}")
        if (
            level == "advanced"
            and intake["can_do_pullups"] >= cls.ADMISSION_PULLUPS
            and intake["can_do_pushups"] >= cls.ADMISSION_PUSHUPS
            and intake["can_hold_plank"] >= cls.ADMISSION_PLANK_SECONDS
        ):
            return 2
        return cls.STARTING_PHASE_BY_LEVEL[level]

    @classmethod
    def scale_parameters(
        cls, base_params: dict, phase: int, goal_modifier: dict | None = None
    ) -> dict:
        """Scale level parameters by the phase's volume, intensity and complexity.

        ``goal_modifier`` is not applied here: rep adjustments and rest
        multipliers are applied when individual sets are built.
        """
        config = cls.phase_config(phase)
        volume = config["volume_multiplier"]
        intensity = config["intensity_percentage"] / 100
        rest_factor = 1 + config["complexity_level"] * 0.1
        extra = config["complexity_level"] // 2

        sets = base_params["sets_per_exercise"]
        reps = base_params["reps_range"]
        rest = base_params["rest_seconds"]
        per_session = base_params["exercises_per_session"]
        scaled = dict(base_params)
        scaled.update(
            {
                "sets_per_exercise": {
                    "min": round_half_up(sets["min"] * volume),
                    "max": round_half_up(sets["max"] * volume),
                },
                "reps_range": {
                    "min": round_half_up(reps["min"] * intensity),
                    "max": round_half_up(reps["max"] * intensity),
                },
                "rest_seconds": {
                    "strength": round_half_up(rest["strength"] * rest_factor),
                    "endurance": round_half_up(rest["endurance"] * rest_factor),
                },
                "exercises_per_session": {
                    "min": per_session["min"] + extra,
                    "max": per_session["max"] + extra,
                },
            }
        )
        return scaled

    @classmethod
    def parameters_for(cls, level: str, phase: int) -> dict:
        return cls.scale_parameters(level_parameters(level), phase)

    @classmethod
    def can_advance(cls, phase: int, cycles_completed: int, progress: dict) -> bool:
        """Return whether a user has met the criteria to leave ``phase``.

        ``progress`` holds ``strength_increase`` (percent), ``consistency``
        (completion rate 0-1) and ``skill_mastery`` (1-5).
        """
        config = cls.phase_config(phase)
        if cycles_completed < config["duration_cycles"]:
            return False
        return (
            progress["strength_increase"] >= cls.MIN_STRENGTH_INCREASE[phase]
            and progress["consistency"] >= cls.MIN_CONSISTENCY
            and progress["skill_mastery"] >= phase
        )

    @classmethod
    def next_phase(cls, phase: int) -> int | None:
        cls.phase_config(phase)
        return phase + 1 if phase < 3 else None

    @classmethod
    def phase_exercises(cls, phase: int) -> dict:
        cls.phase_config(phase)
        return cls.PHASE_EXERCISES[phase]
