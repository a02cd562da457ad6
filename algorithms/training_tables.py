"""Static parameter tables for program generation."""

import math

EXPERIENCE_LEVELS = ("beginner", "intermediate", "advanced")

SESSION_TYPES = ("push_1", "pull_1", "push_2", "pull_2")

LEVEL_PARAMETERS: dict[str, dict] = {
    "beginner": {
        "sets_per_exercise": {"min": 2, "max": 3},
        "reps_range": {"min": 5, "max": 12},
        "rest_seconds": {"strength": 120, "endurance": 60},
        "sessions_per_week": {"min": 2, "max": 3},
        "exercises_per_session": {"min": 4, "max": 6},
    },
    "intermediate": {
        "sets_per_exercise": {"min": 3, "max": 4},
        "reps_range": {"min": 6, "max": 15},
        "rest_seconds": {"strength": 150, "endurance": 90},
        "sessions_per_week": {"min": 3, "max": 4},
        "exercises_per_session": {"min": 5, "max": 7},
    },
    "advanced": {
        "sets_per_exercise": {"min": 3, "max": 5},
        "reps_range": {"min": 5, "max": 20},
        "rest_seconds": {"strength": 180, "endurance": 120},
        "sessions_per_week": {"min": 4, "max": 6},
        "exercises_per_session": {"min": 6, "max": 8},
    },
}

GOAL_MODIFIERS: dict[str, dict] = {
    "strength": {"rep_adjustment": -2, "rest_multiplier": 1.2, "intensity_focus": "high"},
    "muscle_building": {"rep_adjustment": 2, "rest_multiplier": 1.0, "intensity_focus": "moderate"},
    "endurance": {"rep_adjustment": 5, "rest_multiplier": 0.7, "intensity_focus": "low"},
    "skill_development": {"rep_adjustment": -3, "rest_multiplier": 1.5, "intensity_focus": "technique"},
    "weight_loss": {"rep_adjustment": 3, "rest_multiplier": 0.8, "intensity_focus": "metabolic"},
    "general_fitness": {"rep_adjustment": 0, "rest_multiplier": 1.0, "intensity_focus": "balanced"},
}

# Difficulty ceiling applied when picking catalog exercises.
DIFFICULTY_CEILING = {"beginner": 4, "intermediate": 7, "advanced": 10}

# Used when the catalog yields nothing for a slot.
EXERCISE_LIBRARY: dict[str, dict[str, list[str]]] = {
    "push": {
        "primary": ["Push-ups", "Pike Push-ups", "Handstand Push-ups", "Ring Dips"],
        "secondary": ["Incline Push-ups", "Wall Handstand Hold", "Support Hold"],
        "skill": ["Handstand Practice", "L-sit Progression", "Planche Progression"],
    },
    "pull": {
        "primary": ["Pull-ups", "Chin-ups", "Ring Rows", "Muscle-ups"],
        "secondary": ["Negative Pull-ups", "Assisted Pull-ups", "Dead Hangs"],
        "skill": ["Front Lever Progression", "Back Lever Progression"],
    },
    "legs": {
        "primary": ["Squats", "Pistol Squats", "Lunges", "Single Leg Glute Bridges"],
        "secondary": ["Wall Sit", "Calf Raises", "Step-ups"],
    },
    "core": {
        "primary": ["L-sit", "Plank", "Hollow Body Hold", "V-ups"],
        "secondary": ["Dead Bug", "Bicycle Crunches", "Russian Twists"],
    },
}

# Tempo notation: eccentric-pause-concentric-pause.
TEMPO_STANDARD = "3-0-X-1"
TEMPO_DELOAD = "2-0-X-1"

PROGRAM_NAME_PREFIX = "Body by Rings"


def level_parameters(level: str) -> dict:
    if level not in LEVEL_PARAMETERS:
        raise ValueError(f"unknown experience level: {level}")
    return LEVEL_PARAMETERS[level]


def goal_modifier(goal: str) -> dict:
    if goal not in GOAL_MODIFIERS:
        raise ValueError(f"unknown goal: {goal}")
    return GOAL_MODIFIERS[goal]


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (10.5 -> 11)."""
    return math.floor(value + 0.5)
