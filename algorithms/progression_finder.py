"""Classify related exercises into progression buckets.

An exercise's relatives come from the same category. When its name matches
one of the movement patterns below, only exercises of that same pattern are
considered. Relatives are then split by difficulty relative to the current
exercise.
"""

MOVEMENT_PATTERNS: dict[str, list[str]] = {
    # push
    "push-up": [
        "wall push-up",
        "incline push-up",
        "knee push-up",
        "push-up",
        "diamond push-up",
        "archer push-up",
        "one-arm push-up",
    ],
    "handstand": ["wall handstand", "handstand wall walk", "handstand push-up", "handstand"],
    "dip": ["support hold", "assisted dip", "ring dip", "weighted dip"],
    "planche": [
        "planche lean",
        "frog stand",
        "crow pose",
        "pseudo planche push-up",
        "planche push-up",
    ],
    # pull
    "pull-up": [
        "dead hang",
        "scapular pull-up",
        "negative pull-up",
        "assisted pull-up",
        "chin-up",
        "pull-up",
        "wide-grip pull-up",
        "l-sit pull-up",
        "weighted pull-up",
        "one-arm pull-up",
    ],
    "row": ["inverted row", "ring row", "archer row"],
    "muscle-up": ["pull-up", "ring dip", "transition work", "muscle-up"],
    "lever": ["tuck front lever", "front lever", "back lever"],
    # legs
    "squat": ["wall sit", "assisted squat", "squat", "jump squat", "pistol squat", "shrimp squat"],
    "single-leg": ["step-up", "bulgarian split squat", "single-leg glute bridge", "pistol squat"],
    # core
    "plank": ["dead bug", "plank", "side plank", "hollow body"],
    "l-sit": ["support hold", "tuck l-sit", "l-sit progression", "l-sit"],
    "hanging": ["dead hang", "hanging knee raise", "hanging leg raise"],
}

PREREQUISITE_SPAN = 3
NEXT_STEP_SPAN = 2
MAX_PREREQUISITES = 3
MAX_NEXT_STEPS = 3
MAX_ADVANCED = 2
MAX_ALTERNATIVES = 3

# (comfort, max) difficulty per experience level
LEVEL_THRESHOLDS = {
    "beginner": (3, 4),
    "intermediate": (5, 7),
    "advanced": (8, 10),
}


def detect_movement_pattern(exercise_name: str) -> str | None:
    """Return the first pattern whose keywords occur in ``exercise_name``."""
    name = exercise_name.lower()
    for pattern, keywords in MOVEMENT_PATTERNS.items():
        if any(keyword in name for keyword in keywords):
            return pattern
    return None


def belongs_to_pattern(exercise_name: str, pattern: str) -> bool:
    name = exercise_name.lower()
    return any(keyword in name for keyword in MOVEMENT_PATTERNS[pattern])


def empty_progression(exercise: dict) -> dict:
    return {
        "prerequisites": [],
        "current": exercise,
        "next_steps": [],
        "advanced": [],
        "alternatives": [],
    }


def related_exercises(exercise: dict, same_category: list[dict]) -> list[dict]:
    pattern = detect_movement_pattern(exercise["name"])
    if pattern is None:
        return list(same_category)
    return [ex for ex in same_category if belongs_to_pattern(ex["name"], pattern)]


def categorize_progressions(current: dict, related: list[dict]) -> dict:
    level = current["difficulty_level"]
    floor = max(1, level - PREREQUISITE_SPAN)

    prerequisites = sorted(
        (ex for ex in related if floor <= ex["difficulty_level"] < level),
        key=lambda ex: ex["difficulty_level"],
        reverse=True,
    )[:MAX_PREREQUISITES]
    next_steps = sorted(
        (ex for ex in related if level < ex["difficulty_level"] <= level + NEXT_STEP_SPAN),
        key=lambda ex: ex["difficulty_level"],
    )[:MAX_NEXT_STEPS]
    advanced = sorted(
        (ex for ex in related if ex["difficulty_level"] > level + NEXT_STEP_SPAN),
        key=lambda ex: ex["difficulty_level"],
    )[:MAX_ADVANCED]
    alternatives = [ex for ex in related if ex["difficulty_level"] == level][
        :MAX_ALTERNATIVES
    ]
    return {
        "prerequisites": prerequisites,
        "current": current,
        "next_steps": next_steps,
        "advanced": advanced,
        "alternatives": alternatives,
    }


def get_progression_recommendation(path: dict) -> dict:
    """Return a title/description/action message for a progression path."""
    current = path["current"]
    if path["prerequisites"] and current["difficulty_level"] > 3:
        return {
            "title": "Master the Basics First",
            "description": (
                f"Before tackling {current['name']}, make sure you can comfortably "
                "perform the prerequisite exercises. A solid foundation prevents "
                "injury and speeds up progress."
            ),
            "action": "Practice Prerequisites",
        }
    if path["next_steps"]:
        return {
            "title": "Ready for the Next Challenge",
            "description": (
                f"Once you can perform {current['name']} with perfect form for the "
                "target reps, progress to the more challenging variations."
            ),
            "action": "Try Next Level",
        }
    if path["alternatives"]:
        return {
            "title": "Explore Variations",
            "description": (
                "Master different variations at this level to build well-rounded "
                "strength and avoid plateaus."
            ),
            "action": "Try Variations",
        }
    return {
        "title": "Mastery Level",
        "description": (
            "You're working with advanced exercises. Focus on perfect form, slow "
            "progressions and listen to your body."
        ),
        "action": "Perfect Your Form",
    }


def generate_training_recommendation(
    exercise: dict, path: dict, experience_level: str
) -> dict:
    """Decide whether a user of ``experience_level`` should attempt ``exercise``."""
    if experience_level not in LEVEL_THRESHOLDS:
        raise ValueError(f"unknown experience level: {experience_level}")
    comfort, maximum = LEVEL_THRESHOLDS[experience_level]
    level = exercise["difficulty_level"]

    if level <= comfort:
        return {
            "should_attempt": True,
            "reasoning": (
                f"This exercise is well suited to your {experience_level} level. "
                "You should be able to perform it safely with proper form."
            ),
            "suggested_alternative": None,
            "training_tips": [
                "Focus on perfect form over repetitions",
                "Start with fewer sets and build up gradually",
                "Rest adequately between sets (60-90 seconds)",
            ],
        }
    if level <= maximum:
        prerequisites = path["prerequisites"]
        return {
            "should_attempt": True,
            "reasoning": (
                "This is a challenging exercise for your level. Make sure you've "
                "mastered the prerequisites first."
            ),
            "suggested_alternative": prerequisites[0] if prerequisites else None,
            "training_tips": [
                "Master prerequisite exercises first",
                "Use assistance (bands, partner) initially",
                "Focus on the eccentric (lowering) phase",
                "Progress very gradually",
            ],
        }
    candidates = path["prerequisites"] or path["alternatives"]
    return {
        "should_attempt": False,
        "reasoning": (
            "This exercise is too advanced for your current level. Build strength "
            "with easier variations first."
        ),
        "suggested_alternative": candidates[0] if candidates else None,
        "training_tips": [
            "Build foundational strength first",
            "Focus on prerequisite movements",
            "Be patient - advanced skills take time",
            "Consider working with a trainer",
        ],
    }
