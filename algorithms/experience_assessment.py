class ExperienceAssessment:
    """Score intake answers into an experience level."""

    PUSHUPS = (8, 20)
    PULLUPS = (1, 8)
    PLANK_SECONDS = (30, 90)

    STRENGTH_WEIGHT = 0.4
    EXPERIENCE_WEIGHT = 0.3
    COMMITMENT_WEIGHT = 0.2
    GOAL_WEIGHT = 0.1

    RECOMMENDATIONS = {
        "beginner": {
            "starting_exercises": [
                "Incline Push-ups",
                "Ring Rows (or Band Pull-ups)",
                "Assisted Squats",
                "Plank Hold",
            ],
            "schedule": "{frequency} days/week with full rest days between sessions",
            "focus_areas": [
                "Perfect form development",
                "Tendon adaptation",
                "Basic strength building",
                "Movement consistency",
            ],
            "safeguards": [
                "Start with 2-3 sets per exercise",
                "Focus on controlled movements",
                "Rest 48-72 hours between sessions",
                "Soreness is normal, pain is not",
            ],
        },
        "intermediate": {
            "starting_exercises": [
                "Standard Push-ups",
                "Pull-ups (with assistance if needed)",
                "Ring Dips (assisted)",
                "L-sit Progressions",
            ],
            "schedule": "{frequency} days/week with push/pull split",
            "focus_areas": [
                "Progressive overload",
                "Skill development",
                "Strength endurance",
                "Movement quality refinement",
            ],
            "safeguards": [
                "Gradual load increases",
                "Proper warm-up essential",
                "Monitor RPE (Rate of Perceived Exertion)",
                "Deload weeks every 4-5 weeks",
            ],
        },
        "advanced": {
            "starting_exercises": [
                "Handstand Push-ups",
                "Weighted Pull-ups",
                "Ring Muscle-ups",
                "Human Flag Progressions",
            ],
            "schedule": "{frequency} days/week with advanced periodization",
            "focus_areas": [
                "Skill mastery",
                "Advanced progressions",
                "Strength-skill combination",
                "Performance optimization",
            ],
            "safeguards": [
                "Careful periodization",
                "Active recovery sessions",
                "Technical skill practice",
                "Regular form assessment",
            ],
        },
    }

    @staticmethod
    def _tier(value: float, thresholds: tuple[float, float]) -> int:
        low, high = thresholds
        if value >= high:
            return 2
        if value >= low:
            return 1
        return 0

    @classmethod
    def score(cls, data: dict) -> float:
        """Return the assessment score as a percentage of the maximum."""
        score = 0.0
        score += cls._tier(data.get("can_do_pushups") or 0, cls.PUSHUPS) * cls.STRENGTH_WEIGHT
        score += cls._tier(data.get("can_do_pullups") or 0, cls.PULLUPS) * cls.STRENGTH_WEIGHT
        score += (
            cls._tier(data.get("can_hold_plank") or 0, cls.PLANK_SECONDS)
            * cls.STRENGTH_WEIGHT
        )

        previous = data.get("previous_training") or []
        if "bodyweight" in previous:
            score += 2 * cls.EXPERIENCE_WEIGHT
        elif any(p in previous for p in ("gym", "sports", "martial_arts")):
            score += cls.EXPERIENCE_WEIGHT

        frequency = int(data.get("training_frequency") or 0)
        score += cls._tier(frequency, (3, 5)) * cls.COMMITMENT_WEIGHT

        goal = data.get("primary_goal")
        if goal in ("skill_development", "strength"):
            score += 2 * cls.GOAL_WEIGHT
        elif goal == "muscle_building":
            score += cls.GOAL_WEIGHT

        max_score = (
            6 * cls.STRENGTH_WEIGHT
            + 2 * cls.EXPERIENCE_WEIGHT
            + 2 * cls.COMMITMENT_WEIGHT
            + 2 * cls.GOAL_WEIGHT
        )
        return score / max_score * 100

    @classmethod
    def assess_experience_level(cls, data: dict) -> str:
        percentage = cls.score(data)
        if percentage >= 70:
            return "advanced"
        if percentage >= 40:
            return "intermediate"
        return "beginner"

    @classmethod
    def personalized_recommendations(cls, level: str, frequency: int) -> dict:
        if level not in cls.RECOMMENDATIONS:
            raise ValueError(f"unknown experience level: {level}")
        rec = cls.RECOMMENDATIONS[level]
        return {
            "starting_exercises": list(rec["starting_exercises"]),
            "weekly_schedule": rec["schedule"].format(frequency=frequency),
            "focus_areas": list(rec["focus_areas"]),
            "safeguards": list(rec["safeguards"]),
        }
