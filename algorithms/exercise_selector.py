import logging
import random

from .training_tables import DIFFICULTY_CEILING, EXERCISE_LIBRARY

logger = logging.getLogger(__name__)


class ExerciseSelector:
    """Pick one exercise for a category/role slot.

    The catalog is a list of exercise dicts ordered by difficulty. Names
    already handed out are tracked so a session avoids duplicates until the
    suitable pool runs dry.
    """

    # (minimum ability, name prefixes, prefer hardest match)
    ABILITY_RULES: dict[str, list[tuple[int, tuple[str, ...], bool]]] = {
        "push": [
            (5, ("push-up", "pike push-up"), True),
            (1, ("push-up",), False),
            (0, ("wall push-up", "incline push-up"), False),
        ],
        "pull": [
            (3, ("pull-up", "chin-up"), True),
            (1, ("negative pull-up", "assisted pull-up", "ring row"), False),
            (0, ("inverted row", "ring row", "negative pull-up"), False),
        ],
    }

    def __init__(
        self,
        catalog: list[dict],
        experience_level: str,
        can_do_pushups: int = 0,
        can_do_pullups: int = 0,
        rng: random.Random | None = None,
    ) -> None:
        if experience_level not in DIFFICULTY_CEILING:
            raise ValueError(f"unknown experience level: {experience_level}")
        self.catalog = list(catalog)
        self.max_difficulty = DIFFICULTY_CEILING[experience_level]
        self.ability = {"push": can_do_pushups, "pull": can_do_pullups}
        self.rng = rng or random.Random()
        self.used: set = set()

    def reset(self) -> None:
        self.used.clear()

    @staticmethod
    def _key(exercise: dict):
        return exercise["id"] if exercise.get("id") is not None else exercise["name"]

    def _ability_match(self, category: str, candidates: list[dict]) -> dict | None:
        rules = self.ABILITY_RULES.get(category)
        if not rules:
            return None
        ability = self.ability[category]
        for minimum, prefixes, hardest in rules:
            if ability < minimum:
                continue
            matches = [
                ex
                for ex in candidates
                if ex["name"].lower().startswith(prefixes)
            ]
            if not matches:
                return None
            return matches[-1] if hardest else matches[0]
        return None

    def _suitable(self, category: str) -> tuple[list[dict], list[dict]]:
        """Return (unused, all) exercises of ``category`` under the ceiling."""
        in_category = [
            ex
            for ex in self.catalog
            if ex.get("category") == category
            and ex.get("difficulty_level", 0) <= self.max_difficulty
        ]
        unused = [ex for ex in in_category if self._key(ex) not in self.used]
        return unused, in_category

    def _fallback(self, category: str, role: str) -> dict:
        library = EXERCISE_LIBRARY[category]
        names = library.get(role) or library["primary"]
        unused = [n for n in names if n not in self.used]
        name = (unused or names)[0]
        logger.debug("catalog empty for %s/%s, using %s", category, role, name)
        return {"id": None, "name": name, "category": category}

    def select_exercise(self, category: str, role: str) -> dict:
        """Return an exercise dict for ``category``/``role``; never ``None``."""
        if category not in EXERCISE_LIBRARY:
            raise ValueError(f"unknown category: {category}")
        unused, in_category = self._suitable(category)
        suitable = unused or in_category
        if suitable:
            chosen = None
            if role == "primary":
                chosen = self._ability_match(category, unused)
                if chosen is None:
                    chosen = self._ability_match(category, in_category)
                if chosen is None and category in self.ABILITY_RULES:
                    chosen = suitable[0]
            if chosen is None:
                chosen = self.rng.choice(suitable)
        else:
            chosen = self._fallback(category, role)
        self.used.add(self._key(chosen))
        return chosen
