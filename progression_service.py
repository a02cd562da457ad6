from __future__ import annotations
import logging
import sqlite3

from db import ExerciseCatalogRepository, AsyncExerciseCatalogRepository
from algorithms.progression_finder import (
    categorize_progressions,
    empty_progression,
    generate_training_recommendation,
    get_progression_recommendation,
    related_exercises,
)

logger = logging.getLogger(__name__)

FINDER_ERRORS = (sqlite3.Error, KeyError, TypeError)


class ProgressionService:
    """Find progressions for a single exercise from the catalog.

    Read only. Catalog failures and malformed exercises yield an empty path
    instead of an error.
    """

    def __init__(
        self,
        catalog_repo: ExerciseCatalogRepository,
        async_catalog_repo: AsyncExerciseCatalogRepository | None = None,
    ) -> None:
        self.catalog = catalog_repo
        self.async_catalog = async_catalog_repo

    def find_exercise_progressions(self, exercise: dict) -> dict:
        try:
            same_category = self.catalog.list_by_category(
                exercise["category"], exclude_id=exercise.get("id")
            )
            return categorize_progressions(
                exercise, related_exercises(exercise, same_category)
            )
        except FINDER_ERRORS as e:
            logger.error("error finding progressions for %s: %s", exercise.get("name"), e)
            return empty_progression(exercise)

    async def find_exercise_progressions_async(self, exercise: dict) -> dict:
        if self.async_catalog is None:
            return self.find_exercise_progressions(exercise)
        try:
            same_category = await self.async_catalog.list_by_category(
                exercise["category"], exclude_id=exercise.get("id")
            )
            return categorize_progressions(
                exercise, related_exercises(exercise, same_category)
            )
        except FINDER_ERRORS as e:
            logger.error("error finding progressions for %s: %s", exercise.get("name"), e)
            return empty_progression(exercise)

    def recommendation(self, exercise: dict) -> dict:
        path = self.find_exercise_progressions(exercise)
        return get_progression_recommendation(path)

    def training_recommendation(self, exercise: dict, experience_level: str) -> dict:
        path = self.find_exercise_progressions(exercise)
        return generate_training_recommendation(exercise, path, experience_level)
