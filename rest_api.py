import random
from fastapi import FastAPI, HTTPException, Body, APIRouter, Depends, Header

from config import configure_logging, load_settings
from db import (
    ExerciseCatalogRepository,
    AsyncExerciseCatalogRepository,
    ProgramRepository,
    WorkoutRepository,
    SetRepository,
    GenerationLogRepository,
)
from program_service import ProgramGenerator
from progression_service import ProgressionService
from onboarding_service import OnboardingService
from algorithms.experience_assessment import ExperienceAssessment
from algorithms.phase_manager import PhaseManager
from algorithms.progression_finder import get_progression_recommendation


class TrainingAPI:
    """Provides REST endpoints for program generation and progressions."""

    def __init__(
        self,
        db_path: str | None = None,
        yaml_path: str = "settings.yaml",
        *,
        seed_catalog: bool = True,
    ) -> None:
        settings = load_settings(yaml_path)
        configure_logging(settings["log_level"])
        self.db_path = db_path or settings["db_path"]
        self.api_token = settings["api_token"]
        self.catalog = ExerciseCatalogRepository(self.db_path, seed_catalog)
        self.async_catalog = AsyncExerciseCatalogRepository(self.db_path, False)
        self.programs = ProgramRepository(self.db_path, False)
        self.workouts = WorkoutRepository(self.db_path, False)
        self.sets = SetRepository(self.db_path, False)
        self.generation_logs = GenerationLogRepository(self.db_path, False)
        seed = settings["selection_seed"]
        self.generator = ProgramGenerator(
            self.catalog,
            self.programs,
            self.workouts,
            self.sets,
            self.generation_logs,
            regeneration_policy=settings["regeneration_policy"],
            rng=random.Random(seed) if seed is not None else None,
        )
        self.progressions = ProgressionService(self.catalog, self.async_catalog)
        self.onboarding = OnboardingService(self.generator, self.generation_logs)
        self.app = FastAPI(
            title="Training API",
            description="REST API for bodyweight program generation",
        )
        self._setup_routes()

    def _check_token(
        self, x_api_token: str | None = Header(default=None, alias="X-API-Token")
    ) -> None:
        if self.api_token and x_api_token != self.api_token:
            raise HTTPException(status_code=401, detail="invalid api token")

    def _exercise_or_404(self, exercise_id: int) -> dict:
        try:
            return self.catalog.fetch_by_id(exercise_id)
        except ValueError as e:
            raise HTTPException(status_code=404, detail=str(e))

    def _setup_routes(self) -> None:
        exercises_router = APIRouter(prefix="/exercises", tags=["Exercises"])
        auth = [Depends(self._check_token)]
        programs_router = APIRouter(
            prefix="/programs", tags=["Programs"], dependencies=auth
        )
        phases_router = APIRouter(prefix="/phases", tags=["Phases"])

        @self.app.get("/health")
        def health():
            try:
                self.catalog.list_exercises()
                return {"status": "ok"}
            except Exception as e:  # pragma: no cover - connectivity failure
                raise HTTPException(status_code=500, detail=str(e))

        @exercises_router.get("")
        def list_exercises(category: str | None = None):
            if category is not None:
                return self.catalog.list_by_category(category)
            return self.catalog.list_exercises()

        @exercises_router.get("/{exercise_id}")
        def get_exercise(exercise_id: int):
            return self._exercise_or_404(exercise_id)

        @exercises_router.get("/{exercise_id}/progressions")
        async def get_progressions(exercise_id: int):
            try:
                exercise = await self.async_catalog.fetch_by_id(exercise_id)
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))
            path = await self.progressions.find_exercise_progressions_async(exercise)
            path["recommendation"] = get_progression_recommendation(path)
            return path

        @exercises_router.get("/{exercise_id}/recommendation")
        def get_recommendation(exercise_id: int, level: str = "beginner"):
            exercise = self._exercise_or_404(exercise_id)
            try:
                return self.progressions.training_recommendation(exercise, level)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @programs_router.post("/generate")
        def generate_program(user_id: str, intake: dict = Body(...)):
            try:
                program_id = self.generator.generate_program(user_id, intake)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return {"id": program_id}

        @programs_router.post("/preview")
        def preview_program(intake: dict = Body(...)):
            try:
                return self.generator.preview(intake)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @programs_router.get("")
        def list_programs(user_id: str, status: str | None = None):
            return self.programs.fetch_for_user(user_id, status)

        @programs_router.get("/{program_id}")
        def get_program(program_id: int):
            try:
                return self.generator.program_summary(program_id)
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))

        @programs_router.get("/{program_id}/workouts")
        def list_workouts(program_id: int):
            return self.workouts.fetch_for_program(program_id)

        @programs_router.put("/{program_id}/status")
        def update_status(program_id: int, status: str):
            try:
                self.programs.set_status(program_id, status)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return {"status": "updated"}

        @self.app.get("/workouts/{workout_id}/sets", dependencies=auth)
        def list_sets(workout_id: int):
            return self.sets.fetch_for_workout(workout_id)

        @self.app.post("/onboarding/{user_id}", dependencies=auth)
        def complete_onboarding(user_id: str, answers: dict = Body(...)):
            try:
                result = self.onboarding.complete_onboarding(user_id, answers)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return result.model_dump()

        @phases_router.get("/{phase}")
        def get_phase(phase: int):
            try:
                config = PhaseManager.phase_config(phase)
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))
            return {
                **config,
                "exercises": PhaseManager.phase_exercises(phase),
                "next_phase": PhaseManager.next_phase(phase),
            }

        @phases_router.post("/advance")
        def check_advance(
            phase: int,
            cycles_completed: int,
            strength_increase: float,
            consistency: float,
            skill_mastery: float,
        ):
            try:
                ready = PhaseManager.can_advance(
                    phase,
                    cycles_completed,
                    {
                        "strength_increase": strength_increase,
                        "consistency": consistency,
                        "skill_mastery": skill_mastery,
                    },
                )
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return {
                "can_advance": ready,
                "next_phase": PhaseManager.next_phase(phase) if ready else None,
            }

        @self.app.get("/generation_logs", dependencies=auth)
        def generation_logs(limit: int = 20):
            return self.generation_logs.fetch_recent(limit)

        @self.app.get("/generation_logs/status", dependencies=auth)
        def generation_status():
            return {
                "last_success": self.generation_logs.last_success(),
                "errors": [
                    {"timestamp": ts, "message": msg}
                    for ts, msg in self.generation_logs.last_errors(5)
                ],
            }

        @self.app.get("/assessment/recommendations")
        def assessment_recommendations(level: str, frequency: int = 3):
            try:
                return ExperienceAssessment.personalized_recommendations(
                    level, frequency
                )
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        self.app.include_router(exercises_router)
        self.app.include_router(programs_router)
        self.app.include_router(phases_router)
