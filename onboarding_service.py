from __future__ import annotations
import logging

from pydantic import BaseModel

from algorithms.experience_assessment import ExperienceAssessment
from db import GenerationLogRepository
from intake_schema import missing_fields, validate_intake
from program_service import ProgramGenerator

logger = logging.getLogger(__name__)


class GenerationResult(BaseModel):
    status: str
    program_id: int | None = None
    experience_level: str | None = None
    missing: list[str] = []
    recommendations: dict | None = None


class OnboardingService:
    """Turn completed intake answers into a generated program."""

    def __init__(
        self,
        generator: ProgramGenerator,
        log_repo: GenerationLogRepository | None = None,
    ) -> None:
        self.generator = generator
        self.log_repo = log_repo

    def complete_onboarding(self, user_id: str, answers: dict) -> GenerationResult:
        """Generate a program, or report which answers are still missing."""
        missing = missing_fields(answers)
        if missing:
            message = "missing fields: " + ", ".join(missing)
            logger.warning("skipping program generation for %s, %s", user_id, message)
            if self.log_repo is not None:
                self.log_repo.log_skipped(user_id, message)
            return GenerationResult(status="skipped", missing=missing)

        level = answers.get("experience_level") or ExperienceAssessment.assess_experience_level(
            answers
        )
        intake = validate_intake({**answers, "experience_level": level})
        program_id = self.generator.generate_program(user_id, intake)
        return GenerationResult(
            status="created",
            program_id=program_id,
            experience_level=level,
            recommendations=ExperienceAssessment.personalized_recommendations(
                level, intake["training_frequency"]
            ),
        )
