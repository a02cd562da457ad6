from typing import Literal

from pydantic import BaseModel, Field, ValidationError

ExperienceLevel = Literal["beginner", "intermediate", "advanced"]
Goal = Literal[
    "strength",
    "muscle_building",
    "endurance",
    "skill_development",
    "weight_loss",
    "general_fitness",
]

# Fields that must be answered before a program can be generated.
REQUIRED_FOR_GENERATION = (
    "primary_goal",
    "training_frequency",
    "available_equipment",
    "can_do_pushups",
    "can_do_pullups",
    "can_hold_plank",
)


class Intake(BaseModel):
    experience_level: ExperienceLevel
    primary_goal: Goal
    training_frequency: int = Field(ge=1, le=7)
    available_equipment: list[str]
    can_do_pushups: int = Field(ge=0)
    can_do_pullups: int = Field(ge=0)
    can_hold_plank: int = Field(ge=0)
    previous_training: list[str] = []


def validate_intake(data: dict) -> dict:
    try:
        return Intake(**data).model_dump()
    except ValidationError as e:
        raise ValueError(str(e))


def missing_fields(data: dict) -> list[str]:
    return [key for key in REQUIRED_FOR_GENERATION if data.get(key) is None]
