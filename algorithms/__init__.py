from .phase_manager import PhaseManager
from .exercise_selector import ExerciseSelector
from .experience_assessment import ExperienceAssessment
from . import progression_finder
from . import training_tables

__all__ = [
    "PhaseManager",
    "ExerciseSelector",
    "ExperienceAssessment",
    "progression_finder",
    "training_tables",
]
