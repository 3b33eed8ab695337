# src/rehabcoach/activities/activity_defs.py
# Closed set of supported exercises, selected once per engine instance.

from typing import Any, Dict, Optional, Union

from ..config import EngineConfig
from ..data_models import ExerciseType
from ..exceptions import UnknownExerciseError
from .base import ExerciseStrategy
from .bench import BenchStrategy
from .deadlift import DeadliftStrategy
from .squat import SquatStrategy

EXERCISE_LIBRARY: Dict[ExerciseType, Dict[str, Any]] = {
    ExerciseType.SQUAT: {
        "label": "Squat",
        "strategy": SquatStrategy,
        "tips": [
            "Knees track over toes",
            "Chest up, brace the core",
            "Hips to knee height or below",
        ],
    },
    ExerciseType.BENCH: {
        "label": "Bench Press",
        "strategy": BenchStrategy,
        "tips": [
            "Keep elbows tucked (arrow, not T)",
            "Push evenly with both arms",
            "Full lockout at top",
        ],
    },
    ExerciseType.DEADLIFT: {
        "label": "Romanian Deadlift",
        "strategy": DeadliftStrategy,
        "tips": [
            "Push hips back (don't just bend)",
            "Keep the bar touching your legs",
            "Chin tucked, chest up",
        ],
    },
}


def resolve_exercise(value: Union[str, ExerciseType]) -> ExerciseType:
    if isinstance(value, ExerciseType):
        return value
    try:
        return ExerciseType(str(value).upper())
    except ValueError:
        raise UnknownExerciseError(
            f"Unknown exercise '{value}'. Expected one of: {', '.join(e.value for e in ExerciseType)}"
        ) from None


def create_strategy(exercise: Union[str, ExerciseType], config: Optional[EngineConfig] = None) -> ExerciseStrategy:
    entry = EXERCISE_LIBRARY[resolve_exercise(exercise)]
    return entry["strategy"](config)
