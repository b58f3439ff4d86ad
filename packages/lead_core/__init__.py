"""Voice Lead Collection - Core Package."""

from .engine import EngineError, SessionCompletedError, StepEngine, StepOutcome
from .graph import GraphState, create_step_graph
from .validators import normalize_spoken_email, validate_answer

__version__ = "0.1.0"

__all__ = [
    "EngineError",
    "GraphState",
    "SessionCompletedError",
    "StepEngine",
    "StepOutcome",
    "create_step_graph",
    "normalize_spoken_email",
    "validate_answer",
]
