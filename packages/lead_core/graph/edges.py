"""Edge routing functions for the answer processing flow."""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from .state import GraphState

if TYPE_CHECKING:
    from lead_core.engine import StepEngine


def route_after_validate(
    state: GraphState,
    engine: StepEngine,
) -> Literal["record_answer", "record_failure"]:
    """Route on the validation result.

    Args:
        state: Current graph state
        engine: The step engine instance

    Returns:
        Next node to execute
    """
    if state["is_valid"]:
        return "record_answer"
    return "record_failure"


def route_after_record_answer(
    state: GraphState,
    engine: StepEngine,
) -> Literal["prompt_next", "complete"]:
    """Complete the session once the last step has been answered.

    Args:
        state: Current graph state
        engine: The step engine instance

    Returns:
        Next node to execute
    """
    if state["session"].current_step >= engine.config.step_count:
        return "complete"
    return "prompt_next"


def route_after_record_failure(
    state: GraphState,
    engine: StepEngine,
) -> Literal["reprompt", "manual_fallback"]:
    """Fall back to typed input the first time retries exceed the limit.

    Args:
        state: Current graph state
        engine: The step engine instance

    Returns:
        Next node to execute
    """
    session = state["session"]
    step = state["step"]
    if step is None:
        return "reprompt"

    if (
        session.get_retry_count(step.name) > engine.config.max_retries
        and step.name not in session.manual_fallback_fields
    ):
        return "manual_fallback"
    return "reprompt"
