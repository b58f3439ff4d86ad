"""Node functions for the answer processing flow.

Each node performs one action on the graph state: validating the answer,
recording it or the failure, and producing the agent's next message.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from lead_core.metrics import MANUAL_FALLBACKS, VALIDATIONS
from lead_core.validators import validate_answer

from .state import GraphState

if TYPE_CHECKING:
    from lead_core.engine import StepEngine

logger = logging.getLogger(__name__)


async def validate_answer_node(
    state: GraphState,
    engine: StepEngine,
) -> GraphState:
    """Validate the user's answer against the current step's field type.

    Args:
        state: Current graph state
        engine: The step engine instance

    Returns:
        Updated graph state with validation result
    """
    step = state["step"]
    if step is None:
        state["is_valid"] = False
        state["extracted_value"] = None
        return state

    value = validate_answer(step, state["user_message"])
    state["extracted_value"] = value
    state["is_valid"] = value is not None

    VALIDATIONS.labels(
        field_type=step.field_type.value,
        result="valid" if state["is_valid"] else "invalid",
    ).inc()
    return state


async def record_answer_node(
    state: GraphState,
    engine: StepEngine,
) -> GraphState:
    """Store the validated value and advance the session."""
    step = state["step"]
    value = state["extracted_value"]
    if step is not None and value is not None:
        state["session"].record_answer(step.name, value)
    return state


async def record_failure_node(
    state: GraphState,
    engine: StepEngine,
) -> GraphState:
    """Count a failed answer for the current field."""
    step = state["step"]
    if step is not None:
        field_value = state["session"].record_failure(step.name)
        logger.info(
            "Session %s: invalid %s (attempt %d)",
            state["session"].session_id,
            step.name,
            field_value.attempts,
        )
    return state


async def prompt_next_node(
    state: GraphState,
    engine: StepEngine,
) -> GraphState:
    """Ask the next question in the sequence.

    Args:
        state: Current graph state
        engine: The step engine instance

    Returns:
        Updated graph state with response
    """
    next_step = engine.config.get_step(state["session"].current_step)
    if next_step is None:
        state["response"] = engine.completion_message(state["session"])
        state["should_auto_listen"] = False
        return state

    state["response"] = next_step.prompt
    state["should_auto_listen"] = True
    return state


async def reprompt_node(
    state: GraphState,
    engine: StepEngine,
) -> GraphState:
    """Re-ask the current question after an invalid answer.

    Fields already switched to typed input keep the client out of
    listening mode.
    """
    step = state["step"]
    if step is None:
        state["response"] = engine.completion_message(state["session"])
        state["should_auto_listen"] = False
        return state

    state["response"] = step.retry_prompt()
    state["should_auto_listen"] = step.name not in state["session"].manual_fallback_fields
    return state


async def manual_fallback_node(
    state: GraphState,
    engine: StepEngine,
) -> GraphState:
    """Switch the client to typed input for the current field.

    The max-retries code is emitted once per field; the field is remembered
    on the session so later failures only re-prompt.
    """
    step = state["step"]
    if step is None:
        return state

    session = state["session"]
    session.manual_fallback_fields.add(step.name)

    state["validation_error"] = f"max_retries_{step.name}"
    state["response"] = engine.config.manual_fallback_message.format(label=step.display_label)
    state["should_auto_listen"] = False

    MANUAL_FALLBACKS.labels(field=step.name).inc()
    logger.info("Session %s: manual input fallback for %s", session.session_id, step.name)
    return state


async def complete_node(
    state: GraphState,
    engine: StepEngine,
) -> GraphState:
    """Generate the closing message and mark the session completed.

    Args:
        state: Current graph state
        engine: The step engine instance

    Returns:
        Updated graph state with completion response
    """
    session = state["session"]
    session.mark_completed()

    state["response"] = engine.completion_message(session)
    state["should_auto_listen"] = False
    return state
