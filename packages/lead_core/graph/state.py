"""Graph state definition for the answer processing flow.

This module defines the TypedDict state that flows through the graph nodes,
carrying the session and the outcome of the current turn.
"""

from typing import Optional, TypedDict

from lead_config import ConversationStep
from lead_runtime import SessionState


class GraphState(TypedDict):
    """State that flows through the answer processing graph.

    Attributes:
        session: The session being advanced
        user_message: The raw answer being processed
        step: The step the answer belongs to
        extracted_value: Normalized value if the answer passed validation
        is_valid: Whether the answer passed validation
        response: The agent message to send back
        validation_error: Error code for the client, if any
        should_auto_listen: Whether the client should listen after speaking
    """

    session: SessionState
    user_message: str
    step: Optional[ConversationStep]
    extracted_value: Optional[str]
    is_valid: bool
    response: str
    validation_error: Optional[str]
    should_auto_listen: bool


def create_initial_state(
    session: SessionState,
    user_message: str,
    step: Optional[ConversationStep],
) -> GraphState:
    """Create an initial graph state for one answer.

    Args:
        session: The current session
        user_message: The user's answer
        step: The step currently being asked

    Returns:
        Initialized GraphState with default values
    """
    return GraphState(
        session=session,
        user_message=user_message,
        step=step,
        extracted_value=None,
        is_valid=False,
        response="",
        validation_error=None,
        should_auto_listen=False,
    )
