"""LangGraph state machine for answer processing.

This module provides the flow that validates an answer, advances or
retries the current step, and produces the next prompt.
"""

from .builder import create_step_graph
from .state import GraphState

__all__ = ["create_step_graph", "GraphState"]
