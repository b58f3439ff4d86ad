"""Graph builder for the answer processing flow.

This module provides the function to construct and compile the
step advancement state machine graph.
"""

from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING, Any

from langgraph.graph import END, StateGraph  # type: ignore[import-not-found]

from .edges import route_after_record_answer, route_after_record_failure, route_after_validate
from .nodes import (
    complete_node,
    manual_fallback_node,
    prompt_next_node,
    record_answer_node,
    record_failure_node,
    reprompt_node,
    validate_answer_node,
)
from .state import GraphState

if TYPE_CHECKING:
    from langgraph.graph.state import CompiledStateGraph  # type: ignore[import-not-found]
    from lead_core.engine import StepEngine


def create_step_graph(engine: StepEngine) -> CompiledStateGraph:
    """Create and compile the answer processing graph.

    The graph follows this flow:
    ```
    START → validate_answer
                 │
          ┌──────┴───────┐
          ↓              ↓
    record_answer   record_failure
          │              │
     ┌────┴────┐    ┌────┴──────────┐
     ↓         ↓    ↓               ↓
    prompt_next complete reprompt  manual_fallback
     ↓         ↓    ↓               ↓
    END       END  END             END
    ```

    Args:
        engine: The step engine instance to bind to node functions

    Returns:
        Compiled StateGraph ready for execution
    """
    workflow: StateGraph[GraphState, Any, Any] = StateGraph(GraphState)

    nodes = {
        "validate_answer": validate_answer_node,
        "record_answer": record_answer_node,
        "record_failure": record_failure_node,
        "prompt_next": prompt_next_node,
        "reprompt": reprompt_node,
        "manual_fallback": manual_fallback_node,
        "complete": complete_node,
    }
    for name, node_func in nodes.items():
        workflow.add_node(name, partial(_wrap_node, node_func, engine=engine))

    workflow.set_entry_point("validate_answer")

    workflow.add_conditional_edges(
        "validate_answer",
        partial(route_after_validate, engine=engine),
        {
            "record_answer": "record_answer",
            "record_failure": "record_failure",
        },
    )
    workflow.add_conditional_edges(
        "record_answer",
        partial(route_after_record_answer, engine=engine),
        {
            "prompt_next": "prompt_next",
            "complete": "complete",
        },
    )
    workflow.add_conditional_edges(
        "record_failure",
        partial(route_after_record_failure, engine=engine),
        {
            "reprompt": "reprompt",
            "manual_fallback": "manual_fallback",
        },
    )

    # Terminal nodes go to END
    workflow.add_edge("prompt_next", END)
    workflow.add_edge("reprompt", END)
    workflow.add_edge("manual_fallback", END)
    workflow.add_edge("complete", END)

    return workflow.compile()


async def _wrap_node(
    node_func: Any,
    state: GraphState,
    engine: StepEngine,
) -> GraphState:
    """Run an async node with the engine bound.

    Args:
        node_func: The node function to execute
        state: Current graph state
        engine: The step engine instance

    Returns:
        Updated graph state
    """
    return await node_func(state, engine)  # type: ignore[no-any-return]
