"""Conversation step engine for lead collection.

This module holds the server side of the conversation: it creates sessions,
validates each answer against the current step and advances the linear
sequence until every field has been collected.

Answer processing runs through a LangGraph state machine so that the
validate, advance, retry and fallback decisions stay in separate nodes.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from lead_config import ConversationStep, LeadFlowConfig
from lead_runtime import LeadRecord, SessionState, SessionStatus, SessionStore, leads_from_sessions

from .graph import create_step_graph
from .graph.state import create_initial_state
from .metrics import ACTIVE_SESSIONS, ANSWER_LATENCY, SESSIONS

if TYPE_CHECKING:
    from langgraph.graph.state import CompiledStateGraph  # type: ignore[import-not-found]

logger = logging.getLogger(__name__)


class EngineError(Exception):
    """Raised when an answer cannot be processed."""

    pass


class SessionCompletedError(EngineError):
    """Raised when an answer is sent to a session that already completed."""

    def __init__(self, session_id: str):
        super().__init__(f"Session '{session_id}' is already complete.")
        self.session_id = session_id


@dataclass
class StepOutcome:
    """Result of processing one answer.

    Attributes:
        agent_message: What the agent says next
        is_complete: Whether the session has collected every field
        validation_error: Client-facing error code (e.g. max_retries_email)
        should_auto_listen: Whether the client should listen after speaking
    """

    agent_message: str
    is_complete: bool
    validation_error: Optional[str] = None
    should_auto_listen: bool = False


class StepEngine:
    """Advances lead collection sessions through the configured steps."""

    def __init__(self, config: LeadFlowConfig, store: SessionStore):
        """Initialize the step engine.

        Args:
            config: Flow configuration with the ordered steps and retry policy
            store: Session store holding per-session state
        """
        self.config = config
        self.store = store
        self._graph: Optional["CompiledStateGraph"] = None
        self._session_locks: Dict[str, asyncio.Lock] = {}

    @property
    def graph(self) -> "CompiledStateGraph":
        """Get or create the answer processing graph.

        Returns:
            Compiled LangGraph state machine
        """
        if self._graph is None:
            self._graph = create_step_graph(self)
        return self._graph

    def start_session(self) -> tuple[SessionState, str]:
        """Create a session and return it with the first prompt.

        Returns:
            Tuple of (new session, first question)
        """
        state = SessionState()
        self.store.create(state)

        ACTIVE_SESSIONS.inc()
        SESSIONS.labels(status="started").inc()
        logger.info("Started session %s", state.session_id)

        return state, self.config.steps[0].prompt

    def current_step(self, state: SessionState) -> Optional[ConversationStep]:
        """Get the step the session is currently asking, or None when done."""
        return self.config.get_step(state.current_step)

    def completion_message(self, state: SessionState) -> str:
        """Render the closing message with the session's collected data."""
        values = {step.name: "" for step in self.config.steps}
        values.update(state.get_collected_data())
        return self.config.completion_message.format(**values)

    async def process_answer(self, state: SessionState, raw_answer: str) -> StepOutcome:
        """Validate an answer and advance the session.

        Args:
            state: Session being answered
            raw_answer: Transcript or typed text from the user

        Returns:
            StepOutcome with the next agent message

        Raises:
            SessionCompletedError: If the session already completed
            EngineError: If the answer could not be processed
        """
        if state.is_complete:
            raise SessionCompletedError(state.session_id)

        # One answer at a time per session; the graph mutates the stored state.
        lock = self._session_locks.setdefault(state.session_id, asyncio.Lock())
        async with lock:
            if state.is_complete:
                raise SessionCompletedError(state.session_id)

            start_time = time.perf_counter()
            try:
                graph_state = create_initial_state(state, raw_answer, self.current_step(state))
                result: dict[str, Any] = await self.graph.ainvoke(graph_state)

                updated: SessionState = result["session"]
                self.store.update(updated)
            except Exception as e:
                raise EngineError(f"Error processing answer: {str(e)}") from e
            finally:
                ANSWER_LATENCY.observe(time.perf_counter() - start_time)

            if updated.is_complete:
                self._session_locks.pop(updated.session_id, None)
                ACTIVE_SESSIONS.dec()
                SESSIONS.labels(status="completed").inc()
                logger.info(
                    "Session %s completed in %.1fs",
                    updated.session_id,
                    updated.get_duration_seconds(),
                )

        return StepOutcome(
            agent_message=result["response"],
            is_complete=updated.is_complete,
            validation_error=result["validation_error"],
            should_auto_listen=result["should_auto_listen"],
        )

    def list_leads(self, limit: Optional[int] = None) -> List[LeadRecord]:
        """List completed leads, most recent first.

        Args:
            limit: Optional limit on number of results

        Returns:
            Lead records built from completed sessions
        """
        states = self.store.list(status=SessionStatus.COMPLETED, limit=limit)
        return leads_from_sessions(states)
