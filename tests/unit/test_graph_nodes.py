"""Tests for graph node functions."""

import pytest

from lead_config import LeadFlowConfig
from lead_core import StepEngine
from lead_core.graph.nodes import (
    complete_node,
    manual_fallback_node,
    prompt_next_node,
    record_answer_node,
    record_failure_node,
    reprompt_node,
    validate_answer_node,
)
from lead_core.graph.state import create_initial_state
from lead_runtime import SessionState, SessionStore


@pytest.fixture
def engine():
    """Create a step engine with the default flow."""
    return StepEngine(LeadFlowConfig(), SessionStore())


@pytest.fixture
def session():
    """Create a fresh session."""
    return SessionState()


class TestCreateInitialState:
    """Tests for create_initial_state."""

    def test_initial_state_fields(self, engine, session):
        """Test the initial state carries only the per-answer fields."""
        state = create_initial_state(session, "John", engine.current_step(session))

        assert set(state) == {
            "session",
            "user_message",
            "step",
            "extracted_value",
            "is_valid",
            "response",
            "validation_error",
            "should_auto_listen",
        }
        assert state["step"].name == "name"
        assert state["is_valid"] is False


def _email_state(engine, session, message):
    session.current_step = 1
    return create_initial_state(session, message, engine.current_step(session))


class TestValidateAnswerNode:
    """Tests for validate_answer_node."""

    @pytest.mark.asyncio
    async def test_valid_email(self, engine, session):
        """Test a spoken email is normalized and accepted."""
        state = _email_state(engine, session, "john at example dot com")

        result = await validate_answer_node(state, engine)

        assert result["is_valid"] is True
        assert result["extracted_value"] == "john@example.com"

    @pytest.mark.asyncio
    async def test_invalid_email(self, engine, session):
        """Test a malformed email is rejected."""
        state = _email_state(engine, session, "not-an-email")

        result = await validate_answer_node(state, engine)

        assert result["is_valid"] is False
        assert result["extracted_value"] is None

    @pytest.mark.asyncio
    async def test_no_step(self, engine, session):
        """Test answers are invalid when no step is being asked."""
        state = create_initial_state(session, "John", None)

        result = await validate_answer_node(state, engine)

        assert result["is_valid"] is False


class TestRecordNodes:
    """Tests for record_answer_node and record_failure_node."""

    @pytest.mark.asyncio
    async def test_record_answer(self, engine, session):
        """Test the value is stored and the step advances."""
        state = create_initial_state(session, "John", engine.current_step(session))
        state["extracted_value"] = "John"
        state["is_valid"] = True

        result = await record_answer_node(state, engine)

        assert result["session"].current_step == 1
        assert result["session"].get_collected_data() == {"name": "John"}

    @pytest.mark.asyncio
    async def test_record_failure(self, engine, session):
        """Test the retry count increments without advancing."""
        state = _email_state(engine, session, "nope")

        result = await record_failure_node(state, engine)

        assert result["session"].current_step == 1
        assert result["session"].get_retry_count("email") == 1


class TestPromptNodes:
    """Tests for prompt_next_node and reprompt_node."""

    @pytest.mark.asyncio
    async def test_prompt_next(self, engine, session):
        """Test the next question is asked with auto-listen."""
        session.current_step = 1
        state = create_initial_state(session, "John", engine.config.get_step(0))

        result = await prompt_next_node(state, engine)

        assert result["response"] == "What is your email?"
        assert result["should_auto_listen"] is True
        assert result["validation_error"] is None

    @pytest.mark.asyncio
    async def test_reprompt(self, engine, session):
        """Test the same question is asked again without an error code."""
        state = _email_state(engine, session, "nope")

        result = await reprompt_node(state, engine)

        assert result["response"] == (
            "That doesn't look like a valid email address. What is your email?"
        )
        assert result["should_auto_listen"] is True
        assert result["validation_error"] is None

    @pytest.mark.asyncio
    async def test_reprompt_after_manual_fallback(self, engine, session):
        """Test fields in typed-input mode are re-asked without listening."""
        session.manual_fallback_fields.add("email")
        state = _email_state(engine, session, "nope")

        result = await reprompt_node(state, engine)

        assert result["should_auto_listen"] is False
        assert result["validation_error"] is None


class TestManualFallbackNode:
    """Tests for manual_fallback_node."""

    @pytest.mark.asyncio
    async def test_manual_fallback(self, engine, session):
        """Test the max-retries code and typed-input message."""
        state = _email_state(engine, session, "nope")

        result = await manual_fallback_node(state, engine)

        assert result["validation_error"] == "max_retries_email"
        assert result["response"] == (
            "I'm having trouble understanding your email address. Please type it instead."
        )
        assert result["should_auto_listen"] is False
        assert "email" in result["session"].manual_fallback_fields


class TestCompleteNode:
    """Tests for complete_node."""

    @pytest.mark.asyncio
    async def test_complete(self, engine, session):
        """Test the session is completed with a personalized message."""
        session.record_answer("name", "John")
        state = create_initial_state(session, "Solar", engine.config.get_step(3))

        result = await complete_node(state, engine)

        assert result["session"].is_complete is True
        assert result["response"] == (
            "Thank you, John! We have all your details and will be in touch soon."
        )
        assert result["should_auto_listen"] is False
