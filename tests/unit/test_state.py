"""Tests for session state models."""

from datetime import datetime, timezone

from lead_runtime import (
    FieldValue,
    LeadRecord,
    SessionState,
    SessionStatus,
    leads_from_sessions,
)


class TestFieldValue:
    """Tests for FieldValue model."""

    def test_defaults(self):
        """Test a new field has no value and no attempts."""
        field = FieldValue(field_name="email")

        assert field.value is None
        assert field.is_valid is False
        assert field.attempts == 0
        assert field.last_attempt_timestamp is None


class TestSessionState:
    """Tests for SessionState model."""

    def test_create_default_state(self):
        """Test creating a state with defaults."""
        state = SessionState()

        assert state.session_id
        assert state.status == SessionStatus.ACTIVE
        assert state.current_step == 0
        assert state.collected_fields == {}
        assert state.manual_fallback_fields == set()
        assert state.ended_at is None
        assert state.is_complete is False

    def test_session_ids_are_unique(self):
        """Test each state gets its own session ID."""
        assert SessionState().session_id != SessionState().session_id

    def test_record_answer_advances_step(self):
        """Test a valid answer is stored and the step advances by one."""
        state = SessionState()

        field = state.record_answer("name", "John")

        assert state.current_step == 1
        assert field.value == "John"
        assert field.is_valid is True
        assert field.last_attempt_timestamp is not None

    def test_record_failure_keeps_step(self):
        """Test a failed answer increments the retry count only."""
        state = SessionState()

        state.record_failure("name")
        field = state.record_failure("name")

        assert state.current_step == 0
        assert field.attempts == 2
        assert field.is_valid is False
        assert state.get_retry_count("name") == 2

    def test_retry_count_unknown_field(self):
        """Test retry count is zero for fields never attempted."""
        assert SessionState().get_retry_count("phone") == 0

    def test_answer_after_failures_keeps_attempts(self):
        """Test a valid answer does not reset the retry count."""
        state = SessionState()
        state.record_failure("email")

        state.record_answer("email", "john@example.com")

        assert state.get_retry_count("email") == 1
        assert state.current_step == 1

    def test_get_collected_data_only_valid(self):
        """Test only valid values are reported as collected."""
        state = SessionState()
        state.record_answer("name", "John")
        state.record_failure("email")

        assert state.get_collected_data() == {"name": "John"}

    def test_mark_completed(self):
        """Test completion sets the status and end time."""
        state = SessionState()

        state.mark_completed()

        assert state.is_complete is True
        assert state.status == SessionStatus.COMPLETED
        assert state.ended_at is not None

    def test_duration(self):
        """Test duration is measured from start to end."""
        state = SessionState(started_at=datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc))
        state.ended_at = datetime(2024, 1, 1, 12, 1, 30, tzinfo=timezone.utc)

        assert state.get_duration_seconds() == 90.0


class TestLeadRecord:
    """Tests for LeadRecord and leads_from_sessions."""

    def _completed_session(self) -> SessionState:
        state = SessionState()
        state.record_answer("name", "John")
        state.record_answer("email", "john@example.com")
        state.record_answer("phone", "555-123-4567")
        state.record_answer("interest", "Solar panels")
        state.mark_completed()
        return state

    def test_from_session(self):
        """Test building a lead from a completed session."""
        state = self._completed_session()

        lead = LeadRecord.from_session(state)

        assert lead.session_id == state.session_id
        assert lead.name == "John"
        assert lead.email == "john@example.com"
        assert lead.phone == "555-123-4567"
        assert lead.interest == "Solar panels"
        assert lead.extra_fields == {}
        assert lead.completed_at == state.ended_at

    def test_extra_fields(self):
        """Test non-standard fields are kept separately."""
        state = SessionState()
        state.record_answer("name", "Ana")
        state.record_answer("company", "Acme")

        lead = LeadRecord.from_session(state)

        assert lead.name == "Ana"
        assert lead.extra_fields == {"company": "Acme"}

    def test_leads_from_sessions_skips_active(self):
        """Test only completed sessions become leads."""
        completed = self._completed_session()
        active = SessionState()

        leads = leads_from_sessions([active, completed])

        assert [lead.session_id for lead in leads] == [completed.session_id]
