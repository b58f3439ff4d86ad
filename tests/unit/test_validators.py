"""Tests for answer validators."""

import pytest

from lead_config import ConversationStep, FieldType
from lead_core.validators import (
    normalize_spoken_email,
    validate_answer,
    validate_email,
    validate_phone,
    validate_text,
)


class TestValidateText:
    """Tests for free-text validation."""

    def test_accepts_text(self):
        """Test ordinary text is accepted and trimmed."""
        assert validate_text("  John   Smith ") == "John Smith"

    def test_strips_trailing_punctuation(self):
        """Test recognizer punctuation is removed."""
        assert validate_text("John.") == "John"

    @pytest.mark.parametrize("raw", ["", "   ", "...", "\n\t"])
    def test_rejects_empty(self, raw):
        """Test blank answers are rejected."""
        assert validate_text(raw) is None


class TestValidateEmail:
    """Tests for email validation."""

    def test_accepts_written_email(self):
        """Test a typed address is accepted and lower-cased."""
        assert validate_email("John@Example.com") == "john@example.com"

    def test_accepts_spoken_email(self):
        """Test a spoken address is normalized."""
        assert validate_email("john at example dot com") == "john@example.com"

    @pytest.mark.parametrize("raw", ["not-an-email", "john@", "john@example", "@example.com", ""])
    def test_rejects_invalid(self, raw):
        """Test malformed addresses are rejected."""
        assert validate_email(raw) is None


class TestNormalizeSpokenEmail:
    """Tests for spoken email normalization."""

    def test_at_the_rate(self):
        """Test the "at the rate" phrasing."""
        assert normalize_spoken_email("jane at the rate mail dot co dot uk") == "jane@mail.co.uk"

    def test_keeps_existing_at_sign(self):
        """Test a literal at sign is not rewritten."""
        assert normalize_spoken_email("pat@example dot org") == "pat@example.org"

    def test_removes_spaces_and_trailing_period(self):
        """Test spaces and a closing period are dropped."""
        assert normalize_spoken_email("John Smith@Example.com.") == "johnsmith@example.com"


class TestValidatePhone:
    """Tests for phone validation."""

    @pytest.mark.parametrize(
        "raw", ["555-123-4567", "(555) 123 4567", "+1 555 123 4567", "5551234"]
    )
    def test_accepts_valid(self, raw):
        """Test common phone formats are accepted."""
        assert validate_phone(raw) == raw

    @pytest.mark.parametrize("raw", ["123456", "1234567890123456", "call me maybe", "555-CALL", ""])
    def test_rejects_invalid(self, raw):
        """Test too short, too long and non-numeric answers are rejected."""
        assert validate_phone(raw) is None


class TestValidateAnswer:
    """Tests for dispatching on the step field type."""

    def test_dispatches_by_field_type(self):
        """Test the step's field type selects the validator."""
        email_step = ConversationStep(name="email", field_type=FieldType.EMAIL, prompt="Email?")
        text_step = ConversationStep(name="interest", prompt="Interest?")

        assert validate_answer(email_step, "not-an-email") is None
        assert validate_answer(text_step, "not-an-email") == "not-an-email"
