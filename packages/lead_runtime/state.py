"""State models for the lead collection runtime.

This module defines the per-session state mutated by the step engine:
the current step, the collected field values with their retry counts,
and the completion status. It also defines the lead record built from
a completed session.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Set
from uuid import uuid4

from pydantic import BaseModel, Field


class SessionStatus(str, Enum):
    """Status of a lead collection session."""

    ACTIVE = "active"
    COMPLETED = "completed"


class FieldValue(BaseModel):
    """A collected field value with validation status."""

    field_name: str = Field(..., description="Name of the field")
    value: Optional[str] = Field(default=None, description="Collected value")
    is_valid: bool = Field(default=False, description="Whether the value passed validation")
    attempts: int = Field(default=0, description="Number of failed collection attempts")
    last_attempt_timestamp: Optional[datetime] = Field(
        default=None, description="Timestamp of last collection attempt"
    )


class SessionState(BaseModel):
    """Complete state of a lead collection session."""

    session_id: str = Field(
        default_factory=lambda: str(uuid4()), description="Unique session identifier"
    )
    status: SessionStatus = Field(
        default=SessionStatus.ACTIVE, description="Current session status"
    )
    current_step: int = Field(default=0, ge=0, description="Index of the step being asked")

    # Field collection progress
    collected_fields: Dict[str, FieldValue] = Field(
        default_factory=dict, description="Fields collected so far"
    )
    manual_fallback_fields: Set[str] = Field(
        default_factory=set,
        description="Fields for which the client was already switched to typed input",
    )

    # Timestamps
    started_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the session started",
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), description="Last update timestamp"
    )
    ended_at: Optional[datetime] = Field(default=None, description="When the session completed")

    @property
    def is_complete(self) -> bool:
        """Whether the session reached the end of the sequence."""
        return self.status == SessionStatus.COMPLETED

    def _field(self, field_name: str) -> FieldValue:
        if field_name not in self.collected_fields:
            self.collected_fields[field_name] = FieldValue(field_name=field_name)
        return self.collected_fields[field_name]

    def record_answer(self, field_name: str, value: str) -> FieldValue:
        """Store a valid answer and advance to the next step.

        Args:
            field_name: Name of the field being answered
            value: Normalized, validated value

        Returns:
            The updated FieldValue object
        """
        field_value = self._field(field_name)
        field_value.value = value
        field_value.is_valid = True
        field_value.last_attempt_timestamp = datetime.now(timezone.utc)

        self.current_step += 1
        self.updated_at = datetime.now(timezone.utc)
        return field_value

    def record_failure(self, field_name: str) -> FieldValue:
        """Count a failed answer for a field without advancing.

        Args:
            field_name: Name of the field being answered

        Returns:
            The updated FieldValue object
        """
        field_value = self._field(field_name)
        field_value.attempts += 1
        field_value.last_attempt_timestamp = datetime.now(timezone.utc)

        self.updated_at = datetime.now(timezone.utc)
        return field_value

    def get_retry_count(self, field_name: str) -> int:
        """Get the number of failed answers for a field."""
        field_value = self.collected_fields.get(field_name)
        return field_value.attempts if field_value else 0

    def get_collected_data(self) -> Dict[str, str]:
        """Get all successfully collected field values.

        Returns:
            Dictionary mapping field names to their collected values
        """
        return {
            name: field.value
            for name, field in self.collected_fields.items()
            if field.is_valid and field.value is not None
        }

    def mark_completed(self) -> None:
        """Mark the session as successfully completed."""
        self.status = SessionStatus.COMPLETED
        self.ended_at = datetime.now(timezone.utc)
        self.updated_at = datetime.now(timezone.utc)

    def get_duration_seconds(self) -> float:
        """Get the duration of the session in seconds.

        Returns:
            Duration in seconds, or time since start if not ended
        """
        end_time = self.ended_at or datetime.now(timezone.utc)
        return (end_time - self.started_at).total_seconds()


class LeadRecord(BaseModel):
    """A completed lead, as returned by the leads listing."""

    session_id: str = Field(..., description="Session that collected the lead")
    name: Optional[str] = Field(default=None, description="Lead name")
    email: Optional[str] = Field(default=None, description="Lead email address")
    phone: Optional[str] = Field(default=None, description="Lead phone number")
    interest: Optional[str] = Field(default=None, description="What the lead is interested in")
    extra_fields: Dict[str, str] = Field(
        default_factory=dict, description="Collected fields outside the standard four"
    )
    completed_at: Optional[datetime] = Field(default=None, description="When the lead completed")

    @classmethod
    def from_session(cls, state: SessionState) -> "LeadRecord":
        """Build a lead record from a session's collected data."""
        data = state.get_collected_data()
        standard = ("name", "email", "phone", "interest")
        return cls(
            session_id=state.session_id,
            name=data.get("name"),
            email=data.get("email"),
            phone=data.get("phone"),
            interest=data.get("interest"),
            extra_fields={k: v for k, v in data.items() if k not in standard},
            completed_at=state.ended_at,
        )


def leads_from_sessions(states: List[SessionState]) -> List[LeadRecord]:
    """Build lead records for the completed sessions in a list."""
    return [LeadRecord.from_session(s) for s in states if s.is_complete]
