"""Pydantic models for API request/response schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class StartChatResponse(BaseModel):
    """Response model for starting a chat session."""

    session_id: str = Field(..., description="The new session ID")
    message: str = Field(..., description="The first question")


class ChatMessageRequest(BaseModel):
    """Request model for answering the current question."""

    session_id: str = Field(..., min_length=1, description="The session ID")
    message: str = Field(..., description="The user's answer (transcript or typed text)")


class ChatMessageResponse(BaseModel):
    """Response model for an answer exchange."""

    agent_message: str = Field(..., description="What the agent says next")
    is_complete: bool = Field(..., description="Whether every field has been collected")
    validation_error: Optional[str] = Field(
        default=None, description="Error code such as max_retries_email"
    )
    should_auto_listen: bool = Field(
        default=False, description="Whether the client should listen after speaking"
    )


class SessionResponse(BaseModel):
    """Response model for session state."""

    session_id: str = Field(..., description="The session ID")
    status: str = Field(..., description="Current session status")
    current_step: int = Field(..., description="Index of the step being asked")
    current_field: Optional[str] = Field(None, description="Field being asked, if any")
    collected_data: dict[str, str] = Field(
        default_factory=dict, description="Data collected so far"
    )
    retry_counts: dict[str, int] = Field(
        default_factory=dict, description="Failed answers per field"
    )
    started_at: datetime = Field(..., description="When the session started")
    updated_at: datetime = Field(..., description="Last update time")


class ErrorResponse(BaseModel):
    """Response model for errors."""

    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Additional error details")
