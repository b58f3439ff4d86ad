"""Configuration schemas for the voice lead collection flow.

This module defines Pydantic models for the conversation flow: the ordered
question steps, the retry policy, the agent voice catalog and the turn
timings used by the voice controller.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class FieldType(str, Enum):
    """Validation type of a collected field."""

    TEXT = "text"
    EMAIL = "email"
    PHONE = "phone"


class Gender(str, Enum):
    """Declared gender of an agent voice."""

    FEMALE = "female"
    MALE = "male"


class ConversationStep(BaseModel):
    """A single question in the static conversation sequence."""

    name: str = Field(
        ...,
        description="Name of the field collected by this step",
    )
    field_type: FieldType = Field(
        default=FieldType.TEXT,
        description="Validation type applied to the answer",
    )
    prompt: str = Field(
        ...,
        description="Question asked to the user",
    )
    label: Optional[str] = Field(
        default=None,
        description="Human-readable name used in re-prompts (defaults to the field name)",
    )
    invalid_prompt: Optional[str] = Field(
        default=None,
        description="Re-prompt used after a failed validation",
    )

    model_config = {"frozen": True}

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate field name is not empty and alphanumeric."""
        if not v or not v.strip():
            raise ValueError("Step name cannot be empty")

        name = v.strip()
        if not name.replace("_", "").isalnum():
            raise ValueError("Step name must contain only alphanumeric characters and underscores")

        return name

    @field_validator("prompt")
    @classmethod
    def validate_prompt(cls, v: str) -> str:
        """Validate prompt is not empty."""
        if not v or not v.strip():
            raise ValueError("Step prompt cannot be empty")
        return v.strip()

    @property
    def display_label(self) -> str:
        """Label used when talking about this field."""
        return self.label or self.name.replace("_", " ")

    def retry_prompt(self) -> str:
        """Prompt used to re-ask this step after an invalid answer."""
        if self.invalid_prompt:
            return self.invalid_prompt
        return f"That doesn't look like a valid {self.display_label}. {self.prompt}"


class AgentVoiceProfile(BaseModel):
    """Voice and persona of a virtual assistant."""

    name: str = Field(..., description="Display name of the agent")
    gender: Gender = Field(..., description="Declared gender used to pick a host voice")
    pitch: float = Field(default=1.0, gt=0.0, le=2.0, description="Speech pitch")
    rate: float = Field(default=1.0, gt=0.0, le=10.0, description="Speech rate")
    voice_index: int = Field(
        default=0, ge=0, description="Preferred index into the matching host voices"
    )

    model_config = {"frozen": True}


class TurnTimings(BaseModel):
    """Timer durations, in seconds, used by the voice turn controller."""

    silence_timeout: float = Field(
        default=9.0, gt=0.0, description="Listening is cancelled after this much silence"
    )
    retry_delay: float = Field(
        default=1.0, ge=0.0, description="Delay before the automatic listening retry"
    )
    auto_listen_delay: float = Field(
        default=0.7, ge=0.0, description="Delay between the end of speech and listening"
    )
    muted_listen_delay: float = Field(
        default=0.6, ge=0.0, description="Delay before listening when agent audio is muted"
    )
    restart_delay: float = Field(
        default=0.6, ge=0.0, description="Delay before restarting a recognizer that failed to start"
    )


def default_steps() -> List[ConversationStep]:
    """Build the default name/email/phone/interest sequence."""
    return [
        ConversationStep(name="name", field_type=FieldType.TEXT, prompt="What is your name?"),
        ConversationStep(
            name="email",
            field_type=FieldType.EMAIL,
            prompt="What is your email?",
            label="email address",
        ),
        ConversationStep(
            name="phone",
            field_type=FieldType.PHONE,
            prompt="What is your phone number?",
            label="phone number",
        ),
        ConversationStep(
            name="interest", field_type=FieldType.TEXT, prompt="What are you interested in?"
        ),
    ]


def default_agents() -> List[AgentVoiceProfile]:
    """Build the default agent voice catalog."""
    return [
        AgentVoiceProfile(name="Sarah", gender=Gender.FEMALE, voice_index=0, pitch=1.2, rate=0.95),
        AgentVoiceProfile(name="Emma", gender=Gender.FEMALE, voice_index=1, pitch=1.1, rate=1.0),
        AgentVoiceProfile(name="Lisa", gender=Gender.FEMALE, voice_index=2, pitch=1.15, rate=0.9),
        AgentVoiceProfile(name="David", gender=Gender.MALE, voice_index=3, pitch=0.85, rate=0.95),
        AgentVoiceProfile(name="James", gender=Gender.MALE, voice_index=4, pitch=0.9, rate=1.0),
        AgentVoiceProfile(name="Alex", gender=Gender.MALE, voice_index=5, pitch=0.8, rate=0.9),
    ]


class LeadFlowConfig(BaseModel):
    """Complete lead collection flow configuration."""

    steps: List[ConversationStep] = Field(
        default_factory=default_steps,
        description="Ordered questions asked to the user",
    )
    max_retries: int = Field(
        default=2,
        ge=0,
        description="Failed answers tolerated per field before falling back to typed input",
    )
    completion_message: str = Field(
        default="Thank you, {name}! We have all your details and will be in touch soon.",
        description="Closing message; may reference collected fields by name",
    )
    manual_fallback_message: str = Field(
        default="I'm having trouble understanding your {label}. Please type it instead.",
        description="Message sent when switching the user to typed input",
    )
    agents: List[AgentVoiceProfile] = Field(
        default_factory=default_agents,
        description="Catalog of selectable agent voices",
    )
    turn: TurnTimings = Field(
        default_factory=TurnTimings,
        description="Voice turn controller timings",
    )

    @field_validator("steps")
    @classmethod
    def validate_steps(cls, v: List[ConversationStep]) -> List[ConversationStep]:
        """Validate at least one step is configured and names are unique."""
        if not v:
            raise ValueError("At least one step must be configured")

        names = [step.name for step in v]
        if len(names) != len(set(names)):
            raise ValueError("Step names must be unique")

        return v

    @field_validator("agents")
    @classmethod
    def validate_agents(cls, v: List[AgentVoiceProfile]) -> List[AgentVoiceProfile]:
        """Validate the agent catalog is not empty and names are unique."""
        if not v:
            raise ValueError("At least one agent must be configured")

        names = [agent.name for agent in v]
        if len(names) != len(set(names)):
            raise ValueError("Agent names must be unique")

        return v

    @field_validator("manual_fallback_message")
    @classmethod
    def validate_manual_fallback_message(cls, v: str) -> str:
        """Validate the fallback message only uses the {label} placeholder."""
        try:
            v.format(label="")
        except (KeyError, IndexError) as e:
            raise ValueError(f"Manual fallback message may only reference {{label}}: {e}") from e
        return v

    @model_validator(mode="after")
    def validate_completion_message(self) -> "LeadFlowConfig":
        """Validate the completion message only references configured fields."""
        names = {step.name: "" for step in self.steps}
        try:
            self.completion_message.format(**names)
        except (KeyError, IndexError) as e:
            raise ValueError(f"Completion message references unknown field: {e}") from e
        return self

    @property
    def step_count(self) -> int:
        """Number of steps in the sequence."""
        return len(self.steps)

    def get_step(self, index: int) -> Optional[ConversationStep]:
        """Get a step by position.

        Args:
            index: Zero-based position in the sequence

        Returns:
            ConversationStep if index is in range, None otherwise
        """
        if 0 <= index < len(self.steps):
            return self.steps[index]
        return None

    def get_agent_by_name(self, name: str) -> Optional[AgentVoiceProfile]:
        """Get an agent profile by name (case-insensitive).

        Args:
            name: Agent name to search for

        Returns:
            AgentVoiceProfile if found, None otherwise
        """
        for agent in self.agents:
            if agent.name.lower() == name.lower():
                return agent
        return None
