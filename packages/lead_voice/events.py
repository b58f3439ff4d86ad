"""Events consumed and effects produced by the voice turn controller.

Events are what the host reports: speech recognition and synthesis
callbacks, timer expiry, network responses and user controls. Effects are
what the controller asks the host to do in return. Both are plain frozen
dataclasses so they can be compared in tests and logged.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Sequence, Union

from pydantic import BaseModel, Field


class TimerKind(str, Enum):
    """Timers the controller can arm."""

    SILENCE = "silence"
    START_LISTEN = "start_listen"
    RETRY_LISTEN = "retry_listen"
    RESTART_LISTEN = "restart_listen"


class ListenReason(str, Enum):
    """Why recognition is being started."""

    AUTO = "auto"
    AUTO_RETRY = "auto_retry"
    MANUAL = "manual"
    RESTART = "restart"


class MessageRole(str, Enum):
    """Role of the message sender."""

    AGENT = "agent"
    USER = "user"


class Message(BaseModel):
    """A single entry in the chat history shown to the user."""

    role: MessageRole = Field(..., description="Role of the message sender")
    text: str = Field(..., description="Content of the message")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), description="When the message was added"
    )


@dataclass(frozen=True)
class HostVoice:
    """A speech synthesis voice exposed by the host."""

    name: str
    lang: str
    voice_uri: Optional[str] = None


# Events


@dataclass(frozen=True)
class StartRequested:
    """The user asked to start a chat."""


@dataclass(frozen=True)
class SessionStarted:
    """The backend created a session."""

    session_id: str
    message: str


@dataclass(frozen=True)
class AgentReplied:
    """The backend answered a submitted message."""

    agent_message: str
    is_complete: bool
    validation_error: Optional[str] = None
    should_auto_listen: bool = False


@dataclass(frozen=True)
class NetworkFailed:
    """A request to the backend failed."""

    operation: str  # "start" or "message"


@dataclass(frozen=True)
class RecognitionResult:
    transcript: str


@dataclass(frozen=True)
class RecognitionError:
    error: str


@dataclass(frozen=True)
class RecognitionEnded:
    pass


@dataclass(frozen=True)
class RecognitionStartFailed:
    reason: ListenReason


@dataclass(frozen=True)
class SynthesisStarted:
    pass


@dataclass(frozen=True)
class SynthesisEnded:
    pass


@dataclass(frozen=True)
class SynthesisFailed:
    pass


@dataclass(frozen=True)
class TimerFired:
    kind: TimerKind


@dataclass(frozen=True)
class TextSubmitted:
    """The user typed an answer."""

    text: str


@dataclass(frozen=True)
class ToggleListening:
    pass


@dataclass(frozen=True)
class ToggleAudio:
    pass


@dataclass(frozen=True)
class StopSpeaking:
    pass


@dataclass(frozen=True)
class VoicesChanged:
    """The host's list of synthesis voices changed."""

    voices: Sequence[HostVoice] = field(default_factory=tuple)


Event = Union[
    StartRequested,
    SessionStarted,
    AgentReplied,
    NetworkFailed,
    RecognitionResult,
    RecognitionError,
    RecognitionEnded,
    RecognitionStartFailed,
    SynthesisStarted,
    SynthesisEnded,
    SynthesisFailed,
    TimerFired,
    TextSubmitted,
    ToggleListening,
    ToggleAudio,
    StopSpeaking,
    VoicesChanged,
]


# Effects


@dataclass(frozen=True)
class RequestStart:
    """Call the backend to create a session."""


@dataclass(frozen=True)
class SendMessage:
    """Call the backend with the user's answer."""

    session_id: str
    text: str


@dataclass(frozen=True)
class Speak:
    """Speak text with the agent's voice settings."""

    text: str
    voice: Optional[HostVoice]
    pitch: float
    rate: float


@dataclass(frozen=True)
class CancelSpeech:
    pass


@dataclass(frozen=True)
class StartRecognition:
    reason: ListenReason


@dataclass(frozen=True)
class StopRecognition:
    pass


@dataclass(frozen=True)
class StartTimer:
    kind: TimerKind
    delay: float


@dataclass(frozen=True)
class CancelTimer:
    kind: TimerKind


@dataclass(frozen=True)
class ShowError:
    """Show a message to the user, or clear it when message is None."""

    message: Optional[str]


Effect = Union[
    RequestStart,
    SendMessage,
    Speak,
    CancelSpeech,
    StartRecognition,
    StopRecognition,
    StartTimer,
    CancelTimer,
    ShowError,
]
