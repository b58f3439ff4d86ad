"""Voice Lead Collection - Voice Turn Controller Package."""

from .client import ClientError, LeadChatClient
from .controller import TurnController, TurnState
from .events import HostVoice, ListenReason, Message, MessageRole, TimerKind
from .runner import RecognitionStartError, SpeechHost, VoiceSessionRunner
from .voices import select_voice

__version__ = "0.1.0"

__all__ = [
    "ClientError",
    "HostVoice",
    "LeadChatClient",
    "ListenReason",
    "Message",
    "MessageRole",
    "RecognitionStartError",
    "SpeechHost",
    "TimerKind",
    "TurnController",
    "TurnState",
    "VoiceSessionRunner",
    "select_voice",
]
