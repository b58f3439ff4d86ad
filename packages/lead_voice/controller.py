"""Voice turn controller for the lead collection chat.

The controller coordinates one conversation turn at a time: speak the
agent's message, listen for the answer, submit it and speak the reply.
It owns no I/O. Every host callback, timer and network response is fed
to ``dispatch`` as an event, and the returned effects tell the host what
to do next. This keeps the whole turn-taking policy in one place and
makes it testable without a browser.

Policy summary:

- Recognition starts only when a session exists, it is not complete,
  manual input is off, nothing is already listening and the agent is
  neither speaking nor waiting for the host to start a requested
  utterance.
- Silence and "no-speech" errors get one automatic retry per question,
  then the user is asked to click Speak.
- A ``max_retries_*`` validation error from the backend switches to typed
  input until the user submits.
- The silence watchdog is cancelled by every competing transition.
"""

import logging
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence

from lead_config import AgentVoiceProfile, TurnTimings

from .events import (
    AgentReplied,
    CancelSpeech,
    CancelTimer,
    Effect,
    Event,
    HostVoice,
    ListenReason,
    Message,
    MessageRole,
    NetworkFailed,
    RecognitionEnded,
    RecognitionError,
    RecognitionResult,
    RecognitionStartFailed,
    RequestStart,
    SendMessage,
    SessionStarted,
    ShowError,
    Speak,
    StartRecognition,
    StartRequested,
    StartTimer,
    StopRecognition,
    StopSpeaking,
    SynthesisEnded,
    SynthesisFailed,
    SynthesisStarted,
    TextSubmitted,
    TimerFired,
    TimerKind,
    ToggleAudio,
    ToggleListening,
    VoicesChanged,
)
from .voices import select_voice

logger = logging.getLogger(__name__)

GREETING_TEMPLATE = "Hello! I'm {agent}, your virtual assistant. {message}"

NO_SPEECH_RETRY = "I didn't hear anything. Please answer the question. I'll listen again..."
NO_SPEECH_GIVE_UP = "I didn't hear anything. Please click Speak to answer."
SILENCE_RETRY = "I didn't hear you. I'll listen again..."
SILENCE_GIVE_UP = "I didn't hear you. Please click Speak to answer."
EMPTY_TRANSCRIPT = "I didn't hear anything. Please answer again."
START_FAILED = "Failed to connect to backend. Make sure the server is running."
SEND_FAILED = "Failed to send message"

MAX_RETRIES_PREFIX = "max_retries_"

# Timers that would start recognition; cancelled whenever the agent speaks.
_LISTEN_TIMERS = (TimerKind.START_LISTEN, TimerKind.RETRY_LISTEN, TimerKind.RESTART_LISTEN)


class TurnState(str, Enum):
    """Observable state of the turn controller."""

    IDLE = "idle"
    SPEAKING = "speaking"
    LISTENING = "listening"
    SUBMITTING = "submitting"
    COMPLETE = "complete"


class TurnController:
    """State machine coordinating speech recognition, synthesis and submission."""

    def __init__(self, profile: AgentVoiceProfile, timings: Optional[TurnTimings] = None):
        """Initialize the controller.

        Args:
            profile: Agent voice selected for this chat; fixed for its lifetime
            timings: Timer durations (defaults to the canonical values)
        """
        self.profile = profile
        self.timings = timings or TurnTimings()

        self.session_id: Optional[str] = None
        self.messages: List[Message] = []
        self.error: Optional[str] = None
        self.voices: List[HostVoice] = []

        self.listening = False
        self.speaking = False
        self.submitting = False
        self.complete = False
        self.manual_input = False
        self.audio_enabled = True

        self._auto_retry_used = False
        self._listen_after_speech = False
        # A Speak effect was issued and the host has not reported its outcome yet.
        self._speech_pending = False

        self._handlers: Dict[type, Callable[..., List[Effect]]] = {
            StartRequested: self._on_start_requested,
            SessionStarted: self._on_session_started,
            AgentReplied: self._on_agent_replied,
            NetworkFailed: self._on_network_failed,
            RecognitionResult: self._on_recognition_result,
            RecognitionError: self._on_recognition_error,
            RecognitionEnded: self._on_recognition_ended,
            RecognitionStartFailed: self._on_recognition_start_failed,
            SynthesisStarted: self._on_synthesis_started,
            SynthesisEnded: self._on_synthesis_ended,
            SynthesisFailed: self._on_synthesis_failed,
            TimerFired: self._on_timer_fired,
            TextSubmitted: self._on_text_submitted,
            ToggleListening: self._on_toggle_listening,
            ToggleAudio: self._on_toggle_audio,
            StopSpeaking: self._on_stop_speaking,
            VoicesChanged: self._on_voices_changed,
        }

    @property
    def state(self) -> TurnState:
        """Current observable state."""
        if self.complete and not (self.speaking or self._speech_pending):
            return TurnState.COMPLETE
        if self.speaking or self._speech_pending:
            return TurnState.SPEAKING
        if self.listening:
            return TurnState.LISTENING
        if self.submitting:
            return TurnState.SUBMITTING
        return TurnState.IDLE

    def dispatch(self, event: Event) -> List[Effect]:
        """Apply an event and return the effects the host must perform.

        Args:
            event: Event reported by the host

        Returns:
            Effects in the order they must be executed

        Raises:
            TypeError: If the event type is unknown
        """
        handler = self._handlers.get(type(event))
        if handler is None:
            raise TypeError(f"Unsupported event: {event!r}")

        before = self.state
        effects = handler(event)
        after = self.state
        if before != after:
            logger.debug("%s: %s -> %s", type(event).__name__, before.value, after.value)
        return effects

    # Helpers

    def _show_error(self, message: Optional[str]) -> List[Effect]:
        self.error = message
        return [ShowError(message)]

    def _stop_recognition(self) -> List[Effect]:
        effects: List[Effect] = [CancelTimer(TimerKind.SILENCE)]
        if self.listening:
            effects.append(StopRecognition())
        self.listening = False
        return effects

    def _can_listen(self) -> bool:
        return (
            self.session_id is not None
            and not self.complete
            and not self.manual_input
            and not self.speaking
            and not self._speech_pending
            and not self.listening
        )

    def _start_recognition(self, reason: ListenReason) -> List[Effect]:
        if not self._can_listen():
            return []

        self.listening = True
        effects = self._show_error(None)
        effects.append(StartRecognition(reason))
        effects.append(StartTimer(TimerKind.SILENCE, self.timings.silence_timeout))
        return effects

    def _retry_once(self, retry_message: str, give_up_message: str) -> List[Effect]:
        if self._auto_retry_used:
            return self._show_error(give_up_message)

        self._auto_retry_used = True
        effects = self._show_error(retry_message)
        effects.append(StartTimer(TimerKind.RETRY_LISTEN, self.timings.retry_delay))
        return effects

    def _speak(self, text: str, listen_after: bool) -> List[Effect]:
        effects = self._stop_recognition()
        effects.extend(CancelTimer(kind) for kind in _LISTEN_TIMERS)
        effects.append(CancelSpeech())
        effects.append(
            Speak(
                text=text,
                voice=select_voice(self.profile, self.voices),
                pitch=self.profile.pitch,
                rate=self.profile.rate,
            )
        )
        self._listen_after_speech = listen_after
        self._speech_pending = True
        return effects

    def _listen_later(self) -> List[Effect]:
        return [StartTimer(TimerKind.START_LISTEN, self.timings.muted_listen_delay)]

    def _submit(self, text: str) -> List[Effect]:
        if self.session_id is None or self.complete:
            return []

        self.messages.append(Message(role=MessageRole.USER, text=text))
        self.submitting = True
        return [SendMessage(session_id=self.session_id, text=text)]

    # Network

    def _on_start_requested(self, event: StartRequested) -> List[Effect]:
        effects = self._show_error(None)
        effects.append(RequestStart())
        return effects

    def _on_session_started(self, event: SessionStarted) -> List[Effect]:
        self.session_id = event.session_id
        greeting = GREETING_TEMPLATE.format(agent=self.profile.name, message=event.message)
        self.messages = [Message(role=MessageRole.AGENT, text=greeting)]
        self._auto_retry_used = False

        logger.info("Chat started with %s (session %s)", self.profile.name, event.session_id)
        if self.audio_enabled:
            return self._speak(greeting, listen_after=True)
        return self._listen_later()

    def _on_agent_replied(self, event: AgentReplied) -> List[Effect]:
        self.submitting = False
        self.messages.append(Message(role=MessageRole.AGENT, text=event.agent_message))
        self._auto_retry_used = False

        if event.is_complete:
            self.complete = True
            self.manual_input = False
            logger.info("Chat complete (session %s)", self.session_id)
            if self.audio_enabled:
                return self._speak(event.agent_message, listen_after=False)
            return self._stop_recognition()

        if event.validation_error and event.validation_error.startswith(MAX_RETRIES_PREFIX):
            self.manual_input = True
            logger.info("Switching to typed input: %s", event.validation_error)
            effects = self._stop_recognition()
            if self.audio_enabled:
                effects.extend(self._speak(event.agent_message, listen_after=False))
            return effects

        self.manual_input = False
        if self.audio_enabled:
            return self._speak(event.agent_message, listen_after=event.should_auto_listen)
        if event.should_auto_listen:
            return self._listen_later()
        return []

    def _on_network_failed(self, event: NetworkFailed) -> List[Effect]:
        self.submitting = False
        logger.warning("Backend request failed: %s", event.operation)
        if event.operation == "start":
            return self._show_error(START_FAILED)
        return self._show_error(SEND_FAILED)

    # Recognition

    def _on_recognition_result(self, event: RecognitionResult) -> List[Effect]:
        effects: List[Effect] = [CancelTimer(TimerKind.SILENCE)]
        self._auto_retry_used = False

        transcript = (event.transcript or "").strip()
        if not transcript:
            effects.extend(self._show_error(EMPTY_TRANSCRIPT))
            effects.extend(self._stop_recognition())
            return effects

        effects.extend(self._show_error(None))
        effects.extend(self._stop_recognition())
        effects.extend(self._submit(transcript))
        return effects

    def _on_recognition_error(self, event: RecognitionError) -> List[Effect]:
        effects: List[Effect] = [CancelTimer(TimerKind.SILENCE)]

        if event.error == "no-speech":
            effects.extend(self._stop_recognition())
            effects.extend(self._retry_once(NO_SPEECH_RETRY, NO_SPEECH_GIVE_UP))
            return effects

        # "aborted" follows a deliberate stop.
        if event.error != "aborted":
            logger.warning("Speech recognition error: %s", event.error)
            effects.extend(self._show_error(f"Speech recognition error: {event.error}"))
        effects.extend(self._stop_recognition())
        return effects

    def _on_recognition_ended(self, event: RecognitionEnded) -> List[Effect]:
        self.listening = False
        return [CancelTimer(TimerKind.SILENCE)]

    def _on_recognition_start_failed(self, event: RecognitionStartFailed) -> List[Effect]:
        self.listening = False
        effects: List[Effect] = [CancelTimer(TimerKind.SILENCE)]
        if event.reason in (ListenReason.AUTO, ListenReason.AUTO_RETRY):
            effects.append(StartTimer(TimerKind.RESTART_LISTEN, self.timings.restart_delay))
        return effects

    # Synthesis

    def _on_synthesis_started(self, event: SynthesisStarted) -> List[Effect]:
        self.speaking = True
        self._speech_pending = False
        return []

    def _on_synthesis_ended(self, event: SynthesisEnded) -> List[Effect]:
        self.speaking = False
        self._speech_pending = False
        listen_after = self._listen_after_speech
        self._listen_after_speech = False

        if listen_after and not self.manual_input and not self.complete and self.audio_enabled:
            return [StartTimer(TimerKind.START_LISTEN, self.timings.auto_listen_delay)]
        return []

    def _on_synthesis_failed(self, event: SynthesisFailed) -> List[Effect]:
        self.speaking = False
        self._speech_pending = False
        self._listen_after_speech = False
        return []

    # Timers

    def _on_timer_fired(self, event: TimerFired) -> List[Effect]:
        if event.kind == TimerKind.SILENCE:
            if not self.listening:
                return []
            effects = self._stop_recognition()
            effects.extend(self._retry_once(SILENCE_RETRY, SILENCE_GIVE_UP))
            return effects

        reasons = {
            TimerKind.START_LISTEN: ListenReason.AUTO,
            TimerKind.RETRY_LISTEN: ListenReason.AUTO_RETRY,
            TimerKind.RESTART_LISTEN: ListenReason.RESTART,
        }
        return self._start_recognition(reasons[event.kind])

    # User controls

    def _on_text_submitted(self, event: TextSubmitted) -> List[Effect]:
        text = (event.text or "").strip()
        if not text:
            return []

        self.manual_input = False
        effects = self._show_error(None)
        effects.extend(self._submit(text))
        return effects

    def _on_toggle_listening(self, event: ToggleListening) -> List[Effect]:
        if self.listening:
            return self._stop_recognition()

        self._auto_retry_used = False
        return self._start_recognition(ListenReason.MANUAL)

    def _on_toggle_audio(self, event: ToggleAudio) -> List[Effect]:
        self.audio_enabled = not self.audio_enabled
        if self.audio_enabled or not (self.speaking or self._speech_pending):
            return []

        # Muting mid-utterance cuts the speech; keep the turn moving.
        listen_after = self._listen_after_speech
        self.speaking = False
        self._speech_pending = False
        self._listen_after_speech = False
        effects: List[Effect] = [CancelSpeech()]
        if listen_after and not self.manual_input and not self.complete:
            effects.extend(self._listen_later())
        return effects

    def _on_stop_speaking(self, event: StopSpeaking) -> List[Effect]:
        self.speaking = False
        self._speech_pending = False
        self._listen_after_speech = False
        return [CancelSpeech()]

    def _on_voices_changed(self, event: VoicesChanged) -> List[Effect]:
        self.voices = list(event.voices)
        return []

    def replay(self, events: Sequence[Event]) -> List[Effect]:
        """Dispatch several events and collect all effects, in order."""
        effects: List[Effect] = []
        for event in events:
            effects.extend(self.dispatch(event))
        return effects
