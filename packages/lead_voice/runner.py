"""Asyncio runner that executes turn controller effects.

The runner is the glue between a ``TurnController``, a host that owns the
speech capabilities and the backend client. Host callbacks post events;
the runner dispatches them one at a time on the event loop, performs the
resulting effects, arms timers with ``loop.call_later`` and runs network
calls as tasks whose results are posted back as events.
"""

import asyncio
import logging
from typing import Any, Coroutine, Dict, List, Optional, Protocol, Set, Tuple

from .client import ClientError, LeadChatClient
from .controller import TurnController
from .events import (
    CancelSpeech,
    CancelTimer,
    Effect,
    Event,
    HostVoice,
    NetworkFailed,
    RecognitionStartFailed,
    RequestStart,
    SendMessage,
    ShowError,
    Speak,
    StartRecognition,
    StartRequested,
    StartTimer,
    StopRecognition,
    TimerFired,
    TimerKind,
    VoicesChanged,
)

logger = logging.getLogger(__name__)


class RecognitionStartError(Exception):
    """Raised by a host when speech recognition cannot be started."""

    pass


class SpeechHost(Protocol):
    """Speech capabilities provided by the host (browser, desktop, test fake).

    Hosts report recognition and synthesis callbacks by calling
    ``VoiceSessionRunner.post`` with the matching event. Every ``speak``
    call is answered with ``SynthesisStarted`` and then ``SynthesisEnded``
    or ``SynthesisFailed``; synthesis events are only reported for the most
    recently requested utterance.
    """

    def list_voices(self) -> List[HostVoice]: ...

    def start_recognition(self) -> None:
        """Start listening; raise RecognitionStartError if it cannot."""
        ...

    def stop_recognition(self) -> None: ...

    def speak(self, text: str, voice: Optional[HostVoice], pitch: float, rate: float) -> None: ...

    def cancel_speech(self) -> None: ...

    def show_error(self, message: Optional[str]) -> None: ...


class VoiceSessionRunner:
    """Runs one voice chat: dispatches events and executes effects."""

    def __init__(
        self,
        controller: TurnController,
        host: SpeechHost,
        client: LeadChatClient,
    ) -> None:
        """Initialize the runner.

        Args:
            controller: Turn controller for this chat
            host: Speech capabilities
            client: Backend client
        """
        self.controller = controller
        self.host = host
        self.client = client
        # Timer expiries carry the generation they were armed with.
        self._queue: "asyncio.Queue[Optional[Tuple[Event, Optional[int]]]]" = asyncio.Queue()
        self._timers: Dict[TimerKind, asyncio.TimerHandle] = {}
        self._timer_generation: Dict[TimerKind, int] = {}
        self._tasks: Set["asyncio.Task[None]"] = set()

    @property
    def pending_timers(self) -> Set[TimerKind]:
        """Kinds of timers currently armed."""
        return set(self._timers)

    def post(self, event: Event) -> None:
        """Queue an event from a host callback."""
        self._queue.put_nowait((event, None))

    async def start(self) -> None:
        """Load host voices and request a session."""
        self.process(VoicesChanged(voices=tuple(self.host.list_voices())))
        self.process(StartRequested())

    async def run(self) -> None:
        """Process posted events until ``close`` is called."""
        while True:
            item = await self._queue.get()
            if item is None:
                break
            self._deliver(*item)

    async def drain(self) -> None:
        """Wait for in-flight requests and process every queued event."""
        while self._tasks or not self._queue.empty():
            if self._tasks:
                await asyncio.gather(*list(self._tasks), return_exceptions=True)
            while not self._queue.empty():
                item = self._queue.get_nowait()
                if item is not None:
                    self._deliver(*item)

    async def close(self) -> None:
        """Cancel timers and requests, close the client and stop ``run``."""
        for handle in self._timers.values():
            handle.cancel()
        self._timers.clear()

        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

        await self.client.aclose()
        self._queue.put_nowait(None)

    def process(self, event: Event) -> None:
        """Dispatch one event and execute its effects."""
        for effect in self.controller.dispatch(event):
            self._execute(effect)

    def _execute(self, effect: Effect) -> None:
        if isinstance(effect, Speak):
            self.host.speak(effect.text, effect.voice, effect.pitch, effect.rate)
        elif isinstance(effect, CancelSpeech):
            self.host.cancel_speech()
        elif isinstance(effect, StartRecognition):
            try:
                self.host.start_recognition()
            except RecognitionStartError as e:
                logger.warning("Recognition did not start (%s): %s", effect.reason.value, e)
                self.post(RecognitionStartFailed(effect.reason))
        elif isinstance(effect, StopRecognition):
            self.host.stop_recognition()
        elif isinstance(effect, StartTimer):
            self._start_timer(effect.kind, effect.delay)
        elif isinstance(effect, CancelTimer):
            self._cancel_timer(effect.kind)
        elif isinstance(effect, ShowError):
            self.host.show_error(effect.message)
        elif isinstance(effect, RequestStart):
            self._spawn(self._request_start())
        elif isinstance(effect, SendMessage):
            self._spawn(self._send_message(effect.session_id, effect.text))
        else:
            raise TypeError(f"Unsupported effect: {effect!r}")

    def _deliver(self, event: Event, generation: Optional[int]) -> None:
        # An expiry queued before its timer was cancelled or re-armed is stale.
        if generation is not None and isinstance(event, TimerFired):
            if generation != self._timer_generation.get(event.kind):
                logger.debug("Dropping stale %s timer", event.kind.value)
                return
        self.process(event)

    def _start_timer(self, kind: TimerKind, delay: float) -> None:
        self._cancel_timer(kind)
        loop = asyncio.get_running_loop()
        generation = self._timer_generation[kind]
        self._timers[kind] = loop.call_later(delay, self._fire_timer, kind, generation)

    def _cancel_timer(self, kind: TimerKind) -> None:
        self._timer_generation[kind] = self._timer_generation.get(kind, 0) + 1
        handle = self._timers.pop(kind, None)
        if handle is not None:
            handle.cancel()

    def _fire_timer(self, kind: TimerKind, generation: int) -> None:
        self._timers.pop(kind, None)
        self._queue.put_nowait((TimerFired(kind), generation))

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _request_start(self) -> None:
        try:
            event: Event = await self.client.start_chat()
        except ClientError as e:
            logger.error("Failed to start chat: %s", e)
            event = NetworkFailed("start")
        self.post(event)

    async def _send_message(self, session_id: str, text: str) -> None:
        try:
            event: Event = await self.client.send_message(session_id, text)
        except ClientError as e:
            logger.error("Failed to send message: %s", e)
            event = NetworkFailed("message")
        self.post(event)
