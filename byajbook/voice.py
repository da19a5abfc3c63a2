import logging
from abc import ABC, abstractmethod
from typing import Callable, Iterable, List, Optional

from .models import ConversationState, StepResult, TranscriptEvent

logger = logging.getLogger(__name__)

TranscriptHandler = Callable[[TranscriptEvent], None]


class VoiceIO(ABC):
    """Speech front end: emits transcripts and reads prompts aloud."""

    @abstractmethod
    def speak(self, text: str) -> None:
        ...

    @abstractmethod
    def on_transcript(self, handler: TranscriptHandler) -> None:
        ...


class ScriptedVoiceIO(VoiceIO):
    """Replays a fixed list of transcript events; spoken prompts are recorded."""

    def __init__(self, events: Iterable[TranscriptEvent]):
        self.events = list(events)
        self.spoken: List[str] = []
        self._handlers: List[TranscriptHandler] = []

    def speak(self, text: str) -> None:
        self.spoken.append(text)

    def on_transcript(self, handler: TranscriptHandler) -> None:
        self._handlers.append(handler)

    def play(self) -> None:
        for event in self.events:
            for handler in self._handlers:
                handler(event)


class FinalTranscriptGate:
    """
    Connects a VoiceIO to the dialogue for one session.

    Interim transcripts only refresh ``heard``; each final transcript runs
    one dialogue step and the resulting prompt is spoken back.
    """

    def __init__(self, agent, voice: VoiceIO, state: Optional[ConversationState] = None):
        self.agent = agent
        self.voice = voice
        self.state = state or agent.new_state()
        self.heard = ""
        self.results: List[StepResult] = []
        voice.on_transcript(self.feed)

    def feed(self, event: TranscriptEvent) -> StepResult:
        result = self.agent.handle_transcript(self.state, event)
        self.heard = result.heard or ""
        if not event.is_final:
            return result

        self.state = result.state
        self.results.append(result)
        if result.prompt:
            self.voice.speak(result.prompt)
        logger.debug(f"Final transcript {event.transcript!r} -> {self.state.current_step.value}")
        return result
