"""Read-aloud support: voice choice, speech-friendly text, one utterance at a time."""

from __future__ import annotations

import re
from typing import Callable, Optional, Protocol, Sequence

from ..observability.logging_utils import log_event, log_failure


LANGUAGE_LOCALES = {
    "en": "en-US",
    "hi": "hi-IN",
    "te": "te-IN",
}
SPEECH_RATE = 0.9
SPEECH_PITCH = 1.0
SPEECH_VOLUME = 1.0

_MARKDOWN_PUNCTUATION = re.compile(r"[#\-*_]")
_WHITESPACE = re.compile(r"\s+")
_COLON_PAUSE = re.compile(r":\s")
_SQUARE_BRACKETS = re.compile(r"[\[\]]")
_PARENTHETICAL = re.compile(r"\(.*?\)")


class Voice(Protocol):
    id: str
    lang: str


class SpeechEngine(Protocol):
    """Capability handle for a text-to-speech backend."""

    def voices(self) -> Sequence[Voice]: ...

    def speak(
        self,
        text: str,
        *,
        voice: Optional[Voice],
        rate: float,
        pitch: float,
        volume: float,
        on_start: Callable[[], None],
        on_end: Callable[[], None],
        on_error: Callable[[str], None],
    ) -> None: ...

    def cancel(self) -> None: ...


def select_voice(voices: Sequence[Voice], language: str) -> Optional[Voice]:
    if not voices:
        return None
    locale = LANGUAGE_LOCALES.get(language, LANGUAGE_LOCALES["en"])
    prefix = locale.split("-")[0]
    for voice in voices:
        if voice.lang == locale:
            return voice
    for voice in voices:
        if (voice.lang or "").startswith(prefix):
            return voice
    return voices[0]


def format_text_for_speech(text: str) -> str:
    text = _MARKDOWN_PUNCTUATION.sub("", text or "")
    text = text.replace("\n", ". ")
    text = _WHITESPACE.sub(" ", text)
    text = _COLON_PAUSE.sub(", ", text)
    text = _SQUARE_BRACKETS.sub("", text)
    text = _PARENTHETICAL.sub("", text)
    return text.strip()


class ReadAloudSession:
    """
    Owns the speech engine for one result view.

    Starting a new utterance always cancels the one in flight; `close()`
    cancels pending speech when the view goes away.
    """

    def __init__(self, engine: SpeechEngine, language: str = "en") -> None:
        self._engine = engine
        self.language = language
        self.speaking = False
        self.events: list[str] = []

    def _on_start(self) -> None:
        self.speaking = True
        self.events.append("Started reading")

    def _on_end(self) -> None:
        self.speaking = False
        self.events.append("Finished reading")

    def _on_error(self, error: str) -> None:
        self.speaking = False
        self.events.append(f"Error reading text: {error}")
        log_failure("speech_error", error=error)

    def toggle(self, title: str, content: str) -> bool:
        """Speak `title. content`, or stop if already speaking. True when speech was started."""
        self._engine.cancel()
        if self.speaking:
            self.speaking = False
            return False
        text = format_text_for_speech(f"{title}. {content}")
        voice = select_voice(self._engine.voices(), self.language)
        log_event("speech_start", language=self.language, chars=len(text))
        self._engine.speak(
            text,
            voice=voice,
            rate=SPEECH_RATE,
            pitch=SPEECH_PITCH,
            volume=SPEECH_VOLUME,
            on_start=self._on_start,
            on_end=self._on_end,
            on_error=self._on_error,
        )
        return True

    def close(self) -> None:
        self._engine.cancel()
        self.speaking = False

    def __enter__(self) -> "ReadAloudSession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def prepare_utterance(
    title: str, content: str, language: str, voices: Sequence[Voice]
) -> dict:
    """Everything a client-side synthesizer needs to read a section aloud."""
    text = format_text_for_speech(f"{title}. {content}" if title else content)
    voice = select_voice(voices, language)
    return {
        "text": text,
        "voice_id": voice.id if voice is not None else None,
        "rate": SPEECH_RATE,
        "pitch": SPEECH_PITCH,
        "volume": SPEECH_VOLUME,
    }
