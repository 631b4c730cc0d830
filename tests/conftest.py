"""Shared fixtures for narrator tests."""

import asyncio

import pytest
from pydub import AudioSegment

from narrator.engine import SpeechEngine, SpeechError
from narrator.models import ProsodySettings, VoiceSettings, WordBoundary


class FakeSpeechEngine(SpeechEngine):
    """In-memory engine: records utterances, optionally slow or failing."""

    def __init__(self, speak_delay=0.0, fail_on=None, can_pause=True, boundaries=False):
        super().__init__()
        self.speak_delay = speak_delay
        self.fail_on = fail_on          # index of the speak() call that raises
        self.can_pause = can_pause
        self.supports_word_boundaries = boundaries
        self.spoken = []                # (text, SpeechOptions)
        self.stop_calls = 0

    async def speak(self, text, options):
        index = len(self.spoken)
        self.spoken.append((text, options))
        if index == self.fail_on:
            self.emit("error", "synthesis failed")
            raise SpeechError("synthesis failed")
        self.emit("start")
        if self.supports_word_boundaries:
            for i, word in enumerate(text.split()):
                self.emit("word_boundary", WordBoundary(text=word, word_index=i, offset_ms=i * 100.0))
        await asyncio.sleep(self.speak_delay)
        self.emit("end")

    async def stop(self):
        self.stop_calls += 1

    async def pause(self):
        return self.can_pause

    async def resume(self):
        return self.can_pause


@pytest.fixture
def engine():
    return FakeSpeechEngine()


@pytest.fixture
def settings():
    """Default fr-CA settings with the professional profile."""
    return VoiceSettings()


@pytest.fixture
def plain_settings():
    """Settings with prosody turned off and no profile."""
    return VoiceSettings(language="en-US", personality=None, prosody=ProsodySettings(enabled=False))


@pytest.fixture
def text_file(tmp_path):
    path = tmp_path / "texte.txt"
    path.write_text("Bonjour! Comment allez-vous?", encoding="utf-8")
    return path


def silent_clip(duration_ms=500):
    return AudioSegment.silent(duration=duration_ms, frame_rate=24000)
