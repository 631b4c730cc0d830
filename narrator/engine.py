"""Speech engine capability interface and the edge-tts implementation.

The sequencer only talks to ``SpeechEngine``: speak an utterance, stop,
pause, resume, list voices and subscribe to lifecycle events. Anything
that implements it (a platform bridge, a test double) can drive a
narration.
"""

import asyncio
import logging
import os
import shutil
import signal
import tempfile
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Callable

import edge_tts

from narrator.constants import PLAYER_COMMAND
from narrator.models import SpeechOptions, SpeechParams, Voice, WordBoundary
from narrator.tts import SpeechError, synthesize
from narrator.voices import default_voice_for

logger = logging.getLogger(__name__)

ENGINE_EVENTS = ("start", "word_boundary", "end", "error")

__all__ = ["ENGINE_EVENTS", "EdgeSpeechEngine", "SpeechEngine", "SpeechError"]


class SpeechEngine(ABC):
    """Common interface for the speech backends a narration can drive."""

    # True when the engine emits real "word_boundary" events during playback
    supports_word_boundaries = False

    def __init__(self):
        self._handlers: dict[str, list[Callable]] = defaultdict(list)

    @abstractmethod
    async def speak(self, text: str, options: SpeechOptions) -> None:
        """Speak *text* and return once the utterance has finished.

        Returns normally when the utterance is stopped; raises SpeechError
        when it fails.
        """

    @abstractmethod
    async def stop(self) -> None:
        """Stop the current utterance, if any."""

    async def pause(self) -> bool:
        """Pause the current utterance. Returns False when unsupported."""
        return False

    async def resume(self) -> bool:
        """Resume a paused utterance. Returns False when unsupported."""
        return False

    async def get_available_voices(self, language: str | None = None) -> list[Voice]:
        return []

    def subscribe(self, event: str, handler: Callable) -> Callable[[], None]:
        """Register *handler* for *event*; returns a function that unregisters it."""
        if event not in ENGINE_EVENTS:
            raise ValueError(f"Unknown engine event: {event}")
        self._handlers[event].append(handler)

        def unsubscribe():
            if handler in self._handlers[event]:
                self._handlers[event].remove(handler)

        return unsubscribe

    def emit(self, event: str, payload=None) -> None:
        for handler in list(self._handlers[event]):
            handler(payload)


class EdgeSpeechEngine(SpeechEngine):
    """Synthesizes with edge-tts and plays clips through an ffplay subprocess.

    Word boundaries reported by edge-tts are replayed against the playback
    clock, so highlighting follows the audio rather than an estimate.
    Pause and resume signal the player process and only work on POSIX.
    """

    supports_word_boundaries = True

    def __init__(self, player_command: list[str] | None = None):
        super().__init__()
        self.player_command = list(player_command or PLAYER_COMMAND)
        self._process: asyncio.subprocess.Process | None = None
        self._stopped = False
        self._speaking = False
        self._paused = False
        self._boundaries: list[WordBoundary] = []
        self._timers: list[asyncio.TimerHandle] = []
        self._elapsed = 0.0
        self._resumed_at = 0.0

    # ------------------------------------------------------------------
    # Playback
    # ------------------------------------------------------------------

    async def speak(self, text: str, options: SpeechOptions) -> None:
        if not shutil.which(self.player_command[0]):
            raise SpeechError(f"{self.player_command[0]} is required but not found.")

        voice = options.voice_id or default_voice_for(options.language)
        params = SpeechParams(options.pitch, options.rate, options.volume)
        self._stopped = False
        self._paused = False
        self._speaking = True
        try:
            try:
                result = await synthesize(text, voice, params)
            except SpeechError as e:
                self.emit("error", str(e))
                raise
            if self._stopped:
                return

            fd, path = tempfile.mkstemp(suffix=".mp3", prefix="narrator_")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(result.audio)
                await self._play(path, result.boundaries)
            finally:
                os.remove(path)
        finally:
            self._speaking = False
            self._paused = False

    async def _play(self, path: str, boundaries: list[WordBoundary]) -> None:
        self._process = await asyncio.create_subprocess_exec(
            *self.player_command, path,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
        )
        self._boundaries = boundaries
        self._elapsed = 0.0
        if self._paused:
            # paused during synthesis
            self._process.send_signal(signal.SIGSTOP)
        else:
            self._schedule_boundaries()
        self.emit("start")

        try:
            returncode = await self._process.wait()
        finally:
            self._cancel_timers()
            if self._process.returncode is None:
                if self._paused:
                    self._process.send_signal(signal.SIGCONT)
                self._process.terminate()
                await self._process.wait()
            self._process = None

        if self._stopped:
            return
        if returncode != 0:
            message = f"Player exited with status {returncode}"
            self.emit("error", message)
            raise SpeechError(message)
        self.emit("end")

    def _schedule_boundaries(self) -> None:
        loop = asyncio.get_running_loop()
        self._resumed_at = loop.time()
        elapsed_ms = self._elapsed * 1000
        for boundary in self._boundaries:
            if boundary.offset_ms < elapsed_ms:
                continue
            delay = (boundary.offset_ms - elapsed_ms) / 1000
            self._timers.append(loop.call_later(delay, self.emit, "word_boundary", boundary))

    def _cancel_timers(self) -> None:
        for timer in self._timers:
            timer.cancel()
        self._timers = []

    async def stop(self) -> None:
        self._stopped = True
        self._cancel_timers()
        if self._process is not None and self._process.returncode is None:
            if self._paused:
                self._process.send_signal(signal.SIGCONT)
            self._process.terminate()

    async def pause(self) -> bool:
        """Pause playback. During synthesis the player will start stopped."""
        if os.name != "posix" or not self._speaking or self._paused:
            return False
        self._paused = True
        if self._process is not None:
            self._process.send_signal(signal.SIGSTOP)
            self._elapsed += asyncio.get_running_loop().time() - self._resumed_at
            self._cancel_timers()
        return True

    async def resume(self) -> bool:
        if os.name != "posix" or not self._speaking or not self._paused:
            return False
        self._paused = False
        if self._process is not None:
            self._process.send_signal(signal.SIGCONT)
            self._schedule_boundaries()
        return True

    # ------------------------------------------------------------------
    # Voices
    # ------------------------------------------------------------------

    async def get_available_voices(self, language: str | None = None) -> list[Voice]:
        voices = await edge_tts.list_voices()
        result = []
        for v in voices:
            locale = v.get("Locale", "")
            if language and not locale.startswith(language):
                continue
            result.append(Voice(
                identifier=v["ShortName"],
                name=v.get("FriendlyName", v["ShortName"]),
                language=locale,
                gender=v.get("Gender", "neutral").lower(),
            ))
        return result
