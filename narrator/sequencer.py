"""Segment-by-segment narration playback with word highlighting.

One ``NarrationSequencer`` owns at most one active run. Starting a new
narration first cancels the previous run (its speech call, highlight
clock and pending inter-segment pause) before any new state is set up.

Within a run, each segment goes through:

    segment event → highlight clock + speak() → clock cancelled
                  → pause event + sleep → next segment

The highlight clock is an estimate from the speaking rate; it may finish
before or after the utterance and is cancelled either way. Engines that
report real word boundaries drive the highlight instead.
"""

import asyncio
import copy
import logging
from typing import Awaitable, Callable

from narrator.constants import DEFAULT_SEGMENT_PAUSE_MS, WORDS_PER_MINUTE
from narrator.engine import SpeechEngine, SpeechError
from narrator.models import (
    ControlResult,
    NarrationUpdate,
    SpeechOptions,
    SpeechParams,
    TextSegment,
    VoiceSettings,
    WordBoundary,
)
from narrator.preprocess import preprocess_canadian_french
from narrator.prosody import analyze_text, plain_segments, segment_pause_ms
from narrator.speech import apply_prosody_to_speech
from narrator.voices import apply_voice_profile, get_voice_profile

logger = logging.getLogger(__name__)

IDLE = "idle"
SPEAKING = "speaking"
PAUSED = "paused"
STOPPED = "stopped"


class NarrationSession:
    """Side effects held for the lifetime of a narration run.

    Subclasses acquire things like a keep-awake lock or a brightness
    override in ``acquire`` and restore them in ``release``.
    """

    def acquire(self) -> None:
        pass

    def release(self) -> None:
        pass


def prepare_segments(text: str, settings: VoiceSettings) -> list[TextSegment]:
    """Build the segments for one run; no hints when prosody is disabled."""
    if not settings.prosody.enabled:
        return plain_segments(text)
    if settings.language == "fr-CA":
        text = preprocess_canadian_french(text)
    return analyze_text(text, settings.prosody)


def base_speech_params(settings: VoiceSettings) -> SpeechParams:
    """Base parameters for a run, with the voice profile applied when prosody is on."""
    base = settings.speech_params()
    if settings.prosody.enabled:
        profile = get_voice_profile(settings.personality)
        if profile is not None:
            base = apply_voice_profile(base, profile)
    return base


def segment_speech_params(
    base: SpeechParams,
    segment: TextSegment,
    settings: VoiceSettings,
) -> SpeechParams:
    if not settings.prosody.enabled:
        return base
    return apply_prosody_to_speech(base, segment, settings.prosody.intensity)


def highlight_interval(rate: float) -> float:
    """Seconds per word at *rate*."""
    return 60 / (rate * WORDS_PER_MINUTE)


async def _cancel_task(task: asyncio.Task | None) -> None:
    if task is None or task.done() or task is asyncio.current_task():
        return
    task.cancel()
    await asyncio.wait({task})


class NarrationSequencer:
    """Drives a speech engine through the segments of one narration.

    Args:
        engine:    Speech backend.
        on_update: Called with a NarrationUpdate on every state change.
        session:   Side-effect hook held while narrating.
        sleep:     Awaitable used for pauses and highlight ticks.
    """

    def __init__(
        self,
        engine: SpeechEngine,
        on_update: Callable[[NarrationUpdate], None] | None = None,
        session: NarrationSession | None = None,
        sleep: Callable[[float], Awaitable] | None = None,
    ):
        self.engine = engine
        self.on_update = on_update
        self.session = session or NarrationSession()
        self._sleep = sleep or asyncio.sleep

        self.state = IDLE
        self.segments: list[TextSegment] = []
        self.current_segment_index = 0
        self.highlighted_word_index = -1

        self._settings: VoiceSettings | None = None
        self._base: SpeechParams | None = None
        self._run_task: asyncio.Task | None = None
        self._highlight_task: asyncio.Task | None = None
        self._unsubscribe: Callable[[], None] | None = None
        self._resumed: asyncio.Event | None = None
        self._in_utterance = False
        self._session_held = False

    @property
    def is_speaking(self) -> bool:
        return self.state in (SPEAKING, PAUSED)

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    async def start(self, text: str, settings: VoiceSettings) -> None:
        """Cancel any active run, then start narrating *text*.

        *settings* is copied; later edits affect the next run only.
        """
        await self.stop()

        snapshot = copy.deepcopy(settings)
        segments = prepare_segments(text, snapshot)
        if not segments:
            logger.info("Nothing to narrate")
            return

        self._settings = snapshot
        self._base = base_speech_params(snapshot)
        self.segments = segments
        self.current_segment_index = 0
        self.highlighted_word_index = 0
        self._resumed = asyncio.Event()
        self._resumed.set()

        self.session.acquire()
        self._session_held = True
        if self.engine.supports_word_boundaries:
            self._unsubscribe = self.engine.subscribe("word_boundary", self._on_word_boundary)

        self.state = SPEAKING
        logger.info("Narrating %d segments", len(segments))
        self._run_task = asyncio.create_task(self._run(), name="narrator-run")

    async def stop(self) -> None:
        """Stop the active run. Safe to call when nothing is playing."""
        task = self._run_task
        if task is None and not self.is_speaking:
            return
        self._run_task = None
        await _cancel_task(task)
        await self.engine.stop()
        await self._teardown()

    async def pause(self) -> ControlResult:
        if self.state != SPEAKING:
            return ControlResult(False, "not speaking")
        if self._in_utterance and not await self.engine.pause():
            return ControlResult(False, "pause is not supported by this speech engine")

        self._resumed.clear()
        await self._cancel_highlight_clock()
        self.state = PAUSED
        self._notify("paused")
        return ControlResult(True)

    async def resume(self) -> ControlResult:
        if self.state != PAUSED:
            return ControlResult(False, "not paused")
        if self._in_utterance and not await self.engine.resume():
            return ControlResult(False, "resume is not supported by this speech engine")

        self.state = SPEAKING
        if self._in_utterance:
            self._start_highlight_clock(self.segments[self.current_segment_index],
                                        self.highlighted_word_index)
        self._resumed.set()
        self._notify("resumed")
        return ControlResult(True)

    async def wait(self) -> None:
        """Wait until the active run finishes or is stopped."""
        task = self._run_task
        if task is not None:
            await asyncio.wait({task})

    # ------------------------------------------------------------------
    # Run loop
    # ------------------------------------------------------------------

    async def _run(self) -> None:
        last = len(self.segments) - 1
        try:
            for index, segment in enumerate(self.segments):
                await self._resumed.wait()
                await self._speak_segment(index, segment)
                if index < last:
                    pause_ms = self._pause_after(segment)
                    self._notify("pause", pause_ms=pause_ms)
                    await self._sleep(pause_ms / 1000)
        except SpeechError as e:
            logger.error("Narration stopped: %s", e)
            await self._teardown(error=str(e))
            return
        except Exception as e:
            logger.exception("Narration failed")
            await self._teardown(error=str(e) or type(e).__name__)
            return
        logger.info("Narration finished")
        await self._teardown()

    async def _speak_segment(self, index: int, segment: TextSegment) -> None:
        self.current_segment_index = index
        self.highlighted_word_index = 0
        self._notify("segment")

        options = self._segment_options(segment)
        logger.debug("Segment %d: pitch=%.2f rate=%.2f volume=%.2f",
                     index, options.pitch, options.rate, options.volume)

        self._start_highlight_clock(segment, 0)
        self._in_utterance = True
        try:
            await self.engine.speak(segment.text, options)
        finally:
            self._in_utterance = False
            await self._cancel_highlight_clock()

    def _segment_options(self, segment: TextSegment) -> SpeechOptions:
        settings = self._settings
        params = segment_speech_params(self._base, segment, settings)
        return SpeechOptions(
            language=settings.language,
            pitch=params.pitch,
            rate=params.rate,
            volume=params.volume,
            voice_id=settings.voice,
        )

    def _pause_after(self, segment: TextSegment) -> int:
        if self._settings.prosody.enabled:
            return segment_pause_ms(segment)
        return DEFAULT_SEGMENT_PAUSE_MS

    # ------------------------------------------------------------------
    # Highlighting
    # ------------------------------------------------------------------

    def _start_highlight_clock(self, segment: TextSegment, start_index: int) -> None:
        if self.engine.supports_word_boundaries:
            return
        if self._highlight_task is not None and not self._highlight_task.done():
            self._highlight_task.cancel()
        interval = highlight_interval(self._base.rate)
        self._highlight_task = asyncio.create_task(
            self._tick_highlight(segment.word_count, start_index, interval),
            name="narrator-highlight",
        )

    async def _tick_highlight(self, word_count: int, index: int, interval: float) -> None:
        while index + 1 < word_count:
            await self._sleep(interval)
            index += 1
            self.highlighted_word_index = index
            self._notify("word")

    async def _cancel_highlight_clock(self) -> None:
        task, self._highlight_task = self._highlight_task, None
        await _cancel_task(task)

    def _on_word_boundary(self, boundary: WordBoundary) -> None:
        if self.state != SPEAKING:
            return
        self.highlighted_word_index = boundary.word_index
        self._notify("word")

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    async def _teardown(self, error: str | None = None) -> None:
        if not self.is_speaking:
            return
        await self._cancel_highlight_clock()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

        self.highlighted_word_index = -1
        self.state = STOPPED
        self._run_task = None
        if self._session_held:
            self.session.release()
            self._session_held = False

        if error:
            self._notify("error", error=error)
        self._notify("stopped")

    def _notify(self, event: str, pause_ms: int | None = None, error: str | None = None) -> None:
        if self.on_update is None:
            return
        self.on_update(NarrationUpdate(
            event=event,
            current_segment_index=self.current_segment_index,
            highlighted_word_index=self.highlighted_word_index,
            is_speaking=self.is_speaking,
            pause_ms=pause_ms,
            error=error,
        ))
