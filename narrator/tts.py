"""Speech synthesis via edge-tts with retry logic."""

import asyncio
import io
from dataclasses import dataclass, field

import edge_tts
from pydub import AudioSegment

from narrator.constants import PITCH_HZ_PER_UNIT, TTS_RETRY_BASE_DELAY, TTS_RETRY_COUNT
from narrator.models import SpeechParams, WordBoundary


class SpeechError(Exception):
    """Synthesis or playback of an utterance failed."""


@dataclass
class SynthesisResult:
    audio: bytes
    boundaries: list[WordBoundary] = field(default_factory=list)


def speech_options(params: SpeechParams) -> dict:
    """Map speech parameters to edge-tts relative strings.

    Rate and volume become percentages ("+15%", "-50%"), pitch an offset in
    Hz. A factor of 1.0 maps to no change.
    """
    params = params.clamped()
    return {
        "rate": f"{round((params.rate - 1) * 100):+d}%",
        "volume": f"{round((params.volume - 1) * 100):+d}%",
        "pitch": f"{round((params.pitch - 1) * PITCH_HZ_PER_UNIT):+d}Hz",
    }


async def _stream(text: str, voice: str, params: SpeechParams) -> SynthesisResult:
    communicate = edge_tts.Communicate(
        text, voice, boundary="WordBoundary", **speech_options(params),
    )
    audio = bytearray()
    boundaries = []
    async for chunk in communicate.stream():
        if chunk["type"] == "audio":
            audio.extend(chunk["data"])
        elif chunk["type"] == "WordBoundary":
            # Offsets are in 100ns ticks
            boundaries.append(WordBoundary(
                text=chunk["text"],
                word_index=len(boundaries),
                offset_ms=chunk["offset"] / 10_000,
                duration_ms=chunk["duration"] / 10_000,
            ))
    return SynthesisResult(audio=bytes(audio), boundaries=boundaries)


async def synthesize(text: str, voice: str, params: SpeechParams) -> SynthesisResult:
    """Synthesize *text* to MP3 bytes plus word boundaries.

    Retries on network errors or empty audio with exponential backoff and
    raises SpeechError once retries are exhausted.
    """
    last_error = None
    for attempt in range(TTS_RETRY_COUNT):
        try:
            result = await _stream(text, voice, params)
            if result.audio:
                return result
            last_error = SpeechError(f"TTS produced no audio for: {text[:50]}...")
        except Exception as e:
            last_error = e

        if attempt < TTS_RETRY_COUNT - 1:
            await asyncio.sleep(TTS_RETRY_BASE_DELAY * (2 ** attempt))

    if isinstance(last_error, SpeechError):
        raise last_error
    raise SpeechError(f"TTS failed for: {text[:50]}...") from last_error


def generate_single(text: str, voice: str, output_path: str, params: SpeechParams) -> None:
    """Sync wrapper: synthesize one clip and write it to *output_path*."""
    result = asyncio.run(synthesize(text, voice, params))
    with open(output_path, "wb") as f:
        f.write(result.audio)


def synthesize_clip(text: str, voice: str, params: SpeechParams) -> AudioSegment:
    """Synthesize one clip and decode it into an AudioSegment."""
    result = asyncio.run(synthesize(text, voice, params))
    return AudioSegment.from_file(io.BytesIO(result.audio), format="mp3")
