"""Audio effects for rendered narration: dialogue reverb, levelling, breaths."""

import numpy as np
import pedalboard
from pydub import AudioSegment

from narrator.constants import (
    BREATH_DURATION_MS,
    BREATH_GAIN_DB,
    NORMALIZE_TARGET_DBFS,
    REVERB_ROOM_SIZE,
    REVERB_WET_LEVEL,
    SAMPLE_RATE,
)
from narrator.models import TextSegment


def apply_reverb(
    audio: AudioSegment,
    room_size: float = REVERB_ROOM_SIZE,
    wet_level: float = REVERB_WET_LEVEL,
) -> AudioSegment:
    """Apply subtle room reverb to a 16-bit AudioSegment."""
    samples = np.array(audio.get_array_of_samples(), dtype=np.float32)
    # pedalboard wants (channels, frames) in [-1, 1]
    samples = samples.reshape((-1, audio.channels)).T / 32768.0

    board = pedalboard.Pedalboard([
        pedalboard.Reverb(room_size=room_size, wet_level=wet_level),
    ])
    processed = board(samples, audio.frame_rate)

    processed = np.clip(processed * 32768.0, -32768, 32767).astype(np.int16)
    return AudioSegment(
        data=processed.T.flatten().tobytes(),
        sample_width=2,
        frame_rate=audio.frame_rate,
        channels=audio.channels,
    )


def normalize_levels(
    clips: list[AudioSegment],
    target_dbfs: float = NORMALIZE_TARGET_DBFS,
) -> list[AudioSegment]:
    """Bring every clip to roughly *target_dbfs*. Silent clips are left alone."""
    result = []
    for clip in clips:
        if clip.dBFS == float("-inf"):
            result.append(clip)
        else:
            result.append(clip + (target_dbfs - clip.dBFS))
    return result


def generate_breath(
    duration_ms: int = BREATH_DURATION_MS,
    gain_db: float = BREATH_GAIN_DB,
    sample_rate: int = SAMPLE_RATE,
    seed: int | None = None,
) -> AudioSegment:
    """Synthesize a soft inhale: band-limited noise under a rise-and-fall envelope."""
    rng = np.random.default_rng(seed)
    n = int(sample_rate * duration_ms / 1000)
    noise = rng.standard_normal(n)

    # Moving average keeps the hiss out of the top end
    kernel = np.ones(8) / 8
    noise = np.convolve(noise, kernel, mode="same")

    envelope = np.sin(np.linspace(0, np.pi, n)) ** 2
    breath = noise * envelope
    peak = np.max(np.abs(breath)) if n else 0
    if peak > 0:
        breath = breath / peak * 0.8
    samples = (breath * 32767).astype(np.int16)

    audio = AudioSegment(
        data=samples.tobytes(),
        sample_width=2,
        frame_rate=sample_rate,
        channels=1,
    )
    return audio + gain_db


def process_clips(
    segments: list[TextSegment],
    clips: list[AudioSegment],
    reverb: bool = True,
    normalize: bool = True,
) -> list[AudioSegment]:
    """Reverb on dialogue segments, then level everything."""
    result = []
    for segment, clip in zip(segments, clips):
        if reverb and segment.content_type == "dialogue":
            result.append(apply_reverb(clip))
        else:
            result.append(clip)

    if normalize:
        result = normalize_levels(result)
    return result
