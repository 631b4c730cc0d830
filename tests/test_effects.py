"""Tests for effects module."""

import numpy as np
import pytest
from pydub import AudioSegment

from narrator.effects import apply_reverb, generate_breath, normalize_levels, process_clips
from narrator.models import TextSegment

from conftest import silent_clip


def _loud_audio(duration_ms=500):
    """Create an AudioSegment with actual sound (not silence)."""
    rng = np.random.default_rng(0)
    samples = rng.integers(-5000, 5000, int(24000 * duration_ms / 1000), dtype=np.int16)
    return AudioSegment(data=samples.tobytes(), sample_width=2, frame_rate=24000, channels=1)


def _segment(content_type):
    return TextSegment(text="x", start_index=0, end_index=1, content_type=content_type)


def test_reverb_preserves_duration():
    audio = _loud_audio(500)
    result = apply_reverb(audio)
    assert isinstance(result, AudioSegment)
    assert abs(len(result) - len(audio)) < 100
    assert result.channels == 1


def test_reverb_stereo():
    audio = AudioSegment.from_mono_audiosegments(_loud_audio(300), _loud_audio(300))
    result = apply_reverb(audio)
    assert result.channels == 2
    assert abs(len(result) - 300) < 100


def test_normalize_levels():
    """Sound is brought to the target, silence is untouched."""
    loud = _loud_audio() + 6
    silent = silent_clip()
    result = normalize_levels([loud, silent], target_dbfs=-20.0)
    assert result[0].dBFS == pytest.approx(-20.0, abs=0.5)
    assert result[1] is silent


def test_breath_duration_and_level():
    breath = generate_breath(duration_ms=280, seed=1)
    assert abs(len(breath) - 280) <= 1
    assert breath.dBFS < -25


def test_breath_is_deterministic_with_seed():
    assert generate_breath(seed=3).raw_data == generate_breath(seed=3).raw_data


def test_process_clips_reverb_on_dialogue_only():
    narrative = silent_clip(300)
    dialogue = _loud_audio(300)
    result = process_clips([_segment("narrative"), _segment("dialogue")],
                           [narrative, dialogue], normalize=False)
    assert result[0] is narrative
    assert result[1] is not dialogue
    assert abs(len(result[1]) - 300) < 100


def test_process_clips_no_reverb():
    dialogue = _loud_audio(300)
    result = process_clips([_segment("dialogue")], [dialogue], reverb=False, normalize=False)
    assert result[0] is dialogue
