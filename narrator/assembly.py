"""Join rendered segment clips with their prosody pauses."""

from pydub import AudioSegment

from narrator.constants import BREATH_MIN_GAP_MS, DEFAULT_SEGMENT_PAUSE_MS
from narrator.effects import generate_breath
from narrator.models import TextSegment
from narrator.prosody import segment_pause_ms


def _gap(segment: TextSegment, prosody: bool, breathing: bool) -> AudioSegment:
    pause_ms = segment_pause_ms(segment) if prosody else DEFAULT_SEGMENT_PAUSE_MS
    silence = AudioSegment.silent(duration=pause_ms)
    if breathing and pause_ms >= BREATH_MIN_GAP_MS:
        breath = generate_breath()
        # Breath sits at the end of the gap, just before the next sentence
        position = max(pause_ms - len(breath), 0)
        silence = silence.overlay(breath, position=position)
    return silence


def assemble(
    segments: list[TextSegment],
    clips: list[AudioSegment],
    breathing: bool = False,
    prosody: bool = True,
) -> AudioSegment:
    """Concatenate *clips* in order, separated by each segment's end pause.

    With *breathing*, gaps of at least BREATH_MIN_GAP_MS get a synthesized
    breath. No gap follows the last clip.
    """
    if len(segments) != len(clips):
        raise ValueError(f"Got {len(clips)} clips for {len(segments)} segments")
    if not clips:
        return AudioSegment.silent(duration=0)

    result = clips[0]
    for i in range(1, len(clips)):
        result += _gap(segments[i - 1], prosody, breathing) + clips[i]
    return result
