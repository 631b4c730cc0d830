"""Turn prosody hints into speech parameters and SSML."""

import re
from xml.sax.saxutils import escape, quoteattr

from narrator.constants import (
    DEFAULT_INTENSITY,
    INTENSITY_RANGE,
    PITCH_RANGE,
    RATE_RANGE,
    SSML_BREAK_WINDOW,
    VOLUME_RANGE,
)
from narrator.models import SpeechParams, TextSegment, clamp

_PERCENT_RE = re.compile(r"([+-]?\d+)%")


def parse_percent(value: str) -> int | None:
    """Extract the signed percentage from a pitch hint such as ``"-3%"``."""
    match = _PERCENT_RE.search(value)
    if not match:
        return None
    return int(match.group(1))


def apply_prosody_to_speech(
    base: SpeechParams,
    segment: TextSegment,
    intensity: float = DEFAULT_INTENSITY,
) -> SpeechParams:
    """Fold the segment's hints over *base*, then blend back by *intensity*.

    *base* is clamped first. Hints apply in order and each result is
    clamped immediately. Hint positions are ignored here: pitch, rate and
    volume hints act on the whole segment. ``intensity=0`` returns the
    clamped *base* and ``intensity=1`` applies the hints fully.
    """
    base = base.clamped()
    pitch, rate, volume = base.pitch, base.rate, base.volume

    for hint in segment.prosody_hints:
        if hint.type == "pitch" and isinstance(hint.value, str):
            percent = parse_percent(hint.value)
            if percent is not None:
                pitch = clamp(pitch * (1 + percent / 100), PITCH_RANGE)
        elif hint.type == "rate" and isinstance(hint.value, (int, float)):
            rate = clamp(rate * hint.value, RATE_RANGE)
        elif hint.type == "volume" and isinstance(hint.value, (int, float)):
            volume = clamp(volume * hint.value, VOLUME_RANGE)

    intensity = clamp(intensity, INTENSITY_RANGE)
    return SpeechParams(
        pitch=base.pitch + (pitch - base.pitch) * intensity,
        rate=base.rate + (rate - base.rate) * intensity,
        volume=base.volume + (volume - base.volume) * intensity,
    )


def _format_rate(value) -> str:
    if isinstance(value, (int, float)):
        return f"{value:g}x"
    return str(value)


def _format_volume(value) -> str:
    if isinstance(value, (int, float)):
        return f"{round(value * 100)}%"
    return str(value)


def _segment_ssml(segment: TextSegment) -> str:
    first = {}
    for hint in segment.prosody_hints:
        first.setdefault(hint.type, hint)

    body = escape(segment.text)

    attrs = ""
    if "pitch" in first:
        attrs += f" pitch={quoteattr(str(first['pitch'].value))}"
    if "rate" in first:
        attrs += f" rate={quoteattr(_format_rate(first['rate'].value))}"
    if "volume" in first:
        attrs += f" volume={quoteattr(_format_volume(first['volume'].value))}"
    if attrs:
        body = f"<prosody{attrs}>{body}</prosody>"

    if "emphasis" in first:
        body = f"<emphasis level={quoteattr(str(first['emphasis'].value))}>{body}</emphasis>"

    threshold = len(segment.text) - SSML_BREAK_WINDOW
    end_pauses = [
        hint.duration or 0
        for hint in segment.prosody_hints
        if hint.type == "pause" and hint.position >= threshold
    ]
    if end_pauses:
        body += f'<break time="{max(end_pauses)}ms"/>'

    return body


def generate_ssml(segments: list[TextSegment]) -> str:
    """Serialize analyzed segments as a single ``<speak>`` document."""
    return "<speak>" + "".join(_segment_ssml(seg) for seg in segments) + "</speak>"
