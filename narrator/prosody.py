"""Prosody hint generation and text analysis.

Each sentence accumulates hints from every matching rule, in rule order:

  1. comma pauses              6. capitalised words / intensifiers
  2. sentence-final pause      7. emotional tone (rate, pitch, lead-in pause)
  3. ellipsis pauses           8. content type (rate, list pause)
  4. question rising pitch     9. breathing pause in long sentences
  5. exclamation emphasis

Pause durations scale with ``ProsodySettings.pause_multiplier``. Rate and
volume values are multipliers relative to the current speech parameters;
pitch values are percentage deltas such as ``"+10%"``.
"""

import re

from narrator.classifier import (
    detect_content_type,
    detect_emotional_tone,
    detect_sentence_type,
)
from narrator.constants import (
    BREATH_PAUSE_MS,
    BREATH_WORD_THRESHOLD,
    COMMA_PAUSE_MS,
    DEFAULT_SEGMENT_PAUSE_MS,
    DRAMATIC_PAUSE_MS,
    ELLIPSIS_PAUSE_MS,
    END_PAUSE_WINDOW,
    LIST_PAUSE_MS,
    QUESTION_PITCH_OFFSET,
    TERMINAL_PAUSE_MS,
)
from narrator.models import ProsodyHint, ProsodySettings, TextSegment
from narrator.segmenter import locate_sentences

INTENSIFIER_WORDS = ("très", "vraiment", "absolument", "jamais", "toujours", "extrêmement")

_CAPS_WORD_RE = re.compile(r"\b[A-Z]{2,}\b")
_INTENSIFIER_RES = [re.compile(rf"\b{word}\b", re.IGNORECASE) for word in INTENSIFIER_WORDS]
_TERMINAL_RE = re.compile(r"[.!?]$")

# tone → (rate multiplier, pitch delta)
TONE_ADJUSTMENTS = {
    "excited": (1.15, "+5%"),
    "serious": (0.9, "-3%"),
    "sad": (0.85, "-5%"),
}

CONTENT_RATES = {
    "technical": 0.85,
    "dialogue": 1.1,
}


def _pause(position: int, base_ms: int, multiplier: float) -> ProsodyHint:
    duration = round(base_ms * multiplier)
    return ProsodyHint(type="pause", position=position, value=duration, duration=duration)


def generate_prosody_hints(
    sentence: str,
    sentence_type: str,
    emotional_tone: str,
    content_type: str,
    settings: ProsodySettings,
) -> list[ProsodyHint]:
    """Generate the ordered hint list for one classified sentence."""
    hints: list[ProsodyHint] = []
    multiplier = settings.pause_multiplier
    length = len(sentence)

    for match in re.finditer(",", sentence):
        hints.append(_pause(match.start(), COMMA_PAUSE_MS, multiplier))

    if _TERMINAL_RE.search(sentence):
        hints.append(_pause(length - 1, TERMINAL_PAUSE_MS, multiplier))

    for match in re.finditer(r"\.\.\.", sentence):
        hints.append(_pause(match.start(), ELLIPSIS_PAUSE_MS, multiplier))

    if sentence_type == "question":
        position = max(length - QUESTION_PITCH_OFFSET, 0)
        hints.append(ProsodyHint(type="pitch", position=position, value="+10%"))

    if sentence_type == "exclamation":
        hints.append(ProsodyHint(type="emphasis", position=0, value="strong"))
        hints.append(ProsodyHint(type="volume", position=0, value=1.1))

    if settings.emphasis_detection:
        for match in _CAPS_WORD_RE.finditer(sentence):
            hints.append(ProsodyHint(type="emphasis", position=match.start(), value="strong"))
        for pattern in _INTENSIFIER_RES:
            for match in pattern.finditer(sentence):
                hints.append(ProsodyHint(type="emphasis", position=match.start(), value="moderate"))

    if emotional_tone in TONE_ADJUSTMENTS:
        rate, pitch = TONE_ADJUSTMENTS[emotional_tone]
        hints.append(ProsodyHint(type="rate", position=0, value=rate))
        hints.append(ProsodyHint(type="pitch", position=0, value=pitch))
    elif emotional_tone == "dramatic":
        hints.append(_pause(0, DRAMATIC_PAUSE_MS, multiplier))

    if content_type in CONTENT_RATES:
        hints.append(ProsodyHint(type="rate", position=0, value=CONTENT_RATES[content_type]))
    elif content_type == "list":
        hints.append(_pause(length, LIST_PAUSE_MS, multiplier))

    if settings.natural_pacing and len(sentence.split()) > BREATH_WORD_THRESHOLD:
        hints.append(_pause(length // 2, BREATH_PAUSE_MS, multiplier))

    return hints


def analyze_text(text: str, settings: ProsodySettings | None = None) -> list[TextSegment]:
    """Segment, classify and annotate *text*."""
    if settings is None:
        settings = ProsodySettings()

    segments = []
    for sentence, start, end in locate_sentences(text):
        sentence_type = detect_sentence_type(sentence)
        emotional_tone = detect_emotional_tone(sentence)
        content_type = detect_content_type(sentence)
        hints = generate_prosody_hints(
            sentence, sentence_type, emotional_tone, content_type, settings,
        )
        segments.append(TextSegment(
            text=sentence,
            start_index=start,
            end_index=end,
            sentence_type=sentence_type,
            emotional_tone=emotional_tone,
            content_type=content_type,
            prosody_hints=tuple(hints),
        ))
    return segments


def plain_segments(text: str) -> list[TextSegment]:
    """Sentence split with no classification or hints (prosody disabled)."""
    return [
        TextSegment(text=sentence, start_index=start, end_index=end)
        for sentence, start, end in locate_sentences(text)
    ]


def get_pauses_for_segment(segment: TextSegment) -> list[tuple[int, int]]:
    """Return ``(position, duration_ms)`` for each pause hint, sorted by position."""
    pauses = [
        (hint.position, hint.duration)
        for hint in segment.prosody_hints
        if hint.type == "pause" and hint.duration
    ]
    return sorted(pauses, key=lambda p: p[0])


def segment_pause_ms(segment: TextSegment) -> int:
    """Silence to leave after *segment* before the next one starts.

    The longest pause hint within the last few characters wins; segments
    without one get the default gap.
    """
    threshold = len(segment.text) - END_PAUSE_WINDOW
    end_pauses = [d for pos, d in get_pauses_for_segment(segment) if pos >= threshold]
    if end_pauses:
        return max(end_pauses)
    return DEFAULT_SEGMENT_PAUSE_MS


def format_segments(segments: list[TextSegment]) -> str:
    """Format analyzed segments as a human-readable preview.

    Example output::

        [1] question/neutral/narrative pause=400ms "Comment allez-vous?"
            pitch@14 +10%
            pause@18 400ms
    """
    lines = []
    for i, seg in enumerate(segments, start=1):
        lines.append(
            f"[{i}] {seg.sentence_type}/{seg.emotional_tone}/{seg.content_type} "
            f'pause={segment_pause_ms(seg)}ms "{seg.text[:80]}"'
        )
        for hint in seg.prosody_hints:
            value = f"{hint.duration}ms" if hint.type == "pause" else hint.value
            lines.append(f"    {hint.type}@{hint.position} {value}")
    return "\n".join(lines)
