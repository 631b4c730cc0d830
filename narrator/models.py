"""Data models for segmentation, prosody and narration playback."""

from dataclasses import asdict, dataclass, field

from narrator.constants import (
    DEFAULT_INTENSITY,
    DEFAULT_LANGUAGE,
    DEFAULT_PAUSE_MULTIPLIER,
    DEFAULT_PERSONALITY,
    INTENSITY_RANGE,
    PAUSE_MULTIPLIER_RANGE,
    PITCH_RANGE,
    RATE_RANGE,
    VOLUME_RANGE,
)


def clamp(value: float, bounds: tuple[float, float]) -> float:
    low, high = bounds
    return max(low, min(high, value))


@dataclass(frozen=True)
class ProsodyHint:
    type: str                      # "pause", "emphasis", "pitch", "rate" or "volume"
    position: int                  # character offset within the segment
    value: float | str             # multiplier, "+10%" pitch delta or emphasis level
    duration: int | None = None    # ms, pause hints only


@dataclass(frozen=True)
class TextSegment:
    text: str
    start_index: int
    end_index: int
    sentence_type: str = "statement"    # statement, question, exclamation, list-item
    emotional_tone: str = "neutral"     # neutral, excited, serious, sad, dramatic
    content_type: str = "narrative"     # narrative, dialogue, technical, list
    prosody_hints: tuple[ProsodyHint, ...] = ()

    @property
    def word_count(self) -> int:
        return len(self.text.split())


@dataclass
class ProsodySettings:
    """User prosody preferences.

    ``intensity`` and ``pause_multiplier`` are clamped to their documented
    ranges whenever they are assigned, including at construction.
    """

    enabled: bool = True
    intensity: float = DEFAULT_INTENSITY
    pause_multiplier: float = DEFAULT_PAUSE_MULTIPLIER
    emphasis_detection: bool = True
    breathing_sounds: bool = False
    natural_pacing: bool = True

    def __setattr__(self, name, value):
        if name == "intensity":
            value = clamp(float(value), INTENSITY_RANGE)
        elif name == "pause_multiplier":
            value = clamp(float(value), PAUSE_MULTIPLIER_RANGE)
        super().__setattr__(name, value)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "ProsodySettings":
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)


@dataclass(frozen=True)
class SpeechParams:
    pitch: float = 1.0
    rate: float = 1.0
    volume: float = 1.0

    def clamped(self) -> "SpeechParams":
        return SpeechParams(
            pitch=clamp(self.pitch, PITCH_RANGE),
            rate=clamp(self.rate, RATE_RANGE),
            volume=clamp(self.volume, VOLUME_RANGE),
        )


@dataclass
class VoiceSettings:
    language: str = DEFAULT_LANGUAGE
    pitch: float = 1.0
    rate: float = 1.0
    volume: float = 1.0
    voice: str | None = None                       # engine voice identifier
    personality: str | None = DEFAULT_PERSONALITY  # voice profile id
    prosody: ProsodySettings = field(default_factory=ProsodySettings)

    def speech_params(self) -> SpeechParams:
        return SpeechParams(self.pitch, self.rate, self.volume).clamped()

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "VoiceSettings":
        """Build settings from *data*, ignoring unknown keys.

        Raises TypeError or ValueError when a known field has the wrong type.
        """
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        for name in ("pitch", "rate", "volume"):
            value = known.get(name, 1.0)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise TypeError(f"{name} must be a number, got {value!r}")
        prosody = known.pop("prosody", None) or {}
        if not isinstance(prosody, dict):
            raise TypeError(f"prosody must be an object, got {prosody!r}")
        return cls(**known, prosody=ProsodySettings.from_dict(prosody))


@dataclass(frozen=True)
class SpeechOptions:
    """Everything a speech engine needs for one utterance."""

    language: str
    pitch: float
    rate: float
    volume: float
    voice_id: str | None = None


@dataclass(frozen=True)
class Voice:
    identifier: str
    name: str
    language: str
    gender: str = "neutral"
    quality: str = "neural"


@dataclass(frozen=True)
class WordBoundary:
    text: str
    word_index: int
    offset_ms: float
    duration_ms: float = 0.0


@dataclass(frozen=True)
class ControlResult:
    success: bool
    reason: str = ""


@dataclass(frozen=True)
class NarrationUpdate:
    event: str                     # segment, word, pause, paused, resumed, stopped, error
    current_segment_index: int
    highlighted_word_index: int
    is_speaking: bool
    pause_ms: int | None = None
    error: str | None = None
