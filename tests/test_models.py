"""Tests for constants and models."""

from narrator import constants
from narrator.models import ProsodySettings, SpeechParams, TextSegment, VoiceSettings


def test_prosody_settings_clamp_on_construction():
    settings = ProsodySettings(intensity=1.5, pause_multiplier=5)
    assert settings.intensity == 1.0
    assert settings.pause_multiplier == 2.0


def test_prosody_settings_clamp_on_assignment():
    settings = ProsodySettings()
    settings.intensity = -0.2
    settings.pause_multiplier = 0.1
    assert settings.intensity == 0.0
    assert settings.pause_multiplier == 0.5


def test_speech_params_clamped():
    params = SpeechParams(pitch=3.0, rate=0.1, volume=-1.0).clamped()
    assert params == SpeechParams(pitch=2.0, rate=0.5, volume=0.0)


def test_voice_settings_defaults():
    settings = VoiceSettings()
    assert settings.language == "fr-CA"
    assert settings.personality == "professionnel"
    assert settings.prosody.enabled


def test_voice_settings_round_trip():
    settings = VoiceSettings(rate=1.2, voice="fr-CA-JeanNeural", prosody=ProsodySettings(intensity=0.4))
    assert VoiceSettings.from_dict(settings.to_dict()) == settings


def test_voice_settings_ignore_unknown_keys():
    settings = VoiceSettings.from_dict({"rate": 0.8, "theme": "dark", "prosody": {"glow": 1}})
    assert settings.rate == 0.8
    assert settings.prosody == ProsodySettings()


def test_word_count():
    segment = TextSegment(text="Un deux  trois.", start_index=0, end_index=15)
    assert segment.word_count == 3


def test_constants_exist():
    """All module-level constants are defined."""
    expected = [
        "COMMA_PAUSE_MS",
        "TERMINAL_PAUSE_MS",
        "ELLIPSIS_PAUSE_MS",
        "DRAMATIC_PAUSE_MS",
        "LIST_PAUSE_MS",
        "BREATH_PAUSE_MS",
        "DEFAULT_SEGMENT_PAUSE_MS",
        "WORDS_PER_MINUTE",
        "TTS_RETRY_COUNT",
        "TTS_RETRY_BASE_DELAY",
        "REVERB_ROOM_SIZE",
        "REVERB_WET_LEVEL",
        "OUTPUT_BITRATE",
        "SETTINGS_PATH",
        "VERSION",
    ]
    for name in expected:
        assert hasattr(constants, name), f"Missing constant: {name}"
