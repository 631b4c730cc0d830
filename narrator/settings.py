"""Persisted voice and prosody settings (JSON on disk)."""

import json
import logging
import os

from narrator.constants import SETTINGS_PATH
from narrator.models import VoiceSettings
from narrator.voices import get_voice_profile

logger = logging.getLogger(__name__)

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


def _coerce(key: str, raw: str, current):
    """Parse the CLI string *raw* into the type of the *current* value."""
    if isinstance(current, bool):
        lowered = raw.strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise ValueError(f"Invalid boolean for {key}: {raw}")
    if isinstance(current, (int, float)):
        try:
            return float(raw)
        except ValueError:
            raise ValueError(f"Invalid number for {key}: {raw}") from None
    if raw.strip().lower() in ("", "none", "null"):
        return None
    return raw


class SettingsStore:
    """Load and save ``VoiceSettings`` at *path*.

    A missing file gives defaults. So does a malformed one, with a
    warning; the next ``save`` overwrites it.
    """

    def __init__(self, path: str = SETTINGS_PATH):
        self.path = path

    def load(self) -> VoiceSettings:
        if not os.path.exists(self.path):
            return VoiceSettings()
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError:
            logger.warning("Malformed settings file: %s, using defaults", self.path)
            return VoiceSettings()
        if not isinstance(data, dict):
            logger.warning("Malformed settings file: %s, using defaults", self.path)
            return VoiceSettings()
        try:
            return VoiceSettings.from_dict(data)
        except (TypeError, ValueError) as e:
            logger.warning("Malformed settings file: %s (%s), using defaults", self.path, e)
            return VoiceSettings()

    def save(self, settings: VoiceSettings) -> str:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(settings.to_dict(), f, indent=2, ensure_ascii=False)
        return self.path

    def update(self, key: str, value: str) -> VoiceSettings:
        """Set one field by dotted key (``rate``, ``prosody.intensity``) and save.

        Raises ValueError for unknown keys or unparseable values.
        """
        settings = self.load()
        target = settings
        *parents, name = key.split(".")
        for parent in parents:
            if parent != "prosody" or target is not settings:
                raise ValueError(f"Unknown setting: {key}")
            target = settings.prosody
        if name == "prosody" or name not in type(target).__dataclass_fields__:
            raise ValueError(f"Unknown setting: {key}")

        setattr(target, name, _coerce(key, value, getattr(target, name)))
        self.save(settings)
        logger.info("Updated setting %s", key)
        return settings

    def apply_profile(self, profile_id: str) -> VoiceSettings:
        """Switch to *profile_id*, taking its prosody preset. Keeps ``enabled``."""
        profile = get_voice_profile(profile_id)
        if profile is None:
            raise ValueError(f"Unknown voice profile: {profile_id}")

        settings = self.load()
        prosody = profile.prosody_settings()
        prosody.enabled = settings.prosody.enabled
        settings.personality = profile.id
        settings.prosody = prosody
        self.save(settings)
        return settings
