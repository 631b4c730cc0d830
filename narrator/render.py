"""Offline rendering: narrate text into an audio file instead of the speakers."""

import copy
import logging
import os

from narrator.assembly import assemble
from narrator.effects import process_clips
from narrator.exporter import export
from narrator.models import VoiceSettings
from narrator.sequencer import base_speech_params, prepare_segments, segment_speech_params
from narrator.tts import synthesize_clip
from narrator.voices import default_voice_for, get_all_voice_profiles

logger = logging.getLogger(__name__)


def render_narration(
    text: str,
    settings: VoiceSettings,
    output_path: str,
    title: str | None = None,
) -> str:
    """Synthesize every segment of *text* and export the joined narration.

    The audio format follows the extension of *output_path*. Raises
    ValueError when *text* has nothing to say and SpeechError when
    synthesis fails.
    """
    segments = prepare_segments(text, settings)
    if not segments:
        raise ValueError("Nothing to narrate")

    voice = settings.voice or default_voice_for(settings.language)
    base = base_speech_params(settings)

    print(f"Synthesizing {len(segments)} segments with {voice}...")
    clips = []
    for i, segment in enumerate(segments):
        params = segment_speech_params(base, segment, settings)
        logger.debug("Segment %d/%d: %s", i + 1, len(segments), segment.text[:50])
        clips.append(synthesize_clip(segment.text, voice, params))

    clips = process_clips(segments, clips)
    prosody = settings.prosody.enabled
    assembled = assemble(
        segments, clips,
        breathing=prosody and settings.prosody.breathing_sounds,
        prosody=prosody,
    )

    audio_format = os.path.splitext(output_path)[1].lstrip(".").lower() or "mp3"
    return export(
        assembled,
        output_path,
        {"title": title or "", "author": ""},
        settings.to_dict(),
        len(segments),
        audio_format=audio_format,
    )


def generate_profile_demos(
    output_dir: str,
    settings: VoiceSettings,
    audio_format: str = "mp3",
) -> list[str]:
    """Render each profile's sample text with that profile applied.

    Returns the list of generated file paths.
    """
    os.makedirs(output_dir, exist_ok=True)
    paths = []
    for profile in get_all_voice_profiles():
        demo_settings = copy.deepcopy(settings)
        demo_settings.personality = profile.id
        demo_settings.prosody = profile.prosody_settings()

        path = os.path.join(output_dir, f"{profile.id}.{audio_format}")
        print(f"  {profile.name_fr}: {path}")
        paths.append(render_narration(profile.sample_text, demo_settings, path, title=profile.name_fr))
    return paths
