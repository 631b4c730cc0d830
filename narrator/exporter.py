"""Export rendered narration with metadata tags and a provenance manifest."""

import json
import os
from datetime import datetime, timezone

from pydub import AudioSegment

from narrator.constants import OUTPUT_BITRATE, VERSION


def manifest_path_for(output_path: str) -> str:
    return os.path.splitext(output_path)[0] + ".json"


def export(
    assembled: AudioSegment,
    output_path: str,
    metadata: dict,
    settings: dict,
    segment_count: int,
    audio_format: str = "mp3",
) -> str:
    """Write *assembled* to *output_path* plus a ``.json`` manifest beside it.

    Returns *output_path*.
    """
    directory = os.path.dirname(output_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    tags = {}
    if metadata.get("title"):
        tags["title"] = metadata["title"]
    if metadata.get("author"):
        tags["artist"] = metadata["author"]

    kwargs = {"format": audio_format, "tags": tags}
    if audio_format == "mp3":
        kwargs["bitrate"] = OUTPUT_BITRATE
    assembled.export(output_path, **kwargs)

    manifest = {
        "source": metadata.get("source", ""),
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "narrator_version": VERSION,
        "metadata": {
            "title": metadata.get("title", ""),
            "author": metadata.get("author", ""),
        },
        "settings": settings,
        "stats": {
            "segments": segment_count,
            "duration_seconds": round(len(assembled) / 1000, 1),
        },
    }
    with open(manifest_path_for(output_path), "w", encoding="utf-8") as f:
        json.dump(manifest, f, indent=2, ensure_ascii=False)

    return output_path
