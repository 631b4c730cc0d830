"""CLI interface with subcommand routing."""

import argparse
import asyncio
import json
import logging
import os
import shutil
import sys
from dataclasses import asdict

from narrator.constants import OUTPUT_DIR, PLAYER_COMMAND, SETTINGS_PATH, VERSION
from narrator.engine import EdgeSpeechEngine, SpeechError
from narrator.prosody import format_segments
from narrator.render import generate_profile_demos, render_narration
from narrator.sequencer import NarrationSequencer, prepare_segments
from narrator.settings import SettingsStore
from narrator.speech import generate_ssml
from narrator.voices import VOICE_POOL, get_all_voice_profiles, get_recommended_profile


def _fail(message: str):
    print(f"Error: {message}", file=sys.stderr)
    raise SystemExit(1)


def _check_tool(name: str, hint: str):
    if not shutil.which(name):
        print(f"Error: {name} is required but not found.", file=sys.stderr)
        print(hint, file=sys.stderr)
        raise SystemExit(1)


def _read_text(path: str) -> str:
    """Read input text from *path*, or stdin for ``-``. Empty input is an error."""
    if path == "-":
        text = sys.stdin.read()
    else:
        if not os.path.exists(path):
            _fail(f"File not found: {path}")
        with open(path, encoding="utf-8") as f:
            text = f.read()
    if not text.strip():
        _fail(f"No text to narrate in: {path}")
    return text


def _store(args) -> SettingsStore:
    return SettingsStore(args.settings)


def cmd_analyze(args):
    """Show segments, classifications and prosody hints."""
    settings = _store(args).load()
    segments = prepare_segments(_read_text(args.file), settings)
    if args.json:
        print(json.dumps([asdict(s) for s in segments], indent=2, ensure_ascii=False))
        return
    print(format_segments(segments))


def cmd_ssml(args):
    settings = _store(args).load()
    segments = prepare_segments(_read_text(args.file), settings)
    print(generate_ssml(segments))


async def _narrate(text: str, settings) -> list[str]:
    errors = []
    sequencer = None

    def on_update(update):
        if update.event == "segment":
            segment = sequencer.segments[update.current_segment_index]
            print(f"[{update.current_segment_index + 1}/{len(sequencer.segments)}] {segment.text}")
        elif update.event == "error":
            errors.append(update.error)

    sequencer = NarrationSequencer(EdgeSpeechEngine(), on_update=on_update)
    try:
        await sequencer.start(text, settings)
        await sequencer.wait()
    finally:
        await sequencer.stop()
    return errors


def cmd_speak(args):
    """Narrate text through the speakers."""
    _check_tool(PLAYER_COMMAND[0], "Install ffmpeg (which provides ffplay) to play narration.")
    text = _read_text(args.file)
    settings = _store(args).load()
    try:
        errors = asyncio.run(_narrate(text, settings))
    except KeyboardInterrupt:
        print("\nStopped.")
        return
    if errors:
        _fail(errors[0])


def cmd_render(args):
    """Render narration to an audio file."""
    _check_tool("ffmpeg", "Install with: brew install ffmpeg")
    text = _read_text(args.file)
    settings = _store(args).load()
    try:
        output_path = render_narration(text, settings, args.output, title=args.title)
    except SpeechError as e:
        _fail(str(e))
    print(f"Done: {output_path}")


def cmd_demo(args):
    """Render one sample per voice profile."""
    _check_tool("ffmpeg", "Install with: brew install ffmpeg")
    settings = _store(args).load()
    print(f"Generating profile demos in {args.output_dir}/")
    try:
        paths = generate_profile_demos(args.output_dir, settings)
    except SpeechError as e:
        _fail(str(e))
    print(f"Done: {len(paths)} demos")


def cmd_voices(args):
    """List available voices."""
    if args.online:
        try:
            voices = asyncio.run(EdgeSpeechEngine().get_available_voices(args.language))
        except Exception as e:
            _fail(f"Could not fetch voices: {e}")
        names = [f"{v.identifier} ({v.gender})" for v in voices]
    else:
        names = [
            voice
            for locale, voices in VOICE_POOL.items()
            if not args.language or locale.startswith(args.language)
            for voice in voices
        ]

    if args.filter:
        names = [n for n in names if args.filter.lower() in n.lower()]
    if not names:
        print("No matching voices found.")
        return
    print("Available voices:")
    for name in names:
        print(f"  {name}")


def cmd_profiles(args):
    """List voice profiles, or recommend one for a text."""
    if args.recommend:
        print(get_recommended_profile(_read_text(args.recommend)))
        return
    current = _store(args).load().personality
    for profile in get_all_voice_profiles():
        marker = "*" if profile.id == current else " "
        print(f"{marker} {profile.id:<16} {profile.name_fr}: {profile.description_fr}")


def cmd_settings(args):
    store = _store(args)
    if args.action == "set":
        try:
            settings = store.update(args.key, args.value)
        except ValueError as e:
            _fail(str(e))
        print(f"Updated: {args.key}")
    elif args.action == "profile":
        try:
            settings = store.apply_profile(args.profile)
        except ValueError as e:
            _fail(str(e))
        print(f"Profile: {settings.personality}")
    else:
        settings = store.load()
    print(json.dumps(settings.to_dict(), indent=2, ensure_ascii=False))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="narrator",
        description="Narrator: expressive text-to-speech narration with prosody",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument("--settings", default=SETTINGS_PATH, help="Settings file path")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log narration progress")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # analyze
    analyze_parser = subparsers.add_parser("analyze", help="Show segments and prosody hints")
    analyze_parser.add_argument("file", help="Text file, or - for stdin")
    analyze_parser.add_argument("--json", action="store_true", help="Print JSON instead of a summary")
    analyze_parser.set_defaults(func=cmd_analyze)

    # ssml
    ssml_parser = subparsers.add_parser("ssml", help="Print the SSML document for a text")
    ssml_parser.add_argument("file", help="Text file, or - for stdin")
    ssml_parser.set_defaults(func=cmd_ssml)

    # speak
    speak_parser = subparsers.add_parser("speak", help="Narrate a text aloud")
    speak_parser.add_argument("file", help="Text file, or - for stdin")
    speak_parser.set_defaults(func=cmd_speak)

    # render
    render_parser = subparsers.add_parser("render", help="Render narration to an audio file")
    render_parser.add_argument("file", help="Text file, or - for stdin")
    render_parser.add_argument("-o", "--output", required=True, help="Output audio path (.mp3, .wav)")
    render_parser.add_argument("--title", help="Title tag for the output file")
    render_parser.set_defaults(func=cmd_render)

    # demo
    demo_parser = subparsers.add_parser("demo", help="Render a sample for every voice profile")
    demo_parser.add_argument("--output-dir", default=os.path.join(OUTPUT_DIR, "demos"), help="Where to write the demos")
    demo_parser.set_defaults(func=cmd_demo)

    # voices
    voices_parser = subparsers.add_parser("voices", help="List available voices")
    voices_parser.add_argument("--language", help="Locale prefix, e.g. fr-CA or en")
    voices_parser.add_argument("--filter", help="Filter voices by substring")
    voices_parser.add_argument("--online", action="store_true", help="Query the full edge-tts voice list")
    voices_parser.set_defaults(func=cmd_voices)

    # profiles
    profiles_parser = subparsers.add_parser("profiles", help="List voice profiles")
    profiles_parser.add_argument("--recommend", metavar="FILE", help="Recommend a profile for a text")
    profiles_parser.set_defaults(func=cmd_profiles)

    # settings
    settings_parser = subparsers.add_parser("settings", help="Show or change saved settings")
    settings_sub = settings_parser.add_subparsers(dest="action")
    settings_sub.add_parser("show", help="Print current settings")
    set_parser = settings_sub.add_parser("set", help="Set one value, e.g. prosody.intensity 0.8")
    set_parser.add_argument("key", help="Setting key (dotted for prosody fields)")
    set_parser.add_argument("value", help="New value")
    profile_parser = settings_sub.add_parser("profile", help="Apply a voice profile")
    profile_parser.add_argument("profile", help="Profile id")
    settings_parser.set_defaults(func=cmd_settings)

    return parser


def main(argv=None):
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return

    args.func(args)


if __name__ == "__main__":
    main()
