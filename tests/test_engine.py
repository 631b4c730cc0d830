"""Tests for the speech engine interface and the edge-tts engine."""

import asyncio
import os
from unittest.mock import AsyncMock, patch

import pytest

from narrator.engine import EdgeSpeechEngine, SpeechEngine, SpeechError
from narrator.models import SpeechOptions, WordBoundary
from narrator.tts import SynthesisResult

OPTIONS = SpeechOptions(language="fr-CA", pitch=1.0, rate=1.0, volume=1.0)


class MinimalEngine(SpeechEngine):
    async def speak(self, text, options):
        pass

    async def stop(self):
        pass


def test_subscribe_and_emit():
    engine = MinimalEngine()
    received = []
    engine.subscribe("start", received.append)
    engine.emit("start", "payload")
    assert received == ["payload"]


def test_unsubscribe():
    engine = MinimalEngine()
    received = []
    unsubscribe = engine.subscribe("end", received.append)
    unsubscribe()
    unsubscribe()
    engine.emit("end")
    assert received == []


def test_unknown_event_rejected():
    with pytest.raises(ValueError, match="Unknown engine event"):
        MinimalEngine().subscribe("finished", print)


def test_pause_unsupported_by_default():
    engine = MinimalEngine()
    assert asyncio.run(engine.pause()) is False
    assert asyncio.run(engine.resume()) is False
    assert asyncio.run(engine.get_available_voices()) == []
    assert engine.supports_word_boundaries is False


@patch("narrator.engine.shutil.which", return_value=None)
def test_speak_requires_player(mock_which):
    with pytest.raises(SpeechError, match="ffplay is required"):
        asyncio.run(EdgeSpeechEngine().speak("Bonjour", OPTIONS))


@patch("narrator.engine.synthesize", new_callable=AsyncMock)
@patch("narrator.engine.shutil.which", return_value="/usr/bin/ffplay")
def test_synthesis_failure_emits_error(mock_which, mock_synth):
    mock_synth.side_effect = SpeechError("service unavailable")
    engine = EdgeSpeechEngine()
    errors = []
    engine.subscribe("error", errors.append)
    with pytest.raises(SpeechError):
        asyncio.run(engine.speak("Bonjour", OPTIONS))
    assert errors == ["service unavailable"]


@patch("narrator.engine.synthesize", new_callable=AsyncMock)
def test_speak_uses_default_voice(mock_synth):
    mock_synth.return_value = SynthesisResult(audio=b"mp3", boundaries=[])
    engine = EdgeSpeechEngine(player_command=["true"])
    asyncio.run(engine.speak("Bonjour", OPTIONS))
    args = mock_synth.call_args[0]
    assert args[0] == "Bonjour"
    assert args[1] == "fr-CA-SylvieNeural"


@patch("narrator.engine.synthesize", new_callable=AsyncMock)
def test_speak_plays_and_emits_lifecycle(mock_synth):
    mock_synth.return_value = SynthesisResult(
        audio=b"mp3", boundaries=[WordBoundary(text="Bonjour", word_index=0, offset_ms=0.0)],
    )
    engine = EdgeSpeechEngine(player_command=["true"])
    events = []
    engine.subscribe("start", lambda _: events.append("start"))
    engine.subscribe("end", lambda _: events.append("end"))
    asyncio.run(engine.speak("Bonjour", OPTIONS))
    assert events == ["start", "end"]


@patch("narrator.engine.synthesize", new_callable=AsyncMock)
def test_player_failure_raises(mock_synth):
    mock_synth.return_value = SynthesisResult(audio=b"mp3", boundaries=[])
    engine = EdgeSpeechEngine(player_command=["false"])
    errors = []
    engine.subscribe("error", errors.append)
    with pytest.raises(SpeechError, match="status 1"):
        asyncio.run(engine.speak("Bonjour", OPTIONS))
    assert errors == ["Player exited with status 1"]


def test_pause_without_playback():
    engine = EdgeSpeechEngine()
    assert asyncio.run(engine.pause()) is False
    assert asyncio.run(engine.resume()) is False


@pytest.mark.skipif(os.name != "posix", reason="pause signals the player process")
def test_pause_during_synthesis_holds_player():
    """A pause before playback starts leaves the player stopped until resume."""
    async def scenario():
        gate = asyncio.Event()

        async def slow_synthesize(text, voice, params):
            await gate.wait()
            return SynthesisResult(audio=b"mp3", boundaries=[])

        with patch("narrator.engine.synthesize", side_effect=slow_synthesize):
            engine = EdgeSpeechEngine(player_command=["sh", "-c", "sleep 0.05", "player"])
            task = asyncio.create_task(engine.speak("Bonjour", OPTIONS))
            await asyncio.sleep(0)
            paused = await engine.pause()
            gate.set()
            await asyncio.sleep(0.3)
            held = engine._process is not None and not task.done()
            resumed = await engine.resume()
            await asyncio.wait_for(task, timeout=5)
        return paused, held, resumed

    assert asyncio.run(scenario()) == (True, True, True)


def test_stop_without_playback():
    asyncio.run(EdgeSpeechEngine().stop())


@patch("narrator.engine.edge_tts.list_voices", new_callable=AsyncMock)
def test_available_voices_filtered(mock_list):
    mock_list.return_value = [
        {"ShortName": "fr-CA-SylvieNeural", "Locale": "fr-CA", "Gender": "Female",
         "FriendlyName": "Microsoft Sylvie Online (Natural) - French (Canada)"},
        {"ShortName": "en-US-GuyNeural", "Locale": "en-US", "Gender": "Male",
         "FriendlyName": "Microsoft Guy Online (Natural) - English (United States)"},
    ]
    voices = asyncio.run(EdgeSpeechEngine().get_available_voices("fr"))
    assert [v.identifier for v in voices] == ["fr-CA-SylvieNeural"]
    assert voices[0].gender == "female"
    assert voices[0].language == "fr-CA"
