"""Integration tests: text in, narration events and audio out."""

import asyncio
from unittest.mock import MagicMock, patch

from narrator.models import VoiceSettings
from narrator.prosody import analyze_text
from narrator.render import render_narration
from narrator.sequencer import NarrationSequencer
from narrator.speech import generate_ssml

from conftest import FakeSpeechEngine, silent_clip

STORY = (
    "Il était une fois... un petit village. "
    "« Bonjour », dit M. Tremblay. "
    "Il fait 25°C aujourd'hui! "
    "Est-ce que tout va bien?"
)


async def instant_sleep(seconds):
    await asyncio.sleep(0)


def test_story_analysis():
    segments = analyze_text(STORY)
    assert len(segments) == 6
    assert segments[0].emotional_tone == "dramatic"
    assert segments[2].content_type == "dialogue"
    assert segments[-1].sentence_type == "question"


def test_story_ssml_is_single_document():
    ssml = generate_ssml(analyze_text(STORY))
    assert ssml.startswith("<speak>")
    assert ssml.endswith("</speak>")
    assert ssml.count("<speak>") == 1
    assert "« Bonjour », dit M." in ssml


def test_story_narration_events():
    """Every segment is spoken once, separated by pause events."""
    engine = FakeSpeechEngine()
    updates = []

    async def scenario():
        sequencer = NarrationSequencer(engine, on_update=updates.append, sleep=instant_sleep)
        await sequencer.start(STORY, VoiceSettings())
        await sequencer.wait()
        return sequencer

    sequencer = asyncio.run(scenario())

    spoken = [text for text, _ in engine.spoken]
    assert spoken == [s.text for s in sequencer.segments]
    assert "Monsieur Tremblay" in " ".join(spoken)
    segment_events = [u.current_segment_index for u in updates if u.event == "segment"]
    assert segment_events == list(range(len(spoken)))
    assert len([u for u in updates if u.event == "pause"]) == len(spoken) - 1
    assert updates[-1].event == "stopped"


@patch("narrator.tts.edge_tts.Communicate")
@patch("narrator.tts.AudioSegment.from_file", return_value=silent_clip(200))
def test_story_render(mock_from_file, mock_comm, tmp_path):
    """Render through the synthesis layer with edge-tts mocked out."""
    def factory(text, voice, **kwargs):
        mock = MagicMock()
        async def stream():
            yield {"type": "audio", "data": b"mp3"}
        mock.stream = stream
        return mock

    mock_comm.side_effect = factory
    output = tmp_path / "conte.wav"
    render_narration(STORY, VoiceSettings(), str(output))
    assert output.exists()
    voices = {call[0][1] for call in mock_comm.call_args_list}
    assert voices == {"fr-CA-SylvieNeural"}
