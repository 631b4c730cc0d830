"""All magic numbers and configuration constants."""

import os

COMMA_PAUSE_MS = 200                # ms pause after each comma
TERMINAL_PAUSE_MS = 400             # ms pause at sentence-final . ! ?
ELLIPSIS_PAUSE_MS = 600             # ms pause at each "..."
DRAMATIC_PAUSE_MS = 300             # ms lead-in pause for dramatic sentences
LIST_PAUSE_MS = 300                 # ms trailing pause after list items
BREATH_PAUSE_MS = 250               # ms breathing pause in long sentences
BREATH_WORD_THRESHOLD = 20          # words; sentences longer than this get a breath
DEFAULT_SEGMENT_PAUSE_MS = 300      # ms between segments when no end pause applies
END_PAUSE_WINDOW = 5                # chars from segment end that count as an end pause
SSML_BREAK_WINDOW = 2               # chars from segment end that produce an SSML <break>
QUESTION_PITCH_OFFSET = 5           # chars before segment end for the rising pitch hint

PITCH_RANGE = (0.5, 2.0)
RATE_RANGE = (0.5, 2.0)
VOLUME_RANGE = (0.0, 1.0)
INTENSITY_RANGE = (0.0, 1.0)
PAUSE_MULTIPLIER_RANGE = (0.5, 2.0)

DEFAULT_INTENSITY = 0.7
DEFAULT_PAUSE_MULTIPLIER = 1.0
DEFAULT_LANGUAGE = "fr-CA"
DEFAULT_PERSONALITY = "professionnel"
WORDS_PER_MINUTE = 150              # narration pace at rate 1.0, drives the highlight clock

TTS_RETRY_COUNT = 3                 # max retries per synthesized segment
TTS_RETRY_BASE_DELAY = 1.0          # seconds, base delay for exponential backoff
PITCH_HZ_PER_UNIT = 100             # edge-tts pitch offset in Hz for a pitch factor delta of 1.0
PLAYER_COMMAND = ["ffplay", "-nodisp", "-autoexit", "-loglevel", "quiet"]

REVERB_ROOM_SIZE = 0.3              # dialogue reverb room size (0.0–1.0)
REVERB_WET_LEVEL = 0.15             # dialogue reverb dry/wet mix
NORMALIZE_TARGET_DBFS = -20.0       # loudness target for rendered segments
BREATH_MIN_GAP_MS = 350             # shortest gap that gets a breath when breathing sounds are on
BREATH_DURATION_MS = 280            # length of a synthesized breath
BREATH_GAIN_DB = -32                # breath level relative to full scale
SAMPLE_RATE = 24000                 # edge-tts output rate, used for generated audio

OUTPUT_BITRATE = "192k"             # MP3 output bitrate
OUTPUT_DIR = "output"
SETTINGS_PATH = os.path.join(os.path.expanduser("~"), ".narrator", "settings.json")
VERSION = "0.1.0"
