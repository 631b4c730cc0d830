"""Rule-based sentence classification: type, emotional tone, content type.

Keyword lists are French-oriented. Matching is by substring on the
lowercased sentence, so inflected forms ("superbe", "tristesse") count.
"""

import re

EXCITED_WORDS = (
    "génial", "super", "incroyable", "fantastique",
    "excellent", "bravo", "hourra", "wow",
)
SERIOUS_WORDS = ("important", "crucial", "essentiel", "critique", "attention", "grave")
SAD_WORDS = ("triste", "malheureux", "désolé", "regret", "peine", "dommage")

# Leading digit, dash, bullet or asterisk, or a letter followed by ")"
LIST_MARKER_RE = re.compile(r"^[\d\-•·*]|^[a-zA-Z]\)")

_UPPERCASE_RUN_RE = re.compile(r"[A-Z]{2,}")
_TECHNICAL_RE = re.compile(r"\d+%|\d+°|°C|°F|\d+km|\d+m")
_QUOTE_CHARS = ('"', "«", "»")


def is_list_item(sentence: str) -> bool:
    return bool(LIST_MARKER_RE.search(sentence.strip()))


def detect_sentence_type(sentence: str) -> str:
    """Question, then exclamation, then list marker, else statement."""
    if "?" in sentence:
        return "question"
    if "!" in sentence:
        return "exclamation"
    if is_list_item(sentence):
        return "list-item"
    return "statement"


def detect_emotional_tone(sentence: str) -> str:
    """First matching tone wins: excited, serious, sad, dramatic, neutral."""
    lower = sentence.lower()

    if any(word in lower for word in EXCITED_WORDS) or "!" in sentence:
        return "excited"
    if any(word in lower for word in SERIOUS_WORDS):
        return "serious"
    if any(word in lower for word in SAD_WORDS):
        return "sad"
    if "..." in sentence or _UPPERCASE_RUN_RE.search(sentence):
        return "dramatic"
    return "neutral"


def detect_content_type(sentence: str) -> str:
    """Dialogue, then technical, then list, else narrative."""
    if any(quote in sentence for quote in _QUOTE_CHARS):
        return "dialogue"
    if _TECHNICAL_RE.search(sentence):
        return "technical"
    if is_list_item(sentence):
        return "list"
    return "narrative"
