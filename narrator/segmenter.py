"""Split raw text into sentence-level chunks with character offsets."""

import re

# A run of non-terminal characters closed by one or more terminators.
# Leading terminators (e.g. a stray "...") form a chunk of their own.
_SENTENCE_RE = re.compile(r"[^.!?\n]*[.!?\n]+")


def _append_span(spans: list[tuple[str, int, int]], text: str, start: int, end: int) -> None:
    chunk = text[start:end]
    stripped = chunk.strip()
    if not stripped:
        return
    offset = start + len(chunk) - len(chunk.lstrip())
    spans.append((stripped, offset, offset + len(stripped)))


def locate_sentences(text: str) -> list[tuple[str, int, int]]:
    """Return ``(sentence, start, end)`` triples in reading order.

    Terminal punctuation stays with its sentence, trailing text without
    punctuation becomes the last sentence, and whitespace-only chunks are
    dropped. Offsets point at the trimmed sentence inside *text*.
    """
    spans: list[tuple[str, int, int]] = []
    if not text:
        return spans

    pos = 0
    for match in _SENTENCE_RE.finditer(text):
        _append_span(spans, text, match.start(), match.end())
        pos = match.end()

    _append_span(spans, text, pos, len(text))
    return spans


def split_sentences(text: str) -> list[str]:
    """Split *text* into trimmed, non-empty sentences."""
    return [sentence for sentence, _, _ in locate_sentences(text)]
