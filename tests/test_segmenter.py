"""Tests for sentence segmentation."""

import re

from narrator.segmenter import locate_sentences, split_sentences


def test_split_on_terminal_punctuation():
    """Each sentence keeps its terminal punctuation."""
    assert split_sentences("Bonjour. Ça va? Oui!") == ["Bonjour.", "Ça va?", "Oui!"]


def test_trailing_text_without_punctuation():
    """Unterminated remainder becomes the last sentence."""
    assert split_sentences("Hello world. No end") == ["Hello world.", "No end"]


def test_newline_ends_sentence():
    assert split_sentences("Ligne un\nLigne deux") == ["Ligne un", "Ligne deux"]


def test_repeated_terminators_stay_together():
    assert split_sentences("Wow!!! Vraiment?!") == ["Wow!!!", "Vraiment?!"]


def test_ellipsis_stays_with_sentence():
    assert split_sentences("Attendez... Quoi?") == ["Attendez...", "Quoi?"]


def test_empty_and_blank_input():
    """Empty or whitespace-only text yields no sentences."""
    assert split_sentences("") == []
    assert split_sentences("   \n\n  ") == []


def test_blank_lines_are_dropped():
    assert split_sentences("Un.\n\n\nDeux.") == ["Un.", "Deux."]


def test_offsets_point_at_sentences():
    """Offsets index the trimmed sentence inside the input text."""
    text = "  Bonjour.   Comment allez-vous?\nBien"
    for sentence, start, end in locate_sentences(text):
        assert text[start:end] == sentence


def test_offsets_are_increasing():
    spans = locate_sentences("Un. Deux. Trois.")
    starts = [start for _, start, _ in spans]
    assert starts == sorted(starts)
    assert spans[1][1] == 4


def test_concatenation_preserves_characters():
    """Joined sentences equal the input with whitespace removed."""
    text = "Bonjour,  le monde.\n\nIl fait beau!  N'est-ce pas?\nFin"
    joined = "".join(split_sentences(text))
    assert re.sub(r"\s", "", joined) == re.sub(r"\s", "", text)
