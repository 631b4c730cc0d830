"""Text normalisation for Canadian French narration."""

import re

# Title abbreviations followed by whitespace → spoken form
TITLE_EXPANSIONS = [
    (re.compile(r"\bM\.\s"), "Monsieur "),
    (re.compile(r"\bMme\.\s"), "Madame "),
    (re.compile(r"\bMlle\.\s"), "Mademoiselle "),
    (re.compile(r"\bDr\.\s"), "Docteur "),
    (re.compile(r"\bSte\.\s"), "Sainte "),
    (re.compile(r"\bSt\.\s"), "Saint "),
]

# Quebec speakers say "quatre-vingt-dix", never "nonante"
NINETIES = {
    "90": "quatre-vingt-dix",
    "91": "quatre-vingt-onze",
    "92": "quatre-vingt-douze",
    "93": "quatre-vingt-treize",
    "94": "quatre-vingt-quatorze",
    "95": "quatre-vingt-quinze",
    "96": "quatre-vingt-seize",
    "97": "quatre-vingt-dix-sept",
    "98": "quatre-vingt-dix-huit",
    "99": "quatre-vingt-dix-neuf",
}

_RE_DOLLARS = re.compile(r"(\d+)\$")
_RE_NINETIES = re.compile(r"\b9\d\b")
_RE_WHITESPACE = re.compile(r"\s+")


def preprocess_canadian_french(text: str) -> str:
    """Expand abbreviations, currency and 90–99 for a fr-CA voice.

    Whitespace (newlines included) is collapsed to single spaces, so the
    result no longer carries paragraph breaks.
    """
    t = text
    for pattern, expansion in TITLE_EXPANSIONS:
        t = pattern.sub(expansion, t)

    t = _RE_DOLLARS.sub(r"\1 dollars", t)
    t = _RE_NINETIES.sub(lambda m: NINETIES[m.group(0)], t)
    t = _RE_WHITESPACE.sub(" ", t)
    return t.strip()
