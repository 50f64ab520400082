"""Text analysis for the in-memory search stack.

Field text and queries go through the same two steps before they reach the
index or the scorer:

1. ``normalize_text`` strips every character that is neither a word character
   nor whitespace and lowercases the rest. Word characters are Unicode
   aware, so accented letters survive.
2. ``stem`` reduces each whitespace-separated token to a root form using a
   compact, Porter-flavoured English rule set.
"""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Any


_PUNCTUATION_PATTERN = re.compile(r"[^\w\s]")

# Porter steps 2 and 3. The first matching suffix is replaced and stemming stops.
_DERIVATIONAL_SUFFIXES: tuple[tuple[str, str], ...] = (
    ("ational", "ate"),
    ("tional", "tion"),
    ("enci", "ence"),
    ("anci", "ance"),
    ("izer", "ize"),
    ("bli", "ble"),
    ("alli", "al"),
    ("entli", "ent"),
    ("eli", "e"),
    ("ousli", "ous"),
    ("ization", "ize"),
    ("ation", "ate"),
    ("ator", "ate"),
    ("alism", "al"),
    ("iveness", "ive"),
    ("fulness", "ful"),
    ("ousness", "ous"),
    ("aliti", "al"),
    ("iviti", "ive"),
    ("biliti", "ble"),
    ("logi", "log"),
    ("icate", "ic"),
    ("ative", ""),
    ("alize", "al"),
    ("iciti", "ic"),
    ("ical", "ic"),
    ("ful", ""),
    ("ness", ""),
)

# Porter step 4. The first matching suffix is stripped and stemming stops.
_REMOVABLE_SUFFIXES: tuple[str, ...] = (
    "al",
    "ance",
    "ence",
    "er",
    "ic",
    "able",
    "ible",
    "ant",
    "ement",
    "ment",
    "ent",
    "ou",
    "ism",
    "ate",
    "iti",
    "ous",
    "ive",
    "ize",
)

_PAST_CONTINUOUS_SUFFIXES: tuple[str, ...] = ("edly", "ingly", "ed", "ing")
_VOWELS = "aeiou"


def normalize_text(text: Any) -> Any:
    """Remove punctuation and lowercase ``text``.

    Non-string values are returned unchanged so callers can pass raw document
    values without checking their type first.

    Examples:
        >>> normalize_text("The Great Gatsby!")
        'the great gatsby'
        >>> normalize_text(1925)
        1925
    """
    if not isinstance(text, str):
        return text
    return _PUNCTUATION_PATTERN.sub("", text).lower()


def tokenize(text: str) -> list[str]:
    """Normalize ``text`` and split it on whitespace, dropping empty tokens."""
    return normalize_text(text).split()


def stem(word: str) -> str:
    """Reduce a normalized token to its stem.

    Examples:
        >>> stem("connected")
        'connect'
        >>> stem("running")
        'run'
        >>> stem("happy")
        'happi'
    """
    word = _strip_plural(word)
    word = _strip_past_continuous(word)
    if word.endswith("y"):
        word = word[:-1] + "i"

    for suffix, replacement in _DERIVATIONAL_SUFFIXES:
        if word.endswith(suffix):
            return word[: -len(suffix)] + replacement

    for suffix in _REMOVABLE_SUFFIXES:
        if word.endswith(suffix):
            return word[: -len(suffix)]

    if word.endswith("e"):
        word = word[:-1]
    if word.endswith("ll"):
        word = word[:-1]
    return word


def _strip_plural(word: str) -> str:
    if word.endswith("sses"):
        return word[:-4] + "ss"
    if word.endswith("ies"):
        return word[:-3] + "ss"
    if len(word) > 1 and word.endswith("s") and word[-2] != "s":
        return word[:-1]
    return word


def _strip_past_continuous(word: str) -> str:
    for suffix in ("eedly", "eed"):
        if word.endswith(suffix):
            return word[: -len(suffix)] + "ee"

    for suffix in _PAST_CONTINUOUS_SUFFIXES:
        if word.endswith(suffix):
            base = word[: -len(suffix)]
            break
    else:
        return word

    if base.endswith(("at", "bl", "iz")):
        return base + "e"
    if _ends_with_double_consonant(base):
        return base[:-1]
    if _ends_with_cvc(base):
        return base + "e"
    return base


def _ends_with_double_consonant(word: str) -> bool:
    return len(word) >= 2 and word[-1] == word[-2] and word[-1] not in "aeiouylsz"


def _ends_with_cvc(word: str) -> bool:
    # y counts as a vowel in the middle position only
    if len(word) < 3:
        return False
    return word[-3] not in _VOWELS and word[-2] in _VOWELS + "y" and word[-1] not in _VOWELS + "wxy"


def analyze_text(text: str) -> list[str]:
    """Return the stems of every token in ``text`` in order."""
    return [stem(token) for token in tokenize(text)]


@dataclass(frozen=True)
class AnalyzedQuery:
    """A query split into normalized words and their stems.

    ``words`` keep the normalized surface form, which number and boolean
    fields compare against. ``stems`` drive index lookups and text scoring.
    """

    text: str
    words: tuple[str, ...]
    stems: tuple[str, ...]

    @property
    def phrase(self) -> str:
        """Space-joined stems used for phrase matching."""
        return " ".join(self.stems)

    def __bool__(self) -> bool:
        return bool(self.stems)


def analyze_query(query: str) -> AnalyzedQuery:
    """Split ``query`` on whitespace, normalize each word and stem it."""
    words = tuple(word for word in (normalize_text(raw) for raw in query.split()) if word)
    return AnalyzedQuery(text=query, words=words, stems=tuple(stem(word) for word in words))
