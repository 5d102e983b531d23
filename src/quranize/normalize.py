from __future__ import annotations
import re
import unicodedata
from typing import List

from .config import APOSTROPHES, SEPARATORS
from .errors import InvalidInputCharacter

WORD_SEPARATOR = " "

# Quranic pause (waqf) marks, written between words
_PAUSE_MARKS = re.compile("[ۖ-ۜ]")
_SPACES = re.compile(r"\s+")
_VOWELS = "aiueo"


def _is_mark(ch: str) -> bool:
    return unicodedata.combining(ch) != 0 or unicodedata.category(ch) == "Mn"


def clean_arabic(text: str, strip_pause_marks: bool = True) -> str:
    """NFC-normalise, drop pause marks and collapse whitespace."""
    text = unicodedata.normalize("NFC", text)
    if strip_pause_marks:
        text = _PAUSE_MARKS.sub("", text)
    return _SPACES.sub(" ", text).strip()


def split_harfs(text: str) -> List[str]:
    """
    Segment text into harfs: one base character followed by its combining
    marks. Whitespace becomes a single WORD_SEPARATOR harf; marks with no base
    letter (e.g. after a space) are dropped.
    """
    harfs: List[str] = []
    for ch in unicodedata.normalize("NFC", text):
        if ch.isspace():
            if harfs and harfs[-1] != WORD_SEPARATOR:
                harfs.append(WORD_SEPARATOR)
            continue
        if _is_mark(ch):
            if harfs and harfs[-1] != WORD_SEPARATOR:
                harfs[-1] += ch
            continue
        harfs.append(ch)
    if harfs and harfs[-1] == WORD_SEPARATOR:
        harfs.pop()
    return harfs


def normalize_query(text: str) -> str:
    """
    Normalize a transliteration query for matching:
      * case-insensitive (casefold)
      * separators (space, hyphen, tab) are dropped
      * apostrophe look-alikes fold to "'"
    Anything else outside a-z raises InvalidInputCharacter.
    """
    out: list[str] = []
    for pos, ch in enumerate(text):
        if ch in SEPARATORS:
            continue
        if ch in APOSTROPHES:
            out.append("'")
            continue
        low = ch.casefold()
        if len(low) == 1 and "a" <= low <= "z":
            out.append(low)
            continue
        raise InvalidInputCharacter(ch, pos, text)
    return "".join(out)


def collapse_vowels(query: str) -> str:
    """Fold runs of one repeated vowel into a single vowel ("laaam" -> "lam")."""
    out: list[str] = []
    for ch in query:
        if out and ch in _VOWELS and out[-1] == ch:
            continue
        out.append(ch)
    return "".join(out)
