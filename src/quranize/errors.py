# quranize/errors.py
from __future__ import annotations


class QuranizeError(Exception):
    """Base class for engine errors."""


class CorpusInconsistency(QuranizeError, ValueError):
    """
    Corpus data the engine cannot index: malformed verse numbering, empty
    verses, or harfs the primary rule table has no spelling for.
    Raised while building or loading; the engine is unusable afterwards.
    """


class InvalidInputCharacter(QuranizeError, ValueError):
    """A query contains a character outside the transliteration alphabet."""

    def __init__(self, char: str, position: int, text: str = "") -> None:
        self.char = char
        self.position = position
        self.text = text
        super().__init__(f"invalid character {char!r} at position {position} in query {text!r}")
