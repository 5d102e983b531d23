from __future__ import annotations
import logging
import os
from typing import Iterable, Iterator, List, Tuple

from .errors import CorpusInconsistency
from .models import Corpus, Verse
from .normalize import clean_arabic
from . import config as CFG

log = logging.getLogger(__name__)

Row = Tuple[int, int, str]


def _trim_basmalah(chapter: int, verse: int, text: str) -> str:
    """Verse 1 of every chapter but 1 and 9 is stored with a leading basmalah."""
    if verse != 1 or chapter in CFG.BASMALAH_CHAPTERS_EXEMPT:
        return text
    for prefix in (CFG.BASMALAH, CFG.BASMALAH_PLAIN):
        prefix = clean_arabic(prefix)
        if text.startswith(prefix + " "):
            return text[len(prefix) + 1:]
    return text


def parse_lines(lines: Iterable[str], source: str = "<lines>") -> Iterator[Row]:
    """
    Parse Tanzil-style "chapter|verse|text" lines. Blank lines and lines
    starting with '#' are skipped; anything else that does not split into
    three fields with integer numbers is a CorpusInconsistency.
    """
    for line_no, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        parts = line.split("|", 2)
        if len(parts) != 3:
            raise CorpusInconsistency(f"{source}:{line_no}: expected 'chapter|verse|text'")
        try:
            chapter, verse = int(parts[0]), int(parts[1])
        except ValueError:
            raise CorpusInconsistency(f"{source}:{line_no}: malformed verse number") from None
        yield chapter, verse, parts[2]


def load_corpus(path: str | os.PathLike | None = None,
                *,
                trim_basmalah: bool | None = None,
                strip_pause_marks: bool | None = None) -> Corpus:
    """
    Read a corpus file (defaults to CFG.DEFAULT_CORPUS) into a Corpus.
    I/O errors propagate; malformed content raises CorpusInconsistency.
    """
    path = os.fspath(path if path is not None else CFG.DEFAULT_CORPUS)
    trim = CFG.TRIM_BASMALAH if trim_basmalah is None else trim_basmalah
    strip = CFG.STRIP_PAUSE_MARKS if strip_pause_marks is None else strip_pause_marks

    with open(path, "r", encoding="utf-8") as f:
        rows = list(parse_lines(f, source=path))

    verses: List[Verse] = []
    for n, (chapter, verse, text) in enumerate(rows, start=1):
        text = clean_arabic(text, strip_pause_marks=strip)
        if trim:
            text = _trim_basmalah(chapter, verse, text)
        verses.append(Verse.from_text(chapter, verse, text))
        if n % CFG.PROGRESS_EVERY_VERSES == 0:
            log.debug("loaded verses=%d", n)

    corpus = Corpus(verses)
    log.info("Loaded corpus from %s: verses=%d", path, len(corpus))
    return corpus
