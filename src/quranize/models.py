from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, NamedTuple, Tuple

from .errors import CorpusInconsistency
from .normalize import WORD_SEPARATOR, clean_arabic, split_harfs


class Location(NamedTuple):
    chapter: int
    verse: int
    word: int                 # 1-based word position in the verse
    letter: int = 0           # 0-based harf offset of the match start in the verse

    @property
    def ref(self) -> Tuple[int, int, int]:
        return (self.chapter, self.verse, self.word)


@dataclass(frozen=True)
class Verse:
    chapter: int
    verse: int
    text: str                      # cleaned Arabic text
    harfs: Tuple[str, ...]
    word_starts: Tuple[int, ...]   # harf offset of each word

    @classmethod
    def from_text(cls, chapter: int, verse: int, text: str) -> "Verse":
        harfs = tuple(split_harfs(text))
        starts = tuple(
            i for i, h in enumerate(harfs)
            if h != WORD_SEPARATOR and (i == 0 or harfs[i - 1] == WORD_SEPARATOR)
        )
        return cls(chapter, verse, text, harfs, starts)

    def words(self) -> List[str]:
        return self.text.split()

    def location(self, word: int) -> Location:
        """Location of the 1-based `word`."""
        return Location(self.chapter, self.verse, word, self.word_starts[word - 1])


@dataclass
class Corpus:
    verses: List[Verse]
    _by_ref: Dict[Tuple[int, int], Verse] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        for v in self.verses:
            key = (v.chapter, v.verse)
            if v.chapter <= 0 or v.verse <= 0:
                raise CorpusInconsistency(f"invalid verse number {key}")
            if key in self._by_ref:
                raise CorpusInconsistency(f"duplicate verse {key}")
            if not v.harfs:
                raise CorpusInconsistency(f"empty verse {key}")
            self._by_ref[key] = v

    @classmethod
    def from_verses(cls, rows: Iterable[Tuple[int, int, str]]) -> "Corpus":
        verses = []
        for chapter, verse, text in rows:
            try:
                chapter, verse = int(chapter), int(verse)
            except (TypeError, ValueError):
                raise CorpusInconsistency(f"malformed verse number ({chapter!r}, {verse!r})") from None
            if not isinstance(text, str):
                raise CorpusInconsistency(f"verse ({chapter}, {verse}) has no text")
            verses.append(Verse.from_text(chapter, verse, clean_arabic(text)))
        return cls(verses)

    def get(self, chapter: int, verse: int) -> Verse | None:
        return self._by_ref.get((chapter, verse))

    def __len__(self) -> int:
        return len(self.verses)


@dataclass(frozen=True)
class SearchResult:
    text: str                          # Arabic span as it appears in the corpus
    locations: Tuple[Location, ...]    # sorted, unique
    explanation: Tuple[str, ...]       # spelling variant chosen for each harf

    @property
    def count(self) -> int:
        return len(self.locations)


@dataclass(frozen=True)
class Snippet:
    location: Location
    before: str
    text: str
    after: str
