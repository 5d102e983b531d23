# quranize/engine.py
from __future__ import annotations

import logging
import os
from typing import Iterator, List, Optional, Sequence, Union

from . import config as CFG
from .errors import CorpusInconsistency
from .index import HarfTrie
from .loader import load_corpus
from .models import Corpus, Location, SearchResult, Snippet, Verse
from .normalize import WORD_SEPARATOR, clean_arabic, split_harfs
from .rules import RuleTable, default_tables
from .search import Matcher, take
from .storage import load_index, save_index

log = logging.getLogger(__name__)

Rules = Union[RuleTable, Sequence[RuleTable], None]


class Engine:
    """
    Orchestration layer that glues together:
      - the corpus (verses, for lookups and snippets),
      - the harf trie (HarfTrie, built once and frozen),
      - the rule tables and the matcher (search.Matcher).

    Public API (used by CLI/Flask):
      * build(corpus | source, ...): load -> index -> validate -> (optional) persist
      * load(cache, ...):            pickled index + corpus -> validate
      * search(text):                lazy stream of SearchResult
      * encode(text, limit):         list of SearchResult
      * find / get_verse / snippet / decode: lookups
      * shutdown():                  drop everything

    The index is read-only after build/load, so one engine can serve
    concurrent queries.
    """

    # ------------- lifecycle -------------

    def __init__(self) -> None:
        self.index: Optional[HarfTrie] = None
        self.corpus: Optional[Corpus] = None
        self.tables: List[RuleTable] = []
        self._matcher: Optional[Matcher] = None

    # /* ~~~ Build the index from a corpus (or a corpus file) and validate the rules ~~~ */
    def build(
        self,
        corpus: Optional[Corpus] = None,
        *,
        source: Optional[str] = None,       # corpus file; CFG.DEFAULT_CORPUS when both are None
        rules: Rules = None,                # None -> built-in quran + muqattaat tables
        max_words: Optional[int] = None,    # words per match; CFG.MAX_WORDS when None
        cache: Optional[str] = None,        # if provided -> pickle the built index here
        verbose: bool = False,
    ) -> "Engine":
        if verbose or CFG.VERBOSE:
            logging.basicConfig(level=logging.INFO)

        if corpus is None:
            corpus = load_corpus(source)
        if max_words is None:
            max_words = CFG.MAX_WORDS

        log.info("Building harf trie (max_words=%s)", max_words)
        idx = HarfTrie().build(corpus, max_words=max_words)
        tables = self._resolve_tables(rules, idx)

        if cache:
            log.info("Saving index to %s", cache)
            save_index(idx, corpus, cache)

        self._commit(idx, corpus, tables)
        log.info("Engine build() complete: verses=%d nodes=%d", len(corpus), len(idx))
        return self

    # /* ~~~ Load a pickled index together with the corpus it was built from ~~~ */
    def load(
        self,
        *,
        cache: str,
        source: Optional[str] = None,
        rules: Rules = None,
        verbose: bool = False,
    ) -> "Engine":
        if verbose or CFG.VERBOSE:
            logging.basicConfig(level=logging.INFO)
        if not os.path.exists(cache):
            raise FileNotFoundError(cache)

        log.info("Loading index from %s", cache)
        idx, corpus = load_index(cache)
        if source is not None:
            # an explicit source must be the text the cache was built from
            fresh = load_corpus(source)
            if fresh.verses != corpus.verses:
                raise CorpusInconsistency(f"index cache {cache} was not built from {source}")
        tables = self._resolve_tables(rules, idx)

        self._commit(idx, corpus, tables)
        log.info("Engine load() complete: verses=%d nodes=%d", len(corpus), len(idx))
        return self

    # ------------- query -------------

    def search(self, text: str, *, ordered: Optional[bool] = None) -> Iterator[SearchResult]:
        """
        Lazily yield every Arabic span whose transliteration can be `text`.
        ordered=True streams in corpus order of each result's first Location;
        ordered=False streams in depth-first discovery order.
        """
        matcher = self._require()
        return matcher.search(text, ordered=CFG.ORDERED if ordered is None else ordered)

    def encode(self, text: str, *, limit: Optional[int] = None,
               ordered: Optional[bool] = None) -> List[SearchResult]:
        return take(self.search(text, ordered=ordered), limit)

    def find(self, arabic: str) -> List[Location]:
        """Locations where `arabic` occurs as a whole-word span."""
        index = self._index()
        harfs = split_harfs(clean_arabic(arabic))
        if not harfs:
            return []
        node = index.walk(harfs)
        if node is None:
            return []
        return list(index.locations(node))

    def get_verse(self, chapter: int, verse: int) -> Optional[Verse]:
        return self._corpus().get(chapter, verse)

    def snippet(self, location: Location, text: str) -> Snippet:
        """Split the verse at `location` into the words before, matched by `text`, and after."""
        verse = self.get_verse(location.chapter, location.verse)
        if verse is None:
            raise KeyError(location.ref)
        words = verse.words()
        start = location.word - 1
        end = start + len(text.split())
        return Snippet(
            location=location,
            before=" ".join(words[:start]),
            text=" ".join(words[start:end]),
            after=" ".join(words[end:]),
        )

    def decode(self, arabic: str) -> str:
        """Latin rendering of Arabic text using each harf's first spelling variant."""
        self._require()
        table = self.tables[0]
        out: List[str] = []
        prev = WORD_SEPARATOR
        for harf in split_harfs(clean_arabic(arabic)):
            if harf == WORD_SEPARATOR:
                out.append(" ")
            else:
                variants = table.variants(harf, prev)
                out.append(variants[0] if variants else harf)
            prev = harf
        return "".join(out)

    def stats(self) -> dict:
        info = self._index().stats()
        info["verses"] = len(self._corpus())
        info["tables"] = [t.name for t in self.tables]
        return info

    # ------------- teardown -------------

    def shutdown(self) -> None:
        self.index = None
        self.corpus = None
        self.tables = []
        self._matcher = None
        log.info("Engine shutdown complete")

    # ------------- internals -------------

    def _require(self) -> Matcher:
        if self._matcher is None:
            raise RuntimeError("Engine not initialized. Call build() or load() first.")
        return self._matcher

    def _index(self) -> HarfTrie:
        if self.index is None:
            raise RuntimeError("Engine not initialized. Call build() or load() first.")
        return self.index

    def _corpus(self) -> Corpus:
        if self.corpus is None:
            raise RuntimeError("Engine not initialized. Call build() or load() first.")
        return self.corpus

    def _commit(self, idx: HarfTrie, corpus: Corpus, tables: List[RuleTable]) -> None:
        self.index = idx
        self.corpus = corpus
        self.tables = tables
        self._matcher = Matcher(idx, tables)

    @staticmethod
    def _resolve_tables(rules: Rules, idx: HarfTrie) -> List[RuleTable]:
        """
        Pick the rule tables and check that every complete (non-partial)
        table spells every harf in the index.
        """
        alphabet = idx.alphabet()
        if rules is None:
            tables = default_tables(alphabet)
        elif isinstance(rules, RuleTable):
            tables = [rules]
        else:
            tables = list(rules)

        complete = [t for t in tables if not t.partial]
        if not complete:
            raise ValueError("at least one complete (non-partial) rule table is required")
        for t in complete:
            missing = t.missing(alphabet)
            if missing:
                shown = ", ".join(repr(h) for h in missing[:10])
                raise CorpusInconsistency(
                    f"rule table {t.name!r} has no spelling for {len(missing)} harf(s): {shown}"
                )
        # the complete table leads so decode() and explanations use it first
        tables.sort(key=lambda t: t.partial)
        return tables


def new_engine(corpus: Corpus, rule_table: Rules = None, **kwargs) -> Engine:
    """Build an engine over `corpus`; raises CorpusInconsistency on bad data."""
    return Engine().build(corpus, rules=rule_table, **kwargs)
