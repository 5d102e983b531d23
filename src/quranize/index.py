from __future__ import annotations
import logging
from array import array
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set

from .models import Corpus, Location, Verse
from .normalize import WORD_SEPARATOR
from . import config as CFG

log = logging.getLogger(__name__)


class HarfTrie:
    """
    Prefix tree over harf sequences, stored as an arena: every node is an
    integer id into parallel lists, and children are referenced by id.

    A node's Locations are the places where its path is a complete span of
    whole words; each Location points at the word where the span starts.
    Build-time: insert()/build(). After freeze() the trie is read-only and can
    be shared by concurrent queries.
    """

    ROOT = 0

    def __init__(self) -> None:
        self._labels: List[str] = [""]
        self._parents = array("i", [-1])
        self._depths = array("I", [0])
        self._children: List[Dict[str, int]] = [{}]
        self._locations: List[Sequence[Location]] = [[]]
        self._first: List[Optional[Location]] = [None]
        self._frozen: bool = False

    # -------- Build-time API --------
    def build(self, corpus: Corpus, max_words: Optional[int] = None) -> "HarfTrie":
        """Index every word-start span of every verse, then freeze."""
        if max_words is not None and max_words < 1:
            raise ValueError("max_words must be >= 1")
        for n, verse in enumerate(corpus.verses, start=1):
            self.insert_verse(verse, max_words=max_words)
            if n % CFG.PROGRESS_EVERY_VERSES == 0:
                log.debug("indexed verses=%d nodes=%d", n, len(self))
        self.freeze()
        log.info("Harf trie built: verses=%d nodes=%d", len(corpus), len(self))
        return self

    def insert_verse(self, verse: Verse, *, max_words: Optional[int] = None) -> None:
        harfs = verse.harfs
        last = len(harfs) - 1
        for word_no, start in enumerate(verse.word_starts, start=1):
            loc = Location(verse.chapter, verse.verse, word_no, start)
            node = self.ROOT
            words = 0
            for j in range(start, len(harfs)):
                node = self._child_or_add(node, harfs[j])
                if j == last or harfs[j + 1] == WORD_SEPARATOR:
                    words += 1
                    self._add_location(node, loc)
                    if max_words is not None and words >= max_words:
                        break

    def insert(self, harfs: Iterable[str], location: Location) -> int:
        """Insert one harf path and record `location` at its last node."""
        node = self.ROOT
        for h in harfs:
            node = self._child_or_add(node, h)
        if node == self.ROOT:
            raise ValueError("cannot insert an empty harf path")
        self._add_location(node, location)
        return node

    def _child_or_add(self, node: int, harf: str) -> int:
        kids = self._children[node]
        child = kids.get(harf)
        if child is not None:
            return child
        if self._frozen:
            raise RuntimeError("HarfTrie is frozen; cannot insert")
        child = len(self._labels)
        kids[harf] = child
        self._labels.append(harf)
        self._parents.append(node)
        self._depths.append(self._depths[node] + 1)
        self._children.append({})
        self._locations.append([])
        self._first.append(None)
        return child

    def _add_location(self, node: int, loc: Location) -> None:
        if self._frozen:
            raise RuntimeError("HarfTrie is frozen; cannot insert")
        self._locations[node].append(loc)  # type: ignore[union-attr]

    # -------- Freeze --------
    def freeze(self) -> None:
        """Sort/dedupe location lists and compute each subtree's first Location."""
        if self._frozen:
            return
        self._locations = [tuple(sorted(set(locs))) for locs in self._locations]
        first: List[Optional[Location]] = [locs[0] if locs else None for locs in self._locations]
        # children always have larger ids than their parent
        for node in range(len(self._labels) - 1, 0, -1):
            f = first[node]
            if f is None:
                continue
            p = self._parents[node]
            if first[p] is None or f < first[p]:  # type: ignore[operator]
                first[p] = f
        self._first = first
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    # -------- Query API --------
    def children(self, node: int) -> Mapping[str, int]:
        return self._children[node]

    def locations(self, node: int) -> Sequence[Location]:
        return self._locations[node]

    def first_location(self, node: int) -> Optional[Location]:
        """Smallest Location stored anywhere in the subtree rooted at `node`."""
        return self._first[node]

    def label(self, node: int) -> Optional[str]:
        """Harf on the edge into `node` (None for the root)."""
        return self._labels[node] if node != self.ROOT else None

    def depth(self, node: int) -> int:
        return self._depths[node]

    def path(self, node: int) -> List[str]:
        out: List[str] = []
        while node > self.ROOT:
            out.append(self._labels[node])
            node = self._parents[node]
        out.reverse()
        return out

    def text(self, node: int) -> str:
        return "".join(self.path(node))

    def walk(self, harfs: Iterable[str]) -> Optional[int]:
        """Node reached by following `harfs` from the root, or None."""
        node = self.ROOT
        for h in harfs:
            nxt = self._children[node].get(h)
            if nxt is None:
                return None
            node = nxt
        return node

    def alphabet(self) -> Set[str]:
        return set(self._labels[1:])

    def stats(self) -> Dict[str, int]:
        return {
            "nodes": len(self),
            "locations": sum(len(locs) for locs in self._locations),
            "alphabet": len(self.alphabet()),
            "max_depth": max(self._depths) if len(self._depths) else 0,
        }

    def __len__(self) -> int:
        return len(self._labels)

    # Pickle hooks keep only the frozen form
    def __getstate__(self):
        if not self._frozen:
            self.freeze()
        return self.__dict__.copy()

    def __setstate__(self, state):
        self.__dict__.update(state)


def build_trie(corpus: Corpus, max_words: Optional[int] = None) -> HarfTrie:
    return HarfTrie().build(corpus, max_words=max_words)
