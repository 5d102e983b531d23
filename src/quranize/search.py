from __future__ import annotations
import heapq
import itertools
import logging
from typing import Iterable, Iterator, List, Optional, Sequence, Set, Tuple

from .index import HarfTrie
from .models import SearchResult
from .normalize import WORD_SEPARATOR, normalize_query
from .rules import RuleTable

log = logging.getLogger(__name__)

# Frontier item kinds; completions sort before states at an equal key
_DONE = 0
_STATE = 1

# (kind, node, input offset, trail, table slot). A trail is a cons cell
# (variant, previous trail) holding the spelling chosen for each harf so far.
Item = Tuple[int, int, int, Optional[tuple], int]


def _unwind(trail: Optional[tuple]) -> Tuple[str, ...]:
    out: List[str] = []
    while trail is not None:
        out.append(trail[0])
        trail = trail[1]
    out.reverse()
    return tuple(out)


class _Stack:
    """Depth-first frontier: results come out in discovery order."""

    def __init__(self, trie: HarfTrie) -> None:
        self._items: List[Item] = []

    def extend(self, items: List[Item]) -> None:
        self._items.extend(reversed(items))

    def pop(self) -> Item:
        return self._items.pop()

    def __bool__(self) -> bool:
        return bool(self._items)


class _Heap:
    """
    Best-first frontier keyed by the smallest Location a state can still
    produce (its subtree's first Location), so completions are popped in
    canonical corpus order while the search stays lazy.
    """

    def __init__(self, trie: HarfTrie) -> None:
        self._trie = trie
        self._heap: list = []
        self._seq = itertools.count()

    def extend(self, items: List[Item]) -> None:
        trie = self._trie
        for item in items:
            kind, node = item[0], item[1]
            if kind == _DONE:
                key = trie.locations(node)[0]
            else:
                key = trie.first_location(node)
            heapq.heappush(self._heap, (key, kind, trie.depth(node), next(self._seq), item))

    def pop(self) -> Item:
        return heapq.heappop(self._heap)[-1]

    def __bool__(self) -> bool:
        return bool(self._heap)


class Matcher:
    """
    Backtracking transliteration matcher over a frozen HarfTrie.

    Walks the trie while consuming the query: at each node, every outgoing
    harf is tried with every spelling variant that prefixes the remaining
    input (an empty variant descends without consuming input). A branch with
    no matching variant simply dies. Recursion is an explicit frontier, so the
    caller drives the search by pulling results.
    """

    def __init__(self, trie: HarfTrie, tables: Sequence[RuleTable]) -> None:
        if not tables:
            raise ValueError("Matcher needs at least one rule table")
        self.trie = trie
        self.tables = list(tables)

    def search(self, text: str, *, ordered: bool = True) -> Iterator[SearchResult]:
        """
        Lazily yield every Arabic span whose transliteration can be `text`.
        Invalid characters raise InvalidInputCharacter here, before any result.
        """
        query = normalize_query(text)
        slots = [(t, t.prepare(query)) for t in self.tables]
        if not query:
            return iter(())
        return aggregate(self.trie, self._walk(slots, ordered))

    def _walk(self, slots: List[Tuple[RuleTable, str]], ordered: bool) -> Iterator[Tuple[int, Optional[tuple]]]:
        trie = self.trie
        frontier = _Heap(trie) if ordered else _Stack(trie)
        frontier.extend([(_STATE, trie.ROOT, 0, None, i) for i, (_, q) in enumerate(slots) if q])
        visited: Set[Tuple[int, int, int]] = set()
        expanded = 0

        while frontier:
            kind, node, pos, trail, slot = frontier.pop()
            if kind == _DONE:
                yield node, trail
                continue
            # another trail already reached this node at this input offset
            state = (node, pos, slot)
            if state in visited:
                continue
            visited.add(state)
            expanded += 1
            frontier.extend(self._expand(node, pos, trail, slot, slots))

        log.debug("search finished: states=%d", expanded)

    def _expand(self, node: int, pos: int, trail: Optional[tuple], slot: int,
                slots: List[Tuple[RuleTable, str]]) -> List[Item]:
        trie = self.trie
        table, q = slots[slot]
        n = len(q)
        items: List[Item] = []

        if pos == n and trie.locations(node):
            items.append((_DONE, node, pos, trail, slot))

        # spans start at word starts, so the root follows a word separator
        prev = WORD_SEPARATOR if node == trie.ROOT else trie.label(node)
        for harf, child in trie.children(node).items():
            if trie.first_location(child) is None:
                continue
            for v in table.variants(harf, prev):
                if q.startswith(v, pos):
                    items.append((_STATE, child, pos + len(v), (v, trail), slot))
            # a dropped final vowel may only finish the match on a word end
            if pos < n and trie.locations(child):
                for v in table.pausal(harf):
                    if len(v) == n - pos and q.startswith(v, pos):
                        items.append((_DONE, child, n, (v, trail), slot))
        return items


def aggregate(trie: HarfTrie, completions: Iterable[Tuple[int, Optional[tuple]]]) -> Iterator[SearchResult]:
    """
    Merge completed paths into results. Identical Arabic text means an
    identical trie node, so each node is reported once with its full,
    sorted Location set; the first trail found explains it.
    """
    emitted: Set[int] = set()
    for node, trail in completions:
        if node in emitted:
            continue
        emitted.add(node)
        yield SearchResult(
            text=trie.text(node),
            locations=tuple(trie.locations(node)),
            explanation=_unwind(trail),
        )


def take(results: Iterable[SearchResult], limit: Optional[int] = None) -> List[SearchResult]:
    """Materialize at most `limit` results (all when limit is None)."""
    if limit is None:
        return list(results)
    if limit <= 0:
        return []
    return list(itertools.islice(results, limit))
