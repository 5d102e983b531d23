from __future__ import annotations
import os
import pickle
from typing import Any, Tuple

from .index import HarfTrie
from .models import Corpus

# Cache layout: the frozen trie travels with the corpus it was built from,
# so Locations in the index always resolve to verses.
_FORMAT = "quranize-index/1"


def save_index(index: HarfTrie, corpus: Corpus, path: str) -> None:
    """Pickle the trie and its corpus; a failed write leaves no partial file."""
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    payload = {"format": _FORMAT, "index": index, "corpus": corpus}
    tmp = f"{path}.tmp"
    try:
        with open(tmp, "wb") as f:
            pickle.dump(payload, f, protocol=pickle.HIGHEST_PROTOCOL)
        os.replace(tmp, path)
    finally:
        if os.path.exists(tmp):
            os.remove(tmp)


def load_index(path: str) -> Tuple[HarfTrie, Corpus]:
    with open(path, "rb") as f:
        obj: Any = pickle.load(f)
    if not isinstance(obj, dict) or obj.get("format") != _FORMAT:
        raise ValueError(f"{path} does not contain a harf index")
    index, corpus = obj.get("index"), obj.get("corpus")
    if not isinstance(index, HarfTrie) or not isinstance(corpus, Corpus):
        raise ValueError(f"{path} does not contain a harf index")
    return index, corpus
