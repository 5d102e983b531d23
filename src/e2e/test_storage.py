import pickle
from pathlib import Path
import pytest
from quranize import Corpus
from quranize.index import build_trie
import quranize.storage as storage


def _built():
    corpus = Corpus.from_verses([(1, 1, "AB AC")])
    return build_trie(corpus), corpus


def test_save_and_load_round_trip(tmp_path: Path):
    trie, corpus = _built()
    path = tmp_path / "nested" / "idx.pkl"
    storage.save_index(trie, corpus, str(path))
    idx, back = storage.load_index(str(path))
    assert len(idx) == len(trie)
    assert back.verses == corpus.verses
    assert not Path(f"{path}.tmp").exists()


def test_failed_write_leaves_no_files(tmp_path: Path, monkeypatch):
    trie, corpus = _built()
    path = tmp_path / "idx.pkl"

    def boom(*args, **kwargs):
        raise RuntimeError("disk full")

    monkeypatch.setattr(storage.pickle, "dump", boom)
    with pytest.raises(RuntimeError):
        storage.save_index(trie, corpus, str(path))
    assert not path.exists()
    assert not Path(f"{path}.tmp").exists()


@pytest.mark.parametrize("obj", [["not", "an", "index"], {"format": "quranize-index/1", "index": None}])
def test_load_rejects_foreign_pickles(tmp_path: Path, obj):
    path = tmp_path / "bad.pkl"
    path.write_bytes(pickle.dumps(obj))
    with pytest.raises(ValueError):
        storage.load_index(str(path))
