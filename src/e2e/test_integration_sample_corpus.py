from pathlib import Path
import pytest
from quranize import Engine, InvalidInputCharacter, Location


@pytest.fixture(scope="module")
def eng():
    e = Engine().build()
    yield e
    e.shutdown()


def _by_text(results):
    return {r.text: r for r in results}


@pytest.mark.e2e
def test_bismillah(eng):
    words = eng.get_verse(1, 1).words()
    rows = eng.encode("bismillah")
    assert [r.text for r in rows] == [" ".join(words[:2])]
    assert rows[0].locations == (Location(1, 1, 1, 0),)
    assert len(rows[0].explanation) == 8    # one spelling per harf, separator included


@pytest.mark.e2e
def test_arrohman_occurs_twice(eng):
    word = eng.get_verse(1, 3).words()[0]
    hit = _by_text(eng.search("arrohman"))[word]
    assert [loc.ref for loc in hit.locations] == [(1, 1, 3), (1, 3, 1)]
    assert hit.locations[0].letter == 9


@pytest.mark.e2e
def test_multi_word_span_after_basmalah_trim(eng):
    text = eng.get_verse(112, 1).text
    rows = eng.encode("qulhuwallahuahad")
    assert [(r.text, [loc.ref for loc in r.locations]) for r in rows] == [(text, [(112, 1, 1)])]
    assert eng.encode("qul huwa-llahu ahad")[0].text == text


@pytest.mark.e2e
@pytest.mark.parametrize("query", ["alif lam mim", "alif laaam miiim", "Alif-Lam-Mim"])
def test_disjoined_letters(eng, query):
    hit = _by_text(eng.search(query)).get("الم")
    assert hit is not None
    assert [loc.ref for loc in hit.locations] == [(2, 1, 1)]


@pytest.mark.e2e
def test_nun(eng):
    hit = _by_text(eng.search("nun")).get("ن")
    assert hit is not None and [loc.ref for loc in hit.locations] == [(68, 1, 1)]


@pytest.mark.e2e
def test_results_stream_in_corpus_order(eng):
    firsts = [r.locations[0] for r in eng.search("alla")]
    assert firsts == sorted(firsts)
    for r in eng.search("alla"):
        assert list(r.locations) == sorted(set(r.locations))


@pytest.mark.e2e
def test_limit_and_case(eng):
    assert eng.encode("BISMILLAH") == eng.encode("bismillah")
    assert eng.encode("bismillah", limit=0) == []
    assert len(eng.encode("alla", limit=2)) <= 2


@pytest.mark.e2e
def test_invalid_character_reports_position(eng):
    with pytest.raises(InvalidInputCharacter) as exc:
        eng.search("bismi1llah")
    assert exc.value.char == "1"
    assert exc.value.position == 5


@pytest.mark.e2e
def test_lookups(eng):
    assert eng.get_verse(2, 1).text == "الم"
    assert eng.get_verse(68, 1).words()[0] == "ن"
    assert eng.get_verse(99, 1) is None

    v13 = eng.get_verse(1, 3)
    assert [loc.ref for loc in eng.find(v13.text)] == [(1, 1, 3), (1, 3, 1)]
    assert eng.find("زززز") == []
    assert eng.find("   ") == []

    words = eng.get_verse(1, 1).words()
    s = eng.snippet(Location(1, 1, 3, 9), words[2])
    assert s.before == " ".join(words[:2])
    assert s.text == words[2]
    assert s.after == words[3]
    with pytest.raises(KeyError):
        eng.snippet(Location(99, 1, 1, 0), "x")


@pytest.mark.e2e
def test_decode(eng):
    assert eng.decode(" ".join(eng.get_verse(1, 1).words()[:2])) == "bismi allahi"


@pytest.mark.e2e
def test_stats(eng):
    info = eng.stats()
    assert info["verses"] == 20
    assert info["tables"] == ["quran", "muqattaat"]
    assert info["nodes"] > info["alphabet"] > 0


@pytest.mark.e2e
def test_persist_and_reload(tmp_path: Path):
    cache = tmp_path / "idx" / "quran.pkl"
    e1 = Engine()
    e1.build(cache=str(cache))
    expected = e1.encode("arrohman")
    e1.shutdown()
    assert cache.exists()

    e2 = Engine()
    try:
        e2.load(cache=str(cache))
        assert e2.encode("arrohman") == expected
    finally:
        e2.shutdown()

    with pytest.raises(FileNotFoundError):
        Engine().load(cache=str(tmp_path / "nope.pkl"))


@pytest.mark.e2e
@pytest.mark.parametrize("query", ["ihdinassirotol mustaqim", "ihdina shirotol-mustaqim"])
def test_connecting_hamza_opens_with_any_vowel(eng, query):
    text = eng.get_verse(1, 6).text
    hit = _by_text(eng.search(query)).get(text)
    assert hit is not None
    assert [loc.ref for loc in hit.locations] == [(1, 6, 1)]
    assert _by_text(eng.search("ihdina")).get(text.split()[0]) is not None


@pytest.mark.e2e
@pytest.mark.parametrize("query", ["iyyakanakbudu", "iyyaka nabudu", "iyyaka na'budu"])
def test_vowelless_ain(eng, query):
    text = " ".join(eng.get_verse(1, 5).words()[:2])
    hit = _by_text(eng.search(query)).get(text)
    assert hit is not None
    assert [loc.ref for loc in hit.locations] == [(1, 5, 1)]


@pytest.mark.e2e
def test_cache_carries_its_own_corpus(tmp_path: Path):
    src = tmp_path / "other.txt"
    src.write_text("7|5|بِسمِ اللَّهِ\n", encoding="utf-8")
    cache = tmp_path / "other.pkl"
    Engine().build(source=str(src), cache=str(cache)).shutdown()

    e = Engine()
    try:
        e.load(cache=str(cache))
        (row,) = e.encode("bismillah")
        loc = row.locations[0]
        assert loc.ref == (7, 5, 1)
        assert e.get_verse(7, 5) is not None
        assert e.snippet(loc, row.text).text == row.text
    finally:
        e.shutdown()


@pytest.mark.e2e
def test_cache_rejects_a_different_source(tmp_path: Path):
    from quranize import CorpusInconsistency
    from quranize.config import DEFAULT_CORPUS

    src = tmp_path / "other.txt"
    src.write_text("7|5|بِسمِ اللَّهِ\n", encoding="utf-8")
    cache = tmp_path / "other.pkl"
    Engine().build(source=str(src), cache=str(cache)).shutdown()

    with pytest.raises(CorpusInconsistency):
        Engine().load(cache=str(cache), source=str(DEFAULT_CORPUS))
    assert Engine().load(cache=str(cache), source=str(src)).get_verse(7, 5) is not None


def test_engine_lookups_require_build():
    e = Engine()
    for call in (lambda: e.find("ن"), lambda: e.get_verse(1, 1), e.stats, lambda: e.decode("ن")):
        with pytest.raises(RuntimeError):
            call()
