import pytest
from quranize.normalize import WORD_SEPARATOR, collapse_vowels, normalize_query, split_harfs
from quranize.rules import (
    ALEF, FATHA, KASRA, LAM, SHADDA, SUPERSCRIPT_ALEF, RuleTable, compose, muqattaat_rules, quran_rules,
    BARE_LETTERS,
)
from quranize.errors import InvalidInputCharacter

BA = "ب"
HA = "ه"
TATWEEL = "ـ"


def test_rule_table_rejects_bad_variants():
    with pytest.raises(ValueError):
        RuleTable({"A": ["A"]})
    with pytest.raises(ValueError):
        RuleTable({"A": "a"})
    with pytest.raises(ValueError):
        RuleTable({"A": ["a b"]})


def test_rule_table_lookup_and_coverage():
    t = RuleTable({"A": ["a", "a", "aa"], "B": ["b"]},
                  contextual={("A", "B"): [""]},
                  pausal={"B": ["b", "p"]})
    assert t.variants("A") == ("a", "aa")
    assert t.variants("B") == ("b",)
    assert t.variants("B", "A") == ("", "b")
    assert t.variants("B", "B") == ("b",)
    assert t.pausal("B") == ("p",)
    assert t.pausal("A") == ()
    assert t.variants(WORD_SEPARATOR) == ("",)
    assert t.missing(["A", "C", WORD_SEPARATOR]) == ["C"]
    assert "A" in t and "C" not in t


def test_compose_vowels_and_shadda():
    assert compose(BA + KASRA) == ("bi", "be")
    assert compose(LAM + FATHA + SHADDA) == ("lla", "llo", "la", "lo")
    assert compose(TATWEEL + SUPERSCRIPT_ALEF) == ("a", "aa", "o", "")
    assert "" in compose(ALEF)
    assert compose(HA + KASRA, drop_vowels=True) == ("h",)
    assert compose("x") is None
    assert compose(BA + "̀") is None


def test_quran_rules_pausal_and_assimilation():
    t = quran_rules()
    assert t.pausal(HA + KASRA) == ("h",)
    assert t.pausal(BA) == ()
    assert "" in t.variants(LAM, ALEF)
    assert "" not in t.variants(LAM)
    assert t.covers(BA + FATHA + SHADDA)
    assert not t.partial


def test_quran_rules_extends_to_given_alphabet():
    odd = BA + SHADDA + KASRA + "ۭ"     # with a small low meem
    assert quran_rules([odd]).covers(odd)
    assert not quran_rules(["☺"]).covers("☺")


def test_muqattaat_table_collapses_vowels():
    t = muqattaat_rules()
    assert t.partial and t.collapse_vowels
    assert t.prepare(normalize_query("alif laaam miiim")) == "aliflammim"
    assert t.variants(LAM) == ("lam",)
    assert t.variants(BA) == ()


def test_normalize_query():
    assert normalize_query("Bismil-lah") == "bismillah"
    assert normalize_query("wa`tasimu") == "wa'tasimu"
    assert normalize_query("  ") == ""
    with pytest.raises(InvalidInputCharacter) as exc:
        normalize_query("café")
    assert exc.value.position == 3
    assert collapse_vowels("kaaaf haa") == "kaf ha"


def test_split_harfs():
    harfs = split_harfs("بِسمِ  اللَّهِ")
    assert len(harfs) == 8
    assert harfs[0] == BA + KASRA
    assert harfs[3] == WORD_SEPARATOR
    assert harfs[6] == LAM + FATHA + SHADDA
    assert split_harfs(" AB ") == ["A", "B"]


def test_silent_lam_is_the_first_spelling_after_alef():
    t = quran_rules()
    assert t.variants(LAM, ALEF) == ("", "l")


def test_word_initial_alef_takes_any_short_vowel():
    t = quran_rules()
    opening = t.variants(ALEF, WORD_SEPARATOR)
    assert opening[0] == "a"
    assert {"i", "u", ""} <= set(opening)
    assert "i" not in t.variants(ALEF, BA)


def test_bare_ain_may_be_silent_or_k():
    assert {"", "k", "'"} <= set(BARE_LETTERS["ع"])
    assert {"", "k"} <= set(quran_rules().variants("ع"))
