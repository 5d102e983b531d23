from __future__ import annotations
import re
import unicodedata
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .normalize import WORD_SEPARATOR, collapse_vowels

_VARIANT = re.compile(r"[a-z']*")

Variants = Tuple[str, ...]


def _unique(items: Iterable[str]) -> Variants:
    seen: Dict[str, None] = {}
    for it in items:
        seen.setdefault(it, None)
    return tuple(seen)


class RuleTable:
    """
    Harf -> spelling variants, consulted by value during matching.

    Three kinds of rows:
      * entries:    harf -> variants (the word separator defaults to ("",))
      * contextual: (previous harf, harf) -> extra variants for that context
                    (previous is the word separator at the start of a word)
      * pausal:     harf -> extra variants allowed only when the harf ends a
                    match at a word boundary (a dropped final vowel)

    A `partial` table skips the coverage check; a `collapse_vowels` table folds
    repeated vowels in the query before matching (letter-name spelling).
    """

    def __init__(
        self,
        entries: Mapping[str, Sequence[str]],
        *,
        contextual: Optional[Mapping[Tuple[str, str], Sequence[str]]] = None,
        pausal: Optional[Mapping[str, Sequence[str]]] = None,
        name: str = "custom",
        partial: bool = False,
        collapse_vowels: bool = False,
    ) -> None:
        self.name = name
        self.partial = partial
        self.collapse_vowels = collapse_vowels

        self._entries: Dict[str, Variants] = {WORD_SEPARATOR: ("",)}
        for harf, variants in entries.items():
            self._entries[harf] = self._checked(harf, variants)

        # contextual rows are stored pre-merged: the context-specific spellings first
        self._contextual: Dict[Tuple[str, str], Variants] = {}
        for (prev, harf), extra in (contextual or {}).items():
            base = self._entries.get(harf, ())
            self._contextual[(prev, harf)] = _unique(self._checked(harf, extra) + base)

        self._pausal: Dict[str, Variants] = {}
        for harf, extra in (pausal or {}).items():
            base = self._entries.get(harf, ())
            extra = tuple(v for v in self._checked(harf, extra) if v not in base)
            if extra:
                self._pausal[harf] = extra

    @staticmethod
    def _checked(harf: str, variants: Sequence[str]) -> Variants:
        if isinstance(variants, str):
            raise ValueError(f"variants for {harf!r} must be a sequence of strings, not a string")
        out = []
        for v in variants:
            if not isinstance(v, str) or not _VARIANT.fullmatch(v):
                raise ValueError(f"invalid spelling variant {v!r} for harf {harf!r}")
            out.append(v)
        return _unique(out)

    # ---- Lookup ----
    def variants(self, harf: str, previous: Optional[str] = None) -> Variants:
        if previous is not None:
            ctx = self._contextual.get((previous, harf))
            if ctx is not None:
                return ctx
        return self._entries.get(harf, ())

    def pausal(self, harf: str) -> Variants:
        return self._pausal.get(harf, ())

    def covers(self, harf: str) -> bool:
        return harf in self._entries

    def missing(self, alphabet: Iterable[str]) -> List[str]:
        """Harfs of `alphabet` with no row in this table (sorted)."""
        return sorted(h for h in set(alphabet) if h not in self._entries)

    def prepare(self, query: str) -> str:
        """Table-specific folding of an already normalized query."""
        return collapse_vowels(query) if self.collapse_vowels else query

    def __contains__(self, harf: object) -> bool:
        return harf in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"RuleTable(name={self.name!r}, entries={len(self._entries)}, partial={self.partial})"


# ---------------------------------------------------------------------------
# Built-in Quranic transliteration rules
# ---------------------------------------------------------------------------

FATHA = "َ"
DAMMA = "ُ"
KASRA = "ِ"
FATHATAN = "ً"
DAMMATAN = "ٌ"
KASRATAN = "ٍ"
SHADDA = "ّ"
SUKUN = "ْ"
MADDAH = "ٓ"
HAMZA_ABOVE = "ٔ"
HAMZA_BELOW = "ٕ"
SUPERSCRIPT_ALEF = "ٰ"

ALEF = "ا"
ALEF_WASLA = "ٱ"
LAM = "ل"

# Consonantal spelling, used when the letter carries a vowel, sukun or shadda
LETTERS: Dict[str, Variants] = {
    "ء": ("'", ""),
    "آ": ("a", "aa", "'a", "'aa"),
    "أ": ("'", ""),
    "ؤ": ("'", "", "w"),
    "إ": ("'", ""),
    "ئ": ("'", "", "y"),
    ALEF: ("", "'"),
    "ب": ("b",),
    "ة": ("t", "h"),
    "ت": ("t",),
    "ث": ("ts", "th", "s"),
    "ج": ("j",),
    "ح": ("h", "kh", "ch"),
    "خ": ("kh",),
    "د": ("d",),
    "ذ": ("dz", "dh", "z", "d"),
    "ر": ("r",),
    "ز": ("z",),
    "س": ("s",),
    "ش": ("sy", "sh"),
    "ص": ("sh", "s", "sy"),
    "ض": ("dh", "d", "dz"),
    "ط": ("th", "t"),
    "ظ": ("zh", "z", "dz"),
    "ع": ("'", ""),
    "غ": ("gh", "g"),
    "ـ": ("",),                 # tatweel
    "ف": ("f",),
    "ق": ("q", "k"),
    "ك": ("k",),
    LAM: ("l",),
    "م": ("m",),
    "ن": ("n",),
    "ه": ("h",),
    "و": ("w",),
    "ى": ("",),
    "ي": ("y",),
    ALEF_WASLA: ("",),
    "ۥ": ("u", "uu", ""),       # small waw
    "ۦ": ("i", "ii", ""),       # small yeh
    "۞": ("",),                 # rub el hizb
    "۩": ("",),                 # sajdah
}

# Spelling of letters written without a vowel mark: long vowels, hamza carriers
BARE_LETTERS: Dict[str, Variants] = {
    "ء": ("'", "a", "i", "u", ""),
    "أ": ("a", "'a", "u", "'u", "'"),
    "إ": ("i", "'i"),
    "ؤ": ("'", "u", "'u", "w"),
    "ئ": ("'", "i", "'i", "y", "a"),
    ALEF: ("a", "aa", "o", "oo", ""),
    ALEF_WASLA: ("", "a", "i", "u"),
    "ة": ("h", "t", ""),
    "ع": ("'", "a", "'a", "i", "'i", "u", "'u", "k", ""),
    "و": ("u", "uu", "o", "oo", "w", "uw", ""),
    "ى": ("a", "aa", "o", "i", ""),
    "ي": ("i", "ii", "ee", "y", "iy", ""),
}

MARKS: Dict[str, Variants] = {
    FATHA: ("a", "o"),
    DAMMA: ("u", "o"),
    KASRA: ("i", "e"),
    FATHATAN: ("an", ""),
    DAMMATAN: ("un", ""),
    KASRATAN: ("in", ""),
    SUKUN: ("",),
    MADDAH: ("",),
    HAMZA_ABOVE: ("'", ""),
    HAMZA_BELOW: ("'", ""),
    SUPERSCRIPT_ALEF: ("a", "aa", "o", ""),
}
# small high/low Quranic annotation marks are silent
for _cp in range(0x06D6, 0x06EE):
    _ch = chr(_cp)
    if unicodedata.category(_ch) == "Mn":
        MARKS.setdefault(_ch, ("",))

SHORT_VOWELS = frozenset({FATHA, DAMMA, KASRA, FATHATAN, DAMMATAN, KASRATAN})
VOWEL_MARKS = SHORT_VOWELS | {SUKUN, SUPERSCRIPT_ALEF}

# A bare lam after these harfs may be silent (assimilated definite article)
ASSIMILATING = (ALEF, ALEF_WASLA, LAM + KASRA)

# A bare alef opening a word is a connecting hamza, read with any short vowel
WORD_INITIAL: Dict[str, Variants] = {ALEF: ("a", "i", "u")}


def compose(harf: str, *, drop_vowels: bool = False) -> Optional[Variants]:
    """
    Spelling variants of one harf cluster, built from LETTERS/BARE_LETTERS and
    MARKS. Shadda doubles the consonant ("rr") or leaves it single ("r").
    Returns None when the base letter or a mark is unknown.
    """
    if not harf:
        return None
    base, marks = harf[0], harf[1:]
    if base not in LETTERS:
        return None
    if any(m != SHADDA and m not in MARKS for m in marks):
        return None

    doubled = SHADDA in marks
    marks = [m for m in marks if m != SHADDA]
    if drop_vowels:
        marks = [m for m in marks if m not in SHORT_VOWELS]
    vowelled = any(m in VOWEL_MARKS for m in marks)

    if doubled or vowelled or base not in BARE_LETTERS:
        heads: Variants = LETTERS[base]
    else:
        heads = BARE_LETTERS[base]
    if doubled:
        heads = _unique([h[0] + h for h in heads if h] + list(heads))

    tails = [""]
    for m in marks:
        tails = [t + v for t in tails for v in MARKS[m]]
    return _unique(h + t for h in heads for t in tails)


def _standard_harfs() -> Iterable[str]:
    for base in LETTERS:
        for shadda in ("", SHADDA):
            yield unicodedata.normalize("NFC", base + shadda)
            for mark in VOWEL_MARKS:
                yield unicodedata.normalize("NFC", base + shadda + mark)


def quran_rules(alphabet: Optional[Iterable[str]] = None) -> RuleTable:
    """
    Built-in transliteration table for Quranic Arabic. Rows are composed for
    every letter with an optional shadda and vowel mark, plus any harf of
    `alphabet` the components can spell. Harfs they cannot spell stay missing,
    so a corpus using them fails the coverage check.
    """
    harfs = set(_standard_harfs())
    harfs.update(alphabet or ())
    harfs.discard(WORD_SEPARATOR)

    entries: Dict[str, Variants] = {}
    pausal: Dict[str, Variants] = {}
    for harf in sorted(harfs):
        variants = compose(harf)
        if variants is None:
            continue
        entries[harf] = variants
        if SHORT_VOWELS.intersection(harf[1:]):
            dropped = compose(harf, drop_vowels=True) or ()
            pausal[harf] = dropped

    contextual = {(prev, LAM): ("",) for prev in ASSIMILATING}
    contextual.update({(WORD_SEPARATOR, h): v for h, v in WORD_INITIAL.items()})
    return RuleTable(entries, contextual=contextual, pausal=pausal, name="quran")


# Disjoined letters opening some chapters, spelled by their names
MUQATTAAT: Dict[str, Variants] = {
    ALEF: ("alif",),
    LAM: ("lam",),
    "م": ("mim",),
    "ص": ("shod", "sod", "shad", "sad"),
    "ر": ("ro", "ra"),
    "ك": ("kaf",),
    "ه": ("ha",),
    "ي": ("ya",),
    "ع": ("ain", "'ain"),
    "ط": ("tho", "to", "tha", "ta"),
    "س": ("sin",),
    "ح": ("ha", "cha", "kha"),
    "ق": ("qof", "qaf", "kof", "kaf"),
    "ن": ("nun",),
}


def muqattaat_rules() -> RuleTable:
    return RuleTable(MUQATTAAT, name="muqattaat", partial=True, collapse_vowels=True)


def default_tables(alphabet: Optional[Iterable[str]] = None) -> List[RuleTable]:
    return [quran_rules(alphabet), muqattaat_rules()]
