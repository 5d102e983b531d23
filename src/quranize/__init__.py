"""
Quranize: transliteration search over the Quran text.

Encodes Latin-script phonetic spelling of recited Arabic ("bismillah") into
the exact Arabic spans that occur in the Quran, with every location where
each span occurs.

The package keeps the pieces separate:
- Corpus model and loading (models, loader, normalize)
- Transliteration rule tables (rules)
- Harf trie index (index) and its persistence (storage)
- Backtracking matcher and result aggregation (search)
- Engine facade (engine)

Example Usage:
    from quranize import Engine

    engine = Engine().build()          # bundled sample corpus
    for result in engine.search("bismillah"):
        print(result.text, [loc.ref for loc in result.locations])
"""

# src/quranize/__init__.py
from .engine import Engine, new_engine
from .errors import CorpusInconsistency, InvalidInputCharacter, QuranizeError
from .models import Corpus, Location, SearchResult, Snippet, Verse
from .rules import RuleTable, muqattaat_rules, quran_rules

__version__ = "1.0.0"
__all__ = [
    "Engine", "new_engine",
    "Corpus", "Verse", "Location", "SearchResult", "Snippet",
    "RuleTable", "quran_rules", "muqattaat_rules",
    "QuranizeError", "CorpusInconsistency", "InvalidInputCharacter",
]
