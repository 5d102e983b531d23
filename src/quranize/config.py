import os
from pathlib import Path

DEFAULT_LIMIT: int = 10

# Maximum number of words a single match may span (None = up to verse end)
MAX_WORDS: int | None = None

# /* ~~~ stream results in corpus order (heap) instead of discovery order (stack) ~~~ */
ORDERED: bool = True

# Corpus loading
TRIM_BASMALAH: bool = True
STRIP_PAUSE_MARKS: bool = True
BASMALAH: str = "بِسمِ اللَّهِ الرَّحمـٰنِ الرَّحيمِ"
BASMALAH_PLAIN: str = "بسم الله الرحمن الرحيم"
BASMALAH_CHAPTERS_EXEMPT: tuple[int, ...] = (1, 9)

# Query alphabet: separators are dropped, apostrophe look-alikes fold to "'"
SEPARATORS: str = " -\t"
APOSTROPHES: str = "'`‘’ʼ"

DEFAULT_CORPUS: Path = Path(
    os.environ.get("QURANIZE_CORPUS", Path(__file__).parent / "data" / "quran-sample.txt")
)

# Progress logging (set QURANIZE_VERBOSE=1 to enable)
VERBOSE: bool = os.environ.get("QURANIZE_VERBOSE") == "1"
PROGRESS_EVERY_VERSES: int = 1_000
