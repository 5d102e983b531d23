from __future__ import annotations
import argparse, json
from quranize import Engine, InvalidInputCharacter
from quranize.config import DEFAULT_LIMIT


def _row(r) -> dict:
    return {
        "text": r.text,
        "count": r.count,
        "locations": [list(loc) for loc in r.locations],
        "explanation": list(r.explanation),
    }


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Quranize CLI (transliteration -> Quran text)")
    g = p.add_mutually_exclusive_group(required=True)
    g.add_argument("--build", action="store_true", help="Build index from --source")
    g.add_argument("--load", action="store_true", help="Load a pickled index from --cache")

    p.add_argument("--source", default=None, help="Corpus file (chapter|verse|text); bundled sample by default")
    p.add_argument("--cache", default=None, help="Pickle path for the index")
    p.add_argument("--max-words", type=int, default=None, help="Max words a match may span")
    p.add_argument("-k", type=int, default=DEFAULT_LIMIT, help="Max results per query")
    p.add_argument("--repl", action="store_true", help="Interactive loop after init")
    p.add_argument("--q", default=None, help="Single query to run once")
    p.add_argument("--unordered", action="store_true", help="Discovery order instead of corpus order")
    p.add_argument("--json", action="store_true", help="Emit JSON rows")
    p.add_argument("--verbose", action="store_true")

    args = p.parse_args(argv)

    eng = Engine()
    try:
        if args.build:
            eng.build(source=args.source, max_words=args.max_words, cache=args.cache, verbose=args.verbose)
        else:
            if not args.cache:
                p.error("--load requires --cache")
            eng.load(cache=args.cache, source=args.source, verbose=args.verbose)

        def run_query(q: str) -> None:
            try:
                rows = eng.encode(q, limit=args.k, ordered=not args.unordered)
            except InvalidInputCharacter as exc:
                print(f"error: {exc}")
                return
            if args.json:
                print(json.dumps([_row(r) for r in rows], ensure_ascii=False, indent=2))
                return
            if not rows:
                print("(no matches)"); return
            print("#  Count  First       Text")
            for i, r in enumerate(rows, 1):
                c, v, w, _ = r.locations[0]
                print(f"{i:<2} {r.count:<6} {f'{c}:{v}:{w}':<11} {r.text}")

        if args.q:
            run_query(args.q)

        if args.repl:
            print("Type a transliteration (empty line to exit).")
            while True:
                try:
                    q = input("> ").strip()
                except (EOFError, KeyboardInterrupt):
                    break
                if not q:
                    break
                run_query(q)

        return 0
    finally:
        eng.shutdown()


if __name__ == "__main__":
    raise SystemExit(main())
