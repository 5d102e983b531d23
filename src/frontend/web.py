from __future__ import annotations
import argparse
from flask import Flask, request, jsonify, Response
from quranize import Engine, InvalidInputCharacter
from quranize.config import DEFAULT_LIMIT

app = Flask(__name__)
_engine: Engine | None = None


def _ready() -> Engine | None:
    """The engine if build/load has run, else None."""
    if _engine is None or _engine.index is None:
        return None
    return _engine


def _not_ready():
    return jsonify({"error": "engine not initialized"}), 503


# ---------- API ----------
@app.get("/api/search")
def api_search():
    q = request.args.get("q", "", type=str)
    k = request.args.get("k", DEFAULT_LIMIT, type=int)
    eng = _ready()
    if eng is None:
        return _not_ready()
    if not q:
        return jsonify([])
    try:
        results = eng.encode(q, limit=k)
    except InvalidInputCharacter as exc:
        return jsonify({"error": str(exc), "char": exc.char, "position": exc.position}), 400

    rows = []
    for r in results:
        locations = []
        for loc in r.locations:
            s = eng.snippet(loc, r.text)
            locations.append({
                "chapter": loc.chapter,
                "verse": loc.verse,
                "word": loc.word,
                "before": s.before,
                "text": s.text,
                "after": s.after,
            })
        rows.append({
            "text": r.text,
            "count": r.count,
            "explanation": list(r.explanation),
            "locations": locations,
        })
    return jsonify(rows)


@app.get("/api/verse/<int:chapter>/<int:verse>")
def api_verse(chapter: int, verse: int):
    eng = _ready()
    if eng is None:
        return _not_ready()
    v = eng.get_verse(chapter, verse)
    if v is None:
        return jsonify({"error": f"no verse {chapter}:{verse}"}), 404
    return jsonify({"chapter": v.chapter, "verse": v.verse, "text": v.text})


@app.get("/api/health")
def api_health():
    ready = _ready() is not None
    return jsonify({"ok": ready}), (200 if ready else 503)

# ---------- UI ----------
@app.get("/")
def home():
    html = r"""
<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8" />
<meta name="viewport" content="width=device-width,initial-scale=1" />
<title>Quranize</title>
<style>
body{margin:0;background:#0b0f14;color:#cfd8e3;font:16px/1.45 system-ui,Segoe UI,Roboto,Arial}
.container{max-width:860px;margin:24px auto;padding:0 16px}
input{width:100%;padding:12px 14px;border-radius:12px;border:1px solid #1c2530;background:#0b1117;color:#cfd8e3;font-size:16px}
.row{padding:12px 14px;border-top:1px solid #1c2530}
.ar{font-size:24px;direction:rtl;text-align:right}
.small{color:#8a94a6;font-size:13px}
.err{color:#ffb0b0}
</style>
</head>
<body>
  <div class="container">
    <h1>Quranize</h1>
    <input id="q" type="text" placeholder="Type a transliteration, e.g. bismillah" autocomplete="off" autofocus />
    <div id="out"></div>
  </div>
<script>
const q = document.querySelector("#q"), out = document.querySelector("#out");
let t;
async function search(){
  const query = q.value.trim();
  if(!query){ out.innerHTML = ""; return; }
  const resp = await fetch(`/api/search?q=${encodeURIComponent(query)}`);
  const data = await resp.json();
  if(!resp.ok){ out.innerHTML = `<div class="row err">${data.error}</div>`; return; }
  if(data.length === 0){ out.innerHTML = `<div class="row small">No matches.</div>`; return; }
  out.innerHTML = data.map(r => `
    <div class="row">
      <div class="ar">${r.text}</div>
      <div class="small">${r.explanation.join("·")} · ${r.count} location(s): ${r.locations.map(l => l.chapter + ":" + l.verse).join(", ")}</div>
    </div>`).join("");
}
q.addEventListener("input", () => { clearTimeout(t); t = setTimeout(search, 150); });
</script>
</body>
</html>
"""
    return Response(html, mimetype="text/html")

def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Run Flask UI on top of the quranize Engine")
    mode = ap.add_mutually_exclusive_group(required=True)
    mode.add_argument("--build", action="store_true")
    mode.add_argument("--load", action="store_true")
    ap.add_argument("--source", default=None)
    ap.add_argument("--cache", default=None)
    ap.add_argument("--max-words", type=int, default=None)
    ap.add_argument("--host", default="127.0.0.1")
    ap.add_argument("--port", type=int, default=8000)
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args(argv)

    global _engine
    _engine = Engine()
    if args.build:
        _engine.build(source=args.source, max_words=args.max_words, cache=args.cache, verbose=args.verbose)
    else:
        if not args.cache:
            ap.error("--load requires --cache")
        _engine.load(cache=args.cache, source=args.source, verbose=args.verbose)

    try:
        app.run(host=args.host, port=args.port, debug=args.verbose)
    finally:
        _engine.shutdown()
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
