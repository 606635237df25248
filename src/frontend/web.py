from __future__ import annotations
import argparse
from flask import Flask, request, jsonify, Response
from bookindex.engine import Engine
from bookindex.models import IndexSettings
from bookindex.serializer import to_json

app = Flask(__name__)
_engine: Engine | None = None


def _require_engine() -> Engine:
    if _engine is None or _engine.run is None:
        raise RuntimeError("index not built; start the viewer with --dict and --chapters")
    return _engine

# ---------- API ----------
@app.get("/health")
def health():
    stats = _engine.stats() if _engine is not None else {"words": 0, "chapters": 0, "failed": 0}
    return jsonify({"ok": _engine is not None and _engine.run is not None, **stats})

@app.get("/api/index")
def api_index():
    return jsonify(to_json(_require_engine().result))

@app.get("/api/word")
def api_word():
    w = request.args.get("w", "", type=str).strip()
    if not w:
        return jsonify({"error": "missing query parameter 'w'"}), 400
    occs = _require_engine().lookup(w)
    if not occs:
        return jsonify({"error": f"{w!r} is not in the index"}), 404
    return jsonify({"word": w, "occurrences": [str(o) for o in occs]})

@app.get("/api/failures")
def api_failures():
    return jsonify([
        {"chapter": f.chapter, "source": f.source, "error": f.error}
        for f in _require_engine().failures
    ])

# ---------- UI ----------
@app.get("/")
def home():
    # Single page: fetches /api/index and filters it client-side.
    html = r"""
<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8" />
<meta name="viewport" content="width=device-width,initial-scale=1" />
<title>Book Index</title>
<style>
:root{ --bg:#0b0f14; --panel:#0f141b; --ink:#cfd8e3; --muted:#8a94a6; --accent:#6ee7ff; --border:#1c2530; --danger:#ff5d5d; }
*{box-sizing:border-box}
body{ margin:0; background:var(--bg); color:var(--ink); font:16px/1.45 system-ui,-apple-system,Segoe UI,Roboto,Arial; }
.container{ max-width:980px; margin:24px auto; padding:0 16px; }
.card{ background:var(--panel); border:1px solid var(--border); border-radius:16px; padding:18px; }
h1{ font-size:20px; margin:0 0 8px 0; }
input{ width:100%; padding:12px 14px; border-radius:12px; border:1px solid var(--border); background:#0b1117; color:var(--ink); font-size:16px; }
.meta{ color:var(--muted); font-size:13px; margin:8px 0; }
.err{ color:var(--danger); font-size:14px; }
.row{ display:grid; grid-template-columns:12rem 1fr; gap:10px; padding:8px 4px; border-top:1px solid var(--border); }
.mono{ font-family: ui-monospace, Menlo, Consolas, monospace; color:var(--accent) }
</style>
</head>
<body>
  <div class="container">
    <div class="card">
      <h1>Book Index</h1>
      <form onsubmit="return false"><input id="q" type="text" placeholder="Filter words…" autocomplete="off" autofocus /></form>
      <div id="stats" class="meta">Loading…</div>
      <div id="fail" class="err"></div>
      <div id="out"></div>
    </div>
  </div>
<script>
const $ = (s) => document.querySelector(s);
let index = {};
function esc(s){ return s.replace(/[&<>"]/g, c => ({"&":"&amp;","<":"&lt;",">":"&gt;",'"':"&quot;"}[c])); }
function show(){
  const f = $("#q").value.trim();
  const words = Object.keys(index).filter(w => !f || w.includes(f));
  $("#stats").textContent = `Words: ${words.length} of ${Object.keys(index).length}`;
  $("#out").innerHTML = words.map(w =>
    `<div class="row"><div>${esc(w)}</div><div class="mono">${index[w].join(" ")}</div></div>`).join("");
}
async function init(){
  index = await (await fetch("/api/index")).json();
  const failures = await (await fetch("/api/failures")).json();
  if(failures.length){
    $("#fail").textContent = "Failed chapters: " + failures.map(f => `${f.chapter} (${f.error})`).join(", ");
  }
  show();
}
$("#q").addEventListener("input", show);
init().catch(e => { $("#stats").textContent = `Error: ${e.message ?? e}`; });
</script>
</body>
</html>
"""
    return Response(html, mimetype="text/html")

def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Run the Flask index viewer on top of Engine")
    ap.add_argument("--dict", dest="dictionary", required=True)
    src = ap.add_mutually_exclusive_group(required=True)
    src.add_argument("--chapters", default=None)
    src.add_argument("--files", nargs="+", default=None)
    ap.add_argument("--fold", action="store_true", help="Ignore case and strip punctuation")
    ap.add_argument("--host", default="127.0.0.1")
    ap.add_argument("--port", type=int, default=8000)
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args(argv)

    settings = IndexSettings(case_sensitive=not args.fold, strip_punctuation=args.fold)

    global _engine
    _engine = Engine(settings)
    _engine.build(args.dictionary, chapters_dir=args.chapters, files=args.files, verbose=args.verbose)

    try:
        app.run(host=args.host, port=args.port, debug=args.verbose)
    finally:
        _engine.shutdown()
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
