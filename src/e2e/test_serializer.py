import io
from pathlib import Path
from bookindex.models import IndexedResult, Occurrence
import json
from bookindex.serializer import dump, dump_json, format_entry, render, to_json, write


def _result():
    return IndexedResult.from_mapping({
        "whale": [Occurrence(2, 1), Occurrence(1, 10), Occurrence(1, 2)],
        "Sea": [Occurrence(3, 3)],
        "ahab": [Occurrence(1, 1)],
    })

def test_words_and_occurrences_sorted():
    # line 10 sorts after line 2 (integer order, not "1.10" < "1.2" as decimals)
    assert render(_result()) == "Sea 3.3\nahab 1.1\nwhale 1.2 1.10 2.1\n"

def test_format_entry():
    assert format_entry("sea", [Occurrence(1, 2)]) == "sea 1.2"

def test_write_to_stream_counts_lines():
    buf = io.StringIO()
    assert write(_result(), buf) == 3
    assert buf.getvalue() == render(_result())

def test_dump_replaces_file_atomically(tmp_path: Path):
    out = tmp_path / "nested" / "index.txt"
    out.parent.mkdir()
    out.write_text("stale\n", encoding="utf-8")
    dump(_result(), str(out))
    assert out.read_text(encoding="utf-8") == render(_result())
    assert not (tmp_path / "nested" / "index.txt.tmp").exists()

def test_to_json_keeps_order():
    data = to_json(_result())
    assert list(data) == ["Sea", "ahab", "whale"]
    assert data["whale"] == ["1.2", "1.10", "2.1"]

def test_dump_json_replaces_file_atomically(tmp_path: Path):
    out = tmp_path / "index.json"
    out.write_text("stale", encoding="utf-8")
    assert dump_json(_result(), str(out)) == 3
    assert json.loads(out.read_text(encoding="utf-8")) == to_json(_result())
    assert not (tmp_path / "index.json.tmp").exists()
