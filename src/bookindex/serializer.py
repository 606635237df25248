from __future__ import annotations
import json
import os
from typing import Callable, Dict, Iterable, List, TextIO

from .models import IndexedResult, Occurrence


def format_entry(word: str, occurrences: Iterable[Occurrence]) -> str:
    """`whale 1.2 2.1` -- the word, then each occurrence as chapter.line."""
    return " ".join([word, *(str(o) for o in occurrences)])


def iter_lines(result: IndexedResult) -> Iterable[str]:
    for word, occs in result:
        yield format_entry(word, occs)


def render(result: IndexedResult) -> str:
    return "".join(line + "\n" for line in iter_lines(result))


def write(result: IndexedResult, sink: TextIO) -> int:
    """Write the listing to an open text stream. Returns the number of lines written."""
    n = 0
    for line in iter_lines(result):
        sink.write(line + "\n")
        n += 1
    return n


def _atomic_write(path: str, emit: Callable[[TextIO], int]) -> int:
    tmp = f"{path}.tmp"
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    with open(tmp, "w", encoding="utf-8", newline="\n") as f:
        n = emit(f)
    os.replace(tmp, path)
    return n


def dump(result: IndexedResult, path: str) -> int:
    """Write the listing to `path` via a temp file and an atomic replace."""
    return _atomic_write(path, lambda f: write(result, f))


def to_json(result: IndexedResult) -> Dict[str, List[str]]:
    return {word: [str(o) for o in occs] for word, occs in result}


def dump_json(result: IndexedResult, path: str) -> int:
    """Same as dump(), with the to_json() mapping as content. Returns the word count."""
    def emit(f: TextIO) -> int:
        data = to_json(result)
        f.write(json.dumps(data, ensure_ascii=False, indent=2) + "\n")
        return len(data)
    return _atomic_write(path, emit)
