"""
Book Index Module

Builds a word-occurrence index over a multi-chapter book, restricted to a
vocabulary of words of interest. Every chapter is scanned by its own worker
(thread or process); occurrences are accumulated into one index and the
result is sorted so the listing is identical from run to run regardless of
which chapter finished first.

The module is split by concern:
- Vocabulary loading and chapter discovery (loader)
- Per-chapter scanning (worker) and the concurrent accumulator (shared_index)
- The coordinator that spawns workers and waits on the join barrier (engine)
- The `word c.l c.l ...` listing (serializer)

Main Functions:
    build_index(vocabulary, chapters, settings): run one indexing pass
    render(result): serialize an IndexedResult to the text listing

Example Usage:
    from bookindex import ChapterSource, build_index, render

    run = build_index({"whale", "sea"}, [
        ChapterSource.from_lines(1, ["call me ishmael", "the whale and the sea"]),
        ChapterSource.from_lines(2, ["a whale appears"]),
    ])
    print(render(run.result), end="")
    # sea 1.2
    # whale 1.2 2.1
"""

# src/bookindex/__init__.py
from .engine import Coordinator, Engine, build_index
from .errors import (
    BookIndexError,
    ChapterReadError,
    EncodingError,
    IndexingAbortedError,
    VocabularyLoadError,
)
from .models import ChapterFailure, ChapterSource, IndexedResult, IndexRun, IndexSettings, Occurrence
from .serializer import render

__version__ = "1.0.0"
__all__ = [
    "build_index", "render", "Coordinator", "Engine",
    "ChapterSource", "ChapterFailure", "IndexedResult", "IndexRun", "IndexSettings", "Occurrence",
    "BookIndexError", "VocabularyLoadError", "ChapterReadError", "EncodingError", "IndexingAbortedError",
]
