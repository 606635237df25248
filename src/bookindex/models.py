# src/bookindex/models.py
"""
Data models for the book indexer.

- Occurrence: one (chapter, line) location of a vocabulary word.
- ChapterSource: one chapter, bound either to a file or to in-memory lines.
- ChapterFailure / ChapterReport: per-chapter outcome of a run.
- IndexedResult: the finished, sorted, read-only index.
- IndexRun: everything a coordinator run produces.
- IndexSettings: per-run configuration (defaults come from config.py).

These classes hold no scanning or locking logic; they only give the data a
shape that both thread and process workers can pass around.
"""

from __future__ import annotations
import codecs
from dataclasses import dataclass, field
from functools import cached_property
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from . import config as CFG

Line = Union[str, bytes]


@dataclass(frozen=True, order=True)
class Occurrence:
    """
    A location where a word appears.

    Ordering is by chapter, then line, which is the order used in the
    serialized listing.
    """
    chapter: int
    line: int

    def __str__(self) -> str:
        return f"{self.chapter}.{self.line}"


@dataclass(frozen=True)
class ChapterSource:
    """
    A chapter number bound to a readable line sequence.

    Attributes
    ----------
    number : int
        1-based chapter number used in every Occurrence produced from it.
    path : Optional[str]
        File to read the chapter from (read as bytes, decoded per line).
    lines : Optional[Tuple[Line, ...]]
        In-memory lines, used instead of `path` when given.
    """
    number: int
    path: Optional[str] = None
    lines: Optional[Tuple[Line, ...]] = None

    def __post_init__(self) -> None:
        if self.number < 1:
            raise ValueError(f"chapter numbers start at 1, got {self.number}")

    @classmethod
    def from_path(cls, number: int, path: str) -> "ChapterSource":
        return cls(number=number, path=str(path))

    @classmethod
    def from_lines(cls, number: int, lines: Iterable[Line]) -> "ChapterSource":
        return cls(number=number, lines=tuple(lines))

    @property
    def label(self) -> str:
        return self.path if self.path is not None else f"<chapter {self.number}>"

    def read(self) -> List[Line]:
        """Return the raw lines of the chapter. Raises OSError when unreadable."""
        if self.lines is not None:
            return list(self.lines)
        if self.path is None:
            raise OSError(f"chapter {self.number} has no source")
        with open(self.path, "rb") as f:
            data = f.read()
        return data.splitlines()


@dataclass(frozen=True)
class ChapterFailure:
    chapter: int
    source: str
    error: str


@dataclass(frozen=True)
class ChapterReport:
    """Counters for one successfully scanned chapter."""
    chapter: int
    source: str
    lines_scanned: int = 0
    lines_skipped: int = 0
    occurrences: int = 0


@dataclass(frozen=True)
class IndexedResult:
    """
    Finalized view of the index: words in lexicographic order, each with its
    occurrences sorted by (chapter, line). Built once, never mutated.
    """
    entries: Tuple[Tuple[str, Tuple[Occurrence, ...]], ...] = ()

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Iterable[Occurrence]]) -> "IndexedResult":
        return cls(entries=tuple(
            (word, tuple(sorted(occs)))
            for word, occs in sorted(mapping.items())
        ))

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[Tuple[str, Tuple[Occurrence, ...]]]:
        return iter(self.entries)

    def __contains__(self, word: object) -> bool:
        return word in self._by_word

    def words(self) -> List[str]:
        return [w for w, _ in self.entries]

    def get(self, word: str) -> Tuple[Occurrence, ...]:
        return self._by_word.get(word, ())

    def as_dict(self) -> Dict[str, Tuple[Occurrence, ...]]:
        return dict(self.entries)

    @cached_property
    def _by_word(self) -> Dict[str, Tuple[Occurrence, ...]]:
        return dict(self.entries)


@dataclass(frozen=True)
class IndexRun:
    result: IndexedResult
    failures: Tuple[ChapterFailure, ...] = ()
    reports: Tuple[ChapterReport, ...] = ()
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return not self.failures


@dataclass(frozen=True)
class IndexSettings:
    """
    Per-run options. Every field defaults to the matching config.py constant,
    so a bare IndexSettings() reproduces the module configuration.
    """
    mode: str = CFG.MODE
    strategy: str = CFG.STRATEGY
    workers: Optional[int] = None
    case_sensitive: bool = CFG.CASE_SENSITIVE
    strip_punctuation: bool = CFG.STRIP_PUNCTUATION
    dedupe_lines: bool = CFG.DEDUPE_LINES
    skip_header_lines: int = CFG.SKIP_HEADER_LINES
    encoding: str = CFG.ENCODING
    fail_fast: bool = CFG.FAIL_FAST
    include_exts: frozenset = field(default_factory=lambda: frozenset(CFG.INCLUDE_EXTS))

    def __post_init__(self) -> None:
        if self.mode not in ("threads", "procs"):
            raise ValueError(f"unknown mode {self.mode!r} (expected 'threads' or 'procs')")
        if self.strategy not in ("shared", "merge"):
            raise ValueError(f"unknown strategy {self.strategy!r} (expected 'shared' or 'merge')")
        if self.mode == "procs" and self.strategy == "shared":
            raise ValueError("the 'shared' strategy needs threads; use strategy='merge' with mode='procs'")
        if self.workers is not None and self.workers < 1:
            raise ValueError("workers must be >= 1")
        if self.skip_header_lines < 0:
            raise ValueError("skip_header_lines must be >= 0")
        try:
            codecs.lookup(self.encoding)
        except LookupError:
            raise ValueError(f"unknown encoding {self.encoding!r}") from None

    def max_workers(self, chapters: int) -> int:
        if self.workers is not None:
            n = self.workers
        elif self.mode == "threads":
            n = CFG.DEFAULT_WORKERS_THREADS
        else:
            n = CFG.DEFAULT_WORKERS_PROCS
        return max(1, min(n, chapters))
