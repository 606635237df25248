"""
Vocabulary loading and chapter discovery.

Thin I/O wrappers that hand the coordinator its two inputs: a frozen
vocabulary set and an ordered list of ChapterSource objects numbered 1..N.

Vocabulary file format:
    words separated by whitespace, normally one per line;
    blank lines and lines starting with '#' are ignored.
    Words go through the same tokenize() as chapter lines, so case folding
    and punctuation stripping apply to both sides.

Chapter ordering:
    files in a directory are numbered in natural filename order
    ("ch2.txt" before "ch10.txt"); explicit file lists keep their order.
"""

from __future__ import annotations
import os
import re
from pathlib import Path
from typing import FrozenSet, Iterable, List, Optional, Set

from . import config as CFG
from .errors import VocabularyLoadError
from .models import ChapterSource, IndexSettings
from .normalize import BOM, tokenize

_DIGITS = re.compile(r"(\d+)")


def parse_vocabulary(lines: Iterable[str], settings: Optional[IndexSettings] = None) -> FrozenSet[str]:
    settings = settings or IndexSettings()
    words: Set[str] = set()
    for line in lines:
        stripped = line.removeprefix(BOM).strip()
        if not stripped or stripped.startswith("#"):
            continue
        words.update(tokenize(stripped, case_sensitive=settings.case_sensitive,
                              strip_punctuation=settings.strip_punctuation))
    return frozenset(words)


def load_vocabulary(path: str | Path, settings: Optional[IndexSettings] = None) -> FrozenSet[str]:
    """
    Read the dictionary file. Any failure to open or decode it raises
    VocabularyLoadError, which aborts the run before indexing starts.
    """
    settings = settings or IndexSettings()
    try:
        with open(path, "r", encoding=settings.encoding) as f:
            return parse_vocabulary(f, settings)
    except (OSError, UnicodeDecodeError) as e:
        raise VocabularyLoadError(str(path), e) from e


def _natural_key(name: str):
    return [int(part) if part.isdigit() else part.lower() for part in _DIGITS.split(name)]


def discover_chapters(root: str | Path, include_exts: Optional[Iterable[str]] = None) -> List[ChapterSource]:
    """
    List the chapter files directly under `root` and number them 1..N.

    Hidden files and subdirectories are ignored. Extensions are matched
    case-insensitively; a leading dot is optional.
    """
    root = Path(root)
    if not root.exists():
        raise FileNotFoundError(root)
    if not root.is_dir():
        raise NotADirectoryError(root)

    exts = {e.lower() if str(e).startswith(".") else "." + str(e).lower()
            for e in (include_exts or CFG.INCLUDE_EXTS)}

    names: List[str] = []
    with os.scandir(root) as it:
        for entry in it:
            if entry.name.startswith("."):
                continue
            if not entry.is_file(follow_symlinks=True):
                continue
            if Path(entry.name).suffix.lower() not in exts:
                continue
            names.append(entry.name)

    names.sort(key=_natural_key)
    return chapters_from_paths(str(root / n) for n in names)


def chapters_from_paths(paths: Iterable[str | Path]) -> List[ChapterSource]:
    return [ChapterSource.from_path(i, str(p)) for i, p in enumerate(paths, start=1)]
