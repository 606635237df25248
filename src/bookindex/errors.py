"""
Exceptions raised while building a book index.

Only VocabularyLoadError and IndexingAbortedError ever reach the caller of a
run. ChapterReadError is caught at the worker boundary and turned into a
ChapterFailure; EncodingError never leaves the chapter it occurred in.
"""

from __future__ import annotations

from typing import Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from .models import ChapterFailure


class BookIndexError(Exception):
    """Base class for every error raised by bookindex."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class VocabularyLoadError(BookIndexError):
    """
    The dictionary source is missing, unreadable or cannot be decoded.

    Fatal: raised before any chapter work starts.

    Attributes:
        path: The dictionary path that failed to load.
    """

    def __init__(self, path: str, cause: BaseException | str) -> None:
        super().__init__(f"cannot load vocabulary from {path}: {cause}")
        self.path = path
        self.cause = cause


class ChapterReadError(BookIndexError):
    """
    A chapter's source could not be read.

    Isolated to the worker that scans that chapter; the coordinator records
    it as a ChapterFailure and keeps the other chapters' results.
    """

    def __init__(self, chapter: int, source: str, cause: BaseException | str) -> None:
        super().__init__(f"chapter {chapter} ({source}): {cause}")
        self.chapter = chapter
        self.source = source
        self.cause = cause

    def __reduce__(self):
        # process pools pickle exceptions back to the parent
        return (self.__class__, (self.chapter, self.source, str(self.cause)))


class EncodingError(BookIndexError):
    """A single chapter line cannot be decoded or tokenized; the line is skipped."""

    def __init__(self, chapter: int, line: int, cause: BaseException | str) -> None:
        super().__init__(f"chapter {chapter}, line {line}: {cause}")
        self.chapter = chapter
        self.line = line
        self.cause = cause


class IndexingAbortedError(BookIndexError):
    """
    Fail-fast outcome: at least one chapter failed and the run was abandoned.

    Attributes:
        failures: Every chapter failure observed before the barrier.
        cancelled: Chapter numbers that were never started.
    """

    def __init__(self, failures: Sequence["ChapterFailure"], cancelled: Sequence[int] = ()) -> None:
        chapters = ", ".join(str(f.chapter) for f in failures) or "none"
        super().__init__(f"indexing aborted: failed chapters [{chapters}], {len(cancelled)} cancelled")
        self.failures = list(failures)
        self.cancelled = list(cancelled)
