# bookindex/engine.py
from __future__ import annotations

import logging
import os
import time
from concurrent.futures import (
    FIRST_EXCEPTION,
    Executor,
    Future,
    ProcessPoolExecutor,
    ThreadPoolExecutor,
    wait,
)
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from . import config as CFG
from .errors import ChapterReadError, IndexingAbortedError
from .loader import chapters_from_paths, discover_chapters, load_vocabulary
from .models import (
    ChapterFailure,
    ChapterReport,
    ChapterSource,
    IndexedResult,
    IndexRun,
    IndexSettings,
    Occurrence,
)
from .normalize import tokenize
from .shared_index import SharedIndex
from .worker import index_chapter, scan_chapter

log = logging.getLogger(__name__)


class Coordinator:
    """
    Runs one indexing pass: one worker per chapter, a join barrier, then the
    sorted result.

    Best-effort by default: a chapter that fails is reported and the other
    chapters are still indexed. With settings.fail_fast, chapters that have
    not started yet are cancelled after the first failure and the run raises
    IndexingAbortedError once the started workers have finished.
    """

    def __init__(self, settings: Optional[IndexSettings] = None) -> None:
        self.settings = settings or IndexSettings()

    def run(self, vocabulary: Iterable[str], chapters: Sequence[ChapterSource]) -> IndexRun:
        vocab = frozenset(vocabulary)
        chapters = list(chapters)
        _check_unique(chapters)
        settings = self.settings

        t0 = time.perf_counter()
        index = SharedIndex()
        if not chapters:
            index.seal()
            return IndexRun(result=index.result(), elapsed=time.perf_counter() - t0)

        workers = settings.max_workers(len(chapters))
        log.info("Indexing %d chapters against %d words (mode=%s, strategy=%s, workers=%d)",
                 len(chapters), len(vocab), settings.mode, settings.strategy, workers)

        exec_cls = ThreadPoolExecutor if settings.mode == "threads" else ProcessPoolExecutor
        with exec_cls(max_workers=workers) as ex:
            futures = [(ch, self._submit(ex, ch, vocab, index)) for ch in chapters]
            if settings.fail_fast:
                _cancel_after_first_failure([f for _, f in futures])
            # join barrier: every worker has terminated (or was never started)
            wait([f for _, f in futures])

        failures: List[ChapterFailure] = []
        reports: List[ChapterReport] = []
        cancelled: List[int] = []
        for ch, fut in futures:
            if fut.cancelled():
                cancelled.append(ch.number)
                continue
            exc = fut.exception()
            if isinstance(exc, ChapterReadError):
                log.warning("chapter %d failed: %s", ch.number, exc)
                failures.append(ChapterFailure(ch.number, ch.label, str(exc.cause)))
                continue
            if exc is not None:
                raise exc
            if settings.strategy == "merge":
                report, local = fut.result()
                index.merge(local)
            else:
                report = fut.result()
            reports.append(report)
        index.seal()

        if settings.fail_fast and (failures or cancelled):
            raise IndexingAbortedError(failures, cancelled)

        run = IndexRun(
            result=index.result(),
            failures=tuple(failures),
            reports=tuple(reports),
            elapsed=time.perf_counter() - t0,
        )
        log.info("Indexed %d words from %d chapters in %.2fs (%d failed)",
                 len(run.result), len(reports), run.elapsed, len(failures))
        return run

    def _submit(self, ex: Executor, ch: ChapterSource, vocab: frozenset, index: SharedIndex) -> Future:
        if self.settings.strategy == "merge":
            return ex.submit(scan_chapter, ch, vocab, self.settings)
        return ex.submit(index_chapter, ch, vocab, self.settings, index)


def _check_unique(chapters: Sequence[ChapterSource]) -> None:
    seen = set()
    for ch in chapters:
        if ch.number in seen:
            raise ValueError(f"chapter {ch.number} appears more than once")
        seen.add(ch.number)


def _cancel_after_first_failure(futures: List[Future]) -> None:
    pending = set(futures)
    while pending:
        done, pending = wait(pending, return_when=FIRST_EXCEPTION)
        if any(f.exception() is not None for f in done):
            for f in pending:
                f.cancel()
            return


def build_index(
    vocabulary: Iterable[str],
    chapters: Sequence[ChapterSource],
    settings: Optional[IndexSettings] = None,
) -> IndexRun:
    """Run a Coordinator once and return its IndexRun."""
    return Coordinator(settings).run(vocabulary, chapters)


class Engine:
    """
    Thin orchestration layer used by the CLI and the Flask viewer:
      * build(dictionary, chapters_dir=... | files=...): load -> index -> keep the run
      * lookup(word): occurrences of one word in the finished index
      * shutdown(): drop the run
    """

    # ------------- lifecycle -------------

    def __init__(self, settings: Optional[IndexSettings] = None) -> None:
        self.settings = settings or IndexSettings()
        self.run: Optional[IndexRun] = None

    # /* ~~~ Load vocabulary + chapters and index them ~~~ */
    def build(
        self,
        dictionary: str,
        *,
        chapters_dir: Optional[str] = None,
        files: Optional[Sequence[str]] = None,
        verbose: bool = False,
    ) -> IndexRun:
        if verbose or CFG.VERBOSE:
            logging.basicConfig(level=logging.INFO)
            os.environ["BOOKINDEX_VERBOSE"] = "1"

        if (chapters_dir is None) == (not files):
            raise ValueError("build(): pass exactly one of chapters_dir or files")

        # fatal before any chapter work starts
        vocab = load_vocabulary(dictionary, self.settings)
        log.info("Loaded %d vocabulary words from %s", len(vocab), dictionary)

        if chapters_dir is not None:
            chapters = discover_chapters(chapters_dir, self.settings.include_exts)
        else:
            chapters = chapters_from_paths(files or [])
        if not chapters:
            raise ValueError("build(): no chapter files found")

        self.run = Coordinator(self.settings).run(vocab, chapters)
        return self.run

    def attach(self, run: IndexRun) -> None:
        """Use an already computed run (tests, embedding callers)."""
        self.run = run

    # ------------- query -------------

    @property
    def result(self) -> IndexedResult:
        if self.run is None:
            raise RuntimeError("Engine not initialized. Call build() first.")
        return self.run.result

    @property
    def failures(self) -> Tuple[ChapterFailure, ...]:
        return self.run.failures if self.run is not None else ()

    def lookup(self, word: str) -> Tuple[Occurrence, ...]:
        """Occurrences of `word`, folded the same way chapter tokens were."""
        toks = tokenize(word, case_sensitive=self.settings.case_sensitive,
                        strip_punctuation=self.settings.strip_punctuation)
        if len(toks) != 1:
            return ()
        return self.result.get(toks[0])

    def stats(self) -> Dict[str, int]:
        run = self.run
        if run is None:
            return {"words": 0, "chapters": 0, "failed": 0}
        return {"words": len(run.result), "chapters": len(run.reports), "failed": len(run.failures)}

    # ------------- teardown -------------

    def shutdown(self) -> None:
        self.run = None
        log.info("Engine shutdown complete")
