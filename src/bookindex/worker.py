from __future__ import annotations
import logging
from collections import defaultdict
from typing import Callable, Dict, FrozenSet, List, Sequence, Tuple

from .errors import ChapterReadError, EncodingError
from .models import ChapterReport, ChapterSource, IndexSettings, Line, Occurrence
from .normalize import decode_line, tokenize
from .shared_index import SharedIndex

log = logging.getLogger(__name__)

Emit = Callable[[str, Occurrence], None]


def read_chapter(source: ChapterSource) -> List[Line]:
    try:
        return source.read()
    except (OSError, ValueError) as e:
        # ValueError: paths open() refuses outright, e.g. embedded NUL
        raise ChapterReadError(source.number, source.label, e) from e


def scan_lines(
    chapter: int,
    lines: Sequence[Line],
    vocabulary: FrozenSet[str],
    settings: IndexSettings,
    emit: Emit,
    source: str = "",
) -> ChapterReport:
    """
    Scan one chapter's lines (numbered from 1) and emit an Occurrence for every
    token found in the vocabulary. Lines that cannot be decoded are skipped.
    """
    scanned = skipped = found = 0
    if not vocabulary:
        return ChapterReport(chapter, source, lines_scanned=0, occurrences=0)

    for line_no, raw in enumerate(lines, start=1):
        if line_no <= settings.skip_header_lines:
            continue
        try:
            text = decode_line(raw, settings.encoding, chapter, line_no)
        except EncodingError as e:
            log.warning("skipping line: %s", e)
            skipped += 1
            continue
        scanned += 1

        seen = set()
        for tok in tokenize(text, case_sensitive=settings.case_sensitive,
                            strip_punctuation=settings.strip_punctuation):
            if tok not in vocabulary:
                continue
            if settings.dedupe_lines:
                if tok in seen:
                    continue
                seen.add(tok)
            emit(tok, Occurrence(chapter, line_no))
            found += 1

    return ChapterReport(chapter, source, lines_scanned=scanned, lines_skipped=skipped, occurrences=found)


def index_chapter(
    source: ChapterSource,
    vocabulary: FrozenSet[str],
    settings: IndexSettings,
    index: SharedIndex,
) -> ChapterReport:
    """Shared strategy: append straight into the shared index (thread mode only)."""
    lines = read_chapter(source)
    report = scan_lines(source.number, lines, vocabulary, settings, index.append, source.label)
    log.info("chapter %d: %d occurrences over %d lines", source.number, report.occurrences, report.lines_scanned)
    return report


def scan_chapter(
    source: ChapterSource,
    vocabulary: FrozenSet[str],
    settings: IndexSettings,
) -> Tuple[ChapterReport, Dict[str, List[Occurrence]]]:
    """
    Merge strategy: build a private word map for this chapter and hand it back
    to the coordinator. Module-level so process pools can pickle it.
    """
    lines = read_chapter(source)
    local: Dict[str, List[Occurrence]] = defaultdict(list)
    report = scan_lines(source.number, lines, vocabulary, settings,
                        lambda w, occ: local[w].append(occ), source.label)
    log.info("chapter %d: %d occurrences over %d lines", source.number, report.occurrences, report.lines_scanned)
    return report, dict(local)
