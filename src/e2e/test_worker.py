from pathlib import Path
import pytest
from bookindex.errors import ChapterReadError
from bookindex.models import ChapterSource, IndexSettings, Occurrence
from bookindex.shared_index import SharedIndex
from bookindex.worker import index_chapter, scan_chapter, scan_lines


def _collect(lines, vocab, settings=None, chapter=1):
    found = []
    report = scan_lines(chapter, lines, frozenset(vocab), settings or IndexSettings(),
                        lambda w, o: found.append((w, str(o))))
    return found, report

def test_lines_are_numbered_from_one():
    found, report = _collect(["a b", "", "b"], {"b"}, chapter=3)
    assert found == [("b", "3.1"), ("b", "3.3")]
    assert report.lines_scanned == 3
    assert report.occurrences == 2

def test_default_match_is_case_sensitive_and_whitespace_only():
    found, _ = _collect(["Whale whale whale, whale."], {"whale"})
    assert found == [("whale", "1.1")]

def test_fold_matches_original_behaviour():
    settings = IndexSettings(case_sensitive=False, strip_punctuation=True)
    found, _ = _collect(["Whale whale, WHALE."], {"whale"}, settings)
    assert found == [("whale", "1.1")] * 3

def test_skip_header_lines_keeps_numbering():
    settings = IndexSettings(skip_header_lines=2)
    found, report = _collect(["sea", "sea", "sea"], {"sea"}, settings)
    assert found == [("sea", "1.3")]
    assert report.lines_scanned == 1

def test_undecodable_line_is_skipped():
    lines = [b"sea one", b"sea \xff\xfe broken", "sea \udcff surrogate", b"sea three"]
    found, report = _collect(lines, {"sea"})
    assert found == [("sea", "1.1"), ("sea", "1.4")]
    assert report.lines_skipped == 2
    assert report.lines_scanned == 2

def test_unreadable_source_raises_chapter_read_error(tmp_path: Path):
    src = ChapterSource.from_path(4, str(tmp_path / "missing.txt"))
    with pytest.raises(ChapterReadError) as ei:
        scan_chapter(src, frozenset({"x"}), IndexSettings())
    assert ei.value.chapter == 4

def test_index_chapter_appends_into_shared_index(tmp_path: Path):
    p = tmp_path / "c.txt"
    p.write_bytes(b"the sea\r\nthe whale\n")
    idx = SharedIndex()
    report = index_chapter(ChapterSource.from_path(2, str(p)), frozenset({"sea", "whale"}), IndexSettings(), idx)
    idx.seal()
    assert idx.snapshot() == {"sea": (Occurrence(2, 1),), "whale": (Occurrence(2, 2),)}
    assert report.source == str(p)

def test_scan_chapter_returns_private_map():
    report, local = scan_chapter(ChapterSource.from_lines(1, ["x y x"]), frozenset({"x"}), IndexSettings())
    assert local == {"x": [Occurrence(1, 1), Occurrence(1, 1)]}
    assert report.occurrences == 2

def test_non_text_line_is_skipped():
    found, report = _collect(["sea", None, 42, "sea"], {"sea"})
    assert found == [("sea", "1.1"), ("sea", "1.4")]
    assert report.lines_skipped == 2

def test_byte_order_mark_dropped_from_first_line_only():
    found, _ = _collect([b"\xef\xbb\xbfsea", "\ufeffsea"], {"sea"})
    assert found == [("sea", "1.1")]

def test_nul_in_path_raises_chapter_read_error():
    with pytest.raises(ChapterReadError):
        scan_chapter(ChapterSource.from_path(1, "a\0b.txt"), frozenset({"x"}), IndexSettings())
