from pathlib import Path
import json
import pytest
from bookindex.__main__ import main


def _seed(tmp: Path) -> tuple[str, str]:
    book = tmp / "Book"; book.mkdir()
    (book / "chapter1.txt").write_text("call me ishmael\nthe whale and the sea\n", encoding="utf-8")
    (book / "chapter2.txt").write_text("a whale appears\n", encoding="utf-8")
    d = tmp / "dict.txt"
    d.write_text("whale\nsea\n", encoding="utf-8")
    return str(d), str(book)

@pytest.mark.e2e
def test_cli_prints_listing(tmp_path: Path, capsys):
    d, book = _seed(tmp_path)
    assert main(["--dict", d, "--chapters", book]) == 0
    assert capsys.readouterr().out == "sea 1.2\nwhale 1.2 2.1\n"

@pytest.mark.e2e
def test_cli_writes_out_file_with_procs(tmp_path: Path):
    d, book = _seed(tmp_path)
    out = tmp_path / "index.txt"
    assert main(["--dict", d, "--chapters", book, "--out", str(out), "--mode", "procs", "--workers", "2"]) == 0
    assert out.read_text(encoding="utf-8") == "sea 1.2\nwhale 1.2 2.1\n"

@pytest.mark.e2e
def test_cli_json(tmp_path: Path, capsys):
    d, book = _seed(tmp_path)
    assert main(["--dict", d, "--chapters", book, "--json"]) == 0
    assert json.loads(capsys.readouterr().out) == {"sea": ["1.2"], "whale": ["1.2", "2.1"]}

@pytest.mark.e2e
def test_cli_partial_failure_exit_code(tmp_path: Path, capsys):
    d, book = _seed(tmp_path)
    missing = tmp_path / "gone.txt"
    code = main(["--dict", d, "--files", str(missing), str(Path(book) / "chapter2.txt")])
    captured = capsys.readouterr()
    assert code == 2
    assert captured.out == "whale 2.1\n"
    assert "chapter 1" in captured.err

@pytest.mark.e2e
def test_cli_fail_fast(tmp_path: Path, capsys):
    d, book = _seed(tmp_path)
    code = main(["--dict", d, "--files", str(tmp_path / "gone.txt"), "--fail-fast"])
    captured = capsys.readouterr()
    assert code == 1
    assert captured.out == ""
    assert "aborted" in captured.err

@pytest.mark.e2e
def test_cli_missing_dictionary(tmp_path: Path, capsys):
    _, book = _seed(tmp_path)
    assert main(["--dict", str(tmp_path / "none.txt"), "--chapters", book]) == 1
    assert "cannot load vocabulary" in capsys.readouterr().err

def test_cli_rejects_shared_strategy_with_procs(tmp_path: Path, capsys):
    d, book = _seed(tmp_path)
    assert main(["--dict", d, "--chapters", book, "--mode", "procs", "--strategy", "shared"]) == 1
    assert capsys.readouterr().out == ""

@pytest.mark.parametrize("extra", [["--workers", "0"], ["--skip-header", "-1"], ["--encoding", "no-such-codec"]])
def test_cli_bad_settings_exit_fatal(tmp_path: Path, capsys, extra):
    d, book = _seed(tmp_path)
    assert main(["--dict", d, "--chapters", book, *extra]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "error" in captured.err

def test_cli_usage_errors_exit_fatal(tmp_path: Path):
    _, book = _seed(tmp_path)
    with pytest.raises(SystemExit) as ei:
        main(["--chapters", book])
    assert ei.value.code == 1
    with pytest.raises(SystemExit) as ei:
        main(["--dict", "d.txt", "--chapters", book, "--workers", "many"])
    assert ei.value.code == 1

@pytest.mark.e2e
def test_cli_json_out_file(tmp_path: Path, capsys):
    d, book = _seed(tmp_path)
    out = tmp_path / "index.json"
    assert main(["--dict", d, "--chapters", book, "--json", "--out", str(out)]) == 0
    assert capsys.readouterr().out == ""
    assert json.loads(out.read_text(encoding="utf-8")) == {"sea": ["1.2"], "whale": ["1.2", "2.1"]}
    assert not (tmp_path / "index.json.tmp").exists()

@pytest.mark.e2e
def test_cli_fold_and_skip_header(tmp_path: Path, capsys):
    book = tmp_path / "Book"; book.mkdir()
    (book / "1.txt").write_text("THE WHALE\nThe Whale, the sea.\n", encoding="utf-8")
    d = tmp_path / "dict.txt"; d.write_text("whale\n", encoding="utf-8")
    assert main(["--dict", str(d), "--chapters", str(book), "--fold", "--skip-header", "1"]) == 0
    assert capsys.readouterr().out == "whale 1.2\n"

@pytest.mark.e2e
def test_cli_utf8_bom_files(tmp_path: Path, capsys):
    book = tmp_path / "Book"; book.mkdir()
    (book / "1.txt").write_bytes(b"\xef\xbb\xbfwhale ahoy\nsea\n")
    d = tmp_path / "dict.txt"; d.write_bytes(b"\xef\xbb\xbfwhale\nsea\n")
    assert main(["--dict", str(d), "--chapters", str(book)]) == 0
    assert capsys.readouterr().out == "sea 1.2\nwhale 1.1\n"
