from __future__ import annotations
import argparse, json, sys
from typing import TextIO

from . import config as CFG
from .engine import Engine
from .errors import IndexingAbortedError, VocabularyLoadError
from .models import ChapterFailure, IndexSettings
from .serializer import dump, dump_json, to_json, write

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_PARTIAL = 2


def _print_failures(failures: list[ChapterFailure], out: TextIO) -> None:
    print(f"{len(failures)} chapter(s) failed:", file=out)
    for f in failures:
        print(f"  chapter {f.chapter} ({f.source}): {f.error}", file=out)


class _Parser(argparse.ArgumentParser):
    """Usage errors exit with EXIT_FATAL; 2 is reserved for partial chapter failures."""

    def error(self, message: str):
        self.print_usage(sys.stderr)
        self.exit(EXIT_FATAL, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    p = _Parser(prog="bookindex", description="Concurrent word index over a multi-chapter book")
    p.add_argument("--dict", dest="dictionary", required=True, help="Vocabulary file (one word per line)")
    src = p.add_mutually_exclusive_group(required=True)
    src.add_argument("--chapters", default=None, help="Directory of chapter files (natural filename order)")
    src.add_argument("--files", nargs="+", default=None, help="Chapter files, in chapter order")
    p.add_argument("--out", default=None, help="Write the listing here instead of stdout")
    p.add_argument("--json", action="store_true", help="Emit a JSON object instead of the text listing")
    p.add_argument("--mode", choices=["threads", "procs"], default=CFG.MODE)
    p.add_argument("--strategy", choices=["shared", "merge"], default=None,
                   help="Default: shared for threads, merge for procs")
    p.add_argument("--workers", type=int, default=None)
    p.add_argument("--fold", action="store_true", help="Ignore case and strip punctuation")
    p.add_argument("--ignore-case", action="store_true")
    p.add_argument("--strip-punct", action="store_true")
    p.add_argument("--dedupe-lines", action="store_true", help="One occurrence per word per line")
    p.add_argument("--skip-header", type=int, default=CFG.SKIP_HEADER_LINES, metavar="N",
                   help="Do not scan the first N lines of each chapter")
    p.add_argument("--encoding", default=CFG.ENCODING)
    p.add_argument("--ext", nargs="+", default=None, help="Chapter file extensions (default: .txt)")
    p.add_argument("--fail-fast", action="store_true", help="Abort the run if any chapter fails")
    p.add_argument("--verbose", action="store_true")
    return p


def settings_from_args(args: argparse.Namespace) -> IndexSettings:
    strategy = args.strategy or ("merge" if args.mode == "procs" else CFG.STRATEGY)
    kwargs = dict(
        mode=args.mode,
        strategy=strategy,
        workers=args.workers,
        case_sensitive=not (args.fold or args.ignore_case),
        strip_punctuation=args.fold or args.strip_punct,
        dedupe_lines=args.dedupe_lines,
        skip_header_lines=args.skip_header,
        encoding=args.encoding,
        fail_fast=args.fail_fast,
    )
    if args.ext:
        kwargs["include_exts"] = frozenset(args.ext)
    return IndexSettings(**kwargs)


def main(argv: list[str] | None = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)

    try:
        settings = settings_from_args(args)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_FATAL

    eng = Engine(settings)
    try:
        try:
            run = eng.build(args.dictionary, chapters_dir=args.chapters, files=args.files,
                            verbose=args.verbose)
        except VocabularyLoadError as e:
            print(f"error: {e}", file=sys.stderr)
            return EXIT_FATAL
        except IndexingAbortedError as e:
            print(f"error: {e}", file=sys.stderr)
            _print_failures(e.failures, sys.stderr)
            return EXIT_FATAL
        except (OSError, ValueError) as e:
            print(f"error: {e}", file=sys.stderr)
            return EXIT_FATAL

        if args.json:
            if args.out:
                dump_json(run.result, args.out)
            else:
                sys.stdout.write(json.dumps(to_json(run.result), ensure_ascii=False, indent=2) + "\n")
        elif args.out:
            dump(run.result, args.out)
        else:
            write(run.result, sys.stdout)

        if run.failures:
            _print_failures(list(run.failures), sys.stderr)
            return EXIT_PARTIAL
        return EXIT_OK
    finally:
        eng.shutdown()


if __name__ == "__main__":
    raise SystemExit(main())
