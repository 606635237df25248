from __future__ import annotations
import unicodedata
from typing import List

from .errors import EncodingError
from .models import Line

BOM = "\ufeff"


def strip_punct_and_symbols(s: str) -> str:
    """
    Replace punctuation and symbols with spaces, keeping letters, numbers and
    whitespace (unicode-aware). Replacing rather than dropping avoids joining
    "end.Start" into one token.

        >>> strip_punct_and_symbols("whale, sea!")
        'whale  sea '
    """
    chars = []
    for ch in s:
        cat = unicodedata.category(ch)
        if ch.isspace() or cat.startswith("L") or cat.startswith("N"):
            chars.append(ch)
        else:
            chars.append(" ")
    return "".join(chars)


def tokenize(text: str, *, case_sensitive: bool = True, strip_punctuation: bool = False) -> List[str]:
    """
    Split a line into tokens.

    Defaults to case-sensitive, whitespace-only splitting. The same function
    is applied to vocabulary lines and chapter lines, so both sides of the
    membership test are folded identically.
    """
    if not case_sensitive:
        text = text.casefold()
    if strip_punctuation:
        text = strip_punct_and_symbols(text)
    return text.split()


def decode_line(raw: Line, encoding: str, chapter: int, line_no: int) -> str:
    """
    Turn a raw chapter line into text, or raise EncodingError.

    Bytes are decoded strictly. Text lines are checked for lone surrogates,
    which come from lossy upstream decoding and cannot be tokenized reliably.
    Anything that is neither text nor bytes is rejected the same way. A byte
    order mark at the start of line 1 is dropped.
    """
    if isinstance(raw, bytes):
        try:
            text = raw.decode(encoding)
        except UnicodeDecodeError as e:
            raise EncodingError(chapter, line_no, e) from e
    elif isinstance(raw, str):
        try:
            raw.encode("utf-8")
        except UnicodeEncodeError as e:
            raise EncodingError(chapter, line_no, e) from e
        text = raw
    else:
        raise EncodingError(chapter, line_no, f"expected str or bytes, got {type(raw).__name__}")
    if line_no == 1:
        text = text.removeprefix(BOM)
    return text
