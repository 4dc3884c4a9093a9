"""String literal lexer.

Scans a single line of Python source and works out whether the cursor sits
inside a string literal. Only enough lexing is done to find string
boundaries: comments end the scan, escapes are skipped, and f-string
replacement fields are tracked so that completion is not offered inside
``{...}`` expressions.
"""

from dataclasses import dataclass
from typing import Optional

from .text import utf16_len

QUOTES = ("'", '"')

# Legal Python string prefixes (lowercase)
STRING_PREFIXES = {
    "r", "u", "b", "f", "t",
    "rb", "br", "fr", "rf", "tr", "rt",
}


@dataclass
class StringInfo:
    """The string literal enclosing the cursor."""
    content_before_cursor: str
    is_raw: bool
    is_interpolated: bool
    quote_index: int            # index of the opening quote in the line
    content_start: int          # index of the first character after the delimiter
    content_start_utf16: int    # same position in UTF-16 code units
    quote_char: str = '"'
    delimiter_length: int = 1


@dataclass
class _OpenString:
    quote_char: str
    delimiter_length: int
    is_raw: bool
    is_interpolated: bool
    start: int


def _is_word_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


def _read_prefix(line: str, quote_index: int) -> tuple[bool, bool]:
    """Inspect up to two ASCII letters before a quote.

    Returns (is_raw, is_interpolated). A prefix only counts when the
    character before it is not part of an identifier.
    """
    start = quote_index
    while start > 0 and quote_index - start < 2:
        ch = line[start - 1]
        if not (ch.isascii() and ch.isalpha()):
            break
        start -= 1

    # Try the longest candidate first, then the single letter nearest the quote
    for begin in range(start, quote_index):
        prefix = line[begin:quote_index].lower()
        if prefix not in STRING_PREFIXES:
            continue
        if begin > 0 and _is_word_char(line[begin - 1]):
            continue
        return "r" in prefix, ("f" in prefix or "t" in prefix)
    return False, False


def interpolation_depth(content: str) -> int:
    """Brace nesting depth at the end of f-string ``content``.

    Doubled braces outside a replacement field are literal.
    """
    depth = 0
    i = 0
    while i < len(content):
        ch = content[i]
        if depth == 0 and ch in "{}" and content[i + 1:i + 2] == ch:
            i += 2
            continue
        if ch == "{":
            depth += 1
        elif ch == "}" and depth > 0:
            depth -= 1
        i += 1
    return depth


def find_string_info(line: str, cursor: int) -> Optional[StringInfo]:
    """Return the string literal the cursor is in, or None.

    Args:
        line: One line of source text
        cursor: Cursor position as an index into ``line``

    Returns:
        StringInfo for the open string, or None when the cursor is not in a
        string, is in a comment, or sits inside an f-string expression.
    """
    if cursor < 0 or cursor > len(line):
        return None

    state: Optional[_OpenString] = None
    i = 0
    while i < cursor:
        ch = line[i]

        if state is None:
            if ch == "#":
                return None
            if ch in QUOTES:
                is_raw, is_interpolated = _read_prefix(line, i)
                length = 3 if line[i:i + 3] == ch * 3 else 1
                state = _OpenString(ch, length, is_raw, is_interpolated, i)
                i += length
                continue
            i += 1
            continue

        if ch == "\\" and not state.is_raw:
            i += 2
            continue
        if ch == state.quote_char:
            closing = state.quote_char * state.delimiter_length
            if line[i:i + state.delimiter_length] == closing:
                i += state.delimiter_length
                state = None
                continue
        i += 1

    if state is None:
        return None

    content_start = state.start + state.delimiter_length
    if cursor < content_start:
        # Cursor is inside the opening delimiter itself
        return None

    content = line[content_start:cursor]
    # Any open brace counts, including a nested format spec like {x:{width
    if state.is_interpolated and interpolation_depth(content) > 0:
        return None

    return StringInfo(
        content_before_cursor=content,
        is_raw=state.is_raw,
        is_interpolated=state.is_interpolated,
        quote_index=state.start,
        content_start=content_start,
        content_start_utf16=utf16_len(line[:content_start]),
        quote_char=state.quote_char,
        delimiter_length=state.delimiter_length,
    )
