"""Line access and UTF-16 column conversion.

Editors report columns in UTF-16 code units. Everything inside the engine
works on ``str`` indices, so conversion only happens at the edges.
"""

from typing import Optional


def utf16_len(text: str) -> int:
    """Number of UTF-16 code units needed to encode ``text``."""
    return sum(2 if ord(ch) > 0xFFFF else 1 for ch in text)


def utf16_to_index(line: str, column: int) -> Optional[int]:
    """Convert a UTF-16 column into a ``str`` index of ``line``.

    Returns None when the column lies past the end of the line or splits a
    surrogate pair.
    """
    if column < 0:
        return None
    units = 0
    for index, ch in enumerate(line):
        if units == column:
            return index
        units += 2 if ord(ch) > 0xFFFF else 1
        if units > column:
            return None
    if units == column:
        return len(line)
    return None


def get_line(text: str, line: int) -> Optional[str]:
    """Return line ``line`` (zero-based) of ``text`` without its terminator."""
    if line < 0:
        return None
    lines = text.split("\n")
    if line >= len(lines):
        return None
    return lines[line].rstrip("\r")


def line_start_index(text: str, line: int) -> int:
    """Index in ``text`` of the first character of line ``line``."""
    index = 0
    for _ in range(line):
        newline = text.find("\n", index)
        if newline == -1:
            return len(text)
        index = newline + 1
    return index


def utf8_tail(text: str, max_bytes: int) -> str:
    """Return the suffix of ``text`` that fits in ``max_bytes`` UTF-8 bytes.

    A character split by the byte boundary is dropped.
    """
    encoded = text.encode("utf-8")
    if len(encoded) <= max_bytes:
        return text
    return encoded[-max_bytes:].decode("utf-8", errors="ignore")
