"""Path query classification.

Turns the text typed inside a string literal into a ``PathQuery``: the
directory part to list and the partial segment used to filter entries.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

SEPARATORS = ("/", "\\")


class PrefixKind(Enum):
    """Kind of the leading token of a typed path."""
    RELATIVE = "relative"
    ABSOLUTE = "absolute"
    HOME = "home"
    WINDOWS_DRIVE = "windows_drive"
    WINDOWS_UNC = "windows_unc"


@dataclass
class PathQuery:
    """A path being typed, split at its last separator."""
    dir_part: str
    segment_prefix: str
    raw_path_text: str
    prefix_kind: PrefixKind


def is_windows_drive_prefix(text: str) -> bool:
    """True for ``C:\\`` or ``C:/`` style prefixes."""
    return (
        len(text) >= 3
        and text[0].isascii()
        and text[0].isalpha()
        and text[1] == ":"
        and text[2] in SEPARATORS
    )


def _prefix_kind(remainder: str, allow_drive: bool, allow_unc: bool) -> Optional[PrefixKind]:
    """Classify ``remainder`` if it starts with a path-looking prefix."""
    if remainder.startswith("../") or remainder.startswith("./"):
        return PrefixKind.RELATIVE
    if remainder.startswith("/"):
        return PrefixKind.ABSOLUTE
    if remainder.startswith("~"):
        return PrefixKind.HOME
    if allow_unc and remainder.startswith("\\\\"):
        return PrefixKind.WINDOWS_UNC
    if allow_drive and is_windows_drive_prefix(remainder):
        return PrefixKind.WINDOWS_DRIVE
    return None


def split_path(path_text: str, kind: PrefixKind) -> PathQuery:
    """Split ``path_text`` into directory part and segment prefix."""
    if kind is PrefixKind.HOME and path_text == "~":
        return PathQuery("~/", "", path_text, kind)

    last_sep = max(path_text.rfind(sep) for sep in SEPARATORS)
    if last_sep == -1:
        return PathQuery("", path_text, path_text, kind)
    return PathQuery(
        dir_part=path_text[:last_sep + 1],
        segment_prefix=path_text[last_sep + 1:],
        raw_path_text=path_text,
        prefix_kind=kind,
    )


def find_path_query(
    content: str,
    allow_drive: bool = True,
    allow_unc: bool = True,
) -> Optional[PathQuery]:
    """Find the right-most path-looking token in ``content``.

    Candidate positions are the start of the text and every position right
    after whitespace. The last match wins, so in ``"cp ./a /tmp/x"`` the
    query is ``/tmp/x``.

    Returns:
        PathQuery, or None when no prefix is found
    """
    found: Optional[tuple[int, PrefixKind]] = None
    for index in range(len(content)):
        if index > 0 and not content[index - 1].isspace():
            continue
        kind = _prefix_kind(content[index:], allow_drive, allow_unc)
        if kind is not None:
            found = (index, kind)

    if found is None:
        return None
    start, kind = found
    return split_path(content[start:], kind)


def fallback_query(content: str) -> PathQuery:
    """Treat the whole string content as a relative path."""
    return split_path(content, PrefixKind.RELATIVE)
