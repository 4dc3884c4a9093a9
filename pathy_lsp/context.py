"""Call-context heuristic.

Decides whether a string literal is "path-shaped" by looking at a bounded
window of the source text before its opening quote. There is no parser
here: parentheses are counted backwards and the callee name is read off the
text in front of the unmatched ``(``.
"""

from dataclasses import dataclass
from typing import Optional

from .config import ContextGating
from .text import utf8_tail

# Look-back windows, in UTF-8 bytes
CALL_LOOKBACK_BYTES = 300
JOIN_LOOKBACK_BYTES = 120

PATH_FUNCTIONS = {
    "open",
    "Path",
    "read_csv",
    "read_parquet",
    "read_json",
    "read_excel",
    "read_table",
}

PATH_ARGUMENT_NAMES = {"path", "filepath", "filename", "file", "fname"}


@dataclass
class CallContext:
    """The call expression whose argument list contains the string."""
    callee_full_name: str
    callee_base_name: str
    is_first_positional_arg: bool
    named_arg_name: Optional[str] = None


def _is_name_char(ch: str) -> bool:
    return (ch.isascii() and ch.isalnum()) or ch in "_."


def _analyze_arguments(arg_text: str) -> tuple[bool, Optional[str]]:
    """Return (is_first_positional, named_argument) for text after ``(``."""
    if "," in arg_text:
        return False, None
    eq = arg_text.rfind("=")
    if eq != -1:
        name = arg_text[:eq].strip()
        if name:
            return False, name
    return True, None


def detect_call_context(text: str, quote_index: int) -> Optional[CallContext]:
    """Find the call whose unmatched ``(`` precedes ``text[quote_index]``.

    Args:
        text: Source text (a whole document or a single line)
        quote_index: Index of the string's opening quote in ``text``

    Returns:
        CallContext, or None if no enclosing call is found in the window
    """
    window = utf8_tail(text[:quote_index], CALL_LOOKBACK_BYTES)

    depth = 0
    open_index = None
    for index in range(len(window) - 1, -1, -1):
        ch = window[index]
        if ch == ")":
            depth += 1
        elif ch == "(":
            if depth == 0:
                open_index = index
                break
            depth -= 1

    if open_index is None:
        return None

    before = window[:open_index].rstrip()
    name_start = len(before)
    while name_start > 0 and _is_name_char(before[name_start - 1]):
        name_start -= 1
    full_name = before[name_start:]
    if not full_name:
        return None

    is_first, named_arg = _analyze_arguments(window[open_index + 1:])
    return CallContext(
        callee_full_name=full_name,
        callee_base_name=full_name.rsplit(".", 1)[-1],
        is_first_positional_arg=is_first,
        named_arg_name=named_arg,
    )


def is_known_path_function(full_name: str, base_name: str) -> bool:
    if base_name in PATH_FUNCTIONS:
        return True
    return any(full_name.endswith("." + name) for name in PATH_FUNCTIONS)


def has_path_join_context(text: str, quote_index: int) -> bool:
    """True when a ``Path(...)`` call is followed by ``/`` before the string.

    Catches ``Path(root) / "data"`` style joins.
    """
    window = utf8_tail(text[:quote_index], JOIN_LOOKBACK_BYTES)
    path_call = window.rfind("Path(")
    if path_call == -1:
        return False
    return "/" in window[path_call:]


def is_path_context(text: str, quote_index: int) -> bool:
    """Heuristic: does the string at ``quote_index`` look like a path argument?"""
    ctx = detect_call_context(text, quote_index)
    if ctx is not None and (ctx.is_first_positional_arg or ctx.named_arg_name):
        if is_known_path_function(ctx.callee_full_name, ctx.callee_base_name):
            return True
        if ctx.named_arg_name in PATH_ARGUMENT_NAMES:
            return True

    return has_path_join_context(text, quote_index)


def gate_allows(mode: ContextGating, has_prefix: bool, text: str, quote_index: int) -> bool:
    """Apply the configured gating policy.

    ``off`` always allows. ``strict`` needs the heuristic. ``smart`` trusts
    an explicit path prefix and falls back to the heuristic otherwise.
    """
    if mode is ContextGating.OFF:
        return True
    if mode is ContextGating.SMART and has_prefix:
        return True
    return is_path_context(text, quote_index)
