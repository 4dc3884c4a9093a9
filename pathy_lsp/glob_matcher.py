"""Ignore-glob matching.

Supports the two wildcards used by ignore lists: ``*`` matches within one
path segment and ``**`` matches across segments. Every other character is
literal. Matching is a backtracking search memoized on
(token index, text index), which keeps patterns like ``**a**a**a**b``
polynomial.
"""

from functools import lru_cache
from typing import Iterable

STAR = "*"
GLOBSTAR = "**"


@lru_cache(maxsize=256)
def tokenize(pattern: str) -> tuple[str, ...]:
    """Split a pattern into literal runs, ``*`` and ``**`` tokens.

    Literal runs are kept whole so they can be compared with ``startswith``.
    """
    tokens = []
    literal = []
    i = 0
    while i < len(pattern):
        if pattern[i] == "*":
            if literal:
                tokens.append("".join(literal))
                literal = []
            if pattern[i:i + 2] == "**":
                # Runs like *** collapse into a single globstar
                while i < len(pattern) and pattern[i] == "*":
                    i += 1
                tokens.append(GLOBSTAR)
            else:
                i += 1
                tokens.append(STAR)
            continue
        literal.append(pattern[i])
        i += 1
    if literal:
        tokens.append("".join(literal))
    return tuple(tokens)


def normalize_path(path: str) -> str:
    """Use forward slashes regardless of platform."""
    return str(path).replace("\\", "/")


def match_tokens(tokens: tuple[str, ...], text: str) -> bool:
    """Match pre-tokenized pattern against ``text``."""
    memo: dict[tuple[int, int], bool] = {}

    def match(ti: int, xi: int) -> bool:
        key = (ti, xi)
        if key in memo:
            return memo[key]

        if ti == len(tokens):
            result = xi == len(text)
        else:
            token = tokens[ti]
            if token == GLOBSTAR:
                result = any(match(ti + 1, j) for j in range(xi, len(text) + 1))
            elif token == STAR:
                end = text.find("/", xi)
                if end == -1:
                    end = len(text)
                result = any(match(ti + 1, j) for j in range(xi, end + 1))
            else:
                result = text.startswith(token, xi) and match(ti + 1, xi + len(token))

        memo[key] = result
        return result

    return match(0, 0)


def glob_match(pattern: str, path: str) -> bool:
    """True if ``path`` matches ``pattern``."""
    return match_tokens(tokenize(pattern), normalize_path(path))


class IgnoreMatcher:
    """Compiled list of ignore globs."""

    def __init__(self, patterns: Iterable[str]):
        self.patterns = list(patterns)
        self._compiled = [tokenize(p) for p in self.patterns]

    def matches(self, path: str) -> bool:
        """True if ``path`` matches any pattern."""
        normalized = normalize_path(path)
        return any(match_tokens(tokens, normalized) for tokens in self._compiled)

    def __bool__(self) -> bool:
        return bool(self._compiled)


@lru_cache(maxsize=32)
def get_ignore_matcher(patterns: tuple[str, ...]) -> IgnoreMatcher:
    """Shared matcher per distinct pattern list."""
    return IgnoreMatcher(patterns)
