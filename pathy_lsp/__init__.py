"""Pathy - filesystem path completion for Python string literals."""

__version__ = "0.3.0"

from .config import Config, ContextGating, BaseDirStrategy, WorkspaceRootStrategy, StatStrategy
from .completion import CompletionCandidate, CompletionRequest, EditRange, complete
from .cache import DirectoryCache

__all__ = [
    "__version__",
    "Config",
    "ContextGating",
    "BaseDirStrategy",
    "WorkspaceRootStrategy",
    "StatStrategy",
    "CompletionCandidate",
    "CompletionRequest",
    "EditRange",
    "complete",
    "DirectoryCache",
]
