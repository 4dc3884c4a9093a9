"""Directory resolution.

Turns a PathQuery into the absolute directories to list. ``.`` and ``..``
are applied lexically; nothing here touches the filesystem.
"""

import os
import re
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse
from urllib.request import url2pathname

from .config import BaseDirStrategy, Config, WorkspaceRootStrategy
from .query import PathQuery, PrefixKind

_SEPARATOR_RE = re.compile(r"[\\/]")

# Drive and UNC paths only name a location on Windows
IS_WINDOWS = os.name == "nt"


def uri_to_path(uri: Optional[str]) -> Optional[Path]:
    """Filesystem path for a ``file://`` URI, None for anything else."""
    if not uri:
        return None
    parsed = urlparse(uri)
    if parsed.scheme != "file":
        return None
    if parsed.netloc and parsed.netloc != "localhost":
        # UNC share: file://server/share/x
        return Path(f"//{parsed.netloc}{unquote(parsed.path)}")
    return Path(url2pathname(parsed.path))


def document_dir(uri: Optional[str]) -> Optional[Path]:
    """Directory containing the document at ``uri``."""
    path = uri_to_path(uri)
    if path is None:
        return None
    return path.parent


def home_dir() -> Optional[Path]:
    """Home directory from the environment (HOME, then USERPROFILE)."""
    home = os.environ.get("HOME") or os.environ.get("USERPROFILE")
    return Path(home) if home else None


def apply_components(base: Path, dir_part: str) -> Path:
    """Join ``dir_part`` onto ``base`` resolving ``.`` and ``..`` by hand."""
    result = base
    for component in _SEPARATOR_RE.split(dir_part):
        if component in ("", "."):
            continue
        if component == "..":
            result = result.parent
        else:
            result = result / component
    return result


def relative_bases(
    config: Config,
    doc_dir: Optional[Path],
    workspace_root: Optional[Path],
) -> list[Path]:
    """Base directories for relative queries, file directory first."""
    root = workspace_root
    if config.workspace_root_strategy is WorkspaceRootStrategy.DISABLED:
        root = None

    if config.base_dir is BaseDirStrategy.FILE_DIR:
        candidates = [doc_dir]
    elif config.base_dir is BaseDirStrategy.WORKSPACE_ROOT:
        candidates = [root]
    else:
        candidates = [doc_dir, root]

    bases = []
    for candidate in candidates:
        if candidate is not None and candidate not in bases:
            bases.append(candidate)
    return bases


def resolve_directories(
    query: PathQuery,
    config: Config,
    doc_dir: Optional[Path] = None,
    workspace_root: Optional[Path] = None,
) -> list[Path]:
    """Directories to list for ``query``, in priority order.

    An empty list means there is nothing usable to list: tilde expansion
    is off, there is no home directory, a drive or UNC path was typed on a
    non-Windows host, or a relative path has no base directory.
    """
    kind = query.prefix_kind

    if kind is PrefixKind.HOME:
        if not config.expand_tilde:
            return []
        home = home_dir()
        if home is None:
            return []
        return [apply_components(home, query.dir_part.lstrip("~"))]

    if kind in (PrefixKind.WINDOWS_DRIVE, PrefixKind.WINDOWS_UNC):
        return [Path(query.dir_part)] if IS_WINDOWS else []

    if kind is PrefixKind.ABSOLUTE:
        return [Path(query.dir_part)]

    directories = []
    for base in relative_bases(config, doc_dir, workspace_root):
        directory = apply_components(base, query.dir_part)
        if directory not in directories:
            directories.append(directory)
    return directories
