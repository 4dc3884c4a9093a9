"""Directory reading and entry filtering."""

import os
from pathlib import Path
from typing import Optional

from .cache import DirectoryCache, DirEntry
from .config import Config, StatStrategy
from .glob_matcher import IgnoreMatcher, get_ignore_matcher
from .logging import get_logger


def read_directory(directory: Path, limit: int, stat_strategy: StatStrategy) -> Optional[list[DirEntry]]:
    """List up to ``limit`` entries of ``directory``.

    Returns None if the directory cannot be opened. An error part-way
    through keeps the entries read so far. Entries whose type cannot be
    determined are reported as files.
    """
    items = []
    try:
        it = os.scandir(directory)
    except OSError as e:
        get_logger().log_fs_error(str(directory), str(e))
        return None

    with it:
        while len(items) < limit:
            try:
                entry = next(it)
            except StopIteration:
                break
            except OSError as e:
                # Keep what was read before the failure
                get_logger().log_fs_error(str(directory), str(e))
                break

            is_dir = False
            if stat_strategy is not StatStrategy.NONE:
                try:
                    is_dir = entry.is_dir()
                except OSError:
                    is_dir = False
            items.append(DirEntry(entry.name, is_dir))
    return items


def list_directory(directory: Path, cache: DirectoryCache, config: Config) -> list[DirEntry]:
    """Cached listing of ``directory``; unreadable directories give ``[]``.

    Reads are capped at twice ``max_results`` entries.
    """
    cached = cache.get(str(directory))
    if cached is not None:
        return cached

    items = read_directory(directory, config.max_results * 2, config.stat_strategy)
    if items is None:
        return []
    cache.insert(str(directory), items)
    return items


def is_hidden(name: str) -> bool:
    return name.startswith(".")


def is_ignored(directory: Path, entry: DirEntry, matcher: IgnoreMatcher) -> bool:
    """Check an entry's full path against the ignore globs.

    Only the path itself is tested: ``**/node_modules/**`` hides what is
    inside ``node_modules`` but still offers the folder.
    """
    if not matcher:
        return False
    return matcher.matches(f"{directory.as_posix().rstrip('/')}/{entry.name}")


def filter_and_sort(
    entries: list[DirEntry],
    directory: Path,
    segment_prefix: str,
    config: Config,
) -> list[DirEntry]:
    """Apply visibility, kind, prefix and ignore filters; dirs first, then by name."""
    matcher = get_ignore_matcher(tuple(config.ignore_globs))
    kept = []
    for entry in entries:
        if not config.show_hidden and is_hidden(entry.name):
            continue
        if entry.is_dir and not config.include_directories:
            continue
        if not entry.is_dir and not config.include_files:
            continue
        if not entry.name.startswith(segment_prefix):
            continue
        if is_ignored(directory, entry, matcher):
            continue
        kept.append(entry)

    kept.sort(key=lambda e: (not e.is_dir, e.name))
    return kept
