"""Completion assembly.

Runs the whole pipeline for one request: lex the line, classify the path,
gate on context, resolve directories, list and filter them, then build
candidates with an edit range in UTF-16 columns.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .cache import DirectoryCache, DirEntry
from .config import Config
from .context import gate_allows
from .lexer import find_string_info
from .listing import filter_and_sort, list_directory
from .logging import get_logger
from .query import PathQuery, PrefixKind, fallback_query, find_path_query
from .resolver import document_dir, resolve_directories, uri_to_path
from .text import line_start_index, utf16_len, utf16_to_index


@dataclass
class CompletionRequest:
    """Everything the engine needs for one completion.

    ``document_text`` is optional; when present the context heuristic can
    look at lines above the cursor.
    """
    line_text: str
    cursor_column: int            # UTF-16 code units
    document_uri: Optional[str] = None
    root_uri: Optional[str] = None
    line: int = 0
    document_text: Optional[str] = None


@dataclass
class EditRange:
    start_line: int
    start_column: int
    end_line: int
    end_column: int


@dataclass
class CompletionCandidate:
    """A single path segment offered to the editor."""
    label: str
    is_dir: bool
    insert_text: str
    edit_range: EditRange

    @property
    def kind(self) -> str:
        return "folder" if self.is_dir else "file"


def choose_separator(config: Config, typed_text: str) -> str:
    """Separator appended to directory completions."""
    if config.prefer_forward_slashes:
        return "/"
    if "\\" in typed_text:
        return "\\"
    if "/" in typed_text:
        return "/"
    return os.sep


def merge_entries(groups: list[list[DirEntry]], max_results: int) -> list[DirEntry]:
    """Concatenate per-directory results, keep first of each name, truncate."""
    seen = set()
    merged = []
    for group in groups:
        for entry in group:
            if entry.name in seen:
                continue
            seen.add(entry.name)
            merged.append(entry)
    return merged[:max_results]


def compute_edit_range(request: CompletionRequest, content_start_utf16: int, content: str, query: PathQuery) -> EditRange:
    """Range covering the segment being typed.

    Starts right after the last separator of the typed path and ends at the
    cursor.
    """
    typed_before_segment = content[:len(content) - len(query.segment_prefix)]
    start = content_start_utf16 + utf16_len(typed_before_segment)
    return EditRange(
        start_line=request.line,
        start_column=start,
        end_line=request.line,
        end_column=request.cursor_column,
    )


def complete(
    request: CompletionRequest,
    config: Config,
    cache: DirectoryCache,
    workspace_root: Optional[Path] = None,
) -> list[CompletionCandidate]:
    """Compute path completions for ``request``.

    Args:
        request: Line, cursor and document identity
        config: Settings snapshot for this request
        cache: The shared directory cache
        workspace_root: Overrides the root derived from ``request.root_uri``

    Returns:
        Candidates in display order; empty when the position is not a path
    """
    logger = get_logger()
    if not config.enable:
        return []

    cursor = utf16_to_index(request.line_text, request.cursor_column)
    if cursor is None:
        return []

    info = find_string_info(request.line_text, cursor)
    if info is None:
        return []

    content = info.content_before_cursor
    query = find_path_query(
        content,
        allow_drive=config.windows_enable_drive_prefix,
        allow_unc=config.windows_enable_unc,
    )
    has_prefix = query is not None
    if query is None:
        if not config.path_prefix_fallback:
            return []
        query = fallback_query(content)

    if request.document_text is not None:
        context_text = request.document_text
        quote_index = line_start_index(request.document_text, request.line) + info.quote_index
    else:
        context_text = request.line_text
        quote_index = info.quote_index

    if not gate_allows(config.context_gating, has_prefix, context_text, quote_index):
        logger.log_gating_rejected(content, config.context_gating.value)
        return []

    root = workspace_root if workspace_root is not None else uri_to_path(request.root_uri)
    directories = resolve_directories(query, config, document_dir(request.document_uri), root)
    if not directories:
        return []

    groups = []
    for directory in directories:
        entries = list_directory(directory, cache, config)
        groups.append(filter_and_sort(entries, directory, query.segment_prefix, config))
    entries = merge_entries(groups, config.max_results)

    edit_range = compute_edit_range(request, info.content_start_utf16, content, query)
    separator = choose_separator(config, query.raw_path_text)
    # A bare "~" has no separator yet; the completion must supply one
    lead = separator if query.prefix_kind is PrefixKind.HOME and query.raw_path_text == "~" else ""

    candidates = []
    for entry in entries:
        insert_text = lead + entry.name
        if entry.is_dir and config.directory_trailing_slash:
            insert_text += separator
        candidates.append(CompletionCandidate(entry.name, entry.is_dir, insert_text, edit_range))

    logger.log_completion(query.raw_path_text, directories, len(candidates))
    return candidates
