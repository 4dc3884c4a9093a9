"""End-to-end tests for completion assembly."""

import pytest
from pathy_lsp.cache import DirectoryCache, DirEntry
from pathy_lsp.completion import (
    CompletionRequest,
    EditRange,
    choose_separator,
    complete,
    merge_entries,
)
from pathy_lsp.config import BaseDirStrategy, Config, ContextGating
from pathy_lsp.text import utf16_len


@pytest.fixture
def cache():
    return DirectoryCache(ttl=60, max_entries=16)


@pytest.fixture
def project(tmp_path):
    (tmp_path / "foo").mkdir()
    (tmp_path / "foo.txt").write_text("")
    (tmp_path / "bar.py").write_text("")
    (tmp_path / "data").mkdir()
    (tmp_path / "data" / "raw.csv").write_text("")
    return tmp_path


def request_at_end(line_text, project, **kwargs):
    return CompletionRequest(
        line_text=line_text,
        cursor_column=utf16_len(line_text),
        document_uri=(project / "main.py").as_uri(),
        **kwargs,
    )


class TestComplete:
    """Tests for complete."""

    def test_open_relative_prefix(self, project, cache):
        request = request_at_end('with open("./fo', project)
        result = complete(request, Config(), cache)

        assert [c.label for c in result] == ["foo", "foo.txt"]
        assert result[0].is_dir and result[0].insert_text == "foo/"
        assert result[1].insert_text == "foo.txt"
        assert result[0].edit_range == EditRange(0, 13, 0, 15)

    def test_plain_string_is_not_completed(self, project, cache):
        request = request_at_end('print("hello', project)
        assert complete(request, Config(), cache) == []

    def test_fallback_inside_path_call(self, project, cache):
        request = request_at_end('open("da', project)
        result = complete(request, Config(), cache)
        assert [c.label for c in result] == ["data"]
        assert result[0].edit_range.start_column == 6

    def test_fallback_disabled(self, project, cache):
        request = request_at_end('open("da', project)
        assert complete(request, Config(path_prefix_fallback=False), cache) == []

    def test_nested_directory(self, project, cache):
        request = request_at_end('pd.read_csv("./data/r', project)
        result = complete(request, Config(), cache)
        assert [c.insert_text for c in result] == ["raw.csv"]
        start = len('pd.read_csv("./data/')
        assert result[0].edit_range.start_column == start

    def test_empty_segment_lists_directory(self, project, cache):
        request = request_at_end('open("./', project)
        result = complete(request, Config(), cache)
        assert [c.label for c in result] == ["data", "foo", "bar.py", "foo.txt"]

    def test_disabled(self, project, cache):
        request = request_at_end('open("./fo', project)
        assert complete(request, Config(enable=False), cache) == []

    def test_cursor_past_line(self, project, cache):
        request = CompletionRequest('open("./fo', 40, (project / "main.py").as_uri())
        assert complete(request, Config(), cache) == []

    def test_cursor_in_closed_string_middle(self, project, cache):
        line = 'open("./fo.txt")'
        request = CompletionRequest(
            line, line.index("."), (project / "main.py").as_uri(),
        )
        result = complete(request, Config(), cache)
        # Only the quote is before the cursor: fallback with empty segment
        assert "foo" in [c.label for c in result]

    def test_max_results(self, tmp_path, cache):
        for i in range(10):
            (tmp_path / f"file{i}.txt").write_text("")
        request = request_at_end('open("./file', tmp_path)
        result = complete(request, Config(max_results=3), cache)
        assert len(result) == 3

    def test_no_trailing_slash(self, project, cache):
        request = request_at_end('open("./fo', project)
        result = complete(request, Config(directory_trailing_slash=False), cache)
        assert result[0].insert_text == "foo"

    def test_utf16_columns(self, project, cache):
        """Columns are UTF-16 code units, not code points."""
        line = 'x = "😀"; open("./fo'
        result = complete(request_at_end(line, project), Config(), cache)
        assert result[0].edit_range.start_column == utf16_len(line) - 2
        assert result[0].edit_range.end_column == utf16_len(line)

    def test_line_number_carried(self, project, cache):
        request = request_at_end('open("./fo', project, line=7)
        result = complete(request, Config(), cache)
        assert result[0].edit_range.start_line == 7
        assert result[0].edit_range.end_line == 7

    def test_strict_gating(self, project, cache):
        config = Config(context_gating=ContextGating.STRICT)
        assert complete(request_at_end('x = "./fo', project), config, cache) == []
        assert complete(request_at_end('open("./fo', project), config, cache) != []

    def test_gating_off(self, project, cache):
        config = Config(context_gating=ContextGating.OFF)
        result = complete(request_at_end('print("fo', project), config, cache)
        assert [c.label for c in result] == ["foo", "foo.txt"]

    def test_multiline_call_context(self, project, cache):
        """The heuristic sees lines above the cursor when given the document."""
        text = 'df = open(\n    "da'
        line = '    "da'
        bare = request_at_end(line, project, line=1)
        assert complete(bare, Config(), cache) == []

        with_doc = request_at_end(line, project, line=1, document_text=text)
        result = complete(with_doc, Config(), cache)
        assert [c.label for c in result] == ["data"]

    def test_home_prefix(self, project, cache, monkeypatch):
        monkeypatch.setenv("HOME", str(project))
        result = complete(request_at_end('open("~/fo', project), Config(), cache)
        assert [c.label for c in result] == ["foo", "foo.txt"]

    def test_bare_tilde_inserts_separator(self, project, cache, monkeypatch):
        monkeypatch.setenv("HOME", str(project))
        result = complete(request_at_end('open("~', project), Config(), cache)
        assert result[0].insert_text == "/data/"
        assert result[0].edit_range.start_column == len('open("~')

    def test_absolute_prefix(self, project, cache):
        line = f'open("{project.as_posix()}/ba'
        result = complete(request_at_end(line, project), Config(), cache)
        assert [c.label for c in result] == ["bar.py"]

    def test_missing_directory(self, project, cache):
        result = complete(request_at_end('open("./nope/x', project), Config(), cache)
        assert result == []

    def test_non_file_document_without_root(self, project, cache):
        request = CompletionRequest('open("./fo', 10, "untitled:Untitled-1")
        assert complete(request, Config(), cache) == []

    def test_both_strategy_merges_and_dedups(self, tmp_path, cache):
        src = tmp_path / "src"
        src.mkdir()
        (src / "shared.txt").write_text("")
        (src / "local.py").write_text("")
        (tmp_path / "shared.txt").write_text("")
        (tmp_path / "top.md").write_text("")

        request = request_at_end('open("./', src)
        config = Config(base_dir=BaseDirStrategy.BOTH)
        result = complete(request, config, cache, workspace_root=tmp_path)

        labels = [c.label for c in result]
        assert labels == ["local.py", "shared.txt", "src", "top.md"]

    def test_workspace_root_from_uri(self, project, cache):
        request = CompletionRequest(
            'open("./fo', 10, "untitled:Untitled-1", root_uri=project.as_uri(),
        )
        config = Config(base_dir=BaseDirStrategy.WORKSPACE_ROOT)
        assert [c.label for c in complete(request, config, cache)] == ["foo", "foo.txt"]

    def test_ignored_folders_are_offered(self, tmp_path, cache):
        """Default globs hide the contents of node_modules, not the folder."""
        (tmp_path / "node_modules").mkdir()
        (tmp_path / "node_modules" / "pkg").mkdir()
        (tmp_path / "venv").mkdir()
        (tmp_path / "nodes.py").write_text("")

        result = complete(request_at_end('open("./n', tmp_path), Config(), cache)
        assert [c.label for c in result] == ["node_modules", "nodes.py"]

        inside = complete(request_at_end('open("./node_modules/', tmp_path), Config(), cache)
        assert inside == []


class TestHelpers:
    """Tests for separator choice and merging."""

    def test_forward_slash_preferred(self):
        assert choose_separator(Config(), "C:\\Users\\") == "/"

    def test_typed_separator_followed(self):
        config = Config(prefer_forward_slashes=False)
        assert choose_separator(config, "C:\\Users\\") == "\\"
        assert choose_separator(config, "./a/") == "/"

    def test_merge_keeps_first_and_truncates(self):
        first = [DirEntry("a", False), DirEntry("b", True)]
        second = [DirEntry("b", False), DirEntry("c", False)]
        merged = merge_entries([first, second], 10)
        assert merged == [DirEntry("a", False), DirEntry("b", True), DirEntry("c", False)]
        assert len(merge_entries([first, second], 2)) == 2
