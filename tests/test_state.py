"""Test ServerState settings handling and document completion."""

import pytest
from pathy_lsp.config import Config, ContextGating
from pathy_lsp.state import ServerState, is_python_document


@pytest.fixture
def project(tmp_path):
    (tmp_path / "foo").mkdir()
    (tmp_path / "foo.txt").write_text("")
    return tmp_path


class TestIsPythonDocument:
    """Tests for is_python_document."""

    @pytest.mark.parametrize("uri,language_id", [
        ("file:///a/main.py", None),
        ("file:///a/stubs.pyi", None),
        ("file:///a/MAIN.PY", None),
        ("untitled:Untitled-1", "python"),
        ("file:///a/script", "Python"),
    ])
    def test_python(self, uri, language_id):
        assert is_python_document(uri, language_id)

    @pytest.mark.parametrize("uri,language_id", [
        ("file:///a/notes.txt", "plaintext"),
        ("file:///a/main.rs", "rust"),
        ("untitled:Untitled-1", None),
    ])
    def test_not_python(self, uri, language_id):
        assert not is_python_document(uri, language_id)


class TestApplySettings:
    """Tests for ServerState.apply_settings."""

    def test_updates_config(self):
        state = ServerState()
        warnings = state.apply_settings({"pathy": {"context_gating": "strict"}})
        assert warnings == []
        assert state.config.context_gating is ContextGating.STRICT

    def test_updates_cache_limits(self):
        state = ServerState()
        state.apply_settings({"cache_ttl_ms": 100, "cache_max_dirs": 2})
        assert state.cache.ttl == 0.1
        assert state.cache.max_entries == 2

    def test_shrinking_capacity_evicts(self):
        state = ServerState()
        for name in ("/a", "/b", "/c"):
            state.cache.insert(name, [])
        state.apply_settings({"cache_max_dirs": 1})
        assert state.cache.directories() == ["/c"]

    def test_warning_keeps_previous(self):
        state = ServerState()
        state.apply_settings({"max_results": 5})
        warnings = state.apply_settings({"max_results": "five"})
        assert warnings == ["invalid max_results type"]
        assert state.config.max_results == 5

    def test_payloads_layer_on_base_config(self):
        """Fields a payload omits come from the file settings, not the last payload."""
        state = ServerState(Config(max_results=9))
        state.apply_settings({"show_hidden": True})
        state.apply_settings({"include_files": False})

        assert state.config.max_results == 9
        assert state.config.show_hidden is False
        assert state.config.include_files is False

    def test_set_base_config(self):
        state = ServerState()
        state.set_base_config(Config(cache_max_dirs=3))
        assert state.config.cache_max_dirs == 3
        assert state.cache.max_entries == 3


class TestCompleteDocument:
    """Tests for ServerState.complete_document."""

    def test_completes_line_of_document(self, project):
        state = ServerState()
        text = 'import os\nwith open("./fo'
        uri = (project / "main.py").as_uri()
        result = state.complete_document(text, uri, 1, len('with open("./fo'))

        assert [c.label for c in result] == ["foo", "foo.txt"]
        assert result[0].edit_range.start_line == 1

    def test_crlf_line_endings(self, project):
        state = ServerState()
        text = 'import os\r\nopen("./fo\r\n'
        uri = (project / "main.py").as_uri()
        result = state.complete_document(text, uri, 1, len('open("./fo'))
        assert [c.label for c in result] == ["foo", "foo.txt"]

    def test_non_python_document(self, project):
        state = ServerState()
        uri = (project / "notes.txt").as_uri()
        assert state.complete_document('open("./fo', uri, 0, 10, language_id="plaintext") == []

    def test_line_out_of_range(self, project):
        state = ServerState()
        uri = (project / "main.py").as_uri()
        assert state.complete_document('open("./fo', uri, 5, 0) == []

    def test_workspace_root(self, project):
        state = ServerState(root_uri=project.as_uri())
        assert state.workspace_root == project

        state.apply_settings({"base_dir": "workspace_root"})
        result = state.complete_document('open("./fo', "untitled:Untitled-1", 0, 10, "python")
        assert [c.label for c in result] == ["foo", "foo.txt"]
