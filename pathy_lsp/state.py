"""Process-wide server state: settings, workspace root and the directory cache."""

from pathlib import Path
from typing import Any, Optional

from .cache import DirectoryCache
from .completion import CompletionCandidate, CompletionRequest, complete
from .config import Config, load_config
from .logging import get_logger, report_config_warnings
from .resolver import uri_to_path
from .text import get_line

PYTHON_SUFFIXES = (".py", ".pyi")


def is_python_document(uri: str, language_id: Optional[str]) -> bool:
    """Only Python sources get path completions."""
    if language_id and language_id.lower() == "python":
        return True
    return uri.lower().split("?", 1)[0].endswith(PYTHON_SUFFIXES)


class ServerState:
    """Holds the active Config and the one DirectoryCache.

    File-layer settings (YAML) are kept separately so each client settings
    payload is applied on top of them rather than on top of the previous
    payload's leftovers.
    """

    def __init__(self, base_config: Optional[Config] = None, root_uri: Optional[str] = None):
        self.base_config = base_config or Config()
        self.config = self.base_config
        self.root_uri = root_uri
        self.cache = DirectoryCache(self.config.cache_ttl, self.config.cache_max_dirs)

    @property
    def workspace_root(self) -> Optional[Path]:
        return uri_to_path(self.root_uri)

    def set_root_uri(self, root_uri: Optional[str]) -> None:
        self.root_uri = root_uri

    def set_base_config(self, config: Config) -> None:
        """Replace the file-layer settings and make them current."""
        self.base_config = config
        self.replace_config(config)

    def apply_settings(self, value: Any, source: str = "client") -> list[str]:
        """Replace the config from a client settings payload.

        Cache limits are updated before the new config becomes visible.

        Returns:
            Warnings produced while parsing (also reported once)
        """
        new_config, warnings = load_config(value, previous=self.config, defaults=self.base_config)
        self.replace_config(new_config)
        report_config_warnings(warnings, source=source)
        return warnings

    def replace_config(self, config: Config) -> None:
        """Swap in ``config`` wholesale."""
        self.cache.update_limits(config.cache_ttl, config.cache_max_dirs)
        self.config = config

    def complete(self, request: CompletionRequest) -> list[CompletionCandidate]:
        """Run one completion against the current config snapshot."""
        config = self.config
        return complete(request, config, self.cache, workspace_root=self.workspace_root)

    def complete_document(
        self,
        text: str,
        uri: str,
        line: int,
        character: int,
        language_id: Optional[str] = None,
    ) -> list[CompletionCandidate]:
        """Completions at a position of a whole document."""
        get_logger().log_request(uri, line, character)
        if not is_python_document(uri, language_id):
            return []
        line_text = get_line(text, line)
        if line_text is None:
            return []
        request = CompletionRequest(
            line_text=line_text,
            cursor_column=character,
            document_uri=uri,
            root_uri=self.root_uri,
            line=line,
            document_text=text,
        )
        return self.complete(request)
