"""Language server wiring (pygls over stdio)."""

import traceback
from pathlib import Path
from typing import Optional

from lsprotocol import types
from pygls.lsp.server import LanguageServer

from . import __version__
from .completion import CompletionCandidate
from .config import Config
from .logging import get_logger
from .state import ServerState

SERVER_NAME = "pathy-server"
TRIGGER_CHARACTERS = ["/", ".", "~", "\\", '"', "'"]


def root_uri_from_params(params: types.InitializeParams) -> Optional[str]:
    """Workspace root from initialize params: rootUri, first folder, rootPath."""
    if params.root_uri:
        return params.root_uri
    if params.workspace_folders:
        return params.workspace_folders[0].uri
    if params.root_path:
        return Path(params.root_path).absolute().as_uri()
    return None


def to_completion_item(candidate: CompletionCandidate, order: int) -> types.CompletionItem:
    edit_range = candidate.edit_range
    return types.CompletionItem(
        label=candidate.label,
        kind=types.CompletionItemKind.Folder if candidate.is_dir else types.CompletionItemKind.File,
        sort_text=f"{order:05d}",
        text_edit=types.TextEdit(
            range=types.Range(
                start=types.Position(line=edit_range.start_line, character=edit_range.start_column),
                end=types.Position(line=edit_range.end_line, character=edit_range.end_column),
            ),
            new_text=candidate.insert_text,
        ),
    )


def to_completion_list(candidates: list[CompletionCandidate]) -> types.CompletionList:
    """Convert engine candidates, keeping their order via sort_text."""
    return types.CompletionList(
        is_incomplete=False,
        items=[to_completion_item(c, i) for i, c in enumerate(candidates)],
    )


class PathyLanguageServer(LanguageServer):
    """LanguageServer carrying the completion state."""

    def __init__(self, state: ServerState):
        super().__init__(SERVER_NAME, f"v{__version__}")
        self.state = state


def create_server(base_config: Optional[Config] = None) -> PathyLanguageServer:
    """Build the server and register its features."""
    server = PathyLanguageServer(ServerState(base_config))

    @server.feature(types.INITIALIZE)
    def on_initialize(params: types.InitializeParams) -> None:
        server.state.set_root_uri(root_uri_from_params(params))
        root = server.state.workspace_root
        if root is not None:
            # Project .pathy.yaml becomes the base for client settings
            server.state.set_base_config(Config.load(root))
        if params.initialization_options is not None:
            server.state.apply_settings(params.initialization_options, source="initializationOptions")

    @server.feature(types.WORKSPACE_DID_CHANGE_CONFIGURATION)
    def on_configuration(params: types.DidChangeConfigurationParams) -> None:
        server.state.apply_settings(params.settings, source="didChangeConfiguration")

    @server.feature(
        types.TEXT_DOCUMENT_COMPLETION,
        types.CompletionOptions(trigger_characters=TRIGGER_CHARACTERS, resolve_provider=False),
    )
    def on_completion(params: types.CompletionParams) -> types.CompletionList:
        uri = params.text_document.uri
        position = params.position
        try:
            document = server.workspace.get_text_document(uri)
            candidates = server.state.complete_document(
                document.source,
                uri,
                position.line,
                position.character,
                language_id=document.language_id,
            )
        except Exception:
            # Completion is best effort: report nothing rather than an error
            get_logger().log_error(traceback.format_exc())
            candidates = []
        return to_completion_list(candidates)

    return server


def start_io(base_config: Optional[Config] = None) -> None:
    """Run the server on stdin/stdout until the client disconnects."""
    create_server(base_config).start_io()
