"""prompt_toolkit adapter for the path completion engine.

Lets the engine drive completions in an interactive prompt: the text before
the cursor is treated as one line of Python source.
"""

from pathlib import Path

from prompt_toolkit.completion import Completer, Completion

from .completion import CompletionRequest
from .state import ServerState
from .text import utf16_len


class PathCompleter(Completer):
    """Completes filesystem paths inside Python string literals.

    Relative paths are resolved against ``document_path``'s directory, as if
    the typed line lived in that file.
    """

    def __init__(self, state: ServerState, document_path):
        """Initialize the completer.

        Args:
            state: Server state providing config and directory cache
            document_path: Virtual file the typed line belongs to
        """
        self.state = state
        self.document_uri = Path(document_path).absolute().as_uri()

    def get_completions(self, document, complete_event):
        """Get completions for current input.

        Args:
            document: prompt_toolkit Document object
            complete_event: Complete event

        Yields:
            Completion objects
        """
        line = document.current_line_before_cursor
        column = utf16_len(line)
        request = CompletionRequest(
            line_text=line,
            cursor_column=column,
            document_uri=self.document_uri,
            root_uri=self.state.root_uri,
        )

        for candidate in self.state.complete(request):
            # start_position counts characters, the edit range counts UTF-16 units
            replaced = _utf16_suffix(line, column - candidate.edit_range.start_column)
            yield Completion(
                candidate.insert_text,
                start_position=-len(replaced),
                display=candidate.label,
                display_meta="dir" if candidate.is_dir else "file",
            )


def _utf16_suffix(line: str, units: int) -> str:
    """Shortest suffix of ``line`` that is ``units`` UTF-16 code units long."""
    taken = 0
    index = len(line)
    while index > 0 and taken < units:
        index -= 1
        taken += utf16_len(line[index])
    return line[index:]
