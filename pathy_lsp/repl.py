"""Interactive playground for trying path completion."""

from dataclasses import replace
from pathlib import Path

from rich import box
from rich.console import Console
from rich.table import Table
from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory
from prompt_toolkit.styles import Style as PromptStyle
from prompt_toolkit.lexers import PygmentsLexer
from pygments.lexers.python import PythonLexer

from .autocomplete import PathCompleter
from .completion import CompletionCandidate, CompletionRequest
from .config import ContextGating
from .state import ServerState
from .text import utf16_len

HISTORY_FILE = Path.home() / ".pathy" / "history"


def print_candidates(console: Console, candidates: list[CompletionCandidate]) -> None:
    """Render completion candidates as a table."""
    if not candidates:
        console.print("[dim]No completions[/]")
        return

    table = Table(box=box.SIMPLE_HEAD)
    table.add_column("Label", style="cyan")
    table.add_column("Kind")
    table.add_column("Insert")
    for candidate in candidates:
        kind = "[blue]folder[/]" if candidate.is_dir else "file"
        table.add_row(candidate.label, kind, candidate.insert_text)
    console.print(table)

    edit = candidates[0].edit_range
    console.print(
        f"[dim]Edit range: {edit.start_line}:{edit.start_column}-"
        f"{edit.end_line}:{edit.end_column}[/]"
    )


class PathyREPL:
    """Type a line of Python; completions pop up inside string literals.

    Pressing Enter shows the full candidate list for the end of the line.
    """

    def __init__(self, state: ServerState, document_path, console: Console = None, history_path: Path = None):
        self.state = state
        self.document_path = Path(document_path)
        self.console = console or Console()
        self.history_path = history_path or HISTORY_FILE
        self.session = None
        self.commands = {
            "/help": self.cmd_help,
            "/config": self.cmd_config,
            "/gating": self.cmd_gating,
            "/hidden": self.cmd_hidden,
            "/cache": self.cmd_cache,
            "exit": self.cmd_exit,
            "/exit": self.cmd_exit,
            "quit": self.cmd_exit,
            "/quit": self.cmd_exit,
        }

    def _setup_session(self):
        """Configure prompt_toolkit session."""
        style = PromptStyle.from_dict({
            'prompt': '#00aa00 bold',
        })

        self.history_path.parent.mkdir(parents=True, exist_ok=True)

        return PromptSession(
            history=FileHistory(str(self.history_path)),
            lexer=PygmentsLexer(PythonLexer),
            style=style,
            completer=PathCompleter(self.state, self.document_path),
            complete_while_typing=True,
        )

    def run(self):
        """Start the REPL loop."""
        self.console.print("[bold green]Pathy playground[/] - Type /help for commands")
        self.console.print(f"[dim]Resolving relative paths from: {self.document_path.parent}[/]")
        self.session = self._setup_session()

        while True:
            try:
                user_input = self.session.prompt(">>> ")

                if not user_input.strip():
                    continue

                cmd_parts = user_input.split()
                cmd = cmd_parts[0].lower()

                if cmd in self.commands:
                    if self.commands[cmd](user_input):
                        break
                    continue

                self.show_completions(user_input)

            except KeyboardInterrupt:
                self.console.print("\n[dim]Use 'exit' to quit[/]")
                continue
            except EOFError:
                break

        self.console.print("[green]Goodbye![/]")

    def show_completions(self, line: str) -> list[CompletionCandidate]:
        """Print completions for the end of ``line``."""
        request = CompletionRequest(
            line_text=line,
            cursor_column=utf16_len(line),
            document_uri=self.document_path.absolute().as_uri(),
            root_uri=self.state.root_uri,
        )
        candidates = self.state.complete(request)
        print_candidates(self.console, candidates)
        return candidates

    def cmd_help(self, _):
        self.console.print("\n[bold]Available Commands:[/]")
        self.console.print("  /config          - Show current configuration")
        self.console.print("  /gating <mode>   - Set context gating: off, smart, strict")
        self.console.print("  /hidden          - Toggle hidden files")
        self.console.print("  /cache           - Show cached directories")
        self.console.print("  /exit            - Quit")
        self.console.print()
        return False

    def cmd_config(self, _):
        """Show current configuration."""
        self.console.print("\n[bold]Current Configuration:[/]")
        for key, value in self.state.config.summary().items():
            self.console.print(f"  [cyan]{key}[/]: {value}")
        self.console.print()
        return False

    def cmd_gating(self, user_input: str):
        """Switch context gating mode."""
        parts = user_input.split()
        if len(parts) < 2:
            self.console.print(f"[dim]Context gating: {self.state.config.context_gating.value}[/]")
            return False
        try:
            mode = ContextGating(parts[1].lower())
        except ValueError:
            self.console.print(f"[red]Unknown mode: {parts[1]}[/] [dim](off, smart, strict)[/]")
            return False
        self.state.replace_config(replace(self.state.config, context_gating=mode))
        self.console.print(f"[green]✓ Context gating: {mode.value}[/]")
        return False

    def cmd_hidden(self, _):
        show = not self.state.config.show_hidden
        self.state.replace_config(replace(self.state.config, show_hidden=show))
        self.console.print(f"[dim]Show hidden: {show}[/]")
        return False

    def cmd_cache(self, _):
        directories = self.state.cache.directories()
        if not directories:
            self.console.print("[dim]Cache is empty[/]")
            return False
        self.console.print(f"\n[bold]Cached directories ({len(directories)}/{self.state.cache.max_entries}):[/]")
        for directory in directories:
            self.console.print(f"  • {directory}")
        self.console.print()
        return False

    def cmd_exit(self, _):
        return True
