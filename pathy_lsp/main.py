"""Pathy CLI entry point."""

from dataclasses import replace
from pathlib import Path

import click
from rich.console import Console

from . import __version__
from .completion import CompletionRequest
from .config import Config, ContextGating, ensure_config_file
from .logging import init_logger
from .repl import PathyREPL, print_candidates
from .state import ServerState
from .text import utf16_len

console = Console()


def _build_state(root: str, gating: str, show_hidden: bool) -> ServerState:
    root_path = Path(root).absolute() if root else None
    config = Config.load(root_path)
    if gating:
        config = replace(config, context_gating=ContextGating(gating))
    if show_hidden:
        config = replace(config, show_hidden=True)
    return ServerState(config, root_uri=root_path.as_uri() if root_path else None)


@click.group(invoke_without_command=True)
@click.version_option(version=__version__)
@click.pass_context
def main(ctx):
    """Pathy - filesystem path completion for Python strings.

    Without a subcommand, runs the language server on stdio.
    """
    if ctx.invoked_subcommand is None:
        ctx.invoke(serve)


@main.command()
@click.option("--log/--no-log", default=False, help="Write a JSONL event log")
@click.option("--log-dir", type=click.Path(file_okay=False), default=None, help="Directory for event logs")
@click.option("--debug", "-d", is_flag=True, help="Also log gating decisions")
def serve(log: bool, log_dir: str, debug: bool):
    """Run the language server on stdin/stdout."""
    config = Config.load()
    debug = debug or config.debug
    init_logger(enabled=log or debug, log_dir=Path(log_dir) if log_dir else None, debug=debug)

    from .server import start_io
    start_io(config)


@main.command()
@click.argument("line")
@click.option("--column", "-c", type=int, default=None, help="Cursor column in UTF-16 units (default: end of line)")
@click.option("--file", "file_path", default="untitled.py", help="File the line belongs to")
@click.option("--root", default="", help="Workspace root")
@click.option("--gating", type=click.Choice([m.value for m in ContextGating]), default=None, help="Context gating mode")
@click.option("--show-hidden", is_flag=True, help="Include dotfiles")
def complete(line: str, column: int, file_path: str, root: str, gating: str, show_hidden: bool):
    """Show completions for LINE as if typed in FILE."""
    state = _build_state(root, gating, show_hidden)
    request = CompletionRequest(
        line_text=line,
        cursor_column=utf16_len(line) if column is None else column,
        document_uri=Path(file_path).absolute().as_uri(),
        root_uri=state.root_uri,
    )
    print_candidates(console, state.complete(request))


@main.command()
@click.option("--file", "file_path", default="untitled.py", help="File the typed lines belong to")
@click.option("--root", default="", help="Workspace root")
@click.option("--gating", type=click.Choice([m.value for m in ContextGating]), default=None, help="Context gating mode")
def repl(file_path: str, root: str, gating: str):
    """Interactive completion playground."""
    state = _build_state(root, gating, False)
    PathyREPL(state, Path(file_path).absolute(), console=console).run()


@main.command("init-config")
def init_config():
    """Create the global config file if missing."""
    path = ensure_config_file()
    console.print(f"[green]Config:[/] {path}")


if __name__ == "__main__":
    main()
