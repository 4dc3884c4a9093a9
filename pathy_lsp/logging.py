"""Event logging for debugging completion behaviour.

The language server talks over stdout, so nothing here ever prints to
stdout: events go to a JSON-lines file and human-readable warnings go to
stderr.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Optional

from rich.console import Console

# Log directory
LOG_DIR = Path.home() / ".pathy" / "logs"

# stderr only; stdout belongs to the protocol stream
err_console = Console(stderr=True)


def ensure_log_dir(log_dir: Path) -> Path:
    """Create logs directory if it doesn't exist."""
    if not log_dir.exists():
        log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


class ServerLogger:
    """Logs requests, gating decisions and errors to a JSONL session file.

    Disabled loggers accept every call and write nothing.
    """

    def __init__(self, enabled: bool = False, log_dir: Optional[Path] = None, debug: bool = False):
        self.enabled = enabled
        self.debug = debug
        self.session_id = datetime.now().strftime("%Y%m%d_%H%M%S")
        self.log_dir = Path(log_dir) if log_dir else LOG_DIR
        self.log_file = self.log_dir / f"session_{self.session_id}.jsonl"

        if self.enabled:
            self._write_entry({
                "type": "session_start",
                "timestamp": datetime.now().isoformat(),
            })

    def log_request(self, uri: str, line: int, character: int) -> None:
        """Log an incoming completion request."""
        if not self.enabled:
            return
        self._write_entry({
            "type": "request",
            "uri": uri,
            "line": line,
            "character": character,
            "timestamp": datetime.now().isoformat(),
        })

    def log_completion(self, query: str, directories: list, count: int) -> None:
        """Log the outcome of a completion."""
        if not self.enabled:
            return
        self._write_entry({
            "type": "completion",
            "query": query,
            "directories": [str(d) for d in directories],
            "count": count,
            "timestamp": datetime.now().isoformat(),
        })

    def log_gating_rejected(self, content: str, mode: str) -> None:
        """Log a completion refused by context gating (debug only)."""
        if not self.enabled or not self.debug:
            return
        self._write_entry({
            "type": "gating_rejected",
            "mode": mode,
            "content": content[:200],
            "timestamp": datetime.now().isoformat(),
        })

    def log_config_warnings(self, warnings: list[str], source: str = "client") -> None:
        """Log configuration warnings."""
        if not self.enabled:
            return
        self._write_entry({
            "type": "config_warnings",
            "source": source,
            "warnings": warnings,
            "timestamp": datetime.now().isoformat(),
        })

    def log_fs_error(self, directory: str, error: str) -> None:
        """Log a directory that could not be read."""
        if not self.enabled:
            return
        self._write_entry({
            "type": "fs_error",
            "directory": directory,
            "error": error,
            "timestamp": datetime.now().isoformat(),
        })

    def log_error(self, error: str) -> None:
        """Log error."""
        if not self.enabled:
            return
        # Truncate long tracebacks
        truncated = error[:2000] + "..." if len(error) > 2000 else error
        self._write_entry({
            "type": "error",
            "error": truncated,
            "timestamp": datetime.now().isoformat(),
        })

    def _write_entry(self, entry: dict) -> None:
        """Write a log entry to file."""
        try:
            ensure_log_dir(self.log_dir)
            with open(self.log_file, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry, ensure_ascii=False) + "\n")
        except Exception:
            pass  # Fail silently - logging should not break completion

    @property
    def log_path(self) -> Path:
        """Return path to current log file."""
        return self.log_file


# Global logger instance
_logger: Optional[ServerLogger] = None


def get_logger() -> ServerLogger:
    """Get or create the global logger instance (disabled by default)."""
    global _logger
    if _logger is None:
        _logger = ServerLogger()
    return _logger


def init_logger(enabled: bool = True, log_dir: Optional[Path] = None, debug: bool = False) -> ServerLogger:
    """Initialize the global logger."""
    global _logger
    _logger = ServerLogger(enabled=enabled, log_dir=log_dir, debug=debug)
    return _logger


def report_config_warnings(warnings: list[str], source: str = "client") -> None:
    """Record configuration warnings in the event log and on stderr."""
    if not warnings:
        return
    get_logger().log_config_warnings(warnings, source=source)
    message = f"pathy-server: config warnings ({source}): {'; '.join(warnings)}"
    err_console.print(message, style="yellow", markup=False, highlight=False, soft_wrap=True)
