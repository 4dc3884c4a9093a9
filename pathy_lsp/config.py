"""Configuration and settings parsing."""

import os
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from .logging import report_config_warnings

# Global config directory
CONFIG_DIR = Path.home() / ".pathy"
CONFIG_FILE = CONFIG_DIR / "config.yaml"
PROJECT_CONFIG_NAME = ".pathy.yaml"

# Template for new config file
CONFIG_TEMPLATE = """# Pathy configuration
# Project settings in <workspace>/.pathy.yaml override this file.
# Settings sent by the editor override both.

enable: true
path_prefix_fallback: true

# When to offer completions: off, smart, strict
context_gating: "smart"

# Where relative paths start: file_dir, workspace_root, both
base_dir: "file_dir"
workspace_root_strategy: "lsp_root_uri"  # lsp_root_uri, disabled

max_results: 80
show_hidden: false
include_files: true
include_directories: true
directory_trailing_slash: true
prefer_forward_slashes: true
expand_tilde: true

ignore_globs:
  - "**/.git/**"
  - "**/.venv/**"
  - "**/venv/**"
  - "**/__pycache__/**"
  - "**/.pytest_cache/**"
  - "**/.mypy_cache/**"
  - "**/.ruff_cache/**"
  - "**/node_modules/**"

windows_enable_drive_prefix: true
windows_enable_unc: true

cache_ttl_ms: 500
cache_max_dirs: 64
stat_strategy: "lazy"  # none, lazy, eager
"""

DEFAULT_IGNORE_GLOBS = [
    "**/.git/**",
    "**/.venv/**",
    "**/venv/**",
    "**/__pycache__/**",
    "**/.pytest_cache/**",
    "**/.mypy_cache/**",
    "**/.ruff_cache/**",
    "**/node_modules/**",
]


def ensure_config_dir() -> Path:
    """Create config directory if it doesn't exist."""
    if not CONFIG_DIR.exists():
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    return CONFIG_DIR


def ensure_config_file() -> Path:
    """Create template config file if it doesn't exist."""
    ensure_config_dir()
    if not CONFIG_FILE.exists():
        CONFIG_FILE.write_text(CONFIG_TEMPLATE)
    return CONFIG_FILE


class ContextGating(Enum):
    OFF = "off"
    SMART = "smart"
    STRICT = "strict"


class BaseDirStrategy(Enum):
    FILE_DIR = "file_dir"
    WORKSPACE_ROOT = "workspace_root"
    BOTH = "both"


class WorkspaceRootStrategy(Enum):
    LSP_ROOT_URI = "lsp_root_uri"
    DISABLED = "disabled"


class StatStrategy(Enum):
    NONE = "none"
    LAZY = "lazy"
    EAGER = "eager"


@dataclass
class Config:
    """Completion settings.

    Treated as immutable once built: settings changes produce a new Config
    that replaces the old one wholesale.
    """
    enable: bool = True
    path_prefix_fallback: bool = True
    context_gating: ContextGating = ContextGating.SMART
    base_dir: BaseDirStrategy = BaseDirStrategy.FILE_DIR
    workspace_root_strategy: WorkspaceRootStrategy = WorkspaceRootStrategy.LSP_ROOT_URI
    max_results: int = 80
    show_hidden: bool = False
    include_files: bool = True
    include_directories: bool = True
    directory_trailing_slash: bool = True
    ignore_globs: list[str] = field(default_factory=lambda: list(DEFAULT_IGNORE_GLOBS))
    prefer_forward_slashes: bool = True
    expand_tilde: bool = True
    windows_enable_drive_prefix: bool = True
    windows_enable_unc: bool = True
    cache_ttl_ms: int = 500
    cache_max_dirs: int = 64
    stat_strategy: StatStrategy = StatStrategy.LAZY
    debug: bool = False

    @property
    def cache_ttl(self) -> float:
        """Cache TTL in seconds."""
        return self.cache_ttl_ms / 1000.0

    @classmethod
    def load(cls, workspace_root: Optional[Path] = None) -> "Config":
        """Load configuration from YAML files and environment variables.

        Config priority (later overrides earlier):
        1. ~/.pathy/config.yaml (global)
        2. <workspace_root>/.pathy.yaml (project)
        3. Environment variables

        Invalid values are dropped with a warning printed to stderr.
        """
        config_paths = [CONFIG_FILE]
        if workspace_root is not None:
            config_paths.append(Path(workspace_root) / PROJECT_CONFIG_NAME)

        config = cls()
        for path in config_paths:
            if not os.path.exists(path):
                continue
            try:
                import yaml
                with open(path, "r", encoding="utf-8") as f:
                    file_data = yaml.safe_load(f) or {}
            except Exception:
                continue  # Ignore unreadable config files
            if not isinstance(file_data, dict):
                continue

            # Fields missing from a file keep what earlier layers set
            config, warnings = load_config(file_data, previous=config, defaults=config)
            if warnings:
                report_config_warnings(warnings, source=str(path))

        # Override with environment variables (highest priority)
        if os.getenv("PATHY_DEBUG"):
            config.debug = os.getenv("PATHY_DEBUG", "").lower() == "true"

        return config

    def summary(self) -> dict:
        """Flat, JSON-friendly view of the settings."""
        data = {}
        for name in self.__dataclass_fields__:
            value = getattr(self, name)
            data[name] = value.value if isinstance(value, Enum) else value
        return data

    @staticmethod
    def get_config_path() -> Path:
        """Return path to global config file."""
        return CONFIG_FILE


def select_settings_root(value: Any) -> Optional[dict]:
    """Find the mapping that holds pathy's settings.

    Editors wrap settings differently, so accept ``{"settings": ...}``,
    ``{"lsp": {"pathy": {"settings": ...}}}``, ``{"pathy": ...}`` or a flat
    mapping.
    """
    if not isinstance(value, dict):
        return None
    current = value
    if isinstance(current.get("settings"), dict):
        current = current["settings"]

    lsp = current.get("lsp")
    if isinstance(lsp, dict) and isinstance(lsp.get("pathy"), dict):
        server = lsp["pathy"]
        if isinstance(server.get("settings"), dict):
            return server["settings"]
        return server

    if isinstance(current.get("pathy"), dict):
        return current["pathy"]
    return current


_BOOL_FIELDS = {
    "enable",
    "path_prefix_fallback",
    "show_hidden",
    "include_files",
    "include_directories",
    "directory_trailing_slash",
    "prefer_forward_slashes",
    "expand_tilde",
    "windows_enable_drive_prefix",
    "windows_enable_unc",
    "debug",
}

_INT_FIELDS = {"max_results", "cache_ttl_ms", "cache_max_dirs"}

_ENUM_FIELDS = {
    "context_gating": ContextGating,
    "base_dir": BaseDirStrategy,
    "workspace_root_strategy": WorkspaceRootStrategy,
    "stat_strategy": StatStrategy,
}


def _parse_field(key: str, value: Any, fallback: Any) -> tuple[Any, Optional[str]]:
    """Validate one setting. Returns (value to use, warning or None)."""
    if key in _BOOL_FIELDS:
        if isinstance(value, bool):
            return value, None
        return fallback, f"invalid {key} type"

    if key in _INT_FIELDS:
        # bool is a subclass of int and is never a valid count
        if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
            return value, None
        return fallback, f"invalid {key} type"

    if key in _ENUM_FIELDS:
        if not isinstance(value, str):
            return fallback, f"invalid {key} type"
        try:
            return _ENUM_FIELDS[key](value), None
        except ValueError:
            return fallback, f"invalid {key}: {value}"

    if key == "ignore_globs":
        if not isinstance(value, list):
            return list(fallback), "invalid ignore_globs type"
        globs = [entry for entry in value if isinstance(entry, str)]
        warning = None
        if len(globs) != len(value):
            warning = "invalid ignore_globs entry"
        # A list with no usable patterns keeps the previous ones
        return (globs or list(fallback)), warning

    return fallback, None


def load_config(
    value: Any,
    previous: Optional[Config] = None,
    defaults: Optional[Config] = None,
) -> tuple[Config, list[str]]:
    """Build a Config from a settings payload.

    Args:
        value: Raw settings (any of the shapes ``select_settings_root`` accepts)
        previous: Config in effect before this load; a mistyped field keeps
            its value from here
        defaults: Values for fields the payload does not mention

    Returns:
        (config, warnings)
    """
    base = defaults or Config()
    config = replace(base, ignore_globs=list(base.ignore_globs))
    root = select_settings_root(value)
    if root is None:
        return config, []

    fallback_source = previous or base
    warnings = []
    for key, raw in root.items():
        if key not in Config.__dataclass_fields__:
            continue
        parsed, warning = _parse_field(key, raw, getattr(fallback_source, key))
        if warning:
            warnings.append(warning)
        setattr(config, key, parsed)

    return config, warnings
