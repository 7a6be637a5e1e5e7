"""Configuration: defaults, config loading (global + project overrides) and CLI flag overlay."""

from __future__ import annotations

import copy
import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from packaging.specifiers import InvalidSpecifier, SpecifierSet
from packaging.version import Version

from repodiff import __version__

CONFIG_FILENAME = "config.json"
# Environment variables REPODIFF_<KEY> override file values for FLAG_KEYS
ENV_PREFIX = "REPODIFF_"
# Project-local config, looked up in the root of the source tree
PROJECT_CONFIG_FILENAME = ".repodiff.json"

# Config keys that command-line flags may override
FLAG_KEYS = (
    "target_url",
    "target_path",
    "branch",
    "tag",
    "temp_dir",
    "output_file",
    "format",
    "exclude_paths",
    "respect_gitignore",
    "detailed_diff",
    "strip_archive_root",
)

_BOOL_KEYS = ("respect_gitignore", "detailed_diff", "strip_archive_root")
_TRUE_WORDS = ("1", "true", "yes", "on")
_FALSE_WORDS = ("0", "false", "no", "off", "")


class ConfigError(Exception):
    """Raised for configuration that cannot be used (bad version constraint, bad env value)."""


def _global_config_dir() -> Path:
    return Path.home() / ".repodiff"


def global_config_path() -> Path:
    """Path to global config file (~/.repodiff/config.json)."""
    return _global_config_dir() / CONFIG_FILENAME


def default_config() -> dict[str, Any]:
    """Built-in defaults; every other layer is merged on top of these."""
    return {
        "version": None,
        "target_url": None,
        "target_path": None,
        "branch": None,
        "tag": None,
        "temp_dir": None,
        "output_file": "report.html",
        "format": "html",
        "exclude_paths": [],
        "respect_gitignore": True,
        "detailed_diff": False,
        "strip_archive_root": True,
        "logging": {
            "level": "INFO",
            "file": None,
        },
    }


def _load_json(path: Path) -> dict[str, Any] | None:
    """Load a JSON object from path; return None if file missing or invalid."""
    if not path.is_file():
        return None
    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text)
    except (json.JSONDecodeError, OSError):
        return None
    return data if isinstance(data, dict) else None


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge override into base recursively. Mutates base; returns base."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = copy.deepcopy(value)
    return base


def load_global_config() -> dict[str, Any]:
    """Load global config from ~/.repodiff/config.json. Returns defaults if missing."""
    data = _load_json(global_config_path())
    if data is None:
        return default_config()
    return _deep_merge(default_config(), data)


def project_config_path(project_root: Path) -> Path:
    """Path to project-local config (<project>/.repodiff.json)."""
    return project_root / PROJECT_CONFIG_FILENAME


def load_config(
    project_root: Path | None = None,
    config_file: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """
    Load merged configuration: defaults + global + project file + environment.

    config_file, when given, replaces the project file lookup (the --config
    flag). If project_root is None and no config_file is given, only the
    global config and defaults are used. environ defaults to os.environ.

    Raises ConfigError if a REPODIFF_* variable holds an unusable value.
    """
    merged = load_global_config()
    path = config_file
    if path is None and project_root is not None:
        path = project_config_path(project_root.resolve())
    if path is not None:
        project_data = _load_json(path)
        if project_data is not None:
            _deep_merge(merged, project_data)
    return _deep_merge(merged, env_overrides(os.environ if environ is None else environ))


def _env_value(key: str, raw: str) -> Any:
    if key in _BOOL_KEYS:
        word = raw.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
        raise ConfigError(f"{ENV_PREFIX}{key.upper()} must be true or false, got {raw!r}")
    if key == "exclude_paths":
        # A JSON list, or a single pattern (commas belong to brace expansion)
        try:
            value = json.loads(raw)
        except json.JSONDecodeError:
            return [raw]
        return [str(item) for item in value] if isinstance(value, list) else [raw]
    return raw


def env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    """Config values from REPODIFF_<KEY> variables (e.g. REPODIFF_TARGET_URL), for FLAG_KEYS only."""
    overrides: dict[str, Any] = {}
    for key in FLAG_KEYS:
        name = ENV_PREFIX + key.upper()
        if name in environ:
            overrides[key] = _env_value(key, environ[name])
    return overrides


def check_config_version(config: dict[str, Any], app_version: str = __version__) -> None:
    """
    Check the optional 'version' key, a PEP 440 constraint such as ">=0.1,<1".

    Raises ConfigError if the constraint is invalid or app_version does not
    satisfy it. A missing or null version is accepted.
    """
    constraint = config.get("version")
    if constraint is None:
        return
    try:
        spec = SpecifierSet(str(constraint))
    except InvalidSpecifier as e:
        raise ConfigError(f"invalid version constraint in configuration file: {constraint!r}") from e
    if Version(app_version) not in spec:
        raise ConfigError(f"application version {app_version} does not satisfy constraint {constraint}")


def save_config(path: Path, data: dict[str, Any]) -> None:
    """Write data as pretty-printed JSON to path, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")


def apply_overrides(config: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """
    Overlay command-line values on config. Mutates config; returns config.

    Only keys in FLAG_KEYS are considered and None means "flag not given",
    so config-file values survive unless a flag is actually passed.
    """
    for key in FLAG_KEYS:
        value = overrides.get(key)
        if value is not None:
            config[key] = value
    return config


def resolve_path(path: Path) -> Path:
    """Resolve path to absolute, normalized."""
    return path.resolve()


def exclude_list(value: Any) -> list[str]:
    """Normalise the exclude_paths setting (list, single string or None) to a list of patterns."""
    if not value:
        return []
    if isinstance(value, str):
        value = [value]
    return [str(item).strip() for item in value if str(item).strip()]
