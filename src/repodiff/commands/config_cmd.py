"""Show or edit configuration (CLI command)."""

from __future__ import annotations

import json
import sys
from argparse import Namespace
from collections.abc import Callable
from pathlib import Path
from typing import Any

from repodiff.config import (
    ConfigError,
    default_config,
    global_config_path,
    load_config,
    project_config_path,
    save_config,
)


def _get_nested_key(data: dict[str, Any], key_path: str) -> Any:
    """Return value at dotted key (e.g. 'logging.level'); None if missing."""
    current: Any = data
    for part in key_path.split("."):
        if not isinstance(current, dict) or part not in current:
            return None
        current = current[part]
    return current


def _set_nested_key(data: dict[str, Any], key_path: str, value: Any) -> None:
    """Set a dotted key in data, creating intermediate dicts as needed."""
    *parents, leaf = key_path.split(".")
    current = data
    for part in parents:
        if not isinstance(current.get(part), dict):
            current[part] = {}
        current = current[part]
    current[leaf] = value


def _is_known_key(key_path: str) -> bool:
    defaults = default_config()
    parent, _, leaf = key_path.rpartition(".")
    container = _get_nested_key(defaults, parent) if parent else defaults
    return isinstance(container, dict) and leaf in container


def _parse_value(value_str: str) -> Any:
    """Parse a --set value as JSON (true, 3, ["a"]); fall back to the raw string."""
    value_str = value_str.strip()
    try:
        return json.loads(value_str)
    except json.JSONDecodeError:
        return value_str


def _read_raw(path: Path) -> dict[str, Any]:
    """Raw (unmerged) contents of one config file; {} if missing or invalid."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return {}
    return data if isinstance(data, dict) else {}


def _fail(message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)
    sys.exit(1)


def _edit(path: Path, key_str: str, change: Callable[[Any], Any]) -> Any:
    """Apply change to the current value of key_str in the file at path and save it."""
    if not key_str:
        _fail("empty configuration key.")
    if not _is_known_key(key_str):
        print(f"Warning: '{key_str}' is not a known setting.", file=sys.stderr)
    data = _read_raw(path)
    value = change(_get_nested_key(data, key_str))
    _set_nested_key(data, key_str, value)
    save_config(path, data)
    return value


def run(args: Namespace) -> None:
    """
    Run the config command: show merged settings or set/add/remove values.

    Edits go to .repodiff.json in PATH (default: current directory), the file
    compare reads for its source tree, or to the global file with --global.
    """
    show = getattr(args, "show", False)
    set_key = getattr(args, "set_key", None)
    add_key = getattr(args, "add_key", None)
    remove_key = getattr(args, "remove_key", None)
    project_root = Path(getattr(args, "path", None) or ".").resolve()
    use_global = getattr(args, "global_", False)

    if not (show or set_key or add_key or remove_key):
        _fail("specify --show, --set KEY=VALUE, --add KEY VALUE, or --remove KEY VALUE.")
    if not project_root.is_dir():
        _fail(f"{project_root.as_posix()} is not a directory.")

    if use_global:
        target, label = global_config_path(), "global"
    else:
        target, label = project_config_path(project_root), f"project ({project_root.as_posix()})"

    if set_key:
        key_str, sep, value_str = set_key.partition("=")
        if not sep:
            _fail("--set requires KEY=VALUE (e.g. detailed_diff=true).")
        value = _edit(target, key_str.strip(), lambda _old: _parse_value(value_str))
        print(f"Set {key_str.strip()} = {json.dumps(value)} in {label} config.")

    if add_key:
        key_str, item = add_key[0].strip(), add_key[1].strip()
        _edit(target, key_str, lambda old: (old if isinstance(old, list) else []) + [item])
        print(f"Added {json.dumps(item)} to {key_str} in {label} config.")

    if remove_key:
        key_str, item = remove_key[0].strip(), remove_key[1].strip()
        _edit(target, key_str, lambda old: [x for x in old if x != item] if isinstance(old, list) else [])
        print(f"Removed {json.dumps(item)} from {key_str} in {label} config.")

    if show:
        try:
            config = load_config(project_root)
        except ConfigError as e:
            _fail(str(e))
        print(f"# Config: defaults + global + project ({project_root.as_posix()}) + environment")
        print(json.dumps(config, indent=2))
