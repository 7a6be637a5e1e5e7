"""List the files a tree contributes to a comparison, or the paths it excludes."""

from __future__ import annotations

import sys
from argparse import Namespace
from pathlib import Path

from repodiff.config import (
    ConfigError,
    apply_overrides,
    check_config_version,
    exclude_list,
    load_config,
    resolve_path,
)
from repodiff.tree import TreeSourceError, open_tree


def run(args: Namespace) -> None:
    """Run the files command: print one relative path per line."""
    path = resolve_path(Path(getattr(args, "path", None) or "."))
    try:
        config = load_config(path if path.is_dir() else None)
        check_config_version(config)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    apply_overrides(
        config,
        {
            "exclude_paths": getattr(args, "exclude_paths", None) or None,
            "respect_gitignore": getattr(args, "respect_gitignore", None),
            "strip_archive_root": getattr(args, "strip_archive_root", None),
        },
    )
    try:
        tree = open_tree(
            path,
            exclude_list(config.get("exclude_paths")),
            bool(config.get("respect_gitignore", True)),
            bool(config.get("strip_archive_root", True)),
        )
    except TreeSourceError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if getattr(args, "excluded", False):
        paths = sorted(tree.excluded)
    else:
        paths = sorted(tree.files)
    for rel in paths:
        print(rel)
