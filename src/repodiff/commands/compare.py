"""Compare the source tree with a target directory, archive or remote repository."""

from __future__ import annotations

import logging
import sys
from argparse import Namespace
from contextlib import nullcontext
from pathlib import Path
from typing import Any

from repodiff.compare import compare_trees
from repodiff.config import (
    ConfigError,
    apply_overrides,
    check_config_version,
    exclude_list,
    load_config,
    resolve_path,
)
from repodiff.models import ComparisonResult
from repodiff.report import REPORT_FORMATS, write_report
from repodiff.tree import TreeSourceError, cloned_repository, open_tree

logger = logging.getLogger(__name__)


def _flag_overrides(args: Namespace) -> dict[str, Any]:
    """Values given on the command line; absent flags are None so config values survive."""
    overrides = {
        "target_url": getattr(args, "target_url", None),
        "target_path": getattr(args, "target_path", None),
        "branch": getattr(args, "branch", None),
        "tag": getattr(args, "tag", None),
        "temp_dir": getattr(args, "temp_dir", None),
        "output_file": getattr(args, "output_file", None),
        "format": getattr(args, "format", None),
        "exclude_paths": getattr(args, "exclude_paths", None) or None,
        "respect_gitignore": getattr(args, "respect_gitignore", None),
        "detailed_diff": getattr(args, "detailed_diff", None),
        "strip_archive_root": getattr(args, "strip_archive_root", None),
    }
    for key in ("target_path", "temp_dir", "output_file"):
        if isinstance(overrides[key], Path):
            overrides[key] = str(overrides[key])
    return overrides


def _print_summary(result: ComparisonResult, output_file: Path) -> None:
    print(f"Identical:   {len(result.identical)}")
    print(f"Different:   {len(result.different)}")
    print(f"Source only: {len(result.source_only)}")
    print(f"Target only: {len(result.target_only)}")
    print(f"Excluded:    {len(result.excluded_source)} (source), {len(result.excluded_target)} (target)")
    print(f"Comparison complete. Report generated as {output_file.as_posix()}")


def run(args: Namespace) -> None:
    """Run the compare command: walk both trees, compare them and write the report."""
    source = resolve_path(Path(getattr(args, "source", None) or "."))
    config_file = getattr(args, "config", None)
    if config_file is not None:
        config_file = Path(config_file)
        if not config_file.is_file():
            print(f"Error: config file '{config_file}' not found.", file=sys.stderr)
            sys.exit(1)
    try:
        config = load_config(source if source.is_dir() else None, config_file)
        check_config_version(config)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    apply_overrides(config, _flag_overrides(args))

    exclude = exclude_list(config.get("exclude_paths"))
    respect_gitignore = bool(config.get("respect_gitignore", True))
    detailed_diff = bool(config.get("detailed_diff", False))
    strip_root = bool(config.get("strip_archive_root", True))
    fmt = config.get("format") or "html"
    if fmt not in REPORT_FORMATS:
        print(f"Error: unknown report format '{fmt}' (use html or json).", file=sys.stderr)
        sys.exit(1)
    output_file = Path(config.get("output_file") or "report.html")

    target_path = config.get("target_path")
    target_url = config.get("target_url")
    if target_path:
        if config.get("branch") or config.get("tag"):
            print(
                "Warning: --branch and --tag options are ignored when --target-path is specified.",
                file=sys.stderr,
            )
        target = nullcontext(resolve_path(Path(target_path)))
    elif target_url:
        target = cloned_repository(
            target_url,
            temp_dir=config.get("temp_dir"),
            branch=config.get("branch"),
            tag=config.get("tag"),
        )
    else:
        print("Error: either --target-url or --target-path must be specified.", file=sys.stderr)
        sys.exit(1)

    try:
        source_tree = open_tree(source, exclude, respect_gitignore, strip_root)
        # Archive members and clones are read lazily, so compare while the target is open
        with target as target_location:
            target_tree = open_tree(target_location, exclude, respect_gitignore, strip_root)
            result = compare_trees(source_tree, target_tree, detailed_diff=detailed_diff)
    except TreeSourceError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if target_url and not target_path:
        result.target = target_url

    try:
        written = write_report(result, output_file, fmt)
    except OSError as e:
        print(f"Error: could not write report {output_file}: {e}", file=sys.stderr)
        sys.exit(1)
    logger.debug("Report written to %s", written)
    _print_summary(result, written)
