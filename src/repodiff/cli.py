"""CLI entry point: argument parsing and subcommand dispatch."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from repodiff import __version__
from repodiff.config import ConfigError, default_config, load_config, resolve_path


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """
    Configure the repodiff logger: level from --verbose/--quiet or config,
    console handler on stderr, optional file handler from config.
    """
    try:
        config = load_config(None)
    except ConfigError:
        # The command reports the bad setting itself
        config = default_config()
    log_cfg = config.get("logging") or {}
    if verbose:
        level_name = "DEBUG"
    elif quiet:
        level_name = "ERROR"
    else:
        level_name = (log_cfg.get("level") or "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    root = logging.getLogger("repodiff")
    root.setLevel(level)
    if not root.handlers:
        fmt = logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(fmt)
        root.addHandler(console)
        log_file = log_cfg.get("file")
        if log_file:
            try:
                fh = logging.FileHandler(Path(log_file).expanduser(), encoding="utf-8")
                fh.setFormatter(fmt)
                root.addHandler(fh)
            except OSError:
                root.warning("Could not open log file %s", log_file)


def _add_filter_flags(parser: argparse.ArgumentParser) -> None:
    """Exclude-list and .gitignore flags shared by compare and files."""
    parser.add_argument(
        "-e",
        "--exclude-paths",
        dest="exclude_paths",
        metavar="PATTERN",
        action="append",
        help="Glob pattern of paths to exclude (repeatable, e.g. -e 'build/**' -e '*.{log,tmp}').",
    )
    parser.add_argument(
        "--no-gitignore",
        dest="respect_gitignore",
        action="store_false",
        default=None,
        help="Do not apply .gitignore files.",
    )
    parser.add_argument(
        "--keep-archive-root",
        dest="strip_archive_root",
        action="store_false",
        default=None,
        help="Keep the top-level folder of a zip archive instead of stripping it.",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repodiff",
        description="Compare two file trees (directory, zip archive or git repository) honouring .gitignore rules.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    log_group = parser.add_mutually_exclusive_group()
    log_group.add_argument("-v", "--verbose", action="store_true", help="Verbose (DEBUG) output.")
    log_group.add_argument("-q", "--quiet", action="store_true", help="Quiet (errors only).")

    # Same flags on subparsers so "repodiff compare . -v" works. SUPPRESS as the
    # default keeps a flag given before the subcommand; exclusivity is checked in main.
    global_flags = argparse.ArgumentParser(add_help=False)
    global_flags.add_argument(
        "-v", "--verbose", action="store_true", default=argparse.SUPPRESS, help="Verbose (DEBUG) output."
    )
    global_flags.add_argument(
        "-q", "--quiet", action="store_true", default=argparse.SUPPRESS, help="Quiet (errors only)."
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND", required=True)

    # compare
    p_compare = subparsers.add_parser(
        "compare",
        help="Compare SOURCE with a target directory, zip archive or remote repository.",
        parents=[global_flags],
    )
    p_compare.add_argument("source", type=Path, nargs="?", default=Path("."), help="Source directory or zip archive (default: .).")
    p_compare.add_argument("-c", "--config", type=Path, help="Config file (default: .repodiff.json in SOURCE).")
    target = p_compare.add_mutually_exclusive_group()
    target.add_argument("-u", "--target-url", dest="target_url", help="URL of the target git repository (shallow clone).")
    target.add_argument("-p", "--target-path", dest="target_path", type=Path, help="Target directory or zip archive.")
    p_compare.add_argument("-b", "--branch", help="Branch to clone (default: remote default branch).")
    p_compare.add_argument("-t", "--tag", help="Tag to clone (ignored when --branch is given).")
    p_compare.add_argument("--temp-dir", dest="temp_dir", type=Path, help="Directory to clone into (removed afterwards).")
    p_compare.add_argument("-o", "--output-file", dest="output_file", type=Path, help="Report file (default: report.html).")
    p_compare.add_argument("-f", "--format", choices=("html", "json"), help="Report format (default: html).")
    p_compare.add_argument(
        "-d",
        "--detailed-diff",
        dest="detailed_diff",
        action="store_true",
        default=None,
        help="Include unified diffs for differing files.",
    )
    _add_filter_flags(p_compare)
    p_compare.set_defaults(run="compare")

    # files
    p_files = subparsers.add_parser(
        "files",
        help="List the files a tree contributes to a comparison.",
        parents=[global_flags],
    )
    p_files.add_argument("path", type=Path, nargs="?", default=Path("."), help="Directory or zip archive (default: .).")
    p_files.add_argument("--excluded", action="store_true", help="List excluded paths instead.")
    _add_filter_flags(p_files)
    p_files.set_defaults(run="files")

    # config
    p_config = subparsers.add_parser("config", help="Show or edit configuration.", parents=[global_flags])
    p_config.add_argument("path", type=Path, nargs="?", default=Path("."), help="Project path for .repodiff.json (default: .).")
    p_config.add_argument("--show", action="store_true", help="Display current settings.")
    p_config.add_argument("--set", dest="set_key", metavar="KEY=VALUE", help="Set a configuration value.")
    p_config.add_argument("--add", dest="add_key", metavar=("KEY", "VALUE"), nargs=2, help="Append VALUE to list KEY (e.g. exclude_paths PATTERN).")
    p_config.add_argument("--remove", dest="remove_key", metavar=("KEY", "VALUE"), nargs=2, help="Remove VALUE from list KEY.")
    p_config.add_argument("--global", dest="global_", action="store_true", help="With --set/--add/--remove: write to the global config.")
    p_config.set_defaults(run="config")

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if getattr(args, "verbose", False) and getattr(args, "quiet", False):
        parser.error("argument -q/--quiet: not allowed with argument -v/--verbose")
    setup_logging(
        verbose=getattr(args, "verbose", False),
        quiet=getattr(args, "quiet", False),
    )
    run = getattr(args, "run", None)

    if hasattr(args, "source"):
        args.source = resolve_path(args.source)
    if hasattr(args, "path"):
        args.path = resolve_path(args.path)

    if run == "compare":
        from repodiff.commands.compare import run as cmd_run
    elif run == "files":
        from repodiff.commands.files import run as cmd_run
    elif run == "config":
        from repodiff.commands.config_cmd import run as cmd_run
    else:
        parser.print_help()
        sys.exit(0)

    cmd_run(args)
