"""Write comparison reports as a standalone HTML page or as JSON."""

from __future__ import annotations

import html
import json
from pathlib import Path
from string import Template
from typing import Any

from repodiff.models import ComparisonResult

REPORT_FORMATS = ("html", "json")

_PAGE = Template(
    """<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>$title</title>
    <style>
        body { font-family: Arial, sans-serif; background-color: #f8f9fa; margin: 20px; }
        h1 { color: #343a40; }
        h2 { color: #495057; }
        ul { list-style-type: none; padding: 0; }
        li { padding: 5px; }
        .meta { color: #6c757d; }
        .identical { color: #28a745; }
        .different { color: #dc3545; }
        .source-only { color: #007bff; }
        .target-only { color: #fd7e14; }
        .excluded { color: #6c757d; }
        .diff-content { background-color: #f1f1f1; color: #212529; padding: 10px; margin-top: 5px; border-radius: 5px; overflow-x: auto; }
        .diff-deleted { background-color: #ffe6e6; }
        .diff-inserted { background-color: #e6ffe6; }
        .diff-hunk { color: #6f42c1; }
        pre { white-space: pre-wrap; word-wrap: break-word; margin: 0; }
    </style>
</head>
<body>
    <h1>$title</h1>
    <p class="meta">Source: $source<br>Target: $target</p>
$sections
</body>
</html>
"""
)


def result_to_dict(result: ComparisonResult) -> dict[str, Any]:
    """Convert a ComparisonResult to a JSON-serializable dict."""
    return {
        "source": result.source,
        "target": result.target,
        "counts": {
            "identical": len(result.identical),
            "different": len(result.different),
            "source_only": len(result.source_only),
            "target_only": len(result.target_only),
            "excluded_source": len(result.excluded_source),
            "excluded_target": len(result.excluded_target),
        },
        "identical": result.identical,
        "different": [
            {
                "path": path,
                "source_sha256": result.digests.get(path, (None, None))[0],
                "target_sha256": result.digests.get(path, (None, None))[1],
                "diff": result.diffs.get(path),
            }
            for path in result.different
        ],
        "source_only": result.source_only,
        "target_only": result.target_only,
        "excluded_source": result.excluded_source,
        "excluded_target": result.excluded_target,
    }


def _diff_class(line: str) -> str:
    if line.startswith(("+++", "---")):
        return ""
    if line.startswith("@@"):
        return "diff-hunk"
    if line.startswith("+"):
        return "diff-inserted"
    if line.startswith("-"):
        return "diff-deleted"
    return ""


def _render_diff(lines: list[str]) -> str:
    rendered = []
    for line in lines:
        css = _diff_class(line)
        text = html.escape(line) or "&nbsp;"
        rendered.append(f'<span class="{css}">{text}</span>' if css else text)
    return '<div class="diff-content"><pre>' + "\n".join(rendered) + "</pre></div>"


def _render_section(heading: str, css: str, paths: list[str], diffs: dict[str, list[str]] | None = None) -> str:
    items = []
    for path in paths:
        body = html.escape(path)
        if diffs and diffs.get(path):
            body += _render_diff(diffs[path])
        items.append(f'        <li class="{css}">{body}</li>')
    listing = "\n".join(items) if items else "        <li>None</li>"
    return f"    <h2>{html.escape(heading)} ({len(paths)})</h2>\n    <ul>\n{listing}\n    </ul>"


def render_html(result: ComparisonResult, title: str = "Repository Comparison Report") -> str:
    """Render the full HTML report. All paths and diff text are escaped."""
    sections = [
        _render_section("Identical Files", "identical", result.identical),
        _render_section("Different Files", "different", result.different, result.diffs),
        _render_section("Files Only in Source", "source-only", result.source_only),
        _render_section("Files Only in Target", "target-only", result.target_only),
        _render_section("Excluded from Source", "excluded", result.excluded_source),
        _render_section("Excluded from Target", "excluded", result.excluded_target),
    ]
    return _PAGE.substitute(
        title=html.escape(title),
        source=html.escape(result.source),
        target=html.escape(result.target),
        sections="\n".join(sections),
    )


def write_report(result: ComparisonResult, output_file: Path | str, fmt: str = "html") -> Path:
    """
    Write the report in fmt ('html' or 'json') to output_file and return its path.

    Raises ValueError for an unknown format; I/O errors propagate.
    """
    if fmt not in REPORT_FORMATS:
        raise ValueError(f"Unknown report format: {fmt!r} (expected one of {', '.join(REPORT_FORMATS)})")
    output_file = Path(output_file)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    if fmt == "json":
        text = json.dumps(result_to_dict(result), indent=2) + "\n"
    else:
        text = render_html(result)
    output_file.write_text(text, encoding="utf-8")
    return output_file
