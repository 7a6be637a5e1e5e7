"""Compare two tree listings file by file."""

from __future__ import annotations

import logging
import zipfile

from repodiff.diff import unified_diff
from repodiff.models import ComparisonResult, TreeListing
from repodiff.utils.hashing import handle_hash

logger = logging.getLogger(__name__)


def compare_trees(
    source: TreeListing,
    target: TreeListing,
    detailed_diff: bool = False,
    context_lines: int = 3,
) -> ComparisonResult:
    """
    Classify every relative path as identical, different, source-only or target-only.

    Files on both sides are compared by SHA-256 of their content; a file that
    cannot be read on either side counts as different. With detailed_diff,
    unified diff lines are attached for each differing file.
    """
    result = ComparisonResult(
        source=source.root,
        target=target.root,
        excluded_source=sorted(source.excluded),
        excluded_target=sorted(target.excluded),
    )

    for path in sorted(source.files):
        source_file = source.files[path]
        target_file = target.files.get(path)
        if target_file is None:
            result.source_only.append(path)
            continue

        source_digest = handle_hash(source_file)
        target_digest = handle_hash(target_file)
        if source_digest is not None and source_digest == target_digest:
            result.identical.append(path)
            continue

        result.different.append(path)
        result.digests[path] = (source_digest, target_digest)
        if detailed_diff:
            try:
                result.diffs[path] = unified_diff(
                    source_file.read_bytes(),
                    target_file.read_bytes(),
                    path,
                    context_lines=context_lines,
                )
            except (OSError, KeyError, zipfile.BadZipFile) as e:
                logger.warning("Could not diff %s: %s", path, e)
                result.diffs[path] = [f"Error reading files for diff: {e}"]

    result.target_only = sorted(p for p in target.files if p not in source.files)

    logger.info(
        "Compared %s with %s: %d identical, %d different, %d source-only, %d target-only",
        result.source,
        result.target,
        len(result.identical),
        len(result.different),
        len(result.source_only),
        len(result.target_only),
    )
    return result
