"""Utilities for rendering proposed changes as unified diffs."""

import difflib

from unidiff import PatchSet


def create_patch(original: str, modified: str, filename: str = "file") -> str:
    """Create a unified diff patch.

    Args:
        original: Original file content
        modified: Modified file content
        filename: Filename to use in patch header

    Returns:
        Unified diff string (empty if the contents are identical)
    """
    diff = difflib.unified_diff(
        normalize_line_endings(original).splitlines(),
        normalize_line_endings(modified).splitlines(),
        fromfile=f"a/{filename}",
        tofile=f"b/{filename}",
        lineterm="",
    )

    lines = list(diff)
    return "\n".join(lines) + "\n" if lines else ""


def diff_stats(patch_str: str) -> tuple[int, int]:
    """Count added and removed lines in a unified diff.

    Args:
        patch_str: Unified diff string

    Returns:
        Tuple of (added, removed)
    """
    if not patch_str:
        return 0, 0

    patchset = PatchSet(patch_str)
    added = sum(patched_file.added for patched_file in patchset)
    removed = sum(patched_file.removed for patched_file in patchset)
    return added, removed


def normalize_line_endings(content: str) -> str:
    """Normalize line endings to LF."""
    return content.replace("\r\n", "\n").replace("\r", "\n")
