"""Which project files the agent may see, via gitignore-style patterns."""

import os
from pathlib import Path
from typing import Iterator, Optional

import pathspec

from aiteam.constants import BUILTIN_IGNORES

IGNORE_FILES = (".gitignore", ".aiteamignore")


def read_patterns(path: Path) -> list[str]:
    """Pattern lines of an ignore file, without blanks and comments."""
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError):
        return []
    return [line.strip() for line in lines if line.strip() and not line.lstrip().startswith("#")]


class IgnoreRules:
    """Built-in excludes plus .gitignore, .aiteamignore and configured globs."""

    def __init__(self, project_root: Path, extra_patterns: Optional[list[str]] = None):
        self.project_root = project_root
        self.patterns = list(BUILTIN_IGNORES) + list(extra_patterns or [])
        for name in IGNORE_FILES:
            self.patterns.extend(read_patterns(project_root / name))
        self.spec = pathspec.PathSpec.from_lines("gitwildmatch", self.patterns)

    def should_ignore(self, path: Path) -> bool:
        """True for ignored paths and for anything outside the project."""
        if path.is_absolute():
            try:
                path = path.relative_to(self.project_root)
            except ValueError:
                return True
        return self.spec.match_file(path.as_posix())

    def visible_files(self) -> Iterator[str]:
        """Yield project-relative POSIX paths of files that are not ignored.

        Ignored directories are pruned rather than walked.
        """
        for dirpath, dirnames, filenames in os.walk(self.project_root):
            rel_dir = Path(dirpath).relative_to(self.project_root)
            dirnames[:] = [
                d for d in dirnames
                if not self.spec.match_file((rel_dir / d).as_posix() + "/")
            ]
            for name in filenames:
                rel_path = rel_dir / name
                if not self.spec.match_file(rel_path.as_posix()):
                    yield rel_path.as_posix()
