"""Project file listing used as prompt context."""

from pathlib import Path

from aiteam.utils.ignore import IgnoreRules


class ProjectTree:
    """Lists project-relative file paths, honouring ignore rules."""

    def __init__(self, project_root: Path, ignore_rules: IgnoreRules, max_entries: int = 500):
        """Initialize project tree.

        Args:
            project_root: Root directory to walk
            ignore_rules: Ignore rules to apply
            max_entries: Maximum number of paths rendered into a prompt
        """
        self.project_root = project_root
        self.ignore_rules = ignore_rules
        self.max_entries = max_entries

    def list_files(self) -> list[str]:
        """Walk the project and return sorted relative POSIX paths."""
        return sorted(self.ignore_rules.visible_files())

    def render(self) -> str:
        """Render the file list for inclusion in a prompt."""
        files = self.list_files()
        if not files:
            return "(empty project)"

        lines = files[: self.max_entries]
        if len(files) > self.max_entries:
            lines.append(f"... ({len(files) - self.max_entries} more files)")
        return "\n".join(lines)
