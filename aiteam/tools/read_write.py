"""Filesystem collaborator: text files inside the project root."""

import os
import tempfile
from pathlib import Path

from aiteam.constants import DEFAULT_MAX_READ_MB, DEFAULT_MAX_WRITE_MB
from aiteam.errors import ToolExecutionError

MB = 1024 * 1024


class ReadWrite:
    """Reads and writes the files a model asks for, never outside the project."""

    def __init__(
        self,
        project_root: Path,
        max_read_mb: int = DEFAULT_MAX_READ_MB,
        max_write_mb: int = DEFAULT_MAX_WRITE_MB,
    ):
        self.project_root = project_root.resolve()
        self.read_limit = max_read_mb * MB
        self.write_limit = max_write_mb * MB

    def locate(self, path: str) -> Path:
        """Map a directive path onto the project.

        Raises:
            ToolExecutionError: If the path escapes the project root
        """
        target = (self.project_root / path).resolve()
        if target != self.project_root and self.project_root not in target.parents:
            raise ToolExecutionError(f"Path outside project root: {path}")
        return target

    def read(self, path: str) -> str:
        """Return the UTF-8 text of a project file.

        Raises:
            ToolExecutionError: If the file is missing, too large or not text
        """
        target = self.locate(path)
        if not target.is_file():
            raise ToolExecutionError(
                f"Not a file: {path}" if target.exists() else f"File not found: {path}"
            )

        try:
            size = target.stat().st_size
            if size > self.read_limit:
                raise ToolExecutionError(
                    f"File too large: {size / MB:.2f} MB (limit {self.read_limit // MB} MB)"
                )
            return target.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            raise ToolExecutionError(f"Not a UTF-8 text file: {path}")
        except OSError as e:
            raise ToolExecutionError(f"Cannot read {path}: {e}")

    def read_or_empty(self, path: str) -> str:
        """Current text of a file, or "" for a new or unreadable one."""
        try:
            return self.read(path)
        except ToolExecutionError:
            return ""

    def write(self, path: str, content: str) -> Path:
        """Replace a file's content, creating parent directories as needed.

        The new content lands in a sibling temp file first and is renamed into
        place, so a failed write never leaves a half-written file.

        Raises:
            ToolExecutionError: If the path is unsafe, too large or unwritable
        """
        target = self.locate(path)
        data = content.encode("utf-8")
        if len(data) > self.write_limit:
            raise ToolExecutionError(
                f"Content too large: {len(data) / MB:.2f} MB (limit {self.write_limit // MB} MB)"
            )

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            mode = _file_mode(target)
            fd, temp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(data)
                # mkstemp creates 0600; keep the mode the file has or would get
                os.chmod(temp_name, mode)
                os.replace(temp_name, target)
            except BaseException:
                os.unlink(temp_name)
                raise
        except OSError as e:
            raise ToolExecutionError(f"Cannot write {path}: {e}")
        return target


def _file_mode(target: Path) -> int:
    """Permission bits of an existing file, else the umask default for a new one."""
    try:
        return target.stat().st_mode & 0o7777
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask
