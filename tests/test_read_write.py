"""Tests for the filesystem collaborator."""

import os

import pytest

from aiteam.errors import ToolExecutionError
from aiteam.tools.read_write import ReadWrite


@pytest.fixture
def files(test_project):
    return ReadWrite(test_project)


def test_read_returns_text(files):
    assert "def hello():" in files.read("src/main.py")


@pytest.mark.parametrize("path, message", [
    ("nonexistent.py", "File not found"),
    ("src", "Not a file"),
    ("../../etc/passwd", "outside project root"),
])
def test_read_failures(files, path, message):
    with pytest.raises(ToolExecutionError, match=message):
        files.read(path)


def test_read_rejects_binary(files, test_project):
    (test_project / "logo.bin").write_bytes(b"\xff\xfe\x00\x81")

    with pytest.raises(ToolExecutionError, match="UTF-8"):
        files.read("logo.bin")


def test_read_size_limit(test_project):
    (test_project / "big.txt").write_text("x" * (1024 * 1024 + 1))
    files = ReadWrite(test_project, max_read_mb=1)

    with pytest.raises(ToolExecutionError, match="too large"):
        files.read("big.txt")


def test_read_or_empty(files):
    assert files.read_or_empty("README.md") == "# Test Project\n"
    assert files.read_or_empty("nonexistent.py") == ""
    assert files.read_or_empty("../outside.txt") == ""


def test_write_replaces_content(files, test_project):
    target = files.write("README.md", "Hello")

    assert target == (test_project / "README.md").resolve()
    assert target.read_text() == "Hello"
    assert not any(p.name.startswith(".README") for p in test_project.iterdir())


def test_write_creates_directories(files, test_project):
    files.write("docs/guide/intro.md", "# Intro\n")

    assert (test_project / "docs" / "guide" / "intro.md").read_text() == "# Intro\n"


def test_write_size_limit(test_project):
    files = ReadWrite(test_project, max_write_mb=1)

    with pytest.raises(ToolExecutionError, match="too large"):
        files.write("big.txt", "x" * (1024 * 1024 + 1))
    assert not (test_project / "big.txt").exists()


def test_write_outside_project(files, temp_dir):
    with pytest.raises(ToolExecutionError, match="outside project root"):
        files.write("../escape.txt", "x")
    assert not (temp_dir.parent / "escape.txt").exists()


def test_write_keeps_existing_mode(files, test_project):
    script = test_project / "run.sh"
    script.write_text("#!/bin/sh\n")
    script.chmod(0o755)

    files.write("run.sh", "#!/bin/sh\necho hi\n")

    assert script.stat().st_mode & 0o777 == 0o755


def test_new_file_gets_umask_mode(files, test_project):
    umask = os.umask(0o022)
    try:
        files.write("notes.txt", "x")
    finally:
        os.umask(umask)

    assert (test_project / "notes.txt").stat().st_mode & 0o777 == 0o644
