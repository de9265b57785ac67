"""Tests for ignore rules."""

from aiteam.utils.ignore import IgnoreRules


def test_builtin_ignores(test_project):
    """Test that built-in patterns are ignored."""
    rules = IgnoreRules(test_project)

    assert rules.should_ignore(test_project / ".git" / "config")
    assert rules.should_ignore(test_project / "node_modules" / "package")
    assert rules.should_ignore(test_project / "__pycache__" / "module.pyc")
    assert rules.should_ignore(test_project / "dist" / "bundle.js")
    assert rules.should_ignore(test_project / ".aiteam" / "agents.json")


def test_gitignore_respected(test_project):
    """Test that .gitignore is respected."""
    (test_project / ".gitignore").write_text("*.log\ncoverage/\n")

    rules = IgnoreRules(test_project)

    assert rules.should_ignore(test_project / "debug.log")
    assert rules.should_ignore(test_project / "coverage" / "index.html")
    assert not rules.should_ignore(test_project / "src" / "main.py")


def test_aiteamignore_respected(test_project):
    """Test that .aiteamignore is respected."""
    (test_project / ".aiteamignore").write_text("# scratch files\n*.tmp\ndata/\n")

    rules = IgnoreRules(test_project)

    assert rules.should_ignore(test_project / "temp.tmp")
    assert rules.should_ignore(test_project / "data" / "file.txt")
    assert not rules.should_ignore(test_project / "src" / "main.py")


def test_extra_patterns(test_project):
    rules = IgnoreRules(test_project, extra_patterns=["fixtures/"])

    assert rules.should_ignore(test_project / "fixtures" / "big.json")


def test_outside_project_is_ignored(test_project, tmp_path):
    rules = IgnoreRules(test_project)

    assert rules.should_ignore(tmp_path / "elsewhere.py")


def test_normal_files_not_ignored(test_project):
    """Test that normal files are not ignored."""
    rules = IgnoreRules(test_project)

    assert not rules.should_ignore(test_project / "src" / "main.py")
    assert not rules.should_ignore(test_project / "README.md")
    assert not rules.should_ignore(test_project / "tests" / "test_main.py")


def test_visible_files_prunes_ignored_directories(test_project):
    (test_project / "node_modules" / "pkg").mkdir(parents=True)
    (test_project / "node_modules" / "pkg" / "index.js").write_text("x")
    (test_project / ".aiteamignore").write_text("*.md\n")

    files = sorted(IgnoreRules(test_project).visible_files())

    assert files == [".aiteamignore", "src/main.py", "src/utils.py", "tests/test_main.py"]
