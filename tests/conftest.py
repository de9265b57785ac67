"""Pytest configuration and fixtures."""

import tempfile
from pathlib import Path

import pytest

from aiteam.config import Config
from aiteam.models import AgentProfile
from aiteam.tools.executor import Executor, LaunchResult
from aiteam.utils.ignore import IgnoreRules
from aiteam.workspace import Workspace


class FakeModel:
    """Streams scripted replies and records every call.

    Each reply is a string (one fragment), a list of fragments, or an
    exception. Fragments that are exceptions are raised mid-stream.
    """

    def __init__(self, replies=None, default=""):
        self.replies = list(replies or [])
        self.default = default
        self.calls = []

    def stream(self, system_prompt, user_content, model_id, credential):
        self.calls.append({
            "system_prompt": system_prompt,
            "user_content": user_content,
            "model_id": model_id,
            "credential": credential,
        })
        reply = self.replies.pop(0) if self.replies else self.default
        if isinstance(reply, Exception):
            raise reply
        fragments = [reply] if isinstance(reply, str) else reply
        for fragment in fragments:
            if isinstance(fragment, Exception):
                raise fragment
            yield fragment


class RecordingPresenter:
    """Diff presenter that remembers what it was shown."""

    def __init__(self):
        self.presented = []

    def present_diff(self, path, proposed_content, current_content):
        self.presented.append((path, proposed_content, current_content))


class RecordingExecutor(Executor):
    """Executor that records commands instead of starting them."""

    def __init__(self, project_root):
        super().__init__(project_root)
        self.commands = []

    def run(self, command, sandbox=True):
        self.commands.append(command)
        return LaunchResult(started=True, command=command, pid=0)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_project(temp_dir):
    """Create a test project structure."""
    (temp_dir / "src").mkdir()
    (temp_dir / "src" / "main.py").write_text("def hello():\n    return 'world'\n")
    (temp_dir / "src" / "utils.py").write_text("def add(a, b):\n    return a + b\n")

    (temp_dir / "tests").mkdir()
    (temp_dir / "tests" / "test_main.py").write_text(
        "def test_hello():\n    from src.main import hello\n    assert hello() == 'world'\n"
    )

    (temp_dir / "README.md").write_text("# Test Project\n")

    yield temp_dir


@pytest.fixture
def config():
    """Create a configuration without reading the environment."""
    return Config(max_continuations=5)


@pytest.fixture
def ignore_rules(temp_dir):
    """Create ignore rules for temp directory."""
    return IgnoreRules(temp_dir)


@pytest.fixture
def fake_model():
    return FakeModel()


@pytest.fixture
def presenter():
    return RecordingPresenter()


@pytest.fixture
def workspace(test_project, config, fake_model, presenter):
    """Workspace with a fake model, a selected agent and a recording terminal."""
    ws = Workspace(test_project, config, model=fake_model, presenter=presenter)
    ws.executor = RecordingExecutor(test_project)
    ws.dispatcher.executor = ws.executor

    ws.profiles.save(AgentProfile(
        id="dev",
        display_name="Senior Backend",
        role="Python Expert",
        system_prompt="You are a careful engineer.",
        model_identifier="gpt-4o",
    ))
    ws.credentials.set("dev", "sk-test-key", persist=False)
    ws.session.active_agent_id = "dev"
    return ws
