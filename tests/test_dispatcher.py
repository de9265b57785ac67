"""Tests for tool dispatch."""

import pytest

from aiteam.conversation import ConversationStore
from aiteam.dispatcher import DispatchOutcome, ToolDispatcher
from aiteam.errors import ReviewConflictError
from aiteam.review import PendingChange
from aiteam.session import AgentCycleSession
from aiteam.tools.executor import Executor
from aiteam.tools.parser import ExecuteCommand, ReadFile, WriteFile
from aiteam.tools.read_write import ReadWrite
from conftest import RecordingExecutor, RecordingPresenter


@pytest.fixture
def parts(test_project):
    store = ConversationStore()
    executor = RecordingExecutor(test_project)
    presenter = RecordingPresenter()
    dispatcher = ToolDispatcher(store, ReadWrite(test_project), executor, presenter)
    return store, executor, presenter, dispatcher


def test_read_file_appends_delimited_content(parts):
    """Test that a successful read feeds the file back as a system turn."""
    store, _, _, dispatcher = parts

    outcome = dispatcher.dispatch(ReadFile(path="src/main.py"), AgentCycleSession())

    assert outcome is DispatchOutcome.CONTINUE
    turn = store.get_history()[-1]
    assert turn.role == "system"
    assert turn.content.startswith("[FILE CONTENT: src/main.py]")
    assert "def hello():" in turn.content
    assert turn.content.endswith("[END FILE: src/main.py]")


def test_read_missing_file_appends_error(parts):
    """Test that a failed read is reported and still continues."""
    store, _, _, dispatcher = parts

    outcome = dispatcher.dispatch(ReadFile(path="missing.py"), AgentCycleSession())

    assert outcome is DispatchOutcome.CONTINUE
    turn = store.get_history()[-1]
    assert turn.role == "system"
    assert "Error reading missing.py" in turn.content
    assert "not found" in turn.content.lower()


def test_write_file_is_staged_not_written(parts, test_project):
    """Test that a write is staged for review and shown as a diff."""
    store, _, presenter, dispatcher = parts
    session = AgentCycleSession()

    outcome = dispatcher.dispatch(WriteFile(path="README.md", content="Hello"), session)

    assert outcome is DispatchOutcome.AWAIT_REVIEW
    assert session.pending_change == PendingChange(path="README.md", content="Hello")
    assert presenter.presented == [("README.md", "Hello", "# Test Project\n")]
    assert (test_project / "README.md").read_text() == "# Test Project\n"
    assert store.get_history() == ()


def test_second_write_while_pending_is_refused(parts):
    """Test that only one pending change may exist."""
    _, _, presenter, dispatcher = parts
    session = AgentCycleSession()
    dispatcher.dispatch(WriteFile(path="a.txt", content="A"), session)

    with pytest.raises(ReviewConflictError):
        dispatcher.dispatch(WriteFile(path="b.txt", content="B"), session)

    assert session.pending_change.path == "a.txt"
    assert len(presenter.presented) == 1


def test_execute_command_is_fire_and_forget(parts):
    """Test that commands are forwarded and nothing is fed back."""
    store, executor, _, dispatcher = parts

    outcome = dispatcher.dispatch(ExecuteCommand(command="npm test"), AgentCycleSession())

    assert outcome is DispatchOutcome.CONTINUE
    assert executor.commands == ["npm test"]
    assert store.get_history() == ()


def test_blocked_command_is_reported(test_project):
    store = ConversationStore()
    dispatcher = ToolDispatcher(
        store, ReadWrite(test_project), Executor(test_project), RecordingPresenter()
    )

    outcome = dispatcher.dispatch(ExecuteCommand(command="sudo rm -rf /"), AgentCycleSession())

    assert outcome is DispatchOutcome.CONTINUE
    assert "Command blocked" in store.get_history()[-1].content


def test_apply_pending_writes_and_confirms(parts, test_project):
    store, _, _, dispatcher = parts
    session = AgentCycleSession()
    dispatcher.dispatch(WriteFile(path="docs/new.md", content="Hi"), session)

    assert dispatcher.apply_pending(session)

    assert (test_project / "docs" / "new.md").read_text() == "Hi"
    assert session.pending_change is None
    assert store.get_history()[-1].role == "system"
    assert "docs/new.md" in store.get_history()[-1].content


def test_apply_pending_write_failure_is_reported(parts):
    store, _, _, dispatcher = parts
    session = AgentCycleSession()
    dispatcher.dispatch(WriteFile(path="../outside.txt", content="x"), session)

    assert not dispatcher.apply_pending(session)

    assert session.pending_change is None
    assert store.get_history()[-1].content.startswith("Error:")


def test_reject_pending_appends_user_turn(parts, test_project):
    store, _, _, dispatcher = parts
    session = AgentCycleSession()
    dispatcher.dispatch(WriteFile(path="README.md", content="Hello"), session)

    turn = dispatcher.reject_pending(session, "keep the title")

    assert turn.role == "user"
    assert "README.md" in turn.content
    assert "keep the title" in turn.content
    assert session.pending_change is None
    assert (test_project / "README.md").read_text() == "# Test Project\n"


def test_unknown_invocation_raises(parts):
    _, _, _, dispatcher = parts

    with pytest.raises(TypeError):
        dispatcher.dispatch("read_file", AgentCycleSession())
