"""Routes parsed tool invocations to the filesystem, terminal and review gate."""

from enum import Enum
from typing import Optional

from aiteam.conversation import ConversationStore
from aiteam.errors import ToolExecutionError
from aiteam.models import ConversationTurn
from aiteam.review import DiffPresenter, PendingChange
from aiteam.session import AgentCycleSession
from aiteam.tools.executor import Executor
from aiteam.tools.parser import ExecuteCommand, ReadFile, ToolInvocation, WriteFile
from aiteam.tools.read_write import ReadWrite
from aiteam.utils.logging import SessionLogger


class DispatchOutcome(Enum):
    """What the cycle should do after a dispatch."""

    CONTINUE = "continue"
    AWAIT_REVIEW = "await_review"


def format_file_content(path: str, content: str) -> str:
    return f"[FILE CONTENT: {path}]\n{content}\n[END FILE: {path}]"


class ToolDispatcher:
    """Executes read and execute directives, stages writes for review."""

    def __init__(
        self,
        store: ConversationStore,
        read_write: ReadWrite,
        executor: Executor,
        presenter: DiffPresenter,
        logger: Optional[SessionLogger] = None,
    ):
        """Initialize dispatcher.

        Args:
            store: Conversation store receiving tool results
            read_write: Filesystem collaborator
            executor: Terminal collaborator
            presenter: Diff/review collaborator
            logger: Optional session logger
        """
        self.store = store
        self.read_write = read_write
        self.executor = executor
        self.presenter = presenter
        self.logger = logger

    def dispatch(self, invocation: ToolInvocation, session: AgentCycleSession) -> DispatchOutcome:
        """Carry out one tool invocation.

        Args:
            invocation: Parsed tool invocation
            session: Current session (owns the review gate)

        Returns:
            DispatchOutcome for the controller

        Raises:
            ReviewConflictError: If a write is proposed while one is pending
        """
        if isinstance(invocation, ReadFile):
            return self._read_file(invocation)
        if isinstance(invocation, WriteFile):
            return self._propose_write(invocation, session)
        if isinstance(invocation, ExecuteCommand):
            return self._execute_command(invocation)
        raise TypeError(f"Unknown tool invocation: {invocation!r}")

    def apply_pending(self, session: AgentCycleSession) -> bool:
        """Write the pending change to disk and record the result.

        Returns:
            True if the file was written
        """
        change = session.review.resolve()
        error = None
        try:
            self.read_write.write(change.path, change.content)
        except ToolExecutionError as e:
            error = str(e)
            self.store.append_message(
                "system", f"Error: accepted change to {change.path} could not be written: {e}"
            )
        else:
            self.store.append_message(
                "system", f"Changes to {change.path} were accepted and written to disk."
            )

        if self.logger:
            self.logger.log_review(change.path, "accepted", error)
        return error is None

    def reject_pending(
        self, session: AgentCycleSession, reason: Optional[str] = None
    ) -> ConversationTurn:
        """Discard the pending change and tell the model why.

        Returns:
            The user turn describing the rejection
        """
        change = session.review.resolve()

        message = f"I rejected your proposed change to {change.path}."
        if reason:
            message += f" Reason: {reason}"
        turn = self.store.append_message("user", message)

        if self.logger:
            self.logger.log_review(change.path, "rejected", reason)
        return turn

    def expire_pending(self, session: AgentCycleSession) -> PendingChange:
        """Discard a pending change whose review timed out."""
        change = session.review.resolve()
        self.store.append_message(
            "system",
            f"Error: review of the proposed change to {change.path} timed out; "
            "the change was not applied.",
        )

        if self.logger:
            self.logger.log_review(change.path, "expired")
        return change

    def _read_file(self, invocation: ReadFile) -> DispatchOutcome:
        try:
            content = self.read_write.read(invocation.path)
        except ToolExecutionError as e:
            self.store.append_message("system", f"Error reading {invocation.path}: {e}")
        else:
            self.store.append_message("system", format_file_content(invocation.path, content))
        return DispatchOutcome.CONTINUE

    def _propose_write(self, invocation: WriteFile, session: AgentCycleSession) -> DispatchOutcome:
        change = PendingChange(path=invocation.path, content=invocation.content)
        session.review.stage(change)

        current = self.read_write.read_or_empty(invocation.path)
        self.presenter.present_diff(invocation.path, invocation.content, current)
        return DispatchOutcome.AWAIT_REVIEW

    def _execute_command(self, invocation: ExecuteCommand) -> DispatchOutcome:
        result = self.executor.run(invocation.command)

        if self.logger:
            self.logger.log_launch(result)

        # Output is not captured; only a refused launch is reported back
        if not result.started:
            self.store.append_message(
                "system", f"Error: command not run ({invocation.command}): {result.error}"
            )
        return DispatchOutcome.CONTINUE
