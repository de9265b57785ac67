"""Agent cycle state machine.

One cycle starts with a user prompt and keeps calling the model for as long
as its replies contain tool directives. Reads and commands feed back
automatically; a proposed write suspends the cycle until the human accepts
or rejects it. Continuations are queued and processed in a loop rather than
by recursion, so the number of automatic calls can be bounded.
"""

import threading
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from aiteam.constants import DEFAULT_MAX_CONTINUATIONS
from aiteam.conversation import ConversationStore
from aiteam.dispatcher import DispatchOutcome, ToolDispatcher
from aiteam.errors import (
    ConfigurationError,
    CycleBusyError,
    ToolExecutionError,
    TransportError,
)
from aiteam.llm import StreamingModel
from aiteam.models import AgentProfile
from aiteam.profiles import CredentialStore, ProfileStore
from aiteam.prompts import PromptBuilder
from aiteam.session import AgentCycleSession
from aiteam.tools.parser import ToolInvocation, parse, parse_strict
from aiteam.tools.project_tree import ProjectTree
from aiteam.tools.read_write import ReadWrite

FragmentCallback = Callable[[str], None]


class CycleState(Enum):
    IDLE = "idle"
    AWAITING_MODEL = "awaiting_model"
    PARSING_TOOLS = "parsing_tools"
    AWAITING_REVIEW = "awaiting_review"
    CONTINUING = "continuing"
    ERROR = "error"


class CycleOutcome(Enum):
    """Why a controller call returned."""

    COMPLETE = "complete"
    AWAITING_REVIEW = "awaiting_review"
    ERROR = "error"
    CANCELLED = "cancelled"
    LIMIT_REACHED = "limit_reached"


@dataclass(frozen=True)
class CycleResult:
    """Returned by every controller entry point."""

    outcome: CycleOutcome
    state: CycleState
    model_calls: int = 0


@dataclass(frozen=True)
class _ModelRequest:
    # None means an automatic continuation
    user_prompt: Optional[str]
    automatic: bool = False


class _Cancelled(Exception):
    pass


class AgentCycleController:
    """Drives prompts through the model, the parser and the dispatcher."""

    def __init__(
        self,
        store: ConversationStore,
        dispatcher: ToolDispatcher,
        model: StreamingModel,
        profiles: ProfileStore,
        credentials: CredentialStore,
        project_tree: ProjectTree,
        read_write: ReadWrite,
        prompt_builder: Optional[PromptBuilder] = None,
        max_continuations: int = DEFAULT_MAX_CONTINUATIONS,
        strict_parsing: bool = False,
    ):
        """Initialize the controller.

        Args:
            store: Conversation store
            dispatcher: Tool dispatcher
            model: Streaming model client
            profiles: Agent profile store
            credentials: Credential store
            project_tree: Project-tree collaborator
            read_write: Filesystem collaborator (for open-file context)
            prompt_builder: Prompt assembler
            max_continuations: Automatic model calls allowed per cycle
            strict_parsing: Report malformed directives back to the model
        """
        self.store = store
        self.dispatcher = dispatcher
        self.model = model
        self.profiles = profiles
        self.credentials = credentials
        self.project_tree = project_tree
        self.read_write = read_write
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.max_continuations = max_continuations
        self.strict_parsing = strict_parsing

        self._state = CycleState.IDLE
        self._continuations = 0
        self._cancel = threading.Event()

    @property
    def state(self) -> CycleState:
        return self._state

    def submit(
        self,
        session: AgentCycleSession,
        prompt: str,
        on_fragment: Optional[FragmentCallback] = None,
    ) -> CycleResult:
        """Start a cycle with a user prompt.

        Args:
            session: Current session
            prompt: User's request
            on_fragment: Called with each streamed text fragment

        Returns:
            CycleResult describing where the cycle stopped

        Raises:
            CycleBusyError: If a cycle is in flight or a change awaits review
        """
        if self._state is not CycleState.IDLE or session.pending_change is not None:
            raise CycleBusyError(
                f"Cannot accept a new prompt while the agent is {self._state.value}"
            )

        self._continuations = 0
        self.store.append_message("user", prompt)
        return self._drive(session, _ModelRequest(user_prompt=prompt), on_fragment)

    def accept(
        self,
        session: AgentCycleSession,
        on_fragment: Optional[FragmentCallback] = None,
    ) -> CycleResult:
        """Apply the pending change and continue the cycle."""
        self._require_review(session)

        expired = self.check_review_timeout(session)
        if expired:
            return expired

        self.dispatcher.apply_pending(session)
        self._state = CycleState.CONTINUING
        return self._drive(session, _ModelRequest(user_prompt=None, automatic=True), on_fragment)

    def reject(
        self,
        session: AgentCycleSession,
        reason: Optional[str] = None,
        on_fragment: Optional[FragmentCallback] = None,
    ) -> CycleResult:
        """Discard the pending change and let the model respond to the rejection."""
        self._require_review(session)

        expired = self.check_review_timeout(session)
        if expired:
            return expired

        turn = self.dispatcher.reject_pending(session, reason)
        self._state = CycleState.AWAITING_MODEL
        return self._drive(session, _ModelRequest(user_prompt=turn.content), on_fragment)

    def cancel(self) -> None:
        """Abort an in-flight model stream; the partial reply is discarded."""
        if self._state is CycleState.AWAITING_MODEL:
            self._cancel.set()

    def check_review_timeout(self, session: AgentCycleSession) -> Optional[CycleResult]:
        """Expire a pending change that waited past the review timeout.

        Returns:
            CycleResult with an ERROR outcome if the change expired, else None
        """
        if self._state is not CycleState.AWAITING_REVIEW or not session.review.is_expired():
            return None

        self.dispatcher.expire_pending(session)
        self._state = CycleState.IDLE
        return CycleResult(CycleOutcome.ERROR, self._state)

    def _require_review(self, session: AgentCycleSession) -> None:
        if self._state is not CycleState.AWAITING_REVIEW or session.pending_change is None:
            raise ValueError("No change is awaiting review")

    def _drive(
        self,
        session: AgentCycleSession,
        first: _ModelRequest,
        on_fragment: Optional[FragmentCallback],
    ) -> CycleResult:
        queue = deque([first])
        model_calls = 0
        self._cancel.clear()

        try:
            while queue:
                request = queue.popleft()

                if request.automatic:
                    self._continuations += 1
                    if self._continuations > self.max_continuations:
                        self.store.append_message(
                            "system",
                            f"Stopped after {self.max_continuations} automatic continuations. "
                            "Send a new message to keep going.",
                        )
                        self._state = CycleState.IDLE
                        return CycleResult(CycleOutcome.LIMIT_REACHED, self._state, model_calls)

                self._state = CycleState.AWAITING_MODEL
                model_calls += 1
                try:
                    reply = self._stream_reply(session, request, on_fragment)
                except ConfigurationError as e:
                    self.store.append_message("system", f"Error: {e}")
                    self._state = CycleState.IDLE
                    return CycleResult(CycleOutcome.ERROR, self._state, model_calls)
                except TransportError as e:
                    self._state = CycleState.ERROR
                    self.store.append_message("system", f"Error: {e}")
                    self._state = CycleState.IDLE
                    return CycleResult(CycleOutcome.ERROR, self._state, model_calls)
                except _Cancelled:
                    self._state = CycleState.IDLE
                    return CycleResult(CycleOutcome.CANCELLED, self._state, model_calls)

                self.store.append_message("assistant", reply)
                self._state = CycleState.PARSING_TOOLS
                invocations = self._parse(reply)

                if not invocations:
                    self._state = CycleState.IDLE
                    return CycleResult(CycleOutcome.COMPLETE, self._state, model_calls)

                for index, invocation in enumerate(invocations):
                    outcome = self.dispatcher.dispatch(invocation, session)
                    if outcome is DispatchOutcome.AWAIT_REVIEW:
                        self._note_skipped(invocations[index + 1:])
                        self._state = CycleState.AWAITING_REVIEW
                        return CycleResult(CycleOutcome.AWAITING_REVIEW, self._state, model_calls)

                self._state = CycleState.CONTINUING
                queue.append(_ModelRequest(user_prompt=None, automatic=True))
        except BaseException:
            # Unexpected failure or Ctrl-C; a change already staged stays reviewable
            if session.pending_change is not None:
                self._state = CycleState.AWAITING_REVIEW
            else:
                self._state = CycleState.IDLE
            raise

        self._state = CycleState.IDLE
        return CycleResult(CycleOutcome.COMPLETE, self._state, model_calls)

    def _stream_reply(
        self,
        session: AgentCycleSession,
        request: _ModelRequest,
        on_fragment: Optional[FragmentCallback],
    ) -> str:
        profile = self._resolve_profile(session)
        credential = self.credentials.get(profile.id)
        if not credential or not credential.strip():
            raise ConfigurationError("API Key missing.")

        prompt = self.prompt_builder.build(
            self.store.render_context_block(),
            self.project_tree.render(),
            self._open_file(session),
            request.user_prompt,
        )

        buffer = []
        stream = self.model.stream(
            profile.system_prompt, prompt, profile.model_identifier, credential
        )
        try:
            for fragment in stream:
                if self._cancel.is_set():
                    raise _Cancelled()
                buffer.append(fragment)
                if on_fragment:
                    on_fragment(fragment)
            if self._cancel.is_set():
                raise _Cancelled()
        finally:
            close = getattr(stream, "close", None)
            if close:
                close()

        return "".join(buffer)

    def _resolve_profile(self, session: AgentCycleSession) -> AgentProfile:
        if not session.active_agent_id:
            raise ConfigurationError("No agent selected.")
        profile = self.profiles.get(session.active_agent_id)
        if profile is None:
            raise ConfigurationError("Agent not found.")
        return profile

    def _open_file(self, session: AgentCycleSession) -> Optional[tuple[str, str]]:
        if not session.focused_file:
            return None
        try:
            return session.focused_file, self.read_write.read(session.focused_file)
        except ToolExecutionError:
            return None

    def _parse(self, reply: str) -> list[ToolInvocation]:
        if not self.strict_parsing:
            return parse(reply)

        invocations, warnings = parse_strict(reply)
        for warning in warnings:
            self.store.append_message("system", f"Parse warning: {warning.describe()}")
        return invocations

    def _note_skipped(self, skipped: list[ToolInvocation]) -> None:
        if not skipped:
            return
        names = ", ".join(_describe(invocation) for invocation in skipped)
        self.store.append_message(
            "system",
            f"Not executed while a change awaits review: {names}. "
            "Issue them again after the review if still needed.",
        )


def _describe(invocation: ToolInvocation) -> str:
    kind = type(invocation).__name__
    target = getattr(invocation, "path", None) or getattr(invocation, "command", "")
    return f"{kind}({target})"
