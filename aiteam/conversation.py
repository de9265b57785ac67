"""Conversation history and project plan shared by every prompt."""

from typing import Callable, Optional

from aiteam.constants import CONTEXT_HISTORY_TURNS, HISTORY_LIMIT
from aiteam.models import ConversationTurn, ProjectPlanTask, Role


class ConversationStore:
    """Bounded conversation history plus the current project plan."""

    def __init__(
        self,
        max_history: int = HISTORY_LIMIT,
        on_append: Optional[Callable[[ConversationTurn], None]] = None,
    ):
        """Initialize the store.

        Args:
            max_history: Maximum number of turns kept (oldest evicted first)
            on_append: Optional callback invoked with each appended turn
        """
        self._turns: list[ConversationTurn] = []
        self._plan: list[ProjectPlanTask] = []
        self.max_history = max_history
        self.on_append = on_append

    def append_message(self, role: Role, content: str) -> ConversationTurn:
        """Append a turn, evicting the oldest one when the cap is reached.

        Args:
            role: Message role (user, assistant, system)
            content: Message content

        Returns:
            The appended turn
        """
        turn = ConversationTurn(role=role, content=content)

        if len(self._turns) >= self.max_history:
            del self._turns[: len(self._turns) - self.max_history + 1]
        self._turns.append(turn)

        if self.on_append:
            self.on_append(turn)
        return turn

    def get_history(self) -> tuple[ConversationTurn, ...]:
        """Return the history, oldest first."""
        return tuple(self._turns)

    def set_plan(self, tasks: list[ProjectPlanTask]) -> None:
        """Replace the project plan wholesale."""
        self._plan = list(tasks)

    def get_plan(self) -> tuple[ProjectPlanTask, ...]:
        return tuple(self._plan)

    def render_context_block(self) -> str:
        """Render the project state and recent history for a prompt.

        Recomputed on every call since history and plan change between calls.

        Returns:
            Context block text
        """
        active = next((t.title for t in self._plan if t.status == "active"), "None")
        pending = "\n".join(f"- {t.title}" for t in self._plan if t.status == "pending")
        recent = "\n".join(
            f"{turn.role.upper()}: {turn.content}"
            for turn in self._turns[-CONTEXT_HISTORY_TURNS:]
        )

        return (
            "[PROJECT STATE]\n"
            f"Active Task: {active}\n"
            "Pending Tasks:\n"
            f"{pending or 'No pending tasks.'}\n"
            "\n"
            "[RECENT HISTORY]\n"
            f"{recent}\n"
        )

    def clear(self) -> None:
        """Clear conversation history (keeps the plan)."""
        self._turns = []
