"""Review gate for proposed file writes."""

import time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax

from aiteam.errors import ReviewConflictError
from aiteam.utils.diffs import create_patch, diff_stats


@dataclass(frozen=True)
class PendingChange:
    """A proposed file write awaiting a human decision."""

    path: str
    content: str


class DiffPresenter(Protocol):
    """Shows a proposed change to the human reviewer.

    Presentation is fire-and-forget; the decision arrives later through
    the controller's accept/reject calls.
    """

    def present_diff(self, path: str, proposed_content: str, current_content: str) -> None:
        ...


class ReviewGate:
    """Holds at most one pending change until it is accepted or rejected."""

    def __init__(self, timeout: float = 0, clock: Callable[[], float] = time.monotonic):
        """Initialize review gate.

        Args:
            timeout: Seconds a change may wait for review (0 = no timeout)
            clock: Monotonic time source
        """
        self.timeout = timeout
        self.clock = clock
        self._pending: Optional[PendingChange] = None
        self._staged_at: Optional[float] = None

    @property
    def pending(self) -> Optional[PendingChange]:
        return self._pending

    def stage(self, change: PendingChange) -> None:
        """Stage a change for review.

        Raises:
            ReviewConflictError: If another change is already pending
        """
        if self._pending is not None:
            raise ReviewConflictError(
                f"A change to {self._pending.path} is already awaiting review; "
                f"refusing to stage {change.path}"
            )
        self._pending = change
        self._staged_at = self.clock()

    def resolve(self) -> PendingChange:
        """Clear and return the pending change.

        Raises:
            ValueError: If nothing is pending
        """
        if self._pending is None:
            raise ValueError("No change is awaiting review")
        change = self._pending
        self._pending = None
        self._staged_at = None
        return change

    def is_expired(self) -> bool:
        """True if a change has waited longer than the timeout."""
        if self._pending is None or not self.timeout:
            return False
        return self.clock() - self._staged_at > self.timeout


class ConsoleDiffPresenter:
    """Renders proposed changes as a unified diff in the terminal."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def present_diff(self, path: str, proposed_content: str, current_content: str) -> None:
        patch = create_patch(current_content, proposed_content, path)
        added, removed = diff_stats(patch)

        title = f"Proposed change: {path} (+{added} -{removed})"
        if not patch:
            body = "[dim]No changes to file content[/dim]"
        else:
            body = Syntax(patch, "diff", theme="monokai")

        self.console.print(Panel(body, title=title, border_style="yellow"))
        self.console.print("[yellow]Use /accept to apply or /reject [reason] to decline[/yellow]")
