"""Per-session state threaded through every controller call."""

from dataclasses import dataclass, field
from typing import Optional

from aiteam.review import PendingChange, ReviewGate


@dataclass
class AgentCycleSession:
    """State for one interactive session.

    Attributes:
        active_agent_id: Profile id of the agent answering prompts
        review: Review gate; the single owner of the pending change
        focused_file: Project-relative path whose text is sent as open-file context
    """

    active_agent_id: Optional[str] = None
    review: ReviewGate = field(default_factory=ReviewGate)
    focused_file: Optional[str] = None

    @property
    def pending_change(self) -> Optional[PendingChange]:
        return self.review.pending
