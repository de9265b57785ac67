"""Data models shared across the agent cycle."""

import time
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["user", "assistant", "system"]
TaskStatus = Literal["pending", "active", "completed"]


class AgentProfile(BaseModel):
    """A user-defined agent. The credential is stored separately."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Stable identifier")
    display_name: str = Field(description="Name shown to the user")
    role: str = Field("", description="Short description of the agent's role")
    system_prompt: str = Field(
        "You are a helpful coding assistant.",
        description="System prompt sent with every model call",
    )
    model_identifier: str = Field(description="Model id passed to the provider")
    provider_hint: Optional[str] = Field(
        None, description="Informational only; provider is chosen by credential prefix"
    )


class ConversationTurn(BaseModel):
    """One message in the conversation history."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str
    created_at: float = Field(default_factory=time.time)


class ProjectPlanTask(BaseModel):
    """A task in the project plan."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    status: TaskStatus = "pending"
