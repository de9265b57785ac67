"""Exception types raised by the agent cycle and its collaborators."""


class AITeamError(Exception):
    """Base class for AI Team errors."""


class ConfigurationError(AITeamError):
    """Agent profile or credential missing; fatal to the current turn."""


class TransportError(AITeamError):
    """Model call failed or the stream was interrupted."""


class ToolExecutionError(AITeamError):
    """A tool directive could not be carried out (file missing, write failed)."""


class ReviewConflictError(AITeamError):
    """A write was proposed while another change is still awaiting review."""


class CycleBusyError(AITeamError):
    """A prompt was submitted while an agent cycle is still in flight."""
