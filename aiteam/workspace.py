"""Wires the collaborators of one project into an agent cycle."""

from pathlib import Path
from typing import Optional

from aiteam.config import Config
from aiteam.constants import DATA_DIR
from aiteam.controller import AgentCycleController
from aiteam.conversation import ConversationStore
from aiteam.dispatcher import ToolDispatcher
from aiteam.llm import ModelClient, StreamingModel
from aiteam.profiles import CredentialStore, ProfileStore
from aiteam.review import ConsoleDiffPresenter, DiffPresenter, ReviewGate
from aiteam.session import AgentCycleSession
from aiteam.tools.executor import Executor
from aiteam.tools.project_tree import ProjectTree
from aiteam.tools.read_write import ReadWrite
from aiteam.utils.ignore import IgnoreRules
from aiteam.utils.logging import SessionLogger


class Workspace:
    """All per-project state and tools for an interactive session."""

    def __init__(
        self,
        project_root: Path,
        config: Config,
        model: Optional[StreamingModel] = None,
        presenter: Optional[DiffPresenter] = None,
        logger: Optional[SessionLogger] = None,
    ):
        """Initialize the workspace.

        Args:
            project_root: Project root directory
            config: Configuration object
            model: Streaming model (defaults to ModelClient)
            presenter: Diff presenter (defaults to the terminal presenter)
            logger: Session logger (defaults to a new run under .aiteam/runs)
        """
        self.project_root = project_root
        self.config = config
        data_dir = project_root / DATA_DIR

        self.logger = logger or SessionLogger(project_root)

        # Initialize tools
        self.ignore_rules = IgnoreRules(project_root, config.extra_ignores)
        self.project_tree = ProjectTree(project_root, self.ignore_rules)
        self.read_write = ReadWrite(project_root, config.max_read_mb, config.max_write_mb)
        self.executor = Executor(project_root, self.logger.exec_dir)

        # Profiles and credentials are stored separately
        self.profiles = ProfileStore(data_dir / "agents.json")
        self.credentials = CredentialStore(data_dir / "secrets.json")

        self.store = ConversationStore(on_append=self.logger.log_turn)
        self.session = AgentCycleSession(review=ReviewGate(timeout=config.review_timeout))

        self.dispatcher = ToolDispatcher(
            self.store,
            self.read_write,
            self.executor,
            presenter or ConsoleDiffPresenter(),
            self.logger,
        )
        self.controller = AgentCycleController(
            self.store,
            self.dispatcher,
            model or ModelClient(config.openrouter_referer, config.openrouter_title),
            self.profiles,
            self.credentials,
            self.project_tree,
            self.read_write,
            max_continuations=config.max_continuations,
            strict_parsing=config.strict_parsing,
        )
