"""Session logging utilities."""

import json
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Optional

from aiteam.constants import DATA_DIR
from aiteam.models import ConversationTurn
from aiteam.tools.executor import LaunchResult


class SessionLogger:
    """Handles logging for an AI Team session."""

    def __init__(self, project_root: Path, run_id: Optional[str] = None):
        """Initialize session logger.

        Args:
            project_root: Project root directory
            run_id: Optional run ID (generated if not provided)
        """
        self.project_root = project_root
        self.run_id = run_id or datetime.now().strftime("%Y%m%d_%H%M%S")

        # Create logs directory
        self.log_dir = project_root / DATA_DIR / "runs" / self.run_id
        self.log_dir.mkdir(parents=True, exist_ok=True)

        # Log files
        self.transcript_path = self.log_dir / "transcript.ndjson"
        self.reviews_path = self.log_dir / "reviews.ndjson"
        self.exec_dir = self.log_dir / "exec"

        self.exec_dir.mkdir(exist_ok=True)

    def log_turn(self, turn: ConversationTurn) -> None:
        """Append a conversation turn to the transcript."""
        entry = {
            "ts": datetime.fromtimestamp(turn.created_at).isoformat(),
            "role": turn.role,
            "content": turn.content,
        }
        self._append(self.transcript_path, entry)

    def log_review(self, path: str, decision: str, detail: Optional[str] = None) -> None:
        """Record a review decision.

        Args:
            path: File the pending change targeted
            decision: accepted, rejected or expired
            detail: Optional reason or error message
        """
        entry = {
            "ts": datetime.now().isoformat(),
            "path": path,
            "decision": decision,
        }
        if detail:
            entry["detail"] = detail
        self._append(self.reviews_path, entry)

    def log_launch(self, result: LaunchResult) -> None:
        """Save a command launch record."""
        safe_cmd = "".join(c if c.isalnum() else "_" for c in result.command[:50])
        timestamp = datetime.now().strftime("%H%M%S_%f")
        exec_path = self.exec_dir / f"{timestamp}_{safe_cmd}.json"

        with open(exec_path, "w") as f:
            json.dump(
                {
                    "timestamp": datetime.now().isoformat(),
                    **asdict(result),
                },
                f,
                indent=2,
            )

    def get_log_path(self) -> str:
        """Get the path to the log directory."""
        return str(self.log_dir.absolute())

    def _append(self, path: Path, entry: dict) -> None:
        with open(path, "a") as f:
            f.write(json.dumps(entry) + "\n")
