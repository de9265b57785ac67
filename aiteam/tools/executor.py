"""Fire-and-forget command launcher for the project terminal."""

import os
import subprocess
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from aiteam.constants import DANGEROUS_PATTERNS


@dataclass
class LaunchResult:
    """Result of launching a command. Output is never captured."""

    started: bool
    command: str
    pid: Optional[int] = None
    log_path: Optional[str] = None
    error: Optional[str] = None


class Executor:
    """Starts shell commands in the project root without waiting for them."""

    def __init__(self, project_root: Path, log_dir: Optional[Path] = None):
        """Initialize executor.

        Args:
            project_root: Project root directory (cwd for commands)
            log_dir: Directory receiving each command's combined output
        """
        self.project_root = project_root
        self.log_dir = log_dir
        self._processes: list[subprocess.Popen] = []

    def run(self, command: str, sandbox: bool = True) -> LaunchResult:
        """Launch a command and return immediately.

        Args:
            command: Command to execute
            sandbox: Whether to refuse commands matching dangerous patterns

        Returns:
            LaunchResult describing whether the command was started
        """
        if not command.strip():
            return LaunchResult(started=False, command=command, error="Empty command")

        is_dangerous, reason = self.is_dangerous(command)
        if is_dangerous and sandbox:
            return LaunchResult(started=False, command=command, error=f"Command blocked: {reason}")

        # Reap children that have exited since the last launch
        self.running()
        log_path = self._log_path_for(command)

        try:
            if log_path:
                log_path.parent.mkdir(parents=True, exist_ok=True)
                with open(log_path, "w") as out:
                    process = self._spawn(command, out)
            else:
                process = self._spawn(command, subprocess.DEVNULL)
        except OSError as e:
            return LaunchResult(started=False, command=command, error=f"Execution error: {e}")

        self._processes.append(process)
        return LaunchResult(
            started=True,
            command=command,
            pid=process.pid,
            log_path=str(log_path) if log_path else None,
        )

    def is_dangerous(self, command: str) -> tuple[bool, str]:
        """Check if a command matches dangerous patterns.

        Args:
            command: Command to check

        Returns:
            Tuple of (is_dangerous, reason)
        """
        for pattern, reason in DANGEROUS_PATTERNS:
            if pattern.search(command):
                return True, reason

        return False, ""

    def running(self) -> list[int]:
        """PIDs of launched commands that have not exited yet."""
        self._processes = [p for p in self._processes if p.poll() is None]
        return [p.pid for p in self._processes]

    def _spawn(self, command: str, out) -> subprocess.Popen:
        return subprocess.Popen(
            command,
            shell=True,
            cwd=str(self.project_root),
            env=os.environ.copy(),
            stdin=subprocess.DEVNULL,
            stdout=out,
            stderr=subprocess.STDOUT,
            start_new_session=True,
        )

    def _log_path_for(self, command: str) -> Optional[Path]:
        if self.log_dir is None:
            return None
        safe_cmd = "".join(c if c.isalnum() else "_" for c in command[:50])
        timestamp = datetime.now().strftime("%H%M%S_%f")
        return self.log_dir / f"{timestamp}_{safe_cmd}.log"
