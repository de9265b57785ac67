"""Configuration loading and management."""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from aiteam.constants import (
    DATA_DIR,
    DEFAULT_MAX_CONTINUATIONS,
    DEFAULT_MAX_READ_MB,
    DEFAULT_MAX_WRITE_MB,
    DEFAULT_MODEL,
    DEFAULT_OPENROUTER_REFERER,
    DEFAULT_OPENROUTER_TITLE,
    DEFAULT_REVIEW_TIMEOUT,
)


@dataclass
class Config:
    """AI Team configuration.

    Loads from .env and optionally .aiteam/config.json
    """

    # Model settings
    default_model: str = DEFAULT_MODEL

    # Cycle settings
    max_continuations: int = DEFAULT_MAX_CONTINUATIONS
    review_timeout: float = DEFAULT_REVIEW_TIMEOUT
    strict_parsing: bool = False

    # File limits
    max_read_mb: int = DEFAULT_MAX_READ_MB
    max_write_mb: int = DEFAULT_MAX_WRITE_MB

    # Extra headers for the OpenRouter endpoint
    openrouter_referer: str = DEFAULT_OPENROUTER_REFERER
    openrouter_title: str = DEFAULT_OPENROUTER_TITLE

    # Extra ignore globs (from .aiteam/config.json)
    extra_ignores: list[str] = field(default_factory=list)

    @classmethod
    def load(cls, project_root: Optional[Path] = None) -> "Config":
        """Load configuration from environment and project-specific config.

        Args:
            project_root: Project root directory (for .aiteam/config.json)

        Returns:
            Config instance
        """
        load_dotenv()

        config = cls(
            default_model=os.getenv("AITEAM_DEFAULT_MODEL", DEFAULT_MODEL),
            max_continuations=int(
                os.getenv("AITEAM_MAX_CONTINUATIONS", DEFAULT_MAX_CONTINUATIONS)
            ),
            review_timeout=float(os.getenv("AITEAM_REVIEW_TIMEOUT", DEFAULT_REVIEW_TIMEOUT)),
            strict_parsing=os.getenv("AITEAM_STRICT_PARSING", "").lower() == "true",
            max_read_mb=int(os.getenv("AITEAM_MAX_READ_MB", DEFAULT_MAX_READ_MB)),
            max_write_mb=int(os.getenv("AITEAM_MAX_WRITE_MB", DEFAULT_MAX_WRITE_MB)),
            openrouter_referer=os.getenv("AITEAM_OPENROUTER_REFERER", DEFAULT_OPENROUTER_REFERER),
            openrouter_title=os.getenv("AITEAM_OPENROUTER_TITLE", DEFAULT_OPENROUTER_TITLE),
        )

        # Load project-specific config if available
        if project_root:
            project_config_path = project_root / DATA_DIR / "config.json"
            if project_config_path.exists():
                try:
                    with open(project_config_path) as f:
                        project_config = json.load(f)
                        config.extra_ignores = list(project_config.get("ignore", []))
                except (json.JSONDecodeError, IOError):
                    pass  # Ignore invalid config

        return config

    def validate(self) -> list[str]:
        """Validate configuration and return list of errors.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []

        if self.max_continuations <= 0:
            errors.append("max_continuations must be positive")

        if self.review_timeout < 0:
            errors.append("review_timeout must not be negative")

        if self.max_read_mb <= 0:
            errors.append("max_read_mb must be positive")

        if self.max_write_mb <= 0:
            errors.append("max_write_mb must be positive")

        return errors

    def to_dict(self) -> dict:
        """Convert config to dictionary (for logging/display)."""
        return {
            "default_model": self.default_model,
            "max_continuations": self.max_continuations,
            "review_timeout": self.review_timeout,
            "strict_parsing": self.strict_parsing,
            "max_read_mb": self.max_read_mb,
            "max_write_mb": self.max_write_mb,
            "extra_ignores": self.extra_ignores,
        }
