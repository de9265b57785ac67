"""Agent profile persistence, with credentials kept apart from profiles."""

import json
import os
from pathlib import Path
from typing import Optional

from pydantic import TypeAdapter, ValidationError

from aiteam.errors import ConfigurationError
from aiteam.models import AgentProfile

_PROFILE_LIST = TypeAdapter(list[AgentProfile])


class ProfileStore:
    """Stores agent profiles as JSON."""

    def __init__(self, path: Path):
        """Initialize profile store.

        Args:
            path: JSON file holding the profile list
        """
        self.path = path

    def list_profiles(self) -> list[AgentProfile]:
        """Load all profiles.

        Raises:
            ConfigurationError: If the profile file is unreadable or invalid
        """
        if not self.path.exists():
            return []

        try:
            return _PROFILE_LIST.validate_json(self.path.read_bytes())
        except (ValidationError, OSError) as e:
            raise ConfigurationError(f"Cannot load agent profiles from {self.path}: {e}") from e

    def get(self, agent_id: str) -> Optional[AgentProfile]:
        return next((p for p in self.list_profiles() if p.id == agent_id), None)

    def save(self, profile: AgentProfile) -> list[AgentProfile]:
        """Insert or replace a profile by id.

        Returns:
            The updated profile list
        """
        profiles = self.list_profiles()
        for i, existing in enumerate(profiles):
            if existing.id == profile.id:
                profiles[i] = profile
                break
        else:
            profiles.append(profile)

        self._write(profiles)
        return profiles

    def delete(self, agent_id: str) -> bool:
        profiles = self.list_profiles()
        remaining = [p for p in profiles if p.id != agent_id]
        if len(remaining) == len(profiles):
            return False
        self._write(remaining)
        return True

    def _write(self, profiles: list[AgentProfile]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_bytes(_PROFILE_LIST.dump_json(profiles, indent=2))


class CredentialStore:
    """Looks up API keys per agent.

    Lookup order: values set this session, then the ``AITEAM_KEY_<ID>``
    environment variable, then the secrets file.
    """

    def __init__(self, path: Optional[Path] = None):
        """Initialize credential store.

        Args:
            path: Optional JSON secrets file (created with mode 0600)
        """
        self.path = path
        self._memory: dict[str, str] = {}

    def get(self, agent_id: str) -> Optional[str]:
        if agent_id in self._memory:
            return self._memory[agent_id]

        env_value = os.getenv(self.env_var(agent_id))
        if env_value:
            return env_value

        return self._load().get(agent_id)

    def set(self, agent_id: str, credential: str, persist: bool = True) -> None:
        """Store a credential.

        Args:
            agent_id: Profile id the key belongs to
            credential: API key
            persist: Also write it to the secrets file
        """
        self._memory[agent_id] = credential

        if persist and self.path:
            secrets = self._load()
            secrets[agent_id] = credential
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w") as f:
                json.dump(secrets, f)

    @staticmethod
    def env_var(agent_id: str) -> str:
        normalized = "".join(c if c.isalnum() else "_" for c in agent_id).upper()
        return f"AITEAM_KEY_{normalized}"

    def _load(self) -> dict[str, str]:
        if not self.path or not self.path.exists():
            return {}
        try:
            with open(self.path) as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError):
            return {}
        return data if isinstance(data, dict) else {}
