"""Tests for agent profiles and credentials."""

import json
import stat

import pytest

from aiteam.errors import ConfigurationError
from aiteam.models import AgentProfile
from aiteam.profiles import CredentialStore, ProfileStore


def make_profile(agent_id="1", name="Backend"):
    return AgentProfile(id=agent_id, display_name=name, role="Python Expert", model_identifier="gpt-4o")


def test_empty_store(temp_dir):
    assert ProfileStore(temp_dir / "agents.json").list_profiles() == []


def test_save_and_reload(temp_dir):
    """Test that profiles persist across store instances."""
    path = temp_dir / "agents.json"
    ProfileStore(path).save(make_profile())

    profiles = ProfileStore(path).list_profiles()

    assert profiles == [make_profile()]


def test_save_replaces_existing_id(temp_dir):
    store = ProfileStore(temp_dir / "agents.json")
    store.save(make_profile("1", "Backend"))
    store.save(make_profile("2", "Frontend"))

    profiles = store.save(make_profile("1", "Senior Backend"))

    assert [(p.id, p.display_name) for p in profiles] == [("1", "Senior Backend"), ("2", "Frontend")]
    assert store.get("1").display_name == "Senior Backend"


def test_delete(temp_dir):
    store = ProfileStore(temp_dir / "agents.json")
    store.save(make_profile())

    assert store.delete("1")
    assert not store.delete("1")
    assert store.get("1") is None


def test_corrupt_profile_file(temp_dir):
    path = temp_dir / "agents.json"
    path.write_text("{not json")

    with pytest.raises(ConfigurationError):
        ProfileStore(path).list_profiles()


def test_profiles_never_contain_credentials(temp_dir):
    """Test that keys are kept out of the profile file."""
    profiles = ProfileStore(temp_dir / "agents.json")
    credentials = CredentialStore(temp_dir / "secrets.json")

    profiles.save(make_profile())
    credentials.set("1", "sk-secret")

    assert "sk-secret" not in (temp_dir / "agents.json").read_text()
    assert json.loads((temp_dir / "secrets.json").read_text()) == {"1": "sk-secret"}


def test_secrets_file_is_private(temp_dir):
    path = temp_dir / "secrets.json"
    CredentialStore(path).set("1", "sk-secret")

    assert stat.S_IMODE(path.stat().st_mode) == 0o600


def test_credential_lookup_order(temp_dir, monkeypatch):
    """Test memory, then environment, then secrets file."""
    path = temp_dir / "secrets.json"
    CredentialStore(path).set("dev-1", "from-file")

    store = CredentialStore(path)
    assert store.get("dev-1") == "from-file"

    monkeypatch.setenv("AITEAM_KEY_DEV_1", "from-env")
    assert store.get("dev-1") == "from-env"

    store.set("dev-1", "from-memory", persist=False)
    assert store.get("dev-1") == "from-memory"


def test_missing_credential(temp_dir):
    assert CredentialStore(temp_dir / "secrets.json").get("nobody") is None
    assert CredentialStore().get("nobody") is None
