"""Configuration for fastnginx: SSH server profiles and command timeouts.

Files live in the config directory (default ~/.fastnginx, overridable with
FASTNGINX_CONFIG or --config):

- profiles.yaml: named SSH targets for `fastnginx setup --server NAME`.
  Passwords are stored in the OS keyring, never in the file.
- settings.yaml: optional `timeouts:` mapping (seconds) for nginx, certbot
  and package installation commands.
"""

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import keyring
import yaml
from keyring.errors import KeyringError

from fastnginx.connector.ssh import SSHConfig
from fastnginx.errors import ConfigError

logger = logging.getLogger(__name__)

KEYRING_MARKER = "__keyring__"


@dataclass(frozen=True)
class CommandTimeouts:
    """Per-command timeouts in seconds."""

    nginx: float = 30
    certbot: float = 300
    install: float = 600


class ConfigManager:
    """Loads and stores profiles and settings in the config directory."""

    service_id = "fastnginx"

    def __init__(self, config_dir: Path | None = None) -> None:
        if config_dir is None:
            env_config = os.getenv("FASTNGINX_CONFIG")
            if env_config:
                config_dir = Path(env_config).expanduser().resolve()
            else:
                config_dir = Path.home() / ".fastnginx"

        self.config_dir = config_dir
        self.profiles_file = config_dir / "profiles.yaml"
        self.settings_file = config_dir / "settings.yaml"

    def _load_yaml(self, path: Path) -> dict[str, Any]:
        if not path.exists():
            return {}
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Malformed YAML in {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Expected a mapping at the top of {path}")
        return data

    def _save_profiles(self, profiles: dict[str, Any]) -> None:
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.profiles_file.touch(mode=0o600)
        with open(self.profiles_file, "w") as f:
            yaml.safe_dump(profiles, f, sort_keys=True)

    # -------------------------------------------------------------------------
    # Settings
    # -------------------------------------------------------------------------

    def load_timeouts(self) -> CommandTimeouts:
        """Read timeouts from settings.yaml, defaulting missing keys."""
        raw = self._load_yaml(self.settings_file).get("timeouts") or {}
        if not isinstance(raw, dict):
            raise ConfigError(f"'timeouts' in {self.settings_file} must be a mapping")

        known = {f.name for f in fields(CommandTimeouts)}
        unknown = set(raw) - known
        if unknown:
            raise ConfigError(
                f"Unknown timeout(s) in {self.settings_file}: {', '.join(sorted(unknown))}"
            )

        values: dict[str, float] = {}
        for key, value in raw.items():
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                raise ConfigError(f"Timeout '{key}' must be a positive number of seconds")
            values[key] = float(value)
        return CommandTimeouts(**values)

    # -------------------------------------------------------------------------
    # Server profiles
    # -------------------------------------------------------------------------

    def add_profile(self, name: str, config: SSHConfig) -> None:
        """Add or replace a server profile."""
        profiles = self._load_yaml(self.profiles_file)

        password_ref = None
        if config.password:
            try:
                keyring.set_password(self.service_id, name, config.password)
            except KeyringError as e:
                raise ConfigError(
                    f"Cannot store the password for '{name}' in the keyring: {e}. "
                    "Use --key for key-based authentication instead."
                ) from e
            password_ref = KEYRING_MARKER

        profiles[name] = {
            "host": config.host,
            "user": config.user,
            "port": config.port,
            "key_path": config.key_path,
            "use_sudo": config.use_sudo,
            "password": password_ref,
        }
        self._save_profiles(profiles)
        logger.debug("saved profile %s -> %s@%s", name, config.user, config.host)

    def get_profile(self, name: str) -> SSHConfig | None:
        """Get an SSHConfig by profile name, or None if there is no such profile."""
        data = self._load_yaml(self.profiles_file).get(name)
        if not data:
            return None
        if "host" not in data:
            raise ConfigError(f"Profile '{name}' in {self.profiles_file} has no host")

        password = None
        if data.get("password") == KEYRING_MARKER:
            try:
                password = keyring.get_password(self.service_id, name)
            except KeyringError as e:
                logger.warning("keyring unavailable for profile %s: %s", name, e)

        return SSHConfig(
            host=data["host"],
            user=data.get("user", "root"),
            port=data.get("port", 22),
            key_path=data.get("key_path"),
            use_sudo=data.get("use_sudo", True),
            password=password,
        )

    def resolve_server(self, server: str) -> SSHConfig:
        """A profile by name, else `server` taken as [user@]host."""
        cfg = self.get_profile(server)
        if cfg:
            return cfg
        user, _, host = server.rpartition("@")
        return SSHConfig(host=host, user=user or "root")

    def list_profiles(self) -> dict[str, Any]:
        return self._load_yaml(self.profiles_file)

    def remove_profile(self, name: str) -> bool:
        profiles = self._load_yaml(self.profiles_file)
        if name not in profiles:
            return False

        if profiles[name].get("password") == KEYRING_MARKER:
            try:
                keyring.delete_password(self.service_id, name)
            except KeyringError as e:
                logger.warning("could not delete keyring entry for %s: %s", name, e)

        del profiles[name]
        self._save_profiles(profiles)
        return True
