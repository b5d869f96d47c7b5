"""
Client configuration and local persisted state.

Configuration is static and client-side, the way the browser build
shipped it: which gist, which file, how often to poll, who the admin
is and the passphrase for the shared token. It lives in
``<home>/config.yaml``.

Local state is what the browser kept in localStorage: whether this
machine has an admin session open and whether notifications were
allowed. It lives in ``<home>/state.json`` and is never shared.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field

from . import REVOLICO_HOME

logger = logging.getLogger("revolico.config")

CONFIG_FILE = "config.yaml"
STATE_FILE = "state.json"


class StoreBackend(str, Enum):
    """Where the catalog document lives."""

    GIST = "gist"
    LOCAL = "local"


class ConflictPolicy(str, Enum):
    """What a write does when the remote moved since our last read."""

    OVERWRITE = "overwrite"
    REJECT = "reject"


class NotificationPermission(str, Enum):
    """Notification permission, as the browser models it."""

    DEFAULT = "default"
    GRANTED = "granted"
    DENIED = "denied"


class ClientConfig(BaseModel):
    """Static client configuration."""

    owner: str = ""
    gist_id: str = ""
    filename: str = "database.json"
    poll_interval_ms: int = Field(default=30000, gt=0)
    admin_user: str = "admin"
    admin_initial_password: str = "admin123"
    passphrase: str = ""

    backend: StoreBackend = StoreBackend.GIST
    local_path: Optional[Path] = None
    api_url: str = "https://api.github.com"
    raw_url: str = "https://gist.githubusercontent.com"
    timeout: float = 30.0
    conflict_policy: ConflictPolicy = ConflictPolicy.OVERWRITE

    @property
    def poll_interval(self) -> float:
        """Poll interval in seconds."""
        return self.poll_interval_ms / 1000.0


class LocalState(BaseModel):
    """Machine-local state, never pushed to the shared document."""

    admin_logged_in: bool = False
    notification_permission: NotificationPermission = NotificationPermission.DEFAULT


def resolve_home(home: Optional[Path] = None) -> Path:
    """Expand the client home directory, defaulting to ``REVOLICO_HOME``."""
    return Path(home or REVOLICO_HOME).expanduser()


def load_config(home: Optional[Path] = None) -> ClientConfig:
    """Load configuration from ``<home>/config.yaml``.

    A missing or unreadable file yields the defaults.
    """
    config_file = resolve_home(home) / CONFIG_FILE
    if config_file.exists():
        try:
            data = yaml.safe_load(config_file.read_text(encoding="utf-8")) or {}
            return ClientConfig(**data)
        except (yaml.YAMLError, ValueError, TypeError) as exc:
            logger.warning("Failed to load config %s: %s", config_file, exc)
    return ClientConfig()


def save_config(config: ClientConfig, home: Optional[Path] = None) -> Path:
    """Write configuration to ``<home>/config.yaml``."""
    home_path = resolve_home(home)
    home_path.mkdir(parents=True, exist_ok=True)
    config_file = home_path / CONFIG_FILE
    data = config.model_dump(mode="json")
    config_file.write_text(
        yaml.dump(data, default_flow_style=False), encoding="utf-8"
    )
    return config_file


def load_state(home: Optional[Path] = None) -> LocalState:
    """Load local state from ``<home>/state.json``."""
    state_file = resolve_home(home) / STATE_FILE
    if state_file.exists():
        try:
            data = json.loads(state_file.read_text(encoding="utf-8"))
            return LocalState(**data)
        except (json.JSONDecodeError, ValueError, TypeError) as exc:
            logger.warning("Failed to load local state: %s", exc)
    return LocalState()


def save_state(state: LocalState, home: Optional[Path] = None) -> None:
    """Persist local state to ``<home>/state.json``."""
    home_path = resolve_home(home)
    home_path.mkdir(parents=True, exist_ok=True)
    (home_path / STATE_FILE).write_text(
        state.model_dump_json(indent=2), encoding="utf-8"
    )
