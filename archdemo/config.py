"""Configuration loading for the demo pipeline.

Values come from ``config.toml`` in the archdemo config directory, with
environment variables taking precedence for the handful of keys the pipeline
reads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .constants import (
    CFG_LEADER_RPC,
    CFG_NETWORK,
    CFG_PROJECT_DIR,
    CONFIG_DIR_ENV,
    CONFIG_ENV_OVERRIDES,
    CONFIG_FILE_NAME,
    DEFAULT_NETWORK,
    KEYS_FILE_NAME,
    NODE1_ADDRESS,
)
from .errors import ConfigError
from .manifest import load_toml_bytes


def get_config_dir(env: Optional[Mapping[str, str]] = None) -> Path:
    env = os.environ if env is None else env
    override = env.get(CONFIG_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".arch-demo"


def keys_file(config_dir: Path) -> Path:
    return config_dir / KEYS_FILE_NAME


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


@dataclass
class Config:
    """Nested config table plus environment overrides, read by dotted key."""

    data: Dict[str, Any] = field(default_factory=dict)
    env: Mapping[str, str] = field(default_factory=dict)
    path: Optional[Path] = None

    def get_string(self, key: str) -> Optional[str]:
        env_name = CONFIG_ENV_OVERRIDES.get(key)
        if env_name:
            from_env = _clean(self.env.get(env_name))
            if from_env:
                return from_env
        node: Any = self.data
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        if isinstance(node, (dict, list)):
            raise ConfigError(f"Config key {key} must be a string, got a table or array")
        return _clean(node)


def load_config(
    path: str | Path | None = None,
    env: Optional[Mapping[str, str]] = None,
) -> Config:
    """Load config.toml; a missing default file is an empty config."""
    env = dict(os.environ) if env is None else dict(env)
    if path is not None:
        cfg_path = Path(path).expanduser()
        if not cfg_path.exists():
            raise FileNotFoundError(f"Config file not found: {cfg_path}")
    else:
        cfg_path = get_config_dir(env) / CONFIG_FILE_NAME
        if not cfg_path.exists():
            return Config(data={}, env=env, path=None)
    try:
        data = load_toml_bytes(cfg_path.read_bytes())
    except ValueError as exc:
        raise ConfigError(f"Unable to parse config {cfg_path}: {exc}") from exc
    return Config(data=data, env=env, path=cfg_path)


def resolve_network(config: Config) -> str:
    return config.get_string(CFG_NETWORK) or DEFAULT_NETWORK


def resolve_rpc_url(override: Optional[str], config: Config) -> str:
    # Priority: explicit argument, configured leader endpoint, built-in default.
    return _clean(override) or config.get_string(CFG_LEADER_RPC) or NODE1_ADDRESS


def require_project_dir(config: Config) -> Path:
    value = config.get_string(CFG_PROJECT_DIR)
    if not value:
        raise ConfigError(f"Failed to get project directory from config ({CFG_PROJECT_DIR} is not set)")
    return Path(value).expanduser()
