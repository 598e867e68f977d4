"""Frontend .env handling.

The generated frontend reads its runtime settings from ``KEY=value`` lines.
Values are set by key: an existing line is overwritten in place, a missing
key is appended, and any other line is kept as written.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from .constants import ENV_NETWORK, ENV_PROGRAM_PUBKEY, ENV_RPC_URL, ENV_WALL_ACCOUNT_PUBKEY

_ASSIGN_RE = re.compile(r"^\s*(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)\s*=(.*)$")


def _split_assignment(line: str) -> Optional[tuple[str, str]]:
    match = _ASSIGN_RE.match(line)
    if not match:
        return None
    return match.group(1), match.group(2).strip()


def parse_env(text: str) -> Dict[str, str]:
    """First occurrence of each key wins."""
    values: Dict[str, str] = {}
    for line in text.splitlines():
        if line.lstrip().startswith("#"):
            continue
        parsed = _split_assignment(line)
        if parsed and parsed[0] not in values:
            values[parsed[0]] = parsed[1]
    return values


def read_env_value(env_path: Path, key: str) -> Optional[str]:
    value = parse_env(env_path.read_text()).get(key)
    return value if value else None


def set_env_values(text: str, updates: Mapping[str, str]) -> str:
    lines = text.splitlines()
    out: List[str] = []
    written: set[str] = set()
    for line in lines:
        parsed = None if line.lstrip().startswith("#") else _split_assignment(line)
        if parsed and parsed[0] in updates:
            key = parsed[0]
            if key in written:
                # Duplicate assignment of a managed key.
                continue
            out.append(f"{key}={updates[key]}")
            written.add(key)
            continue
        out.append(line)
    for key, value in updates.items():
        if key not in written:
            out.append(f"{key}={value}")
    trailing = "\n" if text.endswith("\n") or not text else ""
    return "\n".join(out) + trailing


def write_env_values(env_path: Path, updates: Mapping[str, str]) -> None:
    if not env_path.exists():
        raise FileNotFoundError(f"Frontend env file not found: {env_path}")
    env_path.write_text(set_env_values(env_path.read_text(), updates))


def configure_frontend(
    env_path: Path,
    program_pubkey: str,
    wall_pubkey: str,
    network: str,
    rpc_url: Optional[str] = None,
) -> None:
    """Write program/wall/network (and optionally RPC URL) into the frontend .env."""
    updates = {
        ENV_PROGRAM_PUBKEY: program_pubkey,
        ENV_WALL_ACCOUNT_PUBKEY: wall_pubkey,
        ENV_NETWORK: network,
    }
    if rpc_url:
        updates[ENV_RPC_URL] = rpc_url
    write_env_values(env_path, updates)
