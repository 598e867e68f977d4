"""Idempotent demo provisioning pipeline.

Each step is guarded by a filesystem or key registry existence check, so the
pipeline can be re-run after a failure and resumes close to where it stopped.
Nothing is rolled back: directories and key records created before an error
stay in place for the next run to pick up.

All paths are derived from ``project.directory``; the process working
directory is never changed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Protocol, Tuple

from .config import Config, require_project_dir, resolve_network, resolve_rpc_url
from .constants import (
    ENV_KEYS,
    ENV_PROGRAM_PUBKEY,
    PROGRAM_DIR,
    PROGRAM_KEY_BASE,
    PROJECTS_DIR,
    SHARED_GUARD_DIR,
    WALL_ACCOUNT_KEY,
)
from .deploy import DeploymentClient
from .envfile import configure_frontend, parse_env, read_env_value, write_env_values
from .errors import InconsistentStateError, KeyNotFoundError
from .keys import KeyPair, KeyRegistry
from .pubkey import Pubkey
from .templates import demo_dir_for, ensure_demo_project, ensure_shared_libraries, frontend_env_path


class Reporter(Protocol):
    def heading(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def success(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...


class NullReporter:
    def heading(self, message: str) -> None:
        pass

    def info(self, message: str) -> None:
        pass

    def success(self, message: str) -> None:
        pass

    def warning(self, message: str) -> None:
        pass


@dataclass(frozen=True)
class DemoEnvironment:
    """Result of a successful run; ids are hex encoded."""

    demo_dir: Path
    program_pubkey: str
    wall_pubkey: str
    rpc_url: str

    def as_tuple(self) -> Tuple[Path, str, str, str]:
        return (self.demo_dir, self.program_pubkey, self.wall_pubkey, self.rpc_url)


def _check_demo_dir(demo_dir: Path) -> None:
    if not demo_dir.exists():
        raise FileNotFoundError(f"Demo directory not found: {demo_dir}")
    if not demo_dir.is_dir():
        raise NotADirectoryError(f"Demo path is not a directory: {demo_dir}")
    # Raises PermissionError when the directory cannot be listed.
    next(demo_dir.iterdir(), None)


def _resolve_program_identity(
    env_file: Path,
    registry: KeyRegistry,
    client: DeploymentClient,
    rpc_url: str,
    reporter: Reporter,
) -> Tuple[str, KeyPair]:
    reporter.info(f"Reading .env file from: {env_file}")
    existing = read_env_value(env_file, ENV_PROGRAM_PUBKEY)
    if existing:
        try:
            name = registry.name_for(Pubkey.from_hex(existing))
        except (KeyNotFoundError, ValueError) as exc:
            raise InconsistentStateError(
                f"{env_file} names program {existing} but no key in the registry matches it: {exc}"
            ) from exc
        reporter.info(f"Using existing account with name: {name}")
        return name, registry.keypair_for(name)

    name = registry.unique_name(PROGRAM_KEY_BASE)
    reporter.info(f"Creating account with name: {name}")
    pubkey = registry.create(name, client, rpc_url=rpc_url)
    # Recorded before deploy so a rerun resumes with this key.
    write_env_values(env_file, {ENV_PROGRAM_PUBKEY: pubkey.hex()})
    return name, registry.keypair_for(name)


def _resolve_wall_account(
    registry: KeyRegistry,
    client: DeploymentClient,
    program_pubkey: Pubkey,
    rpc_url: str,
    reporter: Reporter,
) -> Pubkey:
    if registry.exists(WALL_ACCOUNT_KEY):
        reporter.info(f"Using existing {WALL_ACCOUNT_KEY} account")
        return registry.pubkey_for(WALL_ACCOUNT_KEY)
    reporter.info(f"Creating new {WALL_ACCOUNT_KEY} account")
    return registry.create(WALL_ACCOUNT_KEY, client, program_id=program_pubkey, rpc_url=rpc_url)


def setup_demo_environment(
    config: Config,
    *,
    registry: KeyRegistry,
    client: DeploymentClient,
    rpc_url: Optional[str] = None,
    reporter: Optional[Reporter] = None,
    templates_root: Optional[Path] = None,
) -> DemoEnvironment:
    reporter = reporter or NullReporter()
    reporter.heading("Setting up demo environment...")

    network = resolve_network(config)
    reporter.info(f"Network type: {network}")
    effective_rpc = resolve_rpc_url(rpc_url, config)
    reporter.info(f"Using RPC URL: {effective_rpc}")

    base_dir = require_project_dir(config)

    if not (base_dir / SHARED_GUARD_DIR).exists():
        reporter.info("Setting up shared libraries...")
    if ensure_shared_libraries(base_dir, templates_root):
        reporter.success("Shared libraries set up successfully")

    (base_dir / PROJECTS_DIR).mkdir(parents=True, exist_ok=True)
    demo_dir = demo_dir_for(base_dir)
    if not demo_dir.exists():
        reporter.info("Demo directory not found. Creating it...")
    if ensure_demo_project(demo_dir, templates_root):
        reporter.success(f"Created demo directory at {demo_dir}")

    _check_demo_dir(demo_dir)
    env_file = frontend_env_path(demo_dir)

    program_name, program_keypair = _resolve_program_identity(
        env_file, registry, client, effective_rpc, reporter
    )
    program_pubkey = program_keypair.pubkey()

    # The shared program directory is what gets deployed.
    reporter.info(f"Deploying program {program_name} ({program_pubkey.hex()})")
    client.deploy_program(base_dir / PROGRAM_DIR, program_keypair, rpc_url=effective_rpc)
    client.make_program_executable(program_keypair, program_pubkey, rpc_url=effective_rpc)
    reporter.success("Program deployed and executable")

    wall_pubkey = _resolve_wall_account(registry, client, program_pubkey, effective_rpc, reporter)

    configure_frontend(env_file, program_pubkey.hex(), wall_pubkey.hex(), network, rpc_url=effective_rpc)
    reporter.success(f"Frontend configured: {env_file}")

    return DemoEnvironment(
        demo_dir=demo_dir,
        program_pubkey=program_pubkey.hex(),
        wall_pubkey=wall_pubkey.hex(),
        rpc_url=effective_rpc,
    )


@dataclass
class DemoStatus:
    base_dir: Path
    demo_dir: Path
    shared_libraries: bool
    demo_project: bool
    env_file: Path
    env_values: Dict[str, str] = field(default_factory=dict)
    program_key: Optional[str] = None
    wall_account: Optional[str] = None


def demo_status(config: Config, registry: KeyRegistry) -> DemoStatus:
    """Read-only view of which pipeline guards are already satisfied."""
    base_dir = require_project_dir(config)
    demo_dir = demo_dir_for(base_dir)
    env_file = frontend_env_path(demo_dir)
    env_values: Dict[str, str] = {}
    if env_file.exists():
        parsed = parse_env(env_file.read_text())
        env_values = {key: parsed[key] for key in ENV_KEYS if key in parsed}

    program_key = None
    program_hex = env_values.get(ENV_PROGRAM_PUBKEY)
    if program_hex:
        try:
            program_key = registry.name_for(Pubkey.from_hex(program_hex))
        except (KeyNotFoundError, ValueError):
            program_key = None

    return DemoStatus(
        base_dir=base_dir,
        demo_dir=demo_dir,
        shared_libraries=(base_dir / SHARED_GUARD_DIR).exists(),
        demo_project=demo_dir.exists(),
        env_file=env_file,
        env_values=env_values,
        program_key=program_key,
        wall_account=registry.pubkey_for(WALL_ACCOUNT_KEY).hex() if registry.exists(WALL_ACCOUNT_KEY) else None,
    )
