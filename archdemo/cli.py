"""CLI entrypoint for archdemo."""

from __future__ import annotations

import argparse
import os
import sys

from . import output
from .config import get_config_dir, keys_file, load_config
from .constants import DEFAULT_CALL_TIMEOUT, DEFAULT_RETRY_ATTEMPTS
from .deploy import RetryPolicy, build_client
from .errors import DemoError, NetworkError
from .keys import FileKeyStore, KeyRegistry
from .output import ConsoleReporter
from .provision import demo_status, setup_demo_environment


def _registry() -> KeyRegistry:
    return KeyRegistry(FileKeyStore(keys_file(get_config_dir())))


def _retry_policy(args: argparse.Namespace) -> RetryPolicy:
    return RetryPolicy(attempts=args.retries, timeout=args.timeout)


def _report_retry(label: str, attempt: int, exc: NetworkError) -> None:
    output.warning(f"{label} failed (attempt {attempt}): {exc}; retrying")


def _cmd_start(args: argparse.Namespace) -> int:
    config = load_config(args.config)
    client = build_client(_retry_policy(args), on_retry=_report_retry)
    env = setup_demo_environment(
        config,
        registry=_registry(),
        client=client,
        rpc_url=args.rpc_url,
        reporter=ConsoleReporter(),
    )
    output.heading("Demo environment ready")
    output.field("Demo directory", env.demo_dir)
    output.field("Program pubkey", env.program_pubkey)
    output.field("Wall account pubkey", env.wall_pubkey)
    output.field("RPC URL", env.rpc_url)
    return 0


def _cmd_status(args: argparse.Namespace) -> int:
    config = load_config(args.config)
    status = demo_status(config, _registry())
    output.heading("Demo status")
    output.field("Project directory", status.base_dir)
    output.field("Shared libraries", "present" if status.shared_libraries else "missing")
    output.field("Demo project", "present" if status.demo_project else "missing")
    output.field("Env file", status.env_file if status.env_file.exists() else f"{status.env_file} (missing)")
    for key, value in status.env_values.items():
        output.field(key, value or "<unset>")
    output.field("Program key", status.program_key or "<none>")
    output.field("Wall account", status.wall_account or "<none>")
    return 0


def _cmd_keys_list(args: argparse.Namespace) -> int:
    entries = _registry().list_keys()
    if not entries:
        output.info("No keys in registry")
        return 0
    for name, pubkey in entries:
        output.field(name, pubkey.hex())
    return 0


def _cmd_keys_show(args: argparse.Namespace) -> int:
    pubkey = _registry().pubkey_for(args.name)
    output.field(args.name, pubkey.hex())
    return 0


def _cmd_tui(args: argparse.Namespace) -> int:
    from .tui import launch_tui

    config = load_config(args.config)
    return launch_tui(config, _registry(), policy=_retry_policy(args), rpc_url=args.rpc_url)


def _add_run_options(p: argparse.ArgumentParser) -> None:
    p.add_argument("--rpc-url", help="RPC URL override (default: config leader_rpc_endpoint)")
    p.add_argument("--config", help="Path to config.toml")
    p.add_argument("--retries", type=int, default=DEFAULT_RETRY_ATTEMPTS, help="Attempts per network call")
    p.add_argument("--timeout", type=float, default=DEFAULT_CALL_TIMEOUT, help="Seconds per network call")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog=os.path.basename(sys.argv[0]))
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_start = sub.add_parser("start", help="Set up, deploy, and configure the demo")
    _add_run_options(p_start)
    p_start.set_defaults(func=_cmd_start)

    p_status = sub.add_parser("status", help="Show demo setup state")
    p_status.add_argument("--config", help="Path to config.toml")
    p_status.set_defaults(func=_cmd_status)

    p_keys = sub.add_parser("keys", help="Inspect the key registry")
    p_keys_sub = p_keys.add_subparsers(dest="keys_cmd", required=True)
    p_keys_list = p_keys_sub.add_parser("list", help="List key names and pubkeys")
    p_keys_list.set_defaults(func=_cmd_keys_list)
    p_keys_show = p_keys_sub.add_parser("show", help="Show the pubkey for a key name")
    p_keys_show.add_argument("name")
    p_keys_show.set_defaults(func=_cmd_keys_show)

    p_tui = sub.add_parser("tui", help="Run the demo setup in the terminal UI")
    _add_run_options(p_tui)
    p_tui.set_defaults(func=_cmd_tui)

    args = parser.parse_args(argv)
    try:
        return args.func(args)
    except OSError as exc:
        output.error(str(exc))
        return 1
    except (DemoError, ValueError) as exc:
        output.error(str(exc))
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
