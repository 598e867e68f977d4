"""Deployment client boundary: account creation, program deploy, activation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
import os
from pathlib import Path
import subprocess
import time
from typing import Callable, List, Mapping, Optional, TypeVar

from .constants import (
    DEFAULT_CALL_TIMEOUT,
    DEFAULT_DEPLOYER,
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_RETRY_BACKOFF,
    DEPLOYER_ENV,
    DEPLOYER_SECRET_ENV,
)
from .errors import NetworkError
from .keys import KeyPair
from .pubkey import Pubkey

T = TypeVar("T")
RetryCallback = Callable[[str, int, NetworkError], None]


class DeploymentClient(ABC):
    """Network-facing operations the provisioning pipeline delegates."""

    @abstractmethod
    def create_account(
        self,
        name: str,
        keypair: KeyPair,
        owner: Optional[Pubkey] = None,
        rpc_url: Optional[str] = None,
    ) -> Pubkey:
        ...

    @abstractmethod
    def deploy_program(self, source_dir: Path, keypair: KeyPair, rpc_url: Optional[str] = None) -> None:
        ...

    @abstractmethod
    def make_program_executable(
        self,
        keypair: KeyPair,
        program_pubkey: Pubkey,
        rpc_url: Optional[str] = None,
    ) -> None:
        ...


def resolve_deployer(env: Optional[Mapping[str, str]] = None) -> str:
    env = os.environ if env is None else env
    return env.get(DEPLOYER_ENV) or DEFAULT_DEPLOYER


class CliDeploymentClient(DeploymentClient):
    """Runs the external deployer executable; the secret key travels in its env."""

    def __init__(self, executable: Optional[str] = None, timeout: Optional[float] = DEFAULT_CALL_TIMEOUT) -> None:
        self.executable = executable or resolve_deployer()
        self.timeout = timeout

    def _run(self, args: List[str], keypair: KeyPair, rpc_url: Optional[str]) -> str:
        cmd = [self.executable, *args]
        if rpc_url:
            cmd.extend(["--rpc-url", rpc_url])
        env = os.environ.copy()
        env[DEPLOYER_SECRET_ENV] = keypair.secret_hex()
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, env=env, timeout=self.timeout)
        except subprocess.TimeoutExpired as exc:
            raise NetworkError(f"{' '.join(args[:2])} timed out after {self.timeout}s") from exc
        if result.returncode != 0:
            msg = result.stderr.strip() or result.stdout.strip() or f"{self.executable} {args[0]} failed"
            raise NetworkError(msg)
        return result.stdout

    def create_account(
        self,
        name: str,
        keypair: KeyPair,
        owner: Optional[Pubkey] = None,
        rpc_url: Optional[str] = None,
    ) -> Pubkey:
        args = ["account", "create", "--name", name, "--pubkey", keypair.pubkey().hex()]
        if owner is not None:
            args.extend(["--owner", owner.hex()])
        self._run(args, keypair, rpc_url)
        return keypair.pubkey()

    def deploy_program(self, source_dir: Path, keypair: KeyPair, rpc_url: Optional[str] = None) -> None:
        if not source_dir.is_dir():
            raise FileNotFoundError(f"Program source directory not found: {source_dir}")
        self._run(["program", "deploy", "--path", str(source_dir.resolve())], keypair, rpc_url)

    def make_program_executable(
        self,
        keypair: KeyPair,
        program_pubkey: Pubkey,
        rpc_url: Optional[str] = None,
    ) -> None:
        self._run(["program", "make-executable", "--program-id", program_pubkey.hex()], keypair, rpc_url)


@dataclass(frozen=True)
class RetryPolicy:
    attempts: int = DEFAULT_RETRY_ATTEMPTS
    backoff: float = DEFAULT_RETRY_BACKOFF
    timeout: Optional[float] = DEFAULT_CALL_TIMEOUT

    def __post_init__(self) -> None:
        if self.attempts < 1:
            raise ValueError("retry attempts must be >= 1")
        if self.backoff < 0:
            raise ValueError("retry backoff must be >= 0")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("call timeout must be > 0")

    def delay(self, attempt: int) -> float:
        return self.backoff * (2**attempt)


class RetryingDeploymentClient(DeploymentClient):
    """Wraps a client with bounded retries; only NetworkError is retried."""

    def __init__(
        self,
        inner: DeploymentClient,
        policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
        on_retry: Optional[RetryCallback] = None,
    ) -> None:
        self.inner = inner
        self.policy = policy or RetryPolicy()
        self._sleep = sleep
        self._on_retry = on_retry

    def _call(self, label: str, fn: Callable[[], T]) -> T:
        attempt = 0
        while True:
            try:
                return fn()
            except NetworkError as exc:
                attempt += 1
                if attempt >= self.policy.attempts:
                    raise
                if self._on_retry is not None:
                    self._on_retry(label, attempt, exc)
                self._sleep(self.policy.delay(attempt - 1))

    def create_account(
        self,
        name: str,
        keypair: KeyPair,
        owner: Optional[Pubkey] = None,
        rpc_url: Optional[str] = None,
    ) -> Pubkey:
        return self._call(
            f"create account {name}",
            lambda: self.inner.create_account(name, keypair, owner=owner, rpc_url=rpc_url),
        )

    def deploy_program(self, source_dir: Path, keypair: KeyPair, rpc_url: Optional[str] = None) -> None:
        self._call("deploy program", lambda: self.inner.deploy_program(source_dir, keypair, rpc_url=rpc_url))

    def make_program_executable(
        self,
        keypair: KeyPair,
        program_pubkey: Pubkey,
        rpc_url: Optional[str] = None,
    ) -> None:
        self._call(
            "make program executable",
            lambda: self.inner.make_program_executable(keypair, program_pubkey, rpc_url=rpc_url),
        )


def build_client(
    policy: Optional[RetryPolicy] = None,
    executable: Optional[str] = None,
    on_retry: Optional[RetryCallback] = None,
) -> DeploymentClient:
    policy = policy or RetryPolicy()
    inner = CliDeploymentClient(executable=executable, timeout=policy.timeout)
    return RetryingDeploymentClient(inner, policy, on_retry=on_retry)
