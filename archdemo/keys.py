"""Key material and the named key registry."""

from __future__ import annotations

from abc import ABC, abstractmethod
import json
import os
from pathlib import Path
import tempfile
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from .errors import KeyNotFoundError
from .pubkey import Pubkey

if TYPE_CHECKING:  # pragma: no cover
    from .deploy import DeploymentClient


class KeyPair:
    """secp256k1 key pair; its pubkey is the x coordinate of the public point."""

    def __init__(self, private_key: ec.EllipticCurvePrivateKey) -> None:
        self._private_key = private_key

    @classmethod
    def generate(cls) -> "KeyPair":
        while True:
            keypair = cls(ec.generate_private_key(ec.SECP256K1()))
            if not keypair.pubkey().is_system_program():
                return keypair

    @classmethod
    def from_secret_bytes(cls, secret: bytes) -> "KeyPair":
        if len(secret) != 32:
            raise ValueError("secret key must be 32 bytes")
        return cls(ec.derive_private_key(int.from_bytes(secret, "big"), ec.SECP256K1()))

    @classmethod
    def from_secret_hex(cls, text: str) -> "KeyPair":
        try:
            secret = bytes.fromhex(text.strip())
        except ValueError as exc:
            raise ValueError("secret key is not valid hex") from exc
        return cls.from_secret_bytes(secret)

    def secret_bytes(self) -> bytes:
        return self._private_key.private_numbers().private_value.to_bytes(32, "big")

    def secret_hex(self) -> str:
        return self.secret_bytes().hex()

    def public_key_bytes(self) -> bytes:
        return self._private_key.public_key().public_bytes(Encoding.X962, PublicFormat.CompressedPoint)

    def pubkey(self) -> Pubkey:
        return Pubkey.from_slice(self.public_key_bytes()[1:33])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KeyPair):
            return NotImplemented
        return self.secret_bytes() == other.secret_bytes()

    def __hash__(self) -> int:
        return hash(self.secret_bytes())

    def __repr__(self) -> str:
        return f"KeyPair(pubkey={self.pubkey().hex()})"


class KeyStore(ABC):
    """Name-indexed key storage. Records are only ever added."""

    @abstractmethod
    def names(self) -> List[str]:
        ...

    @abstractmethod
    def get(self, name: str) -> Optional[KeyPair]:
        ...

    @abstractmethod
    def put(self, name: str, keypair: KeyPair) -> None:
        ...


class InMemoryKeyStore(KeyStore):
    def __init__(self, records: Optional[Dict[str, KeyPair]] = None) -> None:
        self._records: Dict[str, KeyPair] = dict(records or {})

    def names(self) -> List[str]:
        return list(self._records)

    def get(self, name: str) -> Optional[KeyPair]:
        return self._records.get(name)

    def put(self, name: str, keypair: KeyPair) -> None:
        self._records[name] = keypair


class FileKeyStore(KeyStore):
    """keys.json backed store; the file is re-read on every call."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _load(self) -> Dict[str, Dict[str, str]]:
        if not self.path.exists():
            return {}
        text = self.path.read_text()
        if not text.strip():
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Unable to parse key registry {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ValueError(f"Key registry {self.path} must be a JSON object")
        return data

    def names(self) -> List[str]:
        return list(self._load())

    def get(self, name: str) -> Optional[KeyPair]:
        entry = self._load().get(name)
        if entry is None:
            return None
        secret = entry.get("secret_key") if isinstance(entry, dict) else None
        if not isinstance(secret, str) or not secret:
            raise ValueError(f"Key registry entry {name!r} has no secret_key")
        return KeyPair.from_secret_hex(secret)

    def put(self, name: str, keypair: KeyPair) -> None:
        data = self._load()
        data[name] = {
            "secret_key": keypair.secret_hex(),
            "public_key": keypair.pubkey().hex(),
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # mkstemp creates the file 0600; the registry is swapped in whole.
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as fh:
                fh.write(json.dumps(data, indent=2, sort_keys=True) + "\n")
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class KeyRegistry:
    """Named key records plus reverse lookup from derived pubkey to name."""

    def __init__(self, store: KeyStore) -> None:
        self.store = store

    def exists(self, name: str) -> bool:
        return self.store.get(name) is not None

    def pubkey_exists(self, pubkey: Pubkey) -> bool:
        return self._find_name(pubkey) is not None

    def _find_name(self, pubkey: Pubkey) -> Optional[str]:
        for name in self.store.names():
            keypair = self.store.get(name)
            if keypair is not None and keypair.pubkey() == pubkey:
                return name
        return None

    def name_for(self, pubkey: Pubkey) -> str:
        name = self._find_name(pubkey)
        if name is None:
            raise KeyNotFoundError(f"No key found for pubkey {pubkey.hex()}")
        return name

    def keypair_for(self, name: str) -> KeyPair:
        keypair = self.store.get(name)
        if keypair is None:
            raise KeyNotFoundError(f"No key named {name!r}")
        return keypair

    def pubkey_for(self, name: str) -> Pubkey:
        return self.keypair_for(name).pubkey()

    def list_keys(self) -> List[Tuple[str, Pubkey]]:
        return sorted((name, self.pubkey_for(name)) for name in self.store.names())

    def unique_name(self, base: str) -> str:
        name = base
        counter = 1
        while self.exists(name):
            name = f"{base}_{counter}"
            counter += 1
        return name

    def create(
        self,
        name: str,
        client: "DeploymentClient",
        program_id: Optional[Pubkey] = None,
        rpc_url: Optional[str] = None,
    ) -> Pubkey:
        """Mint a key pair, create its on-chain account, then persist the record.

        The record is written only after the account call returns, so a failed
        network call leaves the registry untouched.
        """
        if self.exists(name):
            raise ValueError(f"Key name already exists: {name}")
        keypair = KeyPair.generate()
        pubkey = client.create_account(name, keypair, owner=program_id, rpc_url=rpc_url)
        if pubkey != keypair.pubkey():
            raise ValueError(
                f"Deployment client returned pubkey {pubkey.hex()} for {name}, "
                f"expected {keypair.pubkey().hex()}"
            )
        self.store.put(name, keypair)
        return pubkey
