"""Fixed-size 32-byte public key identifier."""

from __future__ import annotations

from dataclasses import dataclass
import itertools
import threading

from .constants import PUBKEY_SIZE

_UNIQUE_COUNTER = itertools.count(1)
_UNIQUE_LOCK = threading.Lock()


@dataclass(frozen=True, order=True)
class Pubkey:
    """Opaque 32-byte identifier, ordered lexicographically by its bytes."""

    data: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.data, (bytes, bytearray)):
            raise TypeError("Pubkey data must be bytes")
        if len(self.data) != PUBKEY_SIZE:
            raise ValueError(f"Pubkey must be {PUBKEY_SIZE} bytes, got {len(self.data)}")
        object.__setattr__(self, "data", bytes(self.data))

    @classmethod
    def from_slice(cls, data: bytes) -> "Pubkey":
        # Shorter input is zero-padded, longer input truncated.
        buf = bytes(data[:PUBKEY_SIZE])
        return cls(buf + b"\x00" * (PUBKEY_SIZE - len(buf)))

    @classmethod
    def from_hex(cls, text: str) -> "Pubkey":
        value = text.strip()
        if len(value) != PUBKEY_SIZE * 2:
            raise ValueError(f"Pubkey hex must be {PUBKEY_SIZE * 2} characters: {text!r}")
        try:
            return cls(bytes.fromhex(value))
        except ValueError as exc:
            raise ValueError(f"Pubkey hex is malformed: {text!r}") from exc

    @classmethod
    def system_program(cls) -> "Pubkey":
        return cls(b"\x00" * (PUBKEY_SIZE - 1) + b"\x01")

    @classmethod
    def new_unique(cls) -> "Pubkey":
        """Unique pubkey for tests; later calls compare greater than earlier ones."""
        with _UNIQUE_LOCK:
            value = next(_UNIQUE_COUNTER)
        return cls(value.to_bytes(8, "big") + b"\x00" * (PUBKEY_SIZE - 8))

    def is_system_program(self) -> bool:
        return self.data == b"\x00" * (PUBKEY_SIZE - 1) + b"\x01"

    def serialize(self) -> bytes:
        return self.data

    def hex(self) -> str:
        return self.data.hex()

    def __bytes__(self) -> bytes:
        return self.data

    def __str__(self) -> str:
        return self.data.hex()
