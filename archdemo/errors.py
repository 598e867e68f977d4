"""Error types raised by the provisioning pipeline.

Filesystem failures are not wrapped: they surface as the builtin ``OSError``
family (``FileNotFoundError``, ``PermissionError``, ...).
"""

from __future__ import annotations


class DemoError(Exception):
    """Base class for archdemo errors."""


class ConfigError(DemoError, ValueError):
    """Required configuration is missing or malformed."""


class KeyNotFoundError(DemoError, LookupError):
    """A registry lookup by name or public key found no record."""


class InconsistentStateError(DemoError):
    """The frontend environment file and the key registry disagree."""


class NetworkError(DemoError, RuntimeError):
    """A deployment client call failed or timed out."""
