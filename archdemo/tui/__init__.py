"""archdemo TUI: watch the demo provisioning run in a terminal interface."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:  # pragma: no cover
    from ..config import Config
    from ..deploy import RetryPolicy
    from ..keys import KeyRegistry


def launch_tui(
    config: "Config",
    registry: "KeyRegistry",
    policy: Optional["RetryPolicy"] = None,
    rpc_url: Optional[str] = None,
) -> int:
    """Launch the provisioning TUI; returns 0 on success, 1 on failure."""
    from .app import ProvisionApp

    app = ProvisionApp(config=config, registry=registry, policy=policy, rpc_url=rpc_url)
    app.run()
    return 0 if app.succeeded else 1
