"""ProvisionApp: Textual screen that runs the demo setup pipeline."""

from __future__ import annotations

from typing import Optional

from rich.markup import escape
from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Static

from ..config import Config
from ..deploy import RetryPolicy, build_client
from ..errors import DemoError, NetworkError
from ..keys import KeyRegistry
from ..provision import DemoEnvironment, setup_demo_environment
from .widgets.log_panel import LogPanel, PanelReporter


class ProvisionApp(App):
    """archdemo TUI: provision the graffiti wall demo."""

    TITLE = "ARCH DEMO"
    SUB_TITLE = "demo provisioning"

    CSS = """
    Screen {
        background: #0a0e17;
    }
    #banner {
        height: 3;
        background: #111827;
        color: #00ffcc;
        text-style: bold;
        content-align: left middle;
        padding: 0 2;
    }
    #summary {
        height: auto;
        padding: 1 2;
        color: #8892a4;
    }
    """

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit", show=True),
        Binding("r", "rerun", "Re-run", show=True),
    ]

    def __init__(
        self,
        config: Config,
        registry: KeyRegistry,
        policy: Optional[RetryPolicy] = None,
        rpc_url: Optional[str] = None,
    ) -> None:
        super().__init__()
        self.config = config
        self.registry = registry
        self.policy = policy or RetryPolicy()
        self.rpc_url = rpc_url
        self.succeeded = False
        self._provisioning = False
        self.last_error: Optional[str] = None

    def compose(self) -> ComposeResult:
        yield Static(" ARCH DEMO  ·  graffiti wall", id="banner")
        yield LogPanel(id="log")
        yield Static("", id="summary")
        yield Footer()

    def on_mount(self) -> None:
        self.action_rerun()

    def action_rerun(self) -> None:
        if self._provisioning:
            self.notify("Provisioning already running", severity="warning")
            return
        self._provisioning = True
        self.query_one("#summary", Static).update("[#ffaa00]Provisioning...[/]")
        self._provision(self.query_one("#log", LogPanel))

    @work(thread=True, exclusive=True)
    def _provision(self, panel: LogPanel) -> None:
        reporter = PanelReporter(panel)

        def on_retry(label: str, attempt: int, exc: NetworkError) -> None:
            reporter.warning(f"{label} failed (attempt {attempt}): {exc}; retrying")

        client = build_client(self.policy, on_retry=on_retry)
        try:
            env = setup_demo_environment(
                self.config,
                registry=self.registry,
                client=client,
                rpc_url=self.rpc_url,
                reporter=reporter,
            )
        except (OSError, DemoError, ValueError) as exc:
            self.call_from_thread(self._finish_error, str(exc))
            return
        self.call_from_thread(self._finish_ok, env)

    def _finish_ok(self, env: DemoEnvironment) -> None:
        self._provisioning = False
        self.succeeded = True
        self.last_error = None
        self.query_one("#summary", Static).update(
            "[#39ff14]Demo ready[/]\n"
            f"Directory: {escape(str(env.demo_dir))}\n"
            f"Program: {env.program_pubkey}\n"
            f"Wall account: {env.wall_pubkey}\n"
            f"RPC URL: {escape(env.rpc_url)}"
        )
        self.notify("Demo environment ready", severity="information")

    def _finish_error(self, message: str) -> None:
        self._provisioning = False
        self.succeeded = False
        self.last_error = message
        self.query_one("#log", LogPanel).log_error(message)
        self.query_one("#summary", Static).update(f"[#ff3366]Error: {escape(message)}[/]")
        self.notify(message, severity="error")
