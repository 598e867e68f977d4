"""LogPanel: scrollable, color-coded provisioning log."""

from __future__ import annotations

from rich.markup import escape
from textual.widgets import RichLog


class LogPanel(RichLog):
    """Scrollable log with color-coded entries for pipeline steps."""

    DEFAULT_CSS = """
    LogPanel {
        background: #0a0e17;
        border: solid #1a3a4a;
        padding: 0 1;
        min-height: 6;
    }
    LogPanel:focus {
        border: solid #00ffcc;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(highlight=True, markup=True, wrap=True, **kwargs)

    def log_heading(self, message: str) -> None:
        self.write(f"[bold #39ff14]{escape(message)}[/]")

    def log_info(self, message: str) -> None:
        self.write(f"[#8892a4]{escape(message)}[/]")

    def log_success(self, message: str) -> None:
        self.write(f"[#39ff14]{escape(message)}[/]")

    def log_error(self, message: str) -> None:
        self.write(f"[#ff3366]{escape(message)}[/]")

    def log_warning(self, message: str) -> None:
        self.write(f"[#ffaa00]{escape(message)}[/]")


class PanelReporter:
    """Forwards pipeline progress from a worker thread into a LogPanel."""

    def __init__(self, panel: LogPanel) -> None:
        self.panel = panel

    def _post(self, fn, message: str) -> None:
        self.panel.app.call_from_thread(fn, message)

    def heading(self, message: str) -> None:
        self._post(self.panel.log_heading, message)

    def info(self, message: str) -> None:
        self._post(self.panel.log_info, message)

    def success(self, message: str) -> None:
        self._post(self.panel.log_success, message)

    def warning(self, message: str) -> None:
        self._post(self.panel.log_warning, message)
