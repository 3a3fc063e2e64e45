"""Console presentation: colours, guidance text, pause-on-error."""

from __future__ import annotations

import logging
import sys
import webbrowser
from typing import Callable, Optional

from rich.console import Console

from wd7launcher.config import LauncherConfig
from wd7launcher.models import Outcome, OutcomeKind, Severity

log = logging.getLogger(__name__)

STYLES = {
    Severity.INFO: "cyan",
    Severity.SUCCESS: "green",
    Severity.WARNING: "yellow",
    Severity.ERROR: "bold red",
}


def guidance(outcome: Outcome, cfg: LauncherConfig) -> str:
    kind = outcome.kind
    if kind is OutcomeKind.PAYLOAD_NOT_FOUND:
        return "Re-download the release or rebuild the launcher so it ships the payload."
    if kind in (OutcomeKind.RUNTIME_NOT_FOUND, OutcomeKind.INSTALL_FAILED):
        return (
            "Win-Debloat7 requires PowerShell 7.5+. Install it manually, e.g. from "
            f"{cfg.install_script_url} or {cfg.download_page_url}"
        )
    if kind is OutcomeKind.RUNTIME_UNLAUNCHABLE:
        return (
            "PowerShell 7 could not be started. If it was just installed, restart the "
            "launcher (or sign out and back in) so the updated PATH is picked up."
        )
    if kind is OutcomeKind.UNEXPECTED:
        return "An unexpected error occurred. Run with --verbose for details."
    return ""


class Reporter:
    def __init__(self, cfg: LauncherConfig, console: Optional[Console] = None,
                 read_key: Optional[Callable[[str], str]] = None,
                 open_url: Callable[[str], bool] = webbrowser.open):
        self._cfg = cfg
        self.console = console or Console(highlight=False)
        self._read_key = read_key or input
        self._open_url = open_url

    def status(self, text: str, severity: Severity = Severity.INFO) -> None:
        self.console.print(text, style=STYLES[severity], markup=False, soft_wrap=True)

    def outcome(self, outcome: Outcome) -> None:
        if outcome.ok:
            log.info(f"Run finished: exit code {outcome.exit_code}")
            return
        if outcome.message:
            self.status(f"Error: {outcome.message}", outcome.severity)
        hint = guidance(outcome, self._cfg)
        if hint:
            self.status(hint, outcome.severity)

    def _interactive(self) -> bool:
        try:
            return bool(sys.stdin) and sys.stdin.isatty()
        except ValueError:
            return False

    def pause(self, prompt: str = "Press Enter to exit...") -> None:
        if not self._cfg.pause_on_error or not self._interactive():
            return
        try:
            self._read_key(prompt)
        except EOFError:
            pass

    def offer_download_page(self) -> bool:
        """Pause with an offer to open the download page. False if not offered."""
        if not self._cfg.download_page_wanted or not self._interactive():
            return False
        try:
            self._read_key("Press Enter to open the download page...")
        except EOFError:
            return True
        if not self._open_url(self._cfg.download_page_url):
            log.warning(f"Could not open {self._cfg.download_page_url}")
        return True

    def finish(self, outcome: Outcome) -> None:
        """Render the terminal outcome and apply the failure UX."""
        self.outcome(outcome)
        if outcome.ok:
            return
        if outcome.kind in (OutcomeKind.RUNTIME_UNLAUNCHABLE, OutcomeKind.INSTALL_FAILED,
                            OutcomeKind.RUNTIME_NOT_FOUND):
            if self.offer_download_page():
                return
        self.pause()
