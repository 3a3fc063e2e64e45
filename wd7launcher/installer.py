"""Install PowerShell 7 through Windows PowerShell and the official install script.

The routine runs under the older, always-present host because the runtime we
need is exactly what is missing. TLS 1.2 is switched on explicitly: some
hosts still default to protocols the install endpoint rejects.
"""

from __future__ import annotations

import logging
from typing import Optional

import requests

from supervisor.process import ProcessSupervisor
from wd7launcher.config import LauncherConfig
from wd7launcher.models import BootstrapCommand

log = logging.getLogger(__name__)

TLS12 = 3072  # [Net.SecurityProtocolType]::Tls12


def install_routine(script_url: str) -> str:
    """Inline command for the installer host; quiet, unattended MSI install."""
    return (
        "Set-ExecutionPolicy Bypass -Scope Process -Force; "
        "[Net.ServicePointManager]::SecurityProtocol = "
        f"[Net.ServicePointManager]::SecurityProtocol -bor {TLS12}; "
        f"iex \"& {{ $(irm {script_url}) }} -UseMSI -Quiet\""
    )


class RuntimeInstaller:
    def __init__(self, cfg: LauncherConfig, supervisor: Optional[ProcessSupervisor] = None,
                 session: Optional[requests.Session] = None):
        self._cfg = cfg
        self._supervisor = supervisor or ProcessSupervisor()
        self._session = session
        self.last_error = ""

    def endpoint_reachable(self) -> bool:
        """False only when the endpoint cannot be reached at all.

        HTTP status errors (HEAD is not always allowed) and certificate errors
        (certifi may not trust a CA the Windows store does) are left for the
        installer host to settle.
        """
        url = self._cfg.install_script_url
        http = self._session or requests
        try:
            resp = http.head(url, allow_redirects=True, timeout=15)
            resp.raise_for_status()
            return True
        except requests.exceptions.SSLError as e:
            log.warning(f"Install endpoint {url} failed TLS verification, running installer anyway: {e}")
            return True
        except (requests.ConnectionError, requests.Timeout) as e:
            self.last_error = f"install endpoint unreachable: {e}"
            log.warning(f"Install endpoint {url} unreachable: {e}")
            return False
        except requests.RequestException as e:
            log.warning(f"Install endpoint {url} preflight failed, running installer anyway: {e}")
            return True

    def command(self) -> BootstrapCommand:
        return BootstrapCommand(argv=(
            self._cfg.installer_host,
            "-NoProfile",
            "-ExecutionPolicy", "Bypass",
            "-Command", install_routine(self._cfg.install_script_url),
        ))

    def install(self) -> bool:
        self.last_error = ""
        if self._cfg.install_preflight and not self.endpoint_reachable():
            return False
        outcome = self._supervisor.run(self.command(), timeout_sec=self._cfg.install_timeout_sec)
        if not outcome.started:
            self.last_error = f"{self._cfg.installer_host} could not start: {outcome.error}"
            return False
        if outcome.exit_code != 0:
            self.last_error = outcome.error or f"installer exited with code {outcome.exit_code}"
            return False
        log.info("PowerShell 7 install finished")
        return True
