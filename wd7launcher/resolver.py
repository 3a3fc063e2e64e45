"""Locate the PowerShell 7 runtime: search path first, then the known install path."""

from __future__ import annotations

import logging
import os
from typing import Callable, Optional

from supervisor.process import Runner, probe
from wd7launcher.config import LauncherConfig
from wd7launcher.models import RuntimeLocation

log = logging.getLogger(__name__)


class RuntimeResolver:
    def __init__(self, cfg: LauncherConfig, runner: Optional[Runner] = None,
                 exists: Callable[[str], bool] = os.path.isfile):
        self._cfg = cfg
        self._runner = runner
        self._exists = exists

    def probe_path(self) -> bool:
        """True when the bare runtime name starts (any exit code counts)."""
        argv = [self._cfg.runtime_name, *self._cfg.probe_args]
        outcome = probe(argv, self._cfg.probe_timeout_sec, runner=self._runner)
        return outcome.started

    def fallback_exists(self) -> bool:
        path = self._cfg.runtime_fallback_path
        return bool(path) and self._exists(path)

    def resolve(self) -> RuntimeLocation:
        if self.probe_path():
            log.info(f"Runtime '{self._cfg.runtime_name}' is on PATH")
            return RuntimeLocation.path_name(self._cfg.runtime_name)
        if self.fallback_exists():
            log.info(f"Runtime found at fallback path {self._cfg.runtime_fallback_path}")
            return RuntimeLocation.absolute(self._cfg.runtime_fallback_path)
        log.info(f"Runtime '{self._cfg.runtime_name}' not found")
        return RuntimeLocation.not_found()
