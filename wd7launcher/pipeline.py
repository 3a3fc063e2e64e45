"""Bootstrap pipeline.

locate payload -> resolve runtime -> (install, re-resolve) -> workspace +
stage -> build command -> run -> cleanup. Cleanup runs on every path once a
workspace exists; anything unanticipated becomes ``OutcomeKind.UNEXPECTED``.
"""

from __future__ import annotations

import logging
import pathlib
from typing import Optional

from supervisor.process import ProcessSupervisor
from supervisor.workspace import cleanup_workspace, create_workspace
from wd7launcher.command import CommandBuilder
from wd7launcher.config import LauncherConfig
from wd7launcher.installer import RuntimeInstaller
from wd7launcher.models import (
    BootstrapCommand,
    LauncherError,
    Outcome,
    OutcomeKind,
    PayloadSource,
    RuntimeLocation,
    Severity,
)
from wd7launcher.report import Reporter
from wd7launcher.resolver import RuntimeResolver
from wd7launcher.stager import PayloadStager

log = logging.getLogger(__name__)


class Bootstrap:
    def __init__(
        self,
        cfg: LauncherConfig,
        resolver: Optional[RuntimeResolver] = None,
        installer: Optional[RuntimeInstaller] = None,
        stager: Optional[PayloadStager] = None,
        builder: Optional[CommandBuilder] = None,
        supervisor: Optional[ProcessSupervisor] = None,
        reporter: Optional[Reporter] = None,
        dry_run: bool = False,
    ):
        self.cfg = cfg
        self.supervisor = supervisor or ProcessSupervisor()
        self.resolver = resolver or RuntimeResolver(cfg)
        self.installer = installer or RuntimeInstaller(cfg, supervisor=self.supervisor)
        self.stager = stager or PayloadStager(cfg)
        self.builder = builder or CommandBuilder(cfg)
        self.reporter = reporter or Reporter(cfg)
        self.dry_run = dry_run
        self.workspace: Optional[pathlib.Path] = None
        self.command: Optional[BootstrapCommand] = None

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def ensure_runtime(self) -> Outcome:
        location = self.resolver.resolve()
        if location.found:
            return Outcome.success(location)

        if not self.cfg.install_enabled:
            return Outcome.failure(
                OutcomeKind.RUNTIME_NOT_FOUND,
                f"PowerShell 7 ({self.cfg.runtime_name}) was not found in your PATH.",
            )

        self.reporter.status("PowerShell 7 not found. Installing it now, this can take a few minutes...",
                             Severity.WARNING)
        if not self.installer.install():
            detail = self.installer.last_error or "installer failed"
            return Outcome.failure(OutcomeKind.INSTALL_FAILED, f"PowerShell 7 install failed: {detail}")

        self.reporter.status("PowerShell 7 installed.", Severity.SUCCESS)
        # The fresh install is usually not visible on this process's PATH yet;
        # CommandBuilder falls back to the known install path for NOT_FOUND.
        return Outcome.success(self.resolver.resolve())

    def prepare(self, location: RuntimeLocation, source: PayloadSource) -> Outcome:
        if not source.is_direct:
            self.workspace = create_workspace(self.cfg.workspace_prefix, self.cfg.workspace_root or None)
        staged = self.stager.stage(source, self.workspace)
        if not staged.ok:
            return staged
        self.command = self.builder.build(location, self.workspace, source, staged.value)
        return Outcome.success(self.command)

    def launch(self, command: BootstrapCommand) -> Outcome:
        if self.dry_run:
            self.reporter.status(" ".join(command.argv))
            if command.script_body:
                self.reporter.status(command.script_body)
            return Outcome.success(command, exit_code=0)

        result = self.supervisor.run(command)
        if not result.started:
            return Outcome.failure(
                OutcomeKind.RUNTIME_UNLAUNCHABLE,
                f"{command.executable} could not be started: {result.error}",
            )
        return Outcome.success(result, exit_code=result.exit_code)

    # ------------------------------------------------------------------
    # Top level
    # ------------------------------------------------------------------

    def _run_stages(self) -> Outcome:
        located = self.stager.locate()
        if not located.ok:
            return located
        runtime = self.ensure_runtime()
        if not runtime.ok:
            return runtime
        prepared = self.prepare(runtime.value, located.value)
        if not prepared.ok:
            return prepared
        return self.launch(prepared.value)

    def cleanup(self) -> None:
        cleanup_workspace(self.workspace)

    def run(self) -> Outcome:
        try:
            outcome = self._run_stages()
        except LauncherError as e:
            log.warning(f"Launcher error: {e}", exc_info=True)
            outcome = Outcome.failure(e.kind, str(e))
        except Exception as e:
            log.error("Unexpected launcher failure", exc_info=True)
            outcome = Outcome.failure(OutcomeKind.UNEXPECTED, str(e) or type(e).__name__)
        finally:
            self.cleanup()
        return outcome
