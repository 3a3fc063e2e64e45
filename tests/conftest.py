import io
import subprocess
from typing import BinaryIO, Dict, List, Optional

import pytest
from rich.console import Console

from wd7launcher.config import LauncherConfig
from wd7launcher.models import ProcessOutcome
from wd7launcher.report import Reporter


FALLBACK = r"C:\Program Files\PowerShell\7\pwsh.exe"


@pytest.fixture
def cfg(tmp_path):
    return LauncherConfig(
        base_dir=str(tmp_path / "app"),
        workspace_root=str(tmp_path / "tmp"),
        runtime_fallback_path=FALLBACK,
        pause_on_error=False,
    )


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=300, highlight=False)


@pytest.fixture
def reporter(cfg, console):
    return Reporter(cfg, console=console, read_key=lambda prompt: "")


def completed(argv, code=0):
    return subprocess.CompletedProcess(list(argv), code)


class MemoryResources:
    """In-memory resource table standing in for the payload package data."""

    def __init__(self, blobs: Optional[Dict[str, bytes]] = None):
        self._blobs = dict(blobs or {})

    def names(self) -> List[str]:
        return list(self._blobs)

    def open(self, name: str) -> BinaryIO:
        return io.BytesIO(self._blobs[name])


class FakeSupervisor:
    """Records commands; answers with queued ProcessOutcomes (default: exit 0)."""

    def __init__(self, *outcomes, on_run=None):
        self.outcomes = list(outcomes)
        self.commands = []
        self.on_run = on_run

    def run(self, command, timeout_sec=None):
        self.commands.append(command)
        if self.on_run is not None:
            self.on_run(command)
        if self.outcomes:
            return self.outcomes.pop(0)
        return ProcessOutcome.exited(0)
