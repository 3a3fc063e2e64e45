"""Build the PowerShell invocation for the staged payload.

Archive mode never passes nested quotes on the command line. The whole script
body is serialized as base64 of UTF-16LE and handed over with
``-EncodedCommand``; only the receiving runtime decodes it.
"""

from __future__ import annotations

import base64
import logging
import os
import pathlib
from typing import Callable

from wd7launcher.config import LauncherConfig
from wd7launcher.models import BootstrapCommand, LocationKind, PayloadSource, RuntimeLocation

log = logging.getLogger(__name__)

BASE_FLAGS = ("-NoProfile", "-ExecutionPolicy", "Bypass")


def encode_command(body: str) -> str:
    return base64.b64encode(body.encode("utf-16-le")).decode("ascii")


def decode_command(encoded: str) -> str:
    """What the runtime does with an ``-EncodedCommand`` argument."""
    return base64.b64decode(encoded.encode("ascii")).decode("utf-16-le")


def ps_literal(value: str) -> str:
    """Single-quoted PowerShell string literal."""
    return "'" + str(value).replace("'", "''") + "'"


def archive_script(archive: pathlib.Path, workspace: pathlib.Path, entry_script: str) -> str:
    return (
        "$progressPreference='SilentlyContinue'; "
        "Write-Host '\U0001F680 Initializing Win-Debloat7...' -ForegroundColor Cyan; "
        f"Expand-Archive -LiteralPath {ps_literal(archive)} -DestinationPath {ps_literal(workspace)} -Force; "
        f"Set-Location -LiteralPath {ps_literal(workspace)}; "
        f"& {ps_literal('./' + entry_script)};"
    )


class CommandBuilder:
    def __init__(self, cfg: LauncherConfig, exists: Callable[[str], bool] = os.path.isfile):
        self._cfg = cfg
        self._exists = exists

    def executable(self, location: RuntimeLocation) -> str:
        """Pick what to launch.

        Right after an install this process still has the old PATH, so a
        fallback binary that exists on disk wins over the bare name.
        """
        if location.kind is LocationKind.ABSOLUTE_PATH:
            return location.value
        fallback = self._cfg.runtime_fallback_path
        if location.kind is LocationKind.NOT_FOUND and fallback and self._exists(fallback):
            return fallback
        return location.value or self._cfg.runtime_name

    def build(self, location: RuntimeLocation, workspace, payload: PayloadSource,
              staged: pathlib.Path) -> BootstrapCommand:
        exe = self.executable(location)
        if payload.is_direct:
            return BootstrapCommand(argv=(exe, *BASE_FLAGS, "-File", str(staged)))

        body = archive_script(pathlib.Path(staged), pathlib.Path(workspace), self._cfg.script_name)
        log.debug(f"Encoded command body: {body}")
        return BootstrapCommand(
            argv=(exe, *BASE_FLAGS, "-EncodedCommand", encode_command(body)),
            cwd=str(workspace),
            script_body=body,
        )
