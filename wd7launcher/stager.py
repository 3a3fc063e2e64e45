"""Find the payload and put it where the runtime can reach it.

Direct mode uses the script sitting next to the launcher as-is. Archive mode
copies the embedded archive into the workspace; unpacking is left to the
runtime so the launcher never needs an archive library.
"""

from __future__ import annotations

import logging
import pathlib
import shutil
from importlib import resources
from typing import BinaryIO, List, Optional

from wd7launcher.config import LauncherConfig
from wd7launcher.models import LauncherError, Outcome, OutcomeKind, PayloadSource

log = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class PackageResources:
    """Resource table backed by a package's data files (works zipped or frozen)."""

    def __init__(self, package: str):
        self.package = package

    def _root(self):
        return resources.files(self.package)

    def names(self) -> List[str]:
        try:
            return sorted(p.name for p in self._root().iterdir() if p.is_file())
        except (ModuleNotFoundError, FileNotFoundError):
            log.debug(f"Resource package {self.package} not available", exc_info=True)
            return []

    def open(self, name: str) -> BinaryIO:
        return self._root().joinpath(name).open("rb")


def find_archive(table, suffix: str) -> Optional[str]:
    """First entry whose name ends with ``suffix``, compared case-insensitively."""
    suffix = suffix.lower()
    for name in table.names():
        if name.lower().endswith(suffix):
            return name
    return None


class PayloadStager:
    def __init__(self, cfg: LauncherConfig, table=None):
        self._cfg = cfg
        self._table = table if table is not None else PackageResources(cfg.resource_package)

    def _missing_script(self) -> Outcome:
        return Outcome.failure(
            OutcomeKind.PAYLOAD_NOT_FOUND,
            f"{self._cfg.script_name} not found in {self._cfg.launcher_dir}. "
            "Please ensure the launcher is in the same folder as the script.",
        )

    def locate(self) -> Outcome:
        """Resolve the ``PayloadSource`` once, before any workspace exists."""
        mode = self._cfg.mode
        script = self._cfg.sibling_script_path
        if mode in ("direct", "auto") and script.is_file():
            log.info(f"Direct mode: {script}")
            return Outcome.success(PayloadSource.sibling(script))
        if mode == "direct":
            return self._missing_script()

        name = find_archive(self._table, self._cfg.archive_suffix)
        if name is None:
            if mode == "auto":
                return self._missing_script()
            return Outcome.failure(
                OutcomeKind.PAYLOAD_NOT_FOUND,
                f"Embedded {self._cfg.archive_name} not found. The launcher needs to be rebuilt.",
            )
        log.info(f"Embedded-archive mode: resource {name}")
        return Outcome.success(PayloadSource.embedded(name, self._table))

    def stage(self, source: PayloadSource, workspace: Optional[pathlib.Path]) -> Outcome:
        """Return ``Outcome.success(path)`` of the file the runtime should get."""
        if source.is_direct:
            if source.path is None or not source.path.is_file():
                return self._missing_script()
            return Outcome.success(source.path)

        if workspace is None:
            raise LauncherError(OutcomeKind.UNEXPECTED, "archive mode needs a workspace")
        target = pathlib.Path(workspace) / self._cfg.archive_name
        try:
            with source.resources.open(source.resource_name) as src, target.open("wb") as dst:
                shutil.copyfileobj(src, dst, CHUNK_SIZE)
        except (KeyError, FileNotFoundError) as e:
            return Outcome.failure(
                OutcomeKind.PAYLOAD_NOT_FOUND,
                f"Embedded resource {source.resource_name} could not be read: {e}",
            )
        log.info(f"Staged {source.resource_name} -> {target} ({target.stat().st_size} bytes)")
        return Outcome.success(target)
