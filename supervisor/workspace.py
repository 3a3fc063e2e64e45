"""
Supervisor: ephemeral per-run workspace.

One uniquely named directory under the temp root per run, removed on every
exit path. Removal is best-effort and never raises.
"""

from __future__ import annotations

import logging
import pathlib
import shutil
import tempfile
from typing import Optional

log = logging.getLogger(__name__)


def create_workspace(prefix: str = "WD7_", root: Optional[str] = None) -> pathlib.Path:
    """Create a fresh directory; ``mkdtemp`` adds the random suffix atomically."""
    if root:
        pathlib.Path(root).mkdir(parents=True, exist_ok=True)
    path = pathlib.Path(tempfile.mkdtemp(prefix=prefix, dir=root or None))
    log.debug(f"Created workspace {path}")
    return path


def cleanup_workspace(path: Optional[pathlib.Path]) -> bool:
    """Remove ``path`` recursively. Returns True when nothing is left behind."""
    if path is None:
        return True
    path = pathlib.Path(path)
    if not path.exists():
        return True
    try:
        shutil.rmtree(path)
    except Exception:
        log.warning(f"Failed to remove workspace {path}", exc_info=True)
        return False
    log.debug(f"Removed workspace {path}")
    return True

