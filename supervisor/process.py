"""
Supervisor: child process launch and wait.

Every child is waited on before the call returns. Nothing is fire-and-forget.
"""

from __future__ import annotations

import logging
import subprocess
from typing import Callable, Optional, Sequence

from wd7launcher.models import BootstrapCommand, ProcessOutcome

log = logging.getLogger(__name__)

# Windows only; 0 keeps Popen happy everywhere else.
CREATE_NO_WINDOW: int = getattr(subprocess, "CREATE_NO_WINDOW", 0)

Runner = Callable[..., subprocess.CompletedProcess]


def probe(argv: Sequence[str], timeout_sec: float = 15.0,
          runner: Optional[Runner] = None) -> ProcessOutcome:
    """Start ``argv`` with no window and no output, and wait for it.

    Only an OS-level start failure counts as "not started"; a non-zero exit
    or a timeout still proves the executable is launchable.
    """
    run = runner or subprocess.run
    try:
        res = run(
            list(argv),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            creationflags=CREATE_NO_WINDOW,
            timeout=timeout_sec,
        )
    except subprocess.TimeoutExpired:
        log.debug(f"Probe {argv[0]} timed out after {timeout_sec}s (killed)")
        return ProcessOutcome(True, error=f"timed out after {timeout_sec}s")
    except OSError as e:
        log.debug(f"Probe {argv[0]} could not start: {e}")
        return ProcessOutcome.not_started(str(e))
    return ProcessOutcome.exited(res.returncode)


class ProcessSupervisor:
    """Runs a ``BootstrapCommand`` attached to the current console."""

    def __init__(self, runner: Optional[Runner] = None):
        self._run = runner or subprocess.run

    def run(self, command: BootstrapCommand, timeout_sec: Optional[float] = None) -> ProcessOutcome:
        log.info(f"Launching {command.executable} (cwd={command.cwd or '.'})")
        try:
            res = self._run(list(command.argv), cwd=command.cwd, timeout=timeout_sec)
        except subprocess.TimeoutExpired:
            log.warning(f"{command.executable} exceeded {timeout_sec}s and was killed")
            return ProcessOutcome(True, error=f"timed out after {timeout_sec}s")
        except OSError as e:
            log.warning(f"{command.executable} could not start: {e}")
            return ProcessOutcome.not_started(str(e))
        log.info(f"{command.executable} exited with code {res.returncode}")
        return ProcessOutcome.exited(res.returncode)
