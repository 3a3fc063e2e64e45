"""Values passed between bootstrap stages.

Every stage reports through one of these instead of raising; the pipeline is
the only place that turns an unanticipated fault into ``OutcomeKind.UNEXPECTED``.
"""

from __future__ import annotations

import enum
import pathlib
from dataclasses import dataclass
from typing import Any, Optional, Tuple


class LocationKind(str, enum.Enum):
    NOT_FOUND = "not_found"
    PATH_NAME = "path_name"
    ABSOLUTE_PATH = "absolute_path"


@dataclass(frozen=True)
class RuntimeLocation:
    kind: LocationKind
    value: str = ""

    @classmethod
    def not_found(cls) -> "RuntimeLocation":
        return cls(LocationKind.NOT_FOUND)

    @classmethod
    def path_name(cls, name: str) -> "RuntimeLocation":
        return cls(LocationKind.PATH_NAME, name)

    @classmethod
    def absolute(cls, path: str) -> "RuntimeLocation":
        return cls(LocationKind.ABSOLUTE_PATH, path)

    @property
    def found(self) -> bool:
        return self.kind is not LocationKind.NOT_FOUND


class SourceKind(str, enum.Enum):
    SIBLING_FILE = "sibling_file"
    EMBEDDED_BLOB = "embedded_blob"


@dataclass(frozen=True)
class PayloadSource:
    kind: SourceKind
    path: Optional[pathlib.Path] = None
    resource_name: str = ""
    resources: Any = None

    @classmethod
    def sibling(cls, path: pathlib.Path) -> "PayloadSource":
        return cls(SourceKind.SIBLING_FILE, path=path)

    @classmethod
    def embedded(cls, resource_name: str, resources: Any) -> "PayloadSource":
        return cls(SourceKind.EMBEDDED_BLOB, resource_name=resource_name, resources=resources)

    @property
    def is_direct(self) -> bool:
        return self.kind is SourceKind.SIBLING_FILE


@dataclass(frozen=True)
class BootstrapCommand:
    argv: Tuple[str, ...]
    cwd: Optional[str] = None
    script_body: str = ""

    @property
    def executable(self) -> str:
        return self.argv[0]


@dataclass(frozen=True)
class ProcessOutcome:
    started: bool
    exit_code: Optional[int] = None
    error: str = ""

    @classmethod
    def exited(cls, code: int) -> "ProcessOutcome":
        return cls(True, exit_code=int(code))

    @classmethod
    def not_started(cls, error: str) -> "ProcessOutcome":
        return cls(False, error=error)


class OutcomeKind(str, enum.Enum):
    OK = "ok"
    PAYLOAD_NOT_FOUND = "payload_not_found"
    RUNTIME_NOT_FOUND = "runtime_not_found"
    INSTALL_FAILED = "install_failed"
    RUNTIME_UNLAUNCHABLE = "runtime_unlaunchable"
    UNEXPECTED = "unexpected"


class Severity(str, enum.Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


_SEVERITY = {
    OutcomeKind.OK: Severity.SUCCESS,
    OutcomeKind.PAYLOAD_NOT_FOUND: Severity.ERROR,
    OutcomeKind.RUNTIME_NOT_FOUND: Severity.WARNING,
    OutcomeKind.INSTALL_FAILED: Severity.ERROR,
    OutcomeKind.RUNTIME_UNLAUNCHABLE: Severity.WARNING,
    OutcomeKind.UNEXPECTED: Severity.ERROR,
}


@dataclass(frozen=True)
class Outcome:
    kind: OutcomeKind
    message: str = ""
    value: Any = None
    exit_code: Optional[int] = None

    @classmethod
    def success(cls, value: Any = None, message: str = "", exit_code: Optional[int] = None) -> "Outcome":
        return cls(OutcomeKind.OK, message=message, value=value, exit_code=exit_code)

    @classmethod
    def failure(cls, kind: OutcomeKind, message: str) -> "Outcome":
        return cls(kind, message=message)

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.OK

    @property
    def severity(self) -> Severity:
        return _SEVERITY[self.kind]


class LauncherError(RuntimeError):
    """Fault raised by a helper that the pipeline maps onto an ``Outcome``."""

    def __init__(self, kind: OutcomeKind, message: str):
        self.kind = kind
        super().__init__(message)
