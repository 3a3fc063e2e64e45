import json
import os
import sys
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple


DEFAULT_CONFIG_NAME = "wd7launcher.config.json"
MODES = {"direct", "embedded", "auto"}
SHIM_NAME = "bootstrap_shim.py"


def _default_base_dir() -> str:
    """Where a direct-mode script is expected when ``base_dir`` is unset.

    Frozen builds use the exe's folder and the shim uses its own folder.
    ``python -m wd7launcher`` and the console script use the working directory.
    """
    if getattr(sys, "frozen", False):
        return str(Path(sys.executable).resolve().parent)
    main_file = getattr(sys.modules.get("__main__"), "__file__", None) or ""
    if main_file and Path(main_file).name == SHIM_NAME:
        return str(Path(main_file).resolve().parent)
    return str(Path.cwd())


@dataclass(frozen=True)
class LauncherConfig:
    runtime_name: str = "pwsh"
    runtime_fallback_path: str = r"C:\Program Files\PowerShell\7\pwsh.exe"
    probe_args: Tuple[str, ...] = ("-?",)
    installer_host: str = "powershell.exe"
    install_script_url: str = "https://aka.ms/install-powershell.ps1"
    install_enabled: bool = True
    install_preflight: bool = True
    mode: str = "auto"
    script_name: str = "Win-Debloat7.ps1"
    archive_suffix: str = ".zip"
    archive_name: str = "payload.zip"
    resource_package: str = "wd7launcher.payload"
    workspace_prefix: str = "WD7_"
    workspace_root: str = ""
    base_dir: str = ""
    pause_on_error: bool = True
    download_page_url: str = "https://github.com/PowerShell/PowerShell/releases"
    open_download_page: Optional[bool] = None
    probe_timeout_sec: int = 15
    install_timeout_sec: int = 900
    log_level: str = "WARNING"

    @property
    def launcher_dir(self) -> Path:
        return Path(self.base_dir or _default_base_dir())

    @property
    def download_page_wanted(self) -> bool:
        """Unset means: offer it whenever the launcher will not install itself."""
        if self.open_download_page is None:
            return not self.install_enabled
        return bool(self.open_download_page)

    @property
    def sibling_script_path(self) -> Path:
        return self.launcher_dir / self.script_name

    def with_overrides(self, **changes: Any) -> "LauncherConfig":
        changes = {k: v for k, v in changes.items() if v is not None}
        if "mode" in changes:
            changes["mode"] = _mode(changes["mode"])
        return replace(self, **changes)


def _int(data: Dict[str, Any], key: str, default: int, minimum: int = 0) -> int:
    try:
        val = int(data.get(key, default))
    except Exception:
        val = default
    return max(minimum, val)


def _bool(data: Dict[str, Any], key: str, default: bool) -> bool:
    val = data.get(key, default)
    if isinstance(val, str):
        return val.strip().lower() in {"1", "true", "yes", "on"}
    return bool(val)


def _str(data: Dict[str, Any], key: str, default: str) -> str:
    val = str(data.get(key, default) or "").strip()
    return val or default


def _mode(value: Any) -> str:
    mode = str(value or "auto").strip().lower() or "auto"
    if mode not in MODES:
        raise ValueError(f"mode must be one of: {', '.join(sorted(MODES))}")
    return mode


def _env_flag(name: str) -> bool:
    return str(os.environ.get(name, "")).strip().lower() in {"1", "true", "yes", "on"}


def _apply_env(cfg: LauncherConfig) -> LauncherConfig:
    runtime_path = os.environ.get("WD7_RUNTIME_PATH", "").strip()
    log_level = os.environ.get("WD7_LOG_LEVEL", "").strip().upper()
    return cfg.with_overrides(
        runtime_fallback_path=runtime_path or None,
        install_enabled=False if _env_flag("WD7_NO_INSTALL") else None,
        pause_on_error=False if _env_flag("WD7_NO_PAUSE") else None,
        log_level=log_level or None,
    )


def load_launcher_config(path: Optional[str] = None) -> LauncherConfig:
    explicit = path or os.environ.get("WD7_CONFIG")
    if explicit:
        cfg_path = Path(explicit).expanduser().resolve()
        if not cfg_path.exists():
            raise FileNotFoundError(f"Config file not found: {cfg_path}")
    else:
        cfg_path = Path(_default_base_dir()) / DEFAULT_CONFIG_NAME

    data: Dict[str, Any] = {}
    if cfg_path.exists():
        data = json.loads(cfg_path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Config root must be an object: {cfg_path}")

    d = LauncherConfig()
    probe_args = data.get("probe_args", list(d.probe_args))
    if isinstance(probe_args, str):
        probe_args = [probe_args]
    if not isinstance(probe_args, (list, tuple)):
        raise ValueError("probe_args must be a string or a list of strings")

    base_dir = str(data.get("base_dir") or "").strip()
    workspace_root = str(data.get("workspace_root") or "").strip()

    cfg = LauncherConfig(
        runtime_name=_str(data, "runtime_name", d.runtime_name),
        runtime_fallback_path=_str(data, "runtime_fallback_path", d.runtime_fallback_path),
        probe_args=tuple(str(a) for a in probe_args),
        installer_host=_str(data, "installer_host", d.installer_host),
        install_script_url=_str(data, "install_script_url", d.install_script_url),
        install_enabled=_bool(data, "install_enabled", d.install_enabled),
        install_preflight=_bool(data, "install_preflight", d.install_preflight),
        mode=_mode(data.get("mode", d.mode)),
        script_name=_str(data, "script_name", d.script_name),
        archive_suffix=_str(data, "archive_suffix", d.archive_suffix),
        archive_name=_str(data, "archive_name", d.archive_name),
        resource_package=_str(data, "resource_package", d.resource_package),
        workspace_prefix=_str(data, "workspace_prefix", d.workspace_prefix),
        workspace_root=str(Path(workspace_root).expanduser().resolve()) if workspace_root else "",
        base_dir=str(Path(base_dir).expanduser().resolve()) if base_dir else "",
        pause_on_error=_bool(data, "pause_on_error", d.pause_on_error),
        download_page_url=_str(data, "download_page_url", d.download_page_url),
        open_download_page=(None if data.get("open_download_page") is None
                            else _bool(data, "open_download_page", False)),
        probe_timeout_sec=_int(data, "probe_timeout_sec", d.probe_timeout_sec, minimum=1),
        install_timeout_sec=_int(data, "install_timeout_sec", d.install_timeout_sec, minimum=60),
        log_level=_str(data, "log_level", d.log_level).upper(),
    )
    return _apply_env(cfg)
