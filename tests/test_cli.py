import json

import pytest

from wd7launcher import cli
from wd7launcher.cli import EXIT_LAUNCHER_FAILURE, build_parser, exit_code_for, main
from wd7launcher.models import Outcome, OutcomeKind, RuntimeLocation
from wd7launcher.resolver import RuntimeResolver


@pytest.fixture
def app(tmp_path, monkeypatch):
    base = tmp_path / "app"
    base.mkdir()
    cfg_path = tmp_path / "cfg.json"
    cfg_path.write_text(json.dumps({
        "base_dir": str(base),
        "workspace_root": str(tmp_path / "tmp"),
        "pause_on_error": False,
    }), encoding="utf-8")
    monkeypatch.setenv("WD7_CONFIG", str(cfg_path))
    monkeypatch.setattr(RuntimeResolver, "resolve", lambda self: RuntimeLocation.path_name("pwsh"))
    return base


def test_exit_code_mapping():
    assert exit_code_for(Outcome.success(exit_code=7)) == 7
    assert exit_code_for(Outcome.success(exit_code=None)) == 0
    for kind in OutcomeKind:
        if kind is not OutcomeKind.OK:
            assert exit_code_for(Outcome.failure(kind, "x")) == EXIT_LAUNCHER_FAILURE


def test_parser_flags():
    args = build_parser().parse_args(["--mode", "direct", "--no-install", "--no-pause", "-v"])
    cfg = cli.apply_args(cli.LauncherConfig(), args)
    assert cfg.mode == "direct"
    assert cfg.install_enabled is False
    assert cfg.pause_on_error is False
    assert cfg.log_level == "DEBUG"


def test_dry_run_direct_mode(app, capsys):
    (app / "Win-Debloat7.ps1").write_text("Write-Host hi", encoding="utf-8")
    assert main(["--dry-run", "--no-pause"]) == 0
    out = capsys.readouterr().out
    assert "-NoProfile" in out
    assert "-File" in out


def test_missing_payload_exit_code(app, capsys):
    assert main(["--mode", "direct", "--no-pause"]) == EXIT_LAUNCHER_FAILURE
    assert "Win-Debloat7.ps1 not found" in capsys.readouterr().out


def test_bad_config_path(tmp_path, capsys):
    assert main(["--config", str(tmp_path / "missing.json")]) == EXIT_LAUNCHER_FAILURE
    assert "configuration error" in capsys.readouterr().err


def test_interrupt_at_pause_prompt_exits_130(app, monkeypatch):
    def interrupted(self, outcome):
        raise KeyboardInterrupt

    monkeypatch.setattr(cli.Reporter, "finish", interrupted)
    assert main(["--mode", "direct"]) == cli.EXIT_INTERRUPTED
