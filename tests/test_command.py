import pathlib

import pytest

from wd7launcher.command import (
    CommandBuilder,
    archive_script,
    decode_command,
    encode_command,
    ps_literal,
)
from wd7launcher.models import PayloadSource, RuntimeLocation

from conftest import FALLBACK, MemoryResources


@pytest.mark.parametrize("body", [
    "Write-Host 'single' \"double\"; exit 0",
    "$x = \"a;b\"; Write-Host $x; Write-Host 'it''s'",
    "Write-Host 'Überprüfung – données – 初期化 \U0001F680'",
    "",
])
def test_encoded_command_round_trips(body):
    encoded = encode_command(body)
    assert encoded.isascii()
    assert " " not in encoded and '"' not in encoded and "'" not in encoded
    assert decode_command(encoded) == body
    assert decode_command(encoded).encode("utf-16-le") == body.encode("utf-16-le")


def test_encoding_is_base64_of_utf16le():
    # Known value: PowerShell's own [Convert]::ToBase64String([Text.Encoding]::Unicode.GetBytes('dir'))
    assert encode_command("dir") == "ZABpAHIA"


def test_ps_literal_doubles_single_quotes():
    assert ps_literal("C:\\Users\\O'Brien\\x") == "'C:\\Users\\O''Brien\\x'"


def test_archive_script_steps_in_order():
    body = archive_script(pathlib.Path("/tmp/WD7_ab/payload.zip"), pathlib.Path("/tmp/WD7_ab"), "Win-Debloat7.ps1")
    steps = [s.strip() for s in body.split("; ") if s.strip()]
    assert steps[0] == "$progressPreference='SilentlyContinue'"
    assert steps[1].startswith("Write-Host") and "Initializing Win-Debloat7" in steps[1]
    assert steps[2].startswith("Expand-Archive -LiteralPath '/tmp/WD7_ab/payload.zip'")
    assert steps[2].endswith("-DestinationPath '/tmp/WD7_ab' -Force")
    assert steps[3] == "Set-Location -LiteralPath '/tmp/WD7_ab'"
    assert steps[4] == "& './Win-Debloat7.ps1';"


class TestCommandBuilder:
    def test_direct_mode_argv(self, cfg, tmp_path):
        script = tmp_path / "app" / "Win-Debloat7.ps1"
        builder = CommandBuilder(cfg, exists=lambda p: False)
        cmd = builder.build(RuntimeLocation.path_name("pwsh"), None, PayloadSource.sibling(script), script)
        assert cmd.argv == ("pwsh", "-NoProfile", "-ExecutionPolicy", "Bypass", "-File", str(script))
        assert cmd.cwd is None
        assert cmd.script_body == ""

    def test_archive_mode_passes_single_encoded_argument(self, cfg, tmp_path):
        ws = tmp_path / "WD7_x'y"
        archive = ws / "payload.zip"
        source = PayloadSource.embedded("payload.zip", MemoryResources({"payload.zip": b""}))
        cmd = CommandBuilder(cfg, exists=lambda p: False).build(RuntimeLocation.path_name("pwsh"), ws, source, archive)
        assert cmd.argv[:5] == ("pwsh", "-NoProfile", "-ExecutionPolicy", "Bypass", "-EncodedCommand")
        assert len(cmd.argv) == 6
        assert decode_command(cmd.argv[5]) == cmd.script_body
        assert "WD7_x''y" in cmd.script_body
        assert cmd.cwd == str(ws)

    def test_absolute_location_used_verbatim(self, cfg):
        builder = CommandBuilder(cfg, exists=lambda p: False)
        assert builder.executable(RuntimeLocation.absolute(r"E:\ps\pwsh.exe")) == r"E:\ps\pwsh.exe"

    def test_stale_path_after_install_prefers_fallback(self, cfg):
        builder = CommandBuilder(cfg, exists=lambda p: p == FALLBACK)
        assert builder.executable(RuntimeLocation.not_found()) == FALLBACK

    def test_not_found_without_fallback_uses_bare_name(self, cfg):
        builder = CommandBuilder(cfg, exists=lambda p: False)
        assert builder.executable(RuntimeLocation.not_found()) == "pwsh"

    def test_path_name_kept_when_probe_succeeded(self, cfg):
        builder = CommandBuilder(cfg, exists=lambda p: True)
        assert builder.executable(RuntimeLocation.path_name("pwsh")) == "pwsh"
