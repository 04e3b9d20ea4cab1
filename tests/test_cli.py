"""
Tests for the command-line front end.
"""
import signal
import pytest
from pathlib import Path
from luksbak import cli, config as config_module
from luksbak.errors import ArtifactError
from luksbak.util import staging_dir


@pytest.fixture(autouse=True)
def no_system_config(tmp_path, monkeypatch):
    monkeypatch.setattr(config_module, "SYSTEM_CONFIG_PATH", tmp_path / "absent.toml")
    monkeypatch.setattr(cli, "setup_logging", lambda level: None)


@pytest.fixture
def captured_run(monkeypatch):
    seen = {}

    def fake_run_backup(cfg):
        seen["cfg"] = cfg
        return 0

    monkeypatch.setattr(cli, "run_backup", fake_run_backup)
    monkeypatch.setattr(cli.os, "geteuid", lambda: 0)
    monkeypatch.setattr(cli.signal, "signal", lambda *a: None)
    return seen


def test_requires_a_destination(capsys, captured_run):
    assert cli.main([]) == 1
    assert "At least one of --remote-path or --backup-path" in capsys.readouterr().out
    assert "cfg" not in captured_run


def test_destinations_and_overrides_reach_orchestrator(captured_run):
    rc = cli.main([
        "--backup-path", "/mnt/a",
        "--backup-path", "/mnt/b",
        "--remote-path", "root@h:/srv/",
        "--ssh-key", "/root/.ssh/k",
        "--port", "2200",
        "--log-level", "debug",
    ])

    assert rc == 0
    cfg = captured_run["cfg"]
    assert cfg.backup_paths == [Path("/mnt/a"), Path("/mnt/b")]
    assert cfg.remote_paths == ["root@h:/srv/"]
    assert cfg.ssh_key == "/root/.ssh/k"
    assert cfg.port == 2200
    assert cfg.log_level == "DEBUG"


def test_config_file_destinations_are_merged(tmp_path, captured_run):
    cfg_file = tmp_path / "luksbak.toml"
    cfg_file.write_text('[destinations]\nremote_paths = ["a@b:/c/"]\n')

    assert cli.main(["--config", str(cfg_file), "--backup-path", "/mnt/x"]) == 0
    cfg = captured_run["cfg"]
    assert cfg.remote_paths == ["a@b:/c/"]
    assert cfg.backup_paths == [Path("/mnt/x")]


def test_missing_config_file(tmp_path, capsys, captured_run):
    assert cli.main(["--config", str(tmp_path / "nope.toml"), "--backup-path", "/x"]) == 1
    assert "does not exist" in capsys.readouterr().out


def test_invalid_remote_path(captured_run):
    with pytest.raises(SystemExit) as ei:
        cli.main(["--remote-path", "not-a-remote"])
    assert ei.value.code == 1


def test_non_root_exits(monkeypatch, captured_run):
    monkeypatch.setattr(cli.os, "geteuid", lambda: 1000)

    with pytest.raises(SystemExit) as ei:
        cli.main(["--backup-path", "/mnt/a"])
    assert ei.value.code == 1
    assert "cfg" not in captured_run


def test_backup_error_maps_to_exit_1(monkeypatch, captured_run):
    def failing(cfg):
        raise ArtifactError("/dev/sda1", "Backup LUKS header", "boom")

    monkeypatch.setattr(cli, "run_backup", failing)

    assert cli.main(["--backup-path", "/mnt/a"]) == 1


def test_keyboard_interrupt(monkeypatch, capsys, captured_run):
    def interrupted(cfg):
        raise KeyboardInterrupt

    monkeypatch.setattr(cli, "run_backup", interrupted)

    assert cli.main(["--backup-path", "/mnt/a"]) == 130
    assert "No harm done!" in capsys.readouterr().out


def test_list_skips_root_and_destinations(monkeypatch):
    seen = {}
    monkeypatch.setattr(cli, "list_devices", lambda cfg: seen.setdefault("listed", 0))
    monkeypatch.setattr(cli.os, "geteuid", lambda: 1000)

    assert cli.main(["--list"]) == 0
    assert "listed" in seen


def test_bad_config_value_type_exits_1(tmp_path, capsys, captured_run):
    cfg_file = tmp_path / "luksbak.toml"
    cfg_file.write_text("[runtime]\nstaging_parent = 5\n")

    assert cli.main(["--config", str(cfg_file), "--backup-path", "/mnt/a"]) == 1
    assert "runtime.staging_parent" in capsys.readouterr().out
    assert "cfg" not in captured_run


def test_sigterm_handler_exits_143_and_cleans_staging(tmp_path):
    with pytest.raises(SystemExit) as ei:
        with staging_dir(tmp_path) as d:
            (d / "uuid.img.tmp").write_bytes(b"partial")
            cli._raise_on_sigterm(signal.SIGTERM, None)
    assert ei.value.code == 143
    assert not d.exists()
