"""
Pytest configuration and shared fixtures.
"""
import sys
import pytest
from pathlib import Path
from luksbak.logging import logger
from luksbak.types import Config, ToolResult


SAMPLE_BLKID_EXPORT = """
DEVNAME=/dev/sda1
UUID=12345678-1234-1234-1234-123456789abc
TYPE=crypto_LUKS

DEVNAME=/dev/sda2
UUID=abcdef12-3456-7890-abcd-ef1234567890
TYPE=ext4

DEVNAME=/dev/sdb1
UUID=87654321-4321-4321-4321-876543210fed
TYPE=crypto_LUKS
"""


class FakeInvoker:
    """
    Stands in for ToolInvoker. Emulates blkid, cryptsetup and scp:
    - blkid prints `blkid_output`
    - luksHeaderBackup writes headers[device] to the backup file
    - luksDump prints a dump naming the file
    - scp exits with scp_exit[endpoint] (0 by default)
    """

    def __init__(self, blkid_output=SAMPLE_BLKID_EXPORT, headers=None):
        self.blkid_output = blkid_output
        self.blkid_exit = 0
        self.headers = headers or {}
        self.fail = {}  # subcommand -> (exit_code, stderr)
        self.scp_exit = {}
        self.calls = []

    def run(self, command, args):
        args = [str(a) for a in args]
        self.calls.append((command, args))
        if command == "blkid":
            return ToolResult(command, args, self.blkid_exit, self.blkid_output.encode(), "")
        if command == "cryptsetup":
            sub = args[0]
            if sub in self.fail:
                code, err = self.fail[sub]
                return ToolResult(command, args, code, b"", err)
            if sub == "luksHeaderBackup":
                device, target = args[1], Path(args[3])
                target.write_bytes(self.headers.get(device, b"LUKS\xba\xbe" + device.encode()))
                return ToolResult(command, args, 0, b"", "")
            if sub == "luksDump":
                return ToolResult(command, args, 0, f"LUKS header information for {args[1]}\n".encode(), "")
        if command == "scp":
            code = self.scp_exit.get(args[-1], 0)
            err = "" if code == 0 else "Host key verification failed."
            return ToolResult(command, args, code, b"", err)
        raise AssertionError(f"unexpected command {command} {args}")

    def calls_for(self, command):
        return [a for c, a in self.calls if c == command]


@pytest.fixture
def fake_invoker():
    return FakeInvoker()


@pytest.fixture
def staging(tmp_path):
    d = tmp_path / "staging"
    d.mkdir()
    return d


@pytest.fixture
def sample_config(tmp_path):
    """Configuration with one local and one remote destination."""
    return Config(
        backup_paths=[tmp_path / "backups"],
        remote_paths=["root@backup.example:/srv/luks/"],
        staging_parent=tmp_path / "spool",
    )


@pytest.fixture
def as_root(monkeypatch):
    monkeypatch.setattr("luksbak.util.os.geteuid", lambda: 0)


@pytest.fixture(autouse=True)
def reset_loguru():
    """Drop sinks a test added so none outlives captured streams."""
    yield
    logger.remove()
    logger.add(sys.stderr, level="DEBUG")


@pytest.fixture
def log_records():
    """Collect loguru records emitted during the test."""
    records = []
    handler_id = logger.add(lambda m: records.append(m.record), level="TRACE")
    yield records
    logger.remove(handler_id)
