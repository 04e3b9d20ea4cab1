"""
errors.py
Exception hierarchy for luksbak.

    BackupError (base)
        ├── PrivilegeError     caller cannot read raw device headers
        ├── ConfigError        unusable configuration / no destinations
        ├── ProcessError       external tool could not start or exited non-zero
        ├── DiscoveryError     blkid enumeration unusable
        ├── ArtifactError      header backup, dump, hashing or staging I/O failed
        └── ReplicationError   a single destination failed
"""

from __future__ import annotations
import shlex
from typing import Optional, Sequence


class BackupError(Exception):
    """Base exception for all luksbak failures."""


class PrivilegeError(BackupError):
    """Process lacks the rights needed to read block-device headers."""


class ConfigError(BackupError):
    """Configuration is invalid or incomplete."""


class ProcessError(BackupError):
    """An external tool could not be started or exited with a failure status."""

    def __init__(
        self,
        command: str,
        args: Sequence[str],
        exit_code: Optional[int],
        stderr: str = "",
    ):
        self.command = command
        self.args_list = list(args)
        self.exit_code = exit_code
        self.stderr = stderr
        invocation = " ".join(shlex.quote(c) for c in [command, *self.args_list])
        if exit_code is None:
            msg = f"Failed to execute {invocation}"
        else:
            msg = f"Command {invocation} failed with exit code {exit_code}"
        if stderr.strip():
            msg += f": stderr: {stderr.strip()}"
        super().__init__(msg)


class DiscoveryError(BackupError):
    """Encrypted volume enumeration failed."""


class ArtifactError(BackupError):
    """Building the backup artifact for one device failed."""

    def __init__(self, device: str, step: str, cause: Exception | str):
        self.device = device
        self.step = step
        self.cause = cause
        super().__init__(f"{step} for {device}: {cause}")


class ReplicationError(BackupError):
    """Copying artifacts to one destination failed."""

    def __init__(self, destination: str, reason: str):
        self.destination = destination
        self.reason = reason
        super().__init__(f"Replication to {destination} failed: {reason}")
