"""
types.py
Dataclasses used across modules: Config, EncryptedVolume, BackupArtifact,
destinations, ReplicationOutcome and ToolResult.

These are intentionally lightweight, serializable, and stable for logging.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, List, Union


@dataclass
class Config:
    # destinations
    backup_paths: List[Path] = field(default_factory=list)
    remote_paths: List[str] = field(default_factory=list)
    # transfer
    ssh_key: str = ""
    port: int = 22
    # tools
    blkid: str = "blkid"
    cryptsetup: str = "cryptsetup"
    scp: str = "scp"
    # runtime
    log_level: str = "INFO"
    staging_parent: Optional[Path] = None
    # output
    run_summary_dir: Optional[Path] = None

    def destinations(self) -> List["Destination"]:
        """Local destinations first, then remote, each in configured order."""
        out: List[Destination] = [LocalDestination(Path(p)) for p in self.backup_paths]
        out.extend(RemoteDestination(r) for r in self.remote_paths)
        return out


@dataclass(frozen=True)
class EncryptedVolume:
    device_path: str
    uuid: str


@dataclass(frozen=True)
class BackupArtifact:
    uuid: str
    header_path: Path
    dump_path: Path
    content_hash: str

    @property
    def files(self) -> List[Path]:
        return [self.header_path, self.dump_path]


@dataclass(frozen=True)
class LocalDestination:
    path: Path

    def __str__(self) -> str:
        return str(self.path)


@dataclass(frozen=True)
class RemoteDestination:
    endpoint: str

    def __str__(self) -> str:
        return self.endpoint


Destination = Union[LocalDestination, RemoteDestination]


@dataclass
class ReplicationOutcome:
    destination: Destination
    succeeded: bool
    error: Optional[str] = None


@dataclass
class ToolResult:
    command: str
    args: List[str]
    exit_code: int
    stdout: bytes
    stderr: str
