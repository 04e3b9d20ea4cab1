"""
replicator.py
Copy finished artifacts to every destination.
- Local directories: copy to a hidden temp name, chmod 0600, rename into place
- Remote endpoints: one scp call per endpoint, host key checking on, no prompts
Each destination gets its own ReplicationOutcome; one failure never stops the rest.
"""

from __future__ import annotations
from pathlib import Path
from typing import List, Sequence
from .errors import ProcessError, ReplicationError
from .logging import get_logger
from .types import (
    BackupArtifact,
    Config,
    Destination,
    LocalDestination,
    RemoteDestination,
    ReplicationOutcome,
)
from .util import ToolInvoker, copy_atomic, ensure_dir, run_checked

log = get_logger(source="replicator")

SCP_SAFETY_OPTS = ["-o", "StrictHostKeyChecking=yes", "-o", "BatchMode=yes"]


def copy_to_local(artifacts: Sequence[BackupArtifact], dest: Path) -> None:
    """Copy every artifact file into dest; raises ReplicationError listing what failed."""
    log.info("Backing up to local path: {}", dest)
    try:
        ensure_dir(dest)
    except OSError as e:
        raise ReplicationError(str(dest), str(e)) from e

    errors: List[str] = []
    for a in artifacts:
        try:
            for src in a.files:
                copy_atomic(src, dest / src.name)
        except OSError as e:
            log.error("Copy of {} to {} failed: {}", a.uuid, dest, e)
            errors.append(f"{a.uuid}: {e}")
            continue
        log.info("Saved backup for {} to {}", a.uuid, dest / a.header_path.name)
    if errors:
        raise ReplicationError(str(dest), "; ".join(errors))


def scp_args(cfg: Config, files: Sequence[Path], endpoint: str) -> List[str]:
    args = list(SCP_SAFETY_OPTS)
    if cfg.ssh_key:
        args += ["-i", cfg.ssh_key]
    if cfg.port != 22:
        args += ["-P", str(cfg.port)]
    args += [str(f) for f in files]
    args.append(endpoint)
    return args


def push_to_remote(
    invoker: ToolInvoker, cfg: Config, artifacts: Sequence[BackupArtifact], endpoint: str
) -> None:
    log.info("Pushing to remote: {}", endpoint)
    files = [f for a in artifacts for f in a.files]
    try:
        run_checked(invoker, cfg.scp, scp_args(cfg, files, endpoint))
    except ProcessError as e:
        raise ReplicationError(endpoint, str(e)) from e
    log.info("Copy successful to {}", endpoint)


def replicate(
    invoker: ToolInvoker,
    cfg: Config,
    artifacts: Sequence[BackupArtifact],
    destinations: Sequence[Destination],
) -> List[ReplicationOutcome]:
    outcomes: List[ReplicationOutcome] = []
    for d in destinations:
        try:
            if isinstance(d, LocalDestination):
                copy_to_local(artifacts, d.path)
            elif isinstance(d, RemoteDestination):
                push_to_remote(invoker, cfg, artifacts, d.endpoint)
            else:
                raise TypeError(f"Unknown destination type: {d!r}")
        except ReplicationError as e:
            log.error("{}", e)
            outcomes.append(ReplicationOutcome(d, False, e.reason))
            continue
        outcomes.append(ReplicationOutcome(d, True))
    return outcomes


def all_succeeded(outcomes: Sequence[ReplicationOutcome]) -> bool:
    return all(o.succeeded for o in outcomes)
