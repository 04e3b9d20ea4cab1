"""
orchestrator.py
Coordinates the end-to-end flow:
  - Require root, resolve hostname, open a private staging directory
  - Discover LUKS volumes (at least one required)
  - Build every artifact (any failure aborts the run before replication)
  - Replicate to all destinations and report which ones failed
  - Optionally write a run summary JSON
"""

from __future__ import annotations
import time
from datetime import datetime, timezone
from typing import List, Optional, Sequence
from .artifacts import build_artifact
from .discover import discover_luks_devices, print_plan, to_volumes
from .errors import ConfigError, DiscoveryError, PrivilegeError
from .logging import get_logger
from .replicator import all_succeeded, replicate
from .types import BackupArtifact, Config, ReplicationOutcome
from .util import ToolInvoker, is_root, local_hostname, staging_dir, utc_datestr, write_json

log = get_logger(source="orchestrator")


def run_summary(
    hostname: str,
    started: datetime,
    duration: float,
    artifacts: Sequence[BackupArtifact],
    outcomes: Sequence[ReplicationOutcome],
) -> dict:
    return {
        "host": hostname,
        "started_utc": started.isoformat(),
        "duration_sec": round(duration, 2),
        "artifacts": [
            {
                "uuid": a.uuid,
                "content_hash": a.content_hash,
                "files": [f.name for f in a.files],
            }
            for a in artifacts
        ],
        "outcomes": [
            {"destination": str(o.destination), "succeeded": o.succeeded, "error": o.error}
            for o in outcomes
        ],
        "success": all_succeeded(outcomes),
    }


def list_devices(cfg: Config, invoker: Optional[ToolInvoker] = None) -> int:
    invoker = invoker or ToolInvoker()
    print_plan(to_volumes(discover_luks_devices(invoker, cfg.blkid)))
    return 0


def run_backup(cfg: Config, invoker: Optional[ToolInvoker] = None) -> int:
    invoker = invoker or ToolInvoker()
    if not is_root():
        raise PrivilegeError("This program must be run as root")

    hostname = local_hostname()
    log.info("Hostname: {}", hostname)
    started = datetime.now(timezone.utc)
    start = time.time()

    with staging_dir(cfg.staging_parent) as staging:
        vols = to_volumes(discover_luks_devices(invoker, cfg.blkid))
        if not vols:
            raise DiscoveryError("Expected to find at least one LUKS device to backup header.")
        log.info("Found {} LUKS devices", len(vols))

        artifacts: List[BackupArtifact] = [
            build_artifact(invoker, v.device_path, v.uuid, hostname, staging, cfg.cryptsetup)
            for v in vols
        ]

        destinations = cfg.destinations()
        if not destinations:
            raise ConfigError("At least one of --remote-path or --backup-path must be provided.")

        outcomes = replicate(invoker, cfg, artifacts, destinations)

    if cfg.run_summary_dir is not None:
        ts = utc_datestr("%Y%m%d-%H%M%S")
        summary = run_summary(hostname, started, time.time() - start, artifacts, outcomes)
        try:
            write_json(cfg.run_summary_dir / f"run-{ts}.json", summary)
        except OSError as e:
            log.warning("Could not write run summary to {}: {}", cfg.run_summary_dir, e)

    failed = [o for o in outcomes if not o.succeeded]
    if failed:
        log.error(
            "{} of {} destination(s) failed: {}",
            len(failed),
            len(outcomes),
            ", ".join(str(o.destination) for o in failed),
        )
        return 1
    log.success("Backup process completed successfully")
    return 0
