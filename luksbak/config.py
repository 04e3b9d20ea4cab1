"""
config.py
Load and validate configuration from TOML (Python 3.11+ tomllib).
Search order:
  1) explicit --config path (must exist)
  2) /etc/luksbak.toml
  3) built-in defaults when neither exists
"""

from __future__ import annotations
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional
from .errors import ConfigError
from .logging import VALID_LEVELS
from .types import Config

SYSTEM_CONFIG_PATH = Path("/etc/luksbak.toml")


def _gv(d: Dict[str, Any], path: list[str], default=None):
    cur = d
    for k in path:
        if not isinstance(cur, dict) or k not in cur:
            return default
        cur = cur[k]
    return cur


def _load_toml(path: Path) -> Dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _optional_path(value) -> Optional[Path]:
    return Path(value) if value else None


def is_remote_endpoint(spec: str) -> bool:
    """scp endpoints need a host part: user@host:/path/"""
    return ":" in spec


def find_config(path_arg: str | None) -> Path | None:
    """Pick the config path based on CLI arg and availability; None means defaults."""
    if path_arg:
        # User explicitly specified a config - it must exist
        p = Path(path_arg)
        if not p.exists():
            raise FileNotFoundError(f"Specified config file does not exist: {path_arg}")
        return p
    if SYSTEM_CONFIG_PATH.exists():
        return SYSTEM_CONFIG_PATH
    return None


def load_config(path: Path | None) -> Config:
    if path is None:
        return Config()
    try:
        cfg = _load_toml(path)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    def gv(keys, default=None):
        return _gv(cfg, keys, default)

    def gs(keys, default=""):
        v = gv(keys, default)
        if not isinstance(v, str):
            raise ConfigError(f"{'.'.join(keys)} must be a string, got {v!r}")
        return v

    def gl(keys):
        v = gv(keys, [])
        if not isinstance(v, list) or not all(isinstance(x, str) for x in v):
            raise ConfigError(f"{'.'.join(keys)} must be a list of strings, got {v!r}")
        return v

    backup_paths = gl(["destinations", "backup_paths"])
    remote_paths = gl(["destinations", "remote_paths"])
    bad_remotes = [r for r in remote_paths if not is_remote_endpoint(r)]
    if bad_remotes:
        raise ConfigError(
            f"destinations.remote_paths must look like user@host:/path/, invalid: {', '.join(bad_remotes)}"
        )

    try:
        port = int(gv(["transfer", "port"], 22))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"transfer.port must be an integer: {e}") from e
    if not 0 < port < 65536:
        raise ConfigError(f"transfer.port out of range: {port}")

    log_level = gs(["runtime", "log_level"], "INFO").upper()
    if log_level not in VALID_LEVELS:
        raise ConfigError(f"runtime.log_level must be one of {', '.join(VALID_LEVELS)}, got {log_level}")

    return Config(
        backup_paths=[Path(p) for p in backup_paths],
        remote_paths=list(remote_paths),
        ssh_key=gs(["transfer", "ssh_key"], ""),
        port=port,
        blkid=gs(["tools", "blkid"], "blkid"),
        cryptsetup=gs(["tools", "cryptsetup"], "cryptsetup"),
        scp=gs(["tools", "scp"], "scp"),
        log_level=log_level,
        staging_parent=_optional_path(gs(["runtime", "staging_parent"], "")),
        run_summary_dir=_optional_path(gs(["output", "run_summary_dir"], "")),
    )
