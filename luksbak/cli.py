#!/usr/bin/env python3
"""
cli.py
Command-line interface for luksbak.
Parses arguments, loads config, sets up logging, and invokes the orchestrator.
"""
from __future__ import annotations
import argparse, os, signal, sys
from pathlib import Path
from .config import SYSTEM_CONFIG_PATH, find_config, is_remote_endpoint, load_config
from .errors import BackupError
from .logging import VALID_LEVELS, get_logger, setup_logging
from .orchestrator import list_devices, run_backup

log = get_logger(source="cli")


def check_root_access() -> None:
    """Check if running as root; reading LUKS headers needs raw device access."""
    if os.geteuid() != 0:
        print("❌ Error: luksbak must be run as root to read LUKS headers from block devices")
        print(f"💡 Hint: sudo {' '.join(sys.argv)}")
        sys.exit(1)


def validate_arguments(args) -> None:
    """Validate CLI arguments and provide helpful error messages."""
    if args.port is not None and not 0 < args.port < 65536:
        print(f"❌ Error: --port must be between 1 and 65535, got {args.port}")
        sys.exit(1)

    bad_remotes = [r for r in args.remote_path if not is_remote_endpoint(r)]
    if bad_remotes:
        print(f"❌ Error: --remote-path must look like user@host:/path/, invalid: {', '.join(bad_remotes)}")
        print("💡 Hint: Try --remote-path root@backup.example:/srv/luks/")
        sys.exit(1)


def _raise_on_sigterm(signum, frame):
    # unwind through the staging directory context manager
    sys.exit(128 + signum)


def main(argv=None) -> int:
    try:
        ap = argparse.ArgumentParser(
            description="luksbak: back up LUKS headers to local and remote destinations",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="\nThis tool requires root privileges to read LUKS headers.",
        )
        ap.add_argument(
            "--config",
            default=None,
            help=f"path to luksbak.toml (default: {SYSTEM_CONFIG_PATH} if present)",
        )
        ap.add_argument(
            "--backup-path",
            action="append",
            default=[],
            help="local directory to back up headers to (repeatable)",
        )
        ap.add_argument(
            "--remote-path",
            action="append",
            default=[],
            help="remote scp destination, e.g. root@host:/backup/dir/ (repeatable)",
        )
        ap.add_argument("--ssh-key", default=None, help="identity file passed to scp -i")
        ap.add_argument("--port", type=int, default=None, help="ssh port for scp")
        ap.add_argument(
            "--log-level",
            type=str.upper,
            choices=VALID_LEVELS,
            default=None,
            help="log verbosity (default: INFO)",
        )
        ap.add_argument("--list", action="store_true", help="show discovered LUKS devices and exit")

        args = ap.parse_args(argv)

        validate_arguments(args)

        # Find and load config with error handling
        try:
            cfg_path = find_config(args.config)
            cfg = load_config(cfg_path)
        except FileNotFoundError as e:
            print(f"❌ Error: {e}")
            print("💡 Hint: Check the path passed to --config")
            return 1
        except BackupError as e:
            print(f"❌ Error: {e}")
            return 1

        cfg.backup_paths.extend(Path(p) for p in args.backup_path)
        cfg.remote_paths.extend(args.remote_path)
        if args.ssh_key:
            cfg.ssh_key = args.ssh_key
        if args.port is not None:
            cfg.port = args.port
        if args.log_level:
            cfg.log_level = args.log_level

        setup_logging(cfg.log_level)
        log.debug("{}", cfg)

        if args.list:
            return list_devices(cfg)

        if not cfg.backup_paths and not cfg.remote_paths:
            print("❌ Error: At least one of --remote-path or --backup-path must be provided.")
            print("💡 Hint: Add them on the command line or under [destinations] in the config file")
            return 1

        check_root_access()
        signal.signal(signal.SIGTERM, _raise_on_sigterm)

        return run_backup(cfg)

    except KeyboardInterrupt:
        print("\n\n⚡ Interrupted by user. No harm done!")
        return 130
    except BackupError as e:
        log.error("{}", e)
        return 1
    except OSError as e:
        log.error("Unexpected I/O error: {}", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
