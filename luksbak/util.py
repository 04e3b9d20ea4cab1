"""
util.py
Cross-cutting utilities:
- ToolInvoker: the one place external tools are executed
- Atomic file helpers (temp-then-rename) and directory creation
- Small helpers: content hash, UTC timestamps, hostname, staging directory
"""

from __future__ import annotations
import hashlib, json, os, shlex, shutil, socket, subprocess, tempfile
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional, Sequence
from .errors import ProcessError
from .logging import get_logger
from .types import ToolResult

log = get_logger(source="util")

PRIVATE_FILE_MODE = 0o600
PRIVATE_DIR_MODE = 0o700


class ToolInvoker:
    """
    Execute an external tool and capture its result.
    - Arguments are passed as a list; no shell is involved.
    - Never raises on a non-zero exit; raises ProcessError only when the
      tool cannot be started at all.
    """

    def run(self, command: str, args: Sequence[str]) -> ToolResult:
        cmd_list = [command, *[str(a) for a in args]]
        log.debug("Running: {}", " ".join(shlex.quote(c) for c in cmd_list))
        try:
            proc = subprocess.run(
                cmd_list,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as e:
            raise ProcessError(command, cmd_list[1:], None, str(e)) from e
        return ToolResult(
            command=command,
            args=cmd_list[1:],
            exit_code=proc.returncode,
            stdout=proc.stdout,
            stderr=proc.stderr.decode("utf-8", "replace"),
        )


def run_checked(invoker: ToolInvoker, command: str, args: Sequence[str]) -> ToolResult:
    """Run a tool and raise ProcessError unless it exits 0."""
    result = invoker.run(command, args)
    if result.exit_code != 0:
        raise ProcessError(command, result.args, result.exit_code, result.stderr)
    return result


def ensure_dir(p: Path):
    """Create directory with better error reporting."""
    try:
        p.mkdir(parents=True, exist_ok=True)
    except PermissionError:
        raise PermissionError(f"Cannot create directory {p} - insufficient permissions")
    except OSError as e:
        raise OSError(f"Cannot create directory {p}: {e}")


def temp_name_for(path: Path) -> Path:
    """Hidden sibling used while a file is still being written."""
    return path.parent / f".{path.name}.tmp"


def copy_atomic(src: Path, dest: Path, mode: int = PRIVATE_FILE_MODE) -> Path:
    """
    Copy src to dest so that dest only ever appears complete.
    The copy goes to a hidden temp name first, then os.replace() moves it in.
    """
    tmp = temp_name_for(dest)
    try:
        shutil.copyfile(src, tmp)
        os.chmod(tmp, mode)
        os.replace(tmp, dest)
    finally:
        if tmp.exists():
            tmp.unlink()
    return dest


def write_json(path: Path, obj):
    ensure_dir(path.parent)
    tmp = temp_name_for(path)
    tmp.write_text(json.dumps(obj, indent=2, sort_keys=True, default=str))
    tmp.replace(path)


def short_digest(data: bytes) -> str:
    """First 4 bytes of sha256(data) as 8 lowercase hex characters."""
    return hashlib.sha256(data).digest()[:4].hex()


def utc_datestr(fmt):
    return datetime.now(timezone.utc).strftime(fmt)


def local_hostname() -> str:
    name = socket.gethostname()
    if not name:
        raise OSError("Hostname is empty")
    return name


def is_root() -> bool:
    return os.geteuid() == 0


@contextmanager
def staging_dir(parent: Optional[Path] = None) -> Iterator[Path]:
    """
    Private working directory (mode 0700) for one run.
    Removed on every exit path, including exceptions raised inside the block.
    """
    if parent is not None:
        ensure_dir(parent)
    path = Path(tempfile.mkdtemp(prefix="luksbak-", dir=parent))
    try:
        os.chmod(path, PRIVATE_DIR_MODE)
        log.info("Created temporary directory: {}", path)
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)
        if path.exists():
            log.warning("Could not fully remove temporary directory: {}", path)
        else:
            log.debug("Removed temporary directory: {}", path)
