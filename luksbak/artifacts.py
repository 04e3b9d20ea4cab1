"""
artifacts.py
Build the per-device backup artifact inside the staging directory:
  cryptsetup luksHeaderBackup -> <uuid>.img.tmp
  cryptsetup luksDump         -> <uuid>.txt.tmp
  sha256(header)[:8]          -> canonical names, renamed in place, mode 0600
"""

from __future__ import annotations
import hashlib, os
from pathlib import Path
from .errors import ArtifactError, ProcessError
from .logging import get_logger
from .types import BackupArtifact
from .util import PRIVATE_FILE_MODE, ToolInvoker, run_checked, short_digest

log = get_logger(source="artifacts")

ARTIFACT_PREFIX = "luks_header_backup"


def artifact_filename(hostname: str, uuid: str, content_hash: str, ext: str) -> str:
    return f"{ARTIFACT_PREFIX}.{hostname}.{uuid}.{content_hash}.{ext}"


def build_artifact(
    invoker: ToolInvoker,
    device: str,
    uuid: str,
    hostname: str,
    staging: Path,
    cryptsetup: str = "cryptsetup",
) -> BackupArtifact:
    log.info("Creating backup artifacts for device {} with UUID {}", device, uuid)
    tmp_img = staging / f"{uuid}.img.tmp"
    tmp_txt = staging / f"{uuid}.txt.tmp"

    try:
        run_checked(
            invoker,
            cryptsetup,
            ["luksHeaderBackup", device, "--header-backup-file", str(tmp_img)],
        )
    except ProcessError as e:
        raise ArtifactError(device, "Backup LUKS header", e) from e

    try:
        dump = run_checked(invoker, cryptsetup, ["luksDump", str(tmp_img)])
    except ProcessError as e:
        raise ArtifactError(device, "Dump LUKS header", e) from e

    try:
        tmp_txt.write_bytes(dump.stdout)
    except OSError as e:
        raise ArtifactError(device, "Write luksDump output", e) from e

    try:
        header = tmp_img.read_bytes()
    except OSError as e:
        raise ArtifactError(device, "Read header backup", e) from e
    content_hash = short_digest(header)
    log.debug("Computed SHA256 hash: {}", hashlib.sha256(header).hexdigest())

    img_path = staging / artifact_filename(hostname, uuid, content_hash, "img")
    txt_path = staging / artifact_filename(hostname, uuid, content_hash, "txt")
    try:
        os.replace(tmp_img, img_path)
        os.replace(tmp_txt, txt_path)
        os.chmod(img_path, PRIVATE_FILE_MODE)
        os.chmod(txt_path, PRIVATE_FILE_MODE)
    except OSError as e:
        raise ArtifactError(device, "Finalize artifact files", e) from e

    log.info("Saved header to {}", img_path)
    log.info("Saved header dump to {}", txt_path)
    return BackupArtifact(uuid, img_path, txt_path, content_hash)
