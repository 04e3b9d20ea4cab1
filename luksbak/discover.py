"""
discover.py
Encrypted volume discovery:
- Enumerate block devices with `blkid -o export`
- Keep records whose TYPE is crypto_LUKS and that carry DEVNAME and UUID
- Print the discovery plan for --list
"""

from __future__ import annotations
import re
from typing import Dict, List
from .errors import DiscoveryError, ProcessError
from .logging import get_logger
from .types import EncryptedVolume
from .util import ToolInvoker

log = get_logger(source="discover")

LUKS_TYPE = "crypto_LUKS"
# blkid exits 2 when it finds no tokens at all
BLKID_NOTHING_FOUND = 2

_RECORD_SEP = re.compile(r"\n[ \t]*\n")


def _parse_record(segment: str) -> Dict[str, str]:
    ans = {}
    for line in segment.splitlines():
        if "=" in line:
            k, v = line.split("=", 1)
            ans[k.strip()] = v.strip()
    return ans


def parse_blkid_export(text: str) -> Dict[str, str]:
    """Map device path -> UUID for every LUKS record in blkid export output."""
    result: Dict[str, str] = {}
    for segment in _RECORD_SEP.split(text):
        rec = _parse_record(segment)
        if rec.get("TYPE") != LUKS_TYPE:
            continue
        dev, uuid = rec.get("DEVNAME"), rec.get("UUID")
        if not dev or not uuid:
            log.warning("Found LUKS device but missing expected fields DEVNAME and UUID: {}", rec)
            continue
        log.debug("Found LUKS device {} with UUID {}", dev, uuid)
        result[dev] = uuid
    return result


def discover_luks_devices(invoker: ToolInvoker, blkid: str = "blkid") -> Dict[str, str]:
    try:
        res = invoker.run(blkid, ["-o", "export"])
    except ProcessError as e:
        raise DiscoveryError(f"Find LUKS devices: {e}") from e
    if res.exit_code == BLKID_NOTHING_FOUND and not res.stdout.strip():
        return {}
    if res.exit_code != 0:
        raise DiscoveryError(
            f"Find LUKS devices: {ProcessError(blkid, res.args, res.exit_code, res.stderr)}"
        )
    try:
        text = res.stdout.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DiscoveryError(f"Failed to parse blkid output: {e}") from e
    return parse_blkid_export(text)


def to_volumes(devices: Dict[str, str]) -> List[EncryptedVolume]:
    """Volumes ordered by UUID (then device) so runs and logs are reproducible."""
    return [
        EncryptedVolume(dev, uuid)
        for dev, uuid in sorted(devices.items(), key=lambda kv: (kv[1], kv[0]))
    ]


def print_plan(vols: List[EncryptedVolume]) -> None:
    """Human-readable summary for --list."""
    print(f"{'DEVICE':<24} {'UUID':<40}")
    for v in vols:
        print(f"{v.device_path:<24} {v.uuid:<40}")
