from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..install_config import DiskTarget, SystemType
from . import tools
from .command import CommandRunner
from .env import PATHS, Paths
from .packages import GpuProfile

logger = logging.getLogger(__name__)

LOGICAL_BLOCK_4KN = 4096

_LBA_FORMAT_RE = re.compile(r"LBA Format\s+(\d+)\s*:.*?Data Size:\s*(\d+)\s*bytes(.*)$")


@dataclass(frozen=True)
class LbaFormat:
    index: int
    data_size: int
    in_use: bool


def _read_text(path: str) -> Optional[str]:
    try:
        txt = Path(path).read_text(encoding="utf-8", errors="ignore")
        return txt or None
    except OSError:
        return None


def parse_cpu_vendor(cpuinfo: str) -> Optional[str]:
    for line in cpuinfo.splitlines():
        if line.startswith("vendor_id"):
            _, _, value = line.partition(":")
            return value.strip() or None
    return None


def parse_meminfo_bytes(meminfo: str) -> Optional[int]:
    for line in meminfo.splitlines():
        if line.startswith("MemTotal:"):
            parts = line.split()
            if len(parts) >= 2 and parts[1].isdigit():
                return int(parts[1]) * 1024
    return None


def parse_gpu_vendors(lspci_output: str) -> Dict[str, bool]:
    """Vendor flags are independent: a hybrid laptop matches more than one."""

    text = lspci_output.lower()
    return {
        "amd": "amd" in text,
        "nvidia": "nvidia" in text,
        "intel": "intel" in text,
    }


def parse_nvme_formats(id_ns_output: str) -> List[LbaFormat]:
    formats: List[LbaFormat] = []
    for line in id_ns_output.splitlines():
        m = _LBA_FORMAT_RE.search(line)
        if not m:
            continue
        formats.append(LbaFormat(index=int(m.group(1)), data_size=int(m.group(2)), in_use="in use" in m.group(3)))
    return formats


def find_4kn_format(formats: List[LbaFormat]) -> Optional[int]:
    """Index of a 4096-byte LBA format to switch to, or None.

    None when no such format exists or one is already active.
    """

    if any(f.in_use and f.data_size == LOGICAL_BLOCK_4KN for f in formats):
        return None
    candidate = next((f for f in formats if f.data_size == LOGICAL_BLOCK_4KN), None)
    return candidate.index if candidate else None


def parse_disks(lsblk_json: str) -> List[DiskTarget]:
    try:
        data = json.loads(lsblk_json or "{}")
    except ValueError:
        logger.warning("Unparseable lsblk output")
        return []
    disks: List[DiskTarget] = []
    for dev in data.get("blockdevices") or []:
        if dev.get("type") != "disk" or not dev.get("path"):
            continue
        try:
            size = int(dev.get("size") or 0)
        except (TypeError, ValueError):
            continue
        disks.append(DiskTarget(path=dev["path"], size_bytes=size, model=(dev.get("model") or "").strip()))
    return disks


class HardwareProbe:
    """Reads the live machine. Every probe is best-effort and read-only."""

    def __init__(self, runner: CommandRunner, paths: Paths = PATHS) -> None:
        self.runner = runner
        self.paths = paths

    def cpu_vendor(self) -> Optional[str]:
        return parse_cpu_vendor(_read_text(self.paths.cpuinfo) or "")

    def ram_bytes(self) -> Optional[int]:
        return parse_meminfo_bytes(_read_text(self.paths.meminfo) or "")

    def gpu_profile(self, system_type: SystemType) -> GpuProfile:
        r = self.runner.run(tools.list_display_devices())
        if r.stdout:
            logger.info("Display devices:\n%s", r.stdout.strip())
        flags = parse_gpu_vendors(r.stdout if r.ok else "")
        return GpuProfile(system_type=system_type, **flags)

    def nvme_formats(self, disk: str) -> Optional[List[LbaFormat]]:
        r = self.runner.run(tools.nvme_id_ns(disk))
        if not r.ok:
            return None
        return parse_nvme_formats(r.stdout)

    def list_disks(self) -> List[DiskTarget]:
        r = self.runner.run(tools.list_disks())
        return parse_disks(r.stdout) if r.ok else []

    def summary(self) -> Dict[str, Any]:
        hw: Dict[str, Any] = {"cpu_vendor": self.cpu_vendor(), "ram_bytes": self.ram_bytes()}
        logger.info("Hardware: cpu_vendor=%s ram_bytes=%s", hw["cpu_vendor"], hw["ram_bytes"])
        return hw
