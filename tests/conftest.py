from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import pytest

from arch_installer.lib.command import CmdResult, Command, CommandRunner
from arch_installer.lib.env import Paths
from arch_installer.lib.sizing import GIB

PACMAN_CONF = """[options]
Architecture = auto

[core]
Include = /etc/pacman.d/mirrorlist

#[multilib]
#Include = /etc/pacman.d/mirrorlist
"""

LOOP_DISK_SIZE = 8 * GIB


def lsblk_json(*disks: Tuple[str, int, str]) -> str:
    return json.dumps(
        {"blockdevices": [{"path": p, "size": s, "model": m, "type": "disk"} for p, s, m in disks]}
    )


class FakeRunner(CommandRunner):
    """Records every command and simulates the external tools.

    responses maps an argv prefix to (returncode, stdout). Programs named
    in failures exit 1. pacstrap drops the files later phases read into
    the target tree.
    """

    def __init__(
        self,
        *,
        responses: Optional[Dict[Tuple[str, ...], Tuple[int, str]]] = None,
        failures: Iterable[str] = (),
        dry_run: bool = False,
    ) -> None:
        super().__init__(dry_run=dry_run)
        self.responses = dict(responses or {})
        self.failures = set(failures)
        self.inputs: List[Optional[str]] = []

    @property
    def argvs(self) -> List[List[str]]:
        return [list(c.argv) for c in self.history]

    def programs(self) -> List[str]:
        return [c.argv[0] for c in self.history]

    def find(self, *prefix: str) -> List[List[str]]:
        return [a for a in self.argvs if tuple(a[: len(prefix)]) == prefix]

    def _execute(self, command: Command) -> CmdResult:
        argv = list(command.argv)
        self.inputs.append(command.input_text)
        if argv[0] in self.failures:
            return CmdResult(argv=argv, returncode=1, stdout="", stderr=f"{argv[0]}: simulated failure")
        for prefix, (rc, out) in self.responses.items():
            if tuple(argv[: len(prefix)]) == prefix:
                return CmdResult(argv=argv, returncode=rc, stdout=out, stderr="")
        if argv[0] == "mountpoint":
            return CmdResult(argv=argv, returncode=1, stdout="", stderr="")
        if argv[0] == "pacstrap":
            self._populate(Path(argv[2]))
        return CmdResult(argv=argv, returncode=0, stdout="", stderr="")

    @staticmethod
    def _populate(target: Path) -> None:
        efi = target / "usr/share/limine/BOOTX64.EFI"
        efi.parent.mkdir(parents=True, exist_ok=True)
        efi.write_bytes(b"MZ")
        conf = target / "etc/pacman.conf"
        conf.parent.mkdir(parents=True, exist_ok=True)
        conf.write_text(PACMAN_CONF, encoding="utf-8")


@pytest.fixture
def paths(tmp_path) -> Paths:
    zoneinfo = tmp_path / "zoneinfo"
    (zoneinfo / "Europe").mkdir(parents=True)
    (zoneinfo / "UTC").write_text("TZif", encoding="utf-8")
    (zoneinfo / "Europe/Berlin").write_text("TZif", encoding="utf-8")

    supported = tmp_path / "SUPPORTED"
    supported.write_text("de_DE.UTF-8 UTF-8\nen_US.UTF-8 UTF-8\nen_US ISO-8859-1\n", encoding="utf-8")

    cpuinfo = tmp_path / "cpuinfo"
    cpuinfo.write_text("processor\t: 0\nvendor_id\t: GenuineIntel\nmodel name\t: Test CPU\n", encoding="utf-8")
    meminfo = tmp_path / "meminfo"
    meminfo.write_text("MemTotal:        3146752 kB\nMemFree:          100000 kB\n", encoding="utf-8")

    mirrorlist = tmp_path / "mirrorlist"
    mirrorlist.write_text("Server = https://mirror.example/$repo/os/$arch\n", encoding="utf-8")

    return Paths(
        target_root=str(tmp_path / "mnt"),
        state_default=str(tmp_path / "state.json"),
        log_default=str(tmp_path / "installer.log"),
        live_mirrorlist=str(mirrorlist),
        zoneinfo_dir=str(zoneinfo),
        supported_locales=str(supported),
        cpuinfo=str(cpuinfo),
        meminfo=str(meminfo),
    )


@pytest.fixture
def loop_runner() -> FakeRunner:
    return FakeRunner(responses={("lsblk", "-J"): (0, lsblk_json(("/dev/loop0", LOOP_DISK_SIZE, "")))})


@pytest.fixture
def answers() -> Dict[str, object]:
    return {
        "disk": "/dev/loop0",
        "swap": False,
        "locale": "en_US.UTF-8",
        "timezone": "UTC",
        "hostname": "archbox",
        "username": "alice",
        "root_password": "rootpw",
        "user_password": "userpw",
        "packages": "",
        "desktop": False,
        "gpu": False,
        "confirm": True,
        "reboot": False,
    }
