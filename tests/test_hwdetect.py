from arch_installer.install_config import SystemType
from arch_installer.lib.hwdetect import (
    HardwareProbe,
    LbaFormat,
    find_4kn_format,
    parse_cpu_vendor,
    parse_disks,
    parse_gpu_vendors,
    parse_meminfo_bytes,
    parse_nvme_formats,
)

from conftest import FakeRunner, lsblk_json

ID_NS = """NVME Identify Namespace 1:
nsze    : 0x3a386030
LBA Format  0 : Metadata Size: 0   bytes - Data Size: 512 bytes - Relative Performance: 0x2 Good (in use)
LBA Format  1 : Metadata Size: 0   bytes - Data Size: 4096 bytes - Relative Performance: 0x1 Better
"""


def test_parse_nvme_formats():
    formats = parse_nvme_formats(ID_NS)
    assert formats == [LbaFormat(0, 512, True), LbaFormat(1, 4096, False)]
    assert find_4kn_format(formats) == 1


def test_4kn_already_active():
    assert find_4kn_format([LbaFormat(0, 512, False), LbaFormat(1, 4096, True)]) is None


def test_no_4kn_format():
    assert find_4kn_format([LbaFormat(0, 512, True)]) is None


def test_cpu_and_memory():
    assert parse_cpu_vendor("processor : 0\nvendor_id : AuthenticAMD\n") == "AuthenticAMD"
    assert parse_cpu_vendor("") is None
    assert parse_meminfo_bytes("MemTotal:       16384 kB\n") == 16384 * 1024


def test_gpu_vendor_flags_are_independent():
    flags = parse_gpu_vendors("Advanced Micro Devices, Inc. [AMD/ATI]\nIntel Corporation UHD\n")
    assert flags == {"amd": True, "nvidia": False, "intel": True}


def test_parse_disks_keeps_whole_disks_only():
    text = (
        '{"blockdevices": ['
        '{"path": "/dev/sda", "size": 1000, "model": "Disk ", "type": "disk"},'
        '{"path": "/dev/sr0", "size": 10, "model": null, "type": "rom"},'
        '{"path": "/dev/loop0", "size": 2000, "model": null, "type": "loop"}'
        "]}"
    )
    disks = parse_disks(text)
    assert [(d.path, d.size_bytes, d.model) for d in disks] == [("/dev/sda", 1000, "Disk")]
    assert parse_disks("not json") == []


def test_probe_reads_paths_and_commands(paths):
    runner = FakeRunner(
        responses={
            ("lspci",): (0, "VGA: NVIDIA Corporation\n"),
            ("nvme", "id-ns"): (0, ID_NS),
            ("lsblk", "-J"): (0, lsblk_json(("/dev/nvme0n1", 512 * 1024**3, "Samsung"))),
        }
    )
    probe = HardwareProbe(runner, paths)

    assert probe.cpu_vendor() == "GenuineIntel"
    assert probe.ram_bytes() == 3146752 * 1024
    profile = probe.gpu_profile(SystemType.LAPTOP)
    assert profile.nvidia and not profile.intel and profile.system_type is SystemType.LAPTOP
    assert find_4kn_format(probe.nvme_formats("/dev/nvme0n1")) == 1
    assert probe.list_disks()[0].is_nvme


def test_probe_failures_are_not_errors(paths):
    runner = FakeRunner(failures=["lspci", "nvme", "lsblk"])
    probe = HardwareProbe(runner, paths)

    assert not probe.gpu_profile(SystemType.DESKTOP).any_detected
    assert probe.nvme_formats("/dev/nvme0n1") is None
    assert probe.list_disks() == []
