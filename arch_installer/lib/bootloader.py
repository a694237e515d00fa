from __future__ import annotations

import logging
import shutil
from pathlib import Path

from . import tools
from .chroot import write_target_file
from .command import CommandRunner

logger = logging.getLogger(__name__)

LIMINE_EFI_SOURCE = "/usr/share/limine/BOOTX64.EFI"
ESP_FALLBACK_DIR = "/boot/EFI/BOOT"
EFI_LOADER_PATH = r"\EFI\BOOT\BOOTX64.EFI"
BOOT_ENTRY_LABEL = "Arch Linux Limine Bootloader"
ESP_PARTITION_INDEX = 1


def render_limine_conf(root_label: str, root_subvolume: str = "@", *, timeout: int = 5) -> str:
    return (
        f"timeout: {timeout}\n"
        "default_entry: 1\n"
        "\n"
        "/Arch Linux\n"
        "    protocol: linux\n"
        "    kernel_path: boot():/vmlinuz-linux\n"
        "    module_path: boot():/initramfs-linux.img\n"
        f"    cmdline: root=LABEL={root_label} rootflags=subvol={root_subvolume} rw\n"
    )


def render_zram_conf() -> str:
    return "[zram0]\nzram-size = min(ram)\ncompression-algorithm = zstd\n"


def install_limine_binary(runner: CommandRunner, target_root: str, *, dry_run: bool = False) -> None:
    """Install limine in the target and copy its EFI binary to the fallback path."""

    runner.run(tools.pacman_install(target_root, ["limine"]))

    src = Path(target_root) / LIMINE_EFI_SOURCE.lstrip("/")
    dest_dir = Path(target_root) / ESP_FALLBACK_DIR.lstrip("/")
    if dry_run:
        logger.info("Would copy %s to %s", src, dest_dir)
        return
    dest_dir.mkdir(parents=True, exist_ok=True)
    shutil.copy2(src, dest_dir / src.name)
    logger.info("Copied %s to %s", src, dest_dir)


def write_limine_conf(target_root: str, root_label: str, *, dry_run: bool = False) -> None:
    path = write_target_file(target_root, "/boot/limine.conf", render_limine_conf(root_label), dry_run=dry_run)
    logger.info("Wrote boot menu: %s", path)


def write_zram_conf(target_root: str, *, dry_run: bool = False) -> None:
    write_target_file(target_root, "/etc/systemd/zram-generator.conf", render_zram_conf(), dry_run=dry_run)


def register_boot_entry(runner: CommandRunner, disk: str) -> None:
    runner.run(tools.efibootmgr_create(disk, ESP_PARTITION_INDEX, BOOT_ENTRY_LABEL, EFI_LOADER_PATH))
    logger.info("Registered EFI boot entry %r on %s", BOOT_ENTRY_LABEL, disk)
