"""Typed argv builders for every external tool the installer invokes.

Operator-supplied values (usernames, package tokens, paths) only ever
travel as discrete argv elements, never through a shell.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from .command import Command, fatal, query, tolerated


# --- cleanup / queries ---

def is_mountpoint(path: str) -> Command:
    return query("mountpoint", "-q", path)


def umount_recursive(path: str) -> Command:
    return tolerated("umount", "-R", path)


def list_partitions_with_mounts(disk: str) -> Command:
    return query("lsblk", "-lnpo", "NAME,MOUNTPOINT", disk)


def list_disks() -> Command:
    return query("lsblk", "-J", "-b", "-d", "-o", "PATH,SIZE,MODEL,TYPE")


def list_display_devices() -> Command:
    # PCI class 03xx: display controllers.
    return query("lspci", "-d", "::03xx")


def swapoff(device: str) -> Command:
    return tolerated("swapoff", device)


# --- nvme ---

def nvme_id_ns(disk: str) -> Command:
    return query("nvme", "id-ns", "-H", disk)


def nvme_format(disk: str, lbaf: int) -> Command:
    return fatal("nvme", "format", f"--lbaf={lbaf}", "--force", disk)


def reread_partition_table(disk: str) -> Command:
    return tolerated("blockdev", "--rereadpt", disk)


# --- partitioning ---

def zap_partition_table(disk: str) -> Command:
    return tolerated("sgdisk", "--zap-all", disk)


def wipe_signatures(disk: str) -> Command:
    return tolerated("wipefs", "-a", disk)


def sgdisk_new(disk: str, index: int, start_mib: int, size_mib: Optional[int], type_code: str, name: str) -> Command:
    # size_mib=None: extend to the end of the disk.
    end = f"+{size_mib}M" if size_mib is not None else "0"
    return fatal(
        "sgdisk",
        f"--new={index}:{start_mib}M:{end}",
        f"--typecode={index}:{type_code}",
        f"--change-name={index}:{name}",
        disk,
    )


def partprobe(disk: str) -> Command:
    return tolerated("partprobe", disk)


# --- formatting ---

def mkfs_fat32(device: str, label: str) -> Command:
    return fatal("mkfs.fat", "-F", "32", "-n", label, device)


def mkswap(device: str, label: str) -> Command:
    return fatal("mkswap", "-L", label, device)


def mkfs_btrfs(device: str, label: str) -> Command:
    return fatal("mkfs.btrfs", "-f", "-L", label, "-n", "32k", device)


# --- mounting ---

def mount(device: str, target: str, options: Optional[str] = None) -> Command:
    argv = ["mount"]
    if options:
        argv += ["-o", options]
    return fatal(*argv, device, target)


def btrfs_subvolume_create(path: str) -> Command:
    return fatal("btrfs", "subvolume", "create", path)


def umount_all(path: str) -> Command:
    # Unmount between subvolume creation and the per-subvolume mounts; must succeed.
    return fatal("umount", "-R", path)


# --- packages ---

def reflector_refresh(mirrorlist: str) -> Command:
    return fatal("reflector", "--latest", "20", "--sort", "rate", "--save", mirrorlist)


def pacstrap(target_root: str, packages: Sequence[str]) -> Command:
    return fatal("pacstrap", "-K", target_root, *packages)


def chroot(target_root: str, *argv: str, input_text: Optional[str] = None) -> Command:
    return fatal("arch-chroot", target_root, *argv, input_text=input_text)


def chroot_tolerated(target_root: str, *argv: str) -> Command:
    return tolerated("arch-chroot", target_root, *argv)


def pacman_sync_upgrade(target_root: str) -> Command:
    return chroot(target_root, "pacman", "-Syu", "--noconfirm")


def pacman_install(target_root: str, packages: Iterable[str]) -> Command:
    return chroot(target_root, "pacman", "-S", "--needed", "--noconfirm", *packages)


def systemctl_enable(target_root: str, units: Iterable[str]) -> Command:
    return chroot(target_root, "systemctl", "enable", *units)


# --- boot ---

def mkinitcpio_all(target_root: str) -> Command:
    return chroot(target_root, "mkinitcpio", "-P")


def swapon_all(target_root: str) -> Command:
    return chroot_tolerated(target_root, "swapon", "-a")


def efibootmgr_create(disk: str, part_index: int, label: str, loader: str) -> Command:
    return fatal(
        "efibootmgr",
        "--create",
        "--disk",
        disk,
        "--part",
        str(part_index),
        "--label",
        label,
        "--loader",
        loader,
        "--unicode",
    )


def reboot() -> Command:
    return tolerated("reboot")
