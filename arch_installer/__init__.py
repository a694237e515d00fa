"""Arch Linux installer for UEFI machines with a btrfs root.

One disk is wiped and laid out as ESP, optional swap and a btrfs root
with subvolumes; the base system is installed with pacstrap, configured
inside arch-chroot and booted with Limine.
"""

__all__ = []
