from arch_installer.lib.fstab import entries_from_mounts, has_swap, render_fstab
from arch_installer.lib.subvolumes import MountRecord, MountTable


def _table():
    table = MountTable("/mnt/arch")
    table = table.with_mount(MountRecord("/dev/sda3", "/", "btrfs", "rw,noatime,subvol=@", "ARCH"))
    table = table.with_mount(MountRecord("/dev/sda3", "/home", "btrfs", "rw,noatime,subvol=@home", "ARCH"))
    return table.with_mount(MountRecord("/dev/sda1", "/boot", "vfat", "rw,umask=0077", "EFI"))


def test_entries_by_label():
    entries = entries_from_mounts(_table())
    assert [(e.spec, e.mountpoint, e.fstype, e.passno) for e in entries] == [
        ("LABEL=ARCH", "/", "btrfs", 0),
        ("LABEL=ARCH", "/home", "btrfs", 0),
        ("LABEL=EFI", "/boot", "vfat", 2),
    ]


def test_swap_entry_and_detection():
    text = render_fstab(entries_from_mounts(_table(), swap_label="SWAP"))
    assert "LABEL=SWAP\tnone\tswap\tdefaults\t0 0" in text
    assert has_swap(text)
    assert not has_swap(render_fstab(entries_from_mounts(_table())))


def test_commented_swap_is_ignored():
    assert not has_swap("# LABEL=SWAP none swap defaults 0 0\n")
