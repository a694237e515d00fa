import pytest

from arch_installer.errors import ValidationError
from arch_installer.lib.sizing import GIB, MIB, efi_size_mib, parse_swap_gib, swap_size_from_ram_mib


@pytest.mark.parametrize(
    "disk_gib,expected",
    [(8, 512), (63, 512), (64, 1024), (255, 1024), (256, 2048), (2000, 2048)],
)
def test_efi_size_tiers(disk_gib, expected):
    assert efi_size_mib(disk_gib * GIB) == expected


def test_efi_size_just_below_tier_boundary():
    assert efi_size_mib(64 * GIB - 1) == 512


def test_swap_from_ram_rounds_up_to_whole_gib():
    assert swap_size_from_ram_mib(3073 * MIB) == 4096
    assert swap_size_from_ram_mib(4096 * MIB) == 4096
    assert swap_size_from_ram_mib(1) == 1024


def test_swap_from_ram_rejects_zero():
    with pytest.raises(ValueError):
        swap_size_from_ram_mib(0)


@pytest.mark.parametrize("text", ["0", "-1", "abc", "", "1.5", " "])
def test_parse_swap_gib_rejects(text):
    with pytest.raises(ValidationError):
        parse_swap_gib(text)


def test_parse_swap_gib_accepts_positive_integer():
    assert parse_swap_gib("16") == 16
    assert parse_swap_gib(" 8 ") == 8
