import pytest

from arch_installer.errors import ToolInvocationError
from arch_installer.install_config import DiskTarget, InstallConfig, SwapDecision
from arch_installer.lib.chroot import SCRIPT_PATH_IN_TARGET, ConfigureScript, run_configure_script
from arch_installer.lib.sizing import GIB

from conftest import FakeRunner


def _config(**overrides):
    values = dict(
        disk=DiskTarget("/dev/sda", 64 * GIB),
        swap=SwapDecision.disabled(),
        locale="de_DE.UTF-8",
        timezone="Europe/Berlin",
        hostname="archbox",
        username="alice",
        root_password="r00tpass",
        user_password="alic3pass",
    )
    values.update(overrides)
    return InstallConfig(**values)


def test_script_has_every_setting_and_no_passwords():
    script = ConfigureScript.from_config(_config(), ["fstrim.timer", "NetworkManager.service"])
    text = script.render()

    assert text.startswith("#!/bin/bash\nset -euo pipefail\n")
    assert "locale-gen" in text
    assert "LANG=%s" in text and "de_DE.UTF-8" in text
    assert "ln -sf /usr/share/zoneinfo/Europe/Berlin /etc/localtime" in text
    assert "hwclock --systohc" in text
    assert "printf '%s\\n' archbox > /etc/hostname" in text
    assert "useradd -m -G wheel -s /bin/bash alice" in text
    assert "chpasswd" in text
    assert "%wheel ALL=(ALL:ALL) ALL" in text
    assert "systemctl enable fstrim.timer NetworkManager.service" in text

    assert "r00tpass" not in text
    assert "alic3pass" not in text
    assert "r00tpass" not in repr(script)


def test_credentials_are_chpasswd_lines():
    script = ConfigureScript.from_config(_config(), [])
    assert script.credentials == "root:r00tpass\nalice:alic3pass\n"
    assert "systemctl enable" not in script.render()


def test_values_are_shell_quoted():
    text = ConfigureScript(locale="en_US.UTF-8", timezone="UTC", hostname="h", username="bob's").render()
    assert "'bob'\"'\"'s'" in text


def test_run_once_with_credentials_on_stdin_and_cleanup(tmp_path):
    runner = FakeRunner()
    script = ConfigureScript.from_config(_config(), ["fstrim.timer"])

    run_configure_script(runner, str(tmp_path), script)

    assert runner.argvs == [["arch-chroot", str(tmp_path), "/bin/bash", SCRIPT_PATH_IN_TARGET]]
    assert runner.inputs == ["root:r00tpass\nalice:alic3pass\n"]
    assert not (tmp_path / SCRIPT_PATH_IN_TARGET.lstrip("/")).exists()


def test_script_removed_even_on_failure(tmp_path):
    runner = FakeRunner(failures=["arch-chroot"])
    with pytest.raises(ToolInvocationError):
        run_configure_script(runner, str(tmp_path), ConfigureScript.from_config(_config(), []))
    assert not (tmp_path / SCRIPT_PATH_IN_TARGET.lstrip("/")).exists()


def test_dry_run_writes_nothing(tmp_path):
    runner = FakeRunner(dry_run=True)
    run_configure_script(runner, str(tmp_path), ConfigureScript.from_config(_config(), []), dry_run=True)
    assert list(tmp_path.iterdir()) == []
