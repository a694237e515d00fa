import io

import pytest

from arch_installer.errors import OperatorAbort
from arch_installer.install_config import DiskTarget
from ui.console import ConsoleOperator


def _operator(replies, secrets=()):
    replies = list(replies)
    secrets = list(secrets)
    out = io.StringIO()
    op = ConsoleOperator(read=lambda _p: replies.pop(0), read_secret=lambda _p: secrets.pop(0), out=out)
    return op, out


def test_defaults_apply_on_empty_answer():
    op, _ = _operator(["", "", ""])
    assert op.locale() == "en_US.UTF-8"
    assert op.timezone() == "UTC"
    assert op.swap_enabled() == "n"


def test_disk_listing_is_printed():
    op, out = _operator(["1"])
    assert op.choose_disk([DiskTarget("/dev/sda", 64 * 1024**3, "QEMU")]) == "1"
    assert "1) /dev/sda (64.0 GiB) QEMU" in out.getvalue()


def test_passwords_are_read_twice_without_echo():
    op, _ = _operator([], ["secret", "secret"])
    assert op.root_password() == ("secret", "secret")


def test_install_confirmation_needs_yes_in_capitals():
    op, out = _operator(["yes", "YES"])
    assert op.confirm_install("SUMMARY") is False
    assert op.confirm_install("SUMMARY") is True
    assert "SUMMARY" in out.getvalue()


def test_closed_input_aborts():
    def closed(_prompt):
        raise EOFError

    op = ConsoleOperator(read=closed, out=io.StringIO())
    with pytest.raises(OperatorAbort):
        op.hostname()


def test_reject_is_reported():
    op, out = _operator([])
    op.reject("Hostname cannot be empty")
    assert "Invalid answer: Hostname cannot be empty" in out.getvalue()
