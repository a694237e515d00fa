import json

import pytest

from arch_installer.answers import AnswersFileOperator
from arch_installer.errors import ValidationError


def test_from_yaml_file(tmp_path):
    path = tmp_path / "answers.yaml"
    path.write_text("disk: /dev/sda\nswap: 4\nconfirm: true\npackages:\n  - vim\n  - '!nano'\n", encoding="utf-8")

    operator = AnswersFileOperator.from_file(str(path))

    assert operator.choose_disk([]) == "/dev/sda"
    assert operator.swap_enabled() is True
    assert operator.swap_size() == 4
    assert operator.package_tokens(()) == "vim !nano"
    assert operator.confirm_install("summary") is True


def test_from_json_file(tmp_path):
    path = tmp_path / "answers.json"
    path.write_text(json.dumps({"disk": "/dev/vda", "swap": False}), encoding="utf-8")
    operator = AnswersFileOperator.from_file(str(path))

    assert operator.swap_enabled() is False
    assert operator.confirm_install("summary") is False
    assert operator.confirm_reboot() is False


def test_gates_require_literal_true():
    operator = AnswersFileOperator({"confirm": "yes", "reboot": 1, "nvme_4kn_format": "true"})
    assert operator.confirm_install("s") is False
    assert operator.confirm_reboot() is False
    assert operator.confirm_nvme_format(None, 1) is False


def test_reject_raises():
    with pytest.raises(ValidationError):
        AnswersFileOperator({}).reject("bad")


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        AnswersFileOperator.from_file(str(tmp_path / "nope.yaml"))
