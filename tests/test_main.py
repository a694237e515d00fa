import json
import logging

import pytest

from arch_installer import main as main_mod
from arch_installer.errors import PlanningError, ToolInvocationError
from arch_installer.pipeline import InstallState, PipelineResult

from conftest import FakeRunner, lsblk_json, LOOP_DISK_SIZE


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch):
    monkeypatch.setattr(main_mod, "configure_logging", lambda **_kwargs: "log")


def test_refuses_to_run_without_root(monkeypatch, tmp_path):
    monkeypatch.setattr(main_mod, "is_root", lambda: False)
    called = []
    monkeypatch.setattr(main_mod, "run", lambda *a, **k: called.append(a))

    assert main_mod.main(["--config", str(tmp_path / "a.yaml")]) == main_mod.EXIT_FAILED
    assert called == []


def test_unreadable_answers_file(monkeypatch, tmp_path):
    monkeypatch.setattr(main_mod, "is_root", lambda: True)
    assert main_mod.main(["--config", str(tmp_path / "missing.yaml")]) == main_mod.EXIT_INVALID


def test_no_front_end(monkeypatch):
    monkeypatch.setattr(main_mod, "is_root", lambda: True)
    assert main_mod.main([]) == main_mod.EXIT_INVALID


@pytest.mark.parametrize(
    "error,code",
    [
        (PlanningError("disk too small"), main_mod.EXIT_INVALID),
        (ToolInvocationError(["pacstrap"], 1, "", "no network"), main_mod.EXIT_FAILED),
    ],
)
def test_errors_map_to_exit_codes(monkeypatch, tmp_path, error, code):
    monkeypatch.setattr(main_mod, "is_root", lambda: True)

    def fake_run(*_a, **_k):
        raise error

    monkeypatch.setattr(main_mod, "run", fake_run)
    answers = tmp_path / "a.json"
    answers.write_text("{}", encoding="utf-8")

    assert main_mod.main(["--config", str(answers)]) == code


def test_success_and_abort_exit_codes(monkeypatch, tmp_path):
    monkeypatch.setattr(main_mod, "is_root", lambda: True)
    answers = tmp_path / "a.json"
    answers.write_text("{}", encoding="utf-8")

    monkeypatch.setattr(main_mod, "run", lambda *_a, **_k: PipelineResult(InstallState(), aborted=False))
    assert main_mod.main(["--config", str(answers)]) == main_mod.EXIT_OK

    monkeypatch.setattr(main_mod, "run", lambda *_a, **_k: PipelineResult(InstallState(), aborted=True))
    assert main_mod.main(["--config", str(answers)]) == main_mod.EXIT_FAILED


def test_console_factory_is_used_without_config(monkeypatch):
    monkeypatch.setattr(main_mod, "is_root", lambda: True)
    seen = []

    def fake_run(operator, **kwargs):
        seen.append((operator, kwargs))
        return PipelineResult(InstallState(), aborted=False)

    monkeypatch.setattr(main_mod, "run", fake_run)
    sentinel = object()

    assert main_mod.main(["--dry-run", "--target", "/tmp/t"], console_factory=lambda: sentinel) == 0
    assert seen[0][0] is sentinel
    assert seen[0][1]["dry_run"] is True
    assert seen[0][1]["target_root"] == "/tmp/t"


def test_run_saves_report_on_success(paths, loop_runner, answers):
    from arch_installer.answers import AnswersFileOperator

    state_path = paths.state_default
    result = main_mod.run(AnswersFileOperator(answers), state_path=state_path, runner=loop_runner, paths=paths)

    report = json.loads(open(state_path, encoding="utf-8").read())
    assert not result.aborted
    assert report["config"]["disk"] == "/dev/loop0"
    assert report["state"]["completed_phases"][-1] == "finalize"
    assert report["state"]["partitions"] == {"efi": "/dev/loop0p1", "root": "/dev/loop0p2"}
    assert "rootpw" not in json.dumps(report)
    assert "error" not in report


def test_run_saves_report_on_failure(paths, answers, caplog):
    from arch_installer.answers import AnswersFileOperator

    runner = FakeRunner(
        responses={("lsblk", "-J"): (0, lsblk_json(("/dev/loop0", LOOP_DISK_SIZE, "")))},
        failures=["mkfs.btrfs"],
    )
    with caplog.at_level(logging.ERROR), pytest.raises(ToolInvocationError):
        main_mod.run(AnswersFileOperator(answers), state_path=paths.state_default, runner=runner, paths=paths)

    report = json.loads(open(paths.state_default, encoding="utf-8").read())
    assert report["error"]["phase"] == "format"
    assert "mkfs.btrfs" in report["error"]["error"]
    assert report["state"]["completed_phases"][-1] == "partition"
