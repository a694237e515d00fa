import json

import pytest
import yaml

from arch_installer.state_store import load_state, save_state


def test_json_roundtrip(tmp_path):
    path = tmp_path / "sub" / "state.json"
    save_state(str(path), {"completed_phases": ["clean"], "aborted": False})

    assert json.loads(path.read_text(encoding="utf-8"))["completed_phases"] == ["clean"]
    assert load_state(str(path)) == {"completed_phases": ["clean"], "aborted": False}


def test_yaml_keeps_key_order(tmp_path):
    path = tmp_path / "state.yml"
    save_state(str(path), {"b": 1, "a": 2})

    assert path.read_text(encoding="utf-8").splitlines() == ["b: 1", "a: 2"]
    assert yaml.safe_load(path.read_text(encoding="utf-8")) == {"b": 1, "a": 2}


def test_empty_yaml_is_empty_mapping(tmp_path):
    path = tmp_path / "answers.yaml"
    path.write_text("", encoding="utf-8")
    assert load_state(str(path)) == {}


def test_non_mapping_is_rejected(tmp_path):
    path = tmp_path / "answers.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_state(str(path))
