from pathlib import Path

import pytest
import yaml

from pyinisettings import (
    ParseError,
    Settings,
    SettingsIOError,
    SettingsMessage,
    SettingsYamlHandler,
    load,
)


def test_yaml_round_trip(sample_file: Path, tmp_path: Path):
    s = load(sample_file)
    handler = SettingsYamlHandler(tmp_path / "settings.yaml")
    handler.write(s)

    back = handler.read()
    assert back == s
    assert list(back.sections()) == ["GLOBAL", "LOG"]
    assert list(back.keys("GLOBAL")) == ["enabled", "retries"]
    assert back.path == str(tmp_path / "settings.yaml")


def test_yaml_output_is_plain_mapping(tmp_path: Path):
    p = tmp_path / "out.yaml"
    SettingsYamlHandler(p).write(
        Settings.from_dict({"A": {"enabled": "true", "n": "1"}}))
    # strings stay strings, even when they look like something else.
    assert yaml.safe_load(p.read_text(encoding="utf-8")) == {
        "A": {"enabled": "true", "n": "1"}}


def test_yaml_scalars_become_strings(tmp_path: Path):
    p = tmp_path / "in.yaml"
    p.write_text(
        "GLOBAL:\n"
        "  enabled: yes\n"
        "  disabled: false\n"
        "  retries: 3\n"
        "  ratio: 0.5\n"
        "  empty: ~\n"
        "EMPTY:\n",
        encoding="utf-8")
    s = SettingsYamlHandler(p).read()
    assert s.to_dict() == {
        "GLOBAL": {
            "enabled": "true",
            "disabled": "false",
            "retries": "3",
            "ratio": "0.5",
            "empty": "",
        },
        "EMPTY": {},
    }


def test_yaml_empty_document(tmp_path: Path):
    p = tmp_path / "empty.yaml"
    p.write_text("", encoding="utf-8")
    assert len(SettingsYamlHandler(p).read()) == 0


@pytest.mark.parametrize(
    "text", ["- a\n- b\n", "A: just a string\n", "A:\n  - 1\n"])
def test_yaml_wrong_structure(tmp_path: Path, text):
    p = tmp_path / "bad.yaml"
    p.write_text(text, encoding="utf-8")
    with pytest.raises(ParseError) as ei:
        SettingsYamlHandler(p).read()
    assert ei.value.path == str(p)


def test_yaml_syntax_error(tmp_path: Path):
    p = tmp_path / "bad.yaml"
    p.write_text("A:\n  k: v\n  bad: [unclosed\n", encoding="utf-8")
    with pytest.raises(ParseError) as ei:
        SettingsYamlHandler(p).read()
    assert ei.value.lineno > 0


def test_yaml_missing_file(tmp_path: Path):
    with pytest.raises(SettingsIOError):
        SettingsYamlHandler(tmp_path / "missing.yaml").read()


@pytest.mark.parametrize(
    "text",
    [
        "A:\n  k: |\n    a\n    b\n",
        "A:\n  ' k': v\n",
        "A:\n  k: ' v'\n",
        "' A':\n  k: v\n",
        "A:\n  k: {x: 1}\n",
        "A:\n  k: [1, 2]\n",
    ])
def test_yaml_values_ini_cannot_hold(tmp_path: Path, text):
    p = tmp_path / "bad.yaml"
    p.write_text(text, encoding="utf-8")
    with pytest.raises(ParseError) as ei:
        SettingsYamlHandler(p).read()
    assert ei.value.msgid is SettingsMessage.YAML_STRUCTURE
    assert ei.value.path == str(p)


def test_yaml_unknown_encoding(tmp_path: Path):
    p = tmp_path / "in.yaml"
    p.write_text("A:\n  k: v\n", encoding="utf-8")
    with pytest.raises(SettingsIOError) as ei:
        SettingsYamlHandler(p, "no-such-codec").read()
    assert isinstance(ei.value.__cause__, LookupError)
