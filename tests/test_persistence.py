import os
from pathlib import Path

import pytest

import pyinisettings.ini.parser as ini_parser
from pyinisettings import (
    ParseError,
    Settings,
    SettingsFileHandler,
    SettingsIOError,
    load,
    save,
)


def test_load(sample_file: Path):
    s = load(sample_file)
    assert s.get("GLOBAL", "retries") == "3"
    assert s.path == str(sample_file)


def test_save_then_load(tmp_path: Path):
    p = tmp_path / "out.ini"
    s = Settings()
    s.set("GLOBAL", "enabled", "true")
    s.set("Ünïcode", "ключ", "значение")
    save(p, s)

    assert p.read_bytes().decode("utf-8") == (
        "[GLOBAL]\nenabled = true\n\n[Ünïcode]\nключ = значение\n")
    assert load(p) == s


def test_save_overwrites(sample_file: Path):
    s = load(sample_file)
    s.set("GLOBAL", "enabled", "false")
    s.remove_section("LOG")
    save(sample_file, s)
    assert sample_file.read_text(encoding="utf-8") == (
        "[GLOBAL]\nenabled = false\nretries = 3\n")


def test_handler_round_trip(sample_file: Path, tmp_path: Path):
    s = SettingsFileHandler(sample_file).read()
    out = SettingsFileHandler(tmp_path / "copy.ini")
    out.write(s, blank_lines=0, delimiter="=")
    assert (tmp_path / "copy.ini").read_text(encoding="utf-8") == (
        "[GLOBAL]\nenabled=true\nretries=3\n[LOG]\nlevel=debug\nfile=\n")
    assert out.read() == s


def test_load_missing_file(tmp_path: Path):
    p = tmp_path / "goofy.ini"
    with pytest.raises(SettingsIOError) as ei:
        load(p)
    assert ei.value.path == str(p)
    assert isinstance(ei.value.__cause__, FileNotFoundError)
    assert isinstance(ei.value, OSError)
    assert "goofy.ini" in str(ei.value)


def test_load_directory(tmp_path: Path):
    with pytest.raises(SettingsIOError):
        load(tmp_path)


def test_load_malformed_reports_path(tmp_path: Path):
    p = tmp_path / "bad.ini"
    p.write_text("[A]\nk = v\n[B\n", encoding="utf-8")
    with pytest.raises(ParseError) as ei:
        load(p)
    assert ei.value.lineno == 3
    assert ei.value.path == str(p)
    assert str(p) in str(ei.value)


def test_load_strict(tmp_path: Path):
    p = tmp_path / "dup.ini"
    p.write_text("[A]\nk = 1\nk = 2\n", encoding="utf-8")
    with pytest.raises(ParseError):
        load(p, strict=True)


def test_load_utf8_bom(tmp_path: Path):
    p = tmp_path / "bom.ini"
    p.write_bytes("[A]\nk = v\n".encode("utf-8-sig"))
    assert load(p).get("A", "k") == "v"


def test_load_crlf_file(tmp_path: Path):
    p = tmp_path / "win.ini"
    p.write_bytes(b"[A]\r\nk = v\r\n")
    assert load(p).to_dict() == {"A": {"k": "v"}}


def test_undecodable_without_detection(tmp_path: Path):
    p = tmp_path / "latin.ini"
    p.write_bytes("[A]\nname = café\n".encode("latin-1"))
    with pytest.raises(SettingsIOError) as ei:
        load(p, detect_encoding=False)
    assert isinstance(ei.value.__cause__, UnicodeDecodeError)


def test_encoding_fallback(tmp_path: Path, monkeypatch):
    p = tmp_path / "latin.ini"
    p.write_bytes("[A]\nname = café\n".encode("latin-1"))
    monkeypatch.setattr(
        ini_parser, "guess_codec",
        lambda raw: {"encoding": "latin-1", "confidence": 0.99})
    assert load(p).get("A", "name") == "café"


def test_encoding_fallback_low_confidence(tmp_path: Path, monkeypatch):
    p = tmp_path / "latin.ini"
    p.write_bytes("[A]\nname = café\n".encode("latin-1"))
    monkeypatch.setattr(
        ini_parser, "guess_codec",
        lambda raw: {"encoding": "latin-1", "confidence": 0.3})
    with pytest.raises(SettingsIOError):
        load(p)


def test_explicit_encoding(tmp_path: Path):
    p = tmp_path / "latin.ini"
    s = Settings()
    s.set("A", "name", "café")
    save(p, s, encoding="latin-1")
    assert p.read_bytes() == "[A]\nname = café\n".encode("latin-1")
    assert load(p, encoding="latin-1") == s


def test_failed_save_keeps_original(sample_file: Path, monkeypatch):
    original = sample_file.read_bytes()

    def broken_replace(src, dst):
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr(ini_parser.os, "replace", broken_replace)
    s = Settings()
    s.set("A", "k", "v")
    with pytest.raises(SettingsIOError) as ei:
        save(sample_file, s)
    assert isinstance(ei.value.__cause__, PermissionError)
    assert sample_file.read_bytes() == original
    # no temp files left behind
    assert sorted(os.listdir(sample_file.parent)) == [sample_file.name]


def test_unencodable_value_keeps_original(sample_file: Path):
    original = sample_file.read_bytes()
    s = Settings()
    s.set("A", "k", "漢字")
    with pytest.raises(SettingsIOError):
        save(sample_file, s, encoding="ascii")
    assert sample_file.read_bytes() == original
    assert sorted(os.listdir(sample_file.parent)) == [sample_file.name]


def test_save_into_missing_directory(tmp_path: Path):
    with pytest.raises(SettingsIOError) as ei:
        save(tmp_path / "nope" / "x.ini", Settings())
    assert isinstance(ei.value.__cause__, FileNotFoundError)


@pytest.mark.skipif(os.name != "posix", reason="POSIX permissions")
def test_save_keeps_file_mode(sample_file: Path):
    sample_file.chmod(0o644)
    save(sample_file, load(sample_file))
    assert sample_file.stat().st_mode & 0o777 == 0o644


@pytest.mark.skipif(os.name != "posix", reason="POSIX permissions")
def test_new_file_follows_umask(tmp_path: Path):
    p = tmp_path / "new.ini"
    old = os.umask(0o022)
    try:
        save(p, Settings.from_dict({"A": {"k": "v"}}))
    finally:
        os.umask(old)
    assert p.stat().st_mode & 0o777 == 0o644


def test_save_with_unknown_encoding(sample_file: Path):
    original = sample_file.read_bytes()
    with pytest.raises(SettingsIOError) as ei:
        save(sample_file, load(sample_file), encoding="no-such-codec")
    assert isinstance(ei.value.__cause__, LookupError)
    assert sample_file.read_bytes() == original
    assert sorted(os.listdir(sample_file.parent)) == [sample_file.name]


def test_load_with_unknown_encoding(sample_file: Path):
    with pytest.raises(SettingsIOError) as ei:
        load(sample_file, encoding="no-such-codec")
    assert isinstance(ei.value.__cause__, LookupError)
