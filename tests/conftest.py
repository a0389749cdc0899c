from pathlib import Path

import pytest

SAMPLE_INI = """\
[GLOBAL]
enabled = true
retries = 3

[LOG]
level = debug
file =
"""


@pytest.fixture
def sample_text() -> str:
    return SAMPLE_INI


@pytest.fixture
def sample_file(tmp_path: Path) -> Path:
    p = tmp_path / "settings.ini"
    p.write_text(SAMPLE_INI, encoding="utf-8")
    return p
