from __future__ import annotations

from pathlib import Path

import pytest

from genesis_audit.config import AuditConfig, find_default_config, load_config, parse_config
from genesis_audit.errors import ConfigError
from genesis_audit.models import parse_address


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_load_full_profile(tmp_path: Path) -> None:
    path = _write(
        tmp_path / "genesis-audit.toml",
        """
[audit]
expected_supply = 1000
validators = ["0x5a1", "0x5a2"]
scale = 100
strict_resources = true
workers = 4
""",
    )

    config = load_config(path)

    assert config == AuditConfig(
        expected_supply=1000,
        validators=(parse_address("0x5a1"), parse_address("0x5a2")),
        scale=100,
        strict_resources=True,
        workers=4,
    )


def test_missing_section_gives_defaults() -> None:
    assert parse_config({}) == AuditConfig()


@pytest.mark.parametrize(
    "section",
    [
        {"expected_supply": -1},
        {"expected_supply": "1000"},
        {"validators": "0x5a1"},
        {"validators": ["zz"]},
        {"scale": 0},
        {"workers": True},
        {"strict_resources": "yes"},
    ],
)
def test_bad_values_raise_config_error(section) -> None:
    with pytest.raises(ConfigError):
        parse_config({"audit": section})


def test_invalid_toml(tmp_path: Path) -> None:
    path = _write(tmp_path / "bad.toml", "[audit\nscale = 1")
    with pytest.raises(ConfigError, match="invalid TOML"):
        load_config(path)


def test_merged_keeps_profile_values_for_none() -> None:
    base = AuditConfig(expected_supply=10, scale=5)

    merged = base.merged(expected_supply=None, scale=7, validators=["0x5a1"])

    assert merged.expected_supply == 10
    assert merged.scale == 7
    assert merged.validators == (parse_address("0x5a1"),)
    assert base.scale == 5


def test_find_default_config(tmp_path: Path) -> None:
    assert find_default_config(tmp_path) is None
    path = _write(tmp_path / "genesis-audit.toml", "")
    assert find_default_config(tmp_path) == path
