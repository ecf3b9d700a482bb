"""Audit profile loading.

An optional `genesis-audit.toml` holds the expectations and options for a
migration audit under an `[audit]` table. CLI flags override its values.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from .errors import ConfigError
from .models import check_u64, parse_address

DEFAULT_CONFIG_NAME = "genesis-audit.toml"


@dataclass(frozen=True)
class AuditConfig:
    """Audit profile. None means "do not run that check"."""

    expected_supply: int | None = None
    validators: tuple[str, ...] | None = None
    scale: int = 1
    strict_resources: bool = False
    workers: int = 1

    def merged(self, **overrides: Any) -> "AuditConfig":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        if "validators" in changes:
            changes["validators"] = tuple(parse_address(a) for a in changes["validators"])
        return replace(self, **changes)


def _coerce_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _positive_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigError(f"{name} must be a positive integer, got {value!r}")
    return value


def parse_config(data: dict[str, Any]) -> AuditConfig:
    """Build an AuditConfig from decoded TOML."""
    section = _coerce_dict(data.get("audit"))

    expected_supply = section.get("expected_supply")
    if expected_supply is not None:
        try:
            expected_supply = check_u64(expected_supply, "expected_supply")
        except ValueError as e:
            raise ConfigError(str(e)) from e

    validators = section.get("validators")
    if validators is not None:
        if not isinstance(validators, list):
            raise ConfigError("validators must be a list of addresses")
        try:
            validators = tuple(parse_address(a) for a in validators)
        except ValueError as e:
            raise ConfigError(str(e)) from e

    strict = section.get("strict_resources", False)
    if not isinstance(strict, bool):
        raise ConfigError(f"strict_resources must be true or false, got {strict!r}")

    return AuditConfig(
        expected_supply=expected_supply,
        validators=validators,
        scale=_positive_int(section.get("scale", 1), "scale"),
        strict_resources=strict,
        workers=_positive_int(section.get("workers", 1), "workers"),
    )


def load_config(path: Path) -> AuditConfig:
    """Load an audit profile from TOML.

    Raises:
        ConfigError: if the file is unreadable, not TOML, or has bad values
    """
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"cannot read {path}: {e.strerror or e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"invalid TOML in {path}: {e}") from e
    return parse_config(data)


def find_default_config(start: Path) -> Path | None:
    """The profile in `start`, if one exists."""
    candidate = start / DEFAULT_CONFIG_NAME
    return candidate if candidate.is_file() else None
