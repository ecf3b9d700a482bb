"""Pytest configuration and fixtures."""

import json
from pathlib import Path
from typing import Any, Callable

import pytest

from genesis_audit.models import parse_address

ALICE = parse_address("0xa11ce")
BOB = parse_address("0xb0b")
CAROL = parse_address("0xca201")
VAL_1 = parse_address("0x5a1")
VAL_2 = parse_address("0x5a2")
VAL_3 = parse_address("0x5a3")


def _write_json(path: Path, payload: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return path


@pytest.fixture
def write_recovery(tmp_path: Path) -> Callable[..., Path]:
    """Write a recovery file from a list of raw record dicts."""

    def _make(records: list[dict[str, Any]], name: str = "recovery.json") -> Path:
        return _write_json(tmp_path / name, records)

    return _make


@pytest.fixture
def write_snapshot(tmp_path: Path) -> Callable[..., Path]:
    """Write a ledger snapshot file from accounts and validators."""

    def _make(
        accounts: dict[str, dict[str, Any]],
        validators: list[str] | None = None,
        name: str = "genesis_state.json",
    ) -> Path:
        payload: dict[str, Any] = {"version": 1, "accounts": accounts}
        if validators is not None:
            payload["validators"] = validators
        return _write_json(tmp_path / name, payload)

    return _make


@pytest.fixture
def healthy_migration(write_recovery, write_snapshot) -> tuple[Path, Path]:
    """A recovery file and a snapshot that agree on everything."""
    recovery = write_recovery([
        {"account": "0x1", "role": "system", "balance": {"coin": 0}},
        {"account": ALICE, "role": "EndUser", "balance": {"coin": 100}},
        {"account": BOB, "role": "validator", "balance": {"coin": 50},
         "slow_wallet": {"unlocked": 20, "transferred": 5}},
        {"account": CAROL, "role": "drop", "balance": {"coin": 999}},
    ])
    snapshot = write_snapshot(
        {
            ALICE: {"balance": {"coin": 100}},
            BOB: {"balance": {"coin": 50}, "slow_wallet": {"unlocked": 20, "transferred": 5}},
        },
        validators=[BOB],
    )
    return recovery, snapshot
