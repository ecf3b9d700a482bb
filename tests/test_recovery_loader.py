from __future__ import annotations

from pathlib import Path

import pytest

from genesis_audit.errors import SnapshotLoadError
from genesis_audit.models import LegacyBalance, LegacySlowWallet, Role, parse_address
from genesis_audit.recovery import load_recovery_file, parse_records


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_load_preserves_order_and_indices(write_recovery) -> None:
    path = write_recovery([
        {"account": "0xa", "role": "EndUser", "balance": {"coin": 10}},
        {"account": None, "role": "EndUser"},
        {"account": "0xb", "role": "Validator", "balance": {"coin": 7},
         "slow_wallet": {"unlocked": 3, "transferred": 1}},
    ])

    records = load_recovery_file(path)

    assert [r.index for r in records] == [0, 1, 2]
    assert records[0].account == parse_address("0xa")
    assert records[0].balance == LegacyBalance(coin=10)
    assert records[1].account is None
    assert records[1].balance is None
    assert records[2].role is Role.VALIDATOR
    assert records[2].slow_wallet == LegacySlowWallet(unlocked=3, transferred=1)


def test_unknown_keys_are_ignored(write_recovery) -> None:
    path = write_recovery([
        {"account": "0xa", "auth_key": "0xdead", "val_cfg": None, "comm_wallet": None,
         "balance": {"coin": 1}},
    ])
    records = load_recovery_file(path)
    assert len(records) == 1


def test_records_wrapper_object_is_accepted() -> None:
    records = parse_records({"records": [{"account": "0xa"}]})
    assert records[0].role is Role.NORMAL


def test_invalid_json_is_fatal(tmp_path: Path) -> None:
    path = _write(tmp_path / "recovery.json", "[{not json")
    with pytest.raises(SnapshotLoadError, match="invalid JSON"):
        load_recovery_file(path)


def test_missing_file_is_fatal(tmp_path: Path) -> None:
    with pytest.raises(SnapshotLoadError):
        load_recovery_file(tmp_path / "nope.json")


def test_wrong_top_level_shape(tmp_path: Path) -> None:
    path = _write(tmp_path / "recovery.json", '{"accounts": []}')
    with pytest.raises(SnapshotLoadError, match="JSON array"):
        load_recovery_file(path)


@pytest.mark.parametrize(
    "bad_record",
    [
        {"account": "0xa", "balance": {"coin": -1}},
        {"account": "0xa", "balance": {"coin": 2**64}},
        {"account": "0xa", "balance": {"coin": "100"}},
        {"account": "not-hex"},
        {"account": "0xa", "role": "whale"},
        {"account": "0xa", "slow_wallet": [1, 2]},
        "just a string",
    ],
)
def test_one_bad_record_fails_the_whole_file(write_recovery, bad_record) -> None:
    path = write_recovery([{"account": "0xa", "balance": {"coin": 1}}, bad_record])

    with pytest.raises(SnapshotLoadError) as excinfo:
        load_recovery_file(path)

    assert excinfo.value.index == 1
    assert "record 1" in str(excinfo.value)
