from __future__ import annotations

import json
from pathlib import Path

import pytest

from genesis_audit.errors import ExportError, ResourceDecodeError
from genesis_audit.export import (
    DUMP_FILENAME,
    FINDINGS_FILENAME,
    account_dump,
    export_account_dump,
    export_findings,
)
from genesis_audit.models import (
    AuditFinding,
    AuditReport,
    FindingKind,
    LegacyBalance,
    RecoveryRecord,
    Role,
    parse_address,
)
from genesis_audit.state import InMemoryStateReader

A = parse_address("0xa")
B = parse_address("0xb")
C = parse_address("0xc")


@pytest.fixture
def records() -> list[RecoveryRecord]:
    return [
        RecoveryRecord(index=0, account=A, balance=LegacyBalance(coin=10)),
        RecoveryRecord(index=1, account=None),
        RecoveryRecord(index=2, account=B, role=Role.DROP),
        RecoveryRecord(index=3, account=C, balance=LegacyBalance(coin=1)),
    ]


@pytest.fixture
def state() -> InMemoryStateReader:
    return InMemoryStateReader({
        A: {"balance": {"coin": 10}, "slow_wallet": {"unlocked": 2, "transferred": 1}},
        B: {"balance": {"coin": 99}},
    })


def test_dump_skips_dropped_and_unresolvable_records(records, state) -> None:
    rows = account_dump(records, state)

    assert rows == [
        {
            "index": 0,
            "account": A,
            "balance": {"coin": 10},
            "slow_wallet": {"unlocked": 2, "transferred": 1},
        },
        {"index": 3, "account": C, "balance": None, "slow_wallet": None},
    ]


def test_dump_into_directory_uses_default_name(tmp_path: Path, records, state) -> None:
    out_dir = tmp_path / "out"
    out_dir.mkdir()

    path = export_account_dump(records, state, out_dir)

    assert path == out_dir / DUMP_FILENAME
    data = json.loads(path.read_text(encoding="utf-8"))
    assert [row["index"] for row in data] == [0, 3]


def test_dump_to_explicit_file(tmp_path: Path, records, state) -> None:
    target = tmp_path / "nested" / "balances.json"
    assert export_account_dump(records, state, target) == target
    assert target.exists()


def test_dump_propagates_decode_errors(tmp_path: Path) -> None:
    records = [RecoveryRecord(index=0, account=A)]
    state = InMemoryStateReader({A: {"balance": b"\xff"}})

    with pytest.raises(ResourceDecodeError):
        export_account_dump(records, state, tmp_path)
    assert not (tmp_path / DUMP_FILENAME).exists()


def test_unwritable_target_raises_export_error(tmp_path: Path, records, state) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")

    with pytest.raises(ExportError):
        export_account_dump(records, state, blocker / "dump.json")


def test_export_findings_document(tmp_path: Path) -> None:
    report = AuditReport(
        findings=[
            AuditFinding(1, None, 0, 0, FindingKind.MISSING_ACCOUNT, "account is None"),
            AuditFinding(4, B, 50, 40, FindingKind.BALANCE_MISMATCH, "unexpected balance"),
        ],
        records_total=5,
        records_audited=3,
    )

    path = export_findings(report, tmp_path)

    assert path.name == FINDINGS_FILENAME
    doc = json.loads(path.read_text(encoding="utf-8"))
    assert doc["ok"] is False
    assert doc["summary"]["findings"] == 2
    assert doc["summary"]["by_kind"] == {"missing_account": 1, "balance_mismatch": 1}
    assert [f["index"] for f in doc["findings"]] == [1, 4]
    assert doc["findings"][1]["kind"] == "balance_mismatch"


def test_findings_path_without_suffix_is_a_file(tmp_path: Path) -> None:
    target = tmp_path / "findings"

    path = export_findings(AuditReport(), target)

    assert path == target
    assert target.is_file()
    assert json.loads(target.read_text(encoding="utf-8"))["ok"] is True


def test_dump_path_without_suffix_is_a_directory(tmp_path: Path, records, state) -> None:
    path = export_account_dump(records, state, tmp_path / "dump")
    assert path == tmp_path / "dump" / DUMP_FILENAME
