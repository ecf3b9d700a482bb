from __future__ import annotations

from genesis_audit.models import LegacyBalance, RecoveryRecord, Role, parse_address
from genesis_audit.recovery import is_system_record, normalize


def _record(index: int, account: str | None, role: Role = Role.NORMAL) -> RecoveryRecord:
    return RecoveryRecord(
        index=index,
        account=parse_address(account) if account else None,
        role=role,
        balance=LegacyBalance(coin=1),
    )


def test_strips_system_addresses_and_roles() -> None:
    records = [
        _record(0, "0x0"),
        _record(1, "0x1"),
        _record(2, "0xa"),
        _record(3, "0xb", Role.SYSTEM),
        _record(4, None),
        _record(5, "0xc", Role.DROP),
    ]

    normalized = normalize(records)

    assert [r.index for r in normalized] == [2, 4, 5]


def test_normalize_is_pure() -> None:
    records = [_record(0, "0x1"), _record(1, "0xa")]
    snapshot = list(records)

    normalized = normalize(records)

    assert records == snapshot
    assert normalized is not records
    assert normalized == [records[1]]


def test_missing_account_is_not_a_system_record() -> None:
    assert not is_system_record(_record(0, None))
