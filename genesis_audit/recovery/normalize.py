"""Pre-audit normalization of recovery records."""

from __future__ import annotations

from typing import Iterable

from ..models import SYSTEM_ADDRESSES, RecoveryRecord, Role


def is_system_record(record: RecoveryRecord) -> bool:
    """True for framework accounts that the migration recreates itself."""
    if record.role is Role.SYSTEM:
        return True
    return record.account is not None and record.account in SYSTEM_ADDRESSES


def normalize(records: Iterable[RecoveryRecord]) -> list[RecoveryRecord]:
    """Strip system accounts.

    Pure: returns a new list, leaves the input untouched, and keeps each
    record's original index so findings still point into the source file.
    """
    return [r for r in records if not is_system_record(r)]
