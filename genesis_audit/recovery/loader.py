"""Recovery file loading.

A recovery file is the legacy ledger snapshot: a JSON array of account
records (or an object with a `records` array). Keys the audit does not use
(`auth_key`, `val_cfg`, `comm_wallet`, ...) are ignored.

Loading is all-or-nothing: any malformed record aborts with
SnapshotLoadError before auditing starts.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from ..errors import SnapshotLoadError
from ..models import (
    LegacyBalance,
    LegacySlowWallet,
    RecoveryRecord,
    Role,
    check_u64,
    parse_address,
)

logger = logging.getLogger(__name__)


def _coerce_dict(value: Any, name: str) -> dict[str, Any] | None:
    if value is None:
        return None
    if not isinstance(value, dict):
        raise ValueError(f"{name} must be an object or null")
    return value


def parse_record(raw: Any, index: int) -> RecoveryRecord:
    """Build a RecoveryRecord from one decoded JSON object.

    Raises:
        ValueError: on any field that does not match the record schema
    """
    if not isinstance(raw, dict):
        raise ValueError("record must be an object")

    account_raw = raw.get("account")
    account = parse_address(account_raw) if account_raw is not None else None

    role = Role.parse(raw.get("role"))

    balance = None
    balance_raw = _coerce_dict(raw.get("balance"), "balance")
    if balance_raw is not None:
        balance = LegacyBalance(coin=check_u64(balance_raw.get("coin", 0), "balance.coin"))

    slow_wallet = None
    slow_raw = _coerce_dict(raw.get("slow_wallet"), "slow_wallet")
    if slow_raw is not None:
        slow_wallet = LegacySlowWallet(
            unlocked=check_u64(slow_raw.get("unlocked", 0), "slow_wallet.unlocked"),
            transferred=check_u64(slow_raw.get("transferred", 0), "slow_wallet.transferred"),
        )

    return RecoveryRecord(
        index=index,
        account=account,
        role=role,
        balance=balance,
        slow_wallet=slow_wallet,
    )


def parse_records(data: Any, source: Path | str = "<memory>") -> list[RecoveryRecord]:
    """Parse already-decoded JSON into records, preserving file order."""
    if isinstance(data, dict) and "records" in data:
        data = data["records"]
    if not isinstance(data, list):
        raise SnapshotLoadError(source, "expected a JSON array of recovery records")

    records: list[RecoveryRecord] = []
    for index, raw in enumerate(data):
        try:
            records.append(parse_record(raw, index))
        except ValueError as e:
            raise SnapshotLoadError(source, str(e), index=index) from e
    return records


def load_recovery_file(path: Path) -> list[RecoveryRecord]:
    """Load and validate a recovery file.

    Args:
        path: JSON recovery file

    Returns:
        Records in file order, each tagged with its original index

    Raises:
        SnapshotLoadError: if the file is unreadable or any record is malformed
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SnapshotLoadError(path, e.strerror or str(e)) from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise SnapshotLoadError(path, f"invalid JSON: {e.msg} at line {e.lineno}") from e

    records = parse_records(data, path)
    logger.debug("loaded %d recovery records from %s", len(records), path)
    return records
