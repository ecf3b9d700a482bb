"""
JSON exports for offline inspection.

- export_account_dump: what the migrated state holds for each audited account
- export_findings: the audit summary plus the ordered finding list

Exports are not part of pass/fail auditing; a failure here is fatal to the
export alone.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Sequence

from .errors import ExportError
from .models import AuditFinding, AuditReport, RecoveryRecord
from .state import StateReader

logger = logging.getLogger(__name__)

DUMP_FILENAME = "genesis_balances.json"
FINDINGS_FILENAME = "audit_findings.json"


def findings_to_dicts(findings: Iterable[AuditFinding]) -> list[dict[str, Any]]:
    return [f.to_dict() for f in findings]


def account_dump(records: Sequence[RecoveryRecord], state: StateReader) -> list[dict[str, Any]]:
    """Migrated balance and slow wallet for every non-dropped, resolvable account.

    Raises:
        ResourceDecodeError: if a resource in the view cannot be decoded
    """
    rows: list[dict[str, Any]] = []
    for record in records:
        if record.is_dropped or record.account is None:
            continue
        balance = state.get_balance(record.account)
        slow = state.get_slow_wallet(record.account)
        rows.append({
            "index": record.index,
            "account": record.account,
            "balance": balance.to_dict() if balance is not None else None,
            "slow_wallet": slow.to_dict() if slow is not None else None,
        })
    return rows


def _resolve_output(output: Path, default_name: str, *, bare_is_dir: bool = True) -> Path:
    # a suffix-less path that does not exist yet names a directory only when bare_is_dir
    if output.is_dir() or (bare_is_dir and output.suffix == "" and not output.exists()):
        return output / default_name
    return output


def _write_json(path: Path, payload: Any) -> Path:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
    except OSError as e:
        raise ExportError(f"cannot write {path}: {e.strerror or e}") from e
    return path


def export_account_dump(
    records: Sequence[RecoveryRecord],
    state: StateReader,
    output: Path,
) -> Path:
    """Write the per-account dump.

    Args:
        records: Recovery records selecting which accounts to dump
        state: Migrated ledger view the values are read from
        output: Directory (gets genesis_balances.json) or explicit file path

    Returns:
        Path of the written file
    """
    rows = account_dump(records, state)
    path = _write_json(_resolve_output(output, DUMP_FILENAME), rows)
    logger.info("wrote %d accounts to %s", len(rows), path)
    return path


def findings_document(report: AuditReport) -> dict[str, Any]:
    return {
        "ok": report.ok,
        "summary": report.summary(),
        "findings": findings_to_dicts(report.findings),
    }


def export_findings(report: AuditReport, output: Path) -> Path:
    """Write the audit summary and ordered findings.

    `output` is used as the file path unless it is an existing directory.
    """
    path = _write_json(
        _resolve_output(output, FINDINGS_FILENAME, bare_is_dir=False),
        findings_document(report),
    )
    logger.info("wrote %d findings to %s", len(report.findings), path)
    return path
