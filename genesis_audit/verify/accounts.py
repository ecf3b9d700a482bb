"""
Per-account migration audit.

Walks the recovery records once and compares each against the migrated
state. Every per-account anomaly becomes an AuditFinding; nothing short of
cancellation stops the walk, so one bad record never hides the rest.

Checks per record, in input order:
1. role == drop                  -> skipped, never reported
2. account is None               -> missing_account (expected=0, migrated=0)
3. no balance resource           -> soft skip, or missing_resource if strict
4. migrated coin != legacy coin  -> balance_mismatch
5. slow wallet unlocked differs  -> slow_wallet_mismatch
6. migrated unlocked > coin      -> unlock_exceeds_balance
A resource that fails to decode ends that record's checks with a
resource_decode_error finding.
"""

from __future__ import annotations

import logging
import math
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Sequence

from ..errors import AuditCancelled, ResourceDecodeError
from ..models import AuditFinding, AuditReport, FindingKind, RecoveryRecord
from ..progress import ProgressObserver
from ..state import StateReader

logger = logging.getLogger(__name__)


class AccountAuditor:
    """Compare legacy recovery records against a migrated ledger view."""

    def __init__(
        self,
        state: StateReader,
        *,
        scale: int = 1,
        strict_resources: bool = False,
        workers: int = 1,
        progress: ProgressObserver | None = None,
        cancel: threading.Event | None = None,
    ):
        if isinstance(scale, bool) or not isinstance(scale, int) or scale < 1:
            raise ValueError(f"scale must be a positive integer, got {scale!r}")
        if workers < 1:
            raise ValueError(f"workers must be >= 1, got {workers!r}")
        self.state = state
        self.scale = scale
        self.strict_resources = strict_resources
        self.workers = workers
        self.progress = progress
        self.cancel = cancel
        self._lock = threading.Lock()
        self._processed = 0

    def run(self, records: Sequence[RecoveryRecord]) -> AuditReport:
        """Audit all records and return the merged report.

        With workers > 1 the records are split into contiguous ranges and
        the partial reports are concatenated in range order, so the finding
        list is identical to a sequential run.

        Raises:
            AuditCancelled: if the cancel event is set between records; it
                carries the number of records processed by all workers
        """
        logger.debug("auditing %d records with %d worker(s)", len(records), self.workers)
        self._processed = 0

        if self.workers == 1 or len(records) < 2:
            report = self._audit_range(records)
        else:
            size = math.ceil(len(records) / self.workers)
            chunks = [records[i:i + size] for i in range(0, len(records), size)]
            report = AuditReport()
            try:
                with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="audit") as pool:
                    for partial in pool.map(self._audit_range, chunks):
                        report.merge(partial)
            except AuditCancelled:
                # every worker has stopped once the pool exits; report the total
                raise AuditCancelled(self._processed) from None

        logger.debug(
            "audit finished: %d findings, audited supply %d",
            len(report.findings),
            report.audited_supply,
        )
        return report

    def _audit_range(self, records: Sequence[RecoveryRecord]) -> AuditReport:
        report = AuditReport()
        for record in records:
            if self.cancel is not None and self.cancel.is_set():
                raise AuditCancelled(self._processed)
            self._audit_record(record, report)
            report.records_total += 1
            with self._lock:
                self._processed += 1
            if self.progress is not None:
                self.progress(record)
        return report

    def _finding(
        self,
        record: RecoveryRecord,
        kind: FindingKind,
        expected: int,
        migrated: int,
        message: str,
    ) -> AuditFinding:
        return AuditFinding(
            index=record.index,
            account=record.account,
            expected=expected,
            migrated=migrated,
            kind=kind,
            message=message,
        )

    def _decode_failure(self, record: RecoveryRecord, err: ResourceDecodeError) -> AuditFinding:
        logger.warning("%s", err)
        return self._finding(record, FindingKind.RESOURCE_DECODE_ERROR, 0, 0, str(err))

    def _audit_record(self, record: RecoveryRecord, report: AuditReport) -> None:
        if record.is_dropped:
            report.records_dropped += 1
            return

        if record.account is None:
            report.findings.append(
                self._finding(record, FindingKind.MISSING_ACCOUNT, 0, 0, "account is None")
            )
            return

        address = record.account
        try:
            balance = self.state.get_balance(address)
        except ResourceDecodeError as e:
            report.findings.append(self._decode_failure(record, e))
            return

        if balance is None:
            report.records_skipped += 1
            if self.strict_resources:
                report.findings.append(
                    self._finding(
                        record,
                        FindingKind.MISSING_RESOURCE,
                        self._expected_coin(record),
                        0,
                        "account without a balance resource",
                    )
                )
            else:
                logger.info("account without a balance resource: %s", address)
            return

        report.records_audited += 1
        expected_coin = self._expected_coin(record)
        if balance.coin != expected_coin:
            report.findings.append(
                self._finding(
                    record,
                    FindingKind.BALANCE_MISMATCH,
                    expected_coin,
                    balance.coin,
                    "unexpected balance",
                )
            )

        report.audited_supply += balance.coin

        if record.slow_wallet is None:
            return

        try:
            slow = self.state.get_slow_wallet(address)
        except ResourceDecodeError as e:
            report.findings.append(self._decode_failure(record, e))
            return

        expected_unlocked = record.slow_wallet.unlocked * self.scale
        if slow is None:
            if self.strict_resources:
                report.findings.append(
                    self._finding(
                        record,
                        FindingKind.MISSING_RESOURCE,
                        expected_unlocked,
                        0,
                        "account without a slow wallet resource",
                    )
                )
            else:
                logger.info("account without a slow wallet resource: %s", address)
            return

        if slow.unlocked != expected_unlocked:
            report.findings.append(
                self._finding(
                    record,
                    FindingKind.SLOW_WALLET_MISMATCH,
                    expected_unlocked,
                    slow.unlocked,
                    "unexpected slow wallet unlocked",
                )
            )

        # unlocked can never exceed the balance, even when it matches legacy
        if slow.unlocked > balance.coin:
            report.findings.append(
                self._finding(
                    record,
                    FindingKind.UNLOCK_EXCEEDS_BALANCE,
                    slow.unlocked,
                    balance.coin,
                    "unlocked greater than balance",
                )
            )

    def _expected_coin(self, record: RecoveryRecord) -> int:
        coin = record.balance.coin if record.balance is not None else 0
        return coin * self.scale


def audit_accounts(
    records: Sequence[RecoveryRecord],
    state: StateReader,
    **options,
) -> list[AuditFinding]:
    """Run an account audit and return only the ordered findings."""
    return AccountAuditor(state, **options).run(records).findings
