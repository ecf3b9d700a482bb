"""
Error taxonomy for migration audits.

Per-account anomalies never raise; they become AuditFinding entries. The
exceptions here are for failures that invalidate a whole operation:
- SnapshotLoadError: an input file could not be read or parsed
- ResourceDecodeError: stored resource bytes do not decode (per account)
- SupplyMismatch / ValidatorSetMismatch: aggregate invariants failed
- AuditCancelled: a cooperative cancel was observed between records
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable


class AuditError(Exception):
    """Base class for all genesis-audit errors."""


class SnapshotLoadError(AuditError, ValueError):
    """A recovery file or ledger snapshot could not be loaded."""

    def __init__(self, path: Path | str, reason: str, index: int | None = None):
        self.path = Path(path)
        self.reason = reason
        self.index = index
        where = f"{self.path}"
        if index is not None:
            where += f" (record {index})"
        super().__init__(f"cannot load {where}: {reason}")


class ResourceDecodeError(AuditError, ValueError):
    """Stored bytes cannot be decoded as the requested resource kind."""

    def __init__(self, address: str, kind: str, reason: str):
        self.address = address
        self.kind = kind
        self.reason = reason
        super().__init__(f"cannot decode {kind} resource at {address}: {reason}")


class SupplyMismatch(AuditError):
    """Total supply in the migrated state differs from the expected value."""

    def __init__(self, expected: int, migrated: int):
        self.expected = expected
        self.migrated = migrated
        super().__init__(f"supply mismatch, expected: {expected} vs migrated: {migrated}")


def _fmt(addrs: Iterable[str]) -> str:
    items = sorted(addrs)
    return ", ".join(items) if items else "none"


class ValidatorSetMismatch(AuditError):
    """Migrated validator set is not set-equal to the expected one."""

    def __init__(
        self,
        reason: str,
        *,
        expected: frozenset[str] = frozenset(),
        migrated: frozenset[str] = frozenset(),
    ):
        self.reason = reason
        self.expected = expected
        self.migrated = migrated
        self.missing = expected - migrated
        self.unexpected = migrated - expected
        super().__init__(
            f"{reason}; missing: {_fmt(self.missing)}; unexpected: {_fmt(self.unexpected)}"
        )


class AuditCancelled(AuditError):
    """The audit was cancelled before all records were processed."""

    def __init__(self, processed: int):
        self.processed = processed
        super().__init__(f"audit cancelled after {processed} records")


class ExportError(AuditError, OSError):
    """An export could not be written."""


class ConfigError(AuditError, ValueError):
    """The audit profile is invalid."""
