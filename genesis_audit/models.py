"""Data models for legacy records, migrated resources, and audit findings."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

U64_MAX = 2**64 - 1

ADDRESS_LENGTH = 32  # bytes
_HEX = re.compile(r"^[0-9a-f]+$")

# Well-known system accounts: 0x0 (reserved) and 0x1 (framework/core code)
CORE_CODE_ADDRESS = "0x" + "0" * 63 + "1"
RESERVED_ADDRESS = "0x" + "0" * 64
SYSTEM_ADDRESSES = frozenset({RESERVED_ADDRESS, CORE_CODE_ADDRESS})


def parse_address(value: Any) -> str:
    """Canonicalize an account address.

    Accepts hex with or without a `0x` prefix. Shorter addresses (legacy
    16-byte accounts, `0x1` shorthands) are left-padded to 32 bytes.

    Raises:
        ValueError: if the value is not a hex string of at most 32 bytes
    """
    if not isinstance(value, str):
        raise ValueError(f"address must be a string, got {type(value).__name__}")
    text = value.strip().lower()
    if text.startswith("0x"):
        text = text[2:]
    if not text or not _HEX.match(text):
        raise ValueError(f"invalid address {value!r}")
    if len(text) > ADDRESS_LENGTH * 2:
        raise ValueError(f"address {value!r} is longer than {ADDRESS_LENGTH} bytes")
    return "0x" + text.rjust(ADDRESS_LENGTH * 2, "0")


def short_address(address: str | None) -> str:
    """Compact display form: strip leading zeros after the prefix."""
    if address is None:
        return "-"
    return "0x" + (address[2:].lstrip("0") or "0")


def check_u64(value: Any, name: str) -> int:
    """Validate an unsigned 64-bit amount."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {type(value).__name__}")
    if value < 0 or value > U64_MAX:
        raise ValueError(f"{name} out of u64 range: {value}")
    return value


class Role(str, Enum):
    """Legacy account classification.

    - SYSTEM: framework accounts, stripped by normalization
    - VALIDATOR: consensus participants
    - OPERATOR: validator operator accounts
    - NORMAL: end-user accounts
    - DROP: intentionally not migrated; never audited
    """
    SYSTEM = "system"
    VALIDATOR = "validator"
    OPERATOR = "operator"
    NORMAL = "normal"
    DROP = "drop"

    @classmethod
    def parse(cls, value: Any) -> "Role":
        if value is None:
            return cls.NORMAL
        if not isinstance(value, str):
            raise ValueError(f"role must be a string, got {type(value).__name__}")
        key = value.strip().lower().replace("_", "").replace("-", "")
        role = _ROLE_ALIASES.get(key)
        if role is None:
            raise ValueError(f"unknown account role {value!r}")
        return role


_ROLE_ALIASES = {
    "system": Role.SYSTEM,
    "validator": Role.VALIDATOR,
    "operator": Role.OPERATOR,
    "operatoronly": Role.OPERATOR,
    "normal": Role.NORMAL,
    "enduser": Role.NORMAL,
    "drop": Role.DROP,
}


@dataclass(frozen=True)
class LegacyBalance:
    coin: int


@dataclass(frozen=True)
class LegacySlowWallet:
    unlocked: int
    transferred: int = 0


@dataclass(frozen=True)
class RecoveryRecord:
    """One account from the legacy ledger snapshot."""

    index: int  # position in the original file; never renumbered
    account: str | None
    role: Role = Role.NORMAL
    balance: LegacyBalance | None = None
    slow_wallet: LegacySlowWallet | None = None

    @property
    def is_dropped(self) -> bool:
        return self.role is Role.DROP


@dataclass(frozen=True)
class BalanceResource:
    """Migrated spendable balance."""

    coin: int

    def to_dict(self) -> dict[str, int]:
        return {"coin": self.coin}


@dataclass(frozen=True)
class SlowWalletResource:
    """Migrated time-locked balance split."""

    unlocked: int
    transferred: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"unlocked": self.unlocked, "transferred": self.transferred}


class FindingKind(str, Enum):
    """Per-account discrepancy kinds."""
    MISSING_ACCOUNT = "missing_account"
    BALANCE_MISMATCH = "balance_mismatch"
    SLOW_WALLET_MISMATCH = "slow_wallet_mismatch"
    UNLOCK_EXCEEDS_BALANCE = "unlock_exceeds_balance"
    MISSING_RESOURCE = "missing_resource"
    RESOURCE_DECODE_ERROR = "resource_decode_error"


@dataclass(frozen=True)
class AuditFinding:
    """A single discrepancy between legacy and migrated state."""

    index: int
    account: str | None
    expected: int
    migrated: int
    kind: FindingKind
    message: str

    def __str__(self) -> str:
        return (
            f"[{self.kind.value}] #{self.index} {short_address(self.account)} - "
            f"{self.message} (expected {self.expected}, migrated {self.migrated})"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "account": self.account,
            "kind": self.kind.value,
            "expected": self.expected,
            "migrated": self.migrated,
            "message": self.message,
        }


@dataclass
class AuditReport:
    """Outcome of one account-audit run."""

    findings: list[AuditFinding] = field(default_factory=list)
    audited_supply: int = 0  # sum of migrated balances over audited accounts
    records_total: int = 0
    records_audited: int = 0
    records_dropped: int = 0
    records_skipped: int = 0  # no balance resource (soft skip)

    @property
    def ok(self) -> bool:
        return not self.findings

    @property
    def decode_errors(self) -> list[AuditFinding]:
        return [f for f in self.findings if f.kind is FindingKind.RESOURCE_DECODE_ERROR]

    def counts_by_kind(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for f in self.findings:
            counts[f.kind.value] = counts.get(f.kind.value, 0) + 1
        return counts

    def merge(self, other: "AuditReport") -> None:
        """Append another partial report; order is the caller's responsibility."""
        self.findings.extend(other.findings)
        self.audited_supply += other.audited_supply
        self.records_total += other.records_total
        self.records_audited += other.records_audited
        self.records_dropped += other.records_dropped
        self.records_skipped += other.records_skipped

    def summary(self) -> dict[str, Any]:
        return {
            "records": self.records_total,
            "audited": self.records_audited,
            "dropped": self.records_dropped,
            "skipped": self.records_skipped,
            "audited_supply": self.audited_supply,
            "findings": len(self.findings),
            "by_kind": self.counts_by_kind(),
        }
