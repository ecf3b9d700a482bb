"""Migration verifiers: per-account audit and aggregate checks."""

from .accounts import AccountAuditor, audit_accounts
from .supply import check_supply, total_supply
from .validators import check_val_set

__all__ = [
    "AccountAuditor",
    "audit_accounts",
    "check_supply",
    "total_supply",
    "check_val_set",
]
