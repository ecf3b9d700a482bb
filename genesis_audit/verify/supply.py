"""Total supply verification.

The supply is recomputed straight from the ledger view, never reused from
the account auditor's running total, so a bug in either path shows up as
a disagreement.
"""

from __future__ import annotations

import logging

from ..errors import SupplyMismatch
from ..state import StateReader

logger = logging.getLogger(__name__)


def total_supply(state: StateReader) -> int:
    """Sum every balance resource in the view.

    Raises:
        ResourceDecodeError: if any balance cannot be decoded
    """
    supply = 0
    accounts = 0
    for address in state.addresses():
        balance = state.get_balance(address)
        if balance is None:
            continue
        supply += balance.coin
        accounts += 1
    logger.debug("total supply %d across %d accounts", supply, accounts)
    return supply


def check_supply(expected: int, state: StateReader) -> int:
    """Verify the migrated total supply.

    Returns:
        The computed supply

    Raises:
        SupplyMismatch: if the computed supply differs from `expected`
    """
    migrated = total_supply(state)
    if migrated != expected:
        raise SupplyMismatch(expected, migrated)
    return migrated
