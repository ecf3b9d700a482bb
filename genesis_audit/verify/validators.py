"""Validator set verification."""

from __future__ import annotations

from typing import Iterable

from ..errors import ValidatorSetMismatch
from ..models import parse_address, short_address
from ..state import StateReader


def check_val_set(expected: Iterable[str], state: StateReader) -> frozenset[str]:
    """Check that the migrated validator set equals `expected`.

    Duplicate addresses in `expected` count once. Cardinality is compared
    first; membership after. Either failure raises with the missing and
    unexpected members attached.

    Returns:
        The migrated validator set

    Raises:
        ValidatorSetMismatch: if the sets differ
    """
    wanted = frozenset(parse_address(a) for a in expected)
    migrated = state.validator_addresses()

    if len(migrated) != len(wanted):
        raise ValidatorSetMismatch(
            f"validator set length mismatch: expected {len(wanted)}, migrated {len(migrated)}",
            expected=wanted,
            migrated=migrated,
        )

    for address in sorted(wanted):
        if address not in migrated:
            raise ValidatorSetMismatch(
                f"genesis does not contain validator {short_address(address)}",
                expected=wanted,
                migrated=migrated,
            )

    return migrated
