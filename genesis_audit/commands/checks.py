"""Aggregate check commands - supply and validator set on their own."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from rich.console import Console

from ..errors import ResourceDecodeError, SnapshotLoadError, SupplyMismatch, ValidatorSetMismatch
from ..models import short_address
from ..progress import console_status
from ..state import load_state_snapshot
from ..verify import check_supply, check_val_set


def run_supply(snapshot_path: Path, expected: int, *, quiet: bool = False) -> int:
    """Check total supply in a ledger snapshot.

    Returns:
        Exit code (0 = match, 1 = mismatch, 2 = bad input)
    """
    console = Console(stderr=True, soft_wrap=True)
    try:
        state = load_state_snapshot(snapshot_path)
    except SnapshotLoadError as e:
        console.print(str(e), style="red", markup=False)
        return 2

    try:
        if quiet:
            supply = check_supply(expected, state)
        else:
            with console_status("checking coin migration", console):
                supply = check_supply(expected, state)
    except (SupplyMismatch, ResourceDecodeError) as e:
        console.print(f"✗ {e}", style="bold red", markup=False)
        return 1

    console.print(f"✓ Total supply matches: {supply}", style="green")
    return 0


def run_validators(snapshot_path: Path, expected: Iterable[str]) -> int:
    """Check the validator set in a ledger snapshot.

    Returns:
        Exit code (0 = match, 1 = mismatch, 2 = bad input)
    """
    console = Console(stderr=True, soft_wrap=True)
    try:
        state = load_state_snapshot(snapshot_path)
    except SnapshotLoadError as e:
        console.print(str(e), style="red", markup=False)
        return 2

    try:
        migrated = check_val_set(expected, state)
    except ValidatorSetMismatch as e:
        console.print(f"✗ {e.reason}", style="bold red", markup=False)
        for address in sorted(e.missing):
            console.print(f"  missing:    {short_address(address)}", style="red", markup=False)
        for address in sorted(e.unexpected):
            console.print(f"  unexpected: {short_address(address)}", style="yellow", markup=False)
        return 1
    except ResourceDecodeError as e:
        console.print(f"✗ {e}", style="bold red", markup=False)
        return 1

    console.print(f"✓ Validator set matches ({len(migrated)} validators)", style="green")
    return 0
