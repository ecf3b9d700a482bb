"""Dump command - export migrated balances for manual inspection."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console

from ..errors import ExportError, ResourceDecodeError, SnapshotLoadError
from ..export import export_account_dump
from ..recovery import load_recovery_file, normalize
from ..state import load_state_snapshot


def run_dump(recovery_path: Path, snapshot_path: Path, out: Path) -> int:
    """Write {index, account, balance, slow_wallet} per recovered account.

    Args:
        recovery_path: Legacy recovery JSON file selecting the accounts
        snapshot_path: Migrated ledger snapshot the values are read from
        out: Output directory (gets genesis_balances.json) or file path

    Returns:
        Exit code (0 = written, 1 = export failed, 2 = bad input)
    """
    console = Console(stderr=True, soft_wrap=True)
    try:
        records = normalize(load_recovery_file(recovery_path))
        state = load_state_snapshot(snapshot_path)
    except SnapshotLoadError as e:
        console.print(str(e), style="red", markup=False)
        return 2

    try:
        path = export_account_dump(records, state, out)
    except (ExportError, ResourceDecodeError) as e:
        console.print(f"Export failed: {e}", style="red", markup=False)
        return 1

    console.print(f"Wrote account dump to {path}", style="green", markup=False)
    return 0
