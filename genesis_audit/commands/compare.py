"""Compare command - audit a migrated ledger against its recovery file."""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table

from ..config import AuditConfig
from ..errors import (
    AuditCancelled,
    ExportError,
    ResourceDecodeError,
    SnapshotLoadError,
    SupplyMismatch,
    ValidatorSetMismatch,
)
from ..export import export_account_dump, export_findings, findings_document
from ..models import AuditReport, FindingKind, short_address
from ..progress import console_progress, console_status
from ..recovery import load_recovery_file, normalize
from ..run_log import log_run
from ..state import load_state_snapshot
from ..verify import AccountAuditor, check_supply, check_val_set

_KIND_STYLE = {
    FindingKind.MISSING_ACCOUNT: "yellow",
    FindingKind.MISSING_RESOURCE: "yellow",
    FindingKind.RESOURCE_DECODE_ERROR: "magenta",
}


def run_compare(
    recovery_path: Path,
    snapshot_path: Path,
    config: AuditConfig,
    *,
    output_json: bool = False,
    out: Path | None = None,
    dump: Path | None = None,
    journal: Path | None = None,
    quiet: bool = False,
    cancel: threading.Event | None = None,
) -> int:
    """Run the full migration audit.

    Order: load inputs, aggregate checks (supply, validator set), then the
    per-account audit. Aggregate failures abort before any per-account
    findings are produced.

    Args:
        recovery_path: Legacy recovery JSON file
        snapshot_path: Migrated ledger snapshot JSON file
        config: Audit profile (expectations and options)
        output_json: Print the finding document as JSON on stdout
        out: Also write the finding document to this path
        dump: Also write the per-account dump to this directory or file
        journal: Append a run entry to this JSONL journal
        quiet: Suppress progress display
        cancel: Optional event; setting it stops the audit between records

    Returns:
        Exit code (0 = clean, 1 = findings or aggregate failure, 2 = bad input)
    """
    console = Console(stderr=True, soft_wrap=True)
    show_progress = not (quiet or output_json)
    inputs = {"recovery": recovery_path, "snapshot": snapshot_path}
    meta: dict[str, Any] = {"scale": config.scale, "workers": config.workers}

    def record(outcome, **kwargs) -> None:
        if journal is None:
            return
        try:
            log_run(journal, "compare", outcome, inputs=inputs, metadata=meta, **kwargs)
        except OSError as e:
            console.print(f"Journal write failed: {journal}: {e.strerror or e}", style="red", markup=False)

    try:
        records = load_recovery_file(recovery_path)
        state = load_state_snapshot(snapshot_path)
    except SnapshotLoadError as e:
        console.print(str(e), style="red", markup=False)
        record("load_error")
        return 2

    audited = normalize(records)
    console.print(
        f"Loaded {len(records)} recovery records ({len(records) - len(audited)} system accounts stripped)",
        style="dim",
    )

    supply: int | None = None
    try:
        if config.expected_supply is not None:
            if show_progress:
                with console_status("checking coin migration", console):
                    supply = check_supply(config.expected_supply, state)
            else:
                supply = check_supply(config.expected_supply, state)
            console.print(f"✓ Total supply matches: {supply}", style="green")

        if config.validators is not None:
            val_set = check_val_set(config.validators, state)
            console.print(f"✓ Validator set matches ({len(val_set)} validators)", style="green")
    except SupplyMismatch as e:
        console.print(f"✗ {e}", style="bold red", markup=False)
        record("supply_mismatch", supply=e.migrated)
        return 1
    except ValidatorSetMismatch as e:
        console.print(f"✗ {e}", style="bold red", markup=False)
        record("validator_mismatch", supply=supply)
        return 1
    except ResourceDecodeError as e:
        console.print(f"✗ {e}", style="bold red", markup=False)
        record("decode_error", supply=supply)
        return 1

    auditor = AccountAuditor(
        state,
        scale=config.scale,
        strict_resources=config.strict_resources,
        workers=config.workers,
        cancel=cancel,
    )
    try:
        if show_progress:
            with console_progress(len(audited), "auditing migration", console) as observer:
                auditor.progress = observer
                report = auditor.run(audited)
        else:
            report = auditor.run(audited)
    except AuditCancelled as e:
        console.print(str(e), style="yellow", markup=False)
        record("cancelled", supply=supply)
        return 1

    document = findings_document(report)
    document["supply"] = supply

    if output_json:
        print(json.dumps(document, indent=2))
    else:
        _print_report(console, report)

    exit_code = 0 if report.ok else 1
    outcome = "pass" if report.ok else "findings"
    try:
        if out is not None:
            path = export_findings(report, out)
            console.print(f"Wrote findings to {path}", style="green", markup=False)
        if dump is not None:
            path = export_account_dump(audited, state, dump)
            console.print(f"Wrote account dump to {path}", style="green", markup=False)
    except (ExportError, ResourceDecodeError) as e:
        console.print(f"Export failed: {e}", style="red", markup=False)
        exit_code = 1
        outcome = "export_error"

    record(outcome, findings=report.counts_by_kind(), supply=supply)
    return exit_code


def _print_report(console: Console, report: AuditReport) -> None:
    """Print findings in discovery order, then the summary table."""
    for f in report.findings:
        style = _KIND_STYLE.get(f.kind, "bold red")
        console.print(
            f"  #{f.index} {short_address(f.account)} [{f.kind.value}] {f.message}: "
            f"expected {f.expected}, migrated {f.migrated}",
            style=style,
            markup=False,
            highlight=False,
        )

    console.print()
    table = Table(title="Migration Audit", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Records", str(report.records_total))
    table.add_row("Audited", str(report.records_audited))
    table.add_row("Dropped", str(report.records_dropped))
    table.add_row("Skipped (no balance)", str(report.records_skipped))
    table.add_row("Audited supply", str(report.audited_supply))
    for kind, count in sorted(report.counts_by_kind().items()):
        table.add_row(kind, str(count))
    console.print(table)

    console.print()
    if report.ok:
        console.print("✓ Migration audit passed", style="bold green")
    else:
        console.print(f"❌ {len(report.findings)} finding(s)", style="bold red")
