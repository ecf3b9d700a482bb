"""
Run journal for migration audits.

Every audit run can append one JSON line describing what was checked and
how it ended, so the history of a migration's verification survives the
terminal session that produced it.

Each entry records:
- the inputs, by path and sha256 content id
- the outcome (pass, findings, an aggregate mismatch, or the failure that
  ended the run)
- finding counts by kind and the computed supply
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Literal

Outcome = Literal[
    "pass",
    "findings",
    "supply_mismatch",
    "validator_mismatch",
    "decode_error",
    "load_error",
    "cancelled",
    "export_error",
]


def content_id(path: Path) -> str | None:
    """sha256 of a file's bytes, or None if it cannot be read."""
    try:
        return hashlib.sha256(path.read_bytes()).hexdigest()
    except OSError:
        return None


@dataclass
class RunEntry:
    """A single journal entry."""
    timestamp: str
    command: str
    outcome: str
    inputs: dict[str, dict[str, str | None]] = field(default_factory=dict)
    findings: dict[str, int] = field(default_factory=dict)
    supply: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "command": self.command,
            "outcome": self.outcome,
            "inputs": self.inputs,
            "findings": self.findings,
            "supply": self.supply,
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RunEntry":
        return cls(
            timestamp=data["timestamp"],
            command=data["command"],
            outcome=data["outcome"],
            inputs=data.get("inputs", {}),
            findings=data.get("findings", {}),
            supply=data.get("supply"),
            metadata=data.get("metadata", {}),
        )


def log_run(
    journal_path: Path,
    command: str,
    outcome: Outcome,
    inputs: dict[str, Path] | None = None,
    findings: dict[str, int] | None = None,
    supply: int | None = None,
    metadata: dict[str, Any] | None = None,
) -> RunEntry:
    """
    Append a run to the journal.

    Args:
        journal_path: JSONL file to append to (created if missing)
        command: CLI command or API entry point that ran
        outcome: How the run ended
        inputs: Named input files; each is recorded with its content id
        findings: Finding counts by kind
        supply: Computed total supply, if the supply check ran
        metadata: Additional context (options, worker count)

    Returns:
        The appended entry
    """
    entry = RunEntry(
        timestamp=datetime.now(timezone.utc).isoformat(),
        command=command,
        outcome=outcome,
        inputs={
            name: {"path": str(path), "content_id": content_id(path)}
            for name, path in (inputs or {}).items()
        },
        findings=findings or {},
        supply=supply,
        metadata=metadata or {},
    )

    journal_path.parent.mkdir(parents=True, exist_ok=True)
    with journal_path.open("a", encoding="utf-8") as f:
        f.write(json.dumps(entry.to_dict()) + "\n")

    return entry


def read_run_log(journal_path: Path, last_n: int | None = None) -> list[RunEntry]:
    """
    Read journal entries, oldest first.

    Args:
        journal_path: JSONL journal file
        last_n: If specified, return only the last N entries
    """
    if not journal_path.exists():
        return []

    entries = []
    with journal_path.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line:
                try:
                    entries.append(RunEntry.from_dict(json.loads(line)))
                except (json.JSONDecodeError, KeyError, TypeError):
                    continue  # Skip malformed lines

    if last_n is not None:
        return entries[-last_n:]
    return entries


def format_run_entry(entry: RunEntry) -> str:
    """Format a journal entry for human-readable display."""
    lines = [f"[{entry.timestamp}] {entry.command}: {entry.outcome}"]

    for name, info in entry.inputs.items():
        cid = info.get("content_id") or "unreadable"
        lines.append(f"  {name}: {info.get('path')} ({cid[:12]})")

    if entry.supply is not None:
        lines.append(f"  Supply: {entry.supply}")

    if entry.findings:
        parts = [f"{count} {kind}" for kind, count in sorted(entry.findings.items())]
        lines.append(f"  Findings: {', '.join(parts)}")

    for key, value in entry.metadata.items():
        lines.append(f"  {key}: {value}")

    return "\n".join(lines)
