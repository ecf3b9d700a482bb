"""Journal command - show past audit runs."""

from __future__ import annotations

import json
from pathlib import Path

from ..run_log import format_run_entry, read_run_log


def run_journal_show(journal_path: Path, *, last_n: int | None = None, output_json: bool = False) -> int:
    entries = read_run_log(journal_path, last_n=last_n)

    if output_json:
        print(json.dumps([e.to_dict() for e in entries], indent=2))
        return 0

    if not entries:
        print(f"No runs recorded in {journal_path}")
        return 0

    for entry in entries:
        print(format_run_entry(entry))
        print()
    return 0
