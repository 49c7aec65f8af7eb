"""JSONL export: one self-contained record per issue, sorted by id.

Each record embeds the issue's outgoing edges, so the output can be read
back in any order and diffs cleanly under version control.
"""

from __future__ import annotations

import dataclasses
import json
import os
from typing import TYPE_CHECKING, Iterable, TextIO

from beadslite.models import Dependency, Issue

if TYPE_CHECKING:
    from beadslite.storage.interface import Storage


def write_issues_jsonl(issues: Iterable[Issue],
                       deps_by_issue: dict[str, list[Dependency]],
                       stream: TextIO) -> int:
    """Write issues with their dependencies as JSONL. Returns lines written."""
    count = 0
    for issue in issues:
        record = dataclasses.replace(
            issue, dependencies=list(deps_by_issue.get(issue.id, []))
        )
        line = json.dumps(record.to_dict(), ensure_ascii=False, separators=(",", ":"))
        stream.write(line + "\n")
        count += 1
    return count


def export_jsonl(store: Storage, stream: TextIO) -> int:
    """Export every issue in the store to ``stream``. Returns the issue count."""
    # Batch-fetch all dependencies once instead of querying per issue
    issues, deps_by_issue = store.with_transaction(
        lambda s: (s.list_issues(), s.get_all_dependencies())
    )
    # Sort by ID for deterministic output, independent of priority edits
    issues.sort(key=lambda i: i.id)
    return write_issues_jsonl(issues, deps_by_issue, stream)


def export_to_file(store: Storage, jsonl_path: str) -> int:
    """Export to a file, replacing it atomically. Returns the issue count."""
    tmp_path = jsonl_path + ".tmp"
    try:
        with open(tmp_path, "w", encoding="utf-8") as f:
            count = export_jsonl(store, f)
        # Atomic rename
        os.replace(tmp_path, jsonl_path)
    except Exception:
        # Clean up temp file on error
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise
    return count
