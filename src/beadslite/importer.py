"""JSONL import with upsert semantics.

Every line is parsed before the store is touched, then all records are
applied in a single transaction: either the whole file lands or nothing
does. A record's dependency list replaces the issue's outgoing edges.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, IO, Iterable

from beadslite.errors import BeadsLiteError, NotFound, ParseError, ValidationError
from beadslite.models import Issue

if TYPE_CHECKING:
    from beadslite.storage.interface import Storage


@dataclass
class ImportResult:
    created: int = 0
    updated: int = 0


def parse_jsonl(lines: Iterable[str | bytes]) -> list[tuple[int, Issue]]:
    """Parse JSONL lines into (line number, issue) pairs.

    Blank lines are skipped. Raises ParseError on the first bad line.
    """
    records: list[tuple[int, Issue]] = []
    for line_num, raw in enumerate(lines, 1):
        if isinstance(raw, bytes):
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError as e:
                raise ParseError(line_num, f"invalid UTF-8: {e}") from e
        line = raw.strip()
        if not line:
            continue
        try:
            data = json.loads(line)
        except json.JSONDecodeError as e:
            raise ParseError(line_num, f"invalid JSON: {e.msg}") from e
        try:
            issue = Issue.from_dict(data)
        except ValidationError as e:
            raise ParseError(line_num, str(e)) from e
        records.append((line_num, issue))
    return records


def _apply_record(store: Storage, incoming: Issue, result: ImportResult) -> None:
    try:
        store.get_issue(incoming.id)
        exists = True
    except NotFound:
        exists = False

    if exists:
        store.update_issue(incoming, preserve_timestamps=True)
        result.updated += 1
        # Clear existing dependencies before re-adding
        store.remove_all_dependencies(incoming.id)
    else:
        store.create_issue(incoming)
        result.created += 1

    for dep in incoming.dependencies:
        store.add_dependency(incoming.id, dep.depends_on_id, dep.type)


def import_jsonl(store: Storage, stream: IO) -> ImportResult:
    """Import issues from a JSONL stream (text or binary)."""
    records = parse_jsonl(stream)

    def apply(s: Storage) -> ImportResult:
        result = ImportResult()
        for line_num, incoming in records:
            try:
                _apply_record(s, incoming, result)
            except BeadsLiteError as e:
                e.add_note(f"while importing line {line_num} ({incoming.id})")
                raise
        return result

    return store.with_transaction(apply)


def import_from_file(store: Storage, jsonl_path: str) -> ImportResult:
    """Import issues from a JSONL file."""
    # parse_jsonl decodes each line itself
    with open(jsonl_path, "rb") as f:
        return import_jsonl(store, f)
