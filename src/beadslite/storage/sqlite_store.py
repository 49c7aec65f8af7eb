"""SQLite storage implementation for beads-lite."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from typing import Any, Callable, Iterator, TypeVar

from beadslite.errors import (
    DuplicateEdge, DuplicateID, InvalidResolution, NotFound, StorageError,
)
from beadslite.models import (
    Dependency, Issue, IssueFilter, Resolution, Status, format_timestamp,
    now_utc, parse_timestamp,
)
from beadslite.storage.interface import Storage
from beadslite.storage.schema import SCHEMA

T = TypeVar("T")

_ISSUE_COLUMNS = (
    "id, title, description, status, priority, issue_type, "
    "created_at, updated_at, closed_at, resolution"
)


def _is_unique_violation(e: sqlite3.IntegrityError) -> bool:
    msg = str(e)
    return "UNIQUE" in msg or "PRIMARY KEY" in msg


class SQLiteStorage(Storage):
    """SQLite-based storage backend.

    The connection runs in autocommit mode; every write goes through
    ``_transaction()``, which opens ``BEGIN IMMEDIATE`` at the outermost
    level and a savepoint when nested, so store operations called from
    inside ``with_transaction`` join the caller's transaction.
    """

    def __init__(self, db_path: str):
        self._db_path = db_path
        self._tx_depth = 0
        try:
            self._conn = sqlite3.connect(db_path, isolation_level=None)
        except sqlite3.Error as e:
            raise StorageError(f"open database {db_path}: {e}") from e
        self._conn.row_factory = sqlite3.Row
        try:
            if db_path != ":memory:":
                self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA busy_timeout=5000")
            self._conn.executescript(SCHEMA)
        except sqlite3.Error as e:
            self._conn.close()
            raise StorageError(f"init schema: {e}") from e

    def path(self) -> str:
        return self._db_path

    def close(self) -> None:
        self._conn.close()

    # --- Helpers ---

    def _execute(self, op: str, sql: str, params: tuple | list = ()) -> sqlite3.Cursor:
        try:
            return self._conn.execute(sql, params)
        except sqlite3.Error as e:
            raise StorageError(f"{op}: {e}") from e

    @contextmanager
    def _transaction(self) -> Iterator[None]:
        if self._tx_depth == 0:
            begin, commit, rollback = "BEGIN IMMEDIATE", ["COMMIT"], ["ROLLBACK"]
        else:
            name = f"sp_{self._tx_depth}"
            begin = f"SAVEPOINT {name}"
            commit = [f"RELEASE {name}"]
            rollback = [f"ROLLBACK TO {name}", f"RELEASE {name}"]

        self._execute("begin transaction", begin)
        self._tx_depth += 1
        try:
            yield
        except BaseException:
            self._tx_depth -= 1
            # SQLite may already have rolled back on its own (e.g. disk full)
            if self._conn.in_transaction:
                for stmt in rollback:
                    self._conn.execute(stmt)
            raise
        self._tx_depth -= 1
        try:
            for stmt in commit:
                self._conn.execute(stmt)
        except sqlite3.Error as e:
            if self._conn.in_transaction and self._tx_depth == 0:
                self._conn.execute("ROLLBACK")
            raise StorageError(f"commit transaction: {e}") from e

    def _row_to_issue(self, row: sqlite3.Row) -> Issue:
        """Convert a database row to an Issue object."""
        return Issue(
            id=row["id"],
            title=row["title"],
            description=row["description"] or "",
            status=row["status"] or Status.OPEN,
            priority=row["priority"],
            issue_type=row["issue_type"],
            created_at=parse_timestamp(row["created_at"]) or now_utc(),
            updated_at=parse_timestamp(row["updated_at"]) or now_utc(),
            closed_at=parse_timestamp(row["closed_at"]),
            resolution=row["resolution"] or "",
        )

    def _row_to_dependency(self, row: sqlite3.Row) -> Dependency:
        return Dependency(
            issue_id=row["issue_id"],
            depends_on_id=row["depends_on_id"],
            type=row["type"],
            created_at=parse_timestamp(row["created_at"]) or now_utc(),
        )

    # --- Issue CRUD ---

    def create_issue(self, issue: Issue) -> None:
        issue.validate()
        try:
            with self._transaction():
                self._conn.execute(
                    f"INSERT INTO issues ({_ISSUE_COLUMNS}) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    (
                        issue.id, issue.title, issue.description, issue.status,
                        issue.priority, issue.issue_type,
                        format_timestamp(issue.created_at),
                        format_timestamp(issue.updated_at),
                        format_timestamp(issue.closed_at), issue.resolution,
                    )
                )
        except sqlite3.IntegrityError as e:
            if _is_unique_violation(e):
                raise DuplicateID(issue.id) from e
            raise StorageError(f"insert issue {issue.id}: {e}") from e
        except sqlite3.Error as e:
            raise StorageError(f"insert issue {issue.id}: {e}") from e

    def get_issue(self, issue_id: str) -> Issue:
        row = self._execute(
            f"get issue {issue_id}",
            f"SELECT {_ISSUE_COLUMNS} FROM issues WHERE id = ?", (issue_id,)
        ).fetchone()
        if row is None:
            raise NotFound(issue_id)
        return self._row_to_issue(row)

    def update_issue(self, issue: Issue, preserve_timestamps: bool = False) -> int:
        issue.validate()
        # The caller's Issue is left as passed in
        updated_at, closed_at = issue.updated_at, issue.closed_at
        if not preserve_timestamps:
            now = now_utc()
            updated_at = now
            if issue.status == Status.CLOSED and closed_at is None:
                closed_at = now

        if preserve_timestamps:
            sql = (
                "UPDATE issues SET title = ?, description = ?, status = ?, "
                "priority = ?, issue_type = ?, resolution = ?, "
                "created_at = ?, updated_at = ?, closed_at = ? WHERE id = ?"
            )
            params: list[Any] = [
                issue.title, issue.description, issue.status, issue.priority,
                issue.issue_type, issue.resolution,
                format_timestamp(issue.created_at),
                format_timestamp(updated_at),
                format_timestamp(closed_at), issue.id,
            ]
        else:
            # closed_at is never cleared by a regular update
            sql = (
                "UPDATE issues SET title = ?, description = ?, status = ?, "
                "priority = ?, issue_type = ?, resolution = ?, "
                "updated_at = ?, closed_at = COALESCE(?, closed_at) WHERE id = ?"
            )
            params = [
                issue.title, issue.description, issue.status, issue.priority,
                issue.issue_type, issue.resolution,
                format_timestamp(updated_at),
                format_timestamp(closed_at), issue.id,
            ]

        with self._transaction():
            cur = self._execute(f"update issue {issue.id}", sql, params)
        return cur.rowcount

    def close_issue(self, issue_id: str, resolution: str = Resolution.DONE) -> int:
        if not resolution or not Resolution.is_valid(resolution):
            raise InvalidResolution(
                f"invalid resolution: {resolution!r} (must be done, wontfix, or duplicate)"
            )
        now = format_timestamp(now_utc())
        with self._transaction():
            cur = self._execute(
                f"close issue {issue_id}",
                "UPDATE issues SET status = ?, closed_at = ?, updated_at = ?, resolution = ? "
                "WHERE id = ? AND status != ?",
                (Status.CLOSED, now, now, resolution, issue_id, Status.CLOSED)
            )
        return cur.rowcount

    def delete_issue(self, issue_id: str) -> None:
        with self._transaction():
            self._execute(
                f"delete dependencies of {issue_id}",
                "DELETE FROM dependencies WHERE issue_id = ? OR depends_on_id = ?",
                (issue_id, issue_id)
            )
            cur = self._execute(
                f"delete issue {issue_id}",
                "DELETE FROM issues WHERE id = ?", (issue_id,)
            )
            if cur.rowcount == 0:
                raise NotFound(issue_id, op="delete issue")

    # --- Query ---

    def list_issues(self, filter: IssueFilter | None = None) -> list[Issue]:
        clauses = ["1=1"]
        params: list[Any] = []
        f = filter or IssueFilter()

        if f.status is not None:
            clauses.append("status = ?")
            params.append(f.status)
        if f.priority is not None:
            clauses.append("priority = ?")
            params.append(f.priority)
        if f.issue_type is not None:
            clauses.append("issue_type = ?")
            params.append(f.issue_type)
        if f.resolution is not None:
            clauses.append("resolution = ?")
            params.append(f.resolution)

        sql = (
            f"SELECT {_ISSUE_COLUMNS} FROM issues WHERE {' AND '.join(clauses)} "
            "ORDER BY priority ASC, created_at ASC, rowid ASC"
        )
        if f.limit > 0:
            sql += " LIMIT ?"
            params.append(f.limit)
        rows = self._execute("list issues", sql, params).fetchall()
        return [self._row_to_issue(row) for row in rows]

    def issue_count(self) -> int:
        row = self._execute("count issues", "SELECT COUNT(*) FROM issues").fetchone()
        return row[0]

    # --- Dependencies ---

    def add_dependency(self, issue_id: str, depends_on_id: str,
                       dep_type: str) -> Dependency:
        dep = Dependency(issue_id=issue_id, depends_on_id=depends_on_id, type=dep_type)
        dep.validate()
        op = f"add dependency {issue_id} -> {depends_on_id}"
        try:
            with self._transaction():
                self._conn.execute(
                    "INSERT INTO dependencies (issue_id, depends_on_id, type, created_at) "
                    "VALUES (?, ?, ?, ?)",
                    (dep.issue_id, dep.depends_on_id, dep.type,
                     format_timestamp(dep.created_at))
                )
        except sqlite3.IntegrityError as e:
            if _is_unique_violation(e):
                raise DuplicateEdge(issue_id, depends_on_id, dep_type) from e
            raise StorageError(f"{op}: {e}") from e
        except sqlite3.Error as e:
            raise StorageError(f"{op}: {e}") from e
        return dep

    def remove_dependency(self, issue_id: str, depends_on_id: str,
                          dep_type: str) -> int:
        with self._transaction():
            cur = self._execute(
                f"remove dependency {issue_id} -> {depends_on_id}",
                "DELETE FROM dependencies WHERE issue_id = ? AND depends_on_id = ? AND type = ?",
                (issue_id, depends_on_id, dep_type)
            )
        return cur.rowcount

    def remove_all_dependencies(self, issue_id: str) -> int:
        with self._transaction():
            cur = self._execute(
                f"remove dependencies of {issue_id}",
                "DELETE FROM dependencies WHERE issue_id = ?", (issue_id,)
            )
        return cur.rowcount

    def get_dependencies(self, issue_id: str) -> list[Dependency]:
        rows = self._execute(
            f"get dependencies of {issue_id}",
            "SELECT * FROM dependencies WHERE issue_id = ? ORDER BY rowid",
            (issue_id,)
        ).fetchall()
        return [self._row_to_dependency(row) for row in rows]

    def get_dependents(self, issue_id: str) -> list[Dependency]:
        rows = self._execute(
            f"get dependents of {issue_id}",
            "SELECT * FROM dependencies WHERE depends_on_id = ? ORDER BY rowid",
            (issue_id,)
        ).fetchall()
        return [self._row_to_dependency(row) for row in rows]

    def get_all_dependencies(self) -> dict[str, list[Dependency]]:
        rows = self._execute(
            "get all dependencies",
            "SELECT * FROM dependencies ORDER BY rowid"
        ).fetchall()
        result: dict[str, list[Dependency]] = {}
        for row in rows:
            dep = self._row_to_dependency(row)
            result.setdefault(dep.issue_id, []).append(dep)
        return result

    # --- Transactions ---

    def with_transaction(self, fn: Callable[[Storage], T]) -> T:
        with self._transaction():
            return fn(self)


def open_storage(db_path: str) -> SQLiteStorage:
    """Open or create a SQLite storage at the given path."""
    return SQLiteStorage(db_path)
