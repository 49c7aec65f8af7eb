"""Storage interface (abstract base) for beads-lite."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, TypeVar

from beadslite.models import Dependency, Issue, IssueFilter, Resolution

T = TypeVar("T")


class Storage(ABC):
    """Abstract base class defining all storage operations.

    Issues and dependencies handed out are detached copies; changing them
    has no effect until they are passed back through an update call.
    """

    @abstractmethod
    def path(self) -> str:
        """Return the database file path."""

    @abstractmethod
    def close(self) -> None:
        """Close the storage connection."""

    def __enter__(self) -> Storage:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # --- Issue CRUD ---

    @abstractmethod
    def create_issue(self, issue: Issue) -> None:
        """Insert a new issue. Raises DuplicateID if the id is taken."""

    @abstractmethod
    def get_issue(self, issue_id: str) -> Issue:
        """Get an issue by ID. Raises NotFound if it does not exist."""

    @abstractmethod
    def update_issue(self, issue: Issue, preserve_timestamps: bool = False) -> int:
        """Overwrite the mutable fields of an issue.

        Returns the number of rows written; 0 means no issue had that id,
        which is not an error.
        """

    @abstractmethod
    def close_issue(self, issue_id: str, resolution: str = Resolution.DONE) -> int:
        """Close an issue. Returns rows affected (0 if missing or already closed)."""

    @abstractmethod
    def delete_issue(self, issue_id: str) -> None:
        """Delete an issue and every edge touching it. Raises NotFound."""

    # --- Query ---

    @abstractmethod
    def list_issues(self, filter: IssueFilter | None = None) -> list[Issue]:
        """List issues ordered by priority, then created_at, then insertion."""

    @abstractmethod
    def issue_count(self) -> int:
        """Total number of issues."""

    # --- Dependencies ---

    @abstractmethod
    def add_dependency(self, issue_id: str, depends_on_id: str,
                       dep_type: str) -> Dependency:
        """Add an edge. Raises DuplicateEdge if the exact triple exists."""

    @abstractmethod
    def remove_dependency(self, issue_id: str, depends_on_id: str,
                          dep_type: str) -> int:
        """Remove an edge. Returns rows affected; 0 is not an error."""

    @abstractmethod
    def remove_all_dependencies(self, issue_id: str) -> int:
        """Remove every edge where issue_id is the dependent."""

    @abstractmethod
    def get_dependencies(self, issue_id: str) -> list[Dependency]:
        """Get the outgoing edges of an issue."""

    @abstractmethod
    def get_dependents(self, issue_id: str) -> list[Dependency]:
        """Get the edges that point at an issue."""

    @abstractmethod
    def get_all_dependencies(self) -> dict[str, list[Dependency]]:
        """Get every edge, keyed by the dependent issue id."""

    # --- Transactions ---

    @abstractmethod
    def with_transaction(self, fn: Callable[[Storage], T]) -> T:
        """Run fn(store) in an exclusive write transaction.

        Any exception rolls back all writes and propagates unchanged.
        """
