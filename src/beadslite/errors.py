"""Error taxonomy shared by the store, the ready-work engine and import/export."""

from __future__ import annotations


class BeadsLiteError(Exception):
    """Base class for every error raised by beadslite."""


class ValidationError(BeadsLiteError, ValueError):
    """A field value is invalid. Caller error, never retried."""


class InvalidResolution(ValidationError):
    """close_issue was given a resolution outside the allowed set."""


class NotFound(BeadsLiteError, LookupError):
    """The referenced issue does not exist."""

    def __init__(self, issue_id: str, op: str = "") -> None:
        self.issue_id = issue_id
        msg = f"issue not found: {issue_id}"
        if op:
            msg = f"{op}: {msg}"
        super().__init__(msg)


class DuplicateID(BeadsLiteError):
    """An issue with this id already exists."""

    def __init__(self, issue_id: str) -> None:
        self.issue_id = issue_id
        super().__init__(f"issue already exists: {issue_id}")


class DuplicateEdge(BeadsLiteError):
    """The (issue_id, depends_on_id, type) triple already exists."""

    def __init__(self, issue_id: str, depends_on_id: str, dep_type: str) -> None:
        self.issue_id = issue_id
        self.depends_on_id = depends_on_id
        self.dep_type = dep_type
        super().__init__(
            f"dependency already exists: {issue_id} -> {depends_on_id} ({dep_type})"
        )


class StorageError(BeadsLiteError, OSError):
    """The backing store failed. Message is "<operation>: <cause>"."""


class ParseError(BeadsLiteError, ValueError):
    """A line of an exchange stream could not be parsed."""

    def __init__(self, line: int, message: str) -> None:
        self.line = line
        self.message = message
        super().__init__(f"line {line}: {message}")
