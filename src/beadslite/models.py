"""Core data models and their validation rules."""

from __future__ import annotations

import re
import secrets
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from beadslite.errors import ValidationError
from beadslite.id_gen import DEFAULT_ID_LENGTH, DEFAULT_PREFIX, generate_hash_id


# --- Status constants ---

class Status:
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    CLOSED = "closed"

    _VALID = {OPEN, IN_PROGRESS, CLOSED}
    # Statuses that count as outstanding work
    _ACTIVE = {OPEN, IN_PROGRESS}

    @classmethod
    def is_valid(cls, s: str) -> bool:
        return s in cls._VALID

    @classmethod
    def is_active(cls, s: str) -> bool:
        return s in cls._ACTIVE


# --- IssueType constants ---

class IssueType:
    TASK = "task"
    BUG = "bug"
    FEATURE = "feature"
    EPIC = "epic"

    _VALID = {TASK, BUG, FEATURE, EPIC}

    @classmethod
    def is_valid(cls, t: str) -> bool:
        return t in cls._VALID


# --- Resolution constants ---

class Resolution:
    NONE = ""  # Same as DONE for records written before resolutions existed
    DONE = "done"
    WONTFIX = "wontfix"
    DUPLICATE = "duplicate"

    _VALID = {NONE, DONE, WONTFIX, DUPLICATE}

    @classmethod
    def is_valid(cls, r: str) -> bool:
        return r in cls._VALID


# --- DependencyType constants ---

class DepType:
    BLOCKS = "blocks"
    PARENT_CHILD = "parent_child"
    RELATED = "related"

    _VALID = {BLOCKS, PARENT_CHILD, RELATED}
    _ALIASES = {"parent-child": PARENT_CHILD}

    @classmethod
    def is_valid(cls, dep_type: str) -> bool:
        return dep_type in cls._VALID

    @classmethod
    def normalize(cls, dep_type: str) -> str:
        return cls._ALIASES.get(dep_type, dep_type)


# --- Helper: RFC3339 timestamp handling ---

_EXTRA_FRACTION = re.compile(r"(\.\d{6})\d+")


def parse_timestamp(s: str | None) -> datetime | None:
    """Parse an RFC3339 (or RFC3339Nano) timestamp into an aware UTC datetime."""
    if not s:
        return None
    s = s.strip()
    if not s:
        return None
    # Handle Z suffix
    if s.endswith("Z") or s.endswith("z"):
        s = s[:-1] + "+00:00"
    # Nanosecond precision is truncated to microseconds
    s = _EXTRA_FRACTION.sub(r"\1", s)
    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        raise ValueError(f"cannot parse timestamp: {s}") from None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_timestamp(dt: datetime | None) -> str | None:
    """Format a datetime as RFC3339 in UTC.

    Microseconds are always written so that stored strings sort in
    chronological order.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    s = dt.astimezone(timezone.utc).isoformat(timespec="microseconds")
    if s.endswith("+00:00"):
        s = s[:-6] + "Z"
    return s


def now_utc() -> datetime:
    """Current time in UTC."""
    return datetime.now(timezone.utc)


# --- Dataclasses ---

@dataclass
class Dependency:
    """Directed edge: issue_id depends on depends_on_id."""

    issue_id: str
    depends_on_id: str
    type: str = DepType.BLOCKS
    created_at: datetime = field(default_factory=now_utc)

    def validate(self) -> None:
        if not self.issue_id:
            raise ValidationError("issue_id cannot be empty")
        if not self.depends_on_id:
            raise ValidationError("depends_on_id cannot be empty")
        if not DepType.is_valid(self.type):
            raise ValidationError(f"invalid dependency type: {self.type!r}")
        if self.issue_id == self.depends_on_id:
            raise ValidationError(f"issue cannot depend on itself: {self.issue_id}")

    def to_dict(self) -> dict:
        return {
            "issue_id": self.issue_id,
            "depends_on_id": self.depends_on_id,
            "type": self.type,
            "created_at": format_timestamp(self.created_at),
        }


@dataclass
class Issue:
    """A unit of work. Instances are detached copies of stored rows."""

    id: str = ""
    title: str = ""
    description: str = ""
    status: str = Status.OPEN
    priority: int = 2
    issue_type: str = IssueType.TASK
    created_at: datetime = field(default_factory=now_utc)
    updated_at: datetime = field(default_factory=now_utc)
    closed_at: datetime | None = None
    resolution: str = Resolution.NONE

    # Outgoing edges, populated for export/import only
    dependencies: list[Dependency] = field(default_factory=list)

    def validate(self) -> None:
        """Raise ValidationError if any field holds an invalid value."""
        if not self.title or not self.title.strip():
            raise ValidationError("title cannot be empty")
        if not Status.is_valid(self.status):
            raise ValidationError(f"invalid status: {self.status!r}")
        if not IssueType.is_valid(self.issue_type):
            raise ValidationError(f"invalid issue type: {self.issue_type!r}")
        if isinstance(self.priority, bool) or not isinstance(self.priority, int):
            raise ValidationError(f"priority must be an integer, got {self.priority!r}")
        if self.priority < 0 or self.priority > 4:
            raise ValidationError(f"priority must be 0-4, got {self.priority}")
        if not Resolution.is_valid(self.resolution):
            raise ValidationError(f"invalid resolution: {self.resolution!r}")

    def is_closed(self) -> bool:
        return self.status == Status.CLOSED

    def to_dict(self) -> dict:
        """Serialize to an exchange record (empty optional fields omitted)."""
        d: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
        }
        if self.description:
            d["description"] = self.description
        d["status"] = self.status
        # priority is always written - 0 is valid (P0)
        d["priority"] = self.priority
        d["issue_type"] = self.issue_type
        d["created_at"] = format_timestamp(self.created_at)
        d["updated_at"] = format_timestamp(self.updated_at)
        if self.closed_at:
            d["closed_at"] = format_timestamp(self.closed_at)
        if self.resolution:
            d["resolution"] = self.resolution
        d["dependencies"] = [
            {"depends_on": dep.depends_on_id, "type": dep.type}
            for dep in self.dependencies
        ]
        return d

    @classmethod
    def from_dict(cls, d: Any) -> Issue:
        """Deserialize an exchange record.

        Raises ValidationError when a field is missing, has the wrong JSON
        type, or holds a value outside its allowed set.
        """
        if not isinstance(d, dict):
            raise ValidationError("record must be a JSON object")

        issue = cls()
        issue.id = _require_str(d, "id")
        if not issue.id:
            raise ValidationError("id cannot be empty")
        issue.title = _require_str(d, "title")
        issue.description = _optional_str(d, "description")
        issue.status = _require_str(d, "status")
        priority = d.get("priority")
        if isinstance(priority, bool) or not isinstance(priority, int):
            raise ValidationError(f"priority must be an integer, got {priority!r}")
        issue.priority = priority
        issue.issue_type = _require_str(d, "issue_type")
        issue.created_at = _require_timestamp(d, "created_at")
        issue.updated_at = _require_timestamp(d, "updated_at")
        closed_at = _optional_str(d, "closed_at")
        issue.closed_at = _to_timestamp("closed_at", closed_at) if closed_at else None
        issue.resolution = _optional_str(d, "resolution")
        issue.validate()

        deps = d.get("dependencies")
        if deps is None:
            deps = []
        if not isinstance(deps, list):
            raise ValidationError("dependencies must be a list")
        seen: set[tuple[str, str]] = set()
        for entry in deps:
            if not isinstance(entry, dict):
                raise ValidationError("dependency entry must be a JSON object")
            dep = Dependency(
                issue_id=issue.id,
                depends_on_id=_require_str(entry, "depends_on"),
                type=DepType.normalize(_require_str(entry, "type")),
            )
            dep.validate()
            key = (dep.depends_on_id, dep.type)
            if key in seen:
                continue
            seen.add(key)
            issue.dependencies.append(dep)
        return issue


def _require_str(d: dict, key: str) -> str:
    value = d.get(key)
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string, got {value!r}")
    return value


def _optional_str(d: dict, key: str) -> str:
    value = d.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string, got {value!r}")
    return value


def _to_timestamp(key: str, value: str) -> datetime:
    try:
        dt = parse_timestamp(value)
    except ValueError as e:
        raise ValidationError(f"{key}: {e}") from e
    if dt is None:
        raise ValidationError(f"{key} cannot be empty")
    return dt


def _require_timestamp(d: dict, key: str) -> datetime:
    return _to_timestamp(key, _require_str(d, key))


def new_issue(title: str, description: str = "", priority: int = 2,
              issue_type: str = IssueType.TASK, prefix: str = DEFAULT_PREFIX,
              id_length: int = DEFAULT_ID_LENGTH) -> Issue:
    """Create an open issue with a freshly generated hash id.

    A random nonce is folded into the hash so two calls in the same clock
    tick with the same title still get different ids.
    """
    created_ns = time.time_ns()
    created = datetime.fromtimestamp(created_ns / 1e9, tz=timezone.utc)
    issue_id = generate_hash_id(prefix, title, description, created_ns,
                                length=id_length, nonce=secrets.token_hex(8))
    return Issue(
        id=issue_id,
        title=title,
        description=description,
        status=Status.OPEN,
        priority=priority,
        issue_type=issue_type,
        created_at=created,
        updated_at=created,
    )


@dataclass
class IssueFilter:
    """Filter for issue queries. None/empty means "don't filter"."""
    status: str | None = None
    priority: int | None = None
    issue_type: str | None = None
    resolution: str | None = None
    limit: int = 0

    def validate(self) -> None:
        if self.status is not None and not Status.is_valid(self.status):
            raise ValidationError(
                f"invalid status: {self.status!r} (valid: open, in_progress, closed)")
        if self.priority is not None and not 0 <= self.priority <= 4:
            raise ValidationError(f"invalid priority: {self.priority} (valid: 0-4)")
        if self.issue_type is not None and not IssueType.is_valid(self.issue_type):
            raise ValidationError(
                f"invalid type: {self.issue_type!r} (valid: task, bug, feature, epic)")
        if self.resolution is not None and (
                not self.resolution or not Resolution.is_valid(self.resolution)):
            raise ValidationError(
                f"invalid resolution: {self.resolution!r} (valid: done, wontfix, duplicate)")

    def matches(self, issue: Issue) -> bool:
        if self.status is not None and issue.status != self.status:
            return False
        if self.priority is not None and issue.priority != self.priority:
            return False
        if self.issue_type is not None and issue.issue_type != self.issue_type:
            return False
        if self.resolution is not None and issue.resolution != self.resolution:
            return False
        return True
