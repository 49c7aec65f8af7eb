"""Tests for the ready-work engine."""

import os
import tempfile
from datetime import datetime, timedelta, timezone

import pytest

from beadslite.models import Dependency, DepType, Issue, IssueFilter, Status
from beadslite.ready import compute_blocked, get_blocked_issues, get_ready_work
from beadslite.storage.sqlite_store import SQLiteStorage

T0 = datetime(2026, 1, 15, 10, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def store():
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    s = SQLiteStorage(path)
    yield s
    s.close()
    os.unlink(path)


_counter = 0


def _make_issue(id: str, title: str = "Test", **kwargs) -> Issue:
    global _counter
    _counter += 1
    kwargs.setdefault("created_at", T0 + timedelta(seconds=_counter))
    return Issue(id=id, title=title, **kwargs)


def _ready_ids(store, filter=None):
    return [i.id for i in get_ready_work(store, filter)]


class TestComputeBlocked:
    def test_empty(self):
        assert compute_blocked({}, {}) == set()

    def test_blocks_on_open(self):
        statuses = {"a": Status.OPEN, "b": Status.OPEN}
        deps = {"b": [Dependency("b", "a", DepType.BLOCKS)]}
        assert compute_blocked(statuses, deps) == {"b"}

    def test_blocks_on_closed(self):
        statuses = {"a": Status.CLOSED, "b": Status.OPEN}
        deps = {"b": [Dependency("b", "a", DepType.BLOCKS)]}
        assert compute_blocked(statuses, deps) == set()

    def test_in_progress_blocker_still_blocks(self):
        statuses = {"a": Status.IN_PROGRESS, "b": Status.OPEN}
        deps = {"b": [Dependency("b", "a", DepType.BLOCKS)]}
        assert compute_blocked(statuses, deps) == {"b"}

    def test_unknown_target_does_not_block(self):
        deps = {"b": [Dependency("b", "ghost", DepType.BLOCKS)]}
        assert compute_blocked({"b": Status.OPEN}, deps) == set()

    def test_related_never_blocks(self):
        statuses = {"a": Status.OPEN, "b": Status.OPEN}
        deps = {"b": [Dependency("b", "a", DepType.RELATED)]}
        assert compute_blocked(statuses, deps) == set()

    def test_parent_child_alone_does_not_block(self):
        statuses = {"epic": Status.OPEN, "child": Status.OPEN}
        deps = {"child": [Dependency("child", "epic", DepType.PARENT_CHILD)]}
        assert compute_blocked(statuses, deps) == set()

    def test_propagates_through_hierarchy(self):
        statuses = {k: Status.OPEN for k in ("k", "epic", "sub", "leaf", "other")}
        deps = {
            "epic": [Dependency("epic", "k", DepType.BLOCKS)],
            "sub": [Dependency("sub", "epic", DepType.PARENT_CHILD)],
            "leaf": [Dependency("leaf", "sub", DepType.PARENT_CHILD)],
            "other": [Dependency("other", "leaf", DepType.RELATED)],
        }
        assert compute_blocked(statuses, deps) == {"epic", "sub", "leaf"}

    def test_cycle_is_tolerated(self):
        statuses = {"a": Status.OPEN, "b": Status.OPEN}
        deps = {
            "a": [Dependency("a", "b", DepType.BLOCKS),
                  Dependency("a", "b", DepType.PARENT_CHILD)],
            "b": [Dependency("b", "a", DepType.BLOCKS),
                  Dependency("b", "a", DepType.PARENT_CHILD)],
        }
        assert compute_blocked(statuses, deps) == {"a", "b"}


class TestReadyWork:
    def test_no_dependencies(self, store):
        store.create_issue(_make_issue("bl-a", priority=2))
        store.create_issue(_make_issue("bl-b", priority=0))
        store.create_issue(_make_issue("bl-c", status=Status.IN_PROGRESS))
        store.create_issue(_make_issue("bl-d", status=Status.CLOSED, resolution="done"))
        assert _ready_ids(store) == ["bl-b", "bl-a", "bl-c"]

    def test_chain(self, store):
        for i in ("bl-a", "bl-b", "bl-c"):
            store.create_issue(_make_issue(i))
        store.add_dependency("bl-b", "bl-a", DepType.BLOCKS)
        store.add_dependency("bl-c", "bl-b", DepType.BLOCKS)
        assert _ready_ids(store) == ["bl-a"]

        store.close_issue("bl-a")
        assert _ready_ids(store) == ["bl-b"]

        store.close_issue("bl-b")
        assert _ready_ids(store) == ["bl-c"]

    def test_diamond(self, store):
        for i in ("bl-top", "bl-l", "bl-r", "bl-bottom"):
            store.create_issue(_make_issue(i))
        store.add_dependency("bl-l", "bl-top", DepType.BLOCKS)
        store.add_dependency("bl-r", "bl-top", DepType.BLOCKS)
        store.add_dependency("bl-bottom", "bl-l", DepType.BLOCKS)
        store.add_dependency("bl-bottom", "bl-r", DepType.BLOCKS)

        store.close_issue("bl-top")
        store.close_issue("bl-l")
        assert _ready_ids(store) == ["bl-r"]

        store.close_issue("bl-r")
        assert _ready_ids(store) == ["bl-bottom"]

    def test_epic_blocker_holds_children(self, store):
        store.create_issue(_make_issue("bl-k"))
        store.create_issue(_make_issue("bl-e", issue_type="epic"))
        store.create_issue(_make_issue("bl-x"))
        store.create_issue(_make_issue("bl-y"))
        store.add_dependency("bl-e", "bl-k", DepType.BLOCKS)
        store.add_dependency("bl-x", "bl-e", DepType.PARENT_CHILD)
        store.add_dependency("bl-y", "bl-e", DepType.PARENT_CHILD)
        assert _ready_ids(store) == ["bl-k"]

        store.close_issue("bl-k")
        assert _ready_ids(store) == ["bl-e", "bl-x", "bl-y"]

    def test_blocked_child_does_not_block_parent(self, store):
        store.create_issue(_make_issue("bl-k"))
        store.create_issue(_make_issue("bl-e", issue_type="epic"))
        store.create_issue(_make_issue("bl-x"))
        store.add_dependency("bl-x", "bl-e", DepType.PARENT_CHILD)
        store.add_dependency("bl-x", "bl-k", DepType.BLOCKS)
        assert _ready_ids(store) == ["bl-k", "bl-e"]

    def test_related_edges_ignored(self, store):
        store.create_issue(_make_issue("bl-a"))
        store.create_issue(_make_issue("bl-b"))
        store.add_dependency("bl-b", "bl-a", DepType.RELATED)
        store.add_dependency("bl-a", "bl-b", DepType.RELATED)
        assert _ready_ids(store) == ["bl-a", "bl-b"]

    def test_delete_blocker_unblocks(self, store):
        store.create_issue(_make_issue("bl-a"))
        store.create_issue(_make_issue("bl-b"))
        store.add_dependency("bl-b", "bl-a", DepType.BLOCKS)
        store.delete_issue("bl-a")
        assert _ready_ids(store) == ["bl-b"]

    def test_dangling_blocker_does_not_block(self, store):
        store.create_issue(_make_issue("bl-a"))
        store.add_dependency("bl-a", "bl-ghost", DepType.BLOCKS)
        assert _ready_ids(store) == ["bl-a"]

    def test_cycle_stays_blocked(self, store):
        store.create_issue(_make_issue("bl-a"))
        store.create_issue(_make_issue("bl-b"))
        store.add_dependency("bl-a", "bl-b", DepType.BLOCKS)
        store.add_dependency("bl-b", "bl-a", DepType.BLOCKS)
        assert _ready_ids(store) == []

        store.close_issue("bl-a")
        assert _ready_ids(store) == ["bl-b"]

    def test_reopened_blocker_blocks_again(self, store):
        store.create_issue(_make_issue("bl-a"))
        store.create_issue(_make_issue("bl-b"))
        store.add_dependency("bl-b", "bl-a", DepType.BLOCKS)
        store.close_issue("bl-a")
        assert _ready_ids(store) == ["bl-b"]

        issue = store.get_issue("bl-a")
        issue.status = Status.OPEN
        store.update_issue(issue)
        assert _ready_ids(store) == ["bl-a"]

    def test_filter_and_limit(self, store):
        store.create_issue(_make_issue("bl-a", priority=1, issue_type="bug"))
        store.create_issue(_make_issue("bl-b", priority=1))
        store.create_issue(_make_issue("bl-c", priority=3, issue_type="bug"))
        store.create_issue(_make_issue("bl-d", priority=1))
        store.add_dependency("bl-b", "bl-c", DepType.BLOCKS)

        assert _ready_ids(store, IssueFilter(priority=1)) == ["bl-a", "bl-d"]
        assert _ready_ids(store, IssueFilter(issue_type="bug")) == ["bl-a", "bl-c"]
        assert _ready_ids(store, IssueFilter(limit=2)) == ["bl-a", "bl-d"]


class TestBlockedIssues:
    def test_direct_and_inherited(self, store):
        store.create_issue(_make_issue("bl-k"))
        store.create_issue(_make_issue("bl-done", status=Status.CLOSED, resolution="done"))
        store.create_issue(_make_issue("bl-e", issue_type="epic"))
        store.create_issue(_make_issue("bl-x"))
        store.add_dependency("bl-e", "bl-k", DepType.BLOCKS)
        store.add_dependency("bl-e", "bl-done", DepType.BLOCKS)
        store.add_dependency("bl-x", "bl-e", DepType.PARENT_CHILD)

        result = [(issue.id, blockers) for issue, blockers in get_blocked_issues(store)]
        assert result == [("bl-e", ["bl-k"]), ("bl-x", [])]

    def test_closed_issues_not_reported(self, store):
        store.create_issue(_make_issue("bl-a"))
        store.create_issue(_make_issue("bl-b", status=Status.CLOSED, resolution="done"))
        store.add_dependency("bl-b", "bl-a", DepType.BLOCKS)
        assert get_blocked_issues(store) == []

    def test_ready_and_blocked_partition_active_issues(self, store):
        for i in ("bl-a", "bl-b", "bl-c", "bl-d"):
            store.create_issue(_make_issue(i))
        store.add_dependency("bl-b", "bl-a", DepType.BLOCKS)
        store.add_dependency("bl-c", "bl-b", DepType.PARENT_CHILD)
        store.close_issue("bl-d")

        ready = set(_ready_ids(store))
        blocked = {issue.id for issue, _ in get_blocked_issues(store)}
        assert ready == {"bl-a"}
        assert blocked == {"bl-b", "bl-c"}
