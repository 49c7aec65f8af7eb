"""Ready-work engine: which open issues are not blocked?

An issue is blocked when it has a ``blocks`` edge to an issue that is not
closed, or when it is a ``parent_child`` descendant of a blocked issue.
``related`` edges never take part. Nothing is cached; every call reads the
current graph from the store.

Cycles are neither detected nor rejected. A cycle of ``blocks`` edges
between non-closed issues leaves every member blocked.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from beadslite.models import Dependency, DepType, Issue, IssueFilter, Status

if TYPE_CHECKING:
    from beadslite.storage.interface import Storage


def compute_blocked(statuses: dict[str, str],
                    deps_by_issue: dict[str, list[Dependency]]) -> set[str]:
    """Return the ids of every blocked issue.

    ``statuses`` maps issue id to status; ``deps_by_issue`` maps a dependent
    id to its outgoing edges. A ``blocks`` edge whose target is unknown does
    not block.
    """
    blocked: set[str] = set()
    children_by_parent: dict[str, list[str]] = {}

    for deps in deps_by_issue.values():
        for dep in deps:
            if dep.type == DepType.BLOCKS:
                blocker_status = statuses.get(dep.depends_on_id)
                if blocker_status is not None and blocker_status != Status.CLOSED:
                    blocked.add(dep.issue_id)
            elif dep.type == DepType.PARENT_CHILD:
                children_by_parent.setdefault(dep.depends_on_id, []).append(dep.issue_id)

    # Propagate down parent_child edges until nothing new is added
    queue = list(blocked)
    cursor = 0
    while cursor < len(queue):
        parent = queue[cursor]
        cursor += 1
        for child in children_by_parent.get(parent, []):
            if child in blocked:
                continue
            blocked.add(child)
            queue.append(child)

    return blocked


def _snapshot(store: Storage) -> tuple[list[Issue], dict[str, list[Dependency]]]:
    return store.with_transaction(
        lambda s: (s.list_issues(), s.get_all_dependencies())
    )


def get_ready_work(store: Storage, filter: IssueFilter | None = None) -> list[Issue]:
    """Open or in-progress issues that are not blocked.

    Ordered by priority, then created_at (the store's listing order).
    ``filter`` narrows the result by priority/type and applies its limit.
    """
    issues, deps_by_issue = _snapshot(store)
    blocked = compute_blocked({i.id: i.status for i in issues}, deps_by_issue)

    ready = [
        issue for issue in issues
        if Status.is_active(issue.status) and issue.id not in blocked
    ]
    if filter is not None:
        ready = [issue for issue in ready if filter.matches(issue)]
        if filter.limit > 0:
            ready = ready[:filter.limit]
    return ready


def get_blocked_issues(store: Storage) -> list[tuple[Issue, list[str]]]:
    """Open or in-progress issues that are blocked, with their direct blockers.

    The blocker list holds the ids of non-closed issues this one ``blocks``
    on. It is empty for issues blocked only through a blocked ancestor.
    """
    issues, deps_by_issue = _snapshot(store)
    statuses = {i.id: i.status for i in issues}
    blocked = compute_blocked(statuses, deps_by_issue)

    result = []
    for issue in issues:
        if issue.id not in blocked or not Status.is_active(issue.status):
            continue
        blocker_ids = [
            dep.depends_on_id for dep in deps_by_issue.get(issue.id, [])
            if dep.type == DepType.BLOCKS
            and statuses.get(dep.depends_on_id, Status.CLOSED) != Status.CLOSED
        ]
        result.append((issue, blocker_ids))
    return result
