"""Utility functions for the bl CLI."""

from __future__ import annotations

from beadslite.models import Issue


def format_priority(priority: int) -> str:
    """Format priority as P0-P4."""
    return f"P{priority}"


def truncate(s: str, max_len: int = 60) -> str:
    """Truncate a string with ellipsis."""
    if len(s) <= max_len:
        return s
    return s[:max_len - 3] + "..."


def format_issue_row(issue: Issue) -> str:
    """Format an issue as a single-line row for list/ready display."""
    return (f"{issue.id}  {issue.status:<11}  {format_priority(issue.priority)}  "
            f"{issue.issue_type}  {issue.title}")
