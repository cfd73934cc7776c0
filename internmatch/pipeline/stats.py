"""Read-only aggregates over stored students and allocations."""

import sqlite3
from collections.abc import Sequence

from internmatch.core.db import (
    average_allocation_score,
    count_active_internships,
    count_allocations,
    count_diversity_students,
    count_students,
    list_audit_entries,
)
from internmatch.core.schemas import (
    AllocationStatus,
    AuditEntry,
    AuditSummary,
    DiversityMetrics,
    SystemStats,
)


def system_stats(conn: sqlite3.Connection) -> SystemStats:
    """Headline counts plus the mean score over all allocations (1 decimal)."""
    avg = average_allocation_score(conn)
    return SystemStats(
        total_students=count_students(conn),
        active_internships=count_active_internships(conn),
        successful_matches=count_allocations(conn, AllocationStatus.MATCHED),
        avg_match_score=round(avg, 1) if avg is not None else 0.0,
    )


def diversity_metrics(conn: sqlite3.Connection) -> DiversityMetrics:
    """Share of diversity-eligible students; 0% when there are no students."""
    total = count_students(conn)
    with_diversity = count_diversity_students(conn)
    percentage = (with_diversity / total) * 100 if total > 0 else 0.0
    return DiversityMetrics(
        diversity_percentage=round(percentage, 1),
        total_with_diversity=with_diversity,
        total_students=total,
    )


def audit_trail(
    conn: sqlite3.Connection,
    status: AllocationStatus | None = None,
) -> list[AuditEntry]:
    return list_audit_entries(conn, status)


def summarize_audit(entries: Sequence[AuditEntry]) -> AuditSummary:
    """Per-status counts and mean score over a set of audit entries."""
    counts = {status.value: 0 for status in AllocationStatus}
    for entry in entries:
        counts[entry.status.value] += 1

    avg = sum(e.match_score for e in entries) / len(entries) if entries else 0.0
    return AuditSummary(
        total=len(entries),
        status_counts=counts,
        avg_match_score=round(avg, 1),
    )
