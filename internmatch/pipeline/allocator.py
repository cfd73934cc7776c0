"""Bulk allocation: score every student against every active internship.

For each student (in store order):
  1. Score the full set of active internships as one batch
  2. Rank and keep the top bulk_top_k
  3. Persist those scoring >= acceptance_threshold as 'matched' allocations,
     highest score first

Storage errors propagate and abort the run; allocations already written stay.
"""

import logging
import sqlite3
from collections.abc import Sequence

from internmatch.core.config import AllocationConfig
from internmatch.core.db import insert_allocation, list_active_internships, list_students
from internmatch.core.schemas import (
    Allocation,
    AllocationStatus,
    BulkRunResult,
    MatchResult,
)
from internmatch.pipeline.ranker import top_k
from internmatch.pipeline.scorer import MatchScorer

logger = logging.getLogger(__name__)


def select_allocations(
    matches: Sequence[MatchResult],
    threshold: float,
    limit: int,
) -> list[MatchResult]:
    """Return the top `limit` matches that score at least `threshold`, best first."""
    return [m for m in top_k(matches, limit) if m.match_score >= threshold]


def run_bulk(
    conn: sqlite3.Connection,
    scorer: MatchScorer,
    config: AllocationConfig,
    *,
    dry_run: bool = False,
) -> BulkRunResult:
    """Run one synchronous full allocation pass.

    Args:
        conn: Open database connection.
        scorer: Scorer used for every student.
        config: Threshold and top-K cutoff.
        dry_run: Select allocations but write nothing.

    Returns:
        BulkRunResult with the number of students processed and the number
        of allocations written (or that would be written in dry-run).
    """
    students = list_students(conn)
    internships = list_active_internships(conn)
    descriptors = [i.to_descriptor() for i in internships]

    logger.info(
        "Bulk allocation: %d students x %d active internships%s",
        len(students), len(descriptors), " (dry run)" if dry_run else "",
    )

    processed = 0
    created = 0
    for student in students:
        batch = scorer.score_batch(student.to_profile(), descriptors)
        selected = select_allocations(
            batch.matches, config.acceptance_threshold, config.bulk_top_k,
        )

        for match in selected:
            if not dry_run:
                insert_allocation(
                    conn,
                    Allocation(
                        student_id=student.id,
                        internship_id=match.internship_id,
                        match_score=match.match_score,
                        explanation=match.explanation,
                        status=AllocationStatus.MATCHED,
                    ),
                )
            created += 1

        logger.debug(
            "Student %s (%s): %d allocations (%s mode)",
            student.id, student.name, len(selected), batch.mode.value,
        )
        processed += 1

    logger.info("Bulk allocation done: %d students, %d allocations", processed, created)
    return BulkRunResult(processed_count=processed, allocations_created=created)
