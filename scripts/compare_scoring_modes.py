#!/usr/bin/env python3
"""Compare embedding-similarity scores with fallback (overlap-ratio) scores.

Loads students and active internships from the DB, scores every student with
both formulas, and prints a comparison table with agreement metrics. The two
formulas are not expected to agree numerically; this shows by how much.

Usage:
    python scripts/compare_scoring_modes.py
    python scripts/compare_scoring_modes.py --config config/settings.yaml
    python scripts/compare_scoring_modes.py --limit 20
"""

import argparse
import logging
import statistics
import sys
from pathlib import Path

# Ensure project root is on the path when run as a script
sys.path.insert(0, str(Path(__file__).parent.parent))

from internmatch.core.config import Settings
from internmatch.core.db import init_db, list_active_internships, list_students
from internmatch.core.schemas import Internship, MatchResult, ScoringMode, Student
from internmatch.pipeline.orchestrator import build_scorer
from internmatch.pipeline.ranker import rank, score_label
from internmatch.pipeline.scorer import MatchScorer

logging.basicConfig(level=logging.WARNING)

Pair = tuple[float, float]


def _score_both(
    scorer: MatchScorer,
    student: Student,
    internships: list[Internship],
) -> tuple[ScoringMode, list[MatchResult], list[MatchResult]]:
    """Return (embedding-path mode, embedding-path results, fallback results)."""
    profile = student.to_profile()
    descriptors = [i.to_descriptor() for i in internships]
    embedded = scorer.score_batch(profile, descriptors)
    fallback = scorer.score_batch_fallback(profile, descriptors)
    return embedded.mode, embedded.matches, fallback.matches


def _print_table(
    student: Student,
    titles: dict[int, str],
    mode: ScoringMode,
    embedded: list[MatchResult],
    fallback: list[MatchResult],
) -> None:
    header = f"{'Internship':<45} {'Embedding':>10} {'Fallback':>9} {'Diff':>6}  {'Label':<9}"
    print(f"\n{student.name} (id {student.id}) - embedding path ran in {mode.value} mode")
    print("=" * len(header))
    print(header)
    print("=" * len(header))
    for e, f in zip(embedded, fallback):
        title = titles.get(e.internship_id, str(e.internship_id))[:44]
        diff = e.match_score - f.match_score
        label = score_label(e.match_score)
        print(f"{title:<45} {e.match_score:>10.2f} {f.match_score:>9.2f} {diff:>+6.1f}  {label:<9}")
    print("=" * len(header))


def _compute_agreement(pairs: list[Pair], top1_hits: int, students: int) -> None:
    """Compute and print agreement metrics between the two formulas."""
    if not pairs:
        print("\nNo comparable scores to compute agreement metrics.")
        return

    mad = statistics.mean(abs(e - f) for e, f in pairs)

    emb_vals = [p[0] for p in pairs]
    fb_vals = [p[1] for p in pairs]
    n = len(pairs)
    if n > 1:
        emb_mean = statistics.mean(emb_vals)
        fb_mean = statistics.mean(fb_vals)
        numerator = sum((e - emb_mean) * (f - fb_mean) for e, f in pairs)
        emb_std = statistics.stdev(emb_vals)
        fb_std = statistics.stdev(fb_vals)
        corr = (
            numerator / ((n - 1) * emb_std * fb_std)
            if emb_std > 0 and fb_std > 0
            else float("nan")
        )
    else:
        corr = float("nan")

    print(f"\nAgreement metrics (n={n} scored pairs, {students} students):")
    print(f"  Mean absolute difference: {mad:.1f} points")
    print(f"  Pearson correlation:      {corr:.3f}")
    print(f"  Top-1 agreement:          {top1_hits}/{students}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Compare embedding and fallback scoring")
    parser.add_argument("--config", default="config/settings.yaml", help="Settings YAML path")
    parser.add_argument("--limit", type=int, default=10, help="Max students to score")
    args = parser.parse_args()

    settings = Settings.from_yaml(args.config)
    if not settings.embedding.enabled:
        print("ERROR: embedding.enabled is false; nothing to compare against.")
        sys.exit(1)

    db_path = Path(settings.database.path)
    if not db_path.exists():
        print(f"ERROR: DB not found: {db_path}")
        sys.exit(1)

    conn = init_db(db_path)
    students = list_students(conn)[: args.limit]
    internships = list_active_internships(conn)
    conn.close()

    if not students or not internships:
        print("Need at least one student and one active internship. Run import-data first.")
        sys.exit(0)
    print(f"Scoring {len(students)} students against {len(internships)} internships "
          f"with '{settings.embedding.provider}' embeddings...")

    scorer = build_scorer(settings)
    titles = {i.id: i.title for i in internships if i.id is not None}
    pairs: list[Pair] = []
    top1_hits = 0

    for student in students:
        mode, embedded, fallback = _score_both(scorer, student, internships)
        _print_table(student, titles, mode, embedded, fallback)
        if mode is ScoringMode.EMBEDDING:
            pairs.extend((e.match_score, f.match_score) for e, f in zip(embedded, fallback))
        if rank(embedded)[0].internship_id == rank(fallback)[0].internship_id:
            top1_hits += 1

    _compute_agreement(pairs, top1_hits, len(students))
    print("\nDone.")


if __name__ == "__main__":
    main()
