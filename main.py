"""CLI entry point for the internship matcher."""

import argparse
import json
import logging
import sys
from pathlib import Path

from internmatch.core.config import Settings
from internmatch.core.db import init_db, update_allocation_status
from internmatch.core.schemas import AllocationStatus, FeedbackValue, MatchRequest
from internmatch.pipeline.allocator import run_bulk
from internmatch.pipeline.orchestrator import (
    build_scorer,
    export_matches_json,
    import_records,
    rank_candidates,
    record_feedback,
    student_matches,
)
from internmatch.pipeline.skills import suggest_skills
from internmatch.pipeline.stats import (
    audit_trail,
    diversity_metrics,
    summarize_audit,
    system_stats,
)

_STATUS_CHOICES = [s.value for s in AllocationStatus]


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    # Options shared by every subcommand
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        default="config/settings.yaml",
        help="Path to settings YAML file (default: config/settings.yaml)",
    )
    common.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    parser = argparse.ArgumentParser(
        description="Internship matcher - score students against internship postings",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", parents=[common], help="Create the database tables")

    import_parser = subparsers.add_parser(
        "import-data", parents=[common],
        help="Load companies, students and internships from a YAML file",
    )
    import_parser.add_argument("--file", required=True, help="Path to data YAML file")

    match_parser = subparsers.add_parser(
        "match", parents=[common],
        help="Score a MatchRequest JSON file and print the MatchResponse",
    )
    match_parser.add_argument("--request", required=True, help="Path to MatchRequest JSON")

    preview_parser = subparsers.add_parser(
        "preview", parents=[common], help="Top matches preview for a student",
    )
    preview_parser.add_argument("--student-id", type=int, required=True)

    matches_parser = subparsers.add_parser(
        "matches", parents=[common], help="Full match list for a student",
    )
    matches_parser.add_argument("--student-id", type=int, required=True)

    candidates_parser = subparsers.add_parser(
        "candidates", parents=[common], help="Best students for an internship",
    )
    candidates_parser.add_argument("--internship-id", type=int, required=True)

    bulk_parser = subparsers.add_parser(
        "run-bulk", parents=[common],
        help="Allocate every student against all active internships",
    )
    bulk_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show how many allocations would be created without writing them",
    )

    subparsers.add_parser("stats", parents=[common], help="System statistics")
    subparsers.add_parser("fairness", parents=[common], help="Diversity metrics")

    audit_parser = subparsers.add_parser(
        "audit", parents=[common], help="Allocation audit trail",
    )
    audit_parser.add_argument("--status", choices=_STATUS_CHOICES, help="Filter by status")

    feedback_parser = subparsers.add_parser(
        "feedback", parents=[common], help="Record feedback on a match",
    )
    feedback_parser.add_argument("--student-id", type=int, required=True)
    feedback_parser.add_argument("--internship-id", type=int, required=True)
    feedback_parser.add_argument(
        "--value", required=True, choices=[v.value for v in FeedbackValue],
    )

    status_parser = subparsers.add_parser(
        "set-status", parents=[common], help="Change an allocation's status",
    )
    status_parser.add_argument("--allocation-id", type=int, required=True)
    status_parser.add_argument("--status", required=True, choices=_STATUS_CHOICES)

    skills_parser = subparsers.add_parser(
        "skills", parents=[common], help="Suggest skill names",
    )
    skills_parser.add_argument("--query", default="", help="Substring to search for")
    skills_parser.add_argument("--limit", type=int, default=10)

    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2))


def cmd_match(args: argparse.Namespace, settings: Settings) -> None:
    """Handle match subcommand (no database access)."""
    path = Path(args.request)
    if not path.exists():
        msg = f"Request file not found: {path}"
        raise FileNotFoundError(msg)
    request = MatchRequest.model_validate_json(path.read_text())
    scorer = build_scorer(settings)
    print(export_matches_json(scorer.match(request)))


def run_command(args: argparse.Namespace, settings: Settings) -> None:
    """Dispatch a database-backed subcommand."""
    conn = init_db(settings.database.path)
    allocation = settings.allocation
    try:
        if args.command == "init-db":
            print(f"Database ready at {settings.database.path}")
        elif args.command == "import-data":
            counts = import_records(conn, args.file)
            print(
                f"Imported {counts['companies']} companies, {counts['students']} students, "
                f"{counts['internships']} internships."
            )
        elif args.command in ("preview", "matches"):
            limit = (
                allocation.preview_top_k if args.command == "preview"
                else allocation.match_list_top_k
            )
            response = student_matches(conn, build_scorer(settings), args.student_id, limit)
            print(export_matches_json(response))
        elif args.command == "candidates":
            ranked = rank_candidates(
                conn, build_scorer(settings), args.internship_id, allocation.candidates_top_k,
            )
            _print_json([c.model_dump(mode="json", by_alias=True) for c in ranked])
        elif args.command == "run-bulk":
            result = run_bulk(conn, build_scorer(settings), allocation, dry_run=args.dry_run)
            prefix = "[DRY RUN] Would create" if args.dry_run else "Created"
            print(
                f"Processed {result.processed_count} students. "
                f"{prefix} {result.allocations_created} allocations."
            )
            _print_json(result.model_dump(by_alias=True))
        elif args.command == "stats":
            _print_json(system_stats(conn).model_dump(by_alias=True))
        elif args.command == "fairness":
            _print_json(diversity_metrics(conn).model_dump(by_alias=True))
        elif args.command == "audit":
            status = AllocationStatus(args.status) if args.status else None
            entries = audit_trail(conn, status)
            _print_json({
                "entries": [e.model_dump(mode="json", by_alias=True) for e in entries],
                "summary": summarize_audit(entries).model_dump(by_alias=True),
            })
        elif args.command == "feedback":
            row_id = record_feedback(
                conn, args.student_id, args.internship_id, FeedbackValue(args.value),
            )
            print(f"Feedback recorded (id {row_id}).")
        elif args.command == "set-status":
            if not update_allocation_status(
                conn, args.allocation_id, AllocationStatus(args.status),
            ):
                msg = f"Allocation not found: {args.allocation_id}"
                raise LookupError(msg)
            print(f"Allocation {args.allocation_id} is now '{args.status}'.")
    finally:
        conn.close()


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    if args.command == "skills":
        _print_json(suggest_skills(args.query, args.limit))
        return

    try:
        settings = Settings.from_yaml(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        if args.command == "match":
            cmd_match(args, settings)
        else:
            run_command(args, settings)
    except (FileNotFoundError, ImportError, LookupError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
