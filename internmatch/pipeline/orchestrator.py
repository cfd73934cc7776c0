"""Orchestrator: wires settings, store, scorer, and ranker for live queries.

Data flow:
  1. Store read (student / active internships)
  2. Snapshot into CandidateProfile / OpportunityDescriptor
  3. Scorer batch (embedding or fallback mode)
  4. Ranker top-K
"""

import importlib.util
import json
import logging
import os
import sqlite3
from pathlib import Path
from typing import Any

import yaml

from internmatch.core.config import Settings
from internmatch.core.db import (
    get_internship,
    get_student,
    insert_company,
    insert_feedback,
    insert_internship,
    insert_student,
    list_active_internships,
    list_students,
)
from internmatch.core.schemas import (
    CandidateMatch,
    Company,
    FeedbackValue,
    Internship,
    MatchFeedback,
    MatchRequest,
    MatchResponse,
    Student,
)
from internmatch.embeddings import EmbeddingBackend, get_backend
from internmatch.pipeline.ranker import rank, top_k
from internmatch.pipeline.scorer import MatchScorer
from internmatch.pipeline.similarity import EmbeddingCache, SimilarityProvider

logger = logging.getLogger(__name__)


def build_scorer(settings: Settings, cache: EmbeddingCache | None = None) -> MatchScorer:
    """Build a scorer from settings.

    With embeddings disabled, or when the backend's API key or SDK is
    missing, the scorer always uses the fallback formula.
    """
    if not settings.embedding.enabled:
        logger.info("Embeddings disabled - using basic matching only")
        return MatchScorer(settings.scoring)

    backend = get_backend(settings.embedding.provider)
    reason = _unavailable_reason(backend)
    if reason is not None:
        logger.warning(
            "'%s' embeddings unavailable (%s) - using basic matching only",
            backend.provider_id,
            reason,
        )
        return MatchScorer(settings.scoring)

    provider = SimilarityProvider(
        backend,
        model=settings.embedding.model,
        dimensions=settings.embedding.dimensions,
        cache=cache,
    )
    return MatchScorer(settings.scoring, provider)


def _unavailable_reason(backend: EmbeddingBackend) -> str | None:
    """Return why the backend cannot be called, or None if it can."""
    if backend.env_var is not None and not os.environ.get(backend.env_var):
        return f"{backend.env_var} is not set"
    if backend.sdk_module is not None:
        try:
            found = importlib.util.find_spec(backend.sdk_module) is not None
        except ModuleNotFoundError:
            found = False
        if not found:
            return f"{backend.sdk_module} is not installed"
    return None


def build_match_request(student: Student, internships: list[Internship]) -> MatchRequest:
    return MatchRequest(
        student_profile=student.to_profile(),
        internships=[i.to_descriptor() for i in internships],
    )


def student_matches(
    conn: sqlite3.Connection,
    scorer: MatchScorer,
    student_id: int,
    limit: int | None,
) -> MatchResponse:
    """Top matches for one student across all active internships.

    Raises:
        LookupError: If the student does not exist.
    """
    student = get_student(conn, student_id)
    if student is None:
        msg = f"Student profile not found: {student_id}"
        raise LookupError(msg)

    request = build_match_request(student, list_active_internships(conn))
    response = scorer.match(request)
    return MatchResponse(matches=top_k(response.matches, limit))


def rank_candidates(
    conn: sqlite3.Connection,
    scorer: MatchScorer,
    internship_id: int,
    limit: int | None,
) -> list[CandidateMatch]:
    """Rank every student against one internship.

    Each student is scored as its own batch, so one student's fallback does
    not affect another's.

    Raises:
        LookupError: If the internship does not exist.
    """
    internship = get_internship(conn, internship_id)
    if internship is None:
        msg = f"Internship not found: {internship_id}"
        raise LookupError(msg)

    descriptor = internship.to_descriptor()
    candidates: list[CandidateMatch] = []
    for student in list_students(conn):
        result = scorer.score(student.to_profile(), descriptor)
        candidates.append(
            CandidateMatch(
                student_id=student.id,
                name=student.name,
                match_score=result.match_score,
                explanation=result.explanation,
                skill_overlap=result.skill_overlap,
                missing_skills=result.missing_skills,
            )
        )

    ranked = rank(candidates)
    return ranked if limit is None else ranked[:limit]


def record_feedback(
    conn: sqlite3.Connection,
    student_id: int,
    internship_id: int,
    value: FeedbackValue,
) -> int:
    """Store a student's good/poor verdict on a match. Returns the row ID."""
    if get_student(conn, student_id) is None:
        msg = f"Student profile not found: {student_id}"
        raise LookupError(msg)
    if get_internship(conn, internship_id) is None:
        msg = f"Internship not found: {internship_id}"
        raise LookupError(msg)
    return insert_feedback(
        conn,
        MatchFeedback(student_id=student_id, internship_id=internship_id, feedback=value),
    )


def import_records(conn: sqlite3.Connection, path: str | Path) -> dict[str, int]:
    """Load companies, students and internships from a YAML file.

    Internships name their company via a ``company`` key that must match a
    company defined in the same file. Every record is validated and every
    company reference resolved before the first insert, so a bad file
    writes nothing.

    Returns:
        Number of rows inserted per table.
    """
    path = Path(path)
    if not path.exists():
        msg = f"Data file not found: {path}"
        raise FileNotFoundError(msg)
    raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}

    companies = [Company.model_validate(entry) for entry in raw.get("companies") or []]
    students = [Student.model_validate(entry) for entry in raw.get("students") or []]
    company_names = {company.name for company in companies}

    internships: list[tuple[Internship, str | None]] = []
    for entry in raw.get("internships") or []:
        data = dict(entry)
        company_name = data.pop("company", None)
        if company_name is not None and company_name not in company_names:
            msg = f"Internship '{data.get('title')}' references unknown company '{company_name}'"
            raise ValueError(msg)
        internships.append((Internship.model_validate(data), company_name))

    company_ids = {company.name: insert_company(conn, company) for company in companies}
    for student in students:
        insert_student(conn, student)
    for internship, company_name in internships:
        if company_name is not None:
            internship = internship.model_copy(update={"company_id": company_ids[company_name]})
        insert_internship(conn, internship)

    counts = {
        "companies": len(companies),
        "students": len(students),
        "internships": len(internships),
    }
    logger.info("Imported %s from %s", counts, path)
    return counts


def export_matches_json(response: MatchResponse) -> str:
    """Export a match response as a JSON string."""
    return json.dumps(response.model_dump(mode="json"), indent=2)
