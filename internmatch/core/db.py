"""SQLite database layer for students, internships, allocations, and feedback."""

import json
import sqlite3
from datetime import datetime
from pathlib import Path

from internmatch.core.schemas import (
    Allocation,
    AllocationStatus,
    AuditEntry,
    Company,
    Internship,
    MatchFeedback,
    Student,
)

_STUDENTS_TABLE = """
CREATE TABLE IF NOT EXISTS students (
    id                INTEGER PRIMARY KEY AUTOINCREMENT,
    name              TEXT    NOT NULL,
    skills            TEXT    NOT NULL DEFAULT '[]',
    cgpa              REAL,
    location          TEXT    NOT NULL DEFAULT '',
    diversity_flag    INTEGER NOT NULL DEFAULT 0,
    profile_completed INTEGER NOT NULL DEFAULT 0,
    created_at        TEXT    NOT NULL
);
"""

_COMPANIES_TABLE = """
CREATE TABLE IF NOT EXISTS companies (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    name        TEXT NOT NULL,
    location    TEXT NOT NULL DEFAULT '',
    industry    TEXT NOT NULL DEFAULT '',
    created_at  TEXT NOT NULL
);
"""

_INTERNSHIPS_TABLE = """
CREATE TABLE IF NOT EXISTS internships (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    company_id      INTEGER REFERENCES companies(id) ON DELETE CASCADE,
    title           TEXT    NOT NULL,
    description     TEXT    NOT NULL DEFAULT '',
    required_skills TEXT    NOT NULL DEFAULT '[]',
    location        TEXT    NOT NULL DEFAULT '',
    stipend         INTEGER,
    positions       INTEGER NOT NULL DEFAULT 1,
    is_active       INTEGER NOT NULL DEFAULT 1,
    created_at      TEXT    NOT NULL
);
"""

_ALLOCATIONS_TABLE = """
CREATE TABLE IF NOT EXISTS allocations (
    id             INTEGER PRIMARY KEY AUTOINCREMENT,
    student_id     INTEGER NOT NULL REFERENCES students(id),
    internship_id  INTEGER NOT NULL REFERENCES internships(id),
    match_score    REAL    NOT NULL,
    explanation    TEXT    NOT NULL DEFAULT '',
    status         TEXT    NOT NULL DEFAULT 'matched'
                   CHECK (status IN ('matched', 'applied', 'shortlisted', 'rejected')),
    timestamp      TEXT    NOT NULL
);
"""

_FEEDBACK_TABLE = """
CREATE TABLE IF NOT EXISTS match_feedback (
    id             INTEGER PRIMARY KEY AUTOINCREMENT,
    student_id     INTEGER NOT NULL REFERENCES students(id),
    internship_id  INTEGER NOT NULL REFERENCES internships(id),
    feedback       TEXT    NOT NULL CHECK (feedback IN ('good', 'poor')),
    created_at     TEXT    NOT NULL
);
"""


def init_db(path: str | Path) -> sqlite3.Connection:
    """Create the database and tables, returning a connection."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute(_STUDENTS_TABLE)
    conn.execute(_COMPANIES_TABLE)
    conn.execute(_INTERNSHIPS_TABLE)
    conn.execute(_ALLOCATIONS_TABLE)
    conn.execute(_FEEDBACK_TABLE)
    conn.commit()
    return conn


# ---------------------------------------------------------------------------
# Students
# ---------------------------------------------------------------------------


def insert_student(conn: sqlite3.Connection, student: Student) -> int:
    """Insert a student. Returns the row ID."""
    cursor = conn.execute(
        """
        INSERT INTO students
            (name, skills, cgpa, location, diversity_flag, profile_completed, created_at)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        """,
        (
            student.name,
            json.dumps(student.skills),
            student.cgpa,
            student.location,
            int(student.diversity_flag),
            int(student.profile_completed),
            datetime.now().isoformat(),
        ),
    )
    conn.commit()
    return cursor.lastrowid or 0


def get_student(conn: sqlite3.Connection, student_id: int) -> Student | None:
    row = conn.execute("SELECT * FROM students WHERE id = ?", (student_id,)).fetchone()
    return None if row is None else _student_from_row(row)


def list_students(conn: sqlite3.Connection) -> list[Student]:
    rows = conn.execute("SELECT * FROM students ORDER BY id").fetchall()
    return [_student_from_row(row) for row in rows]


def _student_from_row(row: sqlite3.Row) -> Student:
    return Student(
        id=row["id"],
        name=row["name"],
        skills=_load_list(row["skills"]),
        cgpa=row["cgpa"],
        location=row["location"],
        diversity_flag=bool(row["diversity_flag"]),
        profile_completed=bool(row["profile_completed"]),
    )


# ---------------------------------------------------------------------------
# Companies and internships
# ---------------------------------------------------------------------------


def insert_company(conn: sqlite3.Connection, company: Company) -> int:
    """Insert a company. Returns the row ID."""
    cursor = conn.execute(
        "INSERT INTO companies (name, location, industry, created_at) VALUES (?, ?, ?, ?)",
        (company.name, company.location, company.industry, datetime.now().isoformat()),
    )
    conn.commit()
    return cursor.lastrowid or 0


def insert_internship(conn: sqlite3.Connection, internship: Internship) -> int:
    """Insert an internship posting. Returns the row ID."""
    cursor = conn.execute(
        """
        INSERT INTO internships
            (company_id, title, description, required_skills, location,
             stipend, positions, is_active, created_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            internship.company_id,
            internship.title,
            internship.description,
            json.dumps(internship.required_skills),
            internship.location,
            internship.stipend,
            internship.positions,
            int(internship.is_active),
            datetime.now().isoformat(),
        ),
    )
    conn.commit()
    return cursor.lastrowid or 0


def set_internship_active(conn: sqlite3.Connection, internship_id: int, active: bool) -> bool:
    """Open or close a posting. Returns True if a row was updated."""
    cursor = conn.execute(
        "UPDATE internships SET is_active = ? WHERE id = ?",
        (int(active), internship_id),
    )
    conn.commit()
    return cursor.rowcount > 0


def get_internship(conn: sqlite3.Connection, internship_id: int) -> Internship | None:
    row = conn.execute("SELECT * FROM internships WHERE id = ?", (internship_id,)).fetchone()
    return None if row is None else _internship_from_row(row)


def list_active_internships(conn: sqlite3.Connection) -> list[Internship]:
    """Return active postings, newest first."""
    rows = conn.execute(
        "SELECT * FROM internships WHERE is_active = 1 ORDER BY created_at DESC, id DESC"
    ).fetchall()
    return [_internship_from_row(row) for row in rows]


def _internship_from_row(row: sqlite3.Row) -> Internship:
    return Internship(
        id=row["id"],
        company_id=row["company_id"],
        title=row["title"],
        description=row["description"],
        required_skills=_load_list(row["required_skills"]),
        location=row["location"],
        stipend=row["stipend"],
        positions=row["positions"],
        is_active=bool(row["is_active"]),
    )


# ---------------------------------------------------------------------------
# Allocations
# ---------------------------------------------------------------------------


def insert_allocation(conn: sqlite3.Connection, allocation: Allocation) -> int:
    """Record an allocation. Returns the row ID."""
    cursor = conn.execute(
        """
        INSERT INTO allocations
            (student_id, internship_id, match_score, explanation, status, timestamp)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        (
            allocation.student_id,
            allocation.internship_id,
            allocation.match_score,
            allocation.explanation,
            allocation.status.value,
            allocation.timestamp.isoformat(),
        ),
    )
    conn.commit()
    return cursor.lastrowid or 0


def update_allocation_status(
    conn: sqlite3.Connection,
    allocation_id: int,
    status: AllocationStatus,
) -> bool:
    """Move an allocation to a new status. Returns True if a row was updated."""
    cursor = conn.execute(
        "UPDATE allocations SET status = ? WHERE id = ?",
        (status.value, allocation_id),
    )
    conn.commit()
    return cursor.rowcount > 0


def list_allocations(
    conn: sqlite3.Connection,
    student_id: int | None = None,
    internship_id: int | None = None,
    status: AllocationStatus | None = None,
) -> list[Allocation]:
    """Return allocations matching all given filters, newest first."""
    clauses: list[str] = []
    params: list[object] = []
    if student_id is not None:
        clauses.append("student_id = ?")
        params.append(student_id)
    if internship_id is not None:
        clauses.append("internship_id = ?")
        params.append(internship_id)
    if status is not None:
        clauses.append("status = ?")
        params.append(status.value)

    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    rows = conn.execute(
        f"SELECT * FROM allocations {where} ORDER BY timestamp DESC, id DESC",  # noqa: S608
        params,
    ).fetchall()
    return [
        Allocation(
            id=row["id"],
            student_id=row["student_id"],
            internship_id=row["internship_id"],
            match_score=row["match_score"],
            explanation=row["explanation"],
            status=AllocationStatus(row["status"]),
            timestamp=datetime.fromisoformat(row["timestamp"]),
        )
        for row in rows
    ]


def list_audit_entries(
    conn: sqlite3.Connection,
    status: AllocationStatus | None = None,
) -> list[AuditEntry]:
    """Return allocations joined with student, internship and company names."""
    where = "WHERE a.status = ?" if status is not None else ""
    params = (status.value,) if status is not None else ()
    rows = conn.execute(
        f"""
        SELECT a.id, a.match_score, a.explanation, a.status, a.timestamp,
               s.name AS student_name,
               i.title AS internship_title,
               c.name AS company_name
        FROM allocations a
        LEFT JOIN students s ON a.student_id = s.id
        LEFT JOIN internships i ON a.internship_id = i.id
        LEFT JOIN companies c ON i.company_id = c.id
        {where}
        ORDER BY a.timestamp DESC, a.id DESC
        """,  # noqa: S608
        params,
    ).fetchall()
    return [
        AuditEntry(
            id=row["id"],
            match_score=row["match_score"],
            explanation=row["explanation"],
            status=AllocationStatus(row["status"]),
            timestamp=datetime.fromisoformat(row["timestamp"]),
            student_name=row["student_name"],
            internship_title=row["internship_title"],
            company_name=row["company_name"],
        )
        for row in rows
    ]


# ---------------------------------------------------------------------------
# Feedback
# ---------------------------------------------------------------------------


def insert_feedback(conn: sqlite3.Connection, feedback: MatchFeedback) -> int:
    """Record a student's feedback on a match. Returns the row ID."""
    cursor = conn.execute(
        """
        INSERT INTO match_feedback (student_id, internship_id, feedback, created_at)
        VALUES (?, ?, ?, ?)
        """,
        (
            feedback.student_id,
            feedback.internship_id,
            feedback.feedback.value,
            feedback.created_at.isoformat(),
        ),
    )
    conn.commit()
    return cursor.lastrowid or 0


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------


def count_students(conn: sqlite3.Connection) -> int:
    return conn.execute("SELECT COUNT(*) FROM students").fetchone()[0]


def count_diversity_students(conn: sqlite3.Connection) -> int:
    return conn.execute("SELECT COUNT(*) FROM students WHERE diversity_flag = 1").fetchone()[0]


def count_active_internships(conn: sqlite3.Connection) -> int:
    return conn.execute("SELECT COUNT(*) FROM internships WHERE is_active = 1").fetchone()[0]


def count_allocations(
    conn: sqlite3.Connection,
    status: AllocationStatus | None = None,
) -> int:
    if status is None:
        return conn.execute("SELECT COUNT(*) FROM allocations").fetchone()[0]
    return conn.execute(
        "SELECT COUNT(*) FROM allocations WHERE status = ?", (status.value,)
    ).fetchone()[0]


def average_allocation_score(conn: sqlite3.Connection) -> float | None:
    """Mean match_score over all allocations, or None when there are none."""
    row = conn.execute("SELECT AVG(match_score) FROM allocations").fetchone()
    return row[0]


def _load_list(raw: str | None) -> list[str]:
    if not raw:
        return []
    value = json.loads(raw)
    return value if isinstance(value, list) else []
