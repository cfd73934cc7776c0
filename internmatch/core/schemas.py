"""Core data models for the internship matcher.

Scoring inputs (CandidateProfile, OpportunityDescriptor) are frozen snapshots
and accept malformed values permissively: missing lists become empty,
missing or non-numeric academic scores become 0.0.
"""

import math
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def _coerce_skills(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    try:
        items = list(value)
    except TypeError:
        return []
    return [item for item in items if isinstance(item, str)]


def _coerce_float(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        result = float(value)
    except (TypeError, ValueError):
        return 0.0
    return result if math.isfinite(result) else 0.0


# ---------------------------------------------------------------------------
# Scoring inputs and outputs
# ---------------------------------------------------------------------------


class CandidateProfile(BaseModel):
    """Snapshot of a student's profile passed into scoring."""

    model_config = ConfigDict(frozen=True)

    skills: list[str] = Field(default_factory=list)
    cgpa: float = 0.0
    location: str = ""
    diversity_flag: bool = False

    @field_validator("skills", mode="before")
    @classmethod
    def skills_list(cls, v: Any) -> list[str]:
        return _coerce_skills(v)

    @field_validator("cgpa", mode="before")
    @classmethod
    def cgpa_numeric(cls, v: Any) -> float:
        return _coerce_float(v)

    @field_validator("location", mode="before")
    @classmethod
    def location_text(cls, v: Any) -> str:
        return v if isinstance(v, str) else ""

    @field_validator("diversity_flag", mode="before")
    @classmethod
    def diversity_bool(cls, v: Any) -> bool:
        return v is True or v == 1


class OpportunityDescriptor(BaseModel):
    """Snapshot of an internship posting passed into scoring."""

    model_config = ConfigDict(frozen=True)

    id: int
    required_skills: list[str] = Field(default_factory=list)
    location: str = ""
    title: str = ""

    @field_validator("required_skills", mode="before")
    @classmethod
    def required_skills_list(cls, v: Any) -> list[str]:
        return _coerce_skills(v)

    @field_validator("location", "title", mode="before")
    @classmethod
    def text_or_empty(cls, v: Any) -> str:
        return v if isinstance(v, str) else ""


class MatchRequest(BaseModel):
    """One candidate scored against one or more opportunities."""

    student_profile: CandidateProfile = Field(default_factory=CandidateProfile)
    internships: list[OpportunityDescriptor] = Field(default_factory=list)

    @field_validator("internships", mode="before")
    @classmethod
    def internships_list(cls, v: Any) -> Any:
        return [] if v is None else v


class MatchResult(BaseModel):
    """Score, explanation and skill classification for one opportunity."""

    model_config = ConfigDict(frozen=True)

    internship_id: int
    match_score: float = Field(ge=0.0, le=100.0)
    explanation: str = ""
    skill_overlap: list[str] = Field(default_factory=list)
    missing_skills: list[str] = Field(default_factory=list)


class MatchResponse(BaseModel):
    """Match results sorted by match_score descending."""

    matches: list[MatchResult] = Field(default_factory=list)


class ScoringMode(str, Enum):
    """Which skills formula produced a batch of results."""

    EMBEDDING = "embedding"
    FALLBACK = "fallback"


class ScoredBatch(BaseModel):
    """All results for one candidate, produced by a single scoring mode."""

    model_config = ConfigDict(frozen=True)

    mode: ScoringMode
    matches: list[MatchResult] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Store records
# ---------------------------------------------------------------------------


class Student(BaseModel):
    """A persisted student record."""

    id: int | None = None
    name: str
    skills: list[str] = Field(default_factory=list)
    cgpa: float | None = None
    location: str = ""
    diversity_flag: bool = False
    profile_completed: bool = False

    @field_validator("skills", mode="before")
    @classmethod
    def skills_list(cls, v: Any) -> list[str]:
        return _coerce_skills(v)

    @field_validator("cgpa")
    @classmethod
    def cgpa_two_decimals(cls, v: float | None) -> float | None:
        return None if v is None else round(v, 2)

    def to_profile(self) -> CandidateProfile:
        return CandidateProfile(
            skills=self.skills,
            cgpa=self.cgpa,
            location=self.location,
            diversity_flag=self.diversity_flag,
        )


class Company(BaseModel):
    """A persisted company record."""

    id: int | None = None
    name: str
    location: str = ""
    industry: str = ""


class Internship(BaseModel):
    """A persisted internship posting."""

    id: int | None = None
    company_id: int | None = None
    title: str
    description: str = ""
    required_skills: list[str] = Field(default_factory=list)
    location: str = ""
    stipend: int | None = None
    positions: int = Field(default=1, ge=1)
    is_active: bool = True

    @field_validator("required_skills", mode="before")
    @classmethod
    def required_skills_list(cls, v: Any) -> list[str]:
        return _coerce_skills(v)

    def to_descriptor(self) -> OpportunityDescriptor:
        if self.id is None:
            msg = f"Internship '{self.title}' has not been stored yet"
            raise ValueError(msg)
        return OpportunityDescriptor(
            id=self.id,
            required_skills=self.required_skills,
            location=self.location,
            title=self.title,
        )


class AllocationStatus(str, Enum):
    """Lifecycle of an allocation; the allocator only writes MATCHED."""

    MATCHED = "matched"
    APPLIED = "applied"
    SHORTLISTED = "shortlisted"
    REJECTED = "rejected"


class Allocation(BaseModel):
    """A persisted proposed match between a student and an internship."""

    id: int | None = None
    student_id: int
    internship_id: int
    match_score: float = Field(ge=0.0, le=100.0)
    explanation: str = ""
    status: AllocationStatus = AllocationStatus.MATCHED
    timestamp: datetime = Field(default_factory=datetime.now)


class FeedbackValue(str, Enum):
    GOOD = "good"
    POOR = "poor"


class MatchFeedback(BaseModel):
    """A student's verdict on a proposed match."""

    id: int | None = None
    student_id: int
    internship_id: int
    feedback: FeedbackValue
    created_at: datetime = Field(default_factory=datetime.now)


# ---------------------------------------------------------------------------
# Aggregate outputs (camelCase on the wire)
# ---------------------------------------------------------------------------


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BulkRunResult(_CamelModel):
    """Summary of one bulk allocation run."""

    processed_count: int = 0
    allocations_created: int = 0


class SystemStats(_CamelModel):
    total_students: int = 0
    active_internships: int = 0
    successful_matches: int = 0
    avg_match_score: float = 0.0


class DiversityMetrics(_CamelModel):
    diversity_percentage: float = 0.0
    total_with_diversity: int = 0
    total_students: int = 0


class CandidateMatch(_CamelModel):
    """A student ranked against a single internship."""

    student_id: int
    name: str
    match_score: float
    explanation: str = ""
    skill_overlap: list[str] = Field(default_factory=list)
    missing_skills: list[str] = Field(default_factory=list)


class AuditEntry(_CamelModel):
    """An allocation joined with the names it refers to."""

    id: int
    match_score: float
    explanation: str = ""
    status: AllocationStatus
    timestamp: datetime
    student_name: str | None = None
    internship_title: str | None = None
    company_name: str | None = None


class AuditSummary(_CamelModel):
    total: int = 0
    status_counts: dict[str, int] = Field(default_factory=dict)
    avg_match_score: float = 0.0
