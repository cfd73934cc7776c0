"""Configuration models and YAML loader for the internship matcher."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from internmatch.embeddings import available_backends


class DatabaseConfig(BaseModel):
    """Database configuration."""

    path: str = "data/internmatch.db"


class EmbeddingConfig(BaseModel):
    """Embedding backend used for the skills-similarity term."""

    enabled: bool = True
    provider: str = "openai"
    model: str | None = None
    dimensions: int | None = Field(default=None, ge=1)

    @field_validator("provider")
    @classmethod
    def provider_known(cls, v: str) -> str:
        v = v.lower().strip()
        if v not in available_backends():
            msg = f"provider must be one of {available_backends()}, got '{v}'"
            raise ValueError(msg)
        return v


class ScoringConfig(BaseModel):
    """Fixed weights for the composite match score.

    The four terms sum to 100 in the default configuration.
    """

    skills_weight: float = Field(default=50.0, ge=0.0)
    academic_weight: float = Field(default=20.0, ge=0.0)
    academic_scale: float = Field(default=10.0, gt=0.0)
    location_bonus: float = Field(default=10.0, ge=0.0)
    diversity_bonus: float = Field(default=20.0, ge=0.0)
    high_academic_term: float = Field(default=16.0, ge=0.0)
    missing_skills_shown: int = Field(default=2, ge=0)


class AllocationConfig(BaseModel):
    """Acceptance threshold and top-K cutoffs for match lists."""

    acceptance_threshold: float = Field(default=50.0, ge=0.0, le=100.0)
    bulk_top_k: int = Field(default=3, ge=1)
    preview_top_k: int = Field(default=3, ge=1)
    match_list_top_k: int = Field(default=5, ge=1)
    candidates_top_k: int = Field(default=20, ge=1)


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    embedding: EmbeddingConfig = Field(default_factory=EmbeddingConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    allocation: AllocationConfig = Field(default_factory=AllocationConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)
