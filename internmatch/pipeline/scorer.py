"""Weighted match scoring of one candidate against internship postings.

Score range: 0-100 (clamped, then rounded to 2 decimals). Four terms:

  skills     similarity * skills_weight   (embedding mode)
             overlap ratio * skills_weight (fallback mode)
  academic   (cgpa / academic_scale) * academic_weight
  location   location_bonus on exact, case-sensitive location equality
  diversity  diversity_bonus when the candidate is diversity-eligible

A batch is scored in one mode only. If anything in the embedding path
raises, every opportunity in the batch is rescored with the fallback formula.
"""

import logging
from collections.abc import Sequence

from internmatch.core.config import ScoringConfig
from internmatch.core.schemas import (
    CandidateProfile,
    MatchRequest,
    MatchResponse,
    MatchResult,
    OpportunityDescriptor,
    ScoredBatch,
    ScoringMode,
)
from internmatch.pipeline.ranker import rank
from internmatch.pipeline.similarity import SimilarityProvider

logger = logging.getLogger(__name__)

SKILLS_SEPARATOR = ", "

# (similarity threshold, opening sentence), checked top-down; strict ">".
_QUALITY_BANDS: list[tuple[float, str]] = [
    (0.8, "Excellent AI-powered skill match."),
    (0.6, "Good skill compatibility detected."),
    (0.4, "Moderate skill alignment."),
]
_LIMITED_MATCH = "Limited skill match."


def skill_overlap(
    candidate_skills: Sequence[str],
    required_skills: Sequence[str],
) -> tuple[list[str], list[str]]:
    """Classify skills by case-insensitive, bidirectional substring containment.

    Returns:
        (overlap, missing): candidate skills that satisfy at least one
        required skill, and required skills no candidate skill satisfies.
    """
    candidate_lower = [s.lower() for s in candidate_skills]
    required_lower = [r.lower() for r in required_skills]

    overlap = [
        skill
        for skill, s in zip(candidate_skills, candidate_lower)
        if any(_skills_match(s, r) for r in required_lower)
    ]
    missing = [
        req
        for req, r in zip(required_skills, required_lower)
        if not any(_skills_match(s, r) for s in candidate_lower)
    ]
    return overlap, missing


def _skills_match(a: str, b: str) -> bool:
    return a in b or b in a


def finalize_score(raw: float) -> float:
    """Clamp to [0, 100] and round to 2 decimals."""
    return round(max(0.0, min(100.0, raw)), 2)


class MatchScorer:
    """Scores candidates against opportunities.

    Usage::

        scorer = MatchScorer(ScoringConfig(), SimilarityProvider(backend))
        batch = scorer.score_batch(candidate, opportunities)
        if batch.mode is ScoringMode.FALLBACK:
            ...

    Without a similarity provider every batch uses the fallback formula.
    """

    def __init__(
        self,
        config: ScoringConfig,
        similarity: SimilarityProvider | None = None,
    ) -> None:
        self._config = config
        self._similarity = similarity

    @property
    def config(self) -> ScoringConfig:
        return self._config

    def score(
        self,
        candidate: CandidateProfile,
        opportunity: OpportunityDescriptor,
    ) -> MatchResult:
        """Score a single opportunity."""
        return self.score_batch(candidate, [opportunity]).matches[0]

    def score_batch(
        self,
        candidate: CandidateProfile,
        opportunities: Sequence[OpportunityDescriptor],
    ) -> ScoredBatch:
        """Score every opportunity for one candidate, in input order."""
        if self._similarity is None:
            return self.score_batch_fallback(candidate, opportunities)

        try:
            matches = self._score_with_similarity(self._similarity, candidate, opportunities)
        except Exception:
            logger.warning(
                "Similarity scoring failed for %d opportunities - falling back to basic matching",
                len(opportunities),
                exc_info=True,
            )
            return self.score_batch_fallback(candidate, opportunities)

        return ScoredBatch(mode=ScoringMode.EMBEDDING, matches=matches)

    def score_batch_fallback(
        self,
        candidate: CandidateProfile,
        opportunities: Sequence[OpportunityDescriptor],
    ) -> ScoredBatch:
        """Score every opportunity with the overlap-ratio formula."""
        matches = [self._score_basic(candidate, opp) for opp in opportunities]
        return ScoredBatch(mode=ScoringMode.FALLBACK, matches=matches)

    def match(self, request: MatchRequest) -> MatchResponse:
        """Score a request and return its matches ranked by score."""
        batch = self.score_batch(request.student_profile, request.internships)
        return MatchResponse(matches=rank(batch.matches))

    # ------------------------------------------------------------------
    # Embedding path
    # ------------------------------------------------------------------

    def _score_with_similarity(
        self,
        provider: SimilarityProvider,
        candidate: CandidateProfile,
        opportunities: Sequence[OpportunityDescriptor],
    ) -> list[MatchResult]:
        candidate_vector = provider.embed(SKILLS_SEPARATOR.join(candidate.skills))

        matches: list[MatchResult] = []
        for opp in opportunities:
            opp_vector = provider.embed(SKILLS_SEPARATOR.join(opp.required_skills))
            similarity = provider.similarity(candidate_vector, opp_vector)
            overlap, missing = skill_overlap(candidate.skills, opp.required_skills)

            skills_term = similarity * self._config.skills_weight
            academic, location, diversity = self._profile_terms(candidate, opp)

            sentences = [_quality_sentence(similarity)]
            if overlap:
                sentences.append(f"Direct skill overlap: {SKILLS_SEPARATOR.join(overlap)}.")
            if location > 0:
                sentences.append("Location match bonus applied.")
            if academic >= self._config.high_academic_term:
                sentences.append("High CGPA advantage.")
            if diversity > 0:
                sentences.append("Diversity boost applied.")
            if missing and self._config.missing_skills_shown:
                sentences.append(f"Recommended skills to learn: {self._learn_list(missing)}.")

            matches.append(
                MatchResult(
                    internship_id=opp.id,
                    match_score=finalize_score(skills_term + academic + location + diversity),
                    explanation=" ".join(sentences).strip(),
                    skill_overlap=overlap,
                    missing_skills=missing,
                )
            )
        return matches

    # ------------------------------------------------------------------
    # Fallback path
    # ------------------------------------------------------------------

    def _score_basic(
        self,
        candidate: CandidateProfile,
        opp: OpportunityDescriptor,
    ) -> MatchResult:
        overlap, missing = skill_overlap(candidate.skills, opp.required_skills)

        ratio = min(1.0, len(overlap) / max(len(opp.required_skills), 1))
        skills_term = ratio * self._config.skills_weight
        academic, location, diversity = self._profile_terms(candidate, opp)

        sentences = ["Basic matching (AI unavailable)."]
        if overlap:
            sentences.append(f"Skill overlap: {SKILLS_SEPARATOR.join(overlap)}.")
        if location > 0:
            sentences.append("Location match bonus.")
        if academic >= self._config.high_academic_term:
            sentences.append("High CGPA advantage.")
        if diversity > 0:
            sentences.append("Diversity boost.")
        if missing and self._config.missing_skills_shown:
            sentences.append(f"Consider learning: {self._learn_list(missing)}.")

        return MatchResult(
            internship_id=opp.id,
            match_score=finalize_score(skills_term + academic + location + diversity),
            explanation=" ".join(sentences).strip(),
            skill_overlap=overlap,
            missing_skills=missing,
        )

    # ------------------------------------------------------------------
    # Shared terms
    # ------------------------------------------------------------------

    def _profile_terms(
        self,
        candidate: CandidateProfile,
        opp: OpportunityDescriptor,
    ) -> tuple[float, float, float]:
        """Return (academic, location, diversity) score terms."""
        config = self._config
        academic = (candidate.cgpa / config.academic_scale) * config.academic_weight
        location = config.location_bonus if candidate.location == opp.location else 0.0
        diversity = config.diversity_bonus if candidate.diversity_flag else 0.0
        return academic, location, diversity

    def _learn_list(self, missing: list[str]) -> str:
        return SKILLS_SEPARATOR.join(missing[: self._config.missing_skills_shown])


def _quality_sentence(similarity: float) -> str:
    for threshold, sentence in _QUALITY_BANDS:
        if similarity > threshold:
            return sentence
    return _LIMITED_MATCH
