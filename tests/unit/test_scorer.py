"""Tests for the weighted match scorer."""

import math
from unittest.mock import MagicMock

from internmatch.core.config import ScoringConfig
from internmatch.core.schemas import (
    CandidateProfile,
    MatchRequest,
    OpportunityDescriptor,
    ScoringMode,
)
from internmatch.pipeline.scorer import MatchScorer, finalize_score, skill_overlap
from internmatch.pipeline.similarity import SimilarityProvider, cosine_similarity
from tests.mocks.embedding_mocks import FakeBackend


def _candidate(
    *,
    skills: list[str] | None = None,
    cgpa: float = 9.0,
    location: str = "Bangalore",
    diversity_flag: bool = True,
) -> CandidateProfile:
    return CandidateProfile(
        skills=["Python", "SQL"] if skills is None else skills,
        cgpa=cgpa,
        location=location,
        diversity_flag=diversity_flag,
    )


def _opportunity(
    opp_id: int = 1,
    *,
    required_skills: list[str] | None = None,
    location: str = "Bangalore",
    title: str = "ML Intern",
) -> OpportunityDescriptor:
    return OpportunityDescriptor(
        id=opp_id,
        required_skills=(
            ["Python", "Machine Learning"] if required_skills is None else required_skills
        ),
        location=location,
        title=title,
    )


def _scorer(vectors: dict[str, list[float]] | None = None, **config: float) -> MatchScorer:
    provider = SimilarityProvider(FakeBackend(vectors))
    return MatchScorer(ScoringConfig(**config), provider)


def _fallback_scorer(**config: float) -> MatchScorer:
    return MatchScorer(ScoringConfig(**config))


def _ratio_formula(
    candidate: CandidateProfile,
    opportunity: OpportunityDescriptor,
) -> float:
    overlap, _ = skill_overlap(candidate.skills, opportunity.required_skills)
    ratio = len(overlap) / max(len(opportunity.required_skills), 1)
    raw = (
        ratio * 50
        + (candidate.cgpa / 10) * 20
        + (10 if candidate.location == opportunity.location else 0)
        + (20 if candidate.diversity_flag else 0)
    )
    return round(max(0.0, min(100.0, raw)), 2)


# ---------------------------------------------------------------------------
# Skill overlap
# ---------------------------------------------------------------------------


class TestSkillOverlap:
    def test_exact_match(self) -> None:
        overlap, missing = skill_overlap(["Python", "SQL"], ["Python", "Machine Learning"])
        assert overlap == ["Python"]
        assert missing == ["Machine Learning"]

    def test_case_insensitive(self) -> None:
        overlap, missing = skill_overlap(["python"], ["PYTHON"])
        assert overlap == ["python"]
        assert missing == []

    def test_candidate_skill_inside_required(self) -> None:
        overlap, missing = skill_overlap(["React"], ["React Native"])
        assert overlap == ["React"]
        assert missing == []

    def test_required_skill_inside_candidate(self) -> None:
        overlap, missing = skill_overlap(["Machine Learning Engineering"], ["machine learning"])
        assert overlap == ["Machine Learning Engineering"]
        assert missing == []

    def test_no_required_skills(self) -> None:
        overlap, missing = skill_overlap(["Python"], [])
        assert overlap == []
        assert missing == []

    def test_no_candidate_skills(self) -> None:
        overlap, missing = skill_overlap([], ["Python", "SQL"])
        assert overlap == []
        assert missing == ["Python", "SQL"]

    def test_overlap_and_missing_disjoint(self) -> None:
        cases = [
            (["Python", "SQL", "Docker"], ["Python", "Kubernetes", "SQL Server"]),
            (["Java"], ["JavaScript", "Go"]),
            (["C++", "Git"], ["git", "C"]),
        ]
        for candidate_skills, required in cases:
            overlap, missing = skill_overlap(candidate_skills, required)
            assert not set(overlap) & set(missing)
            satisfied = [r for r in required if r not in missing]
            for req in satisfied:
                assert any(
                    s.lower() in req.lower() or req.lower() in s.lower() for s in overlap
                )


# ---------------------------------------------------------------------------
# Fallback formula
# ---------------------------------------------------------------------------


class TestFallbackScoring:
    def test_worked_example(self) -> None:
        """Python+SQL, cgpa 9, same city, diversity vs Python+ML: 25+18+10+20."""
        batch = _fallback_scorer().score_batch(_candidate(), [_opportunity()])
        assert batch.mode is ScoringMode.FALLBACK
        result = batch.matches[0]
        assert result.match_score == 73.0
        assert result.skill_overlap == ["Python"]
        assert result.missing_skills == ["Machine Learning"]

    def test_explanation_text(self) -> None:
        result = _fallback_scorer().score(_candidate(), _opportunity())
        assert result.explanation == (
            "Basic matching (AI unavailable). Skill overlap: Python. "
            "Location match bonus. High CGPA advantage. Diversity boost. "
            "Consider learning: Machine Learning."
        )

    def test_minimal_explanation(self) -> None:
        candidate = _candidate(skills=["Cooking"], cgpa=5.0, location="Delhi",
                               diversity_flag=False)
        result = _fallback_scorer().score(candidate, _opportunity(required_skills=[]))
        assert result.explanation == "Basic matching (AI unavailable)."
        assert result.match_score == 10.0

    def test_learn_list_capped_at_two(self) -> None:
        opp = _opportunity(required_skills=["Go", "Rust", "Haskell"])
        result = _fallback_scorer().score(_candidate(skills=[]), opp)
        assert result.missing_skills == ["Go", "Rust", "Haskell"]
        assert result.explanation.endswith("Consider learning: Go, Rust.")

    def test_no_learn_sentence_when_zero_shown(self) -> None:
        opp = _opportunity(required_skills=["Go"])
        result = _fallback_scorer(missing_skills_shown=0).score(_candidate(skills=[]), opp)
        assert "Consider learning" not in result.explanation

    def test_location_is_case_sensitive(self) -> None:
        scorer = _fallback_scorer()
        same = scorer.score(_candidate(location="Bangalore"), _opportunity())
        other_case = scorer.score(_candidate(location="bangalore"), _opportunity())
        assert same.match_score - other_case.match_score == 10.0
        assert "Location match bonus." not in other_case.explanation

    def test_high_cgpa_boundary(self) -> None:
        scorer = _fallback_scorer()
        at_eight = scorer.score(_candidate(cgpa=8.0), _opportunity())
        below = scorer.score(_candidate(cgpa=7.9), _opportunity())
        assert "High CGPA advantage." in at_eight.explanation
        assert "High CGPA advantage." not in below.explanation

    def test_ratio_bounded_at_one(self) -> None:
        """Two candidate skills satisfying one required skill still count as 100%."""
        candidate = _candidate(skills=["Py", "Python"], cgpa=0.0, location="X",
                               diversity_flag=False)
        result = _fallback_scorer().score(candidate, _opportunity(required_skills=["Python"]))
        assert result.match_score == 50.0

    def test_matches_ratio_formula(self) -> None:
        candidates = [
            _candidate(),
            _candidate(skills=["Java"], cgpa=6.35, location="Pune", diversity_flag=False),
            _candidate(skills=["SQL", "Pandas", "Python"], cgpa=7.77),
        ]
        opportunities = [
            _opportunity(1),
            _opportunity(2, required_skills=["SQL", "Pandas", "Excel"], location="Pune"),
            _opportunity(3, required_skills=[]),
        ]
        scorer = _fallback_scorer()
        for candidate in candidates:
            batch = scorer.score_batch(candidate, opportunities)
            for opp, result in zip(opportunities, batch.matches):
                assert result.match_score == _ratio_formula(candidate, opp)


# ---------------------------------------------------------------------------
# Embedding path
# ---------------------------------------------------------------------------


class TestEmbeddingScoring:
    def test_identical_vectors_full_skills_term(self) -> None:
        scorer = _scorer({"Python, SQL": [1.0, 0.0], "Python, Machine Learning": [1.0, 0.0]})
        batch = scorer.score_batch(_candidate(), [_opportunity()])
        assert batch.mode is ScoringMode.EMBEDDING
        assert batch.matches[0].match_score == 98.0

    def test_explanation_text(self) -> None:
        scorer = _scorer({"Python, SQL": [1.0, 0.0], "Python, Machine Learning": [1.0, 0.0]})
        result = scorer.score(_candidate(), _opportunity())
        assert result.explanation == (
            "Excellent AI-powered skill match. Direct skill overlap: Python. "
            "Location match bonus applied. High CGPA advantage. Diversity boost applied. "
            "Recommended skills to learn: Machine Learning."
        )

    def test_quality_bands(self) -> None:
        candidate = _candidate(skills=["A"])
        cases = [
            ([1.0, 0.0], "Excellent AI-powered skill match."),
            ([4.0, 3.0], "Good skill compatibility detected."),  # cos = 0.8 exactly
            ([1.0, 1.0], "Good skill compatibility detected."),
            ([3.0, 4.0], "Moderate skill alignment."),  # cos = 0.6 exactly
            ([1.0, 2.0], "Moderate skill alignment."),
            ([1.0, 3.0], "Limited skill match."),
            ([0.0, 1.0], "Limited skill match."),
        ]
        for vector, sentence in cases:
            scorer = _scorer({"A": [1.0, 0.0], "B": vector})
            result = scorer.score(candidate, _opportunity(required_skills=["B"]))
            assert result.explanation.startswith(sentence), vector

    def test_skills_term_uses_similarity_not_ratio(self) -> None:
        scorer = _scorer({"A": [1.0, 0.0], "B": [3.0, 4.0]})
        candidate = _candidate(skills=["A"], cgpa=0.0, location="X", diversity_flag=False)
        result = scorer.score(candidate, _opportunity(required_skills=["B"]))
        assert result.match_score == 30.0
        assert result.skill_overlap == []
        assert result.missing_skills == ["B"]

    def test_candidate_embedded_once_per_batch(self) -> None:
        backend = FakeBackend()
        scorer = MatchScorer(ScoringConfig(), SimilarityProvider(backend))
        opportunities = [
            _opportunity(1, required_skills=["Go"]),
            _opportunity(2, required_skills=["Rust"]),
        ]
        scorer.score_batch(_candidate(), opportunities)
        assert backend.calls == ["Python, SQL", "Go", "Rust"]

    def test_join_order_defines_embedding_text(self) -> None:
        backend = FakeBackend()
        scorer = MatchScorer(ScoringConfig(), SimilarityProvider(backend))
        scorer.score(_candidate(skills=["SQL", "Python"]), _opportunity())
        assert backend.calls[0] == "SQL, Python"

    def test_backend_failure_scores_with_zero_similarity(self) -> None:
        """The provider absorbs backend errors, so the batch stays in embedding mode."""
        scorer = MatchScorer(ScoringConfig(), SimilarityProvider(FakeBackend(fail=True)))
        batch = scorer.score_batch(_candidate(), [_opportunity()])
        assert batch.mode is ScoringMode.EMBEDDING
        result = batch.matches[0]
        assert result.match_score == 48.0
        assert result.explanation.startswith("Limited skill match.")

    def test_idempotent_with_warm_cache(self) -> None:
        scorer = _scorer({"Python, SQL": [0.3, 0.7], "Python, Machine Learning": [0.5, 0.5]})
        first = scorer.score(_candidate(), _opportunity())
        second = scorer.score(_candidate(), _opportunity())
        assert first == second
        assert first.model_dump_json() == second.model_dump_json()


# ---------------------------------------------------------------------------
# Batch fallback
# ---------------------------------------------------------------------------


class TestBatchFallback:
    def _failing_provider(self, fail_on_call: int) -> MagicMock:
        calls = {"n": 0}

        def embed(text: str) -> list[float]:
            calls["n"] += 1
            if calls["n"] >= fail_on_call:
                msg = "boom"
                raise RuntimeError(msg)
            return [1.0, 0.0]

        provider = MagicMock(spec=SimilarityProvider)
        provider.embed.side_effect = embed
        provider.similarity.side_effect = cosine_similarity
        return provider

    def test_failure_mid_batch_falls_back_for_all(self) -> None:
        scorer = MatchScorer(ScoringConfig(), self._failing_provider(fail_on_call=3))
        opportunities = [
            _opportunity(1),
            _opportunity(2, required_skills=["SQL"]),
            _opportunity(3, required_skills=["Go"]),
        ]
        batch = scorer.score_batch(_candidate(), opportunities)
        assert batch.mode is ScoringMode.FALLBACK
        assert [m.internship_id for m in batch.matches] == [1, 2, 3]
        assert all(m.explanation.startswith("Basic matching") for m in batch.matches)

    def test_fallback_scores_equal_ratio_formula(self) -> None:
        scorer = MatchScorer(ScoringConfig(), self._failing_provider(fail_on_call=1))
        candidate = _candidate(cgpa=7.45, location="Pune")
        opportunities = [
            _opportunity(1),
            _opportunity(2, required_skills=["SQL", "Spark"], location="Pune"),
        ]
        batch = scorer.score_batch(candidate, opportunities)
        assert batch.mode is ScoringMode.FALLBACK
        for opp, result in zip(opportunities, batch.matches):
            assert result.match_score == _ratio_formula(candidate, opp)

    def test_no_provider_always_fallback(self) -> None:
        batch = _fallback_scorer().score_batch(_candidate(), [_opportunity()])
        assert batch.mode is ScoringMode.FALLBACK

    def test_empty_batch(self) -> None:
        assert _fallback_scorer().score_batch(_candidate(), []).matches == []
        assert _scorer().score_batch(_candidate(), []).matches == []


# ---------------------------------------------------------------------------
# Clamping, rounding, permissive input
# ---------------------------------------------------------------------------


class TestScoreBounds:
    def test_clamped_at_100(self) -> None:
        scorer = _scorer({"Python, SQL": [1.0, 0.0], "Python, Machine Learning": [1.0, 0.0]})
        result = scorer.score(_candidate(cgpa=15.0), _opportunity())
        assert result.match_score == 100.0

    def test_never_negative(self) -> None:
        candidate = _candidate(skills=[], cgpa=-50.0, location="X", diversity_flag=False)
        result = _fallback_scorer().score(candidate, _opportunity())
        assert result.match_score == 0.0

    def test_two_decimal_places(self) -> None:
        scorer = _scorer({"Python, SQL": [0.31, 0.77], "Python, Machine Learning": [0.52, 0.11]})
        for cgpa in (6.33, 7.77, 8.01, 9.99):
            result = scorer.score(_candidate(cgpa=cgpa), _opportunity())
            assert 0.0 <= result.match_score <= 100.0
            assert result.match_score == round(result.match_score, 2)

    def test_nan_embedding_scores_as_zero_similarity(self) -> None:
        """A NaN vector adds no skills term: 0 + 18 + 10 + 20."""
        scorer = _scorer({"Python, SQL": [math.nan, 1.0],
                          "Python, Machine Learning": [1.0, 0.0]})
        batch = scorer.score_batch(_candidate(), [_opportunity()])
        assert batch.mode is ScoringMode.EMBEDDING
        assert batch.matches[0].match_score == 48.0

    def test_finalize_score(self) -> None:
        assert finalize_score(73.4567) == 73.46
        assert finalize_score(120.0) == 100.0
        assert finalize_score(-3.0) == 0.0

    def test_malformed_profile_scores(self) -> None:
        candidate = CandidateProfile(skills=None, cgpa="n/a", location=None,
                                     diversity_flag=None)
        result = _fallback_scorer().score(candidate, _opportunity())
        assert result.match_score == 0.0
        assert result.skill_overlap == []
        assert result.missing_skills == ["Python", "Machine Learning"]


# ---------------------------------------------------------------------------
# match()
# ---------------------------------------------------------------------------


class TestMatch:
    def test_sorted_descending(self) -> None:
        request = MatchRequest(
            student_profile=_candidate(),
            internships=[
                _opportunity(1, required_skills=["Java"], location="Pune"),
                _opportunity(2, required_skills=["Python"]),
                _opportunity(3),
            ],
        )
        response = _fallback_scorer().match(request)
        assert [m.internship_id for m in response.matches] == [2, 3, 1]
        scores = [m.match_score for m in response.matches]
        assert scores == sorted(scores, reverse=True)

    def test_empty_request(self) -> None:
        assert _fallback_scorer().match(MatchRequest()).matches == []

    def test_custom_weights(self) -> None:
        scorer = _fallback_scorer(skills_weight=40.0, academic_weight=30.0)
        result = scorer.score(_candidate(cgpa=10.0), _opportunity(required_skills=["Python"]))
        assert result.match_score == 100.0
