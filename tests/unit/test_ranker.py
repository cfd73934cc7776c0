"""Tests for result ranking and score labels."""

from internmatch.core.schemas import MatchResult
from internmatch.pipeline.ranker import rank, score_label, top_k


def _result(internship_id: int, score: float) -> MatchResult:
    return MatchResult(internship_id=internship_id, match_score=score)


class TestRank:
    def test_descending(self) -> None:
        ranked = rank([_result(1, 10.0), _result(2, 90.0), _result(3, 55.5)])
        assert [r.internship_id for r in ranked] == [2, 3, 1]

    def test_ties_keep_input_order(self) -> None:
        ranked = rank([_result(1, 70.0), _result(2, 90.0), _result(3, 70.0)])
        assert [r.internship_id for r in ranked] == [2, 1, 3]

    def test_all_equal(self) -> None:
        ranked = rank([_result(i, 50.0) for i in (4, 2, 9)])
        assert [r.internship_id for r in ranked] == [4, 2, 9]

    def test_does_not_mutate_input(self) -> None:
        results = [_result(1, 10.0), _result(2, 20.0)]
        rank(results)
        assert [r.internship_id for r in results] == [1, 2]

    def test_empty(self) -> None:
        assert rank([]) == []


class TestTopK:
    def test_truncates_after_ranking(self) -> None:
        results = [_result(i, float(i * 10)) for i in range(1, 6)]
        assert [r.internship_id for r in top_k(results, 3)] == [5, 4, 3]

    def test_none_keeps_all(self) -> None:
        results = [_result(i, float(i)) for i in range(1, 8)]
        assert len(top_k(results, None)) == 7

    def test_k_larger_than_input(self) -> None:
        assert len(top_k([_result(1, 1.0)], 5)) == 1

    def test_negative_k_empty(self) -> None:
        assert top_k([_result(1, 1.0)], -1) == []


class TestScoreLabel:
    def test_thresholds(self) -> None:
        assert score_label(100.0) == "Perfect"
        assert score_label(90.0) == "Perfect"
        assert score_label(89.99) == "Excellent"
        assert score_label(80.0) == "Excellent"
        assert score_label(70.0) == "Good"
        assert score_label(50.0) == "Fair"
        assert score_label(49.99) == "Poor"
        assert score_label(0.0) == "Poor"
