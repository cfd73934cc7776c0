"""Ordering and labelling of match results.

rank() is a stable sort: results with equal scores keep their input order.
"""

from collections.abc import Sequence
from typing import Protocol, TypeVar


class _Scored(Protocol):
    @property
    def match_score(self) -> float: ...


T = TypeVar("T", bound=_Scored)

# (minimum score, label), checked top-down.
_LABELS: list[tuple[float, str]] = [
    (90.0, "Perfect"),
    (80.0, "Excellent"),
    (70.0, "Good"),
    (50.0, "Fair"),
]


def rank(results: Sequence[T]) -> list[T]:
    """Sort results by match_score descending, preserving order on ties."""
    return sorted(results, key=lambda r: r.match_score, reverse=True)


def top_k(results: Sequence[T], k: int | None) -> list[T]:
    """Rank results and keep the first k. k=None keeps all."""
    ranked = rank(results)
    return ranked if k is None else ranked[: max(k, 0)]


def score_label(score: float) -> str:
    for minimum, label in _LABELS:
        if score >= minimum:
            return label
    return "Poor"
