"""Ordering and selection over generation results."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, List, Optional, Sequence

from .models import DocumentationResult


@dataclass(frozen=True)
class RunSummary:
    total: int
    succeeded: int
    failed: int
    average_time_ms: Optional[int] = None
    fastest: Optional[str] = None
    most_detailed: Optional[str] = None
    best_balance: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


def rank_results(results: Sequence[DocumentationResult]) -> List[DocumentationResult]:
    """Successes first by ascending time, then failures; ties keep input order."""
    return sorted(
        results,
        key=lambda result: (0, result.generation_time_ms) if result.success else (1, 0),
    )


def _successes(results: Sequence[DocumentationResult]) -> List[DocumentationResult]:
    return [result for result in results if result.success]


def fastest(results: Sequence[DocumentationResult]) -> Optional[DocumentationResult]:
    candidates = _successes(results)
    if not candidates:
        return None
    return min(candidates, key=lambda result: result.generation_time_ms)


def most_detailed(results: Sequence[DocumentationResult]) -> Optional[DocumentationResult]:
    candidates = _successes(results)
    if not candidates:
        return None
    return max(candidates, key=lambda result: result.token_count or 0)


def balance_score(result: DocumentationResult) -> float:
    return (result.token_count or 0) / max(result.generation_time_ms, 1)


def best_balance(results: Sequence[DocumentationResult]) -> Optional[DocumentationResult]:
    candidates = _successes(results)
    if not candidates:
        return None
    return max(candidates, key=balance_score)


def _label(result: Optional[DocumentationResult]) -> Optional[str]:
    if result is None:
        return None
    return f"{result.provider_used}/{result.model_used}"


def summarize(results: Sequence[DocumentationResult]) -> RunSummary:
    successes = _successes(results)
    average = None
    if successes:
        average = round(sum(result.generation_time_ms for result in successes) / len(successes))
    return RunSummary(
        total=len(results),
        succeeded=len(successes),
        failed=len(results) - len(successes),
        average_time_ms=average,
        fastest=_label(fastest(results)),
        most_detailed=_label(most_detailed(results)),
        best_balance=_label(best_balance(results)),
    )


__all__ = [
    "RunSummary",
    "balance_score",
    "best_balance",
    "fastest",
    "most_detailed",
    "rank_results",
    "summarize",
]
