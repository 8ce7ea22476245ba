"""
Generic weighted scoring and ranking of candidate options.

Constraints are hard filters applied before any scoring, so an excluded
candidate can never appear in the ranking. Each criterion returns a raw
fitness that is clamped to [0, 1]; weights are normalized, so the total
always lands in [0, 100].
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from ..schemas import CandidateOption, RankedCandidate
from .base import EngineError, clamp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Criterion:
    name: str
    weight: float
    scorer: Callable[[CandidateOption], float]


@dataclass(frozen=True)
class Constraint:
    name: str
    predicate: Callable[[CandidateOption], bool]


def cheaper_first(candidate: RankedCandidate):
    return (candidate.cost, candidate.name)


@dataclass(frozen=True)
class Requirements:
    criteria: Sequence[Criterion]
    constraints: Sequence[Constraint] = ()
    limit: Optional[int] = None
    tie_breaker: Callable[[RankedCandidate], tuple] = field(default=cheaper_first)


def score_and_rank(candidates: Sequence[CandidateOption],
                   requirements: Requirements) -> List[RankedCandidate]:
    """
    Filter, score and rank candidates, best first.

    Ties on score are broken by requirements.tie_breaker (lower cost, then
    name, by default). An empty list is a valid result.
    """
    total_weight = sum(c.weight for c in requirements.criteria)
    if total_weight <= 0:
        raise EngineError("criterion weights must sum to a positive value")

    eligible = []
    for candidate in candidates:
        failed = [c.name for c in requirements.constraints if not c.predicate(candidate)]
        if failed:
            logger.debug("Excluded %s: %s", candidate.name, ", ".join(failed))
            continue
        eligible.append(candidate)

    scored = []
    for candidate in eligible:
        sub_scores = {}
        total = 0.0
        for criterion in requirements.criteria:
            fit = clamp(criterion.scorer(candidate), 0.0, 1.0)
            sub_scores[criterion.name] = round(fit, 4)
            total += fit * criterion.weight / total_weight
        scored.append(RankedCandidate(
            rank=0,
            name=candidate.name,
            score=round(clamp(total * 100, 0.0, 100.0), 2),
            cost=candidate.cost,
            sub_scores=sub_scores,
            properties=dict(candidate.properties),
            pros=list(candidate.pros),
            cons=list(candidate.cons),
        ))

    scored.sort(key=lambda r: (-r.score,) + tuple(requirements.tie_breaker(r)))
    if requirements.limit is not None:
        scored = scored[:requirements.limit]
    for i, ranked in enumerate(scored, start=1):
        ranked.rank = i
    return scored
