# aggregation.py
# Trimmed mean across reviewers and proposal ranking

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_DOWN, ROUND_HALF_UP
from enum import Enum
from typing import Hashable, Iterable, List, Optional, Tuple

TWO_DECIMALS = Decimal('0.01')


class MeanRounding(str, Enum):
    """How a mean is cut to two decimals. Chosen once, in config."""
    ROUND = 'round'
    TRUNCATE = 'truncate'


class RankingTies(str, Enum):
    SEQUENTIAL = 'sequential'   # 1, 2, 3 even when means are equal
    SHARED = 'shared'           # 1, 1, 3


_DECIMAL_MODES = {
    MeanRounding.ROUND: ROUND_HALF_UP,
    MeanRounding.TRUNCATE: ROUND_DOWN,
}


def quantize_mean(value, rounding=MeanRounding.ROUND):
    """Express a mean to two decimals under the given rule."""
    mode = _DECIMAL_MODES[MeanRounding(rounding)]
    if isinstance(value, float):
        value = str(value)
    return float(Decimal(value).quantize(TWO_DECIMALS, rounding=mode))


def _mean(values):
    if not values:
        return Decimal('0')
    return sum(values, Decimal('0')) / len(values)


@dataclass
class ReviewerTotal:
    reviewer_id: Hashable
    total: float
    reviewer_name: Optional[str] = None
    excluded_high: bool = False
    excluded_low: bool = False

    @property
    def excluded(self):
        return self.excluded_high or self.excluded_low


@dataclass
class Aggregate:
    raw_mean: float
    trimmed_mean: float
    reviewers: List[ReviewerTotal] = field(default_factory=list)

    @property
    def count(self):
        return len(self.reviewers)

    @property
    def total_sum(self):
        return float(sum((Decimal(str(r.total)) for r in self.reviewers), Decimal('0')))

    @property
    def unscored(self):
        return not self.reviewers


def aggregate(totals, rounding=MeanRounding.ROUND):
    """
    Combine the reviewers' totals for one proposal.

    `totals` is an iterable of (reviewer_id, total) or
    (reviewer_id, total, reviewer_name) tuples, one per reviewer who has
    scored the proposal. With three or more totals and some spread, the
    first reviewer holding the maximum is marked excluded-high and the
    first holding the minimum excluded-low; the trimmed mean is taken over
    everyone else. Fewer than three totals, or no spread, leaves the
    trimmed mean equal to the raw mean. An empty input gives 0 and 0.
    """
    reviewers = [ReviewerTotal(*entry) for entry in totals]
    values = [Decimal(str(r.total)) for r in reviewers]

    raw = _mean(values)
    trimmed = raw

    if len(values) >= 3:
        highest, lowest = max(values), min(values)
        if highest != lowest:
            high_index = values.index(highest)
            low_index = values.index(lowest)
            reviewers[high_index].excluded_high = True
            reviewers[low_index].excluded_low = True
            kept = [v for i, v in enumerate(values) if i not in (high_index, low_index)]
            trimmed = _mean(kept)

    return Aggregate(
        raw_mean=quantize_mean(raw, rounding),
        trimmed_mean=quantize_mean(trimmed, rounding),
        reviewers=reviewers,
    )


@dataclass
class RankedProposal:
    proposal_id: Hashable
    trimmed_mean: float
    rank: int


def rank_proposals(means: Iterable[Tuple[Hashable, float]], ties=RankingTies.SEQUENTIAL):
    """
    Order proposals by trimmed mean, highest first, and number them from 1.

    Equal means keep their input order. Under SEQUENTIAL they still get
    consecutive ranks; under SHARED they share the better rank and the
    next distinct mean skips ahead.
    """
    ties = RankingTies(ties)
    ordered = sorted(means, key=lambda item: item[1], reverse=True)

    ranked = []
    for position, (proposal_id, trimmed_mean) in enumerate(ordered, start=1):
        rank = position
        if ties is RankingTies.SHARED and ranked and ranked[-1].trimmed_mean == trimmed_mean:
            rank = ranked[-1].rank
        ranked.append(RankedProposal(proposal_id, trimmed_mean, rank))
    return ranked
