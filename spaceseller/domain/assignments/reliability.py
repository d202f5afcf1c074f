"""
Photographer reliability scoring.

Aggregates the outcomes of past assignment offers into a 0-100 score:

    score = 40% acceptance rate + 40% completion rate + 20% (1 - timeout rate)

Rates are reported as percentages. Pure functions only; nothing here reads
or writes the database.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

# Note the assignment sweep writes on declines it made for the photographer
TIMEOUT_DECLINE_NOTE = "Nicht rechtzeitig beantwortet"

ACCEPTANCE_WEIGHT = 0.4
COMPLETION_WEIGHT = 0.4
PUNCTUALITY_WEIGHT = 0.2

RELIABILITY_LEVELS = (
    (80, "very reliable", "default"),
    (60, "reliable", "secondary"),
    (40, "moderately reliable", "outline"),
)
UNRELIABLE = ("unreliable", "destructive")


@dataclass
class AssignmentOutcomes:
    total: int = 0
    accepted: int = 0
    manually_declined: int = 0
    auto_declined_on_timeout: int = 0
    completed: int = 0


@dataclass
class ReliabilityScore:
    acceptance_rate: float
    completion_rate: float
    timeout_rate: float
    reliability_score: float


@dataclass
class ReliabilityMetrics:
    provider_id: str
    provider_name: str
    provider_email: Optional[str]
    total: int
    accepted: int
    manually_declined: int
    auto_declined_on_timeout: int
    completed: int
    acceptance_rate: float
    timeout_rate: float
    completion_rate: float
    reliability_score: float


def _count(value) -> int:
    """Malformed or negative counts are treated as zero"""
    try:
        count = int(value)
    except (TypeError, ValueError):
        return 0
    return max(count, 0)


def _ratio(part: int, whole: int) -> float:
    if whole <= 0:
        return 0.0
    return min(part / whole, 1.0)


def classify_assignments(assignments: Iterable[Tuple[str, Optional[str]]]) -> AssignmentOutcomes:
    """
    Count outcomes from (status, photographer_notes) pairs.

    A completed assignment was accepted first, so it counts towards both.
    Pending assignments only count towards the total.
    """
    outcomes = AssignmentOutcomes()
    for status, notes in assignments:
        outcomes.total += 1
        if status == "accepted":
            outcomes.accepted += 1
        elif status == "completed":
            outcomes.accepted += 1
            outcomes.completed += 1
        elif status == "declined":
            if notes == TIMEOUT_DECLINE_NOTE:
                outcomes.auto_declined_on_timeout += 1
            else:
                outcomes.manually_declined += 1
    return outcomes


def score(outcomes: AssignmentOutcomes) -> ReliabilityScore:
    total = _count(outcomes.total)
    accepted = _count(outcomes.accepted)
    completed = _count(outcomes.completed)
    timed_out = _count(outcomes.auto_declined_on_timeout)

    acceptance = _ratio(accepted, total)
    completion = _ratio(completed, accepted)
    timeout = _ratio(timed_out, total)

    if total == 0:
        reliability = 0.0
    else:
        reliability = (
            ACCEPTANCE_WEIGHT * acceptance
            + COMPLETION_WEIGHT * completion
            + PUNCTUALITY_WEIGHT * (1 - timeout)
        ) * 100

    return ReliabilityScore(
        acceptance_rate=acceptance * 100,
        completion_rate=completion * 100,
        timeout_rate=timeout * 100,
        reliability_score=reliability,
    )


def build_metrics(
    provider_id: str,
    outcomes: AssignmentOutcomes,
    provider_name: str = "N/A",
    provider_email: Optional[str] = None,
) -> ReliabilityMetrics:
    result = score(outcomes)
    return ReliabilityMetrics(
        provider_id=provider_id,
        provider_name=provider_name,
        provider_email=provider_email,
        total=_count(outcomes.total),
        accepted=_count(outcomes.accepted),
        manually_declined=_count(outcomes.manually_declined),
        auto_declined_on_timeout=_count(outcomes.auto_declined_on_timeout),
        completed=_count(outcomes.completed),
        acceptance_rate=result.acceptance_rate,
        timeout_rate=result.timeout_rate,
        completion_rate=result.completion_rate,
        reliability_score=result.reliability_score,
    )


def reliability_label(reliability_score: float) -> str:
    for threshold, label, _ in RELIABILITY_LEVELS:
        if reliability_score >= threshold:
            return label
    return UNRELIABLE[0]


def reliability_badge_variant(reliability_score: float) -> str:
    for threshold, _, variant in RELIABILITY_LEVELS:
        if reliability_score >= threshold:
            return variant
    return UNRELIABLE[1]
