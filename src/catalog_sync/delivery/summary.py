"""
Delivery outcomes and their aggregation.

Each delivery unit (one document, or one batch on bulk endpoints) ends with
exactly one DeliveryOutcome. summarize() folds a run's outcomes into a
DeliverySummary. Partial failure is reported in the summary; a run in which
every unit failed raises TotalFailureError.
"""

from dataclasses import dataclass, field
from typing import Any, Sequence

from ..errors import TotalFailureError


@dataclass(frozen=True)
class DeliveryOutcome:
    """Final result for one delivery unit, after all attempts."""

    index: int
    identifiers: tuple[str, ...]
    success: bool
    status_code: int | None = None
    body: Any = None
    error: str | None = None
    attempts: int | None = None

    @property
    def size(self) -> int:
        return len(self.identifiers)

    def to_dict(self) -> dict[str, Any]:
        return {
            'index': self.index,
            'size': self.size,
            'identifiers': list(self.identifiers),
            'success': self.success,
            'status_code': self.status_code,
            'error': self.error,
            'attempts': self.attempts,
        }


@dataclass
class DeliverySummary:
    """
    Aggregate of a delivery run.

    Counts are in documents, so a failed batch of 200 adds 200 to
    failed_count. batches keeps one entry per unit for diagnostics.
    """

    success_count: int = 0
    failed_count: int = 0
    failed_identifiers: list[str] = field(default_factory=list)
    batches: list[DeliveryOutcome] = field(default_factory=list)

    @property
    def unit_count(self) -> int:
        return len(self.batches)

    @property
    def all_succeeded(self) -> bool:
        return self.failed_count == 0

    @property
    def all_failed(self) -> bool:
        return bool(self.batches) and all(not o.success for o in self.batches)

    @property
    def partial_success(self) -> bool:
        return self.success_count > 0 and self.failed_count > 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'success_count': self.success_count,
            'failed_count': self.failed_count,
            'failed_identifiers': self.failed_identifiers,
            'batches': [o.to_dict() for o in self.batches],
        }


def summarize(
    outcomes: Sequence[DeliveryOutcome],
    raise_on_total_failure: bool = True,
) -> DeliverySummary:
    """
    Aggregate delivery outcomes.

    Args:
        outcomes: One outcome per delivery unit
        raise_on_total_failure: Raise when every unit failed

    Returns:
        DeliverySummary (empty when there were no outcomes)

    Raises:
        TotalFailureError: Every outcome failed and raise_on_total_failure is set
    """
    summary = DeliverySummary(batches=list(outcomes))

    for outcome in outcomes:
        if outcome.success:
            summary.success_count += outcome.size
        else:
            summary.failed_count += outcome.size
            summary.failed_identifiers.extend(outcome.identifiers)

    if raise_on_total_failure and summary.all_failed:
        first_error = outcomes[0].error
        raise TotalFailureError(
            f"All {len(outcomes)} delivery unit(s) failed",
            summary=summary,
            context={
                'failed_count': summary.failed_count,
                'first_error': first_error,
            },
        )

    return summary
