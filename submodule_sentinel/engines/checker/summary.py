"""Aggregate evaluations into an EvaluationSummary."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from submodule_sentinel.engines.checker.models import (
    EvaluationSummary,
    SubmoduleEvaluation,
    SubmoduleStatus,
)


def summarize(evaluations: Iterable[SubmoduleEvaluation]) -> EvaluationSummary:
    """Count evaluations by status; outdated paths keep input order."""
    evaluations = list(evaluations)
    counts = Counter(ev.status for ev in evaluations)
    return EvaluationSummary(
        total=len(evaluations),
        up_to_date=counts[SubmoduleStatus.UP_TO_DATE],
        needs_update=counts[SubmoduleStatus.NEEDS_UPDATE],
        errored=counts[SubmoduleStatus.ERRORED],
        outdated_paths=tuple(
            ev.path for ev in evaluations if ev.status is SubmoduleStatus.NEEDS_UPDATE
        ),
    )
