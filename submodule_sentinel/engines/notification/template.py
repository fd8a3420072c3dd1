"""Comment text for outdated-submodule notifications."""

from __future__ import annotations

from typing import cast

from submodule_sentinel.engines.checker.models import (
    ResolvedCommit,
    SubmoduleEvaluation,
    SubmoduleStatus,
)
from submodule_sentinel.engines.checker.tags import format_commit


def render_update_comment(evaluation: SubmoduleEvaluation) -> str:
    """Return the comment body for an outdated submodule.

    The text depends only on the evaluation, so an unchanged state renders
    byte-identical output across runs and the exact-match dedup holds.
    """
    if evaluation.status is not SubmoduleStatus.NEEDS_UPDATE:
        raise ValueError(
            f"cannot render update comment for {evaluation.path}: "
            f"status is {evaluation.status.value}"
        )
    # NEEDS_UPDATE evaluations always carry both commits
    pinned = cast(ResolvedCommit, evaluation.current)
    newest = cast(ResolvedCommit, evaluation.latest)
    current = format_commit(pinned.sha, pinned.tags)
    latest = format_commit(newest.sha, newest.tags)
    return (
        f"**Submodule update available:** `{evaluation.path}`\n\n"
        f"- Tracked branch: `{evaluation.branch_used}`\n"
        f"- Current commit: `{current}`\n"
        f"- Latest commit: `{latest}`"
    )
