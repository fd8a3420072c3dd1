"""Data models for the submodule checker engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SubmoduleStatus(str, Enum):
    UP_TO_DATE = "up_to_date"
    NEEDS_UPDATE = "needs_update"
    ERRORED = "errored"


@dataclass(frozen=True)
class SubmoduleDeclaration:
    """One ``[submodule]`` block from a .gitmodules file."""

    path: str
    url: str
    branch: str | None = None
    name: str | None = None


@dataclass(frozen=True)
class ResolvedCommit:
    """A commit id plus the tags pointing at it (newest first)."""

    sha: str
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class SubmoduleEvaluation:
    """Outcome of checking a single submodule.

    Build instances through :meth:`resolved` or :meth:`errored`; the
    constructor rejects a status that contradicts the commits.
    """

    declaration: SubmoduleDeclaration
    branch_used: str
    status: SubmoduleStatus
    current: ResolvedCommit | None = None
    latest: ResolvedCommit | None = None
    error_detail: str | None = None

    def __post_init__(self) -> None:
        if self.status is SubmoduleStatus.ERRORED:
            if not self.error_detail:
                raise ValueError("errored evaluation requires error_detail")
            return
        if self.current is None or self.latest is None:
            raise ValueError(f"{self.status.value} evaluation requires both commits")
        if self.error_detail is not None:
            raise ValueError(f"{self.status.value} evaluation cannot carry error_detail")
        same = self.current.sha == self.latest.sha
        if same != (self.status is SubmoduleStatus.UP_TO_DATE):
            raise ValueError(
                f"status {self.status.value} contradicts "
                f"{self.current.sha} vs {self.latest.sha}"
            )

    @classmethod
    def resolved(
        cls,
        declaration: SubmoduleDeclaration,
        branch_used: str,
        current: ResolvedCommit,
        latest: ResolvedCommit,
    ) -> SubmoduleEvaluation:
        status = (
            SubmoduleStatus.UP_TO_DATE
            if current.sha == latest.sha
            else SubmoduleStatus.NEEDS_UPDATE
        )
        return cls(
            declaration=declaration,
            branch_used=branch_used,
            status=status,
            current=current,
            latest=latest,
        )

    @classmethod
    def errored(
        cls,
        declaration: SubmoduleDeclaration,
        branch_used: str,
        detail: str,
    ) -> SubmoduleEvaluation:
        return cls(
            declaration=declaration,
            branch_used=branch_used,
            status=SubmoduleStatus.ERRORED,
            error_detail=detail,
        )

    @property
    def path(self) -> str:
        return self.declaration.path


@dataclass(frozen=True)
class EvaluationSummary:
    """Counts derived from a list of evaluations."""

    total: int
    up_to_date: int
    needs_update: int
    errored: int
    outdated_paths: tuple[str, ...] = ()


@dataclass(frozen=True)
class CheckReport:
    """Result of a full check run: evaluations in declaration order plus summary."""

    evaluations: tuple[SubmoduleEvaluation, ...]
    summary: EvaluationSummary
    config_found: bool = True
