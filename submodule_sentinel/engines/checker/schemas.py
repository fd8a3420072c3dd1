"""Pydantic schemas for the machine-readable (JSON) report."""

from __future__ import annotations

from pydantic import BaseModel

from submodule_sentinel.engines.checker.models import (
    CheckReport,
    EvaluationSummary,
    ResolvedCommit,
    SubmoduleEvaluation,
    SubmoduleStatus,
)
from submodule_sentinel.engines.checker.tags import format_commit


class CommitOut(BaseModel):
    sha: str
    tags: list[str]
    display: str

    @classmethod
    def from_commit(cls, commit: ResolvedCommit) -> CommitOut:
        return cls(
            sha=commit.sha,
            tags=list(commit.tags),
            display=format_commit(commit.sha, commit.tags),
        )


class EvaluationOut(BaseModel):
    name: str | None
    path: str
    url: str
    branch: str
    status: SubmoduleStatus
    current: CommitOut | None = None
    latest: CommitOut | None = None
    error: str | None = None

    @classmethod
    def from_evaluation(cls, ev: SubmoduleEvaluation) -> EvaluationOut:
        return cls(
            name=ev.declaration.name,
            path=ev.path,
            url=ev.declaration.url,
            branch=ev.branch_used,
            status=ev.status,
            current=CommitOut.from_commit(ev.current) if ev.current else None,
            latest=CommitOut.from_commit(ev.latest) if ev.latest else None,
            error=ev.error_detail,
        )


class SummaryOut(BaseModel):
    total: int
    up_to_date: int
    needs_update: int
    errored: int
    outdated_paths: list[str]

    @classmethod
    def from_summary(cls, summary: EvaluationSummary) -> SummaryOut:
        return cls(
            total=summary.total,
            up_to_date=summary.up_to_date,
            needs_update=summary.needs_update,
            errored=summary.errored,
            outdated_paths=list(summary.outdated_paths),
        )


class ReportOut(BaseModel):
    config_found: bool
    submodules: list[EvaluationOut]
    summary: SummaryOut

    @classmethod
    def from_report(cls, report: CheckReport) -> ReportOut:
        return cls(
            config_found=report.config_found,
            submodules=[EvaluationOut.from_evaluation(ev) for ev in report.evaluations],
            summary=SummaryOut.from_summary(report.summary),
        )
