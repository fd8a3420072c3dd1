"""Human-readable report and pipeline output variables."""

from __future__ import annotations

from typing import Literal

from submodule_sentinel.engines.checker.models import (
    CheckReport,
    EvaluationSummary,
    ResolvedCommit,
    SubmoduleEvaluation,
    SubmoduleStatus,
)
from submodule_sentinel.engines.checker.tags import format_commit

OutputFormat = Literal["detailed", "summary"]

_STATUS_LABELS: dict[SubmoduleStatus, str] = {
    SubmoduleStatus.UP_TO_DATE: "UP TO DATE",
    SubmoduleStatus.NEEDS_UPDATE: "NEEDS UPDATE",
    SubmoduleStatus.ERRORED: "ERROR",
}

_RULE = "=" * 50


def _display(commit: ResolvedCommit | None) -> str:
    if commit is None:
        return "unknown"
    return format_commit(commit.sha, commit.tags)


def _render_evaluation(
    ev: SubmoduleEvaluation, index: int, total: int, output_format: OutputFormat
) -> list[str]:
    lines = [f"[{index}/{total}] {ev.path}"]
    if output_format == "detailed":
        lines += [
            f"  URL: {ev.declaration.url}",
            f"  Branch: {ev.branch_used}",
            f"  Current commit: {_display(ev.current)}",
            f"  Latest commit: {_display(ev.latest)}",
        ]
    if ev.status is SubmoduleStatus.ERRORED:
        lines.append(f"  Status: ERROR ({ev.error_detail})")
    else:
        lines.append(f"  Status: {_STATUS_LABELS[ev.status]}")
    return lines


def render_text(report: CheckReport, output_format: OutputFormat = "detailed") -> list[str]:
    """Render *report* as console lines, one submodule block per evaluation."""
    lines: list[str] = []
    if not report.config_found:
        lines += ["No .gitmodules file found - no submodules to check", ""]

    total = len(report.evaluations)
    for i, ev in enumerate(report.evaluations, start=1):
        lines += _render_evaluation(ev, i, total, output_format)
        lines.append("")

    summary = report.summary
    lines += [
        "SUMMARY",
        _RULE,
        f"Total submodules: {summary.total}",
        f"Up to date: {summary.up_to_date}",
        f"Need updating: {summary.needs_update}",
        f"Errors: {summary.errored}",
    ]

    outdated = [ev for ev in report.evaluations if ev.status is SubmoduleStatus.NEEDS_UPDATE]
    if outdated:
        lines += ["", "SUBMODULES NEEDING UPDATES:"]
        for ev in outdated:
            lines.append(f"  - {ev.path}: {_display(ev.current)} -> {_display(ev.latest)}")

    errored = [ev for ev in report.evaluations if ev.status is SubmoduleStatus.ERRORED]
    if errored:
        lines += ["", "SUBMODULES WITH ERRORS:"]
        for ev in errored:
            lines.append(f"  - {ev.path}: {ev.error_detail}")

    return lines


def output_variables(summary: EvaluationSummary) -> dict[str, str]:
    """Named outputs for automation, in a fixed order."""
    return {
        "SubmodulesTotal": str(summary.total),
        "SubmodulesUpToDate": str(summary.up_to_date),
        "SubmodulesNeedingUpdate": str(summary.needs_update),
        "SubmodulesNeedingUpdateList": ",".join(summary.outdated_paths),
    }


def format_variable_commands(variables: dict[str, str]) -> list[str]:
    """Azure Pipelines logging commands that publish *variables*."""
    return [f"##vso[task.setvariable variable={name}]{value}" for name, value in variables.items()]
