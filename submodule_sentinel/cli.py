"""CLI entry point: submodule-sentinel.

Subcommands:
    submodule-sentinel check                         # report on ./.gitmodules
    submodule-sentinel check --json                  # machine-readable report
    submodule-sentinel check --fail-on-outdated      # exit 1 if anything is behind
    submodule-sentinel check --comment-on-pr         # also comment on the Azure DevOps PR
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import click
import structlog

from submodule_sentinel.core.config import CheckerSettings
from submodule_sentinel.core.logging import setup_logging
from submodule_sentinel.engines.checker.models import CheckReport
from submodule_sentinel.engines.checker.report import (
    format_variable_commands,
    output_variables,
    render_text,
)
from submodule_sentinel.engines.checker.runner import SubmoduleChecker
from submodule_sentinel.engines.checker.schemas import ReportOut
from submodule_sentinel.engines.notification.azure_devops import (
    AzureDevOpsClient,
    AzureDevOpsConfig,
)
from submodule_sentinel.engines.notification.runner import PullRequestNotifier
from submodule_sentinel.exceptions import NotificationError

log = structlog.get_logger("submodule_sentinel.cli")

_ENV = "SUBMODULE_SENTINEL_"


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(verbose: bool) -> None:
    """Submodule Sentinel: check git submodules against their tracked branches."""
    setup_logging("DEBUG" if verbose else None)


async def _post_comments(report: CheckReport, access_token: str | None) -> int | None:
    """Comment on the current PR. Returns posted count, or None if not applicable."""
    config = AzureDevOpsConfig.from_env(access_token=access_token)
    if not config.is_pull_request:
        log.info("notification.skipped", reason="not a pull request build")
        return None
    try:
        client = AzureDevOpsClient(config)
    except NotificationError as exc:
        log.error("notification.failed", kind=exc.kind, error=str(exc))
        return 0
    async with client:
        return await PullRequestNotifier(client).notify(report.evaluations)


@main.command("check")
@click.option(
    "--working-directory",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    envvar=_ENV + "WORKING_DIRECTORY",
    show_default=True,
    help="Repository root to inspect",
)
@click.option(
    "--gitmodules-path",
    default=".gitmodules",
    envvar=_ENV + "GITMODULES_PATH",
    show_default=True,
    help="Path to .gitmodules, relative to the working directory",
)
@click.option(
    "--default-branch",
    default="main",
    envvar=_ENV + "DEFAULT_BRANCH",
    show_default=True,
    help="Branch used for submodules without a 'branch' setting",
)
@click.option(
    "--output-format",
    type=click.Choice(["detailed", "summary"]),
    default="detailed",
    envvar=_ENV + "OUTPUT_FORMAT",
    show_default=True,
)
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON")
@click.option(
    "--set-variables/--no-set-variables",
    default=False,
    envvar=_ENV + "SET_VARIABLES",
    help="Emit ##vso[task.setvariable] commands for the summary counts",
)
@click.option(
    "--fail-on-outdated",
    is_flag=True,
    envvar=_ENV + "FAIL_ON_OUTDATED",
    help="Exit 1 if any submodule needs updating",
)
@click.option(
    "--fail-on-error",
    is_flag=True,
    envvar=_ENV + "FAIL_ON_ERROR",
    help="Exit 1 if any submodule could not be checked",
)
@click.option(
    "--comment-on-pr",
    is_flag=True,
    envvar=_ENV + "COMMENT_ON_PR",
    help="Comment on the Azure DevOps pull request for each outdated submodule",
)
@click.option(
    "--access-token",
    default=None,
    envvar="MY_ACCESSTOKEN",
    help="Azure DevOps personal access token (falls back to SYSTEM_ACCESSTOKEN)",
)
@click.option(
    "--concurrency",
    type=click.IntRange(min=1),
    default=8,
    envvar=_ENV + "CONCURRENCY",
    show_default=True,
    help="Submodules checked in parallel",
)
@click.option(
    "--git-timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=60.0,
    envvar=_ENV + "GIT_TIMEOUT",
    show_default=True,
    help="Seconds allowed per git command",
)
def check(
    working_directory: Path,
    gitmodules_path: str,
    default_branch: str,
    output_format: str,
    as_json: bool,
    set_variables: bool,
    fail_on_outdated: bool,
    fail_on_error: bool,
    comment_on_pr: bool,
    access_token: str | None,
    concurrency: int,
    git_timeout: float,
) -> None:
    """Report which submodules are behind their tracked branch."""
    settings = CheckerSettings(
        working_directory=working_directory.resolve(),
        gitmodules_path=gitmodules_path,
        default_branch=default_branch,
        concurrency=concurrency,
        git_timeout=git_timeout,
    )
    report = asyncio.run(SubmoduleChecker(settings).check())

    if as_json:
        click.echo(ReportOut.from_report(report).model_dump_json(indent=2))
    else:
        for line in render_text(report, output_format):  # type: ignore[arg-type]
            click.echo(line)

    if set_variables:
        for line in format_variable_commands(output_variables(report.summary)):
            click.echo(line)

    if comment_on_pr and report.summary.needs_update:
        posted = asyncio.run(_post_comments(report, access_token))
        if posted is not None:
            click.echo(f"Posted {posted} pull request comment(s)", err=True)

    summary = report.summary
    if fail_on_outdated and summary.needs_update:
        click.echo(
            f"Failing: {summary.needs_update} submodule(s) need updating.",
            err=True,
        )
        raise SystemExit(1)
    if fail_on_error and summary.errored:
        click.echo(f"Failing: {summary.errored} submodule(s) could not be checked.", err=True)
        raise SystemExit(1)
    if summary.errored:
        click.echo(
            f"Completed with {summary.errored} error(s) while checking submodules.",
            err=True,
        )


if __name__ == "__main__":
    main()
