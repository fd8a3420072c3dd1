"""SubmoduleChecker — load .gitmodules and evaluate every submodule concurrently."""

from __future__ import annotations

import asyncio

import structlog

from submodule_sentinel.core.config import CheckerSettings
from submodule_sentinel.engines.checker.evaluator import SubmoduleEvaluator
from submodule_sentinel.engines.checker.git import GitBackend, GitCli
from submodule_sentinel.engines.checker.gitmodules import load_gitmodules
from submodule_sentinel.engines.checker.models import (
    CheckReport,
    SubmoduleDeclaration,
    SubmoduleEvaluation,
    SubmoduleStatus,
)
from submodule_sentinel.engines.checker.summary import summarize
from submodule_sentinel.exceptions import ConfigNotFoundError

log = structlog.get_logger("submodule_sentinel.engine")


class SubmoduleChecker:
    """Run a full check: parse config, evaluate in parallel, summarize."""

    def __init__(self, settings: CheckerSettings, backend: GitBackend | None = None) -> None:
        self._settings = settings
        self._backend = backend or GitCli(timeout=settings.git_timeout)
        self._evaluator = SubmoduleEvaluator(
            self._backend, settings.working_directory, settings.default_branch
        )

    async def check(self) -> CheckReport:
        gitmodules = self._settings.gitmodules_file
        log.debug(
            "checker.start",
            working_directory=str(self._settings.working_directory),
            gitmodules=str(gitmodules),
            default_branch=self._settings.default_branch,
        )
        try:
            declarations = load_gitmodules(gitmodules)
        except ConfigNotFoundError as exc:
            log.warning("checker.no_gitmodules", path=exc.path)
            return CheckReport(evaluations=(), summary=summarize([]), config_found=False)

        log.info("checker.declarations_loaded", count=len(declarations))
        evaluations = await self.evaluate_all(declarations)
        return CheckReport(evaluations=tuple(evaluations), summary=summarize(evaluations))

    async def evaluate_all(
        self, declarations: list[SubmoduleDeclaration]
    ) -> list[SubmoduleEvaluation]:
        """Evaluate *declarations* with bounded concurrency.

        Results come back in declaration order regardless of completion
        order. A failure in one submodule never cancels the others.
        """
        sem = asyncio.Semaphore(self._settings.concurrency)
        total = len(declarations)

        async def _run_one(index: int, decl: SubmoduleDeclaration) -> SubmoduleEvaluation:
            async with sem:
                try:
                    evaluation = await self._evaluator.evaluate(decl)
                except Exception as exc:
                    log.error(
                        "checker.submodule_failed",
                        path=decl.path,
                        error=str(exc),
                        exc_info=True,
                    )
                    evaluation = SubmoduleEvaluation.errored(
                        decl,
                        self._evaluator.branch_for(decl),
                        f"{type(exc).__name__}: {exc}",
                    )
            log.info(
                "checker.submodule_checked",
                index=index + 1,
                total=total,
                path=decl.path,
                status=evaluation.status.value,
            )
            if evaluation.status is SubmoduleStatus.ERRORED:
                log.warning(
                    "checker.submodule_errored", path=decl.path, error=evaluation.error_detail
                )
            return evaluation

        tasks = [_run_one(i, decl) for i, decl in enumerate(declarations)]
        return list(await asyncio.gather(*tasks))
