"""SubmoduleEvaluator — classify one submodule as up to date, outdated or errored."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import cast

import structlog

from submodule_sentinel.engines.checker.commits import resolve_current, resolve_latest
from submodule_sentinel.engines.checker.git import GitBackend
from submodule_sentinel.engines.checker.models import (
    ResolvedCommit,
    SubmoduleDeclaration,
    SubmoduleEvaluation,
)
from submodule_sentinel.engines.checker.tags import resolve_tags
from submodule_sentinel.exceptions import CommitResolutionError, RemoteResolutionError

log = structlog.get_logger("submodule_sentinel.engine")


class SubmoduleEvaluator:
    """Resolve pinned vs. latest commit for a declaration and compare them."""

    def __init__(self, backend: GitBackend, repo_path: Path, default_branch: str = "main") -> None:
        self._backend = backend
        self._repo_path = repo_path
        self._default_branch = default_branch

    def branch_for(self, declaration: SubmoduleDeclaration) -> str:
        return declaration.branch or self._default_branch

    async def evaluate(self, declaration: SubmoduleDeclaration) -> SubmoduleEvaluation:
        branch = self.branch_for(declaration)

        current_sha, latest_sha = await asyncio.gather(
            resolve_current(self._backend, self._repo_path, declaration.path),
            resolve_latest(self._backend, declaration.url, branch),
            return_exceptions=True,
        )

        failures: list[str] = []
        for result in (current_sha, latest_sha):
            if isinstance(result, (CommitResolutionError, RemoteResolutionError)):
                failures.append(str(result))
            elif isinstance(result, BaseException):
                raise result
        if failures:
            log.debug("evaluator.unresolved", path=declaration.path, errors=failures)
            return SubmoduleEvaluation.errored(declaration, branch, "; ".join(failures))

        current_sha = cast(str, current_sha)
        latest_sha = cast(str, latest_sha)
        if current_sha == latest_sha:
            tags = await resolve_tags(self._backend, declaration.url, current_sha)
            current_tags = latest_tags = tags
        else:
            current_tags, latest_tags = await asyncio.gather(
                resolve_tags(self._backend, declaration.url, current_sha),
                resolve_tags(self._backend, declaration.url, latest_sha),
            )

        return SubmoduleEvaluation.resolved(
            declaration,
            branch,
            current=ResolvedCommit(sha=current_sha, tags=current_tags),
            latest=ResolvedCommit(sha=latest_sha, tags=latest_tags),
        )
