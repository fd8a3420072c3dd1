"""Tests for SubmoduleEvaluator and the evaluation model invariants."""

from __future__ import annotations

from pathlib import Path

import pytest

from fakes import SHA_A, SHA_B, SHA_T, FakeGitBackend, gitlink
from submodule_sentinel.engines.checker.evaluator import SubmoduleEvaluator
from submodule_sentinel.engines.checker.git import RemoteRef
from submodule_sentinel.engines.checker.models import (
    ResolvedCommit,
    SubmoduleDeclaration,
    SubmoduleEvaluation,
    SubmoduleStatus,
)
from submodule_sentinel.exceptions import GitCommandError

_URL = "https://github.com/org/core.git"
_DECL = SubmoduleDeclaration(path="libs/core", url=_URL)


def _backend(current: str = SHA_A, latest: str = SHA_A, branch: str = "main", **kwargs):
    return FakeGitBackend(
        tree={"libs/core": gitlink("libs/core", current)},
        heads={(_URL, branch): latest},
        **kwargs,
    )


class TestEvaluationModel:
    def test_resolved_equal_is_up_to_date(self):
        ev = SubmoduleEvaluation.resolved(
            _DECL, "main", ResolvedCommit(SHA_A), ResolvedCommit(SHA_A)
        )
        assert ev.status is SubmoduleStatus.UP_TO_DATE
        assert ev.error_detail is None

    def test_resolved_different_needs_update(self):
        ev = SubmoduleEvaluation.resolved(
            _DECL, "main", ResolvedCommit(SHA_A), ResolvedCommit(SHA_B)
        )
        assert ev.status is SubmoduleStatus.NEEDS_UPDATE

    def test_sha_compared_exactly(self):
        ev = SubmoduleEvaluation.resolved(
            _DECL, "main", ResolvedCommit(SHA_A), ResolvedCommit(SHA_A.upper())
        )
        assert ev.status is SubmoduleStatus.NEEDS_UPDATE

    def test_errored_has_no_commits(self):
        ev = SubmoduleEvaluation.errored(_DECL, "main", "boom")
        assert ev.status is SubmoduleStatus.ERRORED
        assert ev.current is None and ev.latest is None

    def test_contradictory_status_rejected(self):
        with pytest.raises(ValueError):
            SubmoduleEvaluation(
                declaration=_DECL,
                branch_used="main",
                status=SubmoduleStatus.UP_TO_DATE,
                current=ResolvedCommit(SHA_A),
                latest=ResolvedCommit(SHA_B),
            )

    def test_missing_commit_rejected(self):
        with pytest.raises(ValueError):
            SubmoduleEvaluation(
                declaration=_DECL,
                branch_used="main",
                status=SubmoduleStatus.NEEDS_UPDATE,
                current=ResolvedCommit(SHA_A),
            )

    def test_errored_requires_detail(self):
        with pytest.raises(ValueError):
            SubmoduleEvaluation(
                declaration=_DECL, branch_used="main", status=SubmoduleStatus.ERRORED
            )


class TestEvaluator:
    @pytest.mark.anyio
    async def test_up_to_date(self):
        evaluator = SubmoduleEvaluator(_backend(), Path("/repo"))
        ev = await evaluator.evaluate(_DECL)
        assert ev.status is SubmoduleStatus.UP_TO_DATE
        assert ev.current == ResolvedCommit(SHA_A)
        assert ev.latest == ResolvedCommit(SHA_A)

    @pytest.mark.anyio
    async def test_needs_update_with_tags(self):
        tags = {
            _URL: [
                RemoteRef(SHA_A, "refs/tags/v1.0.0"),
                RemoteRef(SHA_T, "refs/tags/v1.1.0"),
                RemoteRef(SHA_B, "refs/tags/v1.1.0^{}"),
            ]
        }
        evaluator = SubmoduleEvaluator(_backend(latest=SHA_B, tags=tags), Path("/repo"))
        ev = await evaluator.evaluate(_DECL)
        assert ev.status is SubmoduleStatus.NEEDS_UPDATE
        assert ev.current == ResolvedCommit(SHA_A, ("v1.0.0",))
        assert ev.latest == ResolvedCommit(SHA_B, ("v1.1.0",))

    @pytest.mark.anyio
    async def test_default_branch_used(self):
        backend = _backend(branch="trunk")
        ev = await SubmoduleEvaluator(backend, Path("/repo"), "trunk").evaluate(_DECL)
        assert ev.branch_used == "trunk"
        assert ev.status is SubmoduleStatus.UP_TO_DATE

    @pytest.mark.anyio
    async def test_declared_branch_overrides_default(self):
        decl = SubmoduleDeclaration(path="libs/core", url=_URL, branch="develop")
        backend = _backend(latest=SHA_B, branch="develop")
        ev = await SubmoduleEvaluator(backend, Path("/repo"), "main").evaluate(decl)
        assert ev.branch_used == "develop"
        assert ev.status is SubmoduleStatus.NEEDS_UPDATE

    @pytest.mark.anyio
    async def test_missing_gitlink_errors(self):
        backend = FakeGitBackend(heads={(_URL, "main"): SHA_A})
        ev = await SubmoduleEvaluator(backend, Path("/repo")).evaluate(_DECL)
        assert ev.status is SubmoduleStatus.ERRORED
        assert "libs/core" in ev.error_detail
        assert ev.current is None and ev.latest is None

    @pytest.mark.anyio
    async def test_remote_failure_errors_and_skips_tags(self):
        err = GitCommandError(["git", "ls-remote"], 128, "unable to access")
        backend = _backend(errors={_URL: err})
        ev = await SubmoduleEvaluator(backend, Path("/repo")).evaluate(_DECL)
        assert ev.status is SubmoduleStatus.ERRORED
        assert "unable to access" in ev.error_detail
        assert not any(call[0] == "ls_remote" and call[3] for call in backend.calls)

    @pytest.mark.anyio
    async def test_both_failures_reported(self):
        backend = FakeGitBackend()
        ev = await SubmoduleEvaluator(backend, Path("/repo")).evaluate(_DECL)
        assert ev.status is SubmoduleStatus.ERRORED
        assert "HEAD tree" in ev.error_detail
        assert "'main' not found" in ev.error_detail

    @pytest.mark.anyio
    @pytest.mark.parametrize(
        "exc",
        [
            GitCommandError(["git", "ls-remote"], 128, "tags denied"),
            ConnectionResetError("peer reset during tag listing"),
            OSError("broken pipe"),
        ],
    )
    async def test_tag_failure_does_not_error(self, exc):
        class _NoTags(FakeGitBackend):
            async def ls_remote(self, url, *patterns, heads=False, tags=False):
                if tags:
                    raise exc
                return await super().ls_remote(url, *patterns, heads=heads, tags=tags)

        backend = _NoTags(
            tree={"libs/core": gitlink("libs/core", SHA_A)}, heads={(_URL, "main"): SHA_B}
        )
        ev = await SubmoduleEvaluator(backend, Path("/repo")).evaluate(_DECL)
        assert ev.status is SubmoduleStatus.NEEDS_UPDATE
        assert ev.current.tags == () and ev.latest.tags == ()

    @pytest.mark.anyio
    async def test_same_sha_looks_up_tags_once(self):
        backend = _backend(tags={_URL: [RemoteRef(SHA_A, "refs/tags/v2.0.0")]})
        ev = await SubmoduleEvaluator(backend, Path("/repo")).evaluate(_DECL)
        tag_calls = [c for c in backend.calls if c[0] == "ls_remote" and c[3]]
        assert len(tag_calls) == 1
        assert ev.current.tags == ev.latest.tags == ("v2.0.0",)

    @pytest.mark.anyio
    async def test_deterministic(self):
        backend = _backend(latest=SHA_B)
        evaluator = SubmoduleEvaluator(backend, Path("/repo"))
        assert await evaluator.evaluate(_DECL) == await evaluator.evaluate(_DECL)

    @pytest.mark.anyio
    async def test_unexpected_exception_propagates(self):
        backend = FakeGitBackend(tree_errors={"libs/core": KeyError("bad")})
        with pytest.raises(KeyError):
            await SubmoduleEvaluator(backend, Path("/repo")).evaluate(_DECL)
