"""Tests for tag matching, ordering and commit display."""

from __future__ import annotations

import pytest

from fakes import SHA_A, SHA_B, SHA_C, SHA_T, FakeGitBackend
from submodule_sentinel.engines.checker.git import RemoteRef
from submodule_sentinel.engines.checker.tags import (
    compare_tags,
    format_commit,
    match_tags,
    resolve_tags,
    sort_tags,
)
from submodule_sentinel.exceptions import GitCommandError, TagResolutionError

_URL = "https://github.com/org/core.git"


# ── match_tags ───────────────────────────────────────────────────────────


class TestMatchTags:
    def test_lightweight_tag(self):
        refs = [RemoteRef(SHA_A, "refs/tags/v1.0.0")]
        assert match_tags(refs, SHA_A) == ("v1.0.0",)

    def test_annotated_tag_reported_once(self):
        refs = [RemoteRef(SHA_A, "v1.0^{}"), RemoteRef(SHA_T, "v1.0")]
        assert match_tags(refs, SHA_A) == ("v1.0",)

    def test_annotated_tag_object_id_not_matched(self):
        refs = [RemoteRef(SHA_T, "refs/tags/v1.0"), RemoteRef(SHA_A, "refs/tags/v1.0^{}")]
        assert match_tags(refs, SHA_T) == ()

    def test_peeled_entry_wins_regardless_of_order(self):
        refs = [RemoteRef(SHA_A, "refs/tags/v1.0^{}"), RemoteRef(SHA_T, "refs/tags/v1.0")]
        assert match_tags(refs, SHA_A) == ("v1.0",)

    def test_non_tag_refs_ignored(self):
        refs = [RemoteRef(SHA_A, "refs/heads/main"), RemoteRef(SHA_A, "refs/pull/1/head")]
        assert match_tags(refs, SHA_A) == ()

    def test_no_match(self):
        refs = [RemoteRef(SHA_B, "refs/tags/v2.0.0")]
        assert match_tags(refs, SHA_A) == ()

    def test_multiple_tags_sorted(self):
        refs = [
            RemoteRef(SHA_A, "refs/tags/v1.2.0"),
            RemoteRef(SHA_A, "refs/tags/v1.10.0"),
            RemoteRef(SHA_C, "refs/tags/v3.0.0"),
            RemoteRef(SHA_A, "refs/tags/v1.9.5"),
        ]
        assert match_tags(refs, SHA_A) == ("v1.10.0", "v1.9.5", "v1.2.0")


# ── ordering ─────────────────────────────────────────────────────────────


class TestSortTags:
    def test_numeric_not_lexicographic(self):
        assert sort_tags(["v1.2.0", "v1.10.0", "v1.9.5"]) == ["v1.10.0", "v1.9.5", "v1.2.0"]

    def test_major_minor_patch_priority(self):
        tags = ["1.0.9", "2.0.0", "1.1.0", "1.0.10"]
        assert sort_tags(tags) == ["2.0.0", "1.1.0", "1.0.10", "1.0.9"]

    def test_suffix_ignored_for_version_compare(self):
        # equal triples compare equal, so input order is kept
        assert sort_tags(["v1.0.0-rc1", "v1.0.0"]) == ["v1.0.0-rc1", "v1.0.0"]
        assert sort_tags(["v1.0.0", "v1.0.0-rc1"]) == ["v1.0.0", "v1.0.0-rc1"]

    def test_non_version_reverse_lexicographic(self):
        assert sort_tags(["alpha", "gamma", "beta"]) == ["gamma", "beta", "alpha"]

    def test_incomplete_version_falls_back_to_string(self):
        assert compare_tags("v1.2", "v1.10") == -1  # "v1.2" > "v1.10" as strings

    def test_mixed_pair_uses_string_order(self):
        # the pairwise fallback does not force versions ahead of other tags
        assert compare_tags("release", "v1.0.0") == 1
        assert compare_tags("v1.0.0", "latest") == -1
        assert compare_tags("zeta", "v9.0.0") == -1

    def test_mixed_set(self):
        assert sort_tags(["v1.0.0", "zeta", "v2.0.0"]) == ["zeta", "v2.0.0", "v1.0.0"]

    def test_comparator_symmetry_for_versions(self):
        assert compare_tags("v2.0.0", "v1.0.0") == -1
        assert compare_tags("v1.0.0", "v2.0.0") == 1
        assert compare_tags("v1.0.0", "1.0.0") == 0


# ── display ──────────────────────────────────────────────────────────────


class TestFormatCommit:
    def test_no_tags(self):
        assert format_commit(SHA_A) == "a1b2c3d4"

    def test_one_tag(self):
        assert format_commit(SHA_A, ["v1.0.0"]) == "a1b2c3d4 (v1.0.0)"

    def test_three_tags(self):
        assert format_commit(SHA_A, ["a", "b", "c"]) == "a1b2c3d4 (a, b, c)"

    def test_more_than_three(self):
        tags = ["v2.0.0", "v1.9.0", "v1.8.0", "v1.7.0"]
        assert format_commit(SHA_A, tags) == "a1b2c3d4 (v2.0.0, v1.9.0, v1.8.0 (+1 more))"

    def test_many_more(self):
        tags = [f"t{i}" for i in range(7)]
        assert format_commit(SHA_A, tags).endswith("(+4 more))")


# ── resolve_tags ─────────────────────────────────────────────────────────


class TestResolveTags:
    @pytest.mark.anyio
    async def test_resolves_from_backend(self):
        backend = FakeGitBackend(
            tags={
                _URL: [
                    RemoteRef(SHA_T, "refs/tags/v1.0.0"),
                    RemoteRef(SHA_A, "refs/tags/v1.0.0^{}"),
                    RemoteRef(SHA_A, "refs/tags/stable"),
                ]
            }
        )
        assert await resolve_tags(backend, _URL, SHA_A) == ("v1.0.0", "stable")
        assert backend.calls == [("ls_remote", _URL, (), True)]

    @pytest.mark.anyio
    async def test_git_failure_degrades_to_empty(self):
        err = GitCommandError(["git", "ls-remote"], 128, "fatal: Authentication failed")
        backend = FakeGitBackend(errors={_URL: err})
        assert await resolve_tags(backend, _URL, SHA_A) == ()

    @pytest.mark.anyio
    async def test_tag_resolution_error_degrades_to_empty(self):
        backend = FakeGitBackend(errors={_URL: TagResolutionError("boom")})
        assert await resolve_tags(backend, _URL, SHA_A) == ()

    @pytest.mark.anyio
    async def test_no_tags_at_remote(self):
        assert await resolve_tags(FakeGitBackend(), _URL, SHA_A) == ()

    @pytest.mark.anyio
    async def test_unexpected_backend_error_degrades_to_empty(self):
        backend = FakeGitBackend(errors={_URL: ConnectionResetError("peer reset")})
        assert await resolve_tags(backend, _URL, SHA_A) == ()
