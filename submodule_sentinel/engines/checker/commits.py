"""Resolve the pinned and the remote-latest commit of a submodule."""

from __future__ import annotations

from pathlib import Path

from submodule_sentinel.engines.checker.git import GitBackend
from submodule_sentinel.exceptions import (
    CommitResolutionError,
    GitCommandError,
    RemoteResolutionError,
)


async def resolve_current(backend: GitBackend, repo_path: Path, submodule_path: str) -> str:
    """Return the commit recorded for *submodule_path* in the parent's HEAD tree.

    The tree entry must be a gitlink (kind ``commit``); a missing entry or a
    blob/tree at that path raises :class:`CommitResolutionError`.
    """
    try:
        entry = await backend.tree_entry(repo_path, submodule_path)
    except GitCommandError as exc:
        raise CommitResolutionError(
            f"failed to read tree entry for {submodule_path}: {exc}"
        ) from exc

    if entry is None:
        raise CommitResolutionError(f"{submodule_path} is not present in the HEAD tree")
    if entry.kind != "commit":
        raise CommitResolutionError(
            f"{submodule_path} is a {entry.kind} in the HEAD tree, not a submodule commit"
        )
    return entry.sha


async def resolve_latest(backend: GitBackend, url: str, branch: str) -> str:
    """Return the head commit of ``refs/heads/<branch>`` at *url*, without cloning."""
    wanted = f"refs/heads/{branch}"
    try:
        refs = await backend.ls_remote(url, wanted)
    except GitCommandError as exc:
        raise RemoteResolutionError(
            f"failed to query {url} (branch: {branch}): {exc}"
        ) from exc

    # ls-remote patterns match on the tail, so refs/heads/x/refs/heads/<branch> can appear
    for ref in refs:
        if ref.ref == wanted:
            return ref.sha
    raise RemoteResolutionError(f"branch '{branch}' not found in remote repository {url}")
