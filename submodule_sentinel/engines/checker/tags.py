"""Tag lookup: which remote tags point at a commit, newest first."""

from __future__ import annotations

import functools
import re
from collections.abc import Iterable

import structlog

from submodule_sentinel.engines.checker.git import GitBackend, RemoteRef

log = structlog.get_logger("submodule_sentinel.tags")

TAG_PREFIX = "refs/tags/"
PEELED_SUFFIX = "^{}"

# v1.2.3, 1.2.3-rc1, v10.0.0+build: anything after PATCH is ignored
VERSION_PATTERN = re.compile(r"^v?(\d+)\.(\d+)\.(\d+)")

SHORT_SHA_LEN = 8
DEFAULT_MAX_TAGS = 3


def _parse_version(tag: str) -> tuple[int, int, int] | None:
    match = VERSION_PATTERN.match(tag)
    if match is None:
        return None
    major, minor, patch = match.groups()
    return int(major), int(minor), int(patch)


def compare_tags(a: str, b: str) -> int:
    """Pairwise comparator, negative when *a* sorts before *b*.

    Both sides parse as versions: numeric order, newest first. Otherwise
    the pair falls back to reverse string order. The fallback is decided
    per pair, so mixed sets are not guaranteed to group versions first.
    """
    va = _parse_version(a)
    vb = _parse_version(b)
    if va is not None and vb is not None:
        if va == vb:
            return 0
        return -1 if va > vb else 1
    if a == b:
        return 0
    return -1 if a > b else 1


def sort_tags(tags: Iterable[str]) -> list[str]:
    return sorted(tags, key=functools.cmp_to_key(compare_tags))


def _tag_targets(refs: Iterable[RemoteRef]) -> dict[str, str]:
    """Map tag name -> commit sha, letting peeled ``^{}`` entries win."""
    direct: dict[str, str] = {}
    peeled: dict[str, str] = {}
    for ref in refs:
        if not ref.ref.startswith(TAG_PREFIX):
            continue
        name = ref.ref[len(TAG_PREFIX) :]
        if name.endswith(PEELED_SUFFIX):
            peeled[name[: -len(PEELED_SUFFIX)]] = ref.sha
        else:
            direct[name] = ref.sha
    # annotated tags: the direct entry is the tag object, not the commit
    return {**direct, **peeled}


def match_tags(refs: Iterable[RemoteRef], sha: str) -> tuple[str, ...]:
    """Return the names of tags in *refs* that resolve to *sha*, sorted.

    *refs* may carry full names (``refs/tags/v1.0``) or bare tag names
    (``v1.0``, ``v1.0^{}``).
    """
    normalized = [
        ref if ref.ref.startswith("refs/") else RemoteRef(ref.sha, TAG_PREFIX + ref.ref)
        for ref in refs
    ]
    names = [name for name, target in _tag_targets(normalized).items() if target == sha]
    return tuple(sort_tags(names))


async def resolve_tags(backend: GitBackend, url: str, sha: str) -> tuple[str, ...]:
    """Best-effort tag lookup; any failure is logged and yields no tags."""
    try:
        refs = await backend.ls_remote(url, tags=True)
    except Exception as exc:
        log.warning("tags.lookup_failed", url=url, sha=sha, error=str(exc), exc_info=True)
        return ()
    return match_tags(refs, sha)


def format_commit(sha: str, tags: Iterable[str] = (), max_tags: int = DEFAULT_MAX_TAGS) -> str:
    """Short display form: ``a1b2c3d4 (v2.0.0, v1.9.0, v1.8.0 (+1 more))``."""
    short = sha[:SHORT_SHA_LEN]
    tags = list(tags)
    if not tags:
        return short
    shown = ", ".join(tags[:max_tags])
    extra = len(tags) - max_tags
    if extra > 0:
        shown += f" (+{extra} more)"
    return f"{short} ({shown})"
