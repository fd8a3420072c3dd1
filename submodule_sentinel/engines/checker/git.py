"""Git backend: the local-tree and remote-ref queries the checker depends on."""

from __future__ import annotations

import asyncio
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

import structlog

from submodule_sentinel.exceptions import GitCommandError

log = structlog.get_logger("submodule_sentinel.git")

# <mode> SP <type> SP <object> TAB <path>, one record per NUL with -z
_LS_TREE_RECORD = re.compile(r"(\d+) (blob|tree|commit) ([0-9a-f]+)\t(.*)", re.DOTALL)
# <object> TAB <ref>
_LS_REMOTE_LINE = re.compile(r"^([0-9a-f]+)\s+(\S+)$")

DEFAULT_TIMEOUT = 60.0


@dataclass(frozen=True)
class TreeEntry:
    mode: str
    kind: str  # blob / tree / commit
    sha: str
    path: str


@dataclass(frozen=True)
class RemoteRef:
    sha: str
    ref: str  # full ref name, e.g. refs/tags/v1.0^{}


@runtime_checkable
class GitBackend(Protocol):
    """Read-only git queries used by the resolvers."""

    async def tree_entry(
        self, repo_path: Path, path: str, rev: str = "HEAD"
    ) -> TreeEntry | None: ...

    async def ls_remote(
        self,
        url: str,
        *patterns: str,
        heads: bool = False,
        tags: bool = False,
    ) -> list[RemoteRef]: ...


def parse_ls_tree(output: str) -> list[TreeEntry]:
    """Parse ``git ls-tree -z`` output; records that don't fit the format are skipped.

    Paths are taken verbatim; with -z git never C-quotes them.
    """
    entries: list[TreeEntry] = []
    for record in output.split("\0"):
        match = _LS_TREE_RECORD.fullmatch(record)
        if match:
            entries.append(TreeEntry(*match.groups()))
    return entries


def parse_ls_remote(output: str) -> list[RemoteRef]:
    """Parse ``git ls-remote`` output into (sha, ref) pairs."""
    refs: list[RemoteRef] = []
    for line in output.splitlines():
        match = _LS_REMOTE_LINE.match(line.strip())
        if match:
            refs.append(RemoteRef(sha=match.group(1), ref=match.group(2)))
    return refs


class GitCli:
    """:class:`GitBackend` backed by the ``git`` executable."""

    def __init__(self, git: str = "git", timeout: float = DEFAULT_TIMEOUT) -> None:
        self._git = git
        self._timeout = timeout

    async def tree_entry(
        self, repo_path: Path, path: str, rev: str = "HEAD"
    ) -> TreeEntry | None:
        output = await self._run(
            [self._git, "-C", str(repo_path), "ls-tree", "-z", rev, "--", path]
        )
        wanted = path.strip("/")
        for entry in parse_ls_tree(output):
            if entry.path == wanted:
                return entry
        return None

    async def ls_remote(
        self,
        url: str,
        *patterns: str,
        heads: bool = False,
        tags: bool = False,
    ) -> list[RemoteRef]:
        cmd = [self._git, "ls-remote"]
        if heads:
            cmd.append("--heads")
        if tags:
            cmd.append("--tags")
        cmd += ["--", url, *patterns]
        return parse_ls_remote(await self._run(cmd))

    async def _run(self, cmd: list[str]) -> str:
        """Run a git command and return stdout, raising GitCommandError on failure."""
        env = {**os.environ, "GIT_TERMINAL_PROMPT": "0"}
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=env,
            )
        except OSError as exc:
            raise GitCommandError(cmd, None, f"cannot execute {cmd[0]}: {exc}") from exc
        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), self._timeout)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            log.warning("git.command_timeout", cmd=cmd, timeout=self._timeout)
            raise GitCommandError(cmd, None, f"timed out after {self._timeout:g}s") from None

        if proc.returncode != 0:
            err = stderr.decode(errors="replace").strip()
            log.debug("git.command_failed", cmd=cmd, returncode=proc.returncode, stderr=err)
            raise GitCommandError(cmd, proc.returncode, err)
        return stdout.decode(errors="replace")
