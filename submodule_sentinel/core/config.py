"""Runtime settings for a check run."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

_ENV_PREFIX = "SUBMODULE_SENTINEL_"


def _env(key: str, default: str) -> str:
    return os.environ.get(_ENV_PREFIX + key, default)


@dataclass(frozen=True)
class CheckerSettings:
    """Where to look for submodules and how to query them.

    *gitmodules_path* is resolved relative to *working_directory* unless it
    is absolute.
    """

    working_directory: Path = field(default_factory=Path.cwd)
    gitmodules_path: str = ".gitmodules"
    default_branch: str = "main"
    concurrency: int = 8
    git_timeout: float = 60.0

    def __post_init__(self) -> None:
        if self.concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {self.concurrency}")
        if self.git_timeout <= 0:
            raise ValueError(f"git_timeout must be positive, got {self.git_timeout}")

    @property
    def gitmodules_file(self) -> Path:
        return (self.working_directory / self.gitmodules_path).resolve()

    @classmethod
    def from_env(cls) -> CheckerSettings:
        """Build settings from ``SUBMODULE_SENTINEL_*`` environment variables."""
        return cls(
            working_directory=Path(_env("WORKING_DIRECTORY", os.getcwd())),
            gitmodules_path=_env("GITMODULES_PATH", ".gitmodules"),
            default_branch=_env("DEFAULT_BRANCH", "main"),
            concurrency=int(_env("CONCURRENCY", "8")),
            git_timeout=float(_env("GIT_TIMEOUT", "60")),
        )
