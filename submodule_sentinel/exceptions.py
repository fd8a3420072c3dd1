"""Custom exceptions for Submodule Sentinel."""

from __future__ import annotations


class SentinelError(Exception):
    """Base exception for all sentinel errors."""


class ConfigNotFoundError(SentinelError):
    """Raised when the submodule configuration file does not exist."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"no submodule configuration found at {path}")


class GitCommandError(SentinelError):
    """Raised when a git subprocess exits non-zero or times out."""

    def __init__(self, cmd: list[str], returncode: int | None, stderr: str):
        self.cmd = cmd
        self.returncode = returncode
        self.stderr = stderr
        if returncode is None:
            detail = stderr or "timed out"
        else:
            detail = f"exit {returncode}: {stderr}" if stderr else f"exit {returncode}"
        super().__init__(f"{' '.join(cmd)} failed ({detail})")


class CommitResolutionError(SentinelError):
    """Raised when the pinned commit of a submodule cannot be read from the tree."""


class RemoteResolutionError(SentinelError):
    """Raised when the head of a remote branch cannot be resolved."""


class TagResolutionError(SentinelError):
    """Raised when remote tags cannot be enumerated. Always downgraded to no tags."""


class NotificationError(SentinelError):
    """Raised when the pull-request comment API call fails.

    *kind* is one of ``permission``, ``authentication``, ``not_found`` or
    ``other``.
    """

    def __init__(self, message: str, kind: str = "other", status_code: int | None = None):
        self.kind = kind
        self.status_code = status_code
        super().__init__(message)
