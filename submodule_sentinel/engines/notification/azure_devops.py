"""Async Azure DevOps client for pull-request comment threads."""

from __future__ import annotations

import base64
import os
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import httpx
import structlog
from pydantic import BaseModel, Field

from submodule_sentinel.exceptions import NotificationError

log = structlog.get_logger("submodule_sentinel.notification")

API_VERSION = "6.0"

# Azure DevOps thread/comment enums
_COMMENT_TYPE_TEXT = 1
_THREAD_STATUS_ACTIVE = 1

_STATUS_KINDS: dict[int, str] = {
    401: "authentication",
    403: "permission",
    404: "not_found",
}


def classify_status(status_code: int | None) -> str:
    """Map an HTTP status to a NotificationError kind."""
    if status_code is None:
        return "other"
    return _STATUS_KINDS.get(status_code, "other")


# ── configuration ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class AzureDevOpsConfig:
    """Everything needed to talk to one pull request.

    Built explicitly (or via :meth:`from_env`) and handed to the client, so
    nothing downstream reads the process environment.
    """

    server_uri: str = ""
    project_id: str = ""
    repository_name: str = ""
    build_reason: str = ""
    pull_request_id: str | None = None
    personal_access_token: str | None = None
    system_access_token: str | None = None

    @classmethod
    def from_env(cls, access_token: str | None = None) -> AzureDevOpsConfig:
        """Read the predefined pipeline variables.

        *access_token* (e.g. from the CLI) takes precedence over
        ``MY_ACCESSTOKEN``.
        """
        return cls(
            server_uri=os.environ.get("SYSTEM_TEAMFOUNDATIONSERVERURI", ""),
            project_id=os.environ.get("SYSTEM_TEAMPROJECTID", ""),
            repository_name=os.environ.get("BUILD_REPOSITORY_NAME", ""),
            build_reason=os.environ.get("BUILD_REASON", ""),
            pull_request_id=os.environ.get("SYSTEM_PULLREQUEST_PULLREQUESTID") or None,
            personal_access_token=access_token or os.environ.get("MY_ACCESSTOKEN") or None,
            system_access_token=os.environ.get("SYSTEM_ACCESSTOKEN") or None,
        )

    @property
    def is_pull_request(self) -> bool:
        return self.build_reason == "PullRequest" and bool(self.pull_request_id)

    @property
    def api_base_url(self) -> str:
        return f"{self.server_uri.rstrip('/')}/{self.project_id}/_apis"

    def authorization_header(self) -> dict[str, str]:
        """Basic auth for a personal access token, else Bearer for the system token."""
        if self.personal_access_token:
            encoded = base64.b64encode(f":{self.personal_access_token}".encode()).decode()
            return {"Authorization": f"Basic {encoded}"}
        if self.system_access_token:
            return {"Authorization": f"Bearer {self.system_access_token}"}
        raise NotificationError(
            "no access token available for Azure DevOps API; "
            'add "SYSTEM_ACCESSTOKEN: $(System.AccessToken)" to the task environment',
            kind="authentication",
        )


# ── thread models ─────────────────────────────────────────────────────────


class PullRequestComment(BaseModel):
    id: int | None = None
    content: str | None = None
    comment_type: Any = Field(default=None, alias="commentType")


class PullRequestThread(BaseModel):
    id: int | None = None
    comments: list[PullRequestComment] = Field(default_factory=list)
    status: Any = None


def comment_exists(threads: Iterable[PullRequestThread], body: str) -> bool:
    """True if any comment in *threads* has exactly *body* as its content."""
    return any(comment.content == body for thread in threads for comment in thread.comments)


# ── client ────────────────────────────────────────────────────────────────


class AzureDevOpsClient:
    """Thin async wrapper around the pull-request threads REST API."""

    def __init__(
        self,
        config: AzureDevOpsConfig,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        headers = {"Content-Type": "application/json", **config.authorization_header()}
        self._client = httpx.AsyncClient(
            base_url=config.api_base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    # ── lifecycle ──────────────────────────────────────────────────────────

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> AzureDevOpsClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ── public ─────────────────────────────────────────────────────────────

    async def list_threads(self) -> list[PullRequestThread]:
        data = await self._request("GET", self._threads_path())
        return [PullRequestThread.model_validate(item) for item in data.get("value", [])]

    async def create_thread(self, content: str) -> None:
        body = {
            "comments": [
                {
                    "parentCommentId": 0,
                    "content": content,
                    "commentType": _COMMENT_TYPE_TEXT,
                }
            ],
            "status": _THREAD_STATUS_ACTIVE,
        }
        await self._request("POST", self._threads_path(), json=body)

    async def post_comment_if_absent(self, content: str) -> bool:
        """Post *content* as a new thread unless an identical comment exists.

        One-shot form of the dedup in :class:`PullRequestNotifier`, which
        lists threads once and reuses them for a whole batch of comments.
        Returns True if a comment was posted. Raises
        :class:`NotificationError` on API failure.
        """
        threads = await self.list_threads()
        if comment_exists(threads, content):
            log.debug("notification.comment_exists", preview=content[:50])
            return False
        await self.create_thread(content)
        log.info("notification.posted", preview=content[:50])
        return True

    # ── internal ───────────────────────────────────────────────────────────

    def _threads_path(self) -> str:
        if not self._config.pull_request_id:
            raise NotificationError("pull request id not available", kind="not_found")
        repo = quote(self._config.repository_name, safe="")
        return f"/git/repositories/{repo}/pullRequests/{self._config.pull_request_id}/threads"

    async def _request(
        self, method: str, path: str, json: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        try:
            resp = await self._client.request(
                method, path, params={"api-version": API_VERSION}, json=json
            )
        except httpx.HTTPError as exc:
            raise NotificationError(f"{method} {path} failed: {exc}") from exc

        if resp.is_error:
            raise NotificationError(
                f"HTTP {resp.status_code}: {resp.text[:500]}",
                kind=classify_status(resp.status_code),
                status_code=resp.status_code,
            )
        try:
            return resp.json()
        except ValueError as exc:
            raise NotificationError(f"failed to parse JSON response: {exc}") from exc
