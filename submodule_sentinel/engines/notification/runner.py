"""PullRequestNotifier — comment on the pull request for each outdated submodule."""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from submodule_sentinel.engines.checker.models import SubmoduleEvaluation, SubmoduleStatus
from submodule_sentinel.engines.notification.azure_devops import (
    AzureDevOpsClient,
    comment_exists,
)
from submodule_sentinel.engines.notification.template import render_update_comment
from submodule_sentinel.exceptions import NotificationError

log = structlog.get_logger("submodule_sentinel.notification")

_HINTS: dict[str, str] = {
    "permission": "check the token has Code (read) and Pull Request Threads (read/write) scopes",
    "authentication": "the access token is invalid or missing",
    "not_found": "the pull request or repository could not be located",
    "other": "failed to manage pull request comments",
}


class PullRequestNotifier:
    """Post one deduplicated comment per outdated submodule."""

    def __init__(self, client: AzureDevOpsClient) -> None:
        self._client = client

    async def notify(self, evaluations: Iterable[SubmoduleEvaluation]) -> int:
        """Post comments that are not already on the pull request.

        Returns the number of new comments. API failures are logged with
        their kind and never raised.
        """
        bodies = [
            render_update_comment(ev)
            for ev in evaluations
            if ev.status is SubmoduleStatus.NEEDS_UPDATE
        ]
        if not bodies:
            return 0
        if len(bodies) == 1:
            try:
                return int(await self._client.post_comment_if_absent(bodies[0]))
            except NotificationError as exc:
                self._log_failure(exc)
                return 0

        try:
            threads = await self._client.list_threads()
        except NotificationError as exc:
            self._log_failure(exc)
            return 0

        posted = 0
        seen: set[str] = set()
        for body in bodies:
            if body in seen or comment_exists(threads, body):
                log.debug("notification.comment_exists", preview=body[:50])
                continue
            try:
                await self._client.create_thread(body)
            except NotificationError as exc:
                self._log_failure(exc)
                continue
            seen.add(body)
            posted += 1
            log.info("notification.posted", preview=body[:50])
        return posted

    @staticmethod
    def _log_failure(exc: NotificationError) -> None:
        log.error(
            "notification.failed",
            kind=exc.kind,
            status_code=exc.status_code,
            hint=_HINTS.get(exc.kind, _HINTS["other"]),
            error=str(exc),
        )
