"""Notification engine — deduplicated pull-request comments for outdated submodules."""

from submodule_sentinel.engines.notification.azure_devops import (
    AzureDevOpsClient,
    AzureDevOpsConfig,
    comment_exists,
)
from submodule_sentinel.engines.notification.runner import PullRequestNotifier
from submodule_sentinel.engines.notification.template import render_update_comment

__all__ = [
    "AzureDevOpsClient",
    "AzureDevOpsConfig",
    "PullRequestNotifier",
    "comment_exists",
    "render_update_comment",
]
