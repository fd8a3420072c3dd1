"""Submodule checker engine — resolve pinned vs. latest commits per submodule."""

from submodule_sentinel.engines.checker.evaluator import SubmoduleEvaluator
from submodule_sentinel.engines.checker.gitmodules import load_gitmodules, parse_gitmodules
from submodule_sentinel.engines.checker.models import (
    CheckReport,
    EvaluationSummary,
    ResolvedCommit,
    SubmoduleDeclaration,
    SubmoduleEvaluation,
    SubmoduleStatus,
)
from submodule_sentinel.engines.checker.runner import SubmoduleChecker
from submodule_sentinel.engines.checker.summary import summarize
from submodule_sentinel.engines.checker.tags import format_commit, resolve_tags, sort_tags

__all__ = [
    "CheckReport",
    "EvaluationSummary",
    "ResolvedCommit",
    "SubmoduleChecker",
    "SubmoduleDeclaration",
    "SubmoduleEvaluation",
    "SubmoduleEvaluator",
    "SubmoduleStatus",
    "format_commit",
    "load_gitmodules",
    "parse_gitmodules",
    "resolve_tags",
    "sort_tags",
    "summarize",
]
