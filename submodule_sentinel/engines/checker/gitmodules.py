"""Parser for .gitmodules files."""

from __future__ import annotations

import re
from pathlib import Path

from submodule_sentinel.engines.checker.models import SubmoduleDeclaration
from submodule_sentinel.exceptions import ConfigNotFoundError

# [submodule "libs/foo"]
_SUBMODULE_HEADER = re.compile(r'^\[submodule\s+"?([^"\]]*)"?\s*\]$')

_KEYS = ("path", "url", "branch")


def parse_gitmodules(content: str) -> list[SubmoduleDeclaration]:
    """Turn .gitmodules text into declarations, in order of appearance.

    A block is emitted only if it set both ``path`` and ``url`` before the
    next section header (or end of input); incomplete blocks are dropped.
    Any other section header closes the current block, and keys under it
    are ignored. Duplicate paths are passed through unchanged.
    """
    declarations: list[SubmoduleDeclaration] = []
    current: dict[str, str] | None = None

    def _flush() -> None:
        if current and current.get("path") and current.get("url"):
            declarations.append(
                SubmoduleDeclaration(
                    path=current["path"],
                    url=current["url"],
                    branch=current.get("branch") or None,
                    name=current.get("name"),
                )
            )

    for raw in content.splitlines():
        line = raw.strip()
        if not line or line.startswith(("#", ";")):
            continue

        if line.startswith("["):
            _flush()
            match = _SUBMODULE_HEADER.match(line)
            current = {"name": match.group(1)} if match else None
            continue

        if current is None:
            continue

        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip().lower()
        if key in _KEYS:
            current[key] = value.strip()

    _flush()
    return declarations


def load_gitmodules(path: Path) -> list[SubmoduleDeclaration]:
    """Read and parse a .gitmodules file.

    Raises :class:`ConfigNotFoundError` if *path* does not exist. An
    existing file with no complete blocks yields an empty list.
    """
    if not path.is_file():
        raise ConfigNotFoundError(str(path))
    content = path.read_text(encoding="utf-8", errors="replace")
    return parse_gitmodules(content)
