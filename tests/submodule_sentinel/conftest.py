"""Shared fixtures for submodule_sentinel tests (no network required)."""

import pytest

from submodule_sentinel.core.logging import setup_logging


@pytest.fixture(scope="session", autouse=True)
def _configure_logging():
    setup_logging("WARNING")


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"
