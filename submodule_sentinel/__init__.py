"""Submodule Sentinel — audit git submodules against their tracked branches."""

__version__ = "0.1.0"
