"""Shared testing helpers and fixtures for the site-config test suite."""

from __future__ import annotations

from tests.helpers.filesystem import build_filesystem

__all__ = [
    "build_filesystem",
]
