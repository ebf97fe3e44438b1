"""Filesystem helpers for npm configuration files."""

from __future__ import annotations

from pathlib import Path


def read_utf8(path: Path) -> str:
    """Read the full text content of `path` as UTF-8."""

    return path.read_text(encoding="utf-8")
