"""Lookup of `.npmrc` configuration files."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

NPMRC_FILENAME = ".npmrc"


class NpmrcResolver:
    """Searches an ordered list of locations for an `.npmrc` file.

    A location is either the file itself or a directory that contains one.
    """

    def __init__(self, locations: Sequence[Path]) -> None:
        self._locations = tuple(locations)

    def try_find(self) -> Path | None:
        for location in self._locations:
            candidate = location / NPMRC_FILENAME if location.is_dir() else location
            if candidate.is_file():
                return candidate
        return None
