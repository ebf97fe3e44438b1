"""Versioned artifact coordinates (`group:name:version`)."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath

from polisher.lib.errors import ConfigurationError
from polisher.lib.types import Coordinate


@dataclass(frozen=True, slots=True)
class ArtifactCoordinate:
    """Immutable identifier of one external formatter artifact."""

    group: str
    name: str
    version: str

    def __post_init__(self) -> None:
        for label, part in (("group", self.group), ("name", self.name), ("version", self.version)):
            if not part or not part.strip():
                raise ConfigurationError(f"Artifact coordinate {label} must be non-empty.")
            if ":" in part:
                raise ConfigurationError(
                    f"Artifact coordinate {label} must not contain ':', got {part!r}."
                )

    @classmethod
    def parse(cls, raw: str) -> ArtifactCoordinate:
        parts = raw.split(":")
        if len(parts) != 3:
            raise ConfigurationError(
                f"Invalid artifact coordinate {raw!r}: expected 'group:name:version'."
            )
        group, name, version = (part.strip() for part in parts)
        return cls(group=group, name=name, version=version)

    @property
    def relative_dir(self) -> PurePosixPath:
        """Repository-relative directory, Maven style (`com/facebook/ktfmt/0.21`)."""

        return PurePosixPath(*self.group.split("."), self.name, self.version)

    @property
    def archive_name(self) -> str:
        return f"{self.name}-{self.version}.zip"

    def __str__(self) -> str:
        return Coordinate(f"{self.group}:{self.name}:{self.version}")
