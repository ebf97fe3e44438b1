"""Provisioning capabilities that turn coordinates into loadable bundles."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

import structlog

from polisher.lib.errors import ProvisioningError
from polisher.lib.provisioning.bundle import ArtifactBundle, ModuleBundle
from polisher.lib.provisioning.coordinate import ArtifactCoordinate
from polisher.lib.step.lazy import Lazy

logger = structlog.get_logger(__name__)


class Provisioner(Protocol):
    """Fetches one artifact by `group:name:version` coordinate."""

    def provision(self, coordinate: str) -> ArtifactBundle: ...


@dataclass(frozen=True, slots=True)
class LocalRepositoryProvisioner:
    """Provisioner backed by a Maven-style directory tree.

    `group:name:version` resolves to `<root>/<group as path>/<name>/<version>/`
    or, failing that, to the archive `<name>-<version>.zip` inside
    `<root>/<group as path>/<name>/`.
    """

    root: Path

    def candidates(self, coordinate: ArtifactCoordinate) -> tuple[Path, ...]:
        base = self.root.expanduser() / coordinate.relative_dir
        return (base, base.parent / coordinate.archive_name)

    def provision(self, coordinate: str) -> ArtifactBundle:
        parsed = ArtifactCoordinate.parse(coordinate)
        searched = self.candidates(parsed)
        for candidate in searched:
            if candidate.is_dir() or candidate.is_file():
                logger.info("Provisioned artifact.", coordinate=coordinate, location=str(candidate))
                return ModuleBundle(candidate.resolve())
        locations = "\n".join(f"  - {path}" for path in searched)
        raise ProvisioningError(
            f"Could not provision artifact '{coordinate}'. Looked in:\n{locations}\n"
            "Install the artifact there or point 'provisioning.repository' at a "
            "repository that contains it."
        )


def _provision(coordinate: str, provisioner: Provisioner) -> ArtifactBundle:
    logger.debug("Provisioning artifact.", coordinate=coordinate)
    return provisioner.provision(coordinate)


@dataclass(slots=True)
class ArtifactState:
    """A coordinate plus the bundle it resolves to, fetched at most once."""

    coordinate: str
    _bundle: Lazy[ArtifactBundle] = field(repr=False)

    @classmethod
    def from_coordinate(cls, coordinate: str, provisioner: Provisioner) -> ArtifactState:
        return cls(coordinate, Lazy(lambda: _provision(coordinate, provisioner)))

    @property
    def bundle(self) -> ArtifactBundle:
        return self._bundle.get()
