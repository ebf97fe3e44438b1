"""Artifact provisioning and isolated loading."""

from polisher.lib.provisioning.bundle import ArtifactBundle, ModuleBundle
from polisher.lib.provisioning.coordinate import ArtifactCoordinate
from polisher.lib.provisioning.provisioner import (
    ArtifactState,
    LocalRepositoryProvisioner,
    Provisioner,
)

__all__ = [
    "ArtifactBundle",
    "ArtifactCoordinate",
    "ArtifactState",
    "LocalRepositoryProvisioner",
    "ModuleBundle",
    "Provisioner",
]
