"""Wraps up [ktfmt](https://github.com/facebook/ktfmt) as a formatter step."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import partial

from polisher.lib.errors import ConfigurationError, require
from polisher.lib.kotlin._api import PACKAGE, KtfmtApi, Style, select_api
from polisher.lib.provisioning.provisioner import ArtifactState, Provisioner
from polisher.lib.step.base import FormatterFunc, FormatterStep
from polisher.lib.types import StepName

NAME = StepName("ktfmt")
DEFAULT_VERSION = "0.21"
MAVEN_COORDINATE = f"{PACKAGE}:ktfmt:"


def default_version() -> str:
    return DEFAULT_VERSION


def default_style() -> str:
    return Style.DEFAULT.value


@dataclass(frozen=True, slots=True)
class KtfmtState:
    """Everything that identifies one ktfmt step; the artifact is not part of equality."""

    version: str
    style: Style
    artifact: ArtifactState = field(compare=False, repr=False)

    @property
    def coordinate(self) -> str:
        return self.artifact.coordinate


def _build_state(version: str, provisioner: Provisioner, style: Style) -> KtfmtState:
    artifact = ArtifactState.from_coordinate(MAVEN_COORDINATE + version, provisioner)
    return KtfmtState(version=version, style=style, artifact=artifact)


def create_format(state: KtfmtState) -> FormatterFunc:
    """Load the artifact, detect its API generation, and return the format function."""

    api: KtfmtApi = select_api(state.artifact.bundle, state.style)
    return api.format


def create(
    version: str | None = DEFAULT_VERSION,
    provisioner: Provisioner | None = None,
    style: Style | str | None = Style.DEFAULT,
) -> FormatterStep[KtfmtState]:
    """Create a step which formats everything: code, import order, and unused imports."""

    version = require(version, "version")
    if not version.strip():
        raise ConfigurationError("'version' must be a non-empty string.")
    provisioner = require(provisioner, "provisioner")
    style = require(style, "style")
    resolved_style = style if isinstance(style, Style) else Style.parse(style)
    return FormatterStep.create_lazy(
        NAME,
        partial(_build_state, version, provisioner, resolved_style),
        create_format,
    )
