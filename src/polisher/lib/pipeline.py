"""Builds configured formatter steps and routes files to them."""

from __future__ import annotations

from collections.abc import Hashable, Iterable
from pathlib import Path

import structlog

from polisher.lib.config._paths import resolve_config_path, resolve_npmrc_locations
from polisher.lib.config.settings import PolisherConfig
from polisher.lib.formatter import FileResult, Formatter
from polisher.lib.kotlin import ktfmt
from polisher.lib.npm import prettier
from polisher.lib.npm.paths import NpmPathResolver
from polisher.lib.provisioning.provisioner import LocalRepositoryProvisioner, Provisioner
from polisher.lib.step.base import FormatterStep, StepCache

logger = structlog.get_logger(__name__)

_SHARED_CACHE = StepCache()


def npm_path_resolver(config: PolisherConfig, project_root: Path) -> NpmPathResolver:
    """Build the npm resolver from explicit overrides and the npmrc search list."""

    npm = config.npm
    executable = (
        resolve_config_path(npm.executable, project_root) if npm.executable is not None else None
    )
    npmrc = resolve_config_path(npm.npmrc, project_root) if npm.npmrc is not None else None
    return NpmPathResolver(
        executable,
        npmrc,
        *resolve_npmrc_locations(npm.npmrc_locations, project_root),
    )


class Pipeline:
    """Maps each file to the steps configured for its extension."""

    def __init__(
        self,
        config: PolisherConfig,
        project_root: Path,
        *,
        provisioner: Provisioner | None = None,
        cache: StepCache | None = None,
    ) -> None:
        self._config = config
        self._project_root = project_root
        self._provisioner = (
            LocalRepositoryProvisioner(
                resolve_config_path(config.provisioning.repository, project_root)
            )
            if provisioner is None
            else provisioner
        )
        self._cache = _SHARED_CACHE if cache is None else cache

    def _ktfmt_step(self) -> FormatterStep[Hashable]:
        settings = self._config.ktfmt
        return self._cache.get_or_create(
            ("ktfmt", settings.version, settings.style, self._provisioner),
            lambda: ktfmt.create(settings.version, self._provisioner, settings.style),
        )

    def _prettier_step(self) -> FormatterStep[Hashable]:
        settings = self._config.prettier
        return self._cache.get_or_create(
            (
                "prettier",
                settings.version,
                settings.extra_args,
                self._config.npm,
                self._project_root,
            ),
            lambda: prettier.create(
                npm_path_resolver(self._config, self._project_root),
                settings.version,
                settings.extra_args,
            ),
        )

    def steps_for(self, path: Path) -> tuple[FormatterStep[Hashable], ...]:
        suffix = path.suffix.lower()
        steps: list[FormatterStep[Hashable]] = []
        if suffix in self._config.ktfmt.extensions:
            steps.append(self._ktfmt_step())
        if self._config.prettier.enabled and suffix in self._config.prettier.extensions:
            steps.append(self._prettier_step())
        return tuple(steps)

    def format_files(self, paths: Iterable[Path], *, check: bool = False) -> list[FileResult]:
        """Format every path that has configured steps; others are skipped."""

        # Keyed by identity: hashing a step would evaluate its state.
        groups: dict[tuple[int, ...], tuple[tuple[FormatterStep[Hashable], ...], list[Path]]] = {}
        for path in paths:
            steps = self.steps_for(path)
            if not steps:
                logger.info("No formatter configured for file.", path=str(path))
                continue
            key = tuple(id(step) for step in steps)
            groups.setdefault(key, (steps, []))[1].append(path)

        results: list[FileResult] = []
        for steps, group in groups.values():
            formatter = Formatter(steps, max_workers=self._config.max_workers)
            results.extend(formatter.format_files(group, check=check))
        return results
