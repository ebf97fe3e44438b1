"""Wraps up [prettier](https://prettier.io) as a formatter step run through `npm exec`."""

from __future__ import annotations

import hashlib
import subprocess
import tempfile
from dataclasses import dataclass
from functools import partial
from pathlib import Path

import structlog

from polisher.lib.errors import FormatterProcessError, require
from polisher.lib.npm.npmrc import NPMRC_FILENAME
from polisher.lib.npm.paths import NpmPathResolver
from polisher.lib.step.base import FormatterFunc, FormatterStep
from polisher.lib.types import StepName

NAME = StepName("prettier")
DEFAULT_VERSION = "3.3.3"
logger = structlog.get_logger(__name__)


def default_version() -> str:
    return DEFAULT_VERSION


@dataclass(frozen=True, slots=True)
class PrettierState:
    version: str
    npm_executable: Path
    npmrc_content: str | None = None
    extra_args: tuple[str, ...] = ()

    def working_dir_name(self) -> str:
        digest = hashlib.sha1(
            f"{self.version}\0{self.npmrc_content or ''}".encode()
        ).hexdigest()[:16]
        return f"prettier-{digest}"


def _build_state(
    resolver: NpmPathResolver,
    version: str,
    extra_args: tuple[str, ...],
) -> PrettierState:
    return PrettierState(
        version=version,
        npm_executable=resolver.resolve_npm_executable(),
        npmrc_content=resolver.resolve_npmrc_content(),
        extra_args=extra_args,
    )


def prepare_working_dir(state: PrettierState, base_dir: Path | None = None) -> Path:
    """Create the directory npm runs in, with the resolved `.npmrc` next to it."""

    root = Path(tempfile.gettempdir()) / "polisher-npm" if base_dir is None else base_dir
    working_dir = root / state.working_dir_name()
    working_dir.mkdir(parents=True, exist_ok=True)
    if state.npmrc_content is not None:
        (working_dir / NPMRC_FILENAME).write_text(state.npmrc_content, encoding="utf-8")
    return working_dir


def build_command(state: PrettierState, path: Path | None) -> list[str]:
    command = [
        str(state.npm_executable),
        "exec",
        "--yes",
        f"--package=prettier@{state.version}",
        "--",
        "prettier",
        *state.extra_args,
    ]
    if path is not None:
        command.extend(["--stdin-filepath", str(path)])
    return command


def create_format(state: PrettierState, base_dir: Path | None = None) -> FormatterFunc:
    working_dir = prepare_working_dir(state, base_dir)

    def _format(text: str, path: Path | None = None) -> str:
        command = build_command(state, path)
        logger.debug("Running prettier.", command=command, cwd=str(working_dir))
        completed = subprocess.run(
            command,
            cwd=working_dir,
            input=text,
            capture_output=True,
            text=True,
            encoding="utf-8",
            check=False,
        )
        if completed.returncode != 0:
            raise FormatterProcessError(tuple(command), completed.returncode, completed.stderr)
        return completed.stdout

    return _format


def create(
    resolver: NpmPathResolver | None,
    version: str | None = DEFAULT_VERSION,
    extra_args: tuple[str, ...] = (),
    base_dir: Path | None = None,
) -> FormatterStep[PrettierState]:
    """Create a step that pipes source through prettier; npm is resolved on first use."""

    resolver = require(resolver, "resolver")
    version = require(version, "version")
    return FormatterStep.create_lazy(
        NAME,
        partial(_build_state, resolver, version, tuple(extra_args)),
        partial(create_format, base_dir=base_dir),
    )
