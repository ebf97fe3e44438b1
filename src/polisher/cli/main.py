"""Cyclopts CLI entry point for polisher."""

from __future__ import annotations

import sys
from contextvars import ContextVar
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

from cyclopts import App, Parameter

from polisher import __version__
from polisher.cli.output import OutputConfig
from polisher.cli.output import emit as emit_output
from polisher.lib.config._paths import resolve_project_root
from polisher.lib.config.settings import load_config
from polisher.lib.errors import PolisherError, exit_code_for
from polisher.lib.formatter import FileStatus
from polisher.lib.pipeline import Pipeline, npm_path_resolver

if TYPE_CHECKING:
    from collections.abc import Sequence

_OUTPUT: ContextVar[OutputConfig] = ContextVar("_OUTPUT", default=OutputConfig(format="text"))

app = App(
    name="polisher",
    help="Run provisioned and Node-based formatters over source files.",
    version=__version__,
    help_formatter="plain",
)
npm_app = App(name="npm", help="npm toolchain resolution", help_formatter="plain")
config_app = App(name="config", help="Project config commands", help_formatter="plain")
app.command(npm_app, name="npm")
app.command(config_app, name="config")


def emit(payload: object) -> None:
    emit_output(payload, _OUTPUT.get())


@app.command(name="format")
def format_paths(
    paths: list[Path],
    *,
    check: Annotated[
        bool,
        Parameter(name="--check", help="Report files that would change without writing them."),
    ] = False,
    project: Annotated[
        Path | None,
        Parameter(name="--project", help="Project root; discovered from the cwd by default."),
    ] = None,
) -> None:
    """Format files with the steps configured for their extensions."""

    root = resolve_project_root(project)
    pipeline = Pipeline(load_config(root), root)
    results = pipeline.format_files(paths, check=check)
    emit(results)
    if any(result.status in {FileStatus.DIRTY, FileStatus.ERROR} for result in results):
        raise SystemExit(1)


@npm_app.command(name="executable")
def npm_executable(
    *,
    project: Annotated[
        Path | None,
        Parameter(name="--project", help="Project root; discovered from the cwd by default."),
    ] = None,
) -> None:
    """Print the npm executable formatters will run."""

    root = resolve_project_root(project)
    emit(str(npm_path_resolver(load_config(root), root).resolve_npm_executable()))


@npm_app.command(name="npmrc")
def npm_npmrc(
    *,
    project: Annotated[
        Path | None,
        Parameter(name="--project", help="Project root; discovered from the cwd by default."),
    ] = None,
) -> None:
    """Print the `.npmrc` content formatters will use, if any."""

    root = resolve_project_root(project)
    content = npm_path_resolver(load_config(root), root).resolve_npmrc_content()
    if _OUTPUT.get().format == "json":
        emit({"npmrc": content})
        return
    if content is not None:
        print(content, end="" if content.endswith("\n") else "\n")


@config_app.command(name="show")
def config_show(
    *,
    project: Annotated[
        Path | None,
        Parameter(name="--project", help="Project root; discovered from the cwd by default."),
    ] = None,
) -> None:
    """Show the resolved configuration."""

    emit(load_config(resolve_project_root(project)))


def _extract_global_flags(argv: Sequence[str]) -> tuple[list[str], bool, int]:
    json_mode = False
    verbosity = 0
    cleaned: list[str] = []
    for arg in argv:
        if arg == "--json":
            json_mode = True
            continue
        if arg in {"-v", "--verbose"}:
            verbosity += 1
            continue
        cleaned.append(arg)
    return cleaned, json_mode, verbosity


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point used by `polisher` and `python -m polisher`."""

    from polisher.lib.logging import configure_logging

    args = list(sys.argv[1:] if argv is None else argv)
    cleaned_args, json_mode, verbosity = _extract_global_flags(args)
    # Configure logging early so structlog output goes to stderr, not stdout.
    configure_logging(json_mode=json_mode, verbosity=verbosity)

    token = _OUTPUT.set(OutputConfig(format="json" if json_mode else "text"))
    try:
        app(cleaned_args)
    except PolisherError as exc:
        print(f"error: {exc}", file=sys.stderr)
        raise SystemExit(exit_code_for(exc)) from None
    finally:
        _OUTPUT.reset(token)
