"""Shared pytest fixtures for CLI integration checks."""

from __future__ import annotations

import os
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from collections.abc import Callable

PACKAGE_ROOT = Path(__file__).resolve().parents[1]

_POLISHER_ENV_PREFIXES = ("POLISHER_", "NVM_", "NODE_HOME", "NPM_CONFIG_")


@dataclass(frozen=True, slots=True)
class CliResult:
    args: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str


@pytest.fixture
def package_root() -> Path:
    return PACKAGE_ROOT


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in list(os.environ):
        if name.startswith(_POLISHER_ENV_PREFIXES):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def cli_env(package_root: Path, tmp_path: Path) -> dict[str, str]:
    env = {
        key: value
        for key, value in os.environ.items()
        if not key.startswith(_POLISHER_ENV_PREFIXES)
    }
    existing = env.get("PYTHONPATH", "")
    root = str(package_root / "src")
    env["PYTHONPATH"] = root if not existing else f"{root}{os.pathsep}{existing}"
    home = tmp_path / "home"
    home.mkdir(exist_ok=True)
    env["HOME"] = str(home)
    env["USERPROFILE"] = str(home)
    return env


@pytest.fixture
def run_polisher(tmp_path: Path, cli_env: dict[str, str]) -> Callable[..., CliResult]:
    def _run(
        args: list[str],
        *,
        env: dict[str, str] | None = None,
        timeout: float = 30.0,
    ) -> CliResult:
        completed = subprocess.run(
            [sys.executable, "-m", "polisher", *args],
            cwd=tmp_path,
            env={**cli_env, **(env or {})},
            capture_output=True,
            text=True,
            check=False,
            timeout=timeout,
        )
        return CliResult(
            args=tuple(args),
            returncode=completed.returncode,
            stdout=completed.stdout,
            stderr=completed.stderr,
        )

    return _run
