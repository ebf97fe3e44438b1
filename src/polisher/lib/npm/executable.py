"""Auto-discovery of an installed npm executable."""

from __future__ import annotations

import os
import shutil
from collections.abc import Mapping
from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)

# Directories named by these variables are searched in order before PATH.
_DIRECTORY_ENV_VARS: tuple[str, ...] = ("NVM_BIN", "NVM_SYMLINK", "NODE_HOME")


def _executable_names() -> tuple[str, ...]:
    if os.name == "nt":
        return ("npm.cmd", "npm.exe", "npm")
    return ("npm",)


def _is_executable(candidate: Path) -> bool:
    return candidate.is_file() and os.access(candidate, os.X_OK)


class NpmExecutableResolver:
    """Looks for npm in node version manager locations, `NODE_HOME`, then `PATH`."""

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = os.environ if environ is None else environ

    def _candidate_dirs(self) -> list[Path]:
        dirs: list[Path] = []
        for env_name in _DIRECTORY_ENV_VARS:
            raw = self._environ.get(env_name, "").strip()
            if not raw:
                continue
            directory = Path(raw).expanduser()
            dirs.append(directory)
            if env_name == "NODE_HOME":
                dirs.append(directory / "bin")
        return dirs

    def try_find(self) -> Path | None:
        """Return the first npm executable found, or `None`."""

        for directory in self._candidate_dirs():
            for name in _executable_names():
                candidate = directory / name
                if _is_executable(candidate):
                    logger.debug("Found npm executable.", path=str(candidate))
                    return candidate

        search_path = self._environ.get("PATH", os.defpath)
        for name in _executable_names():
            found = shutil.which(name, path=search_path)
            if found is not None:
                logger.debug("Found npm executable on PATH.", path=found)
                return Path(found)
        return None

    @staticmethod
    def explain_message() -> str:
        locations = "\n".join(
            f"  - the directory named by the environment variable '{env_name}'"
            for env_name in _DIRECTORY_ENV_VARS
        )
        return (
            "polisher looks for an npm executable in the following places:\n"
            f"{locations} (and its 'bin' subdirectory for 'NODE_HOME')\n"
            "  - every directory on 'PATH'\n\n"
            "If npm is installed elsewhere, set 'npm.executable' in "
            ".polisher/config.toml or the POLISHER_NPM_EXECUTABLE environment variable."
        )
