"""Resolution of the npm executable and its `.npmrc` content."""

from __future__ import annotations

from pathlib import Path

from polisher.lib.errors import ExecutableNotFoundError
from polisher.lib.npm.executable import NpmExecutableResolver
from polisher.lib.npm.npmrc import NpmrcResolver
from polisher.lib.npm.resources import read_utf8


class NpmPathResolver:
    """Explicit overrides first, discovery second; holds no mutable state."""

    def __init__(
        self,
        explicit_npm_executable: Path | None,
        explicit_npmrc_file: Path | None,
        *additional_npmrc_locations: Path,
        discovery: NpmExecutableResolver | None = None,
    ) -> None:
        self._explicit_npm_executable = explicit_npm_executable
        self._explicit_npmrc_file = explicit_npmrc_file
        self._additional_npmrc_locations = tuple(additional_npmrc_locations)
        self._discovery = NpmExecutableResolver() if discovery is None else discovery

    def resolve_npm_executable(self) -> Path:
        if self._explicit_npm_executable is not None:
            return self._explicit_npm_executable
        found = self._discovery.try_find()
        if found is None:
            raise ExecutableNotFoundError(
                "Can't automatically determine npm executable and none was specifically "
                f"supplied!\n\n{self._discovery.explain_message()}"
            )
        return found

    def resolve_npmrc_content(self) -> str | None:
        """Return the `.npmrc` text, or `None` when there is no file to read."""

        npmrc_file = self._explicit_npmrc_file
        if npmrc_file is None:
            npmrc_file = NpmrcResolver(self._additional_npmrc_locations).try_find()
        if npmrc_file is None:
            return None
        return read_utf8(npmrc_file)
