"""npm executable and `.npmrc` resolution tests."""

from __future__ import annotations

import os
import stat
from pathlib import Path

import pytest

from polisher.lib.errors import ExecutableNotFoundError, ProvisioningError
from polisher.lib.npm.executable import NpmExecutableResolver
from polisher.lib.npm.paths import NpmPathResolver

posix_only = pytest.mark.skipif(os.name == "nt", reason="npm executable names differ on Windows")


class StubDiscovery(NpmExecutableResolver):
    def __init__(self, found: Path | None) -> None:
        super().__init__(environ={})
        self.found = found
        self.calls = 0

    def try_find(self) -> Path | None:
        self.calls += 1
        return self.found


def _write_executable(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("#!/bin/sh\n", encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


def _write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.mark.parametrize("discovered", [None, Path("/usr/local/bin/npm")])
def test_explicit_executable_wins_regardless_of_discovery(discovered: Path | None) -> None:
    explicit = Path("tools/node/npm")
    discovery = StubDiscovery(discovered)

    resolved = NpmPathResolver(explicit, None, discovery=discovery).resolve_npm_executable()

    assert resolved is explicit
    assert discovery.calls == 0


def test_discovered_executable_is_used_without_override() -> None:
    discovery = StubDiscovery(Path("/opt/node/bin/npm"))

    resolved = NpmPathResolver(None, None, discovery=discovery).resolve_npm_executable()

    assert resolved == Path("/opt/node/bin/npm")


def test_unresolvable_executable_explains_how_to_configure() -> None:
    resolver = NpmPathResolver(None, None, discovery=StubDiscovery(None))

    with pytest.raises(ExecutableNotFoundError) as excinfo:
        resolver.resolve_npm_executable()

    message = str(excinfo.value)
    assert "Can't automatically determine npm executable" in message
    assert "NVM_BIN" in message
    assert "npm.executable" in message
    assert "POLISHER_NPM_EXECUTABLE" in message
    assert isinstance(excinfo.value, ProvisioningError)


@posix_only
def test_discovery_prefers_nvm_bin_over_path(tmp_path: Path) -> None:
    nvm_npm = _write_executable(tmp_path / "nvm" / "npm")
    _write_executable(tmp_path / "path" / "npm")

    found = NpmExecutableResolver(
        environ={"NVM_BIN": str(nvm_npm.parent), "PATH": str(tmp_path / "path")}
    ).try_find()

    assert found == nvm_npm


@posix_only
def test_discovery_checks_node_home_bin(tmp_path: Path) -> None:
    npm = _write_executable(tmp_path / "node" / "bin" / "npm")

    found = NpmExecutableResolver(
        environ={"NODE_HOME": str(tmp_path / "node"), "PATH": ""}
    ).try_find()

    assert found == npm


@posix_only
def test_discovery_falls_back_to_path(tmp_path: Path) -> None:
    npm = _write_executable(tmp_path / "path" / "npm")
    _write(tmp_path / "nvm" / "npm", "not executable")
    (tmp_path / "nvm" / "npm").chmod(0o644)

    found = NpmExecutableResolver(
        environ={"NVM_BIN": str(tmp_path / "nvm"), "PATH": str(npm.parent)}
    ).try_find()

    assert found == npm


def test_discovery_returns_none_when_nothing_is_installed(tmp_path: Path) -> None:
    assert NpmExecutableResolver(environ={"PATH": str(tmp_path)}).try_find() is None


def test_explicit_npmrc_content_is_returned(tmp_path: Path) -> None:
    explicit = _write(tmp_path / "custom.npmrc", "registry=https://explicit.example\n")
    fallback = _write(tmp_path / "project" / ".npmrc", "registry=https://fallback.example\n")

    content = NpmPathResolver(None, explicit, fallback.parent).resolve_npmrc_content()

    assert content == "registry=https://explicit.example\n"


def test_first_fallback_location_in_order_wins(tmp_path: Path) -> None:
    missing_dir = tmp_path / "missing"
    missing_dir.mkdir()
    project = _write(tmp_path / "project" / ".npmrc", "registry=https://project.example\n")
    home = _write(tmp_path / "home" / ".npmrc", "registry=https://home.example\n")

    content = NpmPathResolver(
        None,
        None,
        missing_dir,
        project.parent,
        home.parent,
    ).resolve_npmrc_content()

    assert content == "registry=https://project.example\n"


def test_fallback_location_may_name_a_file(tmp_path: Path) -> None:
    user_config = _write(tmp_path / "user-config", "always-auth=true\n")

    content = NpmPathResolver(None, None, tmp_path / "nope", user_config).resolve_npmrc_content()

    assert content == "always-auth=true\n"


def test_absent_npmrc_is_none(tmp_path: Path) -> None:
    assert NpmPathResolver(None, None, tmp_path, tmp_path / "x").resolve_npmrc_content() is None
