"""Path resolution helpers for project-scoped config and npm files."""

from __future__ import annotations

import os
from pathlib import Path

from polisher.lib.config.settings import CONFIG_DIRNAME


def resolve_project_root(explicit: Path | None = None) -> Path:
    """Resolve the project root that owns `.polisher/config.toml`.

    Precedence:
    1. Explicit function argument.
    2. `POLISHER_PROJECT_ROOT` environment variable.
    3. Current directory / ancestors containing `.polisher/` or `.git`.
    4. Current working directory.
    """

    if explicit is not None:
        return explicit.expanduser().resolve()

    env_root = os.getenv("POLISHER_PROJECT_ROOT")
    if env_root:
        return Path(env_root).expanduser().resolve()

    cwd = Path.cwd().resolve()
    candidate = cwd
    while True:
        if (candidate / CONFIG_DIRNAME).is_dir():
            return candidate
        # A .git entry (file for worktree/submodule, directory for standalone
        # repo) marks a repo boundary.
        if (candidate / ".git").exists():
            return candidate

        parent = candidate.parent
        if parent == candidate:
            break
        candidate = parent

    return cwd


def resolve_config_path(raw_path: str, project_root: Path) -> Path:
    """Expand `~` and anchor relative paths at the project root."""

    candidate = Path(raw_path).expanduser()
    if not candidate.is_absolute():
        candidate = project_root / candidate
    return candidate


def default_npmrc_locations(project_root: Path) -> list[Path]:
    """Project directory, then `NPM_CONFIG_USERCONFIG`, then the user's home."""

    locations = [project_root]
    user_config = os.getenv("NPM_CONFIG_USERCONFIG")
    if user_config:
        locations.append(Path(user_config).expanduser())
    locations.append(Path.home())
    return locations


def resolve_npmrc_locations(configured: tuple[str, ...], project_root: Path) -> list[Path]:
    """Configured locations first, then the npm defaults, without duplicates."""

    resolved: list[Path] = []
    seen: set[Path] = set()
    for candidate in (
        *(resolve_config_path(raw, project_root) for raw in configured),
        *default_npmrc_locations(project_root),
    ):
        if candidate in seen:
            continue
        seen.add(candidate)
        resolved.append(candidate)
    return resolved
