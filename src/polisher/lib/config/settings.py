"""Project-level polisher config loader."""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import cast

from polisher.lib.errors import ConfigurationError
from polisher.lib.kotlin._api import Style
from polisher.lib.kotlin.ktfmt import DEFAULT_VERSION as KTFMT_DEFAULT_VERSION
from polisher.lib.npm.prettier import DEFAULT_VERSION as PRETTIER_DEFAULT_VERSION

logger = logging.getLogger(__name__)

CONFIG_DIRNAME = ".polisher"
CONFIG_FILENAME = "config.toml"


@dataclass(frozen=True, slots=True)
class KtfmtConfig:
    """ktfmt step settings."""

    version: str = KTFMT_DEFAULT_VERSION
    style: Style = Style.DEFAULT
    extensions: tuple[str, ...] = (".kt", ".kts")


@dataclass(frozen=True, slots=True)
class NpmConfig:
    """Explicit npm toolchain overrides and extra `.npmrc` search locations."""

    executable: str | None = None
    npmrc: str | None = None
    npmrc_locations: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class PrettierConfig:
    """prettier step settings; the step is opt-in."""

    enabled: bool = False
    version: str = PRETTIER_DEFAULT_VERSION
    extensions: tuple[str, ...] = (
        ".js",
        ".jsx",
        ".ts",
        ".tsx",
        ".json",
        ".css",
        ".scss",
        ".md",
        ".yaml",
        ".yml",
    )
    extra_args: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ProvisioningConfig:
    """Where formatter artifacts are provisioned from."""

    repository: str = "~/.polisher/artifacts"


@dataclass(frozen=True, slots=True)
class PolisherConfig:
    """Resolved configuration for one project."""

    max_workers: int | None = None
    ktfmt: KtfmtConfig = KtfmtConfig()
    npm: NpmConfig = NpmConfig()
    prettier: PrettierConfig = PrettierConfig()
    provisioning: ProvisioningConfig = ProvisioningConfig()


type SectionConfig = KtfmtConfig | NpmConfig | PrettierConfig | ProvisioningConfig

_SECTION_TYPES: dict[str, type[SectionConfig]] = {
    "ktfmt": KtfmtConfig,
    "npm": NpmConfig,
    "prettier": PrettierConfig,
    "provisioning": ProvisioningConfig,
}

_ENV_OVERRIDE_MAP: dict[str, tuple[str, str]] = {
    "POLISHER_KTFMT_VERSION": ("ktfmt", "version"),
    "POLISHER_KTFMT_STYLE": ("ktfmt", "style"),
    "POLISHER_NPM_EXECUTABLE": ("npm", "executable"),
    "POLISHER_NPMRC": ("npm", "npmrc"),
    "POLISHER_PRETTIER_VERSION": ("prettier", "version"),
    "POLISHER_ARTIFACT_REPOSITORY": ("provisioning", "repository"),
}

_LIST_FIELDS = frozenset({"extensions", "npmrc_locations", "extra_args"})


def config_path(project_root: Path) -> Path:
    return project_root / CONFIG_DIRNAME / CONFIG_FILENAME


def _type_error(source: str, expected: str, raw_value: object) -> ConfigurationError:
    return ConfigurationError(
        f"Invalid value for '{source}': expected {expected}, got "
        f"{type(raw_value).__name__} ({raw_value!r})."
    )


def _coerce_str(*, raw_value: object, source: str) -> str:
    if not isinstance(raw_value, str):
        raise _type_error(source, "str", raw_value)
    normalized = raw_value.strip()
    if not normalized:
        raise ConfigurationError(f"Invalid value for '{source}': expected non-empty string.")
    return normalized


def _coerce_str_list(*, raw_value: object, source: str) -> tuple[str, ...]:
    if not isinstance(raw_value, list):
        raise _type_error(source, "array[str]", raw_value)
    return tuple(
        _coerce_str(raw_value=item, source=source) for item in cast("list[object]", raw_value)
    )


def _normalize_extension(raw: str, source: str) -> str:
    extension = raw.strip().lower()
    if not extension.startswith("."):
        extension = f".{extension}"
    if extension == ".":
        raise ConfigurationError(f"Invalid value for '{source}': empty file extension.")
    return extension


def _coerce_field(*, field_name: str, raw_value: object, source: str) -> object:
    if field_name == "extensions":
        return tuple(
            _normalize_extension(item, source)
            for item in _coerce_str_list(raw_value=raw_value, source=source)
        )
    if field_name in _LIST_FIELDS:
        return _coerce_str_list(raw_value=raw_value, source=source)
    if field_name == "enabled":
        if not isinstance(raw_value, bool):
            raise _type_error(source, "bool", raw_value)
        return raw_value
    if field_name == "style":
        return Style.parse(_coerce_str(raw_value=raw_value, source=source))
    return _coerce_str(raw_value=raw_value, source=source)


def _coerce_section(
    *,
    section: SectionConfig,
    raw_value: object,
    source: str,
) -> SectionConfig:
    if not isinstance(raw_value, dict):
        raise ConfigurationError(f"Invalid value for '{source}': expected table.")

    known = {field.name for field in fields(section)}
    updates: dict[str, object] = {}
    for key, value in cast("dict[str, object]", raw_value).items():
        if key not in known:
            logger.warning("Ignoring unknown polisher config key '%s.%s'.", source, key)
            continue
        updates[key] = _coerce_field(field_name=key, raw_value=value, source=f"{source}.{key}")
    return replace(section, **updates)


def _coerce_max_workers(raw_value: object, source: str) -> int:
    if isinstance(raw_value, bool) or not isinstance(raw_value, int):
        raise _type_error(source, "int", raw_value)
    if raw_value < 1:
        raise ConfigurationError(f"Invalid value for '{source}': expected a positive int.")
    return raw_value


def _apply_toml_payload(*, sections: dict[str, object], payload: dict[str, object]) -> None:
    for key, raw_value in payload.items():
        if key == "max_workers":
            sections["max_workers"] = _coerce_max_workers(raw_value, key)
            continue
        if key not in _SECTION_TYPES:
            logger.warning("Ignoring unknown polisher config key '%s'.", key)
            continue
        sections[key] = _coerce_section(
            section=cast("SectionConfig", sections[key]),
            raw_value=raw_value,
            source=key,
        )


def _apply_env_overrides(sections: dict[str, object]) -> None:
    for env_name, (section_name, field_name) in _ENV_OVERRIDE_MAP.items():
        raw_value = os.getenv(env_name)
        if raw_value is None:
            continue
        try:
            value = _coerce_field(field_name=field_name, raw_value=raw_value, source=env_name)
        except ConfigurationError as error:
            raise ConfigurationError(f"Invalid environment override: {error}") from error
        section = cast("SectionConfig", sections[section_name])
        sections[section_name] = replace(section, **{field_name: value})


def load_config(project_root: Path) -> PolisherConfig:
    """Load `.polisher/config.toml` and apply environment overrides."""

    defaults = PolisherConfig()
    sections: dict[str, object] = {
        field.name: getattr(defaults, field.name) for field in fields(PolisherConfig)
    }
    path = config_path(project_root)
    if path.is_file():
        try:
            payload_obj = tomllib.loads(path.read_text(encoding="utf-8"))
        except tomllib.TOMLDecodeError as error:
            raise ConfigurationError(f"Invalid TOML in '{path}': {error}") from error
        _apply_toml_payload(sections=sections, payload=cast("dict[str, object]", payload_obj))

    _apply_env_overrides(sections)
    return PolisherConfig(
        max_workers=cast("int | None", sections["max_workers"]),
        ktfmt=cast("KtfmtConfig", sections["ktfmt"]),
        npm=cast("NpmConfig", sections["npm"]),
        prettier=cast("PrettierConfig", sections["prettier"]),
        provisioning=cast("ProvisioningConfig", sections["provisioning"]),
    )
