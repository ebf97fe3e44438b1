"""Capability implementations for each generation of the ktfmt API.

ktfmt 0.19 and later expose ready-made formatting options as constants on
the entry point (`FormatterKt.DROPBOX_FORMAT`). Older releases only offer
factory methods on the `FormattingOptions` companion object
(`FormattingOptions.Companion(None).dropboxStyle()`).
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import ClassVar, Protocol, cast

import structlog

from polisher.lib.errors import ConfigurationError
from polisher.lib.provisioning.bundle import ArtifactBundle

logger = structlog.get_logger(__name__)

PACKAGE = "com.facebook"
ENTRY_POINT = f"{PACKAGE}.ktfmt.FormatterKt"
OPTIONS_COMPANION = f"{PACKAGE}.ktfmt.FormattingOptions.Companion"
FORMATTER_METHOD = "format"


class Style(StrEnum):
    """Formatting presets offered by ktfmt."""

    DEFAULT = "DEFAULT"
    DROPBOX = "DROPBOX"
    GOOGLE = "GOOGLE"
    KOTLINLANG = "KOTLINLANG"

    @classmethod
    def parse(cls, raw: object) -> Style:
        if not isinstance(raw, str):
            raise ConfigurationError(
                f"The style must be a string, got {type(raw).__name__}."
            )
        normalized = raw.strip().upper()
        try:
            return cls(normalized)
        except ValueError:
            raise ConfigurationError(
                f"The style '{raw}' is not valid. Expected one of: "
                f"{', '.join(member.value for member in cls)}."
            ) from None


@dataclass(frozen=True, slots=True)
class StyleAccessors:
    """Names under which one style's options are published by each API generation."""

    format_field: str
    style_method: str


# ktfmt v0.19 added DROPBOX and GOOGLE; v0.21 added KOTLINLANG.
STYLE_ACCESSORS: dict[Style, StyleAccessors] = {
    Style.DROPBOX: StyleAccessors(format_field="DROPBOX_FORMAT", style_method="dropboxStyle"),
    Style.GOOGLE: StyleAccessors(format_field="GOOGLE_FORMAT", style_method="googleStyle"),
    Style.KOTLINLANG: StyleAccessors(
        format_field="KOTLINLANG_FORMAT",
        style_method="kotlinlangStyle",
    ),
}


def accessors_for(style: Style) -> StyleAccessors:
    accessors = STYLE_ACCESSORS.get(style)
    if accessors is None:
        raise ConfigurationError(f"The style '{style}' is not valid.")
    return accessors


class KtfmtApi(Protocol):
    """Formatting capability of one loaded ktfmt artifact."""

    generation: ClassVar[str]

    def format(self, text: str, path: Path | None = None) -> str: ...


def _entry_format(entry_point: object) -> Callable[..., object]:
    return cast("Callable[..., object]", getattr(entry_point, FORMATTER_METHOD))


class DefaultStyleApi:
    """Calls `format(text)` without any options object."""

    generation: ClassVar[str] = "default"

    def __init__(self, entry_point: object) -> None:
        self._format = _entry_format(entry_point)

    def format(self, text: str, path: Path | None = None) -> str:
        _ = path
        return cast("str", self._format(text))


class _OptionsApi:
    generation: ClassVar[str] = ""

    def __init__(self, entry_point: object, options: object) -> None:
        self._format = _entry_format(entry_point)
        self.options = options

    def format(self, text: str, path: Path | None = None) -> str:
        _ = path
        return cast("str", self._format(self.options, text))


class FieldOptionsApi(_OptionsApi):
    """ktfmt 0.19+: options are read from a constant on the entry point."""

    generation: ClassVar[str] = "field"

    @classmethod
    def detect(cls, entry_point: object, accessors: StyleAccessors) -> FieldOptionsApi | None:
        # Only a missing attribute selects the older generation; any other
        # failure while reading the constant is a real error.
        try:
            options = getattr(entry_point, accessors.format_field)
        except AttributeError:
            return None
        return cls(entry_point, options)


class CompanionOptionsApi(_OptionsApi):
    """ktfmt before 0.19: options come from a companion-object factory method."""

    generation: ClassVar[str] = "companion"

    @classmethod
    def build(
        cls,
        bundle: ArtifactBundle,
        entry_point: object,
        accessors: StyleAccessors,
    ) -> CompanionOptionsApi:
        companion_type = cast("Callable[[object], object]", bundle.load(OPTIONS_COMPANION))
        companion = companion_type(None)
        factory = cast("Callable[[], object]", getattr(companion, accessors.style_method))
        return cls(entry_point, factory())


def select_api(bundle: ArtifactBundle, style: Style) -> KtfmtApi:
    """Inspect the loaded artifact and pick the API generation for `style`."""

    entry_point = bundle.load(ENTRY_POINT)
    if style is Style.DEFAULT:
        return DefaultStyleApi(entry_point)

    accessors = accessors_for(style)
    api: KtfmtApi | None = FieldOptionsApi.detect(entry_point, accessors)
    if api is None:
        api = CompanionOptionsApi.build(bundle, entry_point, accessors)
    logger.debug("Selected ktfmt API generation.", style=style.value, generation=api.generation)
    return api
