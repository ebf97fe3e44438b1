"""Apply a sequence of formatter steps to text and files."""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

import structlog

from polisher.lib.errors import ConfigurationError, ProvisioningError
from polisher.lib.step.base import FormatterStep

logger = structlog.get_logger(__name__)


class FileStatus(StrEnum):
    CLEAN = "clean"
    FORMATTED = "formatted"
    DIRTY = "dirty"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class FileResult:
    path: Path
    status: FileStatus
    error: str | None = None

    def format_text(self) -> str:
        if self.error is not None:
            return f"{self.status}\t{self.path}\t{self.error}"
        return f"{self.status}\t{self.path}"


def _line_ending(text: str) -> str:
    """CRLF only when every line break in `text` is one."""

    crlf = text.count("\r\n")
    return "\r\n" if crlf and crlf == text.count("\n") else "\n"


class Formatter:
    """Runs steps in order; files are processed in parallel, steps never are."""

    def __init__(
        self,
        steps: Sequence[FormatterStep[Hashable]],
        *,
        max_workers: int | None = None,
    ) -> None:
        self._steps = tuple(steps)
        self._max_workers = max_workers

    @property
    def steps(self) -> tuple[FormatterStep[Hashable], ...]:
        return self._steps

    def compute(self, text: str, path: Path | None = None) -> str:
        """Return `text` after every step.

        Steps see `\\n` line breaks only. Text the steps leave alone comes back
        byte for byte; changed text keeps CRLF when the input used it
        throughout, and gets `\\n` otherwise.
        """

        unix = text.replace("\r\n", "\n")
        formatted = unix
        for step in self._steps:
            formatted = step.format(formatted, path)
        if formatted == unix:
            return text
        ending = _line_ending(text)
        if ending == "\n":
            return formatted
        return formatted.replace("\n", ending)

    def format_file(self, path: Path, *, check: bool = False) -> FileResult:
        with structlog.contextvars.bound_contextvars(path=str(path)):
            try:
                original = path.read_bytes().decode("utf-8")
                formatted = self.compute(original, path)
            except (ConfigurationError, ProvisioningError):
                # Step setup failed; no file can be formatted.
                raise
            except Exception as error:
                logger.warning("Formatting failed.", error=str(error))
                return FileResult(path=path, status=FileStatus.ERROR, error=str(error))

            if formatted == original:
                return FileResult(path=path, status=FileStatus.CLEAN)
            if check:
                return FileResult(path=path, status=FileStatus.DIRTY)
            path.write_text(formatted, encoding="utf-8", newline="")
            logger.info("Formatted file.")
            return FileResult(path=path, status=FileStatus.FORMATTED)

    def format_files(self, paths: Iterable[Path], *, check: bool = False) -> list[FileResult]:
        ordered = list(paths)
        with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
            return list(pool.map(lambda path: self.format_file(path, check=check), ordered))
