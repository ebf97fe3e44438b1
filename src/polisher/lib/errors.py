"""Error taxonomy for formatter steps and toolchain resolution."""

from __future__ import annotations

from enum import StrEnum


class PolisherError(Exception):
    """Base class for errors raised by polisher itself."""


class ConfigurationError(PolisherError, ValueError):
    """A required input is missing or outside its closed set of values."""


class ProvisioningError(PolisherError):
    """An external artifact could not be located or loaded."""


class ExecutableNotFoundError(ProvisioningError):
    """An external executable could not be resolved."""


class FormatterProcessError(PolisherError):
    """An external formatter process exited unsuccessfully."""

    def __init__(self, command: tuple[str, ...], exit_code: int, stderr: str) -> None:
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr
        detail = stderr.strip() or "no output on stderr"
        super().__init__(f"'{command[0]}' exited with code {exit_code}: {detail}")


class ErrorCategory(StrEnum):
    CONFIGURATION = "configuration"
    PROVISIONING = "provisioning"
    DELEGATE = "delegate"


_EXIT_CODES: dict[ErrorCategory, int] = {
    ErrorCategory.DELEGATE: 1,
    ErrorCategory.CONFIGURATION: 2,
    ErrorCategory.PROVISIONING: 3,
}


def classify_error(error: BaseException) -> ErrorCategory:
    """Classify one failure by who is responsible for it."""

    if isinstance(error, ConfigurationError):
        return ErrorCategory.CONFIGURATION
    if isinstance(error, ProvisioningError):
        return ErrorCategory.PROVISIONING
    # Anything else was raised by the wrapped formatter itself.
    return ErrorCategory.DELEGATE


def exit_code_for(error: BaseException) -> int:
    return _EXIT_CODES[classify_error(error)]


def require[T](value: T | None, name: str) -> T:
    """Return `value`, failing fast when a required argument is `None`."""

    if value is None:
        raise ConfigurationError(f"'{name}' is required.")
    return value
