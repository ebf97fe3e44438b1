"""Core polisher library exports."""

from polisher.lib.errors import (
    ConfigurationError,
    ExecutableNotFoundError,
    FormatterProcessError,
    PolisherError,
    ProvisioningError,
)
from polisher.lib.step.base import FormatterStep

__all__ = [
    "ConfigurationError",
    "ExecutableNotFoundError",
    "FormatterProcessError",
    "FormatterStep",
    "PolisherError",
    "ProvisioningError",
]
