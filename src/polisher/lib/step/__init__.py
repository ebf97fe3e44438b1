"""Formatter step abstraction."""

from polisher.lib.step.base import FormatterFunc, FormatterStep, StepCache
from polisher.lib.step.lazy import Failure, Lazy, Success

__all__ = ["Failure", "FormatterFunc", "FormatterStep", "Lazy", "StepCache", "Success"]
