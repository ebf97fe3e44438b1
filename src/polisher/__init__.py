"""Formatter-step orchestration for dynamically provisioned and Node-based formatters."""

__version__ = "0.1.0"
