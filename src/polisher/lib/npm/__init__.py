"""npm toolchain resolution and Node-based formatter steps."""

from polisher.lib.npm.paths import NpmPathResolver

__all__ = ["NpmPathResolver"]
