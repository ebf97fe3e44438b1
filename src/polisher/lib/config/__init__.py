"""Project configuration."""

from polisher.lib.config.settings import PolisherConfig, load_config

__all__ = ["PolisherConfig", "load_config"]
