"""Configuration loading, schema, and defaults."""

from gitlink.config.loader import ConfigError, load_config
from gitlink.config.schema import DEFAULT_MAX_FILE_SIZE, GitLinkConfig

__all__ = [
    "ConfigError",
    "DEFAULT_MAX_FILE_SIZE",
    "GitLinkConfig",
    "load_config",
]
