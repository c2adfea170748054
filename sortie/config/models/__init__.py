"""Configuration model exports.

    from sortie.config.models import ContentConfig, HostConfig, LoggingConfig
"""

from sortie.config.models.harness import ContentConfig, HostConfig
from sortie.config.models.observability import LogFormat, LoggingConfig

__all__ = [
    "ContentConfig",
    "HostConfig",
    "LogFormat",
    "LoggingConfig",
]
