"""Infrastructure layer - POP3, file stores and configuration."""

from mailpull.infrastructure.config_file import ConfigFile
from mailpull.infrastructure.settings import Settings, get_settings

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    # Configuration file
    "ConfigFile",
]
