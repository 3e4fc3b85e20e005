"""
Config subpackage: the provider Configuration record and host settings.
"""

from .config_manager import ConfigManager
from .settings import FrenSettings

__all__ = [
    "ConfigManager",
    "FrenSettings",
]
