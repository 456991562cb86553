"""
CrownSync - Managers Package

Contains manager classes for configuration and the local catalog.

Author: CrownSync Project
"""

from .config_manager import ConfigManager, DEFAULT_CONFIG
from .catalog_manager import CatalogManager

__all__ = [
    'ConfigManager',
    'DEFAULT_CONFIG',
    'CatalogManager'
]
