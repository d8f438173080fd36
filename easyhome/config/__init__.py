"""
EasyHome Configuration Module
Handles YAML/JSON query files, listing files and environment settings
"""

from .models import ConfigFormat, QueryFile, SavedQuery, Settings
from .parser import ConfigParser, ConfigParserError

__all__ = [
    "ConfigFormat",
    "QueryFile",
    "SavedQuery",
    "Settings",
    "ConfigParser",
    "ConfigParserError",
]
