"""Configuration — settings loader and the platform table."""

from ospkg.core.config.loader import Settings, load_settings
from ospkg.core.config.platforms import PlatformTable, build_table, default_table

__all__ = [
    "PlatformTable",
    "Settings",
    "build_table",
    "default_table",
    "load_settings",
]
