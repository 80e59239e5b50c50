"""Core: config, constants, and dashboard bootstrap.

Single place for settings and shared constants.
"""

from schoolsync.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
