"""Environment driven settings for the execution and scoring pipeline."""

from .config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
