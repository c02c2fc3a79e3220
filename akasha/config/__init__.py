"""
Configuration System

Manages configuration for Akasha with a layered approach.

Configuration Priority (highest to lowest):
    1. Programmatic (passed to AkashaConfig())
    2. Environment variables (AKASHA_* prefix, provider API key names)
    3. Config file (AkashaConfig.from_file)
    4. Built-in defaults
"""

from akasha.config.settings import AkashaConfig

__all__ = ["AkashaConfig"]
