"""Configuration management for dok."""

from .loader import SettingsLoader, load_settings
from .schema import DokSettings

__all__ = ["DokSettings", "SettingsLoader", "load_settings"]
