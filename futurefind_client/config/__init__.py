"""Configuration package exports."""

from .loader import load_settings, load_settings_file
from .model import ClientSettings

__all__ = ["ClientSettings", "load_settings", "load_settings_file"]
