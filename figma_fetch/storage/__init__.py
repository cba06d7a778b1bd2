"""
Storage Layer.

This package handles loading and saving the application's configuration.
"""

from .config_manager import ConfigManager

__all__ = ["ConfigManager"]
