"""
Figma API Layer.

This package handles all communication with the Figma REST API.
"""

from .client import FigmaAPIClient

__all__ = ["FigmaAPIClient"]
