"""
Media Layer.

This package is responsible for downloading rendered images and writing
them to disk.
"""

from .downloader import Downloader

__all__ = ["Downloader"]
