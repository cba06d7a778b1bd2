"""
figma-image-fetcher: render a single Figma node to PNG and save it locally.
"""

__version__ = "0.1.0"
