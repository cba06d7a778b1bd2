"""
Data Models Layer.

This package contains Pydantic models that define the core data structures
used throughout the application, such as configuration and stage results.
"""

from .config import FetchConfig
from .node import DownloadResult, NodeReference, RemoteImageResult, RenderRequest

__all__ = [
    "DownloadResult",
    "FetchConfig",
    "NodeReference",
    "RemoteImageResult",
    "RenderRequest",
]
